import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core_backend.container import get_container
from orders.serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)

logger = logging.getLogger(__name__)


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def order_list(request):
    """
    GET: list orders, optionally ``?cafeteria_id=`` or ``?session_id=`` (active order only).
    POST: create an order for a table.
    """
    orders = get_container().orders

    if request.method == "GET":
        cafeteria_id = request.query_params.get("cafeteria_id")
        session_id = request.query_params.get("session_id")
        if session_id:
            order = orders.get_active_order_for_session(session_id)
            results = [order] if order else []
        elif cafeteria_id:
            results = orders.get_orders_by_cafeteria(cafeteria_id)
        else:
            results = orders.get_orders()
        return Response(OrderSerializer(results, many=True).data)

    serializer = OrderCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    order = orders.create_order(
        data["session_id"],
        data["cafeteria_id"],
        data["items"],
        cafeteria_code=data["cafeteria_code"],
        table_code=data["table_code"],
        table_display=data["table_display"],
    )
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([AllowAny])
def order_detail(request, order_id):
    order = get_container().orders.get_order(order_id)
    if order is None:
        return Response(
            {"error": f"Order {order_id} not found.", "code": "not_found"},
            status=status.HTTP_404_NOT_FOUND,
        )
    return Response(OrderSerializer(order).data)


@api_view(["POST"])
@permission_classes([AllowAny])
def order_update_status(request, order_id):
    """
    Move an order to a new status.

    Body: ``{"status": "...", "actor_id": "...", "actor_role": "waiter"}``.
    Moving to ``paid`` settles the order against the cafeteria's points.
    """
    serializer = UpdateOrderStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    order = get_container().orders.update_order_status(
        order_id,
        data["status"],
        actor_id=data.get("actor_id"),
        actor_role=data.get("actor_role"),
    )
    if order is None:
        return Response(
            {"error": f"Order {order_id} not found.", "code": "not_found"},
            status=status.HTTP_404_NOT_FOUND,
        )
    return Response(OrderSerializer(order).data)
