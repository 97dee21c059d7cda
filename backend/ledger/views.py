from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core_backend.container import get_container

from .serializers import (
    LedgerEntryFilterSerializer,
    LedgerEntrySerializer,
    PayoutCreateSerializer,
    PayoutRecordSerializer,
    ProcessRechargeRequestSerializer,
    RechargeRequestCreateSerializer,
    RechargeRequestSerializer,
)


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def recharge_request_list(request):
    ledger = get_container().ledger

    if request.method == "GET":
        requests = ledger.get_recharge_requests(
            cafeteria_id=request.query_params.get("cafeteria_id"),
            status=request.query_params.get("status"),
        )
        return Response(RechargeRequestSerializer(requests, many=True).data)

    serializer = RechargeRequestCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    recharge = ledger.create_recharge_request(**serializer.validated_data)
    return Response(RechargeRequestSerializer(recharge).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([AllowAny])
def recharge_request_process(request, request_id):
    """Approve or reject a pending recharge request."""
    serializer = ProcessRechargeRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    recharge = get_container().ledger.process_recharge_request(
        request_id,
        serializer.validated_data["status"],
        notes=serializer.validated_data.get("notes"),
    )
    return Response(RechargeRequestSerializer(recharge).data)


@api_view(["GET", "POST"])
@permission_classes([AllowAny])
def payout_list(request):
    ledger = get_container().ledger

    if request.method == "GET":
        payouts = ledger.get_payout_records(request.query_params.get("marketer_id"))
        return Response(PayoutRecordSerializer(payouts, many=True).data)

    serializer = PayoutCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    payout = ledger.create_payout(**serializer.validated_data)
    return Response(PayoutRecordSerializer(payout).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([AllowAny])
def ledger_entry_list(request):
    filters = LedgerEntryFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)
    entries = get_container().ledger.get_ledger_entries(**filters.validated_data)
    return Response(LedgerEntrySerializer(entries, many=True).data)


@api_view(["GET"])
@permission_classes([AllowAny])
def marketer_balance(request, marketer_id):
    ledger = get_container().ledger
    history = ledger.get_marketer_commission_history(marketer_id)
    return Response(
        {
            "marketer_id": marketer_id,
            "balance": ledger.get_marketer_balance(marketer_id),
            "commission_count": len(history),
        }
    )
