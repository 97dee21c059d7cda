from rest_framework import serializers

from orders.rules import allowed_next_statuses, is_order_immutable


class OrderItemInputSerializer(serializers.Serializer):
    """
    A line item as sent by the table client.

    ``name`` and ``price`` may be omitted; the catalogue values are used then.
    Quantity and price bounds are checked by the order service.
    """

    menu_item_id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255, required=False)
    price = serializers.DecimalField(max_digits=12, decimal_places=4, required=False)
    quantity = serializers.IntegerField(default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OrderCreateSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=128)
    cafeteria_id = serializers.CharField(max_length=64)
    cafeteria_code = serializers.CharField(max_length=16, allow_blank=True, default="")
    table_code = serializers.CharField(max_length=32, allow_blank=True, default="")
    table_display = serializers.CharField(max_length=50, allow_blank=True, default="")
    items = OrderItemInputSerializer(many=True, allow_empty=True)


class OrderItemSerializer(serializers.Serializer):
    menu_item_id = serializers.CharField()
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=4)
    quantity = serializers.IntegerField()
    notes = serializers.CharField()
    line_total = serializers.DecimalField(max_digits=14, decimal_places=4)


class OrderSerializer(serializers.Serializer):
    """Read-only representation of an ``orders.entities.Order`` record."""

    id = serializers.CharField()
    session_id = serializers.CharField()
    cafeteria_id = serializers.CharField()
    status = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=4)
    items = OrderItemSerializer(many=True)
    cafeteria_code = serializers.CharField()
    table_code = serializers.CharField()
    table_display = serializers.CharField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    is_immutable = serializers.SerializerMethodField()
    allowed_next_statuses = serializers.SerializerMethodField()

    def get_is_immutable(self, order):
        return is_order_immutable(order.status)

    def get_allowed_next_statuses(self, order):
        return list(allowed_next_statuses(order.status))
