from rest_framework import serializers

from orders.entities import OrderStatus
from orders.rules import LEGACY_STATUS_ALIASES
from security.entities import ActorRole


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Serializer specifically for validating an order status change request.

    Transition legality is decided by the order service, not here, so that
    rejected attempts reach the security log.
    """

    status = serializers.ChoiceField(
        choices=OrderStatus.values + list(LEGACY_STATUS_ALIASES)
    )
    actor_id = serializers.CharField(max_length=64, required=False, allow_null=True)
    actor_role = serializers.ChoiceField(
        choices=ActorRole.choices, required=False, allow_null=True
    )

    def validate(self, attrs):
        if attrs.get("actor_id") and not attrs.get("actor_role"):
            raise serializers.ValidationError({"actor_role": "Required when actor_id is given."})
        return attrs
