from rest_framework import serializers

from .entities import LedgerEntryType, RechargeStatus


class LedgerEntrySerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    amount = serializers.IntegerField()
    order_id = serializers.CharField(allow_null=True)
    cafeteria_id = serializers.CharField(allow_null=True)
    marketer_id = serializers.CharField(allow_null=True)
    timestamp = serializers.DateTimeField()
    description = serializers.CharField()


class LedgerEntryFilterSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=LedgerEntryType.choices, required=False)
    cafeteria_id = serializers.CharField(required=False)
    marketer_id = serializers.CharField(required=False)
    order_id = serializers.CharField(required=False)


class RechargeRequestSerializer(serializers.Serializer):
    id = serializers.CharField()
    cafeteria_id = serializers.CharField()
    amount = serializers.IntegerField()
    proof_image_url = serializers.CharField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()
    processed_at = serializers.DateTimeField(allow_null=True)
    notes = serializers.CharField()


class RechargeRequestCreateSerializer(serializers.Serializer):
    cafeteria_id = serializers.CharField(max_length=64)
    amount = serializers.IntegerField()
    proof_image_url = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class ProcessRechargeRequestSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_status(self, value):
        if value not in (RechargeStatus.APPROVED, RechargeStatus.REJECTED):
            raise serializers.ValidationError("Use 'approved' or 'rejected'.")
        return value


class PayoutRecordSerializer(serializers.Serializer):
    id = serializers.CharField()
    marketer_id = serializers.CharField()
    amount = serializers.IntegerField()
    note = serializers.CharField()
    created_at = serializers.DateTimeField()
    created_by = serializers.CharField()


class PayoutCreateSerializer(serializers.Serializer):
    marketer_id = serializers.CharField(max_length=64)
    amount = serializers.IntegerField()
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    created_by = serializers.CharField(max_length=64, required=False, default="admin")
