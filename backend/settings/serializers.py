from rest_framework import serializers


class CommissionConfigSerializer(serializers.Serializer):
    rate_direct_parent_percent = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    rate_grandparent_percent = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    rate_owner_percent = serializers.DecimalField(max_digits=5, decimal_places=2, required=False)
    total_percent = serializers.DecimalField(max_digits=6, decimal_places=2, read_only=True)


class TrialConfigSerializer(serializers.Serializer):
    global_trial_days = serializers.IntegerField(min_value=0)


class CafeteriaTrialSerializer(serializers.Serializer):
    trial_days = serializers.IntegerField(min_value=0, allow_null=True)
