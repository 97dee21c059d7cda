from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core_backend.container import get_container


class SecurityEventSerializer(serializers.Serializer):
    id = serializers.CharField()
    actor_id = serializers.CharField()
    role = serializers.CharField()
    attempted_action = serializers.CharField()
    target_id = serializers.CharField()
    timestamp = serializers.DateTimeField()
    blocked = serializers.BooleanField()
    reason = serializers.CharField()


class SecurityEventFilterSerializer(serializers.Serializer):
    actor_id = serializers.CharField(required=False)
    blocked = serializers.BooleanField(required=False, allow_null=True, default=None)


@api_view(["GET"])
@permission_classes([AllowAny])
def security_event_list(request):
    """Security log, newest last. Filters: ``?actor_id=``, ``?blocked=true|false``."""
    filters = SecurityEventFilterSerializer(data=request.query_params)
    filters.is_valid(raise_exception=True)

    events = get_container().security.get_events(
        actor_id=filters.validated_data.get("actor_id"),
        blocked=filters.validated_data.get("blocked"),
    )
    return Response(SecurityEventSerializer(events, many=True).data)
