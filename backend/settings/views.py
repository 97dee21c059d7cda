from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core_backend.container import get_container

from .serializers import CafeteriaTrialSerializer, CommissionConfigSerializer, TrialConfigSerializer


@api_view(["GET", "PATCH"])
@permission_classes([AllowAny])
def commission_config(request):
    """
    GET: current commission rates.
    PATCH: merge the given rates into the stored config.
    """
    config = get_container().config

    if request.method == "GET":
        return Response(CommissionConfigSerializer(config.get_commission_config()).data)

    serializer = CommissionConfigSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    updated = config.update_commission_config(**serializer.validated_data)
    return Response(CommissionConfigSerializer(updated).data)


@api_view(["GET", "PATCH"])
@permission_classes([AllowAny])
def trial_config(request):
    config = get_container().config

    if request.method == "GET":
        return Response(TrialConfigSerializer(config.get_trial_config()).data)

    serializer = TrialConfigSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    updated = config.update_trial_config(serializer.validated_data["global_trial_days"])
    return Response(TrialConfigSerializer(updated).data)


@api_view(["PATCH"])
@permission_classes([AllowAny])
def cafeteria_trial(request, cafeteria_id):
    """Set or clear (``null``) a cafeteria's trial length override."""
    serializer = CafeteriaTrialSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    config = get_container().config
    cafeteria = config.update_cafeteria_trial_override(
        cafeteria_id, serializer.validated_data["trial_days"]
    )
    return Response(
        {
            "cafeteria_id": cafeteria.id,
            "trial_days_override": cafeteria.trial_days_override,
            "effective_trial_days": config.effective_trial_days(cafeteria),
            "is_trial_expired": config.is_trial_expired(cafeteria),
        }
    )
