import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import (
    ForbiddenError,
    InsufficientBalanceError,
    NotFoundError,
    OrderingError,
    TrialExpiredError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientBalanceError, status.HTTP_409_CONFLICT),
    (TrialExpiredError, status.HTTP_403_FORBIDDEN),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: OrderingError) -> int:
    for error_class, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def ordering_exception_handler(exc, context):
    """
    Turn domain errors into ``{"error": message, "code": kind}`` responses.

    Anything else falls through to DRF's default handling.
    """
    if isinstance(exc, OrderingError):
        http_status = status_for(exc)
        if http_status == status.HTTP_403_FORBIDDEN:
            logger.warning(f"Rejected {context['request'].path}: {exc.message}")
        return Response({"error": exc.message, "code": exc.code}, status=http_status)
    return exception_handler(exc, context)
