import logging

from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)


@shared_task
def expire_cafeteria_trials():
    """Periodic sweep flagging cafeterias whose trial period has run out."""
    if not getattr(settings, "TRIAL_EXPIRY_SWEEP_ENABLED", True):
        return {"status": "disabled"}

    from core_backend.container import get_container

    try:
        expired = get_container().config.expire_elapsed_trials()
    except Exception as e:
        logger.error(f"Trial expiry sweep failed: {e}", exc_info=True)
        raise

    if expired:
        logger.info(f"Trial expiry sweep flagged {expired} cafeterias")
    return {"status": "success", "expired": expired}
