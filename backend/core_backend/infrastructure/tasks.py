import logging

from celery import shared_task

from .outbox import write_snapshot_state

logger = logging.getLogger(__name__)


@shared_task
def persist_state_snapshot(path, state):
    """
    Write exported store state to ``path``.

    ``state`` is captured by the process that owns the stores, so the worker
    never reads its own (empty) in-memory container.
    """
    if not path:
        return {"status": "skipped"}

    try:
        write_snapshot_state(state, path)
    except Exception as e:
        logger.error(f"State snapshot to {path} failed: {e}", exc_info=True)
        return {"status": "failed", "error": str(e)}

    logger.debug(f"State snapshot written to {path}")
    return {"status": "success", "path": path}
