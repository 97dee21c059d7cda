"""
Write-behind persistence for the in-memory backend.

``SnapshotOutbox`` subscribes to the change feed of one container. The first
change in a debounce window claims a cache key with ``cache.add`` and arms a
timer; when the timer fires, the stores are exported in this process and the
payload is handed to ``persist_state_snapshot`` which writes the file. The
domain operation has already completed when the event fires, so a failed
snapshot is logged and dropped.
"""
import json
import logging
import os
import tempfile
import threading

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

SNAPSHOT_PENDING_KEY = "ordering:snapshot:pending"
SNAPSHOT_VERSION = 1


def snapshot_path():
    return getattr(settings, "ORDERING_SNAPSHOT_PATH", "") or ""


def debounce_seconds():
    return max(float(getattr(settings, "ORDERING_SNAPSHOT_DEBOUNCE_SECONDS", 1)), 0)


class SnapshotOutbox:
    def __init__(self, repositories):
        self.repositories = repositories
        self._timer = None
        self._lock = threading.Lock()

    def schedule(self, event) -> bool:
        """Change-feed subscriber. Returns True when a write was scheduled."""
        path = snapshot_path()
        if not path:
            return False

        debounce = debounce_seconds()
        # add() only succeeds for the first change in the debounce window
        if not cache.add(SNAPSHOT_PENDING_KEY, event.kind, timeout=max(int(debounce), 1) * 10):
            return False

        try:
            timer = threading.Timer(debounce, self.flush, kwargs={"path": path})
            timer.daemon = True
            with self._lock:
                self._timer = timer
            timer.start()
        except Exception as e:
            cache.delete(SNAPSHOT_PENDING_KEY)
            logger.error(f"Could not schedule state snapshot after {event.kind}: {e}", exc_info=True)
            return False
        return True

    def flush(self, path=None) -> bool:
        """Export the stores now and queue the file write. Returns True when queued."""
        from .tasks import persist_state_snapshot

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        # Clear first so changes made from here on arm a new window
        cache.delete(SNAPSHOT_PENDING_KEY)

        path = path or snapshot_path()
        if not path:
            return False

        try:
            state = self.repositories.export_state()
            persist_state_snapshot.delay(path, state)
        except Exception as e:
            logger.error(f"Could not queue state snapshot to {path}: {e}", exc_info=True)
            return False
        return True


def write_snapshot_state(state: dict, path: str) -> str:
    """Atomically replace ``path`` with a JSON dump of exported store state."""
    payload = {"version": SNAPSHOT_VERSION, "state": state}
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".snapshot-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
    return path


def write_snapshot(repositories, path: str) -> str:
    return write_snapshot_state(repositories.export_state(), path)


def load_snapshot(repositories, path: str) -> bool:
    """Restore the in-memory stores from ``path``. Returns False when nothing was loaded."""
    if not path or not os.path.exists(path):
        return False
    try:
        with open(path, encoding="utf-8") as handle:
            payload = json.load(handle)
        repositories.import_state(payload.get("state", {}))
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error(f"Ignoring unreadable state snapshot {path}: {e}", exc_info=True)
        return False
    logger.info(f"Loaded state snapshot from {path}")
    return True
