"""
Service composition root.

``build_container`` wires one repository bundle into every service; the HTTP
layer, Celery tasks and management commands all reach the services through
``get_container()``, which builds the container once per process from
settings. Tests build their own containers directly.
"""
import logging
import threading

from django.conf import settings

from cafeterias.services import CafeteriaService
from ledger.services import LedgerService
from orders.services import OrderService, SettlementService
from security.services import SecurityEventService
from settings.services import ConfigService
from staff.services import StaffService

from .exceptions import ForbiddenError
from .infrastructure.broadcast import broadcast_change
from .infrastructure.events import ChangeFeed, ChangeKind
from .infrastructure.outbox import SnapshotOutbox, load_snapshot, snapshot_path
from .repositories import STORAGE_MEMORY, build_repositories

logger = logging.getLogger(__name__)


class ServiceContainer:
    def __init__(self, repositories, feed=None):
        self.repositories = repositories
        self.feed = feed or ChangeFeed()
        self.outbox = None

        self.security = SecurityEventService(repositories, self.feed)
        self.config = ConfigService(repositories, self.feed)
        self.settlement = SettlementService(repositories, config=self.config)
        self.orders = OrderService(
            repositories,
            self.feed,
            settlement=self.settlement,
            config=self.config,
            security=self.security,
        )
        self.ledger = LedgerService(repositories, self.feed)
        self.staff = StaffService(repositories, self.feed)
        self.cafeterias = CafeteriaService(repositories, self.feed)

    def subscribe(self, callback):
        """Register a change callback; returns a function that unregisters it."""
        return self.feed.subscribe(callback)

    def reset(self, reseed=None):
        """
        Empty every store, optionally reseeding the demo data set.

        Only permitted when ``ORDERING_ALLOW_RESET`` is on.
        """
        if not getattr(settings, "ORDERING_ALLOW_RESET", False):
            raise ForbiddenError("Resetting the store is disabled.")
        if reseed is None:
            reseed = getattr(settings, "ORDERING_SEED_DEMO_DATA", False)

        self.repositories.reset()
        if reseed:
            from .demo import seed_demo_data

            seed_demo_data(self)
        logger.warning(f"Store reset ({self.repositories.backend}, reseeded={bool(reseed)})")
        self.feed.publish(ChangeKind.STORE_RESET)


def build_container(backend=None, seed=None, broadcast=None) -> ServiceContainer:
    backend = backend or getattr(settings, "ORDERING_STORAGE_BACKEND", "django")
    if seed is None:
        seed = getattr(settings, "ORDERING_SEED_DEMO_DATA", False)
    if broadcast is None:
        broadcast = getattr(settings, "ORDERING_BROADCAST_CHANGES", True)

    container = ServiceContainer(build_repositories(backend))

    loaded = False
    if backend == STORAGE_MEMORY:
        loaded = load_snapshot(container.repositories, snapshot_path())
    if seed and not loaded:
        from .demo import seed_demo_data

        seed_demo_data(container)

    if backend == STORAGE_MEMORY:
        container.outbox = SnapshotOutbox(container.repositories)
        container.subscribe(container.outbox.schedule)

    if broadcast:
        container.subscribe(broadcast_change)

    logger.info(f"Service container ready ({backend} storage)")
    return container


_container = None
_container_lock = threading.Lock()


def get_container() -> ServiceContainer:
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = build_container()
    return _container


def set_container(container) -> None:
    """Replace the process container; ``None`` forces a rebuild on next access."""
    global _container
    with _container_lock:
        _container = container
