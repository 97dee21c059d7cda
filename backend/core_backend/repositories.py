"""
Repository bundles.

A bundle groups one repository per aggregate and owns the unit of work:
``with repos.atomic():`` makes every write inside the block land together or not
at all. The Django bundle delegates to ``transaction.atomic``. The in-memory
bundle serializes writers on one process-wide lock and restores a snapshot of
every store when the block raises.
"""
import logging
import threading
from contextlib import contextmanager

from django.db import transaction

from cafeterias.repositories import DjangoCafeteriasRepository, InMemoryCafeteriasRepository
from ledger.repositories import DjangoLedgerRepository, InMemoryLedgerRepository
from orders.repositories import DjangoOrdersRepository, InMemoryOrdersRepository
from security.repositories import (
    DjangoSecurityEventsRepository,
    InMemorySecurityEventsRepository,
)
from settings.repositories import DjangoConfigRepository, InMemoryConfigRepository
from staff.repositories import DjangoStaffRepository, InMemoryStaffRepository

logger = logging.getLogger(__name__)

STORAGE_DJANGO = "django"
STORAGE_MEMORY = "memory"


class Repositories:
    def __init__(self, orders, cafeterias, ledger, config, staff, security_events):
        self.orders = orders
        self.cafeterias = cafeterias
        self.ledger = ledger
        self.config = config
        self.staff = staff
        self.security_events = security_events

    def all(self):
        return (
            self.orders,
            self.cafeterias,
            self.ledger,
            self.config,
            self.staff,
            self.security_events,
        )

    def atomic(self):
        raise NotImplementedError

    def reset(self):
        """Drop every stored record."""
        raise NotImplementedError


class InMemoryRepositories(Repositories):
    backend = STORAGE_MEMORY

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        super().__init__(
            orders=InMemoryOrdersRepository(self._lock),
            cafeterias=InMemoryCafeteriasRepository(self._lock),
            ledger=InMemoryLedgerRepository(self._lock),
            config=InMemoryConfigRepository(self._lock),
            staff=InMemoryStaffRepository(self._lock),
            security_events=InMemorySecurityEventsRepository(self._lock),
        )

    @contextmanager
    def atomic(self):
        with self._lock:
            outermost = self._depth == 0
            snapshot = [repo.snapshot() for repo in self.all()] if outermost else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if outermost:
                    for repo, state in zip(self.all(), snapshot):
                        repo.restore(state)
                    logger.debug("Rolled back in-memory unit of work")
                raise
            finally:
                self._depth -= 1

    def reset(self):
        with self._lock:
            fresh = InMemoryRepositories()
            for repo, empty in zip(self.all(), fresh.all()):
                repo.restore(empty.snapshot())

    def export_state(self) -> dict:
        with self._lock:
            return {
                "orders": self.orders.export_state(),
                "cafeterias": self.cafeterias.export_state(),
                "ledger": self.ledger.export_state(),
                "config": self.config.export_state(),
                "staff": self.staff.export_state(),
                "security_events": self.security_events.export_state(),
            }

    def import_state(self, data: dict) -> None:
        with self._lock:
            for name in ("orders", "cafeterias", "ledger", "config", "staff", "security_events"):
                if name in data:
                    getattr(self, name).import_state(data[name])


class DjangoRepositories(Repositories):
    backend = STORAGE_DJANGO

    def __init__(self):
        super().__init__(
            orders=DjangoOrdersRepository(),
            cafeterias=DjangoCafeteriasRepository(),
            ledger=DjangoLedgerRepository(),
            config=DjangoConfigRepository(),
            staff=DjangoStaffRepository(),
            security_events=DjangoSecurityEventsRepository(),
        )

    def atomic(self):
        return transaction.atomic()

    def reset(self):
        from cafeterias import models as cafeteria_models
        from ledger import models as ledger_models
        from orders import models as order_models
        from security import models as security_models
        from settings import models as settings_models
        from staff import models as staff_models

        # Children before parents; PROTECT relations would block the reverse
        ordered = [
            order_models.OrderItem,
            order_models.Order,
            staff_models.WaiterSession,
            staff_models.Staff,
            ledger_models.PayoutRecord,
            ledger_models.RechargeRequest,
            ledger_models.LedgerEntry,
            cafeteria_models.WaiterTable,
            cafeteria_models.WaiterSection,
            cafeteria_models.MenuItem,
            cafeteria_models.KitchenCategory,
            cafeteria_models.MenuCategory,
            cafeteria_models.Cafeteria,
            ledger_models.Marketer,
            security_models.SecurityEvent,
            settings_models.CommissionConfig,
            settings_models.TrialConfig,
        ]
        with transaction.atomic():
            for model in ordered:
                model.objects.all().delete()


def build_repositories(backend: str = STORAGE_DJANGO) -> Repositories:
    if backend == STORAGE_MEMORY:
        return InMemoryRepositories()
    if backend == STORAGE_DJANGO:
        return DjangoRepositories()
    raise ValueError(f"Unknown storage backend: {backend!r}")
