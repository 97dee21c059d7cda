"""
Security event storage.

The log is bounded: once it holds ``max_retained`` events the oldest are
dropped as new ones arrive.
"""
from abc import ABC, abstractmethod
from typing import List

from django.conf import settings
from django.db import transaction

from core_backend.base.memory import InMemoryRepository

from . import models
from .entities import SecurityEvent

DEFAULT_MAX_RETAINED = 1000


def max_retained() -> int:
    return getattr(settings, "SECURITY_EVENTS_MAX_RETAINED", DEFAULT_MAX_RETAINED)


class SecurityEventsRepository(ABC):
    @abstractmethod
    def log(self, event: SecurityEvent) -> SecurityEvent: ...

    @abstractmethod
    def get_all(self) -> List[SecurityEvent]:
        """Oldest first."""

    @abstractmethod
    def get_by_actor_id(self, actor_id: str) -> List[SecurityEvent]: ...


class InMemorySecurityEventsRepository(InMemoryRepository, SecurityEventsRepository):
    state_fields = {"_events": (SecurityEvent, "id")}

    def __init__(self, lock=None):
        super().__init__(lock)
        self._events = {}

    def log(self, event):
        with self._lock:
            self._events[event.id] = event
            limit = max_retained()
            while len(self._events) > limit:
                del self._events[next(iter(self._events))]
            return event

    def get_all(self):
        with self._lock:
            return list(self._events.values())

    def get_by_actor_id(self, actor_id):
        with self._lock:
            return [e for e in self._events.values() if e.actor_id == actor_id]


def event_from_model(row: models.SecurityEvent) -> SecurityEvent:
    return SecurityEvent(
        id=row.id,
        actor_id=row.actor_id,
        role=row.role,
        attempted_action=row.attempted_action,
        target_id=row.target_id,
        timestamp=row.timestamp,
        blocked=row.blocked,
        reason=row.reason,
    )


class DjangoSecurityEventsRepository(SecurityEventsRepository):
    def log(self, event):
        with transaction.atomic():
            models.SecurityEvent.objects.create(
                id=event.id,
                actor_id=event.actor_id,
                role=event.role,
                attempted_action=event.attempted_action,
                target_id=event.target_id,
                timestamp=event.timestamp,
                blocked=event.blocked,
                reason=event.reason,
            )
            overflow = models.SecurityEvent.objects.count() - max_retained()
            if overflow > 0:
                stale = models.SecurityEvent.objects.order_by("timestamp", "pk").values_list(
                    "pk", flat=True
                )[:overflow]
                models.SecurityEvent.objects.filter(pk__in=list(stale)).delete()
        return event

    def get_all(self):
        rows = models.SecurityEvent.objects.order_by("timestamp", "pk")
        return [event_from_model(row) for row in rows]

    def get_by_actor_id(self, actor_id):
        rows = models.SecurityEvent.objects.filter(actor_id=actor_id).order_by("timestamp", "pk")
        return [event_from_model(row) for row in rows]
