"""Staff and waiter session storage."""
import dataclasses
from abc import ABC, abstractmethod
from typing import List, Optional

from core_backend.base.memory import InMemoryRepository

from . import models
from .entities import Staff, StaffRole, WaiterSession


class StaffRepository(ABC):
    @abstractmethod
    def get_all(self) -> List[Staff]: ...

    @abstractmethod
    def get_by_cafeteria_id(self, cafeteria_id: str) -> List[Staff]: ...

    @abstractmethod
    def get_by_id(self, staff_id: str) -> Optional[Staff]: ...

    @abstractmethod
    def create(self, staff: Staff) -> Staff: ...

    @abstractmethod
    def update_status(self, staff_id: str, is_active: bool) -> Optional[Staff]: ...

    @abstractmethod
    def set_waiter_session(self, session: WaiterSession) -> WaiterSession:
        """Start or replace the waiter's current section session."""

    @abstractmethod
    def get_waiter_session(self, waiter_id: str) -> Optional[WaiterSession]: ...

    @abstractmethod
    def clear_waiter_session(self, waiter_id: str) -> bool: ...


class InMemoryStaffRepository(InMemoryRepository, StaffRepository):
    state_fields = {
        "_staff": (Staff, "id"),
        "_sessions": (WaiterSession, "waiter_id"),
    }

    def __init__(self, lock=None):
        super().__init__(lock)
        self._staff = {}
        self._sessions = {}

    def get_all(self):
        with self._lock:
            return list(self._staff.values())

    def get_by_cafeteria_id(self, cafeteria_id):
        with self._lock:
            return [s for s in self._staff.values() if s.cafeteria_id == cafeteria_id]

    def get_by_id(self, staff_id):
        return self._staff.get(staff_id)

    def create(self, staff):
        with self._lock:
            self._staff[staff.id] = staff
            return staff

    def update_status(self, staff_id, is_active):
        with self._lock:
            current = self._staff.get(staff_id)
            if current is None:
                return None
            updated = dataclasses.replace(current, is_active=is_active)
            self._staff[staff_id] = updated
            return updated

    def set_waiter_session(self, session):
        with self._lock:
            self._sessions[session.waiter_id] = session
            return session

    def get_waiter_session(self, waiter_id):
        return self._sessions.get(waiter_id)

    def clear_waiter_session(self, waiter_id):
        with self._lock:
            return self._sessions.pop(waiter_id, None) is not None


def staff_from_model(row: models.Staff) -> Staff:
    return Staff(
        id=row.id,
        cafeteria_id=row.cafeteria_id,
        name=row.name,
        role=StaffRole(row.role),
        created_at=row.created_at,
        is_active=row.is_active,
        kitchen_category_id=row.kitchen_category_id,
    )


def session_from_model(row: models.WaiterSession) -> WaiterSession:
    return WaiterSession(
        waiter_id=row.waiter_id,
        section_id=row.section_id,
        cafeteria_id=row.cafeteria_id,
        started_at=row.started_at,
    )


class DjangoStaffRepository(StaffRepository):
    def get_all(self):
        return [staff_from_model(row) for row in models.Staff.objects.order_by("id")]

    def get_by_cafeteria_id(self, cafeteria_id):
        rows = models.Staff.objects.filter(cafeteria_id=cafeteria_id).order_by("id")
        return [staff_from_model(row) for row in rows]

    def get_by_id(self, staff_id):
        row = models.Staff.objects.filter(pk=staff_id).first()
        return staff_from_model(row) if row else None

    def create(self, staff):
        row = models.Staff.objects.create(
            id=staff.id,
            cafeteria_id=staff.cafeteria_id,
            name=staff.name,
            role=staff.role,
            created_at=staff.created_at,
            is_active=staff.is_active,
            kitchen_category_id=staff.kitchen_category_id,
        )
        return staff_from_model(row)

    def update_status(self, staff_id, is_active):
        if not models.Staff.objects.filter(pk=staff_id).update(is_active=is_active):
            return None
        return self.get_by_id(staff_id)

    def set_waiter_session(self, session):
        defaults = {
            "section_id": session.section_id,
            "cafeteria_id": session.cafeteria_id,
        }
        if session.started_at is not None:
            defaults["started_at"] = session.started_at
        row, _created = models.WaiterSession.objects.update_or_create(
            waiter_id=session.waiter_id, defaults=defaults
        )
        return session_from_model(row)

    def get_waiter_session(self, waiter_id):
        row = models.WaiterSession.objects.filter(waiter_id=waiter_id).first()
        return session_from_model(row) if row else None

    def clear_waiter_session(self, waiter_id):
        deleted, _ = models.WaiterSession.objects.filter(waiter_id=waiter_id).delete()
        return deleted > 0
