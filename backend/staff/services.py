import logging
from typing import Optional

from django.utils import timezone

from core_backend.base import new_id
from core_backend.exceptions import NotFoundError, ValidationError
from core_backend.infrastructure.events import ChangeKind

from .entities import Staff, StaffRole, WaiterSession

logger = logging.getLogger(__name__)


class StaffService:
    """Staff accounts and waiter section sessions."""

    def __init__(self, repositories, feed):
        self.repos = repositories
        self.feed = feed

    def get_staff(self, cafeteria_id: Optional[str] = None):
        if cafeteria_id is not None:
            return self.repos.staff.get_by_cafeteria_id(cafeteria_id)
        return self.repos.staff.get_all()

    def add_staff(
        self,
        cafeteria_id: str,
        name: str,
        role: str,
        kitchen_category_id: Optional[str] = None,
        staff_id: Optional[str] = None,
    ) -> Staff:
        if role not in StaffRole.values:
            raise ValidationError(f"Invalid staff role '{role}'.")
        if not name:
            raise ValidationError("Staff name is required.")
        if self.repos.cafeterias.get_by_id(cafeteria_id) is None:
            raise NotFoundError(f"Cafeteria {cafeteria_id} not found.")
        if kitchen_category_id and role != StaffRole.KITCHEN:
            raise ValidationError("Only kitchen staff can be assigned a kitchen category.")

        staff = Staff(
            id=staff_id or new_id("staff"),
            cafeteria_id=cafeteria_id,
            name=name,
            role=StaffRole(role),
            created_at=timezone.now(),
            kitchen_category_id=kitchen_category_id,
        )
        with self.repos.atomic():
            staff = self.repos.staff.create(staff)

        logger.info(f"Added {role} {staff.id} to cafeteria {cafeteria_id}")
        self.feed.publish(ChangeKind.STAFF_UPDATED, staff.id)
        return staff

    def update_staff_status(self, staff_id: str, is_active: bool) -> Staff:
        with self.repos.atomic():
            staff = self.repos.staff.update_status(staff_id, bool(is_active))
            if staff is None:
                raise NotFoundError(f"Staff {staff_id} not found.")
            if not staff.is_active:
                self.repos.staff.clear_waiter_session(staff_id)

        logger.info(f"Staff {staff_id} {'enabled' if staff.is_active else 'disabled'}")
        self.feed.publish(ChangeKind.STAFF_UPDATED, staff_id)
        return staff

    def set_waiter_session(self, waiter_id: str, section_id: str) -> WaiterSession:
        """Put a waiter on a section; replaces any previous session."""
        staff = self.repos.staff.get_by_id(waiter_id)
        if staff is None:
            raise NotFoundError(f"Staff {waiter_id} not found.")
        if staff.role != StaffRole.WAITER:
            raise ValidationError("Only waiters can start a section session.")
        if not staff.is_active:
            raise ValidationError("Staff account is disabled")

        sections = {s.id for s in self.repos.cafeterias.get_waiter_sections(staff.cafeteria_id)}
        if section_id not in sections:
            raise NotFoundError(f"Section {section_id} not found in cafeteria {staff.cafeteria_id}.")

        with self.repos.atomic():
            session = self.repos.staff.set_waiter_session(
                WaiterSession(
                    waiter_id=waiter_id,
                    section_id=section_id,
                    cafeteria_id=staff.cafeteria_id,
                    started_at=timezone.now(),
                )
            )
        logger.info(f"Waiter {waiter_id} working section {section_id}")
        self.feed.publish(ChangeKind.STAFF_UPDATED, waiter_id)
        return session

    def get_waiter_session(self, waiter_id: str) -> Optional[WaiterSession]:
        return self.repos.staff.get_waiter_session(waiter_id)

    def clear_waiter_session(self, waiter_id: str) -> bool:
        with self.repos.atomic():
            cleared = self.repos.staff.clear_waiter_session(waiter_id)
        if cleared:
            self.feed.publish(ChangeKind.STAFF_UPDATED, waiter_id)
        return cleared
