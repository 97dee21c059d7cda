"""
Authorization predicates scoping which staff member may act on which order.

Guards are pure: the caller loads the staff record, waiter session, table and
menu items and passes them in. Each guard returns a GuardResult rather than
raising, so the caller decides how to log and surface the rejection.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from staff.entities import StaffRole


@dataclass(frozen=True)
class GuardResult:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self):
        return self.allowed


ALLOWED = GuardResult(allowed=True)


def check_staff_active(staff) -> GuardResult:
    """Disabled staff are blocked from every mutating operation."""
    if staff is not None and not staff.is_active:
        return GuardResult(allowed=False, reason="Staff account is disabled")
    return ALLOWED


def check_waiter_section(waiter_session, table_section_id: Optional[str]) -> GuardResult:
    """
    A waiter working a section may only act on orders at tables in that section.
    Waiters without a session are unrestricted.
    """
    if waiter_session is not None and table_section_id and table_section_id != waiter_session.section_id:
        return GuardResult(
            allowed=False,
            reason=(
                "Waiter can only update orders in their assigned section "
                f"({waiter_session.section_id})"
            ),
        )
    return ALLOWED


def check_kitchen_category(staff, order, menu_items: Iterable) -> GuardResult:
    """
    Kitchen staff bound to a category may only act on orders with at least one
    item from that category. Kitchen staff without a category are unrestricted.
    """
    if staff is None or staff.role != StaffRole.KITCHEN or not staff.kitchen_category_id:
        return ALLOWED

    categories_by_item = {item.id: item.kitchen_category_id for item in menu_items}
    has_item_in_category = any(
        categories_by_item.get(line.menu_item_id) == staff.kitchen_category_id
        for line in order.items
    )
    if not has_item_in_category:
        return GuardResult(
            allowed=False,
            reason=(
                "Kitchen staff can only update orders containing items from their "
                f"assigned category ({staff.kitchen_category_id})"
            ),
        )
    return ALLOWED
