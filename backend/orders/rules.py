"""
Order state machine.

Pure functions only: nothing in here touches storage. The order service calls
these before any status change.
"""
from typing import Dict, FrozenSet, Tuple

from .entities import OrderStatus

# Valid status transitions for the order state machine
VALID_STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.SERVED}),
    OrderStatus.SERVED: frozenset({OrderStatus.PAID}),
    OrderStatus.PAID: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Status names written by older records
LEGACY_STATUS_ALIASES: Dict[str, str] = {
    "created": OrderStatus.PENDING,
    "sent_to_kitchen": OrderStatus.CONFIRMED,
}

TERMINAL_STATUSES: FrozenSet[str] = frozenset({OrderStatus.PAID, OrderStatus.CANCELLED})


def normalize_status(status: str) -> str:
    """Map a legacy status name to its current equivalent."""
    return LEGACY_STATUS_ALIASES.get(status, status)


def is_valid_status_transition(old_status: str, new_status: str) -> bool:
    """True iff ``new_status`` is a legal next state of ``old_status``. Unknown states are never valid."""
    allowed = VALID_STATUS_TRANSITIONS.get(normalize_status(old_status))
    if allowed is None:
        return False
    return normalize_status(new_status) in allowed


def is_order_immutable(status: str) -> bool:
    return normalize_status(status) in TERMINAL_STATUSES


def allowed_next_statuses(status: str) -> Tuple[str, ...]:
    allowed = VALID_STATUS_TRANSITIONS.get(normalize_status(status), frozenset())
    return tuple(s for s in OrderStatus.values if s in allowed)
