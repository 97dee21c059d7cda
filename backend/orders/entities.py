from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.base import Record


class OrderStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    CONFIRMED = "confirmed", _("Confirmed")
    PREPARING = "preparing", _("Preparing")
    READY = "ready", _("Ready")
    SERVED = "served", _("Served")
    PAID = "paid", _("Paid")
    CANCELLED = "cancelled", _("Cancelled")


@dataclass(frozen=True)
class OrderItem(Record):
    """A line item with the menu item's name and price captured at order time."""

    menu_item_id: str
    name: str
    price: Decimal
    quantity: int
    notes: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Order(Record):
    """
    A purchase session at one table.

    ``items`` and ``total`` are fixed at creation. Only ``status`` (and
    ``updated_at``) ever change afterwards.
    """

    id: str
    session_id: str
    cafeteria_id: str
    items: Tuple[OrderItem, ...]
    status: str
    total: Decimal
    created_at: datetime
    cafeteria_code: str = ""
    table_code: str = ""
    table_display: str = ""
    updated_at: Optional[datetime] = None

    @property
    def menu_item_ids(self) -> Tuple[str, ...]:
        return tuple(item.menu_item_id for item in self.items)
