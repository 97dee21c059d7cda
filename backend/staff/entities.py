from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.base import Record


class StaffRole(models.TextChoices):
    WAITER = "waiter", _("Waiter")
    KITCHEN = "kitchen", _("Kitchen")


@dataclass(frozen=True)
class Staff(Record):
    """
    A cafeteria employee. Disabled staff (``is_active=False``) may not mutate
    anything; kitchen staff with a ``kitchen_category_id`` only act on orders
    containing items of that category.
    """

    id: str
    cafeteria_id: str
    name: str
    role: StaffRole
    created_at: datetime
    is_active: bool = True
    kitchen_category_id: Optional[str] = None


@dataclass(frozen=True)
class WaiterSession(Record):
    """The section a waiter is currently working."""

    waiter_id: str
    section_id: str
    cafeteria_id: str
    started_at: Optional[datetime] = None
