from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from core_backend.base import Record


@dataclass(frozen=True)
class Cafeteria(Record):
    """
    A tenant of the platform.

    ``points`` is the prepaid credit balance consumed by every settled order and
    is never negative. ``code`` authenticates table QR payloads against this
    cafeteria.
    """

    id: str
    name: str
    code: str
    points: int = 0
    description: str = ""
    address: str = ""
    phone: str = ""
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    is_open: bool = True
    opening_hours: str = ""
    marketer_id: Optional[str] = None
    is_trial_expired: bool = False
    trial_days_override: Optional[int] = None
    trial_started_at: Optional[datetime] = None


@dataclass(frozen=True)
class MenuCategory(Record):
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class MenuItem(Record):
    id: str
    category_id: str
    name: str
    price: Decimal
    description: str = ""
    image_url: str = ""
    is_available: bool = True
    kitchen_category_id: Optional[str] = None


@dataclass(frozen=True)
class WaiterSection(Record):
    id: str
    cafeteria_id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class WaiterTable(Record):
    """A physical table. Belongs to exactly one section."""

    id: str
    cafeteria_id: str
    section_id: str
    table_number: str
    reference_code: str
    capacity: int = 2
    is_active: bool = True


@dataclass(frozen=True)
class KitchenCategory(Record):
    id: str
    cafeteria_id: str
    name: str
    description: str = ""
