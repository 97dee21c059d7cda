from dataclasses import dataclass
from datetime import datetime

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.base import Record


class ActorRole(models.TextChoices):
    WAITER = "waiter", _("Waiter")
    KITCHEN = "kitchen", _("Kitchen")
    SYSTEM = "system", _("System")
    CUSTOMER = "customer", _("Customer")
    OWNER = "owner", _("Owner")
    MARKETER = "marketer", _("Marketer")
    CAFE_ADMIN = "cafe_admin", _("Cafeteria Admin")
    MANAGER = "manager", _("Manager")


@dataclass(frozen=True)
class SecurityEvent(Record):
    """Audit record of a blocked or notable action attempt."""

    id: str
    actor_id: str
    role: str
    attempted_action: str
    target_id: str
    timestamp: datetime
    blocked: bool = True
    reason: str = ""
