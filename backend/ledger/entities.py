from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.base import Record


class LedgerEntryType(models.TextChoices):
    ORDER_DEBIT = "order_debit", _("Order Debit")
    COMMISSION_CREDIT = "commission_credit", _("Commission Credit")
    RECHARGE_CREDIT = "recharge_credit", _("Recharge Credit")
    PAYOUT_DEBIT = "payout_debit", _("Payout Debit")
    MANUAL_ADJUSTMENT = "manual_adjustment", _("Manual Adjustment")
    ORDER_PAYMENT = "order_payment", _("Order Payment")


class RechargeStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")


@dataclass(frozen=True)
class LedgerEntry(Record):
    """
    Append-only record of a point movement.

    ``amount`` is always a positive magnitude; the direction is implied by
    ``type``.
    """

    id: str
    type: LedgerEntryType
    amount: int
    timestamp: datetime
    order_id: Optional[str] = None
    cafeteria_id: Optional[str] = None
    marketer_id: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class Marketer(Record):
    """A marketer earning commission; ``parent_id`` is the grandparent for fan-out."""

    id: str
    name: str
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class RechargeRequest(Record):
    id: str
    cafeteria_id: str
    amount: int
    status: RechargeStatus
    created_at: datetime
    proof_image_url: str = ""
    processed_at: Optional[datetime] = None
    notes: str = ""

    @property
    def is_processed(self) -> bool:
        return self.status != RechargeStatus.PENDING


@dataclass(frozen=True)
class PayoutRecord(Record):
    id: str
    marketer_id: str
    amount: int
    created_at: datetime
    created_by: str = ""
    note: str = ""
