from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .entities import LedgerEntryType, RechargeStatus


class Marketer(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
        help_text=_("Upline marketer; receives the grandparent commission share"),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class LedgerEntry(models.Model):
    """
    Append-only record of a point movement.

    References are stored as plain identifiers: the ledger outlives the rows it
    mentions and must never cascade or block their lifecycle.
    """

    id = models.CharField(primary_key=True, max_length=64)
    type = models.CharField(max_length=32, choices=LedgerEntryType.choices)
    amount = models.PositiveIntegerField(help_text=_("Positive magnitude; direction implied by type"))
    order_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    cafeteria_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    marketer_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    timestamp = models.DateTimeField(default=timezone.now)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = _("Ledger Entries")
        ordering = ["-timestamp"]
        indexes = [
            models.Index(fields=["marketer_id", "type"], name="ledger_marketer_type_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.amount}"


class RechargeRequest(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    cafeteria = models.ForeignKey(
        "cafeterias.Cafeteria", on_delete=models.CASCADE, related_name="recharge_requests"
    )
    amount = models.PositiveIntegerField()
    proof_image_url = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=20, choices=RechargeStatus.choices, default=RechargeStatus.PENDING
    )
    created_at = models.DateTimeField(default=timezone.now)
    processed_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["cafeteria", "status"], name="recharge_cafeteria_status_idx"),
        ]

    def __str__(self):
        return f"Recharge {self.id} ({self.status})"


class PayoutRecord(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    marketer = models.ForeignKey(
        Marketer, on_delete=models.PROTECT, related_name="payouts"
    )
    amount = models.PositiveIntegerField()
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    created_by = models.CharField(max_length=64, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Payout {self.amount} to {self.marketer_id}"
