from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .entities import StaffRole


class Staff(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    cafeteria = models.ForeignKey(
        "cafeterias.Cafeteria",
        on_delete=models.CASCADE,
        related_name="staff",
        help_text=_("The cafeteria this staff member works for"),
    )
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=StaffRole.choices)
    is_active = models.BooleanField(
        default=True, help_text=_("Disabled staff cannot change any order")
    )
    kitchen_category = models.ForeignKey(
        "cafeterias.KitchenCategory",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="staff",
        help_text=_("Kitchen staff only act on orders with items from this category"),
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name_plural = _("Staff")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_role_display()})"


class WaiterSession(models.Model):
    """The section a waiter is currently working. One per waiter."""

    waiter = models.OneToOneField(
        Staff, on_delete=models.CASCADE, primary_key=True, related_name="waiter_session"
    )
    section = models.ForeignKey(
        "cafeterias.WaiterSection", on_delete=models.CASCADE, related_name="waiter_sessions"
    )
    cafeteria = models.ForeignKey(
        "cafeterias.Cafeteria", on_delete=models.CASCADE, related_name="waiter_sessions"
    )
    started_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.waiter_id} @ {self.section_id}"
