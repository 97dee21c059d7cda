from django.db import models
from django.utils.translation import gettext_lazy as _


class Cafeteria(models.Model):
    """
    Root entity for multi-tenancy.
    Each cafeteria spends its prepaid points balance on settled orders.
    """

    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    code = models.CharField(
        max_length=16,
        unique=True,
        help_text=_("Short code embedded in table QR payloads (e.g., 1001AB)"),
    )
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    is_open = models.BooleanField(default=True)
    opening_hours = models.CharField(max_length=255, blank=True)

    # Prepaid credit, never negative
    points = models.PositiveIntegerField(default=0)

    marketer = models.ForeignKey(
        "ledger.Marketer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cafeterias",
        help_text=_("Direct marketer earning commission on this cafeteria's orders"),
    )

    # Trial
    is_trial_expired = models.BooleanField(default=False)
    trial_days_override = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Overrides the global trial length for this cafeteria"),
    )
    trial_started_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "cafeterias"
        ordering = ["name"]

    def __str__(self):
        return self.name


class MenuCategory(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = _("Menu Categories")
        ordering = ["name"]

    def __str__(self):
        return self.name


class KitchenCategory(models.Model):
    """A kitchen station (Hot, Cold, Drinks...). Kitchen staff may be bound to one."""

    id = models.CharField(primary_key=True, max_length=64)
    cafeteria = models.ForeignKey(
        Cafeteria, on_delete=models.CASCADE, related_name="kitchen_categories"
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    class Meta:
        verbose_name_plural = _("Kitchen Categories")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.cafeteria_id})"


class MenuItem(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    category = models.ForeignKey(
        MenuCategory, on_delete=models.CASCADE, related_name="items"
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=4)
    image_url = models.URLField(blank=True)
    is_available = models.BooleanField(default=True)
    kitchen_category = models.ForeignKey(
        KitchenCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="menu_items",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class WaiterSection(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    cafeteria = models.ForeignKey(
        Cafeteria, on_delete=models.CASCADE, related_name="waiter_sections"
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"Section {self.name}"


class WaiterTable(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    cafeteria = models.ForeignKey(
        Cafeteria, on_delete=models.CASCADE, related_name="waiter_tables"
    )
    section = models.ForeignKey(
        WaiterSection, on_delete=models.PROTECT, related_name="tables"
    )
    table_number = models.CharField(max_length=20)
    capacity = models.PositiveIntegerField(default=2)
    reference_code = models.CharField(
        max_length=32,
        help_text=_("Code printed in the table's QR payload"),
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["table_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["cafeteria", "reference_code"],
                name="unique_table_reference_per_cafeteria",
            )
        ]

    def __str__(self):
        return f"Table {self.table_number}"
