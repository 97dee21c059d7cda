from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .entities import OrderStatus


class Order(models.Model):
    """
    A purchase session at one table of a cafeteria.

    Items and total are written once at creation. Orders are never deleted;
    paid and cancelled orders are kept for audit.
    """

    id = models.CharField(primary_key=True, max_length=64)
    session_id = models.CharField(max_length=128, db_index=True)
    cafeteria = models.ForeignKey(
        "cafeterias.Cafeteria", on_delete=models.PROTECT, related_name="orders"
    )
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    total = models.DecimalField(max_digits=14, decimal_places=4)

    # Table binding, validated against the table registry at creation
    cafeteria_code = models.CharField(max_length=16, blank=True)
    table_code = models.CharField(max_length=32, blank=True)
    table_display = models.CharField(max_length=50, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["cafeteria", "status"], name="order_cafeteria_status_idx"),
        ]

    def __str__(self):
        return f"Order {self.id} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    position = models.PositiveIntegerField(default=0)
    menu_item_id = models.CharField(max_length=64)
    name = models.CharField(max_length=255, help_text=_("Menu item name at order time"))
    price = models.DecimalField(
        max_digits=12, decimal_places=4, help_text=_("Menu item price at order time")
    )
    quantity = models.PositiveIntegerField(default=1)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["position"]

    def __str__(self):
        return f"{self.quantity} x {self.name}"
