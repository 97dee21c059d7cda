from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("menu_item_id", "name", "price", "quantity", "notes", "get_line_item_total")
    fields = readonly_fields
    can_delete = False

    def get_line_item_total(self, obj):
        return f"{(obj.price * obj.quantity):,.4f}"

    get_line_item_total.short_description = "Line Item Total"

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are read-only here: items are frozen at creation and status changes
    must go through the order service so settlement and guards apply.
    """

    list_display = ("id", "cafeteria", "table_display", "status", "total", "created_at")
    list_filter = ("status", "cafeteria")
    search_fields = ("id", "session_id", "table_code")
    readonly_fields = (
        "id",
        "session_id",
        "cafeteria",
        "status",
        "total",
        "cafeteria_code",
        "table_code",
        "table_display",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
