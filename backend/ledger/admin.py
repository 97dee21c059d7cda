from django.contrib import admin

from .models import LedgerEntry, Marketer, PayoutRecord, RechargeRequest


@admin.register(Marketer)
class MarketerAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "parent", "created_at")
    search_fields = ("id", "name")


class ReadOnlyAdmin(admin.ModelAdmin):
    """The ledger is append-only; rows are written by the ledger services."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = ("timestamp", "type", "amount", "cafeteria_id", "marketer_id", "order_id")
    list_filter = ("type",)
    search_fields = ("order_id", "cafeteria_id", "marketer_id")


@admin.register(PayoutRecord)
class PayoutRecordAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "marketer", "amount", "created_by")


@admin.register(RechargeRequest)
class RechargeRequestAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "cafeteria", "amount", "status", "processed_at")
    list_filter = ("status",)
