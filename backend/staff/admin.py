from django.contrib import admin

from .models import Staff, WaiterSession


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "cafeteria", "role", "kitchen_category", "is_active")
    list_filter = ("role", "is_active", "cafeteria")
    search_fields = ("id", "name")


@admin.register(WaiterSession)
class WaiterSessionAdmin(admin.ModelAdmin):
    list_display = ("waiter", "section", "cafeteria", "started_at")
