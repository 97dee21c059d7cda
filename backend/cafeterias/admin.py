from django.contrib import admin

from .models import Cafeteria, KitchenCategory, MenuCategory, MenuItem, WaiterSection, WaiterTable


class WaiterTableInline(admin.TabularInline):
    model = WaiterTable
    extra = 0
    fields = ("table_number", "reference_code", "section", "capacity", "is_active")


@admin.register(Cafeteria)
class CafeteriaAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "code", "points", "marketer", "is_trial_expired", "is_open")
    list_filter = ("is_trial_expired", "is_open")
    search_fields = ("id", "name", "code")
    # Balance only moves through settlement, recharge and manual adjustment
    readonly_fields = ("points", "created_at", "updated_at")
    inlines = [WaiterTableInline]


@admin.register(MenuCategory)
class MenuCategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "price", "kitchen_category", "is_available")
    list_filter = ("category", "kitchen_category", "is_available")
    search_fields = ("name",)


@admin.register(KitchenCategory)
class KitchenCategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "cafeteria")
    list_filter = ("cafeteria",)


@admin.register(WaiterSection)
class WaiterSectionAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "cafeteria")
    list_filter = ("cafeteria",)
