from django.contrib import admin

from .models import CommissionConfig, TrialConfig


class SingletonSettingsAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return not self.model.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CommissionConfig)
class CommissionConfigAdmin(SingletonSettingsAdmin):
    list_display = (
        "rate_direct_parent_percent",
        "rate_grandparent_percent",
        "rate_owner_percent",
        "updated_at",
    )


@admin.register(TrialConfig)
class TrialConfigAdmin(SingletonSettingsAdmin):
    list_display = ("global_trial_days", "updated_at")
