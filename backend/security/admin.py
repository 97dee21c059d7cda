from django.contrib import admin

from .models import SecurityEvent


@admin.register(SecurityEvent)
class SecurityEventAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "actor_id", "role", "attempted_action", "target_id", "blocked")
    list_filter = ("blocked", "role")
    search_fields = ("actor_id", "target_id")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
