"""
URL configuration for core_backend project.
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/orders/", include("orders.urls")),
    path("api/ledger/", include("ledger.urls")),
    path("api/settings/", include("settings.urls")),
    path("api/security/", include("security.urls")),
]
