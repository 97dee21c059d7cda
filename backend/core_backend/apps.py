from django.apps import AppConfig
from django.conf import settings
import logging

logger = logging.getLogger(__name__)


class CoreBackendConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core_backend"

    def ready(self):
        backend = getattr(settings, "ORDERING_STORAGE_BACKEND", "django")
        logger.debug(f"Ordering storage backend: {backend}")
