from django.apps import AppConfig


class CafeteriasConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cafeterias"
