# admin_moderation/apps.py

from django.apps import AppConfig


class AdminModerationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "admin_moderation"
    verbose_name = "Admin Console"
