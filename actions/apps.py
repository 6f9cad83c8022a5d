from django.apps import AppConfig


class ActionsConfig(AppConfig):
    """Action / step / log tracking for long-running operations."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "actions"
