from django.apps import AppConfig


class WorkspacesConfig(AppConfig):
    """Workspaces, their members, projects, resources and commits."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "workspaces"
