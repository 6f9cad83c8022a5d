"""AppConfig for the `core` app.

Scope
-----
Holds shared infrastructure pieces used across the project:
- middleware (observability and size limits),
- logging helpers (request-id),
- the GraphQL view and the typed error family it formats,
- abstract timestamp/soft-delete model bases.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Standard Django AppConfig; keep defaults lightweight."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
