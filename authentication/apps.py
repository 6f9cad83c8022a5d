"""
AppConfig for the `authentication` app.

`ready()` bootstraps `authentication.module.auth_module`, which decides which
login strategies exist for the lifetime of the process (GitHub only when
configured). Settings changes after startup need `auth_module.bootstrap()`.
"""

from __future__ import annotations

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AuthenticationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"

    def ready(self) -> None:
        from .module import auth_module

        auth_module.bootstrap()
