"""Unauthenticated operational views.

`health` is the readiness probe: it opens the default DB connection and
reports which login strategies `AuthModule.bootstrap()` registered, so a
deployment missing its GitHub or Auth0 configuration shows up here too.
"""

import logging

from django.db import connection
from django.http import JsonResponse
from django.utils.timezone import now

logger = logging.getLogger(__name__)


def _database_error():
    """None when the default connection opens, else the error text."""
    try:
        connection.ensure_connection()
    except Exception as exc:
        logger.warning("Health check: database unavailable: %s", exc)
        return str(exc)
    return None


def health(request):
    from authentication.auth0 import Auth0Config
    from authentication.module import auth_module

    payload = {
        "app": "appforge",
        "time": now().isoformat(),
        "db": "ok",
        "auth_strategies": sorted(auth_module.strategy_names()),
        "auth0": Auth0Config.from_settings() is not None,
    }
    error = _database_error()
    if error is not None:
        payload.update(db="down", error=error)
        return JsonResponse(payload, status=503)
    return JsonResponse(payload)
