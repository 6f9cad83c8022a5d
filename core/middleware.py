"""
Request-level middleware: body size gate and the per-request log line.

`RequestSizeLimitMiddleware` runs before any body parsing, so a multipart schema
upload to `/graphql/` that exceeds `MAX_REQUEST_BYTES` never reaches graphene.
Error bodies use the `{"detail", "code"}` shape shared with the REST views.

`RequestIDLogMiddleware` binds a request id to `core.logging.request_id_var`,
echoes it as `X-Request-ID`, and emits exactly one INFO record on
`appforge.request` carrying method, path, status, user id, GraphQL operation
name and latency as record attributes.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any, Callable, Dict, Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from .logging import request_id_var

logger = logging.getLogger("appforge.request")

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._\-]{1,200}$")
_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


def json_error(detail: str, code: str, status: int, **extra: Any) -> Response:
    """A DRF Response rendered up front, usable outside of DRF views."""
    resp = Response({"detail": detail, "code": code, **extra}, status=status)
    resp.accepted_renderer = JSONRenderer()
    resp.accepted_media_type = "application/json"
    resp.renderer_context = {}
    resp.render()
    return resp


def request_id_from(request: HttpRequest) -> str:
    raw = request.headers.get(REQUEST_ID_HEADER)
    if raw and _REQUEST_ID_RE.match(raw):
        return raw
    return uuid.uuid4().hex


def declared_length(request: HttpRequest) -> Optional[int]:
    """`Content-Length` as an int; None when absent or garbage."""
    raw = request.META.get("CONTENT_LENGTH")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class RequestSizeLimitMiddleware:
    """413 for bodies whose declared length exceeds `MAX_REQUEST_BYTES` (0 disables)."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    @property
    def max_bytes(self) -> int:
        return int(getattr(settings, "MAX_REQUEST_BYTES", 10_000_000))

    def __call__(self, request: HttpRequest) -> HttpResponse:
        limit = self.max_bytes
        if limit > 0 and request.method.upper() in _BODY_METHODS:
            length = declared_length(request)
            if length is not None and length > limit:
                logger.warning("Rejected %s %s: %d bytes over the %d byte limit", request.method, request.path, length, limit)
                return json_error(
                    f"Request entity too large. Max {limit} bytes.",
                    "request_too_large",
                    413,
                    max_bytes=limit,
                )
        return self.get_response(request)


class RequestIDLogMiddleware:

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        rid = request_id_from(request)
        request.request_id = rid
        token = request_id_var.set(rid)
        started = time.perf_counter()
        try:
            response = self.get_response(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        logger.info("request", extra=self.log_fields(request, response, rid, started))
        return response

    @staticmethod
    def log_fields(request: HttpRequest, response: HttpResponse, rid: str, started: float) -> Dict[str, Any]:
        # Bearer-token users are attached by the GraphQL/DRF layer, after
        # AuthenticationMiddleware, so read `request.user` only at the end.
        user = getattr(request, "user", None)
        return {
            "request_id": rid,
            "method": request.method,
            "path": request.path,
            "status": getattr(response, "status_code", 0),
            "user_id": user.id if getattr(user, "is_authenticated", False) else None,
            "operation": getattr(request, "graphql_operation", None) or "-",
            "duration_ms": int((time.perf_counter() - started) * 1000),
        }
