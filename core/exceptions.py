"""
Typed errors raised by resolvers and services.

Every error is a `graphql.GraphQLError` carrying `extensions.code`, so a
resolver can simply `raise NotFound(...)` and graphql-core reports it with its
path. Services raise the same classes; non-GraphQL callers (management
commands, DRF views) catch `AppError` and read `.code` / `.message`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from graphql import GraphQLError


class AppError(GraphQLError):
    code = "INTERNAL_SERVER_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extensions: Any) -> None:
        ext: Dict[str, Any] = {"code": self.code}
        ext.update(extensions)
        super().__init__(message or self.default_message, extensions=ext)


class Unauthenticated(AppError):
    code = "UNAUTHENTICATED"
    default_message = "Unauthorized"


class Forbidden(AppError):
    code = "FORBIDDEN"
    default_message = "You do not have permission to access this resource"


class NotFound(AppError):
    code = "NOT_FOUND"
    default_message = "Not found"


class BadUserInput(AppError):
    code = "BAD_USER_INPUT"
    default_message = "Invalid input"


class Conflict(AppError):
    code = "CONFLICT"
    default_message = "Conflict"
