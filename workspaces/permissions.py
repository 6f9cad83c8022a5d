"""
Workspace-scoped authorization.

`PermissionsService.validate_access(user, origin_type, origin_id)` answers a
single question: does the origin (workspace, project, resource, entity or
action) belong to the workspace the authenticated `WorkspaceUser` acts in?
Soft-deleted projects/resources/entities never pass.

Resolvers use the `authorize` decorator, which reads the origin id out of the
resolver kwargs by dotted path (`"data.resource_id"`) and raises `Forbidden`.
It must be stacked *under* `authentication.guards.gql_auth_guard`, which puts
the `WorkspaceUser` on `info.context.workspace_user`.

`IsWorkspaceMember` is the DRF counterpart for REST views.
"""

from __future__ import annotations

import enum
from functools import wraps
from typing import Any, Callable

from django.apps import apps
from rest_framework.permissions import BasePermission

from core.exceptions import Forbidden, Unauthenticated

from .models import Project, Resource, WorkspaceUser


class OriginType(str, enum.Enum):
    WORKSPACE = "Workspace"
    PROJECT = "Project"
    RESOURCE = "Resource"
    ENTITY = "Entity"
    ACTION = "Action"


class PermissionsService:

    @staticmethod
    def validate_access(user: WorkspaceUser | None, origin_type: OriginType, origin_id: Any) -> bool:
        if user is None or origin_id in (None, ""):
            return False
        try:
            origin_id = int(origin_id)
        except (TypeError, ValueError):
            return False

        workspace_id = user.workspace_id
        if origin_type is OriginType.WORKSPACE:
            return origin_id == workspace_id
        if origin_type is OriginType.PROJECT:
            return Project.objects.filter(pk=origin_id, workspace_id=workspace_id).exists()
        if origin_type is OriginType.RESOURCE:
            return Resource.objects.filter(
                pk=origin_id,
                project__workspace_id=workspace_id,
                project__deleted_at__isnull=True,
            ).exists()
        if origin_type is OriginType.ENTITY:
            Entity = apps.get_model("entities", "Entity")
            return Entity.objects.filter(
                pk=origin_id,
                resource__deleted_at__isnull=True,
                resource__project__workspace_id=workspace_id,
            ).exists()
        if origin_type is OriginType.ACTION:
            Action = apps.get_model("actions", "Action")
            return Action.objects.filter(pk=origin_id, workspace_id=workspace_id).exists()
        raise ValueError(f"Unknown origin type: {origin_type!r}")


def _dig(kwargs: dict, path: str) -> Any:
    """Follow a dotted path through resolver kwargs (dicts or input objects)."""
    value: Any = kwargs
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def authorize(origin_type: OriginType, arg_path: str) -> Callable:
    """Resolver decorator: require access to the origin named by `arg_path`."""

    def decorator(resolver: Callable) -> Callable:
        @wraps(resolver)
        def wrapper(root, info, **kwargs):
            user = getattr(info.context, "workspace_user", None)
            if user is None:
                raise Unauthenticated()
            if not PermissionsService.validate_access(user, origin_type, _dig(kwargs, arg_path)):
                raise Forbidden()
            return resolver(root, info, **kwargs)

        return wrapper

    return decorator


class IsWorkspaceMember(BasePermission):
    """Request-level: authenticated through a token that names a workspace membership."""

    def has_permission(self, request, view) -> bool:
        return getattr(request, "workspace_user", None) is not None
