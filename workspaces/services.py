"""
Workspace/project/resource creation.

Kept as plain functions (like the importer runners) so GraphQL mutations,
OAuth sign-in and management commands share one code path.
"""

from __future__ import annotations

import logging

from django.db import transaction

from core.exceptions import BadUserInput, NotFound

from .models import Project, Resource, ResourceType, Workspace, WorkspaceUser

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "My Workspace"
PROJECT_CONFIGURATION_NAME = "Project Configuration"


def _clean_name(name: str, what: str) -> str:
    name = (name or "").strip()
    if not name:
        raise BadUserInput(f"{what} name must not be empty")
    return name


@transaction.atomic
def create_workspace(account, name: str | None = None) -> WorkspaceUser:
    """Create a workspace owned by `account`; returns the owner membership."""
    workspace = Workspace.objects.create(name=_clean_name(name or DEFAULT_WORKSPACE_NAME, "Workspace"))
    user = WorkspaceUser.objects.create(account=account, workspace=workspace, is_owner=True)
    if account.current_user_id is None:
        account.current_user = user
        account.save(update_fields=["current_user"])
    logger.info("Workspace %s created for account %s", workspace.id, account.id)
    return user


@transaction.atomic
def create_project(user: WorkspaceUser, name: str, description: str = "") -> Project:
    """Create a project in the user's workspace together with its configuration resource."""
    project = Project.objects.create(
        workspace_id=user.workspace_id,
        name=_clean_name(name, "Project"),
        description=description or "",
    )
    Resource.objects.create(
        project=project,
        name=PROJECT_CONFIGURATION_NAME,
        resource_type=ResourceType.PROJECT_CONFIGURATION,
    )
    return project


def create_service(user: WorkspaceUser, project_id, name: str, description: str = "") -> Resource:
    project = Project.objects.for_workspace(user.workspace_id).filter(pk=project_id).first()
    if project is None:
        raise NotFound(f"Project {project_id} not found")
    return Resource.objects.create(
        project=project,
        name=_clean_name(name, "Service"),
        description=description or "",
        resource_type=ResourceType.SERVICE,
    )
