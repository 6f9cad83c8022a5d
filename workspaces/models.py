"""
Workspace tenancy models.

Hierarchy
---------
    Workspace ─┬─ WorkspaceUser (membership of an accounts.Account)
               └─ Project ─┬─ Resource (Service / ProjectConfiguration / MessageBroker)
                           └─ Commit

Tenancy
-------
- Every query that starts from user input is scoped through
  `.for_workspace(workspace)` (or `workspaces.permissions.PermissionsService`)
  so ids from another workspace resolve to "not found"/"forbidden".
- Projects and resources are soft-deleted; commits are append-only.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import AliveManager, SoftDeleteModel, SoftDeleteQuerySet, TimestampedModel


class Workspace(TimestampedModel):
    name = models.CharField(max_length=200)

    class Meta:
        ordering = ("created_at", "id")

    def __str__(self) -> str:
        return self.name


class WorkspaceUser(TimestampedModel):
    """An account's membership in a workspace. JWTs identify this row."""

    account = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="memberships"
    )
    workspace = models.ForeignKey(Workspace, on_delete=models.CASCADE, related_name="users")
    is_owner = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=("account", "workspace"), name="uniq_workspace_user_account"),
        ]

    def __str__(self) -> str:
        return f"{self.account_id}@{self.workspace_id}"

    @property
    def roles(self) -> list[str]:
        return ["ADMIN", "USER"] if self.is_owner else ["USER"]


class WorkspaceScopedQuerySet(SoftDeleteQuerySet):
    workspace_lookup = "workspace"

    def for_workspace(self, workspace):
        return self.filter(**{self.workspace_lookup: workspace})


class ProjectQuerySet(WorkspaceScopedQuerySet):
    workspace_lookup = "workspace"


class ResourceQuerySet(WorkspaceScopedQuerySet):
    workspace_lookup = "project__workspace"


class Project(SoftDeleteModel):
    workspace = models.ForeignKey(Workspace, on_delete=models.CASCADE, related_name="projects")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    objects = AliveManager.from_queryset(ProjectQuerySet)()
    all_objects = ProjectQuerySet.as_manager()

    class Meta:
        ordering = ("created_at", "id")
        indexes = [models.Index(fields=("workspace", "deleted_at"), name="project_workspace_alive_idx")]

    def __str__(self) -> str:
        return self.name

    def last_commit(self):
        return self.commits.order_by("-created_at", "-id").first()


class ResourceType(models.TextChoices):
    SERVICE = "Service", "Service"
    PROJECT_CONFIGURATION = "ProjectConfiguration", "Project configuration"
    MESSAGE_BROKER = "MessageBroker", "Message broker"


class Resource(SoftDeleteModel):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="resources")
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    resource_type = models.CharField(max_length=32, choices=ResourceType.choices, default=ResourceType.SERVICE)

    objects = AliveManager.from_queryset(ResourceQuerySet)()
    all_objects = ResourceQuerySet.as_manager()

    class Meta:
        ordering = ("created_at", "id")

    def __str__(self) -> str:
        return f"{self.name} ({self.resource_type})"


class Commit(models.Model):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="commits")
    user = models.ForeignKey(WorkspaceUser, on_delete=models.SET_NULL, null=True, related_name="commits")
    message = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self) -> str:
        return f"Commit #{self.pk} on project {self.project_id}"
