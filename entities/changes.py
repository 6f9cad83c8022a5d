"""
Pending changes: entity edits since the project's last commit.

A change is reported per entity, classified as:
- `Create`: created after the last commit (or never committed) and still live;
- `Update`: created before, updated after, still live;
- `Delete`: created before and soft-deleted after.

Entities created and deleted between two commits never show up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from django.db import transaction
from django.db.models import Q

from core.exceptions import BadUserInput, NotFound
from workspaces.models import Commit, Project

from .models import Entity


class ChangeAction:
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


@dataclass
class PendingChange:
    action: str
    origin: Entity
    origin_type: str = "Entity"

    @property
    def origin_id(self) -> int:
        return self.origin.pk


def pending_changes(project: Project) -> List[PendingChange]:
    last = project.last_commit()
    since = last.created_at if last is not None else None

    qs = Entity.all_objects.filter(resource__project=project, resource__deleted_at__isnull=True)
    if since is not None:
        qs = qs.filter(Q(created_at__gt=since) | Q(updated_at__gt=since) | Q(deleted_at__gt=since))

    changes: List[PendingChange] = []
    for entity in qs.order_by("id"):
        created_after = since is None or entity.created_at > since
        if entity.deleted_at is not None:
            if created_after:
                continue
            changes.append(PendingChange(ChangeAction.DELETE, entity))
        elif created_after:
            changes.append(PendingChange(ChangeAction.CREATE, entity))
        else:
            changes.append(PendingChange(ChangeAction.UPDATE, entity))
    return changes


@transaction.atomic
def commit(user, project_id, message: str) -> Commit:
    project = Project.objects.for_workspace(user.workspace_id).filter(pk=project_id).first()
    if project is None:
        raise NotFound(f"Project {project_id} not found")
    message = (message or "").strip()
    if not message:
        raise BadUserInput("Commit message must not be empty", field="message")
    return Commit.objects.create(project=project, user=user, message=message)
