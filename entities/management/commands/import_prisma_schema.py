"""
Import a Prisma schema file into a service resource from the command line.

Runs the same importer as the `createEntitiesFromPrismaSchema` mutation and
prints the resulting action log.

Usage
-----
    python manage.py import_prisma_schema schema.prisma --resource 12 --user alice@example.com
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management.base import BaseCommand, CommandError, CommandParser

from appforge_client.action_log import Action as ActionSnapshot
from appforge_client.action_log import render_action_log
from core.exceptions import AppError
from entities.prisma_import import import_prisma_schema, read_schema_upload
from entities.services import service_resource
from workspaces.models import Resource, WorkspaceUser

Account = get_user_model()


def action_payload(action) -> dict:
    """The action in the GraphQL response shape, for the client renderer."""
    return {
        "id": str(action.id),
        "createdAt": action.created_at.isoformat(),
        "steps": [
            {
                "id": str(step.id),
                "name": step.name,
                "message": step.message,
                "status": step.status,
                "createdAt": step.created_at.isoformat(),
                "completedAt": step.completed_at.isoformat() if step.completed_at else None,
                "logs": [
                    {
                        "id": str(log.id),
                        "message": log.message,
                        "level": log.level,
                        "meta": log.meta,
                        "createdAt": log.created_at.isoformat(),
                    }
                    for log in step.logs.order_by("id")
                ],
            }
            for step in action.steps.order_by("id")
        ],
    }


class Command(BaseCommand):
    help = "Create entities in a service resource from a .prisma schema file."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("path", help="Path to the .prisma file")
        parser.add_argument("--resource", type=int, required=True, help="Service resource id")
        parser.add_argument("--user", required=True, help="Email of an account that is a member of the workspace")

    def handle(self, *args, **opts):
        resource = Resource.objects.select_related("project").filter(pk=opts["resource"]).first()
        if resource is None:
            raise CommandError(f"Resource {opts['resource']} not found")
        account = Account.objects.filter(email__iexact=opts["user"]).first()
        if account is None:
            raise CommandError(f"No account with email {opts['user']}")
        user = WorkspaceUser.objects.filter(account=account, workspace_id=resource.project.workspace_id).first()
        if user is None:
            raise CommandError(f"{opts['user']} is not a member of the resource's workspace")

        try:
            with open(opts["path"], "rb") as fh:
                upload = SimpleUploadedFile(opts["path"], fh.read())
        except OSError as exc:
            raise CommandError(f"Cannot read {opts['path']}: {exc}")

        try:
            service_resource(user, resource.pk)
            result = import_prisma_schema(resource, read_schema_upload(upload), user=user)
        except AppError as exc:
            raise CommandError(exc.message)

        self.stdout.write(render_action_log(ActionSnapshot.from_payload(action_payload(result.action))))
        if not result.ok:
            raise CommandError(f"Import failed with {len(result.errors)} error(s)")
        self.stdout.write(self.style.SUCCESS(f"Created {len(result.entities)} entities"))
