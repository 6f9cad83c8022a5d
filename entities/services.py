"""Entity creation and deletion outside of the schema import."""

from __future__ import annotations

import logging

from django.db import transaction

from core.exceptions import BadUserInput, Conflict, NotFound
from workspaces.models import Resource, ResourceType

from .models import DataType, Entity, EntityField
from .naming import display_name as default_display_name
from .naming import plural_display_name as default_plural_display_name

logger = logging.getLogger(__name__)

DEFAULT_FIELDS = (
    ("id", "Id", DataType.ID, {"idType": "CUID"}),
    ("createdAt", "Created At", DataType.CREATED_AT, {}),
    ("updatedAt", "Updated At", DataType.UPDATED_AT, {}),
)


def service_resource(user, resource_id) -> Resource:
    """The live service resource `resource_id` in the user's workspace."""
    resource = Resource.objects.for_workspace(user.workspace_id).filter(pk=resource_id).first()
    if resource is None:
        raise NotFound(f"Resource {resource_id} not found")
    if resource.resource_type != ResourceType.SERVICE:
        raise BadUserInput("Entities can only be added to a service resource", field="resourceId")
    return resource


@transaction.atomic
def create_entity(user, resource_id, name: str, display_name: str = "", plural_display_name: str = "",
                  description: str = "") -> Entity:
    resource = service_resource(user, resource_id)
    name = (name or "").strip()
    if not name.isidentifier():
        raise BadUserInput("Entity name must be a valid identifier", field="name")
    if Entity.objects.filter(resource=resource, name=name).exists():
        raise Conflict(f"Entity {name} already exists in this resource")

    entity = Entity.objects.create(
        resource=resource,
        name=name,
        display_name=display_name or default_display_name(name),
        plural_display_name=plural_display_name or default_plural_display_name(name),
        description=description or "",
    )
    for position, (field_name, field_display, data_type, properties) in enumerate(DEFAULT_FIELDS):
        EntityField.objects.create(
            entity=entity,
            name=field_name,
            display_name=field_display,
            data_type=data_type,
            required=True,
            unique=data_type == DataType.ID,
            searchable=data_type == DataType.ID,
            properties=properties,
            position=position,
        )
    return entity


def delete_entity(entity_id) -> Entity:
    entity = Entity.objects.filter(pk=entity_id).first()
    if entity is None:
        raise NotFound(f"Entity {entity_id} not found")
    entity.soft_delete()
    logger.info("Entity %s deleted", entity.pk)
    return entity
