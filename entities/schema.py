"""GraphQL types and operations for entities, the schema import and pending changes."""

from __future__ import annotations

import graphene
from graphene.types.generic import GenericScalar
from graphene_django import DjangoObjectType
from graphene_file_upload.scalars import Upload

from actions.schema import ActionType
from authentication.guards import gql_auth_guard
from core.exceptions import BadUserInput, NotFound
from core.graphql import enum_member
from workspaces.models import Project
from workspaces.permissions import OriginType, authorize
from workspaces.schema import CommitType

from . import changes
from .filters import EntityFilter
from .models import DataType, Entity, EntityField
from .prisma_import import import_prisma_schema, read_schema_upload
from .services import create_entity, delete_entity, service_resource

EnumDataType = graphene.Enum("EnumDataType", [(c.value, c.value) for c in DataType])
EnumPendingChangeAction = graphene.Enum(
    "EnumPendingChangeAction",
    [(v, v) for v in (changes.ChangeAction.CREATE, changes.ChangeAction.UPDATE, changes.ChangeAction.DELETE)],
)
EnumPendingChangeOriginType = graphene.Enum("EnumPendingChangeOriginType", [("Entity", "Entity")])


class EntityFieldType(DjangoObjectType):
    data_type = graphene.Field(EnumDataType, required=True)
    properties = GenericScalar(required=True)

    class Meta:
        model = EntityField
        name = "EntityField"
        fields = (
            "id", "name", "display_name", "data_type", "required", "unique",
            "searchable", "description", "properties", "position",
        )

    def resolve_data_type(self, info):
        return enum_member(EnumDataType, self.data_type)


class EntityType(DjangoObjectType):
    fields = graphene.List(graphene.NonNull(EntityFieldType), required=True)

    class Meta:
        model = Entity
        name = "Entity"
        fields = (
            "id", "name", "display_name", "plural_display_name", "description",
            "created_at", "updated_at", "deleted_at", "fields",
        )

    def resolve_fields(self, info):
        return self.fields.order_by("position", "id")


class PendingChangeType(graphene.ObjectType):
    class Meta:
        name = "PendingChange"

    action = graphene.Field(EnumPendingChangeAction, required=True)
    origin_type = graphene.Field(EnumPendingChangeOriginType, required=True)
    origin_id = graphene.ID(required=True)
    origin = graphene.Field(EntityType, required=True)

    def resolve_action(self, info):
        return enum_member(EnumPendingChangeAction, self.action)

    def resolve_origin_type(self, info):
        return enum_member(EnumPendingChangeOriginType, self.origin_type)


class UserEntitiesType(graphene.ObjectType):
    class Meta:
        name = "UserEntities"

    entities = graphene.List(graphene.NonNull(EntityType), required=True)
    action_log = graphene.Field(ActionType, required=True)


class CreateEntitiesFromPrismaSchemaInput(graphene.InputObjectType):
    resource_id = graphene.ID(required=True)


class EntityCreateInput(graphene.InputObjectType):
    resource_id = graphene.ID(required=True)
    name = graphene.String(required=True)
    display_name = graphene.String()
    plural_display_name = graphene.String()
    description = graphene.String()


class WhereUniqueInput(graphene.InputObjectType):
    id = graphene.ID(required=True)


class CommitCreateInput(graphene.InputObjectType):
    project_id = graphene.ID(required=True)
    message = graphene.String(required=True)


class EntityQuery(graphene.ObjectType):
    entities = graphene.List(
        graphene.NonNull(EntityType),
        required=True,
        resource_id=graphene.ID(required=True),
        name__icontains=graphene.String(),
    )
    entity = graphene.Field(EntityType, id=graphene.ID(required=True))
    pending_changes = graphene.List(
        graphene.NonNull(PendingChangeType), required=True, project_id=graphene.ID(required=True)
    )

    @gql_auth_guard
    @authorize(OriginType.RESOURCE, "resource_id")
    def resolve_entities(root, info, resource_id, **filters):
        filterset = EntityFilter({"resource": resource_id, **filters}, queryset=Entity.objects.all())
        if not filterset.is_valid():
            raise BadUserInput("Invalid entity filter", errors=filterset.errors.get_json_data())
        return filterset.qs

    @gql_auth_guard
    @authorize(OriginType.ENTITY, "id")
    def resolve_entity(root, info, id):
        entity = Entity.objects.filter(pk=id).first()
        if entity is None:
            raise NotFound(f"Entity {id} not found")
        return entity

    @gql_auth_guard
    @authorize(OriginType.PROJECT, "project_id")
    def resolve_pending_changes(root, info, project_id):
        return changes.pending_changes(Project.objects.get(pk=project_id))


class EntityMutation(graphene.ObjectType):
    create_entities_from_prisma_schema = graphene.Field(
        graphene.NonNull(UserEntitiesType),
        data=CreateEntitiesFromPrismaSchemaInput(required=True),
        file=Upload(required=True),
    )
    create_one_entity = graphene.Field(graphene.NonNull(EntityType), data=EntityCreateInput(required=True))
    delete_entity = graphene.Field(graphene.NonNull(EntityType), where=WhereUniqueInput(required=True))
    commit = graphene.Field(graphene.NonNull(CommitType), data=CommitCreateInput(required=True))

    @gql_auth_guard
    @authorize(OriginType.RESOURCE, "data.resource_id")
    def resolve_create_entities_from_prisma_schema(root, info, data, file):
        user = info.context.workspace_user
        resource = service_resource(user, data.resource_id)
        text = read_schema_upload(file)
        result = import_prisma_schema(resource, text, user=user)
        return UserEntitiesType(entities=result.entities, action_log=result.action)

    @gql_auth_guard
    @authorize(OriginType.RESOURCE, "data.resource_id")
    def resolve_create_one_entity(root, info, data):
        return create_entity(
            info.context.workspace_user,
            data.resource_id,
            data.name,
            display_name=data.display_name or "",
            plural_display_name=data.plural_display_name or "",
            description=data.description or "",
        )

    @gql_auth_guard
    @authorize(OriginType.ENTITY, "where.id")
    def resolve_delete_entity(root, info, where):
        return delete_entity(where.id)

    @gql_auth_guard
    @authorize(OriginType.PROJECT, "data.project_id")
    def resolve_commit(root, info, data):
        return changes.commit(info.context.workspace_user, data.project_id, data.message)
