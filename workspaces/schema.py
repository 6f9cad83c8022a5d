"""GraphQL types and operations for workspaces, projects and resources."""

from __future__ import annotations

import graphene
from graphene_django import DjangoObjectType

from authentication.guards import gql_auth_guard
from core.exceptions import NotFound
from core.graphql import enum_member

from .models import Commit, Project, Resource, ResourceType, Workspace, WorkspaceUser
from .permissions import OriginType, authorize
from .services import create_project, create_service, create_workspace

EnumResourceType = graphene.Enum("EnumResourceType", [(c.value, c.value) for c in ResourceType])


class WorkspaceType(DjangoObjectType):
    class Meta:
        model = Workspace
        name = "Workspace"
        fields = ("id", "name", "created_at", "updated_at")


class UserType(DjangoObjectType):
    roles = graphene.List(graphene.NonNull(graphene.String), required=True)

    class Meta:
        model = WorkspaceUser
        name = "User"
        fields = ("id", "account", "workspace", "is_owner")


class ResourceObjectType(DjangoObjectType):
    resource_type = graphene.Field(EnumResourceType, required=True)

    class Meta:
        model = Resource
        name = "Resource"
        fields = ("id", "name", "description", "created_at", "updated_at", "project", "resource_type")

    def resolve_resource_type(self, info):
        return enum_member(EnumResourceType, self.resource_type)


class CommitType(DjangoObjectType):
    class Meta:
        model = Commit
        name = "Commit"
        fields = ("id", "message", "created_at", "user")


class ProjectType(DjangoObjectType):
    resources = graphene.List(graphene.NonNull(ResourceObjectType), required=True)

    class Meta:
        model = Project
        name = "Project"
        fields = ("id", "name", "description", "created_at", "updated_at", "workspace", "resources")

    def resolve_resources(self, info):
        return Resource.objects.filter(project=self)


class WorkspaceCreateInput(graphene.InputObjectType):
    name = graphene.String(required=True)


class ProjectCreateInput(graphene.InputObjectType):
    name = graphene.String(required=True)
    description = graphene.String()


class ServiceCreateInput(graphene.InputObjectType):
    project_id = graphene.ID(required=True)
    name = graphene.String(required=True)
    description = graphene.String()


class WorkspaceQuery(graphene.ObjectType):
    workspaces = graphene.List(graphene.NonNull(WorkspaceType), required=True)
    current_workspace = graphene.Field(WorkspaceType)
    projects = graphene.List(graphene.NonNull(ProjectType), required=True)
    project = graphene.Field(ProjectType, id=graphene.ID(required=True))
    resources = graphene.List(graphene.NonNull(ResourceObjectType), required=True, project_id=graphene.ID(required=True))

    @gql_auth_guard
    def resolve_workspaces(root, info):
        return Workspace.objects.filter(users__account_id=info.context.workspace_user.account_id)

    @gql_auth_guard
    def resolve_current_workspace(root, info):
        return info.context.workspace_user.workspace

    @gql_auth_guard
    def resolve_projects(root, info):
        return Project.objects.for_workspace(info.context.workspace_user.workspace_id)

    @gql_auth_guard
    @authorize(OriginType.PROJECT, "id")
    def resolve_project(root, info, id):
        project = Project.objects.filter(pk=id).first()
        if project is None:
            raise NotFound(f"Project {id} not found")
        return project

    @gql_auth_guard
    @authorize(OriginType.PROJECT, "project_id")
    def resolve_resources(root, info, project_id):
        return Resource.objects.filter(project_id=project_id)


class WorkspaceMutation(graphene.ObjectType):
    create_workspace = graphene.Field(graphene.NonNull(WorkspaceType), data=WorkspaceCreateInput(required=True))
    create_project = graphene.Field(graphene.NonNull(ProjectType), data=ProjectCreateInput(required=True))
    create_service = graphene.Field(graphene.NonNull(ResourceObjectType), data=ServiceCreateInput(required=True))

    @gql_auth_guard
    def resolve_create_workspace(root, info, data):
        user = create_workspace(info.context.workspace_user.account, data.name)
        return user.workspace

    @gql_auth_guard
    def resolve_create_project(root, info, data):
        return create_project(info.context.workspace_user, data.name, data.description or "")

    @gql_auth_guard
    @authorize(OriginType.PROJECT, "data.project_id")
    def resolve_create_service(root, info, data):
        return create_service(info.context.workspace_user, data.project_id, data.name, data.description or "")
