"""Root GraphQL schema: the per-app query and mutation roots merged together."""

import graphene

from actions.schema import ActionQuery
from authentication.schema import AuthMutation, AuthQuery
from entities.schema import EntityMutation, EntityQuery
from workspaces.schema import WorkspaceMutation, WorkspaceQuery


class Query(AuthQuery, WorkspaceQuery, EntityQuery, ActionQuery, graphene.ObjectType):
    pass


class Mutation(AuthMutation, WorkspaceMutation, EntityMutation, graphene.ObjectType):
    pass


schema = graphene.Schema(query=Query, mutation=Mutation)
