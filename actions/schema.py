"""GraphQL types for actions and the `action(id)` poll query."""

from __future__ import annotations

import graphene
from graphene.types.generic import GenericScalar
from graphene_django import DjangoObjectType

from authentication.guards import gql_auth_guard
from core.exceptions import NotFound
from core.graphql import enum_member
from workspaces.permissions import OriginType, authorize

from .models import Action, ActionLog, ActionLogLevel, ActionStep, ActionStepStatus

EnumActionStepStatus = graphene.Enum("EnumActionStepStatus", [(c.value, c.value) for c in ActionStepStatus])
EnumActionLogLevel = graphene.Enum("EnumActionLogLevel", [(c.value, c.value) for c in ActionLogLevel])


class ActionLogType(DjangoObjectType):
    level = graphene.Field(EnumActionLogLevel, required=True)
    meta = GenericScalar(required=True)

    class Meta:
        model = ActionLog
        name = "ActionLog"
        fields = ("id", "created_at", "message", "meta", "level")

    def resolve_level(self, info):
        return enum_member(EnumActionLogLevel, self.level)


class ActionStepType(DjangoObjectType):
    status = graphene.Field(EnumActionStepStatus, required=True)
    logs = graphene.List(graphene.NonNull(ActionLogType), required=True)

    class Meta:
        model = ActionStep
        name = "ActionStep"
        fields = ("id", "name", "created_at", "message", "status", "completed_at", "logs")

    def resolve_status(self, info):
        return enum_member(EnumActionStepStatus, self.status)

    def resolve_logs(self, info):
        return self.logs.order_by("id")


class ActionType(DjangoObjectType):
    steps = graphene.List(graphene.NonNull(ActionStepType), required=True)

    class Meta:
        model = Action
        name = "Action"
        fields = ("id", "created_at", "steps")

    def resolve_steps(self, info):
        return self.steps.order_by("id")


class ActionQuery(graphene.ObjectType):
    action = graphene.Field(ActionType, id=graphene.ID(required=True))

    @gql_auth_guard
    @authorize(OriginType.ACTION, "id")
    def resolve_action(root, info, id):
        action = Action.objects.filter(pk=id).first()
        if action is None:
            raise NotFound(f"Action {id} not found")
        return action
