"""GraphQL operations for accounts, login and API tokens."""

from __future__ import annotations

import graphene
from django.contrib.auth import get_user_model
from graphene_django import DjangoObjectType

from core.exceptions import NotFound
from workspaces.schema import UserType

from .guards import gql_auth_guard
from .models import ApiToken
from .module import auth_module

Account = get_user_model()


class AccountType(DjangoObjectType):
    class Meta:
        model = Account
        name = "Account"
        fields = ("id", "email", "first_name", "last_name", "github_id", "date_joined")


class AuthType(graphene.ObjectType):
    class Meta:
        name = "Auth"

    token = graphene.String(required=True)


class ApiTokenType(DjangoObjectType):
    token = graphene.String(description="Only returned by createApiToken.")

    class Meta:
        model = ApiToken
        name = "ApiToken"
        fields = ("id", "name", "preview_chars", "last_access_at", "created_at")

    def resolve_token(self, info):
        return getattr(self, "raw_token", None)


class LoginInput(graphene.InputObjectType):
    email = graphene.String(required=True)
    password = graphene.String(required=True)


class SignupInput(graphene.InputObjectType):
    email = graphene.String(required=True)
    password = graphene.String(required=True)
    first_name = graphene.String()
    last_name = graphene.String()
    workspace_name = graphene.String()


class ChangePasswordInput(graphene.InputObjectType):
    old_password = graphene.String(required=True)
    new_password = graphene.String(required=True)


class WorkspaceWhereUniqueInput(graphene.InputObjectType):
    id = graphene.ID(required=True)


class ApiTokenCreateInput(graphene.InputObjectType):
    name = graphene.String(required=True)


class AuthQuery(graphene.ObjectType):
    me = graphene.Field(graphene.NonNull(UserType))
    user_api_tokens = graphene.List(graphene.NonNull(ApiTokenType), required=True)

    @gql_auth_guard
    def resolve_me(root, info):
        return info.context.workspace_user

    @gql_auth_guard
    def resolve_user_api_tokens(root, info):
        return ApiToken.objects.filter(user=info.context.workspace_user)


class AuthMutation(graphene.ObjectType):
    login = graphene.Field(graphene.NonNull(AuthType), data=LoginInput(required=True))
    signup = graphene.Field(graphene.NonNull(AuthType), data=SignupInput(required=True))
    change_password = graphene.Field(graphene.NonNull(AccountType), data=ChangePasswordInput(required=True))
    set_current_workspace = graphene.Field(graphene.NonNull(AuthType), data=WorkspaceWhereUniqueInput(required=True))
    create_api_token = graphene.Field(graphene.NonNull(ApiTokenType), data=ApiTokenCreateInput(required=True))
    delete_api_token = graphene.Field(graphene.NonNull(ApiTokenType), id=graphene.ID(required=True))

    def resolve_login(root, info, data):
        return AuthType(token=auth_module.auth_service.login(data.email, data.password))

    def resolve_signup(root, info, data):
        token = auth_module.auth_service.signup(
            data.email,
            data.password,
            first_name=data.first_name or "",
            last_name=data.last_name or "",
            workspace_name=data.workspace_name,
        )
        return AuthType(token=token)

    @gql_auth_guard
    def resolve_change_password(root, info, data):
        account = info.context.workspace_user.account
        return auth_module.auth_service.change_password(account, data.old_password, data.new_password)

    @gql_auth_guard
    def resolve_set_current_workspace(root, info, data):
        account = info.context.workspace_user.account
        return AuthType(token=auth_module.auth_service.set_current_workspace(account, data.id))

    @gql_auth_guard
    def resolve_create_api_token(root, info, data):
        api_token, raw = auth_module.auth_service.create_api_token(info.context.workspace_user, data.name)
        api_token.raw_token = raw
        return api_token

    @gql_auth_guard
    def resolve_delete_api_token(root, info, id):
        api_token = ApiToken.objects.filter(pk=id, user=info.context.workspace_user).first()
        if api_token is None:
            raise NotFound(f"API token {id} not found")
        api_token.delete()
        api_token.id = id
        return api_token
