"""
Guards in front of resolvers and OAuth routes.

`gql_auth_guard` wraps a graphene resolver: it authenticates the request with
the JWT strategy and exposes the membership as `info.context.workspace_user`
for `workspaces.permissions.authorize`.
"""

from __future__ import annotations

from functools import wraps

from core.exceptions import NotFound, Unauthenticated
from workspaces.models import WorkspaceUser


class GqlAuthGuard:
    strategy_name = "jwt"

    def __init__(self, module) -> None:
        self.module = module

    def can_activate(self, request) -> WorkspaceUser:
        strategy = self.module.get_strategy(self.strategy_name)
        user = strategy.authenticate(request) if strategy is not None else None
        if user is None:
            raise Unauthenticated()
        return user


class GitHubAuthGuard:
    strategy_name = "github"

    def __init__(self, module) -> None:
        self.module = module

    def can_activate(self, request):
        """Return the GitHub strategy; 404 when GitHub login is not configured."""
        strategy = self.module.get_strategy(self.strategy_name)
        if strategy is None:
            raise NotFound("GitHub login is not configured")
        return strategy


def gql_auth_guard(resolver):
    @wraps(resolver)
    def wrapper(root, info, **kwargs):
        from .module import auth_module

        auth_module.get_guard("gql").can_activate(info.context)
        return resolver(root, info, **kwargs)

    return wrapper
