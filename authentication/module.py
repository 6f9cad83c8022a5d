"""
Auth module wiring.

`auth_module.bootstrap()` runs from `AuthenticationConfig.ready()` and builds:

- the strategies: `jwt` always, `github` only when its provider yields one;
- the guards: `gql` (JWT for GraphQL resolvers) and `github` (OAuth routes);
- the middleware bindings: Auth0 acts on exactly the four `/auth/*` routes.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional

from .guards import GitHubAuthGuard, GqlAuthGuard
from .service import AuthService
from .strategies import JwtStrategy, github_strategy_provider

logger = logging.getLogger(__name__)

AUTH_LOGIN_PATH = "/auth/login"
AUTH_LOGOUT_PATH = "/auth/logout"
AUTH_CALLBACK_PATH = "/auth/callback"
AUTH_AFTER_CALLBACK_PATH = "/auth/auth-callback"

AUTH0_MIDDLEWARE_ROUTES = frozenset(
    {AUTH_LOGIN_PATH, AUTH_LOGOUT_PATH, AUTH_CALLBACK_PATH, AUTH_AFTER_CALLBACK_PATH}
)


class AuthModule:
    def __init__(self) -> None:
        self.auth_service = AuthService()
        self._strategies: Dict[str, object] = {}
        self._guards: Dict[str, object] = {}
        self._middleware_routes: Dict[str, FrozenSet[str]] = {}

    def bootstrap(self, config_service=None) -> "AuthModule":
        strategies = {JwtStrategy.name: JwtStrategy(self.auth_service)}
        github = github_strategy_provider(self.auth_service, config_service)
        if github is not None:
            strategies[github.name] = github

        self._strategies = strategies
        self._guards = {"gql": GqlAuthGuard(self), "github": GitHubAuthGuard(self)}
        self._middleware_routes = {"auth0": AUTH0_MIDDLEWARE_ROUTES}
        logger.info("Auth strategies registered: %s", ", ".join(sorted(strategies)))
        return self

    def get_strategy(self, name: str) -> Optional[object]:
        return self._strategies.get(name)

    def strategy_names(self):
        return list(self._strategies)

    def get_guard(self, name: str):
        return self._guards[name]

    def routes_for(self, middleware: str) -> FrozenSet[str]:
        return self._middleware_routes.get(middleware, frozenset())


auth_module = AuthModule()
