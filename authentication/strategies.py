"""
Authentication strategies.

- `JwtStrategy` reads `Authorization: Bearer <token>`, decodes it with the
  `AuthService` and resolves the workspace membership. It is always registered.
- `GitHubStrategy` runs the GitHub OAuth2 authorization-code flow with
  requests-oauthlib. It is only built when `github_strategy_provider` gets
  options from `GitHubStrategyConfigService`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from requests_oauthlib import OAuth2Session

from core.exceptions import Unauthenticated
from workspaces.models import WorkspaceUser

from .github_config import GitHubStrategyConfigService, GitHubStrategyOptions
from .service import AuthService

logger = logging.getLogger(__name__)

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"

GITHUB_STATE_SESSION_KEY = "github_oauth_state"


class JwtStrategy:
    name = "jwt"

    def __init__(self, auth_service: AuthService) -> None:
        self.auth_service = auth_service

    @staticmethod
    def extract(request) -> Optional[str]:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    def validate(self, payload: Dict[str, Any], raw_token: str) -> Optional[WorkspaceUser]:
        return self.auth_service.validate_payload(payload, raw_token)

    def authenticate(self, request) -> Optional[WorkspaceUser]:
        """
        Return the caller's membership, None when no bearer token is present.

        Raises `Unauthenticated` for a token that is present but unusable.
        """
        cached = getattr(request, "workspace_user", None)
        if cached is not None:
            return cached
        token = self.extract(request)
        if token is None:
            return None
        payload = self.auth_service.decode(token)
        user = self.validate(payload, token)
        if user is None:
            raise Unauthenticated("Invalid token")
        request.workspace_user = user
        request.user = user.account
        return user


class GitHubStrategy:
    name = "github"

    def __init__(self, auth_service: AuthService, options: GitHubStrategyOptions) -> None:
        self.auth_service = auth_service
        self.options = options

    def _session(self, state: Optional[str] = None) -> OAuth2Session:
        return OAuth2Session(
            self.options.client_id,
            redirect_uri=self.options.callback_url,
            scope=list(self.options.scope),
            state=state,
        )

    def authorization_url(self, request) -> str:
        url, state = self._session().authorization_url(GITHUB_AUTHORIZE_URL)
        request.session[GITHUB_STATE_SESSION_KEY] = state
        return url

    def fetch_profile(self, oauth: OAuth2Session) -> Dict[str, Any]:
        profile = oauth.get(f"{GITHUB_API_URL}/user", timeout=10).json()
        if not profile.get("email"):
            emails = oauth.get(f"{GITHUB_API_URL}/user/emails", timeout=10).json()
            profile["email"] = next(
                (e.get("email") for e in emails if e.get("primary") and e.get("verified")),
                None,
            )
        return profile

    def validate(self, profile: Dict[str, Any]) -> WorkspaceUser:
        return self.auth_service.get_or_create_github_account(profile)

    def authenticate(self, request) -> WorkspaceUser:
        state = request.session.pop(GITHUB_STATE_SESSION_KEY, None)
        if not state:
            raise Unauthenticated("Missing OAuth state")
        oauth = self._session(state=state)
        try:
            oauth.fetch_token(
                GITHUB_TOKEN_URL,
                client_secret=self.options.client_secret,
                authorization_response=request.build_absolute_uri(),
            )
            profile = self.fetch_profile(oauth)
        except (OAuth2Error, requests.RequestException, ValueError) as exc:
            logger.warning("GitHub OAuth exchange failed: %s", exc)
            raise Unauthenticated("GitHub authentication failed") from exc
        return self.validate(profile)


def github_strategy_provider(
    auth_service: AuthService,
    config_service: Optional[GitHubStrategyConfigService] = None,
) -> Optional[GitHubStrategy]:
    """Build the GitHub strategy, or None when GitHub login is not configured."""
    options = (config_service or GitHubStrategyConfigService()).get_options()
    if options is None:
        return None
    return GitHubStrategy(auth_service, options)
