"""
Auth0 (OIDC) login middleware.

Bound by `auth_module` to exactly `/auth/login`, `/auth/logout`,
`/auth/callback` and `/auth/auth-callback`; every other path passes through
untouched. On those routes it attaches `request.oidc` and:

- `/auth/login`     redirects to the Auth0 authorize endpoint (state in session);
- `/auth/callback`  exchanges the code, stores the userinfo in the session and
                    redirects to `/auth/auth-callback`;
- `/auth/logout`    clears the session and redirects to Auth0's logout endpoint.

`/auth/auth-callback` itself is served by `AuthCallbackView`, which issues the
AppForge token. When Auth0 is not configured the middleware does nothing and the
views answer 404.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.http import HttpRequest, HttpResponse, HttpResponseRedirect
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from requests_oauthlib import OAuth2Session

from core.middleware import json_error

from .module import (
    AUTH_AFTER_CALLBACK_PATH,
    AUTH_CALLBACK_PATH,
    AUTH_LOGIN_PATH,
    AUTH_LOGOUT_PATH,
    auth_module,
)

logger = logging.getLogger(__name__)

AUTH0_STATE_SESSION_KEY = "auth0_oauth_state"
AUTH0_USER_SESSION_KEY = "auth0_user"


@dataclass(frozen=True)
class Auth0Config:
    issuer_base_url: str
    client_id: str
    client_secret: str
    base_url: str

    @classmethod
    def from_settings(cls) -> Optional["Auth0Config"]:
        issuer = getattr(settings, "AUTH0_ISSUER_BASE_URL", None)
        client_id = getattr(settings, "AUTH0_CLIENT_ID", None)
        client_secret = getattr(settings, "AUTH0_CLIENT_SECRET", None)
        if not (issuer and client_id and client_secret):
            return None
        return cls(
            issuer_base_url=issuer.rstrip("/"),
            client_id=client_id,
            client_secret=client_secret,
            base_url=(getattr(settings, "AUTH0_BASE_URL", "") or "").rstrip("/"),
        )

    @property
    def callback_url(self) -> str:
        return f"{self.base_url}{AUTH_CALLBACK_PATH}"


@dataclass(frozen=True)
class OidcContext:
    user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user)


class Auth0Middleware:
    name = "auth0"

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path not in auth_module.routes_for(self.name):
            return self.get_response(request)
        config = Auth0Config.from_settings()
        if config is None:
            return self.get_response(request)

        request.oidc = OidcContext(user=request.session.get(AUTH0_USER_SESSION_KEY))
        if request.path == AUTH_LOGIN_PATH:
            return self.login(request, config)
        if request.path == AUTH_CALLBACK_PATH:
            return self.callback(request, config)
        if request.path == AUTH_LOGOUT_PATH:
            return self.logout(request, config)
        return self.get_response(request)

    @staticmethod
    def _session(config: Auth0Config, state: Optional[str] = None) -> OAuth2Session:
        return OAuth2Session(
            config.client_id,
            redirect_uri=config.callback_url,
            scope=["openid", "profile", "email"],
            state=state,
        )

    def login(self, request: HttpRequest, config: Auth0Config) -> HttpResponse:
        url, state = self._session(config).authorization_url(f"{config.issuer_base_url}/authorize")
        request.session[AUTH0_STATE_SESSION_KEY] = state
        return HttpResponseRedirect(url)

    def callback(self, request: HttpRequest, config: Auth0Config) -> HttpResponse:
        state = request.session.pop(AUTH0_STATE_SESSION_KEY, None)
        if not state:
            return json_error("Missing OAuth state.", "oauth_state_missing", 400)
        oauth = self._session(config, state=state)
        try:
            oauth.fetch_token(
                f"{config.issuer_base_url}/oauth/token",
                client_secret=config.client_secret,
                authorization_response=request.build_absolute_uri(),
            )
            userinfo = oauth.get(f"{config.issuer_base_url}/userinfo", timeout=10).json()
        except (OAuth2Error, requests.RequestException, ValueError) as exc:
            logger.warning("Auth0 code exchange failed: %s", exc)
            return json_error("Auth0 authentication failed.", "oauth_failed", 401)

        request.session[AUTH0_USER_SESSION_KEY] = userinfo
        return HttpResponseRedirect(AUTH_AFTER_CALLBACK_PATH)

    def logout(self, request: HttpRequest, config: Auth0Config) -> HttpResponse:
        request.session.flush()
        query = urlencode({"client_id": config.client_id, "returnTo": config.base_url or "/"})
        return HttpResponseRedirect(f"{config.issuer_base_url}/v2/logout?{query}")
