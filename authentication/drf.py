"""DRF authentication backed by the JWT strategy."""

from __future__ import annotations

from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from core.exceptions import AppError

from .module import auth_module


class JwtAuthentication(BaseAuthentication):
    """
    `Authorization: Bearer <jwt>` for REST views.

    `request.user` is the account; `request.auth` is the workspace membership.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        strategy = auth_module.get_strategy("jwt")
        if strategy is None:
            return None
        try:
            user = strategy.authenticate(request._request)
        except AppError as exc:
            raise AuthenticationFailed(exc.message)
        if user is None:
            return None
        return user.account, user

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'
