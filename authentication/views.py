from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpResponseRedirect
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import permissions, serializers, status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from core.exceptions import AppError
from workspaces.permissions import IsWorkspaceMember

from .module import AUTH_LOGIN_PATH, auth_module

logger = logging.getLogger(__name__)


def token_redirect(request, token: str) -> HttpResponseRedirect:
    """Send the browser back to the client app with the token cookie set."""
    resp = HttpResponseRedirect(settings.CLIENT_HOST)
    resp.set_cookie(
        settings.AUTH_TOKEN_COOKIE,
        token,
        max_age=int(settings.JWT_EXPIRATION_SECONDS),
        domain=settings.AUTH_TOKEN_COOKIE_DOMAIN or None,
        secure=request.is_secure(),
        samesite="Lax",
    )
    return resp


def _error_response(exc: AppError, http_status: int) -> Response:
    return Response({"detail": exc.message, "code": exc.code.lower()}, status=http_status)


class _OAuthView(APIView):
    """Browser-facing OAuth legs: anonymous, throttled, never session-authenticated."""
    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth-oauth"


class GitHubLoginView(_OAuthView):
    """
    Start the GitHub OAuth flow (302 to github.com).
    404 when GitHub login is not configured.
    """

    @extend_schema(
        operation_id="auth_github",
        summary="Log in with GitHub",
        responses={
            302: OpenApiResponse(description="Redirect to GitHub"),
            404: OpenApiResponse(description='{"detail":"GitHub login is not configured","code":"not_found"}'),
        },
    )
    def get(self, request, *args, **kwargs):
        try:
            strategy = auth_module.get_guard("github").can_activate(request)
        except AppError as exc:
            return _error_response(exc, status.HTTP_404_NOT_FOUND)
        return HttpResponseRedirect(strategy.authorization_url(request))


class GitHubCallbackView(_OAuthView):
    """
    GitHub redirect target: exchange the code, issue a token, redirect to the client.
    """

    @extend_schema(
        operation_id="auth_github_callback",
        summary="GitHub OAuth callback",
        responses={
            302: OpenApiResponse(description="Token cookie set, redirect to the client"),
            401: OpenApiResponse(description="OAuth exchange failed"),
            404: OpenApiResponse(description="GitHub login is not configured"),
        },
    )
    def get(self, request, *args, **kwargs):
        try:
            strategy = auth_module.get_guard("github").can_activate(request)
        except AppError as exc:
            return _error_response(exc, status.HTTP_404_NOT_FOUND)
        try:
            user = strategy.authenticate(request)
        except AppError as exc:
            return _error_response(exc, status.HTTP_401_UNAUTHORIZED)
        logger.info("GitHub login for account %s", user.account_id)
        return token_redirect(request, auth_module.auth_service.prepare_token(user))


class Auth0RouteView(_OAuthView):
    """
    `/auth/login`, `/auth/logout`, `/auth/callback` are answered by
    `Auth0Middleware`; reaching the view means Auth0 is not configured.
    """

    @extend_schema(
        operation_id="auth_auth0_route",
        summary="Auth0 login routes",
        responses={
            302: OpenApiResponse(description="Handled by the Auth0 middleware"),
            404: OpenApiResponse(description="Auth0 login is not configured"),
        },
    )
    def get(self, request, *args, **kwargs):
        return Response(
            {"detail": "Auth0 login is not configured.", "code": "auth0_not_configured"},
            status=status.HTTP_404_NOT_FOUND,
        )


class AuthCallbackView(Auth0RouteView):
    """After the Auth0 callback: map the OIDC profile to an account and issue a token."""

    @extend_schema(
        operation_id="auth_auth0_after_callback",
        summary="Auth0 post-login",
        responses={
            302: OpenApiResponse(description="Token cookie set, redirect to the client"),
            401: OpenApiResponse(description="Profile rejected"),
            404: OpenApiResponse(description="Auth0 login is not configured"),
        },
    )
    def get(self, request, *args, **kwargs):
        oidc = getattr(request, "oidc", None)
        if oidc is None:
            return super().get(request, *args, **kwargs)
        if not oidc.is_authenticated:
            return HttpResponseRedirect(AUTH_LOGIN_PATH)
        service = auth_module.auth_service
        try:
            user = service.get_or_create_auth0_account(oidc.user)
        except AppError as exc:
            return _error_response(exc, status.HTTP_401_UNAUTHORIZED)
        return token_redirect(request, service.prepare_token(user))


class _MeSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    email = serializers.EmailField()
    workspace_id = serializers.IntegerField()
    roles = serializers.ListField(child=serializers.CharField())


class MeView(APIView):
    """
    Return the account and workspace behind the bearer token.
    """
    permission_classes = [permissions.IsAuthenticated, IsWorkspaceMember]

    @extend_schema(
        operation_id="auth_me",
        summary="Current user",
        responses={200: _MeSerializer, 401: OpenApiResponse(description="Not authenticated")},
    )
    def get(self, request, *args, **kwargs):
        membership = request.workspace_user
        payload = {
            "id": request.user.id,
            "email": request.user.email,
            "workspace_id": membership.workspace_id,
            "roles": membership.roles,
        }
        return Response(payload, status=status.HTTP_200_OK)
