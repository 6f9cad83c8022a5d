"""
Project URL configuration.

Routes
------
- /graphql/             -> GraphQL API (multipart uploads; GraphiQL when DEBUG)
- /health/              -> Liveness/readiness (DB + auth strategies)
- /admin/               -> Django admin
- /api/schema/          -> OpenAPI schema (drf-spectacular)
- /api/docs/            -> Swagger UI
- /api/auth/me/         -> Current user (JWT)
- /github, /github/callback          -> GitHub OAuth (GitHubAuthGuard)
- /auth/login, /auth/logout, /auth/callback, /auth/auth-callback
                        -> Auth0 routes (Auth0Middleware; 404 when unconfigured)
"""

from django.conf import settings
from django.contrib import admin
from django.urls import path
from django.views.decorators.csrf import csrf_exempt
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from authentication.views import (
    Auth0RouteView,
    AuthCallbackView,
    GitHubCallbackView,
    GitHubLoginView,
    MeView,
)
from core.graphql import AppGraphQLView
from core.views import health

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", health, name="health"),

    # GraphQL: bearer-token auth only, so CSRF does not apply.
    path("graphql/", csrf_exempt(AppGraphQLView.as_view(graphiql=settings.DEBUG)), name="graphql"),

    # OpenAPI schema & docs for the REST routes
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="api-docs"),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),

    # GitHub OAuth
    path("github", GitHubLoginView.as_view(), name="github-login"),
    path("github/callback", GitHubCallbackView.as_view(), name="github-callback"),

    # Auth0 (served by Auth0Middleware when configured)
    path("auth/login", Auth0RouteView.as_view(), name="auth0-login"),
    path("auth/logout", Auth0RouteView.as_view(), name="auth0-logout"),
    path("auth/callback", Auth0RouteView.as_view(), name="auth0-callback"),
    path("auth/auth-callback", AuthCallbackView.as_view(), name="auth0-after-callback"),
]
