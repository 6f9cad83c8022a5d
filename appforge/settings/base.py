"""
Base Django settings for AppForge.

Layout
------
- Split settings: `base.py` (shared), `dev.py` (developer overrides), `prod.py` (hardened).
- `environ` is used to source configuration; a local `.env` is optional in dev.

API stack
---------
- Django 5.x + graphene-django (GraphQL at `/graphql/`, multipart uploads via
  graphene-file-upload) for the product API.
- DRF + drf-spectacular for the REST auth routes (OAuth redirects/callbacks),
  documented at `/api/docs/`.
- Authentication: JWT bearer tokens (PyJWT) issued by `authentication.service`.
  Sessions are only used to carry OAuth state between redirect legs.

Observability
-------------
- `core.middleware.RequestIDLogMiddleware` logs a single structured line per request
  (with request id, user id, duration, GraphQL operation). `RequestSizeLimitMiddleware`
  rejects large unsafe requests early with a 413 JSON error.

Security
--------
- Default cookie `SameSite=Lax`, `X_FRAME_OPTIONS=DENY`. Production hardening lives
  in `prod.py` (HSTS, SECURE_*). CSRF stays on for session-backed views; the
  GraphQL endpoint is bearer-token only and therefore CSRF exempt.
"""

from pathlib import Path
import environ

# ---------------------------------------------------------------------
# Paths & Env
# ---------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env = environ.Env(DEBUG=(bool, False))
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(str(env_file))

# ---------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------
SECRET_KEY = env("SECRET_KEY", default="dev-insecure-change-me")
DEBUG = env.bool("DEBUG", False)

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["127.0.0.1", "localhost", "testserver"])
CSRF_TRUSTED_ORIGINS = env.list(
    "CSRF_TRUSTED_ORIGINS",
    default=["http://127.0.0.1:8000", "http://localhost:8000"],
)

# ---------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------
INSTALLED_APPS = [
    # Django apps
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",
    "django_filters",
    "drf_spectacular",
    "graphene_django",

    # Local apps
    "core",
    "accounts",
    "workspaces",
    "actions",
    "entities",
    "authentication",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    # Reject large requests before parsing
    "core.middleware.RequestSizeLimitMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Auth0 login flow; only acts on the four /auth/* routes
    "authentication.auth0.Auth0Middleware",
    # Observability: request-id + structured request log (one line per request)
    "core.middleware.RequestIDLogMiddleware",
]

ROOT_URLCONF = "appforge.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "appforge.wsgi.application"

# ---------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------
DATABASES = {
    "default": env.db(
        "DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
    )
}

# ---------------------------------------------------------------------
# Password validation
# ---------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# ---------------------------------------------------------------------
# Internationalization
# ---------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------
# Static/Media
# ---------------------------------------------------------------------
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------------------------------------------------------
# GraphQL
# ---------------------------------------------------------------------
GRAPHENE = {
    "SCHEMA": "appforge.schema.schema",
}

# ---------------------------------------------------------------------
# DRF & API Schema (REST auth routes)
# ---------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "authentication.drf.JwtAuthentication",
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.ScopedRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "auth-oauth": env("DRF_THROTTLE_RATE_AUTH_OAUTH", default="30/min"),
    },
}

SPECTACULAR_SETTINGS = {
    "TITLE": "AppForge REST API",
    "DESCRIPTION": "OAuth login routes. The product API is GraphQL at /graphql/.",
    "VERSION": "0.1.0",
    "SERVERS": [
        {"url": "http://127.0.0.1:8000", "description": "Local Dev"},
        {"url": "/", "description": "Current"},
    ],
    "OPERATION_ID_DUPLICATE_MODE": "suffix",
    "SWAGGER_UI_SETTINGS": {"persistAuthorization": True},
}

# --- Size/Limits ---------------------------------------------------------------
# Max body size for unsafe methods (bytes); multipart schema uploads included.
MAX_REQUEST_BYTES = env.int("MAX_REQUEST_BYTES", default=10_000_000)
# Max bytes for an uploaded Prisma schema file
MAX_IMPORT_BYTES = env.int("MAX_IMPORT_BYTES", default=5_000_000)

# ---------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------
AUTH_USER_MODEL = "accounts.Account"

JWT_SECRET = env("JWT_SECRET", default=SECRET_KEY)
JWT_ALGORITHM = env("JWT_ALGORITHM", default="HS256")
JWT_EXPIRATION_SECONDS = env.int("JWT_EXPIRATION_SECONDS", default=60 * 60 * 24 * 2)

# Where OAuth callbacks send the browser once a token has been issued.
CLIENT_HOST = env("CLIENT_HOST", default="http://localhost:3001")
AUTH_TOKEN_COOKIE = env("AUTH_TOKEN_COOKIE", default="AJWT")
AUTH_TOKEN_COOKIE_DOMAIN = env("AUTH_TOKEN_COOKIE_DOMAIN", default=None)

ENABLE_SIGNUP = env.bool("ENABLE_SIGNUP", False)

# GitHub OAuth: the strategy is only registered when all three resolve.
GITHUB_CLIENT_ID = env("GITHUB_CLIENT_ID", default=None)
GITHUB_CLIENT_SECRET = env("GITHUB_CLIENT_SECRET", default=None)
GITHUB_REDIRECT_URI = env("GITHUB_REDIRECT_URI", default=None)
# Alternative source for the client secret: a file under SECRETS_DIR.
GITHUB_SECRET_SECRET_NAME = env("GITHUB_SECRET_SECRET_NAME", default=None)
SECRETS_DIR = env("SECRETS_DIR", default="/var/run/secrets/appforge")

# Auth0 (OIDC login). Middleware passes through when these are unset.
AUTH0_ISSUER_BASE_URL = env("AUTH0_ISSUER_BASE_URL", default=None)
AUTH0_CLIENT_ID = env("AUTH0_CLIENT_ID", default=None)
AUTH0_CLIENT_SECRET = env("AUTH0_CLIENT_SECRET", default=None)
AUTH0_BASE_URL = env("AUTH0_BASE_URL", default="http://localhost:3000")

# ---------------------------------------------------------------------
# Security defaults (safe baseline; prod hardening in prod.py)
# ---------------------------------------------------------------------
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SAMESITE = "Lax"
X_FRAME_OPTIONS = "DENY"

# ---------------------------------------------------------------------
# Logging (observability)
# ---------------------------------------------------------------------
# The RequestIDFilter injects `request_id` even for logs outside HTTP contexts.
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {"()": "core.logging.RequestIDFilter"},
    },
    "formatters": {
        "structured": {
            "format": "level=%(levelname)s logger=%(name)s request_id=%(request_id)s "
                      "method=%(method)s path=%(path)s status=%(status)s user_id=%(user_id)s "
                      "operation=%(operation)s duration_ms=%(duration_ms)s message=%(message)s"
        },
        "plain": {
            "format": "level=%(levelname)s logger=%(name)s request_id=%(request_id)s message=%(message)s"
        },
    },
    "handlers": {
        "request": {
            "class": "logging.StreamHandler",
            "filters": ["request_id"],
            "formatter": "structured",
        },
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_id"],
            "formatter": "plain",
        },
    },
    "loggers": {
        # The middleware logs one line per request to this logger.
        "appforge.request": {
            "handlers": ["request"],
            "level": "INFO",
            "propagate": False,
        },
        "authentication": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "entities": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "actions": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "workspaces": {"handlers": ["console"], "level": "INFO", "propagate": False},
        "core": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
