"""
Account authentication and token issuance.

Tokens
------
- User tokens: JWT (PyJWT, `settings.JWT_ALGORITHM`) carrying the account id,
  the workspace membership (`user_id`), the workspace id and roles; they expire
  after `JWT_EXPIRATION_SECONDS`.
- API tokens: JWT of type `ApiToken` without expiry. Only the SHA-256 hash is
  stored (`authentication.models.ApiToken`); deleting the row revokes it.

Identity providers
------------------
- Password login goes through `django.contrib.auth.authenticate`.
- GitHub and Auth0 profiles are matched by provider id, then by email, and
  create an account plus a first workspace when nothing matches.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Tuple

import jwt
from django.conf import settings
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.exceptions import BadUserInput, Conflict, Forbidden, Unauthenticated
from workspaces.models import WorkspaceUser
from workspaces.services import create_workspace

from .models import ApiToken, hash_token

logger = logging.getLogger(__name__)

Account = get_user_model()


class TokenType:
    USER = "User"
    API_TOKEN = "ApiToken"


def _password_errors(password: str, account=None) -> Optional[str]:
    try:
        validate_password(password, user=account)
    except ValidationError as exc:
        return " ".join(exc.messages)
    return None


class AuthService:

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------
    def _claims(self, user: WorkspaceUser, token_type: str) -> Dict[str, Any]:
        return {
            "type": token_type,
            "account_id": user.account_id,
            "user_id": user.id,
            "workspace_id": user.workspace_id,
            "roles": user.roles,
            "iat": int(time.time()),
        }

    def _encode(self, payload: Dict[str, Any]) -> str:
        return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    def prepare_token(self, user: WorkspaceUser) -> str:
        payload = self._claims(user, TokenType.USER)
        payload["exp"] = payload["iat"] + int(settings.JWT_EXPIRATION_SECONDS)
        return self._encode(payload)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise Unauthenticated("Token has expired")
        except jwt.InvalidTokenError:
            raise Unauthenticated("Invalid token")

    def validate_payload(self, payload: Dict[str, Any], raw_token: str) -> Optional[WorkspaceUser]:
        """Resolve a decoded token to its live workspace membership, or None."""
        user = (
            WorkspaceUser.objects.select_related("account", "workspace")
            .filter(
                pk=payload.get("user_id"),
                account_id=payload.get("account_id"),
                workspace_id=payload.get("workspace_id"),
            )
            .first()
        )
        if user is None or not user.account.is_active:
            return None

        if payload.get("type") == TokenType.API_TOKEN:
            updated = ApiToken.objects.filter(
                pk=payload.get("token_id"),
                user=user,
                token_hash=hash_token(raw_token),
            ).update(last_access_at=timezone.now())
            if not updated:
                return None
        elif payload.get("type") != TokenType.USER:
            return None
        return user

    @transaction.atomic
    def create_api_token(self, user: WorkspaceUser, name: str) -> Tuple[ApiToken, str]:
        name = (name or "").strip()
        if not name:
            raise BadUserInput("API token name must not be empty")
        api_token = ApiToken.objects.create(user=user, name=name, token_hash="")
        payload = self._claims(user, TokenType.API_TOKEN)
        payload["token_id"] = api_token.id
        raw = self._encode(payload)
        api_token.token_hash = hash_token(raw)
        api_token.preview_chars = raw[-4:]
        api_token.save(update_fields=["token_hash", "preview_chars"])
        return api_token, raw

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def current_user(self, account) -> WorkspaceUser:
        """The membership new tokens are issued for; creates a workspace if there is none."""
        user = None
        if account.current_user_id:
            user = WorkspaceUser.objects.filter(pk=account.current_user_id, account=account).first()
        if user is None:
            user = account.memberships.order_by("id").first()
        if user is None:
            user = create_workspace(account)
        if account.current_user_id != user.id:
            account.current_user = user
            account.save(update_fields=["current_user"])
        return user

    def login(self, email: str, password: str) -> str:
        account = authenticate(username=Account.objects.normalize_email(email or ""), password=password)
        if account is None or not account.is_active:
            raise Unauthenticated("Invalid email or password")
        return self.prepare_token(self.current_user(account))

    @transaction.atomic
    def signup(
        self,
        email: str,
        password: str,
        first_name: str = "",
        last_name: str = "",
        workspace_name: Optional[str] = None,
    ) -> str:
        if not getattr(settings, "ENABLE_SIGNUP", False):
            raise Forbidden("Signup is disabled")
        email = Account.objects.normalize_email(email or "")
        if not email:
            raise BadUserInput("Email is required")
        if Account.objects.filter(email__iexact=email).exists():
            raise Conflict("An account with this email already exists")
        problems = _password_errors(password)
        if problems:
            raise BadUserInput(problems, field="password")

        account = Account.objects.create_account(
            email, password=password, first_name=first_name or "", last_name=last_name or ""
        )
        user = create_workspace(account, workspace_name)
        logger.info("Account %s signed up", account.id)
        return self.prepare_token(user)

    def change_password(self, account, old_password: str, new_password: str):
        if not account.check_password(old_password):
            raise BadUserInput("Your old password was entered incorrectly", field="oldPassword")
        problems = _password_errors(new_password, account)
        if problems:
            raise BadUserInput(problems, field="newPassword")
        account.set_password(new_password)
        account.save(update_fields=["password"])
        return account

    def set_current_workspace(self, account, workspace_id) -> str:
        user = WorkspaceUser.objects.filter(account=account, workspace_id=workspace_id).first()
        if user is None:
            raise Forbidden("You are not a member of this workspace")
        account.current_user = user
        account.save(update_fields=["current_user"])
        return self.prepare_token(user)

    @transaction.atomic
    def get_or_create_github_account(self, profile: Dict[str, Any]) -> WorkspaceUser:
        github_id = str(profile.get("id") or "")
        if not github_id:
            raise Unauthenticated("GitHub profile has no id")
        email = profile.get("email")

        account = Account.objects.filter(github_id=github_id).first()
        if account is None and email:
            account = Account.objects.filter(email__iexact=email).first()
            if account is not None:
                account.github_id = github_id
                account.save(update_fields=["github_id"])
        if account is None:
            if not email:
                raise Unauthenticated("GitHub account has no verified email address")
            first_name, _, last_name = (profile.get("name") or profile.get("login") or "").partition(" ")
            account = Account.objects.create_account(
                email, first_name=first_name, last_name=last_name, github_id=github_id
            )
            logger.info("Account %s created from GitHub login %s", account.id, profile.get("login"))
        return self.current_user(account)

    @transaction.atomic
    def get_or_create_auth0_account(self, userinfo: Dict[str, Any]) -> WorkspaceUser:
        email = userinfo.get("email")
        if not email:
            raise Unauthenticated("Auth0 profile has no email address")
        account = Account.objects.filter(email__iexact=email).first()
        if account is None:
            account = Account.objects.create_account(
                email,
                first_name=userinfo.get("given_name") or "",
                last_name=userinfo.get("family_name") or "",
            )
            logger.info("Account %s created from Auth0 login", account.id)
        if not account.is_active:
            raise Unauthenticated("Account is disabled")
        return self.current_user(account)
