"""Account model for AppForge.

An `Account` is a login identity (email + password, and optionally a linked
GitHub id). Membership in workspaces lives in `workspaces.WorkspaceUser`; an
account may belong to several workspaces and `current_user` remembers which
membership it last worked in, so fresh tokens land in that workspace.

Behavior
--------
- `email` is unique and doubles as `username` so Django's `ModelBackend`
  authenticates with `authenticate(username=email, password=...)`.
- OAuth-created accounts have an unusable password.
"""

from django.contrib.auth.models import AbstractUser, UserManager
from django.db import models


class AccountManager(UserManager):
    def create_account(self, email: str, password: str | None = None, **extra_fields):
        """Create an account whose username is its (normalized) email."""
        email = self.normalize_email(email)
        return self.create_user(username=email, email=email, password=password, **extra_fields)

    def get_by_email(self, email: str):
        return self.get(email__iexact=email)


class Account(AbstractUser):
    email = models.EmailField(unique=True)
    github_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    current_user = models.ForeignKey(
        "workspaces.WorkspaceUser",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    objects = AccountManager()

    def __str__(self) -> str:
        return self.email
