"""API tokens: long-lived JWTs whose SHA-256 hash is stored for revocation."""

from __future__ import annotations

import hashlib

from django.db import models


def hash_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ApiToken(models.Model):
    user = models.ForeignKey("workspaces.WorkspaceUser", on_delete=models.CASCADE, related_name="api_tokens")
    name = models.CharField(max_length=200)
    # SECURITY: only the hash and the last few characters are persisted.
    token_hash = models.CharField(max_length=64, db_index=True)
    preview_chars = models.CharField(max_length=8, blank=True)
    last_access_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self) -> str:
        return f"{self.name} (…{self.preview_chars})"
