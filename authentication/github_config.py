"""
GitHub OAuth options.

`GitHubStrategyConfigService.get_options()` returns `None` unless the client
id, the client secret and the callback URL all resolve. The secret comes from
`GITHUB_CLIENT_SECRET`, or from the mounted secret named by
`GITHUB_SECRET_SECRET_NAME`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from django.conf import settings

from .secrets import SecretsService


@dataclass(frozen=True)
class GitHubStrategyOptions:
    client_id: str
    client_secret: str
    callback_url: str
    scope: Tuple[str, ...] = ("user:email",)


class GitHubStrategyConfigService:
    def __init__(self, secrets: Optional[SecretsService] = None) -> None:
        self.secrets = secrets or SecretsService()

    def get_options(self) -> Optional[GitHubStrategyOptions]:
        client_id = getattr(settings, "GITHUB_CLIENT_ID", None)
        callback_url = getattr(settings, "GITHUB_REDIRECT_URI", None)
        if not client_id or not callback_url:
            return None

        client_secret = getattr(settings, "GITHUB_CLIENT_SECRET", None) or self._secret_from_store()
        if not client_secret:
            return None
        return GitHubStrategyOptions(
            client_id=client_id,
            client_secret=client_secret,
            callback_url=callback_url,
        )

    def _secret_from_store(self) -> Optional[str]:
        name = getattr(settings, "GITHUB_SECRET_SECRET_NAME", None)
        if not name:
            return None
        return self.secrets.get(name)
