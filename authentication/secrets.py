"""
Mounted-secret lookup.

Secrets (e.g. the GitHub OAuth client secret) may be provided as files under
`settings.SECRETS_DIR`, one file per secret, as done by Kubernetes secret
volumes and cloud secret-manager CSI drivers. A missing secret resolves to
`None`; callers decide whether that disables a feature.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from django.conf import settings

logger = logging.getLogger(__name__)


class SecretsService:
    def __init__(self, base_dir: str | Path | None = None) -> None:
        self.base_dir = Path(base_dir or settings.SECRETS_DIR)

    def get(self, name: str) -> Optional[str]:
        if not name or "/" in name or name.startswith("."):
            logger.warning("Refusing to read secret with unsafe name %r", name)
            return None
        path = self.base_dir / name
        try:
            value = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            logger.info("Secret %s not found under %s", name, self.base_dir)
            return None
        return value or None
