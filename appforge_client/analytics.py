"""Client analytics: events are written to the `appforge_client.analytics` logger."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class AnalyticsEventNames:
    IMPORT_PRISMA_SCHEMA_SELECT_FILE = "importPrismaSchemaSelectFile"


class Tracker:
    def track_event(self, event_name: str, **properties: Any) -> None:
        logger.info("event=%s %s", event_name, " ".join(f"{k}={v}" for k, v in sorted(properties.items())))
