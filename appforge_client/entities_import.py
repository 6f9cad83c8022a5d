"""
Upload-and-track flow for Prisma schema imports.

States
------
    Idle ──select .prisma──▶ Submitting ──▶ Succeeded
      ▲                          │
      └──── select again ◀── Failed

- Only one file with a `.prisma` extension is accepted; anything else is
  ignored without touching the server.
- While submitting, `action_log` is a placeholder `PROCESSING` step; once the
  server answers it is the server's action, replaced wholesale by `poll()`.
- On success the pending-changes and entity-select queries are refetched once
  each. On failure the error is kept for the notification and the uploader is
  shown again.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from .action_log import Action, placeholder_action, render_action_log
from .analytics import AnalyticsEventNames, Tracker
from .errors import GraphQLRequestError, format_error
from .graphql import GraphQLClient, RefetchQuery, UploadFile
from .queries import (
    CREATE_ENTITIES_FROM_PRISMA_SCHEMA,
    GET_ACTION,
    GET_ENTITIES_FOR_ENTITY_SELECT_FIELD,
    GET_PENDING_CHANGES_STATUS,
)

logger = logging.getLogger(__name__)

MAX_FILES = 1
ACCEPTED_FILE_TYPES = {"text/plain": [".prisma"]}
PAGE_TITLE = "Entities Import"
ACTION_LOG_TITLE = "Import Schema"

REQUEST_ERRORS = (GraphQLRequestError, requests.RequestException, ValueError, KeyError, TypeError)
INCOMPLETE_RESPONSE_MESSAGE = "The server returned an incomplete import result."


class ImportState(str, enum.Enum):
    IDLE = "Idle"
    SUBMITTING = "Submitting"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass(frozen=True)
class SelectedFile:
    name: str
    content: bytes
    content_type: str = "text/plain"

    @classmethod
    def from_path(cls, path: str) -> "SelectedFile":
        with open(path, "rb") as fh:
            return cls(name=os.path.basename(path), content=fh.read())

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()


def accepts(files: Sequence[SelectedFile]) -> bool:
    allowed = {ext for exts in ACCEPTED_FILE_TYPES.values() for ext in exts}
    return len(files) == MAX_FILES and files[0].extension in allowed


class EntitiesImport:
    def __init__(
        self,
        client: GraphQLClient,
        project_id: str,
        resource_id: str,
        tracker: Optional[Tracker] = None,
    ) -> None:
        self.client = client
        self.project_id = str(project_id)
        self.resource_id = str(resource_id)
        self.tracker = tracker or Tracker()
        self.state = ImportState.IDLE
        self.action: Optional[Action] = None
        self.entities: List[Dict[str, Any]] = []
        self.error: Optional[BaseException] = None
        self._listeners: List[Callable[["EntitiesImport"], None]] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    def subscribe(self, listener: Callable[["EntitiesImport"], None]) -> None:
        """Call `listener(self)` after every state change."""
        self._listeners.append(listener)

    def _set_state(self, state: ImportState) -> None:
        self.state = state
        for listener in self._listeners:
            listener(self)

    @property
    def action_log(self) -> Optional[Action]:
        if self.action is not None:
            return self.action
        if self.state is ImportState.SUBMITTING:
            return placeholder_action()
        return None

    @property
    def shows_action_log(self) -> bool:
        return self.state in (ImportState.SUBMITTING, ImportState.SUCCEEDED)

    @property
    def error_message(self) -> Optional[str]:
        return format_error(self.error)

    def refetch_queries(self) -> List[RefetchQuery]:
        return [
            RefetchQuery.of("pendingChangesStatus", GET_PENDING_CHANGES_STATUS, projectId=self.project_id),
            RefetchQuery.of(
                "getEntitiesForEntitySelectField",
                GET_ENTITIES_FOR_ENTITY_SELECT_FIELD,
                resourceId=self.resource_id,
            ),
        ]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def on_files_selected(self, files: Sequence[SelectedFile]) -> bool:
        """Submit the selected file; True when the import request succeeded."""
        if self.state is ImportState.SUBMITTING:
            logger.debug("Ignoring file selection while an upload is in flight")
            return False
        if not accepts(files):
            logger.info("Rejected selection: exactly one .prisma file is accepted")
            return False

        file = files[0]
        self.tracker.track_event(AnalyticsEventNames.IMPORT_PRISMA_SCHEMA_SELECT_FILE, fileName=file.name)

        self.action = None
        self.entities = []
        self.error = None
        self._set_state(ImportState.SUBMITTING)
        try:
            data = self.client.upload(
                CREATE_ENTITIES_FROM_PRISMA_SCHEMA,
                variables={"data": {"resourceId": self.resource_id}, "file": None},
                files={"variables.file": UploadFile(file.name, file.content, file.content_type)},
                operation_name="createEntitiesFromPrismaSchema",
            )
            result = (data or {}).get("createEntitiesFromPrismaSchema")
            if not result or not result.get("actionLog"):
                raise ValueError(INCOMPLETE_RESPONSE_MESSAGE)
            action = Action.from_payload(result["actionLog"])
        except REQUEST_ERRORS as exc:
            logger.error("Prisma schema upload failed: %s", exc)
            self.error = exc
            self._set_state(ImportState.FAILED)
            return False

        self.action = action
        self.entities = list(result.get("entities") or [])
        self._set_state(ImportState.SUCCEEDED)
        self._refetch()
        return True

    def _refetch(self) -> None:
        try:
            self.client.refetch(self.refetch_queries())
        except REQUEST_ERRORS as exc:
            logger.warning("Refetching dependent queries failed: %s", exc)

    def poll(self) -> Optional[Action]:
        """Fetch the current server action and replace the snapshot."""
        if self.action is None:
            return None
        data = self.client.execute(GET_ACTION, {"id": self.action.id}, "getAction")
        if data.get("action") is not None:
            self.action = Action.from_payload(data["action"])
            self._set_state(self.state)
        return self.action

    def dismiss_error(self) -> None:
        self.error = None
        self._set_state(self.state)

    def reset(self) -> None:
        self.action = None
        self.entities = []
        self.error = None
        self._set_state(ImportState.IDLE)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self) -> str:
        lines = [
            PAGE_TITLE,
            "",
            "Import Prisma schema file",
            "upload a Prisma schema file to import its content, and create entities and relations.",
            "Only '*.prisma' files are supported.",
            "",
        ]
        if self.shows_action_log:
            lines.append(render_action_log(self.action_log, title=ACTION_LOG_TITLE))
        else:
            lines.append(f"[ Select a .prisma file (max {MAX_FILES}) ]")
        if self.error is not None:
            lines.extend(["", f"! {self.error_message}"])
        return "\n".join(lines)
