"""
Action log snapshots and their text rendering.

Snapshots are frozen: a new server response or poll replaces the whole
`Action`, nothing is patched in place. Steps and logs keep the order the
server sent them in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

STEP_STATUS_WAITING = "Waiting"
STEP_STATUS_RUNNING = "Running"
STEP_STATUS_SUCCESS = "Success"
STEP_STATUS_FAILED = "Failed"

LOG_LEVEL_ERROR = "Error"
LOG_LEVEL_WARNING = "Warning"
LOG_LEVEL_INFO = "Info"
LOG_LEVEL_DEBUG = "Debug"

STATUS_MARKERS = {
    STEP_STATUS_WAITING: "[ ]",
    STEP_STATUS_RUNNING: "[~]",
    STEP_STATUS_SUCCESS: "[x]",
    STEP_STATUS_FAILED: "[!]",
}

PLACEHOLDER_STEP_NAME = "PROCESSING"
PLACEHOLDER_STEP_MESSAGE = "Import Prisma schema file"
PLACEHOLDER_LOG_MESSAGE = "Processing Prisma schema file"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class ActionLogEntry:
    id: str
    message: str
    level: str
    created_at: Optional[datetime]
    meta: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ActionLogEntry":
        return cls(
            id=str(payload["id"]),
            message=payload.get("message") or "",
            level=payload.get("level") or LOG_LEVEL_INFO,
            created_at=parse_timestamp(payload.get("createdAt")),
            meta=payload.get("meta") or {},
        )


@dataclass(frozen=True)
class ActionStep:
    id: str
    name: str
    message: str
    status: str
    created_at: Optional[datetime]
    completed_at: Optional[datetime] = None
    logs: Tuple[ActionLogEntry, ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ActionStep":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            message=payload.get("message") or "",
            status=payload.get("status") or STEP_STATUS_WAITING,
            created_at=parse_timestamp(payload.get("createdAt")),
            completed_at=parse_timestamp(payload.get("completedAt")),
            logs=tuple(ActionLogEntry.from_payload(log) for log in payload.get("logs") or []),
        )

    @property
    def is_final(self) -> bool:
        return self.status in (STEP_STATUS_SUCCESS, STEP_STATUS_FAILED)


@dataclass(frozen=True)
class Action:
    id: str
    created_at: Optional[datetime]
    steps: Tuple[ActionStep, ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Action":
        return cls(
            id=str(payload["id"]),
            created_at=parse_timestamp(payload.get("createdAt")),
            steps=tuple(ActionStep.from_payload(step) for step in payload.get("steps") or []),
        )

    @property
    def is_complete(self) -> bool:
        return bool(self.steps) and all(step.is_final for step in self.steps)


def placeholder_action(now: Optional[datetime] = None) -> Action:
    """The action shown before the server's first response arrives."""
    now = now or datetime.now(timezone.utc)
    log = ActionLogEntry(id="1", message=PLACEHOLDER_LOG_MESSAGE, level=LOG_LEVEL_INFO, created_at=now, meta={})
    step = ActionStep(
        id="1",
        name=PLACEHOLDER_STEP_NAME,
        message=PLACEHOLDER_STEP_MESSAGE,
        status=STEP_STATUS_RUNNING,
        created_at=now,
        logs=(log,),
    )
    return Action(id="1", created_at=now, steps=(step,))


def format_duration(start: Optional[datetime], end: Optional[datetime]) -> str:
    if start is None or end is None:
        return ""
    seconds = max((end - start).total_seconds(), 0.0)
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"


def _ts(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def render_action_log(action: Optional[Action], title: str = "Import Schema", version_number: str = "") -> str:
    """Text rendering of an action: title, then each step and its logs in order."""
    heading = f"{title} v{version_number}" if version_number else title
    lines: List[str] = [heading]
    if action is None:
        return heading
    for step in action.steps:
        marker = STATUS_MARKERS.get(step.status, "[?]")
        timing = f"started {_ts(step.created_at)}"
        duration = format_duration(step.created_at, step.completed_at)
        if duration:
            timing += f", took {duration}"
        lines.append(f"{marker} {step.message or step.name} ({step.status}; {timing})")
        for log in step.logs:
            lines.append(f"    {_ts(log.created_at)} {log.level.upper():<7} {log.message}")
    return "\n".join(lines)
