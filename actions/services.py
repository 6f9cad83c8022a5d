"""
Writing action progress.

The importer (and any other long-running operation) reports progress through
`ActionService`: it opens an `Action`, adds steps, appends logs, and finally
completes each step as `Success` or `Failed`. Every call commits its own row
immediately, so a poller sees progress while the operation is still running
and a failed operation keeps its logs even when its own writes roll back.

Log lines are mirrored to the Python logger `actions` so server logs carry the
same story the client renders.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.utils import timezone

from .models import (
    FINAL_STEP_STATUSES,
    Action,
    ActionLog,
    ActionLogLevel,
    ActionStep,
    ActionStepStatus,
)

logger = logging.getLogger(__name__)

_PY_LEVELS = {
    ActionLogLevel.ERROR: logging.ERROR,
    ActionLogLevel.WARNING: logging.WARNING,
    ActionLogLevel.INFO: logging.INFO,
    ActionLogLevel.DEBUG: logging.DEBUG,
}


class ActionService:

    @staticmethod
    def create_action(workspace_id, resource=None, user=None) -> Action:
        return Action.objects.create(workspace_id=workspace_id, resource=resource, user=user)

    @staticmethod
    def create_step(
        action: Action,
        name: str,
        message: str,
        status: str = ActionStepStatus.RUNNING,
    ) -> ActionStep:
        if status in FINAL_STEP_STATUSES:
            raise ValueError("A step cannot be created in a final status")
        return ActionStep.objects.create(action=action, name=name, message=message, status=status)

    @staticmethod
    def log(
        step: ActionStep,
        level: str,
        message: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> ActionLog:
        logger.log(
            _PY_LEVELS.get(level, logging.INFO),
            "action=%s step=%s %s",
            step.action_id,
            step.name,
            message,
        )
        return ActionLog.objects.create(step=step, level=level, message=message, meta=meta or {})

    @classmethod
    def info(cls, step: ActionStep, message: str, meta=None) -> ActionLog:
        return cls.log(step, ActionLogLevel.INFO, message, meta)

    @classmethod
    def warning(cls, step: ActionStep, message: str, meta=None) -> ActionLog:
        return cls.log(step, ActionLogLevel.WARNING, message, meta)

    @classmethod
    def error(cls, step: ActionStep, message: str, meta=None) -> ActionLog:
        return cls.log(step, ActionLogLevel.ERROR, message, meta)

    @classmethod
    def debug(cls, step: ActionStep, message: str, meta=None) -> ActionLog:
        return cls.log(step, ActionLogLevel.DEBUG, message, meta)

    @staticmethod
    def complete(step: ActionStep, status: str) -> ActionStep:
        """Finish a step. Only `Success`/`Failed` are accepted, and only once."""
        if status not in FINAL_STEP_STATUSES:
            raise ValueError(f"Cannot complete a step with status {status!r}")
        if step.is_final:
            raise ValueError(f"Step {step.pk} is already completed ({step.status})")
        step.status = status
        step.completed_at = timezone.now()
        step.save(update_fields=["status", "completed_at"])
        return step
