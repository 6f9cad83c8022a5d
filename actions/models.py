"""
Action tracking models.

An `Action` is one long-running server operation (e.g. a Prisma schema
import). It is made of ordered `ActionStep`s, each holding ordered
`ActionLog` lines. Readers always get steps and logs in insertion order
(ascending primary key); nothing reorders them afterwards.
"""

from __future__ import annotations

from django.db import models


class ActionStepStatus(models.TextChoices):
    WAITING = "Waiting", "Waiting"
    RUNNING = "Running", "Running"
    SUCCESS = "Success", "Success"
    FAILED = "Failed", "Failed"


FINAL_STEP_STATUSES = frozenset({ActionStepStatus.SUCCESS, ActionStepStatus.FAILED})


class ActionLogLevel(models.TextChoices):
    ERROR = "Error", "Error"
    WARNING = "Warning", "Warning"
    INFO = "Info", "Info"
    DEBUG = "Debug", "Debug"


class Action(models.Model):
    workspace = models.ForeignKey(
        "workspaces.Workspace", on_delete=models.CASCADE, related_name="actions"
    )
    resource = models.ForeignKey(
        "workspaces.Resource", on_delete=models.SET_NULL, null=True, blank=True, related_name="actions"
    )
    user = models.ForeignKey(
        "workspaces.WorkspaceUser", on_delete=models.SET_NULL, null=True, blank=True, related_name="actions"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("id",)

    def __str__(self) -> str:
        return f"Action #{self.pk}"


class ActionStep(models.Model):
    action = models.ForeignKey(Action, on_delete=models.CASCADE, related_name="steps")
    name = models.CharField(max_length=100)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=ActionStepStatus.choices, default=ActionStepStatus.WAITING)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("id",)

    def __str__(self) -> str:
        return f"{self.name} [{self.status}]"

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_STEP_STATUSES


class ActionLog(models.Model):
    step = models.ForeignKey(ActionStep, on_delete=models.CASCADE, related_name="logs")
    message = models.TextField()
    level = models.CharField(max_length=16, choices=ActionLogLevel.choices, default=ActionLogLevel.INFO)
    meta = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("id",)

    def __str__(self) -> str:
        return f"[{self.level}] {self.message}"
