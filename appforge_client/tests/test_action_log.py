from datetime import datetime, timezone
from unittest import TestCase

from appforge_client.action_log import (
    Action,
    format_duration,
    placeholder_action,
    render_action_log,
)

from .payloads import action_payload


class ActionSnapshotTests(TestCase):

    def test_from_payload_keeps_server_order(self):
        action = Action.from_payload(action_payload())
        self.assertEqual(action.id, "41")
        step = action.steps[0]
        self.assertEqual([log.id for log in step.logs], ["1", "2", "3"])
        self.assertEqual(step.logs[1].meta, {"line": 12})
        self.assertEqual(step.logs[0].created_at, datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc))
        self.assertTrue(action.is_complete)

    def test_running_step_is_not_complete(self):
        action = Action.from_payload(action_payload(status="Running", completed_at=None))
        self.assertFalse(action.is_complete)
        self.assertFalse(Action(id="1", created_at=None).is_complete)

    def test_placeholder(self):
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        action = placeholder_action(now)
        step = action.steps[0]
        self.assertEqual((step.name, step.message, step.status), ("PROCESSING", "Import Prisma schema file", "Running"))
        self.assertEqual([log.message for log in step.logs], ["Processing Prisma schema file"])
        self.assertFalse(action.is_complete)


class RenderActionLogTests(TestCase):

    def test_render_lists_steps_then_logs_in_order(self):
        text = render_action_log(Action.from_payload(action_payload()), version_number="2")
        lines = text.splitlines()
        self.assertEqual(lines[0], "Import Schema v2")
        self.assertEqual(
            lines[1],
            "[x] Import Prisma schema file (Success; started 2024-05-01 10:00:00, took 2.5s)",
        )
        self.assertEqual(len(lines), 5)
        self.assertIn("INFO", lines[2])
        self.assertTrue(lines[2].endswith("Processing Prisma schema file"))
        self.assertIn("WARNING", lines[3])
        self.assertTrue(lines[4].endswith("Created 2 entities"))

    def test_failed_step_marker(self):
        text = render_action_log(Action.from_payload(action_payload(status="Failed", logs=[])))
        self.assertTrue(text.splitlines()[1].startswith("[!] "))

    def test_no_action(self):
        self.assertEqual(render_action_log(None, title="Import Schema"), "Import Schema")

    def test_format_duration(self):
        start = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        self.assertEqual(format_duration(start, start.replace(minute=2, second=5)), "2m 05s")
        self.assertEqual(format_duration(start, None), "")
