from actions.models import ActionStepStatus
from actions.services import ActionService
from appforge_client.queries import GET_ACTION
from core.tests.support import GraphQLTestCase


class ActionQueryTests(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member()
        self.action = ActionService.create_action(self.user.workspace_id, user=self.user)
        first = ActionService.create_step(self.action, "PROCESSING", "Import Prisma schema file")
        ActionService.info(first, "Processing Prisma schema file")
        ActionService.warning(first, "Field skipped", {"line": 4})
        ActionService.complete(first, ActionStepStatus.SUCCESS)
        second = ActionService.create_step(self.action, "BUILD", "Build")
        ActionService.info(second, "Queued")

    def test_action_with_ordered_steps_and_logs(self):
        data = self.gql(GET_ACTION, {"id": self.action.id}, user=self.user)["data"]["action"]
        self.assertEqual(data["id"], str(self.action.id))
        self.assertEqual([s["name"] for s in data["steps"]], ["PROCESSING", "BUILD"])
        first, second = data["steps"]
        self.assertEqual(first["status"], "Success")
        self.assertIsNotNone(first["completedAt"])
        self.assertEqual([log["message"] for log in first["logs"]], ["Processing Prisma schema file", "Field skipped"])
        self.assertEqual(first["logs"][1]["level"], "Warning")
        self.assertEqual(first["logs"][1]["meta"], {"line": 4})
        self.assertEqual(second["status"], "Running")
        self.assertIsNone(second["completedAt"])

    def test_action_requires_authentication(self):
        self.assertErrorCode(self.gql(GET_ACTION, {"id": self.action.id}), "UNAUTHENTICATED")

    def test_action_of_another_workspace_is_forbidden(self):
        other = self.create_member("mallory@example.com", "Mallory's")
        self.assertErrorCode(self.gql(GET_ACTION, {"id": self.action.id}, user=other), "FORBIDDEN")
