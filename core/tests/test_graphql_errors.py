from unittest.mock import patch

from django.test import override_settings

from core.tests.support import GraphQLTestCase
from workspaces.services import create_project

PENDING = "query ($projectId: ID!) { pendingChanges(projectId: $projectId) { originId } }"


class GraphQLErrorFormattingTests(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member()
        self.project = create_project(self.user, "Shop")

    def test_typed_errors_keep_their_code_and_message(self):
        result = self.gql("{ me { id } }")
        self.assertErrorCode(result, "UNAUTHENTICATED")
        self.assertEqual(result["errors"][0]["message"], "Unauthorized")

    @override_settings(DEBUG=False)
    def test_unexpected_errors_are_masked_and_logged(self):
        with patch("entities.changes.pending_changes", side_effect=RuntimeError("db exploded")):
            with self.assertLogs("core.graphql", level="ERROR"):
                result = self.gql(PENDING, {"projectId": self.project.id}, user=self.user)
        self.assertErrorCode(result, "INTERNAL_SERVER_ERROR")
        self.assertEqual(result["errors"][0]["message"], "Internal server error")


class RequestSizeLimitTests(GraphQLTestCase):

    @override_settings(MAX_REQUEST_BYTES=100)
    def test_oversized_body_is_rejected_with_413(self):
        resp = self.client.post(
            "/graphql/",
            data='{"query": "' + "x" * 500 + '"}',
            content_type="application/json",
        )
        self.assertEqual(resp.status_code, 413)
        self.assertEqual(resp.json()["code"], "request_too_large")
