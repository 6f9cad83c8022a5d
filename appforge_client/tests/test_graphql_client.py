import json
from unittest import TestCase
from unittest.mock import MagicMock

import requests

from appforge_client.errors import GENERIC_ERROR_MESSAGE, GraphQLRequestError, format_error
from appforge_client.graphql import GraphQLClient, RefetchQuery, UploadFile

URL = "http://localhost:8000/graphql/"


def _response(body=None, status=200, json_error=False):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    if json_error:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error", response=resp)
    return resp


class GraphQLClientTests(TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.headers = {}
        self.client = GraphQLClient(URL, token="tok", session=self.session, timeout=5)

    def test_bearer_header(self):
        self.assertEqual(self.session.headers["Authorization"], "Bearer tok")

    def test_execute_posts_json(self):
        self.session.post.return_value = _response({"data": {"me": {"id": "1"}}})
        data = self.client.execute("query me { me { id } }", {"a": 1}, "me")
        self.assertEqual(data, {"me": {"id": "1"}})
        self.session.post.assert_called_once_with(
            URL,
            json={"query": "query me { me { id } }", "variables": {"a": 1}, "operationName": "me"},
            timeout=5,
        )

    def test_errors_raise(self):
        errors = [{"message": "Unauthorized", "extensions": {"code": "UNAUTHENTICATED"}}]
        self.session.post.return_value = _response({"errors": errors, "data": None})
        with self.assertRaises(GraphQLRequestError) as ctx:
            self.client.execute("{ me { id } }")
        self.assertEqual(ctx.exception.codes, ["UNAUTHENTICATED"])
        self.assertEqual(str(ctx.exception), "Unauthorized")

    def test_non_json_error_response_raises_http_error(self):
        self.session.post.return_value = _response(status=502, json_error=True)
        with self.assertRaises(requests.HTTPError):
            self.client.execute("{ me { id } }")

    def test_upload_sends_multipart_parts(self):
        self.session.post.return_value = _response({"data": {"ok": True}})
        self.client.upload(
            "mutation ($file: Upload!) { ok }",
            {"data": {"resourceId": "7"}, "file": None},
            {"variables.file": UploadFile("schema.prisma", b"model A {}", "text/plain")},
            operation_name="createEntitiesFromPrismaSchema",
        )
        kwargs = self.session.post.call_args.kwargs
        operations = json.loads(kwargs["data"]["operations"])
        self.assertIsNone(operations["variables"]["file"])
        self.assertEqual(operations["operationName"], "createEntitiesFromPrismaSchema")
        self.assertEqual(json.loads(kwargs["data"]["map"]), {"0": ["variables.file"]})
        self.assertEqual(kwargs["files"], {"0": ("schema.prisma", b"model A {}", "text/plain")})

    def test_query_caches_and_refetch_replaces(self):
        query = RefetchQuery.of("pendingChangesStatus", "query pendingChangesStatus { x }", projectId="3")
        self.session.post.side_effect = [_response({"data": {"v": 1}}), _response({"data": {"v": 2}})]
        self.client.query(query)
        self.assertEqual(self.client.cache.get(query), {"v": 1})
        self.client.refetch([query])
        self.assertEqual(self.client.cache.get(query), {"v": 2})
        self.assertEqual(self.session.post.call_count, 2)


class FormatErrorTests(TestCase):

    def test_messages(self):
        self.assertIsNone(format_error(None))
        self.assertEqual(format_error(GraphQLRequestError([{"message": "Nope"}])), "Nope")
        self.assertEqual(format_error(GraphQLRequestError([])), GENERIC_ERROR_MESSAGE)
        self.assertEqual(format_error(ValueError("")), GENERIC_ERROR_MESSAGE)
        self.assertIn("connection", format_error(requests.ConnectionError()))
        self.assertIn("too long", format_error(requests.Timeout()))

    def test_http_error_names_status(self):
        resp = MagicMock(spec=requests.Response)
        resp.status_code = 502
        resp.reason = "Bad Gateway"
        self.assertEqual(format_error(requests.HTTPError(response=resp)), "Server error 502: Bad Gateway")
