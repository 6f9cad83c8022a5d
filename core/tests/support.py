"""Test helpers for GraphQL-over-HTTP tests (Django test client)."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.test import TestCase

from authentication.module import auth_module
from workspaces.services import create_workspace

GRAPHQL_URL = "/graphql/"


class GraphQLTestCase(TestCase):
    password = "Sturdy-pass-4821"

    def create_member(self, email: str = "alice@example.com", workspace_name: str = "Alice's workspace"):
        """An account with its own workspace; returns the owner `WorkspaceUser`."""
        account = get_user_model().objects.create_account(email, password=self.password)
        return create_workspace(account, workspace_name)

    def token_for(self, user) -> str:
        return auth_module.auth_service.prepare_token(user)

    def _headers(self, user=None, token: Optional[str] = None) -> Dict[str, str]:
        token = token or (self.token_for(user) if user is not None else None)
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"} if token else {}

    def gql(self, query: str, variables: Optional[Dict[str, Any]] = None, user=None, token=None) -> Dict[str, Any]:
        resp = self.client.post(
            GRAPHQL_URL,
            data=json.dumps({"query": query, "variables": variables or {}}),
            content_type="application/json",
            **self._headers(user, token),
        )
        return resp.json()

    def gql_upload(self, query: str, variables: Dict[str, Any], path: str, upload, user=None) -> Dict[str, Any]:
        resp = self.client.post(
            GRAPHQL_URL,
            data={
                "operations": json.dumps({"query": query, "variables": variables}),
                "map": json.dumps({"0": [path]}),
                "0": upload,
            },
            **self._headers(user),
        )
        return resp.json()

    def assertErrorCode(self, result: Dict[str, Any], code: str) -> None:
        errors = result.get("errors") or []
        self.assertTrue(errors, f"expected a {code} error, got {result}")
        self.assertEqual(errors[0].get("extensions", {}).get("code"), code, errors)
