"""
GraphQL authentication operations.

- login/signup return a JWT; `me` resolves the membership behind it.
- signup is gated by ENABLE_SIGNUP and rejects duplicate emails.
- API tokens authenticate like user tokens until deleted; only the hash is stored.
"""

import time

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.test import override_settings

from authentication.models import ApiToken, hash_token
from core.tests.support import GraphQLTestCase
from workspaces.services import create_workspace

LOGIN = """
mutation login($data: LoginInput!) { login(data: $data) { token } }
"""
SIGNUP = """
mutation signup($data: SignupInput!) { signup(data: $data) { token } }
"""
ME = """
query { me { id roles account { email } workspace { id name } } }
"""
CHANGE_PASSWORD = """
mutation ($data: ChangePasswordInput!) { changePassword(data: $data) { id email } }
"""
SET_CURRENT_WORKSPACE = """
mutation ($data: WorkspaceWhereUniqueInput!) { setCurrentWorkspace(data: $data) { token } }
"""
CREATE_API_TOKEN = """
mutation ($data: ApiTokenCreateInput!) { createApiToken(data: $data) { id name token previewChars } }
"""
DELETE_API_TOKEN = """
mutation ($id: ID!) { deleteApiToken(id: $id) { id } }
"""
API_TOKENS = """
query { userApiTokens { id name token lastAccessAt } }
"""


class LoginTests(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member("alice@example.com")

    def test_login_returns_token_for_current_workspace(self):
        result = self.gql(LOGIN, {"data": {"email": "alice@example.com", "password": self.password}})
        token = result["data"]["login"]["token"]
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        self.assertEqual(payload["user_id"], self.user.id)
        self.assertEqual(payload["workspace_id"], self.user.workspace_id)
        self.assertEqual(payload["type"], "User")
        self.assertIn("exp", payload)

        me = self.gql(ME, token=token)["data"]["me"]
        self.assertEqual(me["account"]["email"], "alice@example.com")
        self.assertEqual(me["roles"], ["ADMIN", "USER"])

    def test_login_email_domain_is_case_insensitive(self):
        result = self.gql(LOGIN, {"data": {"email": "alice@EXAMPLE.com", "password": self.password}})
        self.assertIn("token", result["data"]["login"])

    def test_wrong_password_is_unauthenticated(self):
        result = self.gql(LOGIN, {"data": {"email": "alice@example.com", "password": "nope"}})
        self.assertErrorCode(result, "UNAUTHENTICATED")
        self.assertEqual(result["errors"][0]["message"], "Invalid email or password")

    def test_me_requires_a_token(self):
        self.assertErrorCode(self.gql(ME), "UNAUTHENTICATED")

    def test_garbage_token_is_rejected(self):
        self.assertErrorCode(self.gql(ME, token="not-a-jwt"), "UNAUTHENTICATED")

    def test_expired_token_is_rejected(self):
        payload = {
            "type": "User",
            "account_id": self.user.account_id,
            "user_id": self.user.id,
            "workspace_id": self.user.workspace_id,
            "roles": self.user.roles,
            "iat": int(time.time()) - 100,
            "exp": int(time.time()) - 10,
        }
        token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        result = self.gql(ME, token=token)
        self.assertErrorCode(result, "UNAUTHENTICATED")
        self.assertEqual(result["errors"][0]["message"], "Token has expired")

    def test_inactive_account_token_is_rejected(self):
        token = self.token_for(self.user)
        get_user_model().objects.filter(pk=self.user.account_id).update(is_active=False)
        self.assertErrorCode(self.gql(ME, token=token), "UNAUTHENTICATED")


class SignupTests(GraphQLTestCase):
    data = {
        "email": "bob@example.com",
        "password": "Another-sturdy-pass-77",
        "firstName": "Bob",
        "workspaceName": "Bob's shop",
    }

    @override_settings(ENABLE_SIGNUP=False)
    def test_signup_disabled(self):
        result = self.gql(SIGNUP, {"data": self.data})
        self.assertErrorCode(result, "FORBIDDEN")
        self.assertFalse(get_user_model().objects.filter(email="bob@example.com").exists())

    @override_settings(ENABLE_SIGNUP=True)
    def test_signup_creates_account_and_workspace(self):
        result = self.gql(SIGNUP, {"data": self.data})
        token = result["data"]["signup"]["token"]
        me = self.gql(ME, token=token)["data"]["me"]
        self.assertEqual(me["account"]["email"], "bob@example.com")
        self.assertEqual(me["workspace"]["name"], "Bob's shop")

    @override_settings(ENABLE_SIGNUP=True)
    def test_duplicate_email_conflicts(self):
        self.create_member("bob@example.com")
        self.assertErrorCode(self.gql(SIGNUP, {"data": self.data}), "CONFLICT")

    @override_settings(ENABLE_SIGNUP=True)
    def test_weak_password_is_bad_input(self):
        data = dict(self.data, password="123")
        self.assertErrorCode(self.gql(SIGNUP, {"data": data}), "BAD_USER_INPUT")


class AccountMutationTests(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member("alice@example.com")

    def test_change_password(self):
        result = self.gql(
            CHANGE_PASSWORD,
            {"data": {"oldPassword": self.password, "newPassword": "Brand-new-pass-9090"}},
            user=self.user,
        )
        self.assertEqual(result["data"]["changePassword"]["email"], "alice@example.com")
        login = self.gql(LOGIN, {"data": {"email": "alice@example.com", "password": "Brand-new-pass-9090"}})
        self.assertIn("token", login["data"]["login"])

    def test_change_password_with_wrong_old_password(self):
        result = self.gql(
            CHANGE_PASSWORD,
            {"data": {"oldPassword": "wrong", "newPassword": "Brand-new-pass-9090"}},
            user=self.user,
        )
        self.assertErrorCode(result, "BAD_USER_INPUT")

    def test_set_current_workspace(self):
        second = create_workspace(self.user.account, "Second")
        result = self.gql(SET_CURRENT_WORKSPACE, {"data": {"id": second.workspace_id}}, user=self.user)
        token = result["data"]["setCurrentWorkspace"]["token"]
        me = self.gql(ME, token=token)["data"]["me"]
        self.assertEqual(me["workspace"]["name"], "Second")

        login = self.gql(LOGIN, {"data": {"email": "alice@example.com", "password": self.password}})
        me = self.gql(ME, token=login["data"]["login"]["token"])["data"]["me"]
        self.assertEqual(me["workspace"]["name"], "Second")

    def test_set_current_workspace_of_someone_else(self):
        other = self.create_member("mallory@example.com", "Mallory's")
        result = self.gql(SET_CURRENT_WORKSPACE, {"data": {"id": other.workspace_id}}, user=self.user)
        self.assertErrorCode(result, "FORBIDDEN")


class ApiTokenTests(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member("alice@example.com")

    def _create(self, name="ci"):
        return self.gql(CREATE_API_TOKEN, {"data": {"name": name}}, user=self.user)["data"]["createApiToken"]

    def test_api_token_authenticates_and_only_hash_is_stored(self):
        created = self._create()
        raw = created["token"]
        self.assertTrue(raw)
        self.assertEqual(created["previewChars"], raw[-4:])

        row = ApiToken.objects.get(pk=created["id"])
        self.assertEqual(row.token_hash, hash_token(raw))
        self.assertIsNone(row.last_access_at)

        me = self.gql(ME, token=raw)["data"]["me"]
        self.assertEqual(int(me["id"]), self.user.id)
        row.refresh_from_db()
        self.assertIsNotNone(row.last_access_at)

    def test_listing_never_returns_the_raw_token(self):
        self._create()
        tokens = self.gql(API_TOKENS, user=self.user)["data"]["userApiTokens"]
        self.assertEqual(len(tokens), 1)
        self.assertIsNone(tokens[0]["token"])

    def test_deleted_api_token_is_revoked(self):
        created = self._create()
        self.gql(DELETE_API_TOKEN, {"id": created["id"]}, user=self.user)
        self.assertFalse(ApiToken.objects.filter(pk=created["id"]).exists())
        self.assertErrorCode(self.gql(ME, token=created["token"]), "UNAUTHENTICATED")

    def test_empty_name_is_bad_input(self):
        result = self.gql(CREATE_API_TOKEN, {"data": {"name": "  "}}, user=self.user)
        self.assertErrorCode(result, "BAD_USER_INPUT")

    def test_cannot_delete_someone_elses_token(self):
        created = self._create()
        other = self.create_member("mallory@example.com", "Mallory's")
        result = self.gql(DELETE_API_TOKEN, {"id": created["id"]}, user=other)
        self.assertErrorCode(result, "NOT_FOUND")
