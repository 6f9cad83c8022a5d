"""
Entity GraphQL operations, including the multipart schema upload.

The upload is sent the way browser clients send it: an `operations` part, a
`map` part and the file part, with `variables.file` set to null.
"""

from django.core.files.uploadedfile import SimpleUploadedFile

from actions.models import Action
from appforge_client.queries import (
    CREATE_ENTITIES_FROM_PRISMA_SCHEMA,
    GET_ENTITIES_FOR_ENTITY_SELECT_FIELD,
    GET_PENDING_CHANGES_STATUS,
)
from core.tests.support import GraphQLTestCase
from entities.models import Entity
from workspaces.models import ResourceType
from workspaces.services import create_project, create_service

from .fixtures import BLOG_SCHEMA, BROKEN_SCHEMA

CREATE_ONE_ENTITY = """
mutation ($data: EntityCreateInput!) {
  createOneEntity(data: $data) { id name displayName pluralDisplayName fields { name dataType } }
}
"""
DELETE_ENTITY = "mutation ($where: WhereUniqueInput!) { deleteEntity(where: $where) { id deletedAt } }"
COMMIT = "mutation ($data: CommitCreateInput!) { commit(data: $data) { id message } }"
ENTITY = "query ($id: ID!) { entity(id: $id) { name fields { name } } }"
FILTERED_ENTITIES = """
query ($resourceId: ID!, $q: String) { entities(resourceId: $resourceId, name_Icontains: $q) { name } }
"""


class EntityGraphQLTestCase(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member()
        self.project = create_project(self.user, "Blog")
        self.resource = create_service(self.user, self.project.id, "content")

    def upload(self, content, name="schema.prisma", resource_id=None, user=None):
        variables = {"data": {"resourceId": str(resource_id or self.resource.id)}, "file": None}
        upload = SimpleUploadedFile(name, content.encode("utf-8"), content_type="text/plain")
        return self.gql_upload(CREATE_ENTITIES_FROM_PRISMA_SCHEMA, variables, "variables.file", upload,
                               user=user or self.user)


class SchemaUploadTests(EntityGraphQLTestCase):

    def test_upload_creates_entities_and_returns_action_log(self):
        result = self.upload(BLOG_SCHEMA)
        self.assertNotIn("errors", result)
        payload = result["data"]["createEntitiesFromPrismaSchema"]

        self.assertEqual([e["name"] for e in payload["entities"]], ["User", "Post"])
        post = payload["entities"][1]
        self.assertEqual(post["pluralDisplayName"], "Posts")
        self.assertIn({"name": "author", "displayName": "Author", "dataType": "Lookup"}, post["fields"])

        steps = payload["actionLog"]["steps"]
        self.assertEqual(len(steps), 1)
        self.assertEqual(steps[0]["name"], "PROCESSING")
        self.assertEqual(steps[0]["status"], "Success")
        self.assertEqual(steps[0]["logs"][0]["message"], "Processing Prisma schema file")

    def test_invalid_schema_returns_failed_action(self):
        payload = self.upload(BROKEN_SCHEMA)["data"]["createEntitiesFromPrismaSchema"]
        self.assertEqual(payload["entities"], [])
        step = payload["actionLog"]["steps"][0]
        self.assertEqual(step["status"], "Failed")
        error_lines = [log["meta"].get("line") for log in step["logs"] if log["level"] == "Error"]
        self.assertEqual(error_lines, [3, 4, None])

    def test_wrong_extension_is_rejected_before_any_action(self):
        result = self.upload(BLOG_SCHEMA, name="schema.sql")
        self.assertErrorCode(result, "BAD_USER_INPUT")
        self.assertFalse(Action.objects.exists())

    def test_requires_authentication(self):
        variables = {"data": {"resourceId": str(self.resource.id)}, "file": None}
        upload = SimpleUploadedFile("schema.prisma", BLOG_SCHEMA.encode("utf-8"))
        result = self.gql_upload(CREATE_ENTITIES_FROM_PRISMA_SCHEMA, variables, "variables.file", upload)
        self.assertErrorCode(result, "UNAUTHENTICATED")

    def test_foreign_resource_is_forbidden(self):
        other = self.create_member("mallory@example.com", "Mallory's")
        self.assertErrorCode(self.upload(BLOG_SCHEMA, user=other), "FORBIDDEN")
        self.assertFalse(Entity.objects.exists())

    def test_non_service_resource_is_bad_input(self):
        config = self.project.resources.get(resource_type=ResourceType.PROJECT_CONFIGURATION)
        self.assertErrorCode(self.upload(BLOG_SCHEMA, resource_id=config.id), "BAD_USER_INPUT")

    def test_entity_select_query_sees_imported_entities(self):
        self.upload(BLOG_SCHEMA)
        result = self.gql(GET_ENTITIES_FOR_ENTITY_SELECT_FIELD, {"resourceId": self.resource.id}, user=self.user)
        entities = result["data"]["entities"]
        self.assertEqual([e["displayName"] for e in entities], ["User", "Post"])


class EntityMutationTests(EntityGraphQLTestCase):

    def create(self, name, **extra):
        data = {"resourceId": self.resource.id, "name": name, **extra}
        return self.gql(CREATE_ONE_ENTITY, {"data": data}, user=self.user)

    def test_create_one_entity_with_default_fields(self):
        entity = self.create("orderItem")["data"]["createOneEntity"]
        self.assertEqual(entity["displayName"], "Order Item")
        self.assertEqual(entity["pluralDisplayName"], "Order Items")
        self.assertEqual(
            [(f["name"], f["dataType"]) for f in entity["fields"]],
            [("id", "Id"), ("createdAt", "CreatedAt"), ("updatedAt", "UpdatedAt")],
        )

    def test_duplicate_and_invalid_names(self):
        self.create("Order")
        self.assertErrorCode(self.create("Order"), "CONFLICT")
        self.assertErrorCode(self.create("not a name"), "BAD_USER_INPUT")

    def test_deleted_entity_name_can_be_reused(self):
        entity_id = self.create("Order")["data"]["createOneEntity"]["id"]
        self.gql(DELETE_ENTITY, {"where": {"id": entity_id}}, user=self.user)
        self.assertNotIn("errors", self.create("Order"))

    def test_delete_hides_entity(self):
        entity_id = self.create("Order")["data"]["createOneEntity"]["id"]
        deleted = self.gql(DELETE_ENTITY, {"where": {"id": entity_id}}, user=self.user)["data"]["deleteEntity"]
        self.assertIsNotNone(deleted["deletedAt"])
        self.assertErrorCode(self.gql(ENTITY, {"id": entity_id}, user=self.user), "FORBIDDEN")

    def test_entities_name_filter(self):
        for name in ("Order", "OrderItem", "Customer"):
            self.create(name)
        result = self.gql(FILTERED_ENTITIES, {"resourceId": self.resource.id, "q": "order"}, user=self.user)
        self.assertEqual([e["name"] for e in result["data"]["entities"]], ["Order", "OrderItem"])


class PendingChangesTests(EntityGraphQLTestCase):

    def pending(self):
        result = self.gql(GET_PENDING_CHANGES_STATUS, {"projectId": self.project.id}, user=self.user)
        return [(c["action"], c["originType"]) for c in result["data"]["pendingChanges"]]

    def test_import_commit_delete_cycle(self):
        self.upload(BLOG_SCHEMA)
        self.assertEqual(self.pending(), [("Create", "Entity"), ("Create", "Entity")])

        commit = self.gql(COMMIT, {"data": {"projectId": self.project.id, "message": "Initial"}}, user=self.user)
        self.assertEqual(commit["data"]["commit"]["message"], "Initial")
        self.assertEqual(self.pending(), [])

        post = Entity.objects.get(name="Post")
        self.gql(DELETE_ENTITY, {"where": {"id": post.id}}, user=self.user)
        self.assertEqual(self.pending(), [("Delete", "Entity")])

    def test_created_and_deleted_since_commit_is_not_pending(self):
        self.gql(COMMIT, {"data": {"projectId": self.project.id, "message": "Empty"}}, user=self.user)
        entity = self.gql(CREATE_ONE_ENTITY, {"data": {"resourceId": self.resource.id, "name": "Draft"}},
                          user=self.user)["data"]["createOneEntity"]
        self.gql(DELETE_ENTITY, {"where": {"id": entity["id"]}}, user=self.user)
        self.assertEqual(self.pending(), [])

    def test_update_after_commit_is_pending_update(self):
        self.upload(BLOG_SCHEMA)
        self.gql(COMMIT, {"data": {"projectId": self.project.id, "message": "Initial"}}, user=self.user)
        user_entity = Entity.objects.get(name="User")
        user_entity.description = "Changed"
        user_entity.save()
        self.assertEqual(self.pending(), [("Update", "Entity")])

    def test_empty_commit_message_is_bad_input(self):
        result = self.gql(COMMIT, {"data": {"projectId": self.project.id, "message": " "}}, user=self.user)
        self.assertErrorCode(result, "BAD_USER_INPUT")
