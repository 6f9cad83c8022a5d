import os
import tempfile
from io import StringIO

from django.core.management import CommandError, call_command

from core.tests.support import GraphQLTestCase
from entities.models import Entity
from workspaces.services import create_project, create_service

from .fixtures import BLOG_SCHEMA, BROKEN_SCHEMA


class ImportPrismaSchemaCommandTests(GraphQLTestCase):
    def setUp(self):
        self.user = self.create_member("alice@example.com")
        self.resource = create_service(self.user, create_project(self.user, "Blog").id, "content")
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, content, name="schema.prisma"):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(content)
        return path

    def run_command(self, path, email="alice@example.com"):
        out = StringIO()
        call_command("import_prisma_schema", path, resource=self.resource.id, user=email, stdout=out)
        return out.getvalue()

    def test_imports_and_prints_action_log(self):
        output = self.run_command(self.write(BLOG_SCHEMA))
        self.assertTrue(output.startswith("Import Schema"))
        self.assertIn("[x] Import Prisma schema file (Success;", output)
        self.assertIn("Created 2 entities", output)
        self.assertEqual(Entity.objects.filter(resource=self.resource).count(), 2)

    def test_failed_import_raises(self):
        with self.assertRaises(CommandError) as ctx:
            self.run_command(self.write(BROKEN_SCHEMA))
        self.assertIn("2 error(s)", str(ctx.exception))
        self.assertFalse(Entity.objects.exists())

    def test_non_member_is_rejected(self):
        self.create_member("mallory@example.com", "Mallory's")
        with self.assertRaises(CommandError):
            self.run_command(self.write(BLOG_SCHEMA), email="mallory@example.com")

    def test_wrong_extension(self):
        with self.assertRaises(CommandError) as ctx:
            self.run_command(self.write(BLOG_SCHEMA, name="schema.txt"))
        self.assertEqual(str(ctx.exception), "Only .prisma files are accepted")
