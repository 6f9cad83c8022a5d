"""
Prisma schema parser.

Successful parses keep declaration order, doc comments and attributes; every
problem is reported together with its 1-based line number.
"""

from django.test import SimpleTestCase

from entities.prisma_schema import PrismaSchemaParseError, parse_attributes, parse_schema, split_arguments

SCHEMA = """\
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

generator client {
  provider = "prisma-client-js"
}

/// A registered customer
model User {
  id        Int      @id @default(autoincrement())
  email     String   @unique
  name      String?  // display name
  posts     Post[]   @relation("UserPosts")
  role      Role     @default(USER)
  createdAt DateTime @default(now())
}

model Post {
  id       String @id @default(cuid())
  /// Headline shown in lists
  title    String @db.VarChar(120)
  author   User   @relation("UserPosts", fields: [authorId], references: [id])
  authorId Int
  tags     String[]

  @@index([authorId])
}

enum Role {
  USER
  ADMIN
}
"""


class ParseSchemaTests(SimpleTestCase):

    def test_models_enums_and_attributes(self):
        schema = parse_schema(SCHEMA)
        self.assertEqual([m.name for m in schema.models], ["User", "Post"])
        self.assertEqual(schema.enums["Role"].values, ["USER", "ADMIN"])

        user, post = schema.models
        self.assertEqual(user.documentation, "A registered customer")
        self.assertEqual(user.line, 11)
        self.assertEqual([f.name for f in user.fields], ["id", "email", "name", "posts", "role", "createdAt"])

        name = user.get_field("name")
        self.assertTrue(name.optional)
        self.assertEqual(name.attributes, [])
        self.assertTrue(user.get_field("posts").is_list)
        self.assertEqual(user.get_field("id").attribute("default").args, "autoincrement()")

        title = post.get_field("title")
        self.assertEqual(title.documentation, "Headline shown in lists")
        self.assertEqual(title.db_attribute.name, "db.VarChar")
        self.assertEqual(title.db_attribute.args, "120")
        self.assertEqual(post.attributes[0].name, "index")

    def test_relation_arguments(self):
        post = parse_schema(SCHEMA).models[1]
        positional, named = post.get_field("author").attribute("relation").arguments()
        self.assertEqual(positional, ['"UserPosts"'])
        self.assertEqual(named, {"fields": "[authorId]", "references": "[id]"})

    def test_type_blocks_are_skipped_with_a_warning(self):
        schema = parse_schema("type Address {\n  street String\n}\nmodel A {\n  id Int @id\n}\n")
        self.assertEqual(len(schema.warnings), 1)
        self.assertEqual(schema.warnings[0].line, 1)

    def test_unsupported_type(self):
        schema = parse_schema('model A {\n  id Int @id\n  geo Unsupported("circle")?\n}\n')
        geo = schema.models[0].get_field("geo")
        self.assertTrue(geo.is_unsupported)
        self.assertTrue(geo.optional)

    def test_errors_carry_line_numbers(self):
        text = (
            "model A {\n"            # 1
            "  id Int @id\n"         # 2
            "  id String\n"          # 3
            "  owner Missing\n"      # 4
            "  ???\n"                # 5
            "}\n"                    # 6
        )
        with self.assertRaises(PrismaSchemaParseError) as ctx:
            parse_schema(text)
        lines = [e.line for e in ctx.exception.errors]
        self.assertEqual(lines, [3, 4, 5])
        self.assertIn("Duplicate field id", ctx.exception.errors[0].message)
        self.assertIn("Missing", ctx.exception.errors[1].message)

    def test_unclosed_block(self):
        with self.assertRaises(PrismaSchemaParseError) as ctx:
            parse_schema("model A {\n  id Int @id\n")
        unclosed = [e for e in ctx.exception.errors if "never closed" in e.message]
        self.assertEqual([e.line for e in unclosed], [1])

    def test_schema_without_models(self):
        with self.assertRaises(PrismaSchemaParseError) as ctx:
            parse_schema("enum Role {\n  USER\n}\n")
        self.assertEqual(str(ctx.exception), "The schema does not define any model")

    def test_duplicate_models(self):
        with self.assertRaises(PrismaSchemaParseError) as ctx:
            parse_schema("model A {\n  id Int @id\n}\nmodel A {\n  id Int @id\n}\n")
        self.assertEqual(ctx.exception.errors[0].line, 4)


class AttributeHelperTests(SimpleTestCase):

    def test_parse_attributes_with_nested_parentheses(self):
        attrs = parse_attributes('@id @default(dbgenerated("gen_random_uuid()")) @db.Uuid')
        self.assertEqual([a.name for a in attrs], ["id", "default", "db.Uuid"])
        self.assertEqual(attrs[1].args, 'dbgenerated("gen_random_uuid()")')

    def test_parse_attributes_rejects_garbage(self):
        with self.assertRaises(ValueError):
            parse_attributes("@id oops")

    def test_split_arguments_respects_brackets_and_strings(self):
        positional, named = split_arguments('"a, b", fields: [x, y], onDelete: Cascade')
        self.assertEqual(positional, ['"a, b"'])
        self.assertEqual(named, {"fields": "[x, y]", "onDelete": "Cascade"})
