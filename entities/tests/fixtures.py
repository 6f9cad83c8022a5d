"""Prisma schemas shared by the entities tests."""

BLOG_SCHEMA = """\
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

/// A registered customer
model User {
  id        Int      @id @default(autoincrement())
  email     String   @unique
  name      String?
  bio       String   @db.Text
  posts     Post[]   @relation("UserPosts")
  role      Role     @default(USER)
  createdAt DateTime @default(now())
  updatedAt DateTime @updatedAt
}

model Post {
  id        String   @id @default(uuid())
  /// Headline shown in lists
  title     String   @db.VarChar(120)
  published Boolean  @default(false)
  rating    Float?
  views     BigInt
  author    User     @relation("UserPosts", fields: [authorId], references: [id])
  authorId  Int
  tags      String[]
  extra     Json?
}

enum Role {
  USER
  ADMIN
}
"""

UNSUPPORTED_SCHEMA = """\
model Attachment {
  id       Int    @id
  content  Bytes
  location Unsupported("point")?
  caption  String
}
"""

BROKEN_SCHEMA = """\
model Order {
  id    Int @id
  owner Customer
  id    String
}
"""
