"""
Client for the AppForge GraphQL API.

- `graphql.GraphQLClient`: requests-based transport (JSON and multipart uploads)
  with a small query cache that supports refetching.
- `entities_import.EntitiesImport`: the upload-and-track state machine for
  Prisma schema imports.
- `action_log`: read-only Action/Step/Log snapshots and their text rendering.
"""
