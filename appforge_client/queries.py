"""GraphQL documents used by the client."""

ACTION_LOG_FIELDS = """
    id
    createdAt
    steps {
      id
      name
      createdAt
      message
      status
      completedAt
      logs {
        id
        createdAt
        message
        meta
        level
      }
    }
"""

CREATE_ENTITIES_FROM_PRISMA_SCHEMA = """
mutation createEntitiesFromPrismaSchema(
  $data: CreateEntitiesFromPrismaSchemaInput!
  $file: Upload!
) {
  createEntitiesFromPrismaSchema(data: $data, file: $file) {
    entities {
      name
      displayName
      pluralDisplayName
      description
      fields {
        name
        displayName
        dataType
      }
    }
    actionLog {%s}
  }
}
""" % ACTION_LOG_FIELDS

GET_ACTION = """
query getAction($id: ID!) {
  action(id: $id) {%s}
}
""" % ACTION_LOG_FIELDS

GET_PENDING_CHANGES_STATUS = """
query pendingChangesStatus($projectId: ID!) {
  pendingChanges(projectId: $projectId) {
    originId
    action
    originType
  }
}
"""

GET_ENTITIES_FOR_ENTITY_SELECT_FIELD = """
query getEntitiesForEntitySelectField($resourceId: ID!) {
  entities(resourceId: $resourceId) {
    id
    displayName
    fields {
      id
      name
      displayName
      dataType
    }
  }
}
"""
