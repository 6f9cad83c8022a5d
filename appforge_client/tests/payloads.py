"""GraphQL response payloads used by the client tests."""


def action_payload(status="Success", logs=None, completed_at="2024-05-01T10:00:02.500000+00:00", action_id="41"):
    return {
        "id": action_id,
        "createdAt": "2024-05-01T10:00:00+00:00",
        "steps": [
            {
                "id": "7",
                "name": "PROCESSING",
                "message": "Import Prisma schema file",
                "status": status,
                "createdAt": "2024-05-01T10:00:00+00:00",
                "completedAt": completed_at,
                "logs": logs if logs is not None else [
                    {"id": "1", "createdAt": "2024-05-01T10:00:00Z", "message": "Processing Prisma schema file",
                     "level": "Info", "meta": {}},
                    {"id": "2", "createdAt": "2024-05-01T10:00:01Z", "message": "Field File.data was skipped",
                     "level": "Warning", "meta": {"line": 12}},
                    {"id": "3", "createdAt": "2024-05-01T10:00:02Z", "message": "Created 2 entities",
                     "level": "Info", "meta": {}},
                ],
            }
        ],
    }


def import_response(action=None, entities=None):
    return {
        "createEntitiesFromPrismaSchema": {
            "entities": entities if entities is not None else [{"name": "User"}, {"name": "Post"}],
            "actionLog": action or action_payload(),
        }
    }
