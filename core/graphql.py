"""
GraphQL transport.

`AppGraphQLView` is graphene-django's view with multipart upload support
(graphene-file-upload), plus two project conventions:

- the operation name is recorded on the request so the request log line can
  name it (`core.middleware.RequestIDLogMiddleware`);
- errors that are not `core.exceptions.AppError` are logged with their
  traceback and reported as `INTERNAL_SERVER_ERROR`; their message is only
  exposed when DEBUG is on.
"""

from __future__ import annotations

import logging

from django.conf import settings
from graphene_file_upload.django import FileUploadGraphQLView
from graphql import GraphQLError

from .exceptions import AppError

logger = logging.getLogger(__name__)


class AppGraphQLView(FileUploadGraphQLView):

    def execute_graphql_request(self, request, data, query, variables, operation_name, *args, **kwargs):
        request.graphql_operation = operation_name
        return super().execute_graphql_request(request, data, query, variables, operation_name, *args, **kwargs)

    @staticmethod
    def format_error(error):
        formatted = FileUploadGraphQLView.format_error(error)
        if not isinstance(error, GraphQLError):
            return formatted

        original = error.original_error
        if original is None or isinstance(original, (AppError, GraphQLError)):
            # Validation/syntax errors and our typed errors pass through as-is.
            return formatted

        logger.error("Unhandled error in resolver at %s", error.path, exc_info=original)
        formatted["extensions"] = {"code": AppError.code}
        if not settings.DEBUG:
            formatted["message"] = AppError.default_message
        return formatted


def enum_member(enum_type, value):
    """Map a stored choice value (str or TextChoices member) onto a graphene enum member."""
    if value is None:
        return None
    return enum_type.get(str(value))
