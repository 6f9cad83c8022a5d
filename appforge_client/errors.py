from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class GraphQLRequestError(Exception):
    """The server answered with a GraphQL `errors` list."""

    def __init__(self, errors: List[Dict[str, Any]], status_code: Optional[int] = None) -> None:
        self.errors = errors or []
        self.status_code = status_code
        super().__init__(self.messages[0] if self.messages else GENERIC_ERROR_MESSAGE)

    @property
    def messages(self) -> List[str]:
        return [e.get("message") for e in self.errors if e.get("message")]

    @property
    def codes(self) -> List[str]:
        return [(e.get("extensions") or {}).get("code") for e in self.errors if (e.get("extensions") or {}).get("code")]


def format_error(error: Optional[BaseException]) -> Optional[str]:
    """User-facing text for a failed request; never empty when `error` is set."""
    if error is None:
        return None
    if isinstance(error, GraphQLRequestError):
        message = error.messages[0] if error.messages else ""
    elif isinstance(error, requests.HTTPError) and error.response is not None:
        message = f"Server error {error.response.status_code}: {error.response.reason or 'request failed'}"
    elif isinstance(error, requests.ConnectionError):
        message = "Could not reach the server. Check your connection and try again."
    elif isinstance(error, requests.Timeout):
        message = "The server took too long to respond."
    else:
        message = str(error)
    return message.strip() or GENERIC_ERROR_MESSAGE
