"""
GraphQL transport over `requests`.

- `execute()` posts a JSON operation; a response carrying `errors` raises
  `GraphQLRequestError`, other HTTP failures raise `requests.HTTPError`.
- `upload()` sends a multipart request (operations / map / file parts) so a
  file can travel in a variable such as `$file: Upload!`.
- `query()` also stores the result in `cache`, keyed by operation name and
  variables; `refetch()` re-issues cached or given queries and replaces the
  stored results.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterable, Optional, Tuple

import requests

from .errors import GraphQLRequestError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class RefetchQuery:
    operation_name: str
    query: str
    variables: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def of(cls, operation_name: str, query: str, **variables: Any) -> "RefetchQuery":
        return cls(operation_name, query, tuple(sorted(variables.items())))

    @property
    def key(self) -> Tuple[str, Tuple[Tuple[str, Any], ...]]:
        return self.operation_name, self.variables


@dataclass
class UploadFile:
    name: str
    content: BinaryIO | bytes
    content_type: str = "application/octet-stream"


@dataclass
class QueryCache:
    results: Dict[Tuple[str, Tuple[Tuple[str, Any], ...]], Dict[str, Any]] = field(default_factory=dict)

    def get(self, query: RefetchQuery) -> Optional[Dict[str, Any]]:
        return self.results.get(query.key)

    def put(self, query: RefetchQuery, data: Dict[str, Any]) -> None:
        self.results[query.key] = data


class GraphQLClient:
    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.cache = QueryCache()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _handle(self, response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            response.raise_for_status()
            raise
        if body.get("errors"):
            raise GraphQLRequestError(body["errors"], status_code=response.status_code)
        response.raise_for_status()
        return body.get("data") or {}

    def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        operation_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {"query": query, "variables": variables or {}, "operationName": operation_name}
        logger.debug("GraphQL %s", operation_name or "anonymous")
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        return self._handle(response)

    def upload(
        self,
        query: str,
        variables: Dict[str, Any],
        files: Dict[str, UploadFile],
        operation_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Multipart request: `files` maps variable paths (e.g. "variables.file")
        to the files to attach; those variables are sent as null.
        """
        operations = {"query": query, "variables": dict(variables), "operationName": operation_name}
        mapping: Dict[str, list] = {}
        parts = {}
        for index, (path, upload) in enumerate(files.items()):
            mapping[str(index)] = [path]
            parts[str(index)] = (upload.name, upload.content, upload.content_type)
        logger.debug("GraphQL upload %s (%d file(s))", operation_name or "anonymous", len(parts))
        response = self.session.post(
            self.url,
            data={"operations": json.dumps(operations), "map": json.dumps(mapping)},
            files=parts,
            timeout=self.timeout,
        )
        return self._handle(response)

    def query(self, query: RefetchQuery) -> Dict[str, Any]:
        data = self.execute(query.query, dict(query.variables), query.operation_name)
        self.cache.put(query, data)
        return data

    def refetch(self, queries: Iterable[RefetchQuery]) -> None:
        for query in queries:
            self.query(query)
