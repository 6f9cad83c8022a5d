"""
`appforge-import`: upload a Prisma schema to a service resource and print the
action log.

    appforge-import --project 3 --resource 7 schema.prisma
    APPFORGE_URL=https://api.example.com/graphql/ APPFORGE_TOKEN=... appforge-import ...

Exit codes: 0 success, 1 import or request failure, 2 file rejected.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

import requests

from .entities_import import EntitiesImport, ImportState, SelectedFile, accepts
from .errors import GraphQLRequestError, format_error
from .graphql import GraphQLClient

DEFAULT_URL = "http://localhost:8000/graphql/"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="appforge-import", description=__doc__.split("\n\n")[0])
    parser.add_argument("file", help="Path to a .prisma schema file")
    parser.add_argument("--project", required=True, help="Project id (for refetching pending changes)")
    parser.add_argument("--resource", required=True, help="Service resource id")
    parser.add_argument("--url", default=os.environ.get("APPFORGE_URL", DEFAULT_URL), help="GraphQL endpoint")
    parser.add_argument("--token", default=os.environ.get("APPFORGE_TOKEN"), help="Bearer token (JWT or API token)")
    parser.add_argument("--watch", action="store_true", help="Poll the action until every step has finished")
    parser.add_argument("--interval", type=float, default=2.0, help="Seconds between polls with --watch")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="level=%(levelname)s logger=%(name)s message=%(message)s",
    )

    try:
        selected = SelectedFile.from_path(args.file)
    except OSError as exc:
        print(f"Cannot read {args.file}: {exc}", file=sys.stderr)
        return 2
    if not accepts([selected]):
        print("Only '*.prisma' files are supported.", file=sys.stderr)
        return 2

    flow = EntitiesImport(GraphQLClient(args.url, token=args.token), args.project, args.resource)
    flow.subscribe(lambda f: print(f.render() + "\n"))
    if not flow.on_files_selected([selected]):
        return 1

    while args.watch and flow.action is not None and not flow.action.is_complete:
        time.sleep(args.interval)
        try:
            flow.poll()
        except (GraphQLRequestError, requests.RequestException) as exc:
            print(format_error(exc), file=sys.stderr)
            return 1

    failed = any(step.status == "Failed" for step in flow.action.steps) if flow.action else True
    return 1 if failed or flow.state is not ImportState.SUCCEEDED else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
