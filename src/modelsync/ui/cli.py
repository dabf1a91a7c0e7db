# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from modelsync.app import delete_remote_records, fetch_remote_records
from modelsync.config import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise a remote record collection")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging of the request lifecycle",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch = subparsers.add_parser("fetch", help="Fetch records and print them as JSON lines")
    fetch.add_argument("route", type=str, help="Route template, e.g. /projects/{project}/tasks")
    fetch.add_argument(
        "--page",
        type=int,
        help="Fetch a single page (enables pagination)",
    )
    fetch.add_argument(
        "--all-pages",
        action="store_true",
        help="Keep fetching pages until an empty page is returned",
    )
    fetch.add_argument(
        "--max-pages",
        type=int,
        help="Maximum number of pages to fetch before stopping",
    )
    fetch.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Route parameter used to fill {placeholders} (repeatable)",
    )

    delete = subparsers.add_parser("delete", help="Delete records by identifier")
    delete.add_argument("route", type=str, help="Route template for the delete request")
    delete.add_argument(
        "--id",
        dest="identifiers",
        action="append",
        required=True,
        help="Identifier of a record to delete (repeatable)",
    )
    delete.add_argument(
        "--body",
        action="store_true",
        help="Send identifiers as a JSON body instead of query parameters",
    )
    delete.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Route parameter used to fill {placeholders} (repeatable)",
    )

    return parser.parse_args(list(argv))


def _parse_route_parameters(values: Sequence[str]) -> dict[str, str]:
    parameters: dict[str, str] = {}
    for value in values:
        key, separator, parameter = value.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"Invalid route parameter: {value}")
        parameters[key.strip()] = parameter
    return parameters


def _validate(args: argparse.Namespace) -> None:
    if args.command != "fetch":
        return
    if args.page is not None and args.page < 1:
        raise ValueError("Page must be a positive integer")
    if args.max_pages is not None and args.max_pages < 1:
        raise ValueError("Max pages must be a positive integer")
    if args.max_pages is not None and not args.all_pages:
        raise ValueError("--max-pages requires --all-pages")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args: argparse.Namespace
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
        _validate(parsed_args)
        route_parameters = _parse_route_parameters(parsed_args.param)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "fetch":
            records = fetch_remote_records(
                parsed_args.route,
                page=parsed_args.page,
                all_pages=parsed_args.all_pages,
                max_pages=parsed_args.max_pages,
                route_parameters=route_parameters,
            )
            for record in records:
                print(json.dumps(record, default=str))
        elif parsed_args.command == "delete":
            deleted = delete_remote_records(
                parsed_args.route,
                parsed_args.identifiers,
                use_delete_body=parsed_args.body,
                route_parameters=route_parameters,
            )
            log.info("Deleted %s records", deleted)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
