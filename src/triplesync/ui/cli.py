from __future__ import annotations

import argparse
import logging
import sys
from contextlib import closing
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from rdflib import Graph

from triplesync.app import build_repository, last_update, sync_entity
from triplesync.common.logging import configure_logging
from triplesync.config import ConfigurationError
from triplesync.domain.statements import statements_from_graph
from triplesync.domain.uris import validate_entity_id

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from triplesync.adapters.sparql import RdfRepository

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise entities into a triple store")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Replace an entity's statements in the store")
    sync.add_argument("entity", type=validate_entity_id, help="Entity id, e.g. Q42")
    sync.add_argument("file", type=str, help="RDF file holding every statement of the entity")
    sync.add_argument(
        "--format",
        type=str,
        default="turtle",
        help="rdflib parser name for FILE (default: %(default)s)",
    )

    has_revision = subparsers.add_parser(
        "has-revision",
        help="Check whether the store holds a revision of an entity or newer",
    )
    has_revision.add_argument("entity", type=validate_entity_id, help="Entity id, e.g. Q42")
    has_revision.add_argument("revision", type=int, help="Revision number")

    subparsers.add_parser("last-update", help="Show the latest modification time in the store")

    return parser.parse_args(list(argv))


def _run(parsed_args: argparse.Namespace, repository: RdfRepository) -> None:
    if parsed_args.command == "sync":
        graph = Graph()
        graph.parse(parsed_args.file, format=parsed_args.format)
        statements = statements_from_graph(graph)
        result = sync_entity(repository, parsed_args.entity, statements)
        log.info("Synced %s: %s statements modified", result.entity_id, result.mutations)
    elif parsed_args.command == "has-revision":
        present = repository.has_revision(parsed_args.entity, parsed_args.revision)
        print("true" if present else "false")  # noqa: T201
    elif parsed_args.command == "last-update":
        latest = last_update(repository)
        print(latest.isoformat() if latest else "none")  # noqa: T201
    else:
        raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        repository = build_repository()
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)

    try:
        with closing(repository):
            _run(parsed_args, repository)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
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
