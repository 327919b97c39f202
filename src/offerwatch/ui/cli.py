# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from offerwatch.adapters.jsonl import PayloadValidationError
from offerwatch.app import (
    QueryValidationError,
    ingest_listings_file,
    offer_history,
    query_offers,
)
from offerwatch.config import ConfigurationError, configure_logging
from offerwatch.domain.filter import FilterParseError, SortParseError
from offerwatch.domain.reconciliation import DuplicateSourceIdError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from offerwatch.domain.model import OfferVersion
    from offerwatch.domain.reconciliation import ReconcileStep

log = logging.getLogger(__name__)

# Errors caused by the caller's input rather than the system.
CLIENT_ERRORS: tuple[type[Exception], ...] = (
    FilterParseError,
    SortParseError,
    QueryValidationError,
    PayloadValidationError,
    DuplicateSourceIdError,
    ConfigurationError,
)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track real-estate auction listings")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Reconcile a JSONL listing snapshot")
    ingest.add_argument("path", type=str, help="Path of the JSONL snapshot file")
    ingest.add_argument(
        "--uf",
        type=str,
        help="Only reconcile this region code",
    )
    ingest.add_argument(
        "--download-url",
        type=str,
        help="Where the snapshot was downloaded from (stored with the batch)",
    )
    ingest.add_argument(
        "--progress",
        action="store_true",
        help="Write reconciliation progress events to stdout as JSON lines",
    )

    query = subparsers.add_parser("query", help="List current listings")
    query.add_argument(
        "--filter",
        dest="filter_text",
        type=str,
        help="Filter expression, e.g. \"uf eq 'SP' and askingPrice lt 200000\"",
    )
    query.add_argument(
        "--sort",
        dest="sort_text",
        type=str,
        help="Sort expression, e.g. 'askingPrice desc, city asc'",
    )
    query.add_argument("--page", type=int, default=1, help="1-based page number")
    query.add_argument(
        "--page-size",
        type=int,
        help="Listings per page (defaults to config)",
    )
    query.add_argument(
        "--include-removed",
        action="store_true",
        help="Also list listings whose latest version is a delete",
    )

    history = subparsers.add_parser("history", help="Show every version of one listing")
    history.add_argument("source_id", type=str, help="External listing identifier")

    return parser.parse_args(list(argv))


def _version_record(version: OfferVersion) -> dict[str, object]:
    record: dict[str, object] = {
        "version": version.version,
        "operation": str(version.operation),
        "createdAt": version.created_at.isoformat() if version.created_at else None,
    }
    for name, value in version.listing.attributes().items():
        record[name] = value
    return record


def _print_json(payload: object) -> None:
    print(json.dumps(payload, default=str, ensure_ascii=False))


def _print_progress(partition_key: str, step: ReconcileStep) -> None:
    _print_json({"uf": partition_key, **step.to_event()})


def _run(parsed_args: argparse.Namespace) -> None:
    if parsed_args.command == "ingest":
        result = ingest_listings_file(
            parsed_args.path,
            download_url=parsed_args.download_url,
            only_partition=parsed_args.uf,
            on_progress=_print_progress if parsed_args.progress else None,
        )
        if result.duplicate:
            log.info("Snapshot already ingested as batch %s", result.batch_id)
        _print_json(
            {
                "batchId": str(result.batch_id),
                "duplicate": result.duplicate,
                "fileSize": result.file_size,
                "totalOffers": result.total_offers,
                "partitions": {
                    key: value.to_event() for key, value in result.results.items()
                },
            }
        )
    elif parsed_args.command == "query":
        page = query_offers(
            filter_text=parsed_args.filter_text,
            sort_text=parsed_args.sort_text,
            page=parsed_args.page,
            page_size=parsed_args.page_size,
            include_removed=parsed_args.include_removed,
        )
        for item in page.items:
            _print_json(_version_record(item))
        log.info(
            "Page %d (%d per page): %d of %d listings",
            page.page,
            page.page_size,
            len(page.items),
            page.total,
        )
    elif parsed_args.command == "history":
        versions = offer_history(parsed_args.source_id)
        if not versions:
            log.warning("No versions stored for %s", parsed_args.source_id)
        for version in versions:
            _print_json(_version_record(version))
    else:
        raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        _run(parsed_args)
    except CLIENT_ERRORS as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
