from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from geofacts.app import collect
from geofacts.config import ConfigurationError, configure_logging
from geofacts.errors import GeofactsError
from geofacts.flags.transform import DEFAULT_BORDER_WIDTH

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"Expected a positive integer, got {parsed}")
    return parsed


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"Expected a non-negative integer, got {parsed}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Collect reconciled country and territory reference data"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log per-record detail (DEBUG level)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    collect_parser = subparsers.add_parser(
        "collect", help="Fetch all sources, reconcile them and write the output views"
    )
    collect_parser.add_argument(
        "--output",
        type=Path,
        help="Directory for JSON views and flags (defaults to GEOFACTS_OUTPUT_DIR or data dir)",
    )
    collect_parser.add_argument(
        "--aliases",
        type=Path,
        help="Alias table JSON (defaults to GEOFACTS_ALIASES or input/countries.json)",
    )
    collect_parser.add_argument(
        "--max-concurrency",
        type=_positive_int,
        help="Concurrent optional source and flag tasks (defaults to config)",
    )
    collect_parser.add_argument(
        "--border-width",
        type=_non_negative_int,
        default=DEFAULT_BORDER_WIDTH,
        help="Ring width in pixels for bordered flag variants (default: %(default)s)",
    )
    collect_parser.add_argument(
        "--no-flags",
        action="store_true",
        help="Skip flag download and rendering",
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else None)

    try:
        result = collect(
            output_dir=parsed_args.output,
            aliases_path=parsed_args.aliases,
            max_concurrency=parsed_args.max_concurrency,
            border_width=parsed_args.border_width,
            with_flags=not parsed_args.no_flags,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except GeofactsError:
        log.exception("Fatal error during collection")
        sys.exit(1)
    except Exception:
        log.exception("Unexpected error during collection")
        sys.exit(1)

    for kind, count in sorted(result.diagnostics.counts().items()):
        log.info("Diagnostics %s: %d", kind, count)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
