"""Command-line interface for the LOLDrivers catalog."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .__version__ import __version__
from .config import CatalogConfig
from .core.drivers_cache import DriversCache
from .errors import CatalogError

# Configure logging
logging.basicConfig(format="[%(levelname)s] %(message)s", level=logging.INFO)

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the catalog CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="lolcatalog",
        description="LOLDrivers catalog - search known vulnerable Windows drivers",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--data", type=str, help="Path to the drivers JSON dataset (default: $LOLCATALOG_DATA_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, help="Interface to bind")
    serve.add_argument("--port", type=int, help="Port to listen on")

    search = commands.add_parser("search", help="Search and filter driver samples")
    search.add_argument("query", nargs="?", default="", help="Free-text query")
    search.add_argument(
        "-f",
        "--filter",
        action="append",
        default=[],
        dest="filters",
        help="Filter name, or name=value (repeatable), e.g. -f hvci -f architecture=AMD64",
    )
    search.add_argument("--page", type=int, default=1, help="1-based page number")
    search.add_argument("--limit", type=int, default=20, help="Page size (0 for everything)")
    search.add_argument("--json", action="store_true", help="Output results as JSON to stdout")

    stats = commands.add_parser("stats", help="Show dataset statistics")
    stats.add_argument("--json", action="store_true", help="Output statistics as JSON to stdout")

    return parser


def parse_filter_args(values: list[str]) -> dict[str, Any]:
    """Turn ``name`` / ``name=value`` arguments into a filter mapping."""
    filters: dict[str, Any] = {}
    for value in values:
        name, sep, arg = value.partition("=")
        filters[name.strip()] = arg.strip() if sep else True
    return filters


async def run_search(cache: DriversCache, args: argparse.Namespace) -> int:
    filters = parse_filter_args(args.filters)
    result = await cache.search_drivers(args.query, filters, args.page, args.limit or None)

    if args.json:
        print(json.dumps(result.to_response(), indent=2))
        return 0

    logger.info(f"{result.total} matching sample(s)")
    for sample in result.drivers:
        hvci = sample.LoadsDespiteHVCI or "-"
        print(f"{sample.display_name:<32} {sample.Company or '-':<32} HVCI={hvci:<5} {sample.SHA256 or ''}")
    if result.has_more:
        logger.info(f"More results available: --page {args.page + 1}")
    return 0


async def run_stats(cache: DriversCache, args: argparse.Namespace) -> int:
    stats = await cache.get_statistics()
    data = stats.to_response()

    if args.json:
        print(json.dumps(data, indent=2))
        return 0

    for key, value in data.items():
        if key != "hvciBlocklistCheck":
            print(f"{key:<28} {value}")
    if stats.hvci_blocklist_check:
        check = stats.hvci_blocklist_check
        print(f"{'hvciBlocklistCheck':<28} {check.matched_drivers} matched, last check {check.last_check}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the catalog CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Set logging level
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.verbose:
        logging.getLogger().setLevel(logging.INFO)
    elif getattr(args, "json", False):
        # In JSON mode, keep stdout clean apart from warnings
        logging.getLogger().setLevel(logging.WARNING)
    else:
        logging.getLogger().setLevel(logging.INFO)

    config = CatalogConfig.from_env()
    if args.data:
        config.data_path = Path(args.data)

    if args.command == "serve":
        from .api.main import main as serve

        if args.host:
            config.host = args.host
        if args.port:
            config.port = args.port
        serve(config)
        return 0

    if not config.data_path.exists():
        logger.error(f"Path not found: {config.data_path}")
        return 1

    cache = DriversCache(config)
    handler = run_search if args.command == "search" else run_stats
    try:
        return asyncio.run(handler(cache, args))
    except CatalogError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("\nInterrupted by user")
        return 130


def run() -> None:
    """Entry point for console script."""
    sys.exit(main())


if __name__ == "__main__":
    run()
