# main.py

"""Entry point for the pricescout command-line search."""

import argparse
import asyncio
import logging
import sys

from pricescout.config.logging_config import setup_logging
from pricescout.config.settings import Settings
from pricescout.models.search import SORT_FIELDS, SearchOptions

logger = logging.getLogger("pricescout.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_SOURCES)

    parser = argparse.ArgumentParser(
        prog="pricescout",
        description="Multi-country product price comparison.",
        epilog=f"Available sources: {valid_ids}",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Search query (at least 2 characters).",
    )
    parser.add_argument(
        "-c",
        "--country",
        default="US",
        help="ISO country code (default: US).",
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=Settings.DEFAULT_MAX_PAGES,
        dest="max_pages",
        help=f"Pages per source (default: {Settings.DEFAULT_MAX_PAGES}).",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        default=False,
        help="Single pass without the retry over failed sources.",
    )
    parser.add_argument(
        "--no-retry",
        action="store_true",
        default=False,
        dest="no_retry",
        help="Do not retry failed sources in comprehensive mode.",
    )
    parser.add_argument(
        "--sort-by",
        choices=sorted(SORT_FIELDS),
        default="price",
        dest="sort_by",
    )
    parser.add_argument(
        "--sort-order",
        choices=["asc", "desc"],
        default="asc",
        dest="sort_order",
    )
    parser.add_argument(
        "--currency",
        default=None,
        help="Convert prices into this currency code.",
    )
    parser.add_argument(
        "--min-rating", type=float, default=None, dest="min_rating",
    )
    parser.add_argument(
        "--max-price", type=float, default=None, dest="max_price",
    )
    parser.add_argument(
        "-s",
        "--sources",
        default=None,
        help="Comma-separated source IDs to keep (default: all).",
    )
    parser.add_argument(
        "--include-out-of-stock",
        action="store_true",
        default=False,
        dest="include_out_of_stock",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        default=False,
        help="Also write the response JSON to results/.",
    )
    parser.add_argument(
        "--countries",
        action="store_true",
        default=False,
        help="List supported countries and exit.",
    )
    return parser


def _run_cli(args: argparse.Namespace) -> int:
    """Validate arguments and run the headless search."""
    from pricescout.cli.runner import (
        EXIT_INVALID_INPUT,
        cli_search,
        parse_source_csv,
    )

    try:
        options = SearchOptions(
            max_pages=args.max_pages,
            comprehensive=not args.quick,
            retry_failed_sites=not args.no_retry,
            sort_by=args.sort_by,
            sort_order=args.sort_order,
            target_currency=args.currency,
            min_rating=args.min_rating,
            max_price=args.max_price,
            source_allowlist=parse_source_csv(args.sources),
            include_out_of_stock=args.include_out_of_stock,
        )
    except ValueError as exc:
        print(f"Invalid options: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    return asyncio.run(
        cli_search(
            query=args.query,
            country=args.country,
            options=options,
            output_format=args.output_format,
            save=args.save,
        )
    )


def main(argv: list[str] | None = None) -> int:
    """Route to the country listing or a search."""
    log_file = setup_logging()
    logger.info("pricescout starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.countries:
        from pricescout.cli.runner import list_countries

        return list_countries()
    if args.query is None:
        parser.print_usage(sys.stderr)
        return 2
    return _run_cli(args)


if __name__ == "__main__":
    sys.exit(main())
