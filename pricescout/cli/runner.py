# pricescout/cli/runner.py

"""Headless CLI search runner on top of the async coordinator."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from pricescout.config.countries import SourceRegistry, UnsupportedCountryError
from pricescout.config.settings import Settings
from pricescout.models.listing import ScoredListing
from pricescout.models.search import SearchOptions, SearchResponse
from pricescout.services.batch_coordinator import BatchCoordinator
from pricescout.storage.file_manager import FileManager, response_to_dict
from pricescout.storage.rate_cache import CurrencyRateCache

logger = logging.getLogger("pricescout.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_NO_RESULTS = 1
EXIT_INVALID_INPUT = 2


def validate_query(query: str) -> bool:
    """A query needs at least two non-whitespace characters."""
    return len("".join(query.split())) >= 2


def parse_source_csv(source_csv: str | None) -> list[str] | None:
    """Split a comma-separated list of source ids.

    Raises ``ValueError`` on ids no extractor is registered under.
    """
    if source_csv is None:
        return None
    available = {s["id"] for s in Settings.AVAILABLE_SOURCES}
    requested = [
        s.strip().lower() for s in source_csv.split(",") if s.strip()
    ]
    unknown = [r for r in requested if r not in available]
    if unknown:
        raise ValueError(
            f"Unknown source(s): {', '.join(unknown)}. "
            f"Available: {', '.join(sorted(available))}"
        )
    return requested or None


def price_text(scored: ScoredListing) -> str:
    """Display price, converted when a conversion happened."""
    if scored.converted_price is not None and scored.target_currency:
        return CurrencyRateCache.format_currency(
            scored.converted_price, scored.target_currency
        )
    return CurrencyRateCache.format_currency(
        scored.normalized_price, scored.listing.currency
    )


def _print_table(response: SearchResponse) -> None:
    """Render a Rich table of listings to stdout."""
    table = Table(
        title=f"Results for '{response.query}' ({response.country})",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Score", justify="right")
    table.add_column("Source", style="magenta")
    table.add_column("Link", overflow="fold", style="dim")

    for idx, s in enumerate(response.listings, 1):
        listing = s.listing
        table.add_row(
            str(idx),
            listing.name[:60],
            price_text(s),
            f"{listing.rating:.1f}" if listing.rating is not None else "-",
            str(s.quality_score),
            listing.source_id,
            listing.link,
        )

    Console().print(table)


def list_countries(registry: SourceRegistry | None = None) -> int:
    """Print every supported country with its currency and sources."""
    registry = registry or SourceRegistry()
    table = Table(
        title="Supported Countries",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("Code", style="bold")
    table.add_column("Country")
    table.add_column("Currency", style="green")
    table.add_column("Sources", style="dim")
    for config in sorted(
        registry.supported_countries(), key=lambda c: c.code
    ):
        table.add_row(
            config.code,
            config.name,
            config.currency,
            ", ".join(config.websites),
        )
    Console().print(table)
    return EXIT_OK


async def cli_search(
    query: str,
    country: str,
    options: SearchOptions,
    output_format: str = "json",
    save: bool = False,
    coordinator: BatchCoordinator | None = None,
) -> int:
    """Run a headless search and return an exit code.

    0 when listings were found, 1 when none were, 2 on invalid input.
    """
    if not validate_query(query):
        _err.print(
            "[red]Query must contain at least 2 non-whitespace "
            "characters.[/red]"
        )
        return EXIT_INVALID_INPUT

    coordinator = coordinator or BatchCoordinator()
    try:
        country_config = coordinator.registry.require(country)
    except UnsupportedCountryError as exc:
        _err.print(f"[red]{exc}[/red]")
        _err.print("[dim]Use --countries to list supported codes.[/dim]")
        return EXIT_INVALID_INPUT

    if options.target_currency:
        known = coordinator.processor.rate_cache.available_currencies()
        if options.target_currency not in known:
            _err.print(
                f"[red]Unknown currency: {options.target_currency}[/red]"
            )
            return EXIT_INVALID_INPUT

    mode = "comprehensive" if options.comprehensive else "quick"
    _err.print(
        f"[bold]Searching:[/bold] {query}  "
        f"[dim]country={country_config.code} mode={mode}[/dim]"
    )

    response = await coordinator.search(query, country_config.code, options)

    for error_msg in response.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    summary = response.summary
    retry = (
        f", {summary.retry_attempts} retry"
        if summary.retry_attempts
        else ""
    )
    _err.print(
        f"[dim]{summary.successful_sources} of "
        f"{len(summary.source_names)} sources succeeded, "
        f"{summary.total_pages_attempted} pages{retry}[/dim]"
    )

    if save:
        try:
            path = FileManager().save_response(response)
            _err.print(f"[dim]Saved → {path}[/dim]")
        except OSError as exc:
            logger.error("Save failed: %s", exc, exc_info=True)
            _err.print(f"[red]Save failed: {exc}[/red]")

    if not response.listings:
        _err.print("[yellow]No matching products found.[/yellow]")
        return EXIT_NO_RESULTS

    _err.print(
        f"[green]✓ {len(response.listings)} listings"
        f" of {summary.total_listings} fetched[/green]"
    )

    if output_format == "table":
        _print_table(response)
    else:
        json.dump(
            response_to_dict(response),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return EXIT_OK
