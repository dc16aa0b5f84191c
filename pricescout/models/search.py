# pricescout/models/search.py

"""Search request options and response containers."""

from dataclasses import dataclass, field
from typing import Any

from pricescout.config.settings import Settings
from pricescout.models.listing import Listing, ScoredListing

SORT_FIELDS: frozenset[str] = frozenset(
    {"price", "rating", "source", "name"}
)
SORT_ORDERS: frozenset[str] = frozenset({"asc", "desc"})


@dataclass
class SearchOptions:
    """Recognised options for one search request."""

    max_pages: int = Settings.DEFAULT_MAX_PAGES
    comprehensive: bool = True
    retry_failed_sites: bool = True
    sort_by: str = "price"
    sort_order: str = "asc"
    target_currency: str | None = None
    min_rating: float | None = None
    max_price: float | None = None
    source_allowlist: list[str] | None = None
    include_out_of_stock: bool = False

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            msg = f"max_pages must be >= 1, got {self.max_pages}"
            raise ValueError(msg)
        if self.sort_by not in SORT_FIELDS:
            msg = (
                f"sort_by must be one of {sorted(SORT_FIELDS)}, "
                f"got '{self.sort_by}'"
            )
            raise ValueError(msg)
        if self.sort_order not in SORT_ORDERS:
            msg = (
                f"sort_order must be 'asc' or 'desc', "
                f"got '{self.sort_order}'"
            )
            raise ValueError(msg)
        if self.target_currency:
            self.target_currency = self.target_currency.upper()


@dataclass
class SearchSummary:
    """Per-request bookkeeping reported alongside the listings."""

    total_listings: int = 0
    successful_sources: int = 0
    failed_sources: int = 0
    source_names: list[str] = field(
        default_factory=lambda: list[str]()
    )
    total_pages_attempted: int = 0
    retry_attempts: int | None = None


@dataclass
class BatchResult:
    """Raw output of one fan-out pass, before matching and ranking."""

    listings: list[Listing] = field(
        default_factory=lambda: list[Listing]()
    )
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )
    summary: SearchSummary = field(default_factory=SearchSummary)
    failed_source_ids: list[str] = field(
        default_factory=lambda: list[str]()
    )


@dataclass
class SearchResponse:
    """Final, always well-formed answer to a search request."""

    query: str
    country: str
    listings: list[ScoredListing] = field(
        default_factory=lambda: list[ScoredListing]()
    )
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )
    summary: SearchSummary = field(default_factory=SearchSummary)
    statistics: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
