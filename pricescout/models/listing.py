# pricescout/models/listing.py

"""Listing data models for inter-module data flow."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Listing:
    """One candidate product observation from one source.

    ``raw_price`` keeps the price text as observed on the page; numeric
    parsing happens downstream so the original can always be shown.
    """

    link: str
    raw_price: str
    currency: str
    name: str
    source_id: str
    image_url: str | None = None
    rating: float | None = None
    review_count: int | None = None
    availability_text: str | None = None
    shipping_text: str | None = None
    condition_text: str | None = None


@dataclass(frozen=True)
class MatchResult:
    """How well a listing answers the query.

    ``strategy`` names the matching path that produced the confidence
    (``exact``, ``normalized``, ``semantic``, ``structured``, ``phrase``
    or ``none``); admission thresholds depend on it.
    """

    is_match: bool
    confidence: float
    reason: str
    strategy: str = "none"


@dataclass(frozen=True)
class ScoredListing:
    """A matched listing after normalisation and quality scoring."""

    listing: Listing
    normalized_price: float
    quality_score: int
    match: MatchResult | None = None
    converted_price: float | None = None
    target_currency: str | None = None

    @property
    def comparable_price(self) -> float:
        """Converted price when available, else the normalised one."""
        if self.converted_price is not None:
            return self.converted_price
        return self.normalized_price


@dataclass
class FetchOutcome:
    """Result of running one source, possibly across several pages."""

    source_id: str
    succeeded: bool
    listings: list[Listing] = field(
        default_factory=lambda: list[Listing]()
    )
    error: str | None = None
    pages_attempted: int = 0
