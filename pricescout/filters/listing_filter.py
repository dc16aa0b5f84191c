# pricescout/filters/listing_filter.py

"""Option-driven filtering of scored listings."""

import logging

from pricescout.models.listing import ScoredListing
from pricescout.models.search import SearchOptions

logger = logging.getLogger("pricescout.filters")

# "unavailable" contains "available"; check these before in-stock wording
OUT_OF_STOCK_PHRASES: tuple[str, ...] = (
    "out of stock",
    "unavailable",
    "sold out",
)


class ListingFilter:
    """Drop listings that fail any of the caller's active predicates."""

    @staticmethod
    def is_out_of_stock(availability_text: str | None) -> bool:
        if not availability_text:
            return False
        lowered = availability_text.lower()
        return any(p in lowered for p in OUT_OF_STOCK_PHRASES)

    @staticmethod
    def _keep(item: ScoredListing, options: SearchOptions) -> bool:
        listing = item.listing
        if (
            options.min_rating is not None
            and listing.rating is not None
            and listing.rating < options.min_rating
        ):
            return False
        if (
            options.max_price is not None
            and item.comparable_price > options.max_price
        ):
            return False
        if (
            options.source_allowlist
            and listing.source_id not in options.source_allowlist
        ):
            return False
        if not options.include_out_of_stock and ListingFilter.is_out_of_stock(
            listing.availability_text
        ):
            return False
        return True

    @staticmethod
    def apply(
        listings: list[ScoredListing],
        options: SearchOptions,
    ) -> tuple[list[ScoredListing], int]:
        """Return the listings passing every predicate and the drop count."""
        kept = [item for item in listings if ListingFilter._keep(item, options)]
        excluded = len(listings) - len(kept)
        if excluded:
            logger.info("Filtered out %d listings by options", excluded)
        return kept, excluded
