# pricescout/filters/result_processor.py

"""Normalisation, quality scoring, filtering and ordering of matches."""

import asyncio
import logging
from typing import Any

from pricescout.config.settings import Settings
from pricescout.filters.deduplicator import ListingDeduplicator
from pricescout.filters.listing_filter import ListingFilter
from pricescout.models.listing import Listing, MatchResult, ScoredListing
from pricescout.models.search import SearchOptions
from pricescout.storage.rate_cache import CurrencyRateCache
from pricescout.utils.price_parser import parse_price

logger = logging.getLogger("pricescout.processor")


class ResultProcessor:
    """Turns matched listings into ordered, immutable ScoredListings."""

    def __init__(self, rate_cache: CurrencyRateCache | None = None) -> None:
        self.rate_cache = rate_cache or CurrencyRateCache()

    # ── Scoring ──────────────────────────────────────────

    @staticmethod
    def _availability_points(text: str | None) -> int:
        if not text:
            return 10
        lowered = text.lower()
        if ListingFilter.is_out_of_stock(lowered):
            return 0
        if "in stock" in lowered or "available" in lowered:
            return 20
        if "limited" in lowered or "few left" in lowered:
            return 15
        return 10

    @staticmethod
    def _shipping_points(text: str | None) -> int:
        if not text:
            return 0
        lowered = text.lower()
        if "free" in lowered:
            return 10
        if "fast" in lowered or "express" in lowered:
            return 8
        return 5

    @staticmethod
    def quality_score(listing: Listing) -> int:
        """Additive 0-100 score.

        rating up to 40, review volume up to 20, availability up to 20,
        source reputation up to 10, shipping terms up to 10.
        """
        score = 0.0
        if listing.rating:
            score += listing.rating / 5 * 40
        if listing.review_count:
            score += min(listing.review_count / 1000, 1) * 20
        score += ResultProcessor._availability_points(
            listing.availability_text
        )
        score += Settings.SOURCE_REPUTATION.get(
            listing.source_id, Settings.DEFAULT_REPUTATION
        )
        score += ResultProcessor._shipping_points(listing.shipping_text)
        return max(0, min(100, round(score)))

    def normalize(
        self,
        listing: Listing,
        match: MatchResult | None = None,
        target_currency: str | None = None,
    ) -> ScoredListing:
        """Parse the price and convert it when a target currency is set."""
        normalized = parse_price(listing.raw_price)
        converted: float | None = None
        if target_currency and target_currency != listing.currency:
            converted = self.rate_cache.convert(
                normalized, listing.currency, target_currency
            )
        return ScoredListing(
            listing=listing,
            normalized_price=normalized,
            quality_score=self.quality_score(listing),
            match=match,
            converted_price=converted,
            target_currency=target_currency,
        )

    # ── Ordering ─────────────────────────────────────────

    @staticmethod
    def sort(
        listings: list[ScoredListing],
        sort_by: str = "price",
        sort_order: str = "asc",
    ) -> list[ScoredListing]:
        """Stable sort; ``desc`` reverses the natural direction.

        The natural direction for rating is highest first.
        """
        keys: dict[str, Any] = {
            "price": lambda s: s.comparable_price,
            "rating": lambda s: -(s.listing.rating or 0.0),
            "source": lambda s: s.listing.source_id.casefold(),
            "name": lambda s: s.listing.name.casefold(),
        }
        return sorted(
            listings,
            key=keys[sort_by],
            reverse=sort_order == "desc",
        )

    # ── Pipeline ─────────────────────────────────────────

    async def process(
        self,
        matched: list[tuple[Listing, MatchResult]],
        options: SearchOptions,
    ) -> list[ScoredListing]:
        """Normalise, score, filter and sort matched listings."""
        if options.target_currency:
            await asyncio.to_thread(self.rate_cache.ensure_fresh)

        scored = [
            self.normalize(listing, match, options.target_currency)
            for listing, match in matched
        ]
        kept, _excluded = ListingFilter.apply(scored, options)
        ordered = self.sort(kept, options.sort_by, options.sort_order)
        logger.debug(
            "Processed %d matched listings into %d results",
            len(matched),
            len(ordered),
        )
        return ordered

    @staticmethod
    def remove_duplicates(
        listings: list[ScoredListing],
        threshold: float | None = None,
    ) -> list[ScoredListing]:
        kept, _removed = ListingDeduplicator.deduplicate(
            listings, threshold
        )
        return kept

    @staticmethod
    def statistics(listings: list[ScoredListing]) -> dict[str, Any]:
        """Summary figures for a processed result set."""
        prices = [s.comparable_price for s in listings if s.comparable_price > 0]
        ratings = [
            s.listing.rating for s in listings
            if s.listing.rating is not None
        ]
        sources: dict[str, int] = {}
        currencies: dict[str, int] = {}
        for s in listings:
            sources[s.listing.source_id] = (
                sources.get(s.listing.source_id, 0) + 1
            )
            currencies[s.listing.currency] = (
                currencies.get(s.listing.currency, 0) + 1
            )
        return {
            "total_listings": len(listings),
            "average_price": (
                sum(prices) / len(prices) if prices else 0.0
            ),
            "price_range": {
                "min": min(prices) if prices else 0.0,
                "max": max(prices) if prices else 0.0,
            },
            "average_rating": (
                sum(ratings) / len(ratings) if ratings else 0.0
            ),
            "source_distribution": sources,
            "currency_distribution": currencies,
        }
