# pricescout/filters/deduplicator.py

"""Near-duplicate removal across sources."""

import logging

from pricescout.config.settings import Settings
from pricescout.models.listing import ScoredListing

logger = logging.getLogger("pricescout.filters")


class ListingDeduplicator:
    """Remove near-duplicate listings with a weighted similarity score.

    Similarity blends name word overlap (60%), price closeness (30%) and
    a same-source bonus (10%). Pairs scoring above the threshold are
    duplicates; the first one seen is kept.
    """

    @staticmethod
    def similarity(a: ScoredListing, b: ScoredListing) -> float:
        words_a = a.listing.name.lower().split()
        words_b = b.listing.name.lower().split()
        longest = max(len(words_a), len(words_b))
        common = [w for w in words_a if w in words_b]
        name_similarity = len(common) / longest if longest else 0.0

        price_a, price_b = a.comparable_price, b.comparable_price
        avg_price = (price_a + price_b) / 2
        if avg_price > 0:
            # Within 10% of each other scores close to 1
            price_similarity = max(
                0.0, 1 - (abs(price_a - price_b) / avg_price) / 0.1
            )
        else:
            price_similarity = 1.0

        same_source = (
            0.1 if a.listing.source_id == b.listing.source_id else 0.0
        )
        return name_similarity * 0.6 + price_similarity * 0.3 + same_source

    @staticmethod
    def deduplicate(
        listings: list[ScoredListing],
        threshold: float | None = None,
    ) -> tuple[list[ScoredListing], int]:
        """Greedy single pass; returns kept listings and removed count."""
        if threshold is None:
            threshold = Settings.DEDUP_THRESHOLD

        kept: list[ScoredListing] = []
        for item in listings:
            if any(
                ListingDeduplicator.similarity(item, existing) > threshold
                for existing in kept
            ):
                continue
            kept.append(item)

        removed = len(listings) - len(kept)
        if removed:
            logger.info(
                "Deduplication removed %d near-duplicate listings",
                removed,
            )
        return kept, removed
