# pricescout/filters/listing_validator.py

"""Listing validation: drop records missing a mandatory field."""

import logging

from pricescout.models.listing import Listing
from pricescout.utils.price_parser import parse_price

logger = logging.getLogger("pricescout.filters")


class ListingValidator:
    """Validate listings and drop those without link, name, or price."""

    @staticmethod
    def is_valid(listing: Listing) -> bool:
        """Return True when link, name and a positive price are present."""
        if not listing.link.strip():
            return False
        if not listing.name.strip():
            return False
        return parse_price(listing.raw_price) > 0

    @staticmethod
    def validate(
        listings: list[Listing],
    ) -> tuple[list[Listing], int]:
        """Drop listings with empty link/name or an unparseable/zero price.

        Returns the valid listings and the count of dropped items.
        Dropped listings are not errors; they are logged at DEBUG only.
        """
        valid: list[Listing] = []
        dropped = 0

        for listing in listings:
            if ListingValidator.is_valid(listing):
                valid.append(listing)
                continue
            logger.debug(
                "Dropped listing (source=%s, name=%r, "
                "price=%r, link=%r)",
                listing.source_id,
                listing.name,
                listing.raw_price,
                listing.link,
            )
            dropped += 1

        if dropped:
            logger.info(
                "Validation dropped %d incomplete listings",
                dropped,
            )

        return valid, dropped
