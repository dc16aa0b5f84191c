# pricescout/extractors/base_extractor.py

"""Abstract base class for all source extractors.

An extractor knows two things about one source: how to build a search
URL for a query/country/page, and how to turn a fetched search page into
listings. Fetching, pacing and pagination live in the orchestrator.

Each field is located with an ordered list of candidate locators and the
first one yielding a non-empty value wins, so a site renaming one class
degrades a field instead of breaking the whole source.
"""

import logging
from abc import ABC, abstractmethod
from typing import NamedTuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from pricescout.filters.listing_validator import ListingValidator
from pricescout.models.listing import Listing
from pricescout.utils.price_parser import (
    detect_currency,
    parse_rating,
    parse_review_count,
)


class Locator(NamedTuple):
    """A CSS selector plus the attribute to read (text when ``None``)."""

    selector: str
    attr: str | None = None


class BaseExtractor(ABC):
    """Abstract base class for all source extractors."""

    source_id: str = ""
    label: str = ""
    base_url: str = ""
    default_currency: str = "USD"
    supported_countries: frozenset[str] = frozenset()

    # Candidate card containers, first selector with matches wins
    CARD_SELECTORS: list[str] = []

    NAME_LOCATORS: list[Locator] = []
    PRICE_LOCATORS: list[Locator] = []
    LINK_LOCATORS: list[Locator] = [Locator("a[href]", "href")]
    IMAGE_LOCATORS: list[Locator] = [
        Locator("img[src]", "src"),
        Locator("img[data-src]", "data-src"),
    ]
    RATING_LOCATORS: list[Locator] = []
    REVIEW_LOCATORS: list[Locator] = []
    AVAILABILITY_LOCATORS: list[Locator] = []
    SHIPPING_LOCATORS: list[Locator] = []
    CONDITION_LOCATORS: list[Locator] = []

    # Used when no availability locator matches
    DEFAULT_AVAILABILITY: str | None = None

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"pricescout.{self.source_id or 'extractor'}"
        )

    def supports(self, country: str) -> bool:
        """Return True if this source serves *country*."""
        return country.upper() in self.supported_countries

    def currency_for(self, country: str) -> str:
        """Currency assumed when the price text carries no symbol."""
        return self.default_currency

    @abstractmethod
    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        """Return the search URL for *query* on result page *page*."""
        ...

    # ── Parsing ──────────────────────────────────────────

    def parse(
        self,
        document: BeautifulSoup,
        page_url: str | None = None,
        default_currency: str | None = None,
    ) -> list[Listing]:
        """Extract listings from a fetched search page.

        Never raises for missing markup: a card whose optional fields
        cannot be located simply lacks them, and a card missing a
        link, name or positive price is dropped.
        """
        currency = default_currency or self.default_currency
        base = page_url or self.base_url

        listings: list[Listing] = []
        for card in self._find_cards(document):
            try:
                listing = self._parse_card(card, base, currency)
            except Exception as exc:
                self.logger.debug(
                    "[%s] Skipping unparseable card: %s",
                    self.source_id,
                    exc,
                    exc_info=True,
                )
                continue
            if listing is not None:
                listings.append(listing)

        valid, _dropped = ListingValidator.validate(listings)
        self.logger.debug(
            "[%s] Parsed %d listings from %s",
            self.source_id,
            len(valid),
            base,
        )
        return valid

    def _find_cards(self, document: BeautifulSoup) -> list[Tag]:
        """Return card elements using the first selector that matches."""
        for selector in self.CARD_SELECTORS:
            cards = document.select(selector)
            if cards:
                return list(cards)
        return []

    def _skip_card(self, card: Tag, name: str) -> bool:
        """Hook for sources that mix ads or placeholders into results."""
        return False

    def _parse_card(
        self, card: Tag, base: str, currency: str,
    ) -> Listing | None:
        """Parse one card; ``None`` when a mandatory field is missing."""
        name = self._locate(card, self.NAME_LOCATORS)
        if not name or self._skip_card(card, name):
            return None

        href = self._locate(card, self.LINK_LOCATORS)
        if not href or href.startswith("javascript"):
            return None

        price_text = self._locate(card, self.PRICE_LOCATORS)
        if not price_text:
            return None

        image = self._locate(card, self.IMAGE_LOCATORS)
        availability = (
            self._locate(card, self.AVAILABILITY_LOCATORS)
            or self.DEFAULT_AVAILABILITY
        )

        return Listing(
            link=urljoin(base, href),
            raw_price=price_text,
            currency=detect_currency(price_text, currency),
            name=name,
            source_id=self.source_id,
            image_url=urljoin(base, image) if image else None,
            rating=parse_rating(
                self._locate(card, self.RATING_LOCATORS)
            ),
            review_count=parse_review_count(
                self._locate(card, self.REVIEW_LOCATORS)
            ),
            availability_text=availability,
            shipping_text=self._locate(card, self.SHIPPING_LOCATORS),
            condition_text=self._locate(card, self.CONDITION_LOCATORS),
        )

    @staticmethod
    def _locate(card: Tag, locators: list[Locator]) -> str | None:
        """Return the first non-empty value among *locators*."""
        for locator in locators:
            element = card.select_one(locator.selector)
            if element is None:
                continue
            if locator.attr is None:
                value = element.get_text(" ", strip=True)
            else:
                raw = element.get(locator.attr)
                value = (
                    " ".join(raw) if isinstance(raw, list) else raw
                )
            if value and value.strip():
                return value.strip()
        return None
