# pricescout/extractors/generic_extractor.py

"""Fallback extractor backed by Google Shopping results."""

import urllib.parse

from pricescout.config.countries import SourceRegistry
from pricescout.extractors.base_extractor import BaseExtractor, Locator


class GenericExtractor(BaseExtractor):
    """Google Shopping as a catch-all source for every known country.

    Prices carry a local symbol most of the time; when they do not, the
    country's own currency is assumed.
    """

    source_id = "generic"
    label = "Google Shopping"
    base_url = "https://www.google.com"

    CARD_SELECTORS = [".sh-dgr__content", ".sh-dlr__list-result"]
    NAME_LOCATORS = [
        Locator(".sh-np__product-title"),
        Locator("h3"),
        Locator(".tAxDx"),
    ]
    PRICE_LOCATORS = [
        Locator(".sh-np__price"),
        Locator("span.a8Pemb"),
        Locator(".kHxwFf span"),
    ]
    LINK_LOCATORS = [
        Locator("a.shntl[href]", "href"),
        Locator("a[href]", "href"),
    ]
    RATING_LOCATORS = [
        Locator(".Rsc7Yb"),
    ]
    REVIEW_LOCATORS = [
        Locator(".QIrs8"),
    ]
    SHIPPING_LOCATORS = [
        Locator(".vEjMR"),
    ]
    DEFAULT_AVAILABILITY = "Available"

    def __init__(self, registry: SourceRegistry | None = None) -> None:
        super().__init__()
        self._registry = registry or SourceRegistry()
        self.supported_countries = frozenset(
            c.code for c in self._registry.supported_countries()
        )

    def currency_for(self, country: str) -> str:
        return (
            self._registry.currency_for(country)
            or self.default_currency
        )

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        encoded = urllib.parse.quote(query, safe="")
        start_param = (
            f"&start={(page - 1) * 10}" if page > 1 else ""
        )
        return (
            f"{self.base_url}/search?q={encoded}&tbm=shop"
            f"&gl={country.lower()}{start_param}"
        )
