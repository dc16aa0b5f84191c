# pricescout/extractors/ebay_extractor.py

"""Extractor for eBay's regional sites."""

import urllib.parse

from bs4 import Tag

from pricescout.extractors.base_extractor import BaseExtractor, Locator

_DOMAINS: dict[str, str] = {
    "US": "ebay.com",
    "GB": "ebay.co.uk",
    "CA": "ebay.ca",
    "AU": "ebay.com.au",
    "DE": "ebay.de",
    "FR": "ebay.fr",
    "IT": "ebay.it",
    "ES": "ebay.es",
    "NL": "ebay.nl",
    "BE": "ebay.be",
    "AT": "ebay.at",
    "CH": "ebay.ch",
    "IE": "ebay.ie",
    "PL": "ebay.pl",
    "IN": "ebay.in",
    "SG": "ebay.com.sg",
    "MY": "ebay.com.my",
    "PH": "ebay.ph",
    "HK": "ebay.com.hk",
    # Regional fallbacks
    "NO": "ebay.de",
    "DK": "ebay.de",
    "SE": "ebay.de",
    "FI": "ebay.de",
    "CZ": "ebay.de",
    "HU": "ebay.de",
    "RO": "ebay.de",
    "BG": "ebay.de",
    "GR": "ebay.de",
    "PT": "ebay.es",
    "NZ": "ebay.com.au",
    "TH": "ebay.com.sg",
    "ID": "ebay.com.sg",
    "VN": "ebay.com.sg",
    "PK": "ebay.in",
    "BD": "ebay.in",
    "LK": "ebay.in",
}

_DOMAIN_CURRENCY: dict[str, str] = {
    "ebay.co.uk": "GBP",
    "ebay.ca": "CAD",
    "ebay.com.au": "AUD",
    "ebay.de": "EUR",
    "ebay.fr": "EUR",
    "ebay.it": "EUR",
    "ebay.es": "EUR",
    "ebay.nl": "EUR",
    "ebay.be": "EUR",
    "ebay.at": "EUR",
    "ebay.ie": "EUR",
    "ebay.ch": "CHF",
    "ebay.pl": "PLN",
    "ebay.in": "INR",
    "ebay.com.sg": "SGD",
    "ebay.com.my": "MYR",
    "ebay.ph": "PHP",
    "ebay.com.hk": "HKD",
}


class EbayExtractor(BaseExtractor):
    """Extractor for eBay search result pages.

    eBay is reachable from nearly everywhere, so every country in the
    registry is supported; countries without a local site use ebay.com.
    """

    source_id = "ebay"
    label = "eBay"
    base_url = "https://www.ebay.com"
    supported_countries = frozenset(
        {
            *_DOMAINS,
            "US", "JP", "KR", "TW", "CN", "MX", "BR", "AR", "CL",
            "CO", "PE", "AE", "SA", "IL", "TR", "EG", "QA", "KW",
            "ZA", "NG", "KE", "MA", "RU", "UA",
        }
    )

    CARD_SELECTORS = ["li.s-item", ".s-item", "li.s-card"]
    NAME_LOCATORS = [
        Locator(".s-item__title span[role='heading']"),
        Locator(".s-item__title"),
        Locator(".s-card__title"),
    ]
    PRICE_LOCATORS = [
        Locator(".s-item__price"),
        Locator(".s-card__price"),
    ]
    LINK_LOCATORS = [
        Locator("a.s-item__link[href]", "href"),
        Locator("a[href*='/itm/']", "href"),
    ]
    IMAGE_LOCATORS = [
        Locator(".s-item__image img[src]", "src"),
        Locator("img[data-src]", "data-src"),
        Locator("img[src]", "src"),
    ]
    RATING_LOCATORS = [
        Locator(".x-star-rating .clipped"),
    ]
    REVIEW_LOCATORS = [
        Locator(".s-item__reviews-count span"),
    ]
    SHIPPING_LOCATORS = [
        Locator(".s-item__shipping"),
        Locator(".s-item__logisticsCost"),
    ]
    CONDITION_LOCATORS = [
        Locator(".s-item__subtitle .SECONDARY_INFO"),
        Locator(".s-item__subtitle"),
    ]
    DEFAULT_AVAILABILITY = "Available"

    @staticmethod
    def domain_for(country: str) -> str:
        return _DOMAINS.get(country.upper(), "ebay.com")

    def currency_for(self, country: str) -> str:
        return _DOMAIN_CURRENCY.get(self.domain_for(country), "USD")

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        encoded = urllib.parse.quote(query, safe="")
        page_param = f"&_pgn={page}" if page > 1 else ""
        return (
            f"https://www.{self.domain_for(country)}/sch/i.html"
            f"?_nkw={encoded}&_sacat=0{page_param}"
        )

    def _skip_card(self, card: Tag, name: str) -> bool:
        """Skip sponsored cards and the 'Shop on eBay' placeholder."""
        if name.lower() == "shop on ebay":
            return True
        subtitle = card.select_one(".s-item__subtitle")
        return bool(
            subtitle and "Sponsored" in subtitle.get_text()
        )
