# pricescout/extractors/lazada_extractor.py

"""Extractor for Lazada (Southeast Asia)."""

import urllib.parse

from pricescout.extractors.base_extractor import BaseExtractor, Locator

_DOMAINS: dict[str, str] = {
    "SG": "www.lazada.sg",
    "MY": "www.lazada.com.my",
    "TH": "www.lazada.co.th",
    "ID": "www.lazada.co.id",
    "VN": "www.lazada.vn",
    "PH": "www.lazada.com.ph",
}

_DOMAIN_CURRENCY: dict[str, str] = {
    "www.lazada.sg": "SGD",
    "www.lazada.com.my": "MYR",
    "www.lazada.co.th": "THB",
    "www.lazada.co.id": "IDR",
    "www.lazada.vn": "VND",
    "www.lazada.com.ph": "PHP",
}


class LazadaExtractor(BaseExtractor):
    """Extractor for Lazada catalog pages."""

    source_id = "lazada"
    label = "Lazada"
    base_url = "https://www.lazada.sg"
    default_currency = "SGD"
    supported_countries = frozenset(
        {
            *_DOMAINS,
            "HK", "TW", "KR", "JP", "AU", "NZ", "IN", "BD",
            "LK", "CN",
        }
    )

    CARD_SELECTORS = [
        '[data-qa-locator="product-item"]',
        "[data-tracking='product-card']",
    ]
    NAME_LOCATORS = [
        Locator('[data-qa-locator="product-name"]'),
        Locator(".RfADt"),
        Locator("a[title]", "title"),
    ]
    PRICE_LOCATORS = [
        Locator('[data-qa-locator="product-price"]'),
        Locator(".aBrP0"),
        Locator(".ooOxS"),
    ]
    RATING_LOCATORS = [
        Locator('[data-qa-locator="product-rating"]'),
    ]
    REVIEW_LOCATORS = [
        Locator('[data-qa-locator="product-review-count"]'),
        Locator(".qzqFw"),
    ]
    DEFAULT_AVAILABILITY = "In Stock"

    @staticmethod
    def domain_for(country: str) -> str:
        return _DOMAINS.get(country.upper(), "www.lazada.sg")

    def currency_for(self, country: str) -> str:
        return _DOMAIN_CURRENCY.get(self.domain_for(country), "SGD")

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        encoded = urllib.parse.quote(query, safe="")
        page_param = f"&page={page}" if page > 1 else ""
        return (
            f"https://{self.domain_for(country)}/catalog/"
            f"?q={encoded}{page_param}"
        )
