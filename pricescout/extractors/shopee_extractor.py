# pricescout/extractors/shopee_extractor.py

"""Extractor for Shopee's Southeast Asian and Latin American sites."""

import urllib.parse

from pricescout.extractors.base_extractor import BaseExtractor, Locator

_DOMAINS: dict[str, str] = {
    "SG": "shopee.sg",
    "MY": "shopee.com.my",
    "TH": "shopee.co.th",
    "ID": "shopee.co.id",
    "VN": "shopee.vn",
    "PH": "shopee.ph",
    "TW": "shopee.tw",
    "BR": "shopee.com.br",
    "MX": "shopee.com.mx",
    "CO": "shopee.com.co",
    "CL": "shopee.cl",
    "AR": "shopee.com.ar",
}

_DOMAIN_CURRENCY: dict[str, str] = {
    "shopee.sg": "SGD",
    "shopee.com.my": "MYR",
    "shopee.co.th": "THB",
    "shopee.co.id": "IDR",
    "shopee.vn": "VND",
    "shopee.ph": "PHP",
    "shopee.tw": "TWD",
    "shopee.com.br": "BRL",
    "shopee.com.mx": "MXN",
    "shopee.com.co": "COP",
    "shopee.cl": "CLP",
    "shopee.com.ar": "ARS",
}


class ShopeeExtractor(BaseExtractor):
    """Extractor for Shopee search result pages."""

    source_id = "shopee"
    label = "Shopee"
    base_url = "https://shopee.sg"
    default_currency = "SGD"
    supported_countries = frozenset(
        {
            *_DOMAINS,
            "HK", "KR", "JP", "AU", "NZ", "IN", "BD", "LK",
            "CN", "PK",
        }
    )

    CARD_SELECTORS = [
        '[data-sqe="item"]',
        ".shopee-search-item-result__item",
    ]
    NAME_LOCATORS = [
        Locator('[data-sqe="name"]'),
        Locator(".shopee-search-item-result__text"),
    ]
    PRICE_LOCATORS = [
        Locator('[data-sqe="price"]'),
        Locator(".shopee-search-item-result__price"),
    ]
    RATING_LOCATORS = [
        Locator('[data-sqe="rating"]'),
    ]
    # Shopee shows units sold rather than reviews
    REVIEW_LOCATORS = [
        Locator('[data-sqe="sold"]'),
    ]
    DEFAULT_AVAILABILITY = "In Stock"

    @staticmethod
    def domain_for(country: str) -> str:
        return _DOMAINS.get(country.upper(), "shopee.sg")

    def currency_for(self, country: str) -> str:
        return _DOMAIN_CURRENCY.get(self.domain_for(country), "SGD")

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        encoded = urllib.parse.quote(query, safe="")
        # Shopee pages are zero-based
        page_param = f"&page={page - 1}" if page > 1 else ""
        return (
            f"https://{self.domain_for(country)}/search"
            f"?keyword={encoded}{page_param}"
        )
