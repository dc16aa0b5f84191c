# pricescout/extractors/amazon_extractor.py

"""Extractor for Amazon's regional storefronts."""

import urllib.parse

from pricescout.extractors.base_extractor import BaseExtractor, Locator

_DOMAINS: dict[str, str] = {
    "US": "amazon.com",
    "IN": "amazon.in",
    "GB": "amazon.co.uk",
    "CA": "amazon.ca",
    "AU": "amazon.com.au",
    "DE": "amazon.de",
    "FR": "amazon.fr",
    "JP": "amazon.co.jp",
    "BR": "amazon.com.br",
    "MX": "amazon.com.mx",
    "IT": "amazon.it",
    "ES": "amazon.es",
    "NL": "amazon.nl",
    "SE": "amazon.se",
    "PL": "amazon.pl",
    "TR": "amazon.com.tr",
    "AE": "amazon.ae",
    "SA": "amazon.sa",
    "SG": "amazon.sg",
    "EG": "amazon.eg",
    "BE": "amazon.com.be",
    "CN": "amazon.cn",
    # Countries served by a neighbouring storefront
    "AT": "amazon.de",
    "CH": "amazon.de",
    "CZ": "amazon.de",
    "HU": "amazon.de",
    "RO": "amazon.de",
    "BG": "amazon.de",
    "GR": "amazon.de",
    "NO": "amazon.se",
    "DK": "amazon.se",
    "FI": "amazon.se",
    "IE": "amazon.co.uk",
    "PT": "amazon.es",
    "NZ": "amazon.com.au",
    "TH": "amazon.sg",
    "MY": "amazon.sg",
    "ID": "amazon.sg",
    "PH": "amazon.sg",
    "VN": "amazon.sg",
}

_DOMAIN_CURRENCY: dict[str, str] = {
    "amazon.com": "USD",
    "amazon.in": "INR",
    "amazon.co.uk": "GBP",
    "amazon.ca": "CAD",
    "amazon.com.au": "AUD",
    "amazon.de": "EUR",
    "amazon.fr": "EUR",
    "amazon.it": "EUR",
    "amazon.es": "EUR",
    "amazon.nl": "EUR",
    "amazon.com.be": "EUR",
    "amazon.co.jp": "JPY",
    "amazon.com.br": "BRL",
    "amazon.com.mx": "MXN",
    "amazon.se": "SEK",
    "amazon.pl": "PLN",
    "amazon.com.tr": "TRY",
    "amazon.ae": "AED",
    "amazon.sa": "SAR",
    "amazon.sg": "SGD",
    "amazon.eg": "EGP",
    "amazon.cn": "CNY",
}


class AmazonExtractor(BaseExtractor):
    """Extractor for Amazon search result pages."""

    source_id = "amazon"
    label = "Amazon"
    base_url = "https://www.amazon.com"
    supported_countries = frozenset(
        {
            *_DOMAINS,
            "AR", "CL", "CO", "PE", "HK", "TW", "KR", "IL",
            "ZA", "RU", "UA", "PK", "BD", "LK", "QA", "KW",
            "NG", "KE", "MA",
        }
    )

    CARD_SELECTORS = [
        '[data-component-type="s-search-result"]',
        ".s-result-item[data-asin]",
        "[data-asin]",
    ]
    NAME_LOCATORS = [
        Locator("h2 a span"),
        Locator("h2 span"),
        Locator('[data-cy="title-recipe"] span'),
        Locator(".s-size-mini span"),
    ]
    PRICE_LOCATORS = [
        Locator(".a-price .a-offscreen"),
        Locator(".a-price-range .a-offscreen"),
        Locator(".a-price-whole"),
    ]
    LINK_LOCATORS = [
        Locator("h2 a[href]", "href"),
        Locator("a.s-no-outline[href]", "href"),
        Locator(".s-link-style a[href]", "href"),
    ]
    IMAGE_LOCATORS = [
        Locator("img.s-image[src]", "src"),
        Locator("img[src]", "src"),
    ]
    RATING_LOCATORS = [
        Locator(".a-icon-alt"),
        Locator('[aria-label*="out of 5"]', "aria-label"),
    ]
    REVIEW_LOCATORS = [
        Locator("span.a-size-base.s-underline-text"),
        Locator('[aria-label*="ratings"]', "aria-label"),
    ]
    AVAILABILITY_LOCATORS = [
        Locator('span[aria-label*="in stock"]', "aria-label"),
        Locator('span[aria-label*="unavailable"]', "aria-label"),
    ]
    SHIPPING_LOCATORS = [
        Locator('[data-cy="delivery-recipe"]'),
        Locator(".s-align-children-center"),
    ]
    DEFAULT_AVAILABILITY = "In Stock"

    @staticmethod
    def domain_for(country: str) -> str:
        """Return the storefront domain serving *country*."""
        return _DOMAINS.get(country.upper(), "amazon.com")

    def currency_for(self, country: str) -> str:
        return _DOMAIN_CURRENCY.get(self.domain_for(country), "USD")

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        encoded = urllib.parse.quote(query, safe="")
        return (
            f"https://www.{self.domain_for(country)}/s"
            f"?k={encoded}&page={page}&ref=sr_pg_{page}"
        )
