# pricescout/extractors/flipkart_extractor.py

"""Extractor for flipkart.com (India, ships regionally)."""

import urllib.parse

from pricescout.extractors.base_extractor import BaseExtractor, Locator


class FlipkartExtractor(BaseExtractor):
    """Extractor for Flipkart search result pages.

    Flipkart obfuscates its class names and rotates them often, hence
    the long locator lists.
    """

    source_id = "flipkart"
    label = "Flipkart"
    base_url = "https://www.flipkart.com"
    default_currency = "INR"
    supported_countries = frozenset(
        {
            "IN", "US", "GB", "CA", "AU", "AE", "SG", "MY", "BD",
            "LK", "PK", "TH", "ID", "PH", "VN", "CN", "HK", "TW",
            "KR", "JP", "NZ",
        }
    )

    CARD_SELECTORS = ["div[data-id]", "._1AtVbE", "._13oc-S"]
    NAME_LOCATORS = [
        Locator("._4rR01T"),
        Locator(".KzDlHZ"),
        Locator("a[title]", "title"),
        Locator(".s1Q9rs"),
        Locator("._2WkVRV"),
    ]
    PRICE_LOCATORS = [
        Locator("._30jeq3"),
        Locator(".Nx9bqj"),
        Locator("._1_WHN1"),
    ]
    LINK_LOCATORS = [
        Locator("a[href*='/p/']", "href"),
        Locator("a._1fQZEK[href]", "href"),
        Locator("a._2rpwqI[href]", "href"),
    ]
    RATING_LOCATORS = [
        Locator("._3LWZlK"),
        Locator(".XQDdHH"),
    ]
    REVIEW_LOCATORS = [
        Locator("._2_R_DZ"),
        Locator(".Wphh3N"),
    ]
    SHIPPING_LOCATORS = [
        Locator("._2Tpdn3"),
    ]
    DEFAULT_AVAILABILITY = "In Stock"

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        encoded = urllib.parse.quote(query, safe="")
        page_param = f"&page={page}" if page > 1 else ""
        return f"{self.base_url}/search?q={encoded}{page_param}"
