# tests/test_ebay_extractor.py

"""Tests for the eBay extractor against a saved search page."""

import unittest
from pathlib import Path

from bs4 import BeautifulSoup

from pricescout.extractors.ebay_extractor import EbayExtractor

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestEbayExtractor(unittest.TestCase):
    """Parsing and URL building for eBay."""

    def setUp(self) -> None:
        with open(FIXTURES_DIR / "ebay_search.html", encoding="utf-8") as f:
            soup = BeautifulSoup(f.read(), "lxml")
        self.extractor = EbayExtractor()
        self.listings = self.extractor.parse(soup)

    def test_placeholder_and_sponsored_cards_skipped(self) -> None:
        names = [listing.name for listing in self.listings]
        self.assertEqual(
            names,
            [
                "Apple iPhone 16 Pro 128GB Unlocked - Black",
                "Samsung Galaxy S24 256GB",
            ],
        )

    def test_fields_of_regular_card(self) -> None:
        listing = self.listings[0]
        self.assertEqual(listing.raw_price, "$899.00")
        self.assertEqual(listing.currency, "USD")
        self.assertEqual(listing.link, "https://www.ebay.com/itm/111?hash=abc")
        self.assertEqual(listing.rating, 4.5)
        self.assertEqual(listing.review_count, 87)
        self.assertEqual(listing.shipping_text, "Free shipping")
        self.assertEqual(listing.condition_text, "Pre-Owned")
        self.assertEqual(listing.availability_text, "Available")
        self.assertEqual(
            listing.image_url, "https://i.ebayimg.com/images/g/iphone16.jpg"
        )

    def test_price_range_kept_raw(self) -> None:
        listing = self.listings[1]
        self.assertEqual(listing.raw_price, "$1,050.50 to $1,200.00")
        self.assertEqual(listing.shipping_text, "+$15.00 shipping")
        self.assertEqual(listing.condition_text, "Brand New")

    def test_first_page_has_no_page_param(self) -> None:
        url = self.extractor.build_request_target("iphone 16", "US")
        self.assertEqual(
            url, "https://www.ebay.com/sch/i.html?_nkw=iphone%2016&_sacat=0"
        )

    def test_later_pages_use_pgn(self) -> None:
        url = self.extractor.build_request_target("iphone", "GB", 3)
        self.assertEqual(
            url,
            "https://www.ebay.co.uk/sch/i.html?_nkw=iphone&_sacat=0&_pgn=3",
        )

    def test_regional_currency(self) -> None:
        self.assertEqual(self.extractor.currency_for("GB"), "GBP")
        self.assertEqual(self.extractor.currency_for("SE"), "EUR")
        self.assertEqual(self.extractor.currency_for("JP"), "USD")
