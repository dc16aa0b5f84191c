# tests/test_file_manager.py

"""Tests for the FileManager storage module."""

import json
import tempfile
import unittest
from pathlib import Path

from pricescout.models.listing import Listing, MatchResult, ScoredListing
from pricescout.models.search import SearchResponse, SearchSummary
from pricescout.storage.file_manager import FileManager, response_to_dict


def _response() -> SearchResponse:
    listing = Listing(
        link="https://www.amazon.de/dp/X1",
        raw_price="129,99 €",
        currency="EUR",
        name="Wasserkocher Edelstahl",
        source_id="amazon",
        rating=4.3,
    )
    return SearchResponse(
        query="electric kettle",
        country="DE",
        listings=[
            ScoredListing(
                listing=listing,
                normalized_price=129.99,
                quality_score=62,
                match=MatchResult(True, 0.75, "Good match", "structured"),
                converted_price=152.93,
                target_currency="USD",
            )
        ],
        errors=["eBay: HTTP 503"],
        summary=SearchSummary(
            total_listings=4,
            successful_sources=1,
            failed_sources=1,
            source_names=["amazon", "ebay"],
            total_pages_attempted=4,
            retry_attempts=1,
        ),
    )


class TestFileManager(unittest.TestCase):
    """Tests for JSON save."""

    def setUp(self) -> None:
        """Set up a temp directory for results."""
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.fm = FileManager(Path(self.tmp.name) / "results")

    def test_results_dir_created(self) -> None:
        self.assertTrue(self.fm.results_dir.is_dir())

    def test_save_response(self) -> None:
        path = self.fm.save_response(_response())
        self.assertTrue(path.exists())
        self.assertRegex(
            path.name, r"^DE_electric_kettle_\d{8}_\d{6}\.json$"
        )
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["query"], "electric kettle")
        self.assertEqual(data["errors"], ["eBay: HTTP 503"])
        self.assertEqual(data["summary"]["retry_attempts"], 1)
        item = data["listings"][0]
        self.assertEqual(item["listing"]["raw_price"], "129,99 €")
        self.assertEqual(item["match"]["strategy"], "structured")
        self.assertEqual(item["comparable_price"], 152.93)

    def test_response_to_dict_is_json_safe(self) -> None:
        data = response_to_dict(_response())
        self.assertEqual(json.loads(json.dumps(data)), data)


if __name__ == "__main__":
    unittest.main()
