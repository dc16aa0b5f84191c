# tests/test_batch_coordinator.py

"""Tests for BatchCoordinator fan-out, retry and the full search path."""

import unittest
from unittest.mock import MagicMock

from bs4 import BeautifulSoup

from pricescout.config.countries import CountryConfig, SourceRegistry
from pricescout.extractors.base_extractor import BaseExtractor
from pricescout.filters.result_processor import ResultProcessor
from pricescout.models.listing import Listing
from pricescout.models.search import SearchOptions
from pricescout.services.batch_coordinator import BatchCoordinator
from pricescout.services.transport import TransportError
from pricescout.storage.rate_cache import CurrencyRateCache


class FakeExtractor(BaseExtractor):
    """Returns ``items`` on page 1 after ``failures`` empty runs."""

    supported_countries = frozenset({"US", "GB"})

    def __init__(
        self,
        source_id: str,
        items: list[tuple[str, str]],
        failures: int = 0,
        crash: bool = False,
    ) -> None:
        self.source_id = source_id
        self.label = source_id.title()
        super().__init__()
        self.items = items
        self.failures = failures
        self.crash = crash
        self.pages_requested: list[int] = []

    def build_request_target(
        self, query: str, country: str, page: int = 1,
    ) -> str:
        if self.crash:
            raise RuntimeError("extractor exploded")
        self.pages_requested.append(page)
        return f"https://{self.source_id}.example/s?q={query}&page={page}"

    def parse(self, document, page_url=None, default_currency=None):
        if not page_url.endswith("page=1"):
            return []
        if self.failures:
            self.failures -= 1
            return []
        return [
            Listing(
                link=f"https://{self.source_id}.example/{i}",
                raw_price=price,
                currency="USD",
                name=name,
                source_id=self.source_id,
            )
            for i, (name, price) in enumerate(self.items)
        ]


class StubTransport:
    def fetch(self, url: str) -> BeautifulSoup:
        return BeautifulSoup("<html></html>", "lxml")

    def close(self) -> None:
        pass


def _registry(*source_ids: str) -> SourceRegistry:
    return SourceRegistry(
        {
            "US": CountryConfig(
                "US", "United States", "USD", list(source_ids)
            ),
            "GB": CountryConfig("GB", "United Kingdom", "GBP", []),
        }
    )


class CoordinatorTestCase(unittest.IsolatedAsyncioTestCase):
    def _coordinator(self, *extractors: FakeExtractor) -> BatchCoordinator:
        self.sleeps: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            self.sleeps.append(seconds)

        return BatchCoordinator(
            registry=_registry(*(e.source_id for e in extractors)),
            extractors={e.source_id: e for e in extractors},
            transport_factory=StubTransport,
            processor=ResultProcessor(
                CurrencyRateCache(
                    rates={"USD": 1.0, "EUR": 0.5}, fetch_rates=MagicMock()
                )
            ),
            sleep=fake_sleep,
            stagger=2.0,
        )


class TestSearchOnce(CoordinatorTestCase):
    """One fan-out pass."""

    async def test_partial_failure_is_reported(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")]),
            FakeExtractor("beta", [], failures=1),
            FakeExtractor("gamma", [("Kettle XL", "$30.00")]),
        )
        result = await coordinator.search_once(
            "kettle", "US", SearchOptions(max_pages=1)
        )

        self.assertEqual(len(result.listings), 2)
        self.assertEqual(
            result.errors, ["Beta: No products found across all pages"]
        )
        self.assertEqual(result.failed_source_ids, ["beta"])
        summary = result.summary
        self.assertEqual(summary.successful_sources, 2)
        self.assertEqual(summary.failed_sources, 1)
        self.assertEqual(summary.source_names, ["alpha", "beta", "gamma"])
        self.assertEqual(summary.total_pages_attempted, 3)
        self.assertEqual(summary.total_listings, 2)

    async def test_sources_are_staggered(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")]),
            FakeExtractor("beta", [("Kettle", "$21.00")]),
            FakeExtractor("gamma", [("Kettle", "$22.00")]),
        )
        await coordinator.search_once(
            "kettle", "US", SearchOptions(max_pages=1)
        )
        self.assertEqual(sorted(self.sleeps), [2.0, 4.0])

    async def test_crash_becomes_error(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")]),
            FakeExtractor("beta", [], crash=True),
        )
        result = await coordinator.search_once(
            "kettle", "US", SearchOptions(max_pages=1)
        )
        self.assertEqual(len(result.listings), 1)
        self.assertEqual(result.errors, ["Beta: extractor exploded"])
        self.assertEqual(result.summary.failed_sources, 1)

    async def test_no_sources(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")])
        )
        result = await coordinator.search_once("kettle", "GB")
        self.assertEqual(result.listings, [])
        self.assertEqual(
            result.errors, ["no sources available for country: GB"]
        )

    async def test_unknown_country(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")])
        )
        result = await coordinator.search_once("kettle", "ZZ")
        self.assertEqual(
            result.errors, ["no sources available for country: ZZ"]
        )

    async def test_registry_ids_without_extractor_skipped(self) -> None:
        alpha = FakeExtractor("alpha", [("Kettle", "$20.00")])
        coordinator = self._coordinator(alpha)
        coordinator.registry = _registry("walmart", "alpha")
        self.assertEqual(coordinator.resolve_sources("us"), [alpha])


class TestSearchComprehensive(CoordinatorTestCase):
    """The single retry pass over failed sources."""

    async def test_retry_recovers_failed_source(self) -> None:
        alpha = FakeExtractor("alpha", [("Kettle", "$20.00")])
        beta = FakeExtractor("beta", [("Kettle Pro", "$25.00")], failures=1)
        coordinator = self._coordinator(alpha, beta)

        result = await coordinator.search_comprehensive(
            "kettle", "US", SearchOptions(max_pages=3)
        )

        self.assertEqual(result.summary.retry_attempts, 1)
        self.assertEqual(result.summary.successful_sources, 2)
        self.assertEqual(result.summary.failed_sources, 0)
        self.assertEqual(result.failed_source_ids, [])
        self.assertEqual(
            sorted(x.source_id for x in result.listings), ["alpha", "beta"]
        )
        # alpha ran once; beta ran once plus a one-page retry
        self.assertEqual(alpha.pages_requested, [1, 2])
        self.assertEqual(beta.pages_requested, [1, 1])

    async def test_retry_disabled(self) -> None:
        beta = FakeExtractor("beta", [("Kettle", "$20.00")], failures=1)
        coordinator = self._coordinator(beta)
        result = await coordinator.search_comprehensive(
            "kettle",
            "US",
            SearchOptions(max_pages=1, retry_failed_sites=False),
        )
        self.assertEqual(result.summary.retry_attempts, 0)
        self.assertEqual(result.summary.failed_sources, 1)
        self.assertEqual(beta.pages_requested, [1])

    async def test_retry_that_fails_again(self) -> None:
        beta = FakeExtractor("beta", [("Kettle", "$20.00")], failures=2)
        coordinator = self._coordinator(beta)
        result = await coordinator.search_comprehensive(
            "kettle", "US", SearchOptions(max_pages=1)
        )
        self.assertEqual(result.summary.retry_attempts, 1)
        self.assertEqual(result.summary.failed_sources, 1)
        self.assertEqual(len(result.errors), 2)


class TestSearch(CoordinatorTestCase):
    """Fetch, match, rank and deduplicate end to end."""

    async def test_search_returns_ranked_matches(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor(
                "alpha",
                [("Electric Kettle 1.7L", "$35.00"), ("Desk Lamp", "$9.00")],
            ),
            FakeExtractor("beta", [("Glass Electric Kettle", "$22.00")]),
        )

        response = await coordinator.search(
            "electric kettle", "us", SearchOptions(max_pages=1)
        )

        self.assertEqual(response.country, "US")
        self.assertEqual(
            [s.listing.name for s in response.listings],
            ["Glass Electric Kettle", "Electric Kettle 1.7L"],
        )
        self.assertEqual(response.errors, [])
        self.assertEqual(response.summary.total_listings, 3)
        self.assertEqual(response.statistics["total_listings"], 2)
        self.assertEqual(
            response.statistics["source_breakdown"], {"beta": 1, "alpha": 1}
        )
        self.assertEqual(response.statistics["results"]["average_price"], 28.5)
        matching = response.statistics["matching"]
        self.assertEqual(matching["total_listings"], 3)
        self.assertEqual(matching["exact_matches"], 2)
        self.assertEqual(matching["no_matches"], 1)

    async def test_quick_mode_skips_retry(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")], failures=1)
        )
        response = await coordinator.search(
            "kettle", "US", SearchOptions(max_pages=1, comprehensive=False)
        )
        self.assertEqual(response.listings, [])
        self.assertIsNone(response.summary.retry_attempts)
        self.assertEqual(len(response.errors), 1)


class TestSingleSourceAndInfo(CoordinatorTestCase):
    async def test_search_source(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")])
        )
        outcome = await coordinator.search_source("ALPHA", "kettle", "us")
        self.assertTrue(outcome.succeeded)
        self.assertEqual(len(outcome.listings), 1)

    async def test_search_unknown_source(self) -> None:
        coordinator = self._coordinator()
        outcome = await coordinator.search_source("nope", "kettle", "US")
        self.assertFalse(outcome.succeeded)
        self.assertEqual(outcome.error, "Unknown source: nope")

    def test_source_info(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")])
        )
        self.assertEqual(coordinator.available_sources(), ["alpha"])
        info = coordinator.source_info("alpha")
        self.assertEqual(info["label"], "Alpha")
        self.assertEqual(info["supported_countries"], ["GB", "US"])
        self.assertIsNone(coordinator.source_info("missing"))

    def test_scraping_stats(self) -> None:
        stats = BatchCoordinator.scraping_stats(
            [
                Listing("https://a/1", "$10.00", "USD", "A", "alpha"),
                Listing("https://a/2", "$30.00", "USD", "B", "alpha"),
                Listing("https://b/1", "£5.00", "GBP", "C", "beta"),
            ]
        )
        self.assertEqual(stats["source_breakdown"], {"alpha": 2, "beta": 1})
        self.assertEqual(stats["currency_breakdown"], {"USD": 2, "GBP": 1})
        self.assertEqual(
            stats["price_ranges"]["USD"], {"min": 10.0, "max": 30.0, "avg": 20.0}
        )
        self.assertEqual(stats["total_listings"], 3)


class DownTransport(StubTransport):
    """Every fetch for one host fails."""

    def __init__(self, host: str) -> None:
        self.host = host

    def fetch(self, url: str) -> BeautifulSoup:
        if self.host in url:
            raise TransportError("request failed: timed out")
        return super().fetch(url)


class TestUnreachableSource(CoordinatorTestCase):
    async def test_other_sources_still_return(self) -> None:
        coordinator = self._coordinator(
            FakeExtractor("alpha", [("Kettle", "$20.00")]),
            FakeExtractor("beta", [("Kettle", "$21.00")]),
        )
        coordinator.transport_factory = lambda: DownTransport("beta.example")

        result = await coordinator.search_once(
            "kettle", "US", SearchOptions(max_pages=2)
        )

        self.assertEqual([x.source_id for x in result.listings], ["alpha"])
        self.assertEqual(
            result.errors, ["Beta: request failed: timed out"]
        )
        self.assertEqual(result.summary.successful_sources, 1)
        self.assertEqual(result.summary.total_pages_attempted, 4)
