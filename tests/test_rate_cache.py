# tests/test_rate_cache.py

"""Tests for CurrencyRateCache refresh policy and conversion."""

import unittest
from unittest.mock import MagicMock, patch

from pricescout.storage.rate_cache import (
    FALLBACK_RATES,
    CurrencyRateCache,
    fetch_remote_rates,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestConversion(unittest.TestCase):
    """Conversion through USD with the fallback table."""

    def setUp(self) -> None:
        self.cache = CurrencyRateCache(
            rates={"USD": 1.0, "EUR": 0.8, "GBP": 0.5}, fetch_rates=None
        )

    def test_identity(self) -> None:
        self.assertEqual(self.cache.convert(42.5, "eur", "EUR"), 42.5)
        self.assertEqual(self.cache.get_rate("JPY", "jpy"), 1.0)

    def test_cross_rate(self) -> None:
        self.assertAlmostEqual(self.cache.get_rate("EUR", "GBP"), 0.625)
        self.assertAlmostEqual(self.cache.convert(100.0, "USD", "EUR"), 80.0)
        self.assertAlmostEqual(self.cache.convert(80.0, "EUR", "USD"), 100.0)

    def test_unknown_currency(self) -> None:
        self.assertIsNone(self.cache.get_rate("USD", "XYZ"))
        with self.assertLogs("pricescout.rates", level="WARNING"):
            self.assertIsNone(self.cache.convert(10.0, "XYZ", "USD"))

    def test_defaults_to_fallback_table(self) -> None:
        cache = CurrencyRateCache(fetch_rates=None)
        self.assertEqual(
            cache.available_currencies(), sorted(FALLBACK_RATES)
        )

    def test_format_currency(self) -> None:
        self.assertEqual(
            CurrencyRateCache.format_currency(1234.5, "usd"), "$1,234.50"
        )
        self.assertEqual(
            CurrencyRateCache.format_currency(9.99, "SEK"), "SEK 9.99"
        )


class TestRefresh(unittest.TestCase):
    """ensure_fresh honours the TTL and survives failures."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.fetch = MagicMock(return_value={"USD": 1.0, "EUR": 0.9})
        self.cache = CurrencyRateCache(
            rates={"USD": 1.0, "EUR": 0.8, "GBP": 0.5},
            clock=self.clock,
            fetch_rates=self.fetch,
            ttl=60.0,
        )

    def test_stale_until_first_refresh(self) -> None:
        self.assertTrue(self.cache.is_stale())
        self.assertIsNone(self.cache.last_refresh)

    def test_refresh_merges_rates(self) -> None:
        self.assertTrue(self.cache.ensure_fresh())
        self.assertEqual(self.cache.last_refresh, 1000.0)
        self.assertAlmostEqual(self.cache.convert(100.0, "USD", "EUR"), 90.0)
        # Codes missing from the fresh table are kept
        self.assertAlmostEqual(self.cache.convert(100.0, "USD", "GBP"), 50.0)

    def test_no_refetch_within_ttl(self) -> None:
        self.cache.ensure_fresh()
        self.clock.now += 59.0
        self.assertTrue(self.cache.ensure_fresh())
        self.assertEqual(self.fetch.call_count, 1)

    def test_refetch_after_ttl(self) -> None:
        self.cache.ensure_fresh()
        self.clock.now += 60.0
        self.assertTrue(self.cache.is_stale())
        self.cache.ensure_fresh()
        self.assertEqual(self.fetch.call_count, 2)
        self.assertEqual(self.cache.last_refresh, 1060.0)

    def test_failed_refresh_keeps_rates(self) -> None:
        self.fetch.side_effect = ConnectionError("offline")
        with self.assertLogs("pricescout.rates", level="WARNING"):
            self.assertFalse(self.cache.ensure_fresh())
        self.assertAlmostEqual(self.cache.convert(100.0, "USD", "EUR"), 80.0)
        self.assertIsNone(self.cache.last_refresh)

    def test_malformed_table_rejected(self) -> None:
        for bad in ({}, {"EUR": -1.0}, {"EUR": "0.9"}, ["EUR"]):
            with self.subTest(bad=bad):
                self.fetch.return_value = bad
                self.assertFalse(self.cache.ensure_fresh())
                self.assertAlmostEqual(
                    self.cache.convert(100.0, "USD", "EUR"), 80.0
                )

    def test_no_fetcher_stays_stale(self) -> None:
        with patch(
            "pricescout.storage.rate_cache.Settings.EXCHANGE_RATE_API_URL", ""
        ):
            cache = CurrencyRateCache(rates={"USD": 1.0})
        self.assertFalse(cache.ensure_fresh())
        self.assertTrue(cache.is_stale())


class TestFetchRemoteRates(unittest.TestCase):
    """The HTTP client is mocked by the autouse network guard."""

    @patch("pricescout.storage.rate_cache.curl_requests.get")
    def test_returns_rates(self, mock_get: MagicMock) -> None:
        mock_get.return_value.status_code = 200
        mock_get.return_value.json.return_value = {
            "result": "success",
            "rates": {"USD": 1, "EUR": 0.92},
        }
        self.assertEqual(
            fetch_remote_rates("https://rates.example/USD"),
            {"USD": 1, "EUR": 0.92},
        )

    @patch("pricescout.storage.rate_cache.curl_requests.get")
    def test_non_200_raises(self, mock_get: MagicMock) -> None:
        mock_get.return_value.status_code = 500
        with self.assertRaises(ValueError):
            fetch_remote_rates("https://rates.example/USD")
