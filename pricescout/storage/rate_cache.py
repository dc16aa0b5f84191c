# pricescout/storage/rate_cache.py

"""Process-wide exchange rate table with a time-bounded refresh."""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from curl_cffi import requests as curl_requests

from pricescout.config.settings import Settings

logger = logging.getLogger("pricescout.rates")

# Units per 1 USD, used until the first successful refresh
FALLBACK_RATES: dict[str, float] = {
    # Major
    "USD": 1.0, "EUR": 0.85, "GBP": 0.73, "JPY": 110.0, "CHF": 0.92,
    "CAD": 1.25, "AUD": 1.35, "NZD": 1.45,
    # Asia
    "INR": 74.0, "CNY": 6.45, "KRW": 1180.0, "SGD": 1.35, "MYR": 4.15,
    "THB": 33.0, "IDR": 14500.0, "PHP": 50.0, "VND": 23000.0,
    "HKD": 7.8, "TWD": 28.0, "PKR": 155.0, "BDT": 85.0, "LKR": 200.0,
    "NPR": 118.0, "MMK": 1400.0, "KHR": 4100.0, "LAK": 8500.0,
    "BND": 1.35, "MNT": 2550.0, "AFN": 75.0,
    # Europe outside the euro area
    "SEK": 8.5, "NOK": 8.8, "DKK": 6.3, "PLN": 3.9, "CZK": 21.5,
    "HUF": 295.0, "RON": 4.2, "BGN": 1.66, "RUB": 75.0, "UAH": 27.0,
    "BYN": 2.5, "KZT": 425.0, "UZS": 10500.0, "TRY": 8.5,
    # Middle East
    "AED": 3.67, "SAR": 3.75, "ILS": 3.2, "EGP": 15.7, "QAR": 3.64,
    "KWD": 0.30, "BHD": 0.38, "OMR": 0.38, "JOD": 0.71, "LBP": 1500.0,
    "IQD": 1460.0, "IRR": 42000.0, "SYP": 2500.0, "YER": 250.0,
    # Latin America
    "BRL": 5.2, "MXN": 20.0, "ARS": 98.0, "CLP": 750.0, "COP": 3600.0,
    "PEN": 3.6, "UYU": 43.0, "PYG": 6800.0, "BOB": 6.9, "VES": 4.2,
    "GYD": 209.0, "SRD": 14.3,
    # Africa
    "ZAR": 14.5, "NGN": 410.0, "KES": 108.0, "GHS": 5.8, "MAD": 9.0,
    "TND": 2.8, "DZD": 135.0, "ETB": 44.0, "UGX": 3550.0, "TZS": 2300.0,
}

_DISPLAY_SYMBOLS: dict[str, str] = {
    "USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "CNY": "¥",
    "CAD": "C$", "AUD": "A$", "NZD": "NZ$", "INR": "₹", "KRW": "₩",
    "SGD": "S$", "MYR": "RM", "THB": "฿", "IDR": "Rp", "PHP": "₱",
    "VND": "₫", "HKD": "HK$", "TWD": "NT$", "PLN": "zł", "RUB": "₽",
    "UAH": "₴", "TRY": "₺", "ILS": "₪", "BRL": "R$", "MXN": "MX$",
    "ZAR": "R", "NGN": "₦", "KES": "KSh",
}


def fetch_remote_rates(
    url: str | None = None,
    timeout: float | None = None,
) -> dict[str, float]:
    """Download a USD-based rate table (``{"rates": {...}}`` JSON)."""
    resp = curl_requests.get(
        url or Settings.EXCHANGE_RATE_API_URL,
        timeout=timeout or Settings.REQUEST_TIMEOUT,
        impersonate=Settings.IMPERSONATE_BROWSER,
    )
    if resp.status_code != 200:
        raise ValueError(f"rate API returned HTTP {resp.status_code}")
    payload: Any = resp.json()
    rates: dict[str, float] = payload["rates"]
    return rates


class CurrencyRateCache:
    """USD-based exchange rates, refreshed at most once per TTL.

    The clock and the fetcher are injected so the refresh policy can be
    driven by a fake clock in tests. A failed or malformed refresh keeps
    every previously known rate.
    """

    def __init__(
        self,
        rates: dict[str, float] | None = None,
        clock: Callable[[], float] = time.monotonic,
        fetch_rates: Callable[[], dict[str, float]] | None = None,
        ttl: float | None = None,
    ) -> None:
        self._rates: dict[str, float] = dict(
            FALLBACK_RATES if rates is None else rates
        )
        self._clock = clock
        if fetch_rates is None and Settings.EXCHANGE_RATE_API_URL:
            fetch_rates = fetch_remote_rates
        self._fetch_rates = fetch_rates
        self._ttl = ttl if ttl is not None else Settings.RATE_CACHE_TTL
        self._last_refresh: float | None = None
        self._lock = threading.Lock()

    @property
    def last_refresh(self) -> float | None:
        return self._last_refresh

    def is_stale(self) -> bool:
        if self._last_refresh is None:
            return True
        return self._clock() - self._last_refresh >= self._ttl

    @staticmethod
    def _validate(table: Any) -> dict[str, float]:
        """Return a cleaned copy of *table* or raise ValueError."""
        if not isinstance(table, dict) or not table:
            raise ValueError("rate table is empty or not a mapping")
        cleaned: dict[str, float] = {}
        for code, rate in table.items():
            if (
                not isinstance(code, str)
                or isinstance(rate, bool)
                or not isinstance(rate, (int, float))
                or rate <= 0
            ):
                raise ValueError(f"invalid rate entry {code!r}: {rate!r}")
            cleaned[code.upper()] = float(rate)
        return cleaned

    def ensure_fresh(self) -> bool:
        """Refresh the table if the TTL has elapsed.

        Returns True when the rates in use are fresh after the call.
        Blocking; async callers run it in a worker thread.
        """
        with self._lock:
            if not self.is_stale():
                return True
            if self._fetch_rates is None:
                return False
            try:
                fresh = self._validate(self._fetch_rates())
            except Exception as exc:
                logger.warning(
                    "Exchange rate refresh failed, keeping %d known "
                    "rates: %s",
                    len(self._rates),
                    exc,
                )
                return False
            self._rates = {**self._rates, **fresh}
            self._last_refresh = self._clock()
            logger.info("Refreshed %d exchange rates", len(fresh))
            return True

    def get_rate(self, from_code: str, to_code: str) -> float | None:
        """Units of *to_code* per unit of *from_code*, or ``None``."""
        from_code, to_code = from_code.upper(), to_code.upper()
        if from_code == to_code:
            return 1.0
        rates = self._rates
        from_rate = rates.get(from_code)
        to_rate = rates.get(to_code)
        if not from_rate or not to_rate:
            return None
        return to_rate / from_rate

    def convert(
        self, amount: float, from_code: str, to_code: str,
    ) -> float | None:
        """Convert *amount* through USD; ``None`` when a rate is unknown."""
        if from_code.upper() == to_code.upper():
            return amount
        rate = self.get_rate(from_code, to_code)
        if rate is None:
            logger.warning(
                "Exchange rate not available for %s -> %s",
                from_code,
                to_code,
            )
            return None
        return amount * rate

    def available_currencies(self) -> list[str]:
        return sorted(self._rates)

    @staticmethod
    def format_currency(amount: float, code: str) -> str:
        symbol = _DISPLAY_SYMBOLS.get(code.upper(), f"{code.upper()} ")
        return f"{symbol}{amount:,.2f}"
