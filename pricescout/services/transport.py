# pricescout/services/transport.py

"""Blocking page fetcher with browser impersonation and a fallback client."""

import logging
import random
import time
from collections.abc import Callable
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from pricescout.config.settings import Settings

logger = logging.getLogger("pricescout.transport")


class TransportError(Exception):
    """A fetch produced no usable document."""


class FetchTransport:
    """Fetches one URL per call and returns the parsed document.

    Each call is bounded by ``REQUEST_TIMEOUT`` in total with a randomly
    chosen ``User-Agent``. The cloudscraper fallback only gets what is
    left of that budget after the primary attempt. Pacing and retries
    belong to the callers. Sessions are not thread-safe, so the
    orchestrator creates one transport per source run.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(
        self,
        timeout: float | None = None,
        use_fallback: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = Settings()
        self.clock = clock
        self.timeout = (
            timeout if timeout is not None
            else self.settings.REQUEST_TIMEOUT
        )
        self.use_fallback = (
            use_fallback if use_fallback is not None
            else self.settings.CLOUDSCRAPER_FALLBACK
        )
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _headers(self) -> dict[str, str]:
        return {
            **self.settings.DEFAULT_HEADERS,
            "User-Agent": random.choice(self.settings.USER_AGENTS),
        }

    def _is_challenge(self, text: str) -> bool:
        """Detect Cloudflare challenge pages and CAPTCHA walls."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return True

        # Large pages with a body are real results that merely
        # mention one of the keywords
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    logger.warning(
                        "CAPTCHA keyword '%s' detected", keyword
                    )
                    return True
        return False

    def _primary(self, url: str, headers: dict[str, str]) -> str:
        try:
            resp = self.session.get(
                url, headers=headers, timeout=self.timeout
            )
        except Exception as exc:
            raise TransportError(f"request failed: {exc}") from exc
        if resp.status_code != 200:
            raise TransportError(f"HTTP {resp.status_code}")
        if self._is_challenge(resp.text):
            raise TransportError("blocked by anti-bot challenge")
        return resp.text

    def _fallback(
        self, url: str, headers: dict[str, str], timeout: float,
    ) -> str:
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url, headers=headers, timeout=timeout
            )
        except Exception as exc:
            raise TransportError(
                f"fallback request failed: {exc}"
            ) from exc
        if resp.status_code != 200:
            raise TransportError(f"fallback HTTP {resp.status_code}")
        text = str(resp.text)
        if self._is_challenge(text):
            raise TransportError(
                "fallback blocked by anti-bot challenge"
            )
        return text

    def fetch(self, url: str) -> BeautifulSoup:
        """Return the parsed document at *url* or raise TransportError."""
        headers = self._headers()
        deadline = self.clock() + self.timeout
        try:
            text = self._primary(url, headers)
        except TransportError as exc:
            if not self.use_fallback:
                logger.warning("Fetch failed for %s: %s", url, exc)
                raise
            remaining = deadline - self.clock()
            if remaining <= 0:
                logger.warning(
                    "Fetch failed for %s: %s (no time left for fallback)",
                    url,
                    exc,
                )
                raise TransportError(
                    f"timed out after {self.timeout}s: {exc}"
                ) from exc
            logger.info(
                "curl_cffi failed for %s (%s), "
                "falling back to cloudscraper",
                url,
                exc,
            )
            try:
                text = self._fallback(url, headers, remaining)
            except TransportError as fallback_exc:
                logger.warning(
                    "Fetch failed for %s: %s", url, fallback_exc
                )
                raise
        return BeautifulSoup(text, "lxml")

    def close(self) -> None:
        self.session.close()
