# pricescout/services/source_orchestrator.py

"""Runs one source across several result pages."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Protocol

from bs4 import BeautifulSoup

from pricescout.config.settings import Settings
from pricescout.extractors.base_extractor import BaseExtractor
from pricescout.models.listing import FetchOutcome, Listing
from pricescout.services.transport import FetchTransport, TransportError

logger = logging.getLogger("pricescout.orchestrator")

NO_PRODUCTS_ERROR = "No products found across all pages"


class Transport(Protocol):
    def fetch(self, url: str) -> BeautifulSoup: ...

    def close(self) -> None: ...


SleepFn = Callable[[float], Awaitable[object]]


class SourceOrchestrator:
    """Fetches and parses up to ``max_pages`` pages for one source.

    A failed page is logged and skipped; a fetch that outlives
    ``PAGE_FETCH_TIMEOUT`` counts as a failed page. A page that parses
    to zero listings ends the run. The latter is a heuristic: a
    transient empty page looks exactly like the end of the results.
    """

    def __init__(
        self,
        extractor: BaseExtractor,
        transport_factory: Callable[[], Transport] = FetchTransport,
        sleep: SleepFn = asyncio.sleep,
        delay_range: tuple[float, float] | None = None,
        fetch_timeout: float | None = None,
    ) -> None:
        self.extractor = extractor
        self.transport_factory = transport_factory
        self.sleep = sleep
        self.delay_range = delay_range or Settings.PAGE_DELAY_RANGE
        self.fetch_timeout = (
            fetch_timeout if fetch_timeout is not None
            else Settings.PAGE_FETCH_TIMEOUT
        )

    async def run(
        self,
        query: str,
        country: str,
        max_pages: int = Settings.DEFAULT_MAX_PAGES,
    ) -> FetchOutcome:
        """Collect listings from pages ``1..max_pages``."""
        source_id = self.extractor.source_id
        if not self.extractor.supports(country):
            return FetchOutcome(
                source_id=source_id,
                succeeded=False,
                error=(
                    f"{self.extractor.label} does not support "
                    f"country {country.upper()}"
                ),
            )

        currency = self.extractor.currency_for(country)
        listings: list[Listing] = []
        pages_attempted = 0
        fetched_any = False
        last_error: str | None = None

        transport = self.transport_factory()
        try:
            for page in range(1, max_pages + 1):
                if page > 1:
                    await self.sleep(random.uniform(*self.delay_range))

                url = self.extractor.build_request_target(
                    query, country, page
                )
                pages_attempted += 1
                logger.debug(
                    "[%s] Fetching page %d: %s", source_id, page, url
                )

                try:
                    document = await asyncio.wait_for(
                        asyncio.to_thread(transport.fetch, url),
                        timeout=self.fetch_timeout,
                    )
                except asyncio.TimeoutError:
                    last_error = (
                        f"page fetch timed out after {self.fetch_timeout}s"
                    )
                    logger.warning(
                        "[%s] Page %d failed: %s", source_id, page, last_error
                    )
                    continue
                except TransportError as exc:
                    last_error = str(exc)
                    logger.warning(
                        "[%s] Page %d failed: %s", source_id, page, exc
                    )
                    continue
                fetched_any = True

                try:
                    page_listings = self.extractor.parse(
                        document, page_url=url, default_currency=currency
                    )
                except Exception as exc:
                    last_error = f"parse error: {exc}"
                    logger.error(
                        "[%s] Extractor failed on page %d: %s",
                        source_id,
                        page,
                        exc,
                        exc_info=True,
                    )
                    continue

                if not page_listings:
                    logger.info(
                        "[%s] Page %d returned no listings, stopping",
                        source_id,
                        page,
                    )
                    break
                listings.extend(page_listings)
        finally:
            transport.close()

        if listings:
            logger.info(
                "[%s] Collected %d listings from %d page(s)",
                source_id,
                len(listings),
                pages_attempted,
            )
            return FetchOutcome(
                source_id=source_id,
                succeeded=True,
                listings=listings,
                pages_attempted=pages_attempted,
            )

        error = (
            last_error
            if not fetched_any and last_error
            else NO_PRODUCTS_ERROR
        )
        return FetchOutcome(
            source_id=source_id,
            succeeded=False,
            error=error,
            pages_attempted=pages_attempted,
        )

    async def run_single(self, query: str, country: str) -> FetchOutcome:
        """First page only."""
        return await self.run(query, country, max_pages=1)
