# pricescout/services/batch_coordinator.py

"""Fans a search out to every source serving a country and merges it."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pricescout.config.countries import SourceRegistry
from pricescout.config.settings import Settings
from pricescout.extractors.base_extractor import BaseExtractor
from pricescout.extractors.registry import load_extractors
from pricescout.filters.result_processor import ResultProcessor
from pricescout.filters.text_matcher import TextMatcher
from pricescout.models.listing import FetchOutcome, Listing
from pricescout.models.search import (
    BatchResult,
    SearchOptions,
    SearchResponse,
    SearchSummary,
)
from pricescout.services.source_orchestrator import (
    SleepFn,
    SourceOrchestrator,
    Transport,
)
from pricescout.services.transport import FetchTransport
from pricescout.utils.price_parser import parse_price

logger = logging.getLogger("pricescout.coordinator")


class BatchCoordinator:
    """Owns one search request end to end.

    Sources run concurrently, each delayed by ``index * SOURCE_STAGGER``
    before its first request. A failing source never cancels or blocks
    the others; its error is reported alongside the merged listings.
    """

    def __init__(
        self,
        registry: SourceRegistry | None = None,
        extractors: dict[str, BaseExtractor] | None = None,
        transport_factory: Callable[[], Transport] = FetchTransport,
        processor: ResultProcessor | None = None,
        sleep: SleepFn = asyncio.sleep,
        stagger: float | None = None,
    ) -> None:
        self.registry = registry or SourceRegistry()
        self.extractors = (
            extractors if extractors is not None else load_extractors()
        )
        self.transport_factory = transport_factory
        self.processor = processor or ResultProcessor()
        self.sleep = sleep
        self.stagger = (
            stagger if stagger is not None else Settings.SOURCE_STAGGER
        )

    # ── Source resolution ────────────────────────────────

    def resolve_sources(self, country: str) -> list[BaseExtractor]:
        """Extractors the registry lists for *country* that also serve it."""
        resolved: list[BaseExtractor] = []
        for source_id in self.registry.sources_for(country):
            extractor = self.extractors.get(source_id)
            if extractor is not None and extractor.supports(country):
                resolved.append(extractor)
        return resolved

    def _orchestrator(self, extractor: BaseExtractor) -> SourceOrchestrator:
        return SourceOrchestrator(
            extractor,
            transport_factory=self.transport_factory,
            sleep=self.sleep,
        )

    async def _run_source(
        self,
        index: int,
        extractor: BaseExtractor,
        query: str,
        country: str,
        max_pages: int,
    ) -> FetchOutcome:
        if index:
            await self.sleep(index * self.stagger)
        return await self._orchestrator(extractor).run(
            query, country, max_pages
        )

    # ── Fan-out passes ───────────────────────────────────

    async def search_once(
        self,
        query: str,
        country: str,
        options: SearchOptions | None = None,
        max_pages: int | None = None,
        only_sources: list[str] | None = None,
    ) -> BatchResult:
        """Run every applicable source once and merge the outcomes.

        *only_sources* restricts the pass to the given source ids (used
        by the retry pass).
        """
        options = options or SearchOptions()
        pages = max_pages if max_pages is not None else options.max_pages

        extractors = self.resolve_sources(country)
        if only_sources is not None:
            extractors = [
                e for e in extractors if e.source_id in only_sources
            ]
        if not extractors:
            logger.warning("No sources available for country %s", country)
            return BatchResult(
                errors=[f"no sources available for country: {country}"],
            )

        logger.info(
            "Searching '%s' in %s across %d sources (max %d pages)",
            query,
            country,
            len(extractors),
            pages,
        )
        outcomes = await asyncio.gather(
            *(
                self._run_source(i, extractor, query, country, pages)
                for i, extractor in enumerate(extractors)
            ),
            return_exceptions=True,
        )

        result = BatchResult()
        summary = result.summary
        summary.source_names = [e.source_id for e in extractors]
        for extractor, outcome in zip(extractors, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    "[%s] Source run crashed: %s",
                    extractor.source_id,
                    outcome,
                    exc_info=outcome,
                )
                outcome = FetchOutcome(
                    source_id=extractor.source_id,
                    succeeded=False,
                    error=str(outcome) or type(outcome).__name__,
                )
            summary.total_pages_attempted += outcome.pages_attempted
            if outcome.succeeded:
                summary.successful_sources += 1
                result.listings.extend(outcome.listings)
            else:
                summary.failed_sources += 1
                result.failed_source_ids.append(outcome.source_id)
                result.errors.append(f"{extractor.label}: {outcome.error}")

        summary.total_listings = len(result.listings)
        logger.info(
            "Pass finished: %d listings, %d/%d sources succeeded",
            summary.total_listings,
            summary.successful_sources,
            len(extractors),
        )
        return result

    async def search_comprehensive(
        self,
        query: str,
        country: str,
        options: SearchOptions | None = None,
    ) -> BatchResult:
        """``search_once`` plus one retry over failed sources.

        The retry runs at most once, with ``max_pages`` halved.
        """
        options = options or SearchOptions()
        result = await self.search_once(query, country, options)
        summary = result.summary
        summary.retry_attempts = 0

        if options.retry_failed_sites and result.failed_source_ids:
            retry_pages = max(1, options.max_pages // 2)
            logger.info(
                "Retrying %d failed source(s) with max %d pages",
                len(result.failed_source_ids),
                retry_pages,
            )
            retry = await self.search_once(
                query,
                country,
                options,
                max_pages=retry_pages,
                only_sources=list(result.failed_source_ids),
            )
            summary.retry_attempts = 1
            result.listings.extend(retry.listings)
            result.errors.extend(retry.errors)
            summary.successful_sources += retry.summary.successful_sources
            summary.total_pages_attempted += (
                retry.summary.total_pages_attempted
            )
            summary.failed_sources = (
                len(summary.source_names) - summary.successful_sources
            )
            summary.total_listings = len(result.listings)
            result.failed_source_ids = retry.failed_source_ids

        return result

    # ── Entry points ─────────────────────────────────────

    async def search(
        self,
        query: str,
        country: str,
        options: SearchOptions | None = None,
    ) -> SearchResponse:
        """Fetch, match, rank and deduplicate listings for *query*."""
        options = options or SearchOptions()
        country = country.upper()
        if options.comprehensive:
            batch = await self.search_comprehensive(query, country, options)
        else:
            batch = await self.search_once(query, country, options)

        matched = TextMatcher.match_all(query, batch.listings)
        processed = await self.processor.process(matched, options)
        final = self.processor.remove_duplicates(processed)

        statistics = self.scraping_stats([s.listing for s in final])
        statistics["results"] = self.processor.statistics(final)
        statistics["matching"] = TextMatcher.match_statistics(
            query, batch.listings
        )
        return SearchResponse(
            query=query,
            country=country,
            listings=final,
            errors=batch.errors,
            summary=batch.summary,
            statistics=statistics,
        )

    async def search_source(
        self,
        source_id: str,
        query: str,
        country: str,
        max_pages: int = 1,
    ) -> FetchOutcome:
        """Run a single source directly, bypassing matching and ranking."""
        extractor = self.extractors.get(source_id.lower())
        if extractor is None:
            return FetchOutcome(
                source_id=source_id,
                succeeded=False,
                error=f"Unknown source: {source_id}",
            )
        return await self._orchestrator(extractor).run(
            query, country.upper(), max_pages
        )

    # ── Introspection ────────────────────────────────────

    def available_sources(self) -> list[str]:
        return list(self.extractors)

    def source_info(self, source_id: str) -> dict[str, Any] | None:
        extractor = self.extractors.get(source_id.lower())
        if extractor is None:
            return None
        return {
            "id": extractor.source_id,
            "label": extractor.label,
            "base_url": extractor.base_url,
            "default_currency": extractor.default_currency,
            "supported_countries": sorted(extractor.supported_countries),
        }

    @staticmethod
    def scraping_stats(listings: list[Listing]) -> dict[str, Any]:
        """Per-source and per-currency breakdown of raw listings."""
        sources: dict[str, int] = {}
        currencies: dict[str, int] = {}
        prices: dict[str, list[float]] = {}
        for listing in listings:
            sources[listing.source_id] = sources.get(listing.source_id, 0) + 1
            currencies[listing.currency] = (
                currencies.get(listing.currency, 0) + 1
            )
            price = parse_price(listing.raw_price)
            if price > 0:
                prices.setdefault(listing.currency, []).append(price)

        price_ranges = {
            code: {
                "min": min(values),
                "max": max(values),
                "avg": sum(values) / len(values),
            }
            for code, values in prices.items()
        }
        return {
            "source_breakdown": sources,
            "currency_breakdown": currencies,
            "price_ranges": price_ranges,
            "total_listings": len(listings),
        }
