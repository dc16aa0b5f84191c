# pricescout/config/settings.py

"""Central configuration for the pricescout aggregation engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the pricescout aggregation engine."""

    # --- Fetching ---
    REQUEST_TIMEOUT: int = int(
        os.getenv("PRICESCOUT_REQUEST_TIMEOUT", "10")
    )                                   # Seconds per individual fetch
    PAGE_DELAY_RANGE: tuple[float, float] = (1.0, 2.0)  # Between pages
    SOURCE_STAGGER: float = 2.0         # Seconds x source index
    DEFAULT_MAX_PAGES: int = 3          # Pagination depth per source
    CLOUDSCRAPER_FALLBACK: bool = True  # Second client on failure
    PAGE_FETCH_TIMEOUT: float = REQUEST_TIMEOUT + 2.0  # Ceiling per page
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Matching ---
    HIGH_CONFIDENCE: float = 0.7        # Structured/semantic admission
    MEDIUM_CONFIDENCE: float = 0.5      # Phrase fallback admission
    MIN_HIGH_RESULTS: int = 5           # Below this, admit medium matches
    MAX_ADMITTED_RESULTS: int = 10      # Cap when medium matches are added

    # --- Ranking ---
    DEDUP_THRESHOLD: float = 0.8
    SOURCE_REPUTATION: dict[str, int] = {
        "amazon": 10,
        "flipkart": 9,
        "walmart": 9,
        "ebay": 8,
        "bestbuy": 8,
        "target": 8,
    }
    DEFAULT_REPUTATION: int = 5

    # --- Currency ---
    RATE_CACHE_TTL: float = 3600.0      # Seconds between rate refreshes
    EXCHANGE_RATE_API_URL: str = os.getenv(
        "PRICESCOUT_RATES_URL",
        "https://open.er-api.com/v6/latest/USD",
    )

    # --- Client identity ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENTS: list[str] = [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (X11; Linux x86_64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Sources (extractor plugins, looked up by id) ---
    AVAILABLE_SOURCES: list[dict[str, str]] = [
        {
            "id": "amazon",
            "label": "Amazon",
            "extractor": (
                "pricescout.extractors.amazon_extractor.AmazonExtractor"
            ),
        },
        {
            "id": "ebay",
            "label": "eBay",
            "extractor": (
                "pricescout.extractors.ebay_extractor.EbayExtractor"
            ),
        },
        {
            "id": "flipkart",
            "label": "Flipkart",
            "extractor": (
                "pricescout.extractors.flipkart_extractor.FlipkartExtractor"
            ),
        },
        {
            "id": "shopee",
            "label": "Shopee",
            "extractor": (
                "pricescout.extractors.shopee_extractor.ShopeeExtractor"
            ),
        },
        {
            "id": "lazada",
            "label": "Lazada",
            "extractor": (
                "pricescout.extractors.lazada_extractor.LazadaExtractor"
            ),
        },
        {
            "id": "generic",
            "label": "Google Shopping",
            "extractor": (
                "pricescout.extractors.generic_extractor.GenericExtractor"
            ),
        },
    ]
