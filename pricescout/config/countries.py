# pricescout/config/countries.py

"""Static reference data: which sources serve a country, and its currency.

The coordinator only reads this registry. Country lists name retailers
that have no extractor yet (``walmart``, ``otto``...); those entries are
kept for completeness and skipped at lookup time because no extractor is
registered under their id.
"""

import logging
from dataclasses import dataclass, field

from pricescout.config.settings import Settings

logger = logging.getLogger("pricescout.countries")


class UnsupportedCountryError(ValueError):
    """Raised when a country code is not present in the registry."""


@dataclass
class CountryConfig:
    """One country: display name, local currency, and ordered sources."""

    code: str
    name: str
    currency: str
    websites: list[str] = field(default_factory=lambda: list[str]())


_COUNTRY_ROWS: list[tuple[str, str, str, list[str]]] = [
    # North America
    ("US", "United States", "USD",
     ["amazon", "ebay", "walmart", "bestbuy", "target"]),
    ("CA", "Canada", "CAD",
     ["amazon", "ebay", "bestbuy", "canadiantire", "walmart"]),
    ("MX", "Mexico", "MXN", ["amazon", "mercadolibre", "liverpool"]),
    # Europe
    ("GB", "United Kingdom", "GBP",
     ["amazon", "ebay", "argos", "currys", "johnlewis"]),
    ("DE", "Germany", "EUR",
     ["amazon", "ebay", "otto", "mediamarkt", "saturn"]),
    ("FR", "France", "EUR", ["amazon", "ebay", "fnac", "darty"]),
    ("IT", "Italy", "EUR", ["amazon", "ebay", "eprice", "unieuro"]),
    ("ES", "Spain", "EUR", ["amazon", "ebay", "elcorteingles"]),
    ("NL", "Netherlands", "EUR", ["amazon", "ebay", "bol", "coolblue"]),
    ("BE", "Belgium", "EUR", ["amazon", "ebay", "bol"]),
    ("AT", "Austria", "EUR", ["amazon", "ebay"]),
    ("CH", "Switzerland", "CHF", ["amazon", "ebay", "digitec"]),
    ("SE", "Sweden", "SEK", ["amazon", "ebay", "webhallen"]),
    ("NO", "Norway", "NOK", ["amazon", "ebay", "komplett"]),
    ("DK", "Denmark", "DKK", ["amazon", "ebay", "proshop"]),
    ("FI", "Finland", "EUR", ["amazon", "ebay", "verkkokauppa"]),
    ("PL", "Poland", "PLN", ["amazon", "ebay", "allegro"]),
    ("CZ", "Czech Republic", "CZK", ["amazon", "ebay", "alza"]),
    ("HU", "Hungary", "HUF", ["amazon", "ebay"]),
    ("RO", "Romania", "RON", ["amazon", "ebay", "emag"]),
    ("BG", "Bulgaria", "BGN", ["amazon", "ebay"]),
    ("IE", "Ireland", "EUR", ["amazon", "ebay"]),
    ("PT", "Portugal", "EUR", ["amazon", "ebay"]),
    ("GR", "Greece", "EUR", ["amazon", "ebay"]),
    ("RU", "Russia", "RUB", ["amazon", "ebay", "ozon", "wildberries"]),
    ("UA", "Ukraine", "UAH", ["amazon", "ebay", "rozetka"]),
    # Asia-Pacific
    ("IN", "India", "INR", ["amazon", "ebay", "flipkart", "generic"]),
    ("CN", "China", "CNY",
     ["amazon", "ebay", "lazada", "shopee", "generic"]),
    ("JP", "Japan", "JPY",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("KR", "South Korea", "KRW",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("AU", "Australia", "AUD",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("NZ", "New Zealand", "NZD",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("SG", "Singapore", "SGD",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("MY", "Malaysia", "MYR",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("TH", "Thailand", "THB",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("ID", "Indonesia", "IDR",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("PH", "Philippines", "PHP",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("VN", "Vietnam", "VND",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("HK", "Hong Kong", "HKD",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("TW", "Taiwan", "TWD",
     ["amazon", "ebay", "lazada", "shopee", "flipkart", "generic"]),
    ("PK", "Pakistan", "PKR", ["amazon", "ebay", "daraz"]),
    ("BD", "Bangladesh", "BDT", ["amazon", "ebay", "daraz"]),
    ("LK", "Sri Lanka", "LKR", ["amazon", "ebay", "daraz"]),
    # South America
    ("BR", "Brazil", "BRL", ["amazon", "mercadolivre", "americanas"]),
    ("AR", "Argentina", "ARS", ["mercadolibre", "amazon"]),
    ("CL", "Chile", "CLP", ["mercadolibre", "amazon", "falabella"]),
    ("CO", "Colombia", "COP", ["mercadolibre", "amazon", "falabella"]),
    ("PE", "Peru", "PEN", ["mercadolibre", "amazon", "falabella"]),
    # Middle East & Africa
    ("AE", "United Arab Emirates", "AED",
     ["amazon", "ebay", "noon", "carrefour"]),
    ("SA", "Saudi Arabia", "SAR", ["amazon", "ebay", "noon", "extra"]),
    ("IL", "Israel", "ILS", ["amazon", "ebay"]),
    ("TR", "Turkey", "TRY", ["amazon", "ebay", "hepsiburada"]),
    ("EG", "Egypt", "EGP", ["amazon", "ebay", "jumia"]),
    ("QA", "Qatar", "QAR", ["amazon", "ebay"]),
    ("KW", "Kuwait", "KWD", ["amazon", "ebay"]),
    ("ZA", "South Africa", "ZAR", ["amazon", "ebay", "takealot"]),
    ("NG", "Nigeria", "NGN", ["amazon", "ebay", "jumia", "konga"]),
    ("KE", "Kenya", "KES", ["amazon", "ebay", "jumia"]),
    ("MA", "Morocco", "MAD", ["amazon", "ebay", "jumia"]),
]


def _build_configs(
    extractor_ids: list[str],
) -> dict[str, CountryConfig]:
    """Build the country table, extending every list with all extractors.

    Country-specific sources keep their position; extractor ids missing
    from a country's list are appended in registry order.
    """
    configs: dict[str, CountryConfig] = {}
    for code, name, currency, websites in _COUNTRY_ROWS:
        merged = list(dict.fromkeys([*websites, *extractor_ids]))
        configs[code] = CountryConfig(
            code=code,
            name=name,
            currency=currency,
            websites=merged,
        )
    return configs


class SourceRegistry:
    """Read-only lookup of sources and currency per country code."""

    def __init__(
        self,
        configs: dict[str, CountryConfig] | None = None,
    ) -> None:
        if configs is None:
            configs = _build_configs(
                [s["id"] for s in Settings.AVAILABLE_SOURCES]
            )
        self._configs = configs

    def get(self, country_code: str) -> CountryConfig | None:
        """Return the config for *country_code*, or ``None``."""
        return self._configs.get(country_code.upper())

    def require(self, country_code: str) -> CountryConfig:
        """Return the config for *country_code* or raise."""
        config = self.get(country_code)
        if config is None:
            raise UnsupportedCountryError(
                f"Country {country_code} is not supported"
            )
        return config

    def is_supported(self, country_code: str) -> bool:
        return self.get(country_code) is not None

    def sources_for(self, country_code: str) -> list[str]:
        """Ordered source ids for a country (empty when unknown)."""
        config = self.get(country_code)
        if config is None:
            logger.warning(
                "No registry entry for country '%s'", country_code
            )
            return []
        return list(config.websites)

    def currency_for(self, country_code: str) -> str | None:
        config = self.get(country_code)
        return config.currency if config else None

    def supported_countries(self) -> list[CountryConfig]:
        return list(self._configs.values())
