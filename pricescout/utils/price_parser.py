# pricescout/utils/price_parser.py

"""Price, currency, rating and review-count parsing shared by all sources."""

import re

_NUMBER_RE = re.compile(r"\d[\d.,]*")
_RATING_RE = re.compile(r"\d+(?:[.,]\d+)?")
_COUNT_RE = re.compile(r"(\d[\d,.]*)\s*([kK])?")
_ISO_RE = re.compile(r"\b([A-Z]{3})\b")

# Longest symbols first so "NT$" wins over "$"
_CURRENCY_SYMBOLS: list[tuple[str, str]] = [
    ("NT$", "TWD"),
    ("HK$", "HKD"),
    ("MX$", "MXN"),
    ("US$", "USD"),
    ("S$", "SGD"),
    ("R$", "BRL"),
    ("C$", "CAD"),
    ("A$", "AUD"),
    ("RM", "MYR"),
    ("Rp", "IDR"),
    ("₹", "INR"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("¥", "JPY"),
    ("₩", "KRW"),
    ("₱", "PHP"),
    ("₫", "VND"),
    ("฿", "THB"),
    ("₺", "TRY"),
    ("₽", "RUB"),
    ("₪", "ILS"),
    ("₦", "NGN"),
    ("$", "USD"),
]

_ISO_CODES: frozenset[str] = frozenset(
    {code for _, code in _CURRENCY_SYMBOLS}
    | {
        "AED", "SAR", "EGP", "QAR", "KWD", "BHD", "OMR", "CHF",
        "SEK", "NOK", "DKK", "PLN", "CZK", "HUF", "RON", "BGN",
        "UAH", "CNY", "NZD", "ZAR", "KES", "MAD", "PKR", "BDT",
        "LKR", "ARS", "CLP", "COP", "PEN",
    }
)


# Currencies whose prices group thousands with a dot, as in "1.299 €"
_DOT_THOUSANDS: frozenset[str] = frozenset(
    {"EUR", "IDR", "VND", "BRL", "TRY", "DKK", "ARS", "CLP", "COP"}
)


def parse_price(text: str | None) -> float:
    """Extract a numeric price from text like ``'$1,299.00'`` or ``'1.299,00 €'``.

    Only the first number in the text is considered, so ranges such as
    ``'$10.99 - $15.99'`` yield the lower bound. When both separators are
    present the last one is the decimal separator; a lone comma followed
    by exactly three digits is a thousands separator. So is a lone dot
    followed by three digits when the text names a currency that groups
    with dots (``'1.299 €'``, ``'Rp 15.000'``).

    Returns ``0.0`` when no number can be parsed.
    """
    if not text:
        return 0.0
    match = _NUMBER_RE.search(text)
    if not match:
        return 0.0
    token = match.group(0).rstrip(".,")

    if "," in token and "." in token:
        if token.rfind(",") > token.rfind("."):
            token = token.replace(".", "").replace(",", ".")
        else:
            token = token.replace(",", "")
    elif "," in token:
        parts = token.split(",")
        if len(parts) > 2 or len(parts[-1]) == 3:
            token = token.replace(",", "")
        else:
            token = token.replace(",", ".")
    elif token.count(".") > 1:
        token = token.replace(".", "")
    elif (
        "." in token
        and len(token.split(".")[1]) == 3
        and detect_currency(text, default="") in _DOT_THOUSANDS
    ):
        token = token.replace(".", "")

    try:
        return float(token)
    except ValueError:
        return 0.0


def detect_currency(text: str | None, default: str = "USD") -> str:
    """Infer an ISO currency code from price text, else *default*."""
    if not text:
        return default
    for code in _ISO_RE.findall(text):
        if code in _ISO_CODES:
            return code
    for symbol, code in _CURRENCY_SYMBOLS:
        if symbol in text:
            return code
    return default


def parse_rating(text: str | None) -> float | None:
    """Parse a 0-5 star rating from text like ``'4.6 out of 5 stars'``."""
    if not text:
        return None
    match = _RATING_RE.search(text)
    if not match:
        return None
    value = float(match.group(0).replace(",", "."))
    if value < 0 or value > 5:
        return None
    return value


def parse_review_count(text: str | None) -> int | None:
    """Parse a review count from text like ``'(1,234)'`` or ``'2.3k sold'``."""
    if not text:
        return None
    match = _COUNT_RE.search(text)
    if not match:
        return None
    number, suffix = match.group(1).rstrip(".,"), match.group(2)
    try:
        if suffix:
            return round(float(number.replace(",", "")) * 1000)
        return int(number.replace(",", "").replace(".", ""))
    except ValueError:
        return None
