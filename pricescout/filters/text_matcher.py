# pricescout/filters/text_matcher.py

"""Confidence-scored matching of listings against the user's query.

Strategies are tried in order and the first success wins:

1. exact containment of the query in the listing name (1.0)
2. containment after stripping punctuation and extra spaces (0.95)
3. an ordered run of query words found in the name (0.9)
4. structured brand / model / specification extraction (0.6 to 0.95)
5. 2- and 3-word phrase overlap with the name and link (up to 0.9)

A query brand missing from the listing only rejects it when the phrase
overlap is empty too.

Strategies 1 to 4 admit a listing at 0.7. The phrase fallback admits at
0.5; this lower bar is deliberate and covered by its own test.
"""

import logging
import math
import re
from typing import Any

from pricescout.config.settings import Settings
from pricescout.models.listing import Listing, MatchResult
from pricescout.utils.price_parser import parse_price

logger = logging.getLogger("pricescout.matcher")

# Closed vocabulary; product lines that act as brands are included
BRANDS: list[str] = [
    "apple", "samsung", "google", "oneplus", "xiaomi", "huawei", "oppo",
    "vivo", "sony", "lg", "motorola", "nokia", "realme", "boat", "jbl",
    "bose", "nike", "adidas", "puma", "reebok", "dell", "hp", "lenovo",
    "asus", "acer", "msi", "razer", "logitech", "corsair", "steelseries",
    "sennheiser", "skullcandy", "beats", "airpods", "galaxy", "iphone",
    "pixel", "redmi",
]

_VARIANT_WORDS = "pro|max|plus|mini|air|ultra"
_VARIANTS = rf"(?:{_VARIANT_WORDS})"

_MODEL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"\bairdopes\s*\d+\s*{_VARIANTS}?\b"),
    re.compile(rf"\b\d+\s*(?:gb|tb|{_VARIANT_WORDS})\b"),
    re.compile(rf"\b(?:iphone|galaxy|pixel|oneplus)\s*\d+\s*{_VARIANTS}?\b"),
    re.compile(rf"\b\w+\s*\d{{3,4}}\s*{_VARIANTS}?\b"),
    re.compile(rf"\b{_VARIANTS}\s*\d+\b"),
    # Named product lines
    re.compile(r"\bairpods\s*pro\b"),
    re.compile(r"\bgalaxy\s*buds\b"),
]

_SPEC_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b\d+\s*(?:gb|tb|mb)\b"),
    re.compile(r"\b\d+(?:\.\d+)?\s*(?:inch|inches|\")"),
    re.compile(
        r"\b(?:black|white|blue|red|green|gold|silver|gray|grey|pink"
        r"|purple|yellow|orange)\b"
    ),
    re.compile(r"\b(?:pro|max|plus|mini|air|ultra|lite|standard)\b"),
    re.compile(r"\b\d+\s*(?:mp|megapixel)\b"),
    re.compile(r"\b\d+\s*(?:mah|watt|w)\b"),
]

_PUNCT_RE = re.compile(r"[^\w\s]")
_SPACE_RE = re.compile(r"\s+")


def _normalise(text: str) -> str:
    return _SPACE_RE.sub(" ", _PUNCT_RE.sub("", text)).strip()


def _unique_matches(
    patterns: list[re.Pattern[str]], text: str,
) -> list[str]:
    found: list[str] = []
    for pattern in patterns:
        found.extend(m.group(0).strip() for m in pattern.finditer(text))
    return list(dict.fromkeys(f for f in found if f))


class TextMatcher:
    """Decide whether listings answer a query, with a confidence."""

    # ── Attribute extraction ─────────────────────────────

    @staticmethod
    def extract_brands(query: str) -> list[str]:
        """Brands from the vocabulary that appear as whole words."""
        words = set(query.lower().split())
        return [b for b in BRANDS if b in words]

    @staticmethod
    def extract_models(query: str) -> list[str]:
        """Model numbers, storage+variant tokens and product lines."""
        return _unique_matches(_MODEL_PATTERNS, query.lower())

    @staticmethod
    def extract_specifications(query: str) -> list[str]:
        """Storage, screen size, colour, variant, camera and power specs."""
        return _unique_matches(_SPEC_PATTERNS, query.lower())

    @staticmethod
    def extract_phrases(query: str) -> list[str]:
        """2-word windows longer than 4 chars, 3-word longer than 8."""
        words = query.lower().split()
        phrases: list[str] = []
        for i in range(len(words) - 1):
            phrase = f"{words[i]} {words[i + 1]}"
            if len(phrase) > 4:
                phrases.append(phrase)
        for i in range(len(words) - 2):
            phrase = f"{words[i]} {words[i + 1]} {words[i + 2]}"
            if len(phrase) > 8:
                phrases.append(phrase)
        return phrases

    # ── Strategies ───────────────────────────────────────

    @staticmethod
    def _exact(query: str, name: str) -> MatchResult | None:
        if query in name:
            return MatchResult(True, 1.0, "Exact query match", "exact")
        clean_query = _normalise(query)
        if clean_query and clean_query in _normalise(name):
            return MatchResult(
                True,
                0.95,
                "Near-exact query match (normalized)",
                "normalized",
            )
        return None

    @staticmethod
    def _longest_ordered_run(
        query_words: list[str], name_words: list[str],
    ) -> int:
        """Longest run of consecutive query words found in order."""

        def find(word: str, start: int) -> int:
            for j in range(start, len(name_words)):
                nw = name_words[j]
                if word in nw or nw in word:
                    return j
            return -1

        longest = current = 0
        last = -1
        for word in query_words:
            j = find(word, last + 1) if current else -1
            if j != -1:
                current += 1
            else:
                j = find(word, 0)
                current = 1 if j != -1 else 0
            last = j
            longest = max(longest, current)
        return longest

    @classmethod
    def _semantic(cls, query: str, name: str) -> MatchResult | None:
        query_words = [w for w in query.split() if len(w) > 2]
        name_words = [w for w in name.split() if len(w) > 2]
        if not query_words:
            return None
        run = cls._longest_ordered_run(query_words, name_words)
        if run >= 3 and run / len(query_words) >= 0.8:
            return MatchResult(
                True,
                0.9,
                f"High semantic similarity "
                f"({run}/{len(query_words)} words in sequence)",
                "semantic",
            )
        return None

    @classmethod
    def _structured(cls, query: str, name: str) -> MatchResult | None:
        brands = cls.extract_brands(query)
        models = cls.extract_models(query)
        specs = cls.extract_specifications(query)

        brand_match = any(b in name for b in brands)
        model_match = any(m in name for m in models)
        matched_specs = sum(1 for s in specs if s in name)
        spec_match = bool(specs) and matched_specs >= math.ceil(
            len(specs) * 0.5
        )

        if brand_match and model_match and spec_match:
            confidence = 0.95
            reason = "Complete match: brand, model, and specifications"
        elif brand_match and model_match:
            confidence = 0.85
            reason = "Strong match: brand and model"
        elif brand_match and spec_match:
            confidence = 0.75
            reason = "Good match: brand and specifications"
        elif brand_match:
            confidence = 0.6
            reason = "Partial match: brand only"
        elif model_match:
            confidence = 0.6
            reason = "Partial match: model only"
        else:
            return None

        return MatchResult(
            confidence >= Settings.HIGH_CONFIDENCE,
            confidence,
            reason,
            "structured",
        )

    @classmethod
    def _phrase(cls, query: str, text: str) -> MatchResult:
        phrases = cls.extract_phrases(query)
        matched = [p for p in phrases if len(p) > 3 and p in text]
        if not matched:
            brands = cls.extract_brands(query)
            if brands and not any(b in text for b in brands):
                return MatchResult(
                    False,
                    0.0,
                    f"No brand match found. Expected: {', '.join(brands)}",
                )
            return MatchResult(False, 0.0, "No significant matches")
        confidence = round(
            min(0.9, len(matched) / len(phrases) * 0.8 + 0.1), 2
        )
        return MatchResult(
            confidence >= Settings.MEDIUM_CONFIDENCE,
            confidence,
            f"Matched phrases: {', '.join(matched)}",
            "phrase",
        )

    # ── Public API ───────────────────────────────────────

    @classmethod
    def match(cls, query: str, listing: Listing) -> MatchResult:
        """Score one listing against *query*. Pure and deterministic."""
        q = query.lower().strip()
        if not q:
            return MatchResult(False, 0.0, "Empty query")
        name = listing.name.lower()

        result = (
            cls._exact(q, name)
            or cls._semantic(q, name)
            or cls._structured(q, name)
        )
        if result is not None:
            return result
        return cls._phrase(q, f"{name} {listing.link.lower()}")

    @classmethod
    def match_all(
        cls, query: str, listings: list[Listing],
    ) -> list[tuple[Listing, MatchResult]]:
        """Match every listing and return the admitted ones.

        High-confidence matches are always admitted. When there are
        fewer than ``MIN_HIGH_RESULTS`` of them, medium-confidence
        matches fill the set up to ``MAX_ADMITTED_RESULTS``. Ordered by
        confidence descending, then price ascending.
        """
        results = [(listing, cls.match(query, listing)) for listing in listings]

        def order(item: tuple[Listing, MatchResult]) -> tuple[float, float]:
            return (-item[1].confidence, parse_price(item[0].raw_price))

        admitted = sorted(
            (
                r for r in results
                if r[1].is_match
                and r[1].confidence >= Settings.HIGH_CONFIDENCE
            ),
            key=order,
        )

        if len(admitted) < Settings.MIN_HIGH_RESULTS:
            kept_links = {listing.link for listing, _ in admitted}
            medium = sorted(
                (
                    r for r in results
                    if r[1].is_match
                    and Settings.MEDIUM_CONFIDENCE
                    <= r[1].confidence
                    < Settings.HIGH_CONFIDENCE
                    and r[0].link not in kept_links
                ),
                key=order,
            )
            room = max(0, Settings.MAX_ADMITTED_RESULTS - len(admitted))
            admitted.extend(medium[:room])

        rejected = len(listings) - len(admitted)
        if rejected:
            logger.info(
                "Matcher admitted %d of %d listings for '%s'",
                len(admitted),
                len(listings),
                query,
            )
        return admitted

    @classmethod
    def match_statistics(
        cls, query: str, listings: list[Listing],
    ) -> dict[str, Any]:
        """Confidence distribution for *listings*, for diagnostics."""
        confidences = [
            cls.match(query, listing).confidence for listing in listings
        ]
        average = (
            round(sum(confidences) / len(confidences), 2)
            if confidences else 0.0
        )
        return {
            "total_listings": len(listings),
            "exact_matches": sum(1 for c in confidences if c >= 0.95),
            "high_confidence_matches": sum(
                1 for c in confidences if 0.8 <= c < 0.95
            ),
            "medium_confidence_matches": sum(
                1 for c in confidences if 0.5 <= c < 0.8
            ),
            "low_confidence_matches": sum(
                1 for c in confidences if 0.3 <= c < 0.5
            ),
            "no_matches": sum(1 for c in confidences if c < 0.3),
            "average_confidence": average,
        }
