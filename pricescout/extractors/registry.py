# pricescout/extractors/registry.py

"""Lookup table of extractor instances keyed by source id."""

import importlib
import logging
from typing import Any

from pricescout.config.settings import Settings
from pricescout.extractors.base_extractor import BaseExtractor

logger = logging.getLogger("pricescout.registry")


def load_extractor_class(dotted_path: str) -> type[Any]:
    """Dynamically import an extractor class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def load_extractors(
    sources: list[dict[str, str]] | None = None,
) -> dict[str, BaseExtractor]:
    """Instantiate every configured extractor.

    A source whose class cannot be imported is logged and left out; the
    rest of the table is still usable.
    """
    if sources is None:
        sources = Settings.AVAILABLE_SOURCES

    extractors: dict[str, BaseExtractor] = {}
    for src in sources:
        try:
            cls = load_extractor_class(src["extractor"])
            extractors[src["id"]] = cls()
        except (ImportError, AttributeError) as exc:
            logger.error(
                "Could not load extractor '%s' (%s): %s",
                src["id"],
                src["extractor"],
                exc,
            )
    return extractors
