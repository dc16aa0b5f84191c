# pricescout/storage/file_manager.py

"""Handles saving search responses to disk."""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any

from pricescout.config.settings import Settings
from pricescout.models.search import SearchResponse

logger = logging.getLogger("pricescout.storage")


def response_to_dict(response: SearchResponse) -> dict[str, Any]:
    """Serialise a response to plain JSON-compatible data."""
    data = asdict(response)
    for item, scored in zip(data["listings"], response.listings):
        item["comparable_price"] = scored.comparable_price
    return data


class FileManager:
    """Handles saving search responses to disk."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(
            "FileManager initialised, results_dir=%s", self.results_dir
        )

    def save_response(self, response: SearchResponse) -> Path:
        """Save a response to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        slug = "_".join(response.query.split())
        filename = f"{response.country}_{slug}_{timestamp}.json"
        filepath = self.results_dir / filename

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                response_to_dict(response), f, ensure_ascii=False, indent=2
            )

        logger.info(
            "Saved %d listings for query '%s' to %s",
            len(response.listings),
            response.query,
            filepath,
        )
        return filepath
