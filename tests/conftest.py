# tests/conftest.py

"""Shared pytest fixtures for all pricescout tests."""

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def block_network() -> Generator[None, None, None]:
    """Replace every real HTTP client so no test reaches the network.

    Tests that exercise the transport patch these again with their own
    canned responses.
    """
    with (
        patch(
            "pricescout.services.transport.curl_requests.Session",
            MagicMock(),
        ),
        patch(
            "pricescout.services.transport.cloudscraper.create_scraper",
            MagicMock(),
        ),
        patch(
            "pricescout.storage.rate_cache.curl_requests.get",
            MagicMock(),
        ),
    ):
        yield
