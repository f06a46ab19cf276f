"""Shared fixtures for fetcher tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from cfetch.config import FetcherSettings
from cfetch.fetcher import HTTPFetcher


@pytest.fixture
def settings() -> FetcherSettings:
    return FetcherSettings(max_refetches=3)


@pytest.fixture
async def fetcher(settings: FetcherSettings) -> AsyncIterator[HTTPFetcher]:
    """Fetcher on a real httpx client so respx can intercept it."""
    async with HTTPFetcher(settings) as http_fetcher:
        yield http_fetcher
