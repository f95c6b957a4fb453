"""Shared fixtures for building fetched responses from inline markup."""

from __future__ import annotations

from typing import Callable, Mapping

import pytest

from linkscope.config import DiscoveryConfig
from linkscope.types import NavigationResponse

PAGE_URL = "https://example.com/dir/page.html"

MakeResponse = Callable[..., NavigationResponse]


@pytest.fixture()
def config() -> DiscoveryConfig:
    return DiscoveryConfig()


@pytest.fixture()
def js_config() -> DiscoveryConfig:
    return DiscoveryConfig(scrape_js_responses=True)


@pytest.fixture()
def make_response(config: DiscoveryConfig) -> MakeResponse:
    """Build a response the way the fetcher would, from a body and headers."""

    def _make(
        body: str | bytes = "",
        *,
        url: str = PAGE_URL,
        headers: Mapping[str, str] | None = None,
        depth: int = 0,
        options: DiscoveryConfig | None = None,
        status_code: int = 200,
    ) -> NavigationResponse:
        return NavigationResponse.from_body(
            url=url,
            depth=depth,
            options=options or config,
            body=body,
            headers=headers,
            status_code=status_code,
        )

    return _make
