"""Strategies reading candidates from HTTP response headers."""

from __future__ import annotations

from typing import Callable, Iterator

from ..types import NavigationRequest, NavigationResponse, RequestSource
from ..url import parse_link_header, parse_refresh
from .base import ExtractionStrategy


def _whole_value(value: str) -> list[str]:
    return [value]


def _refresh_target(value: str) -> list[str]:
    target = parse_refresh(value)
    return [target] if target else []


class HeaderStrategy(ExtractionStrategy):
    """Emit requests for URL(s) carried by one response header."""

    def __init__(
        self,
        header: str,
        source: RequestSource,
        parse: Callable[[str], list[str]] = _whole_value,
    ) -> None:
        self.header = header
        self.source = source
        self.name = f"header:{header.lower()}"
        self._parse = parse

    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        value = response.header(self.header)
        if not value:
            return
        for target in self._parse(value):
            request = NavigationRequest.from_url(target, self.source, response)
            if request is not None:
                yield request


def content_location_strategy() -> HeaderStrategy:
    return HeaderStrategy("Content-Location", RequestSource.CONTENT_LOCATION)


def link_strategy() -> HeaderStrategy:
    return HeaderStrategy("Link", RequestSource.LINK, parse_link_header)


def location_strategy() -> HeaderStrategy:
    return HeaderStrategy("Location", RequestSource.LOCATION)


def refresh_strategy() -> HeaderStrategy:
    return HeaderStrategy("Refresh", RequestSource.REFRESH, _refresh_target)


__all__ = [
    "HeaderStrategy",
    "content_location_strategy",
    "link_strategy",
    "location_strategy",
    "refresh_strategy",
]
