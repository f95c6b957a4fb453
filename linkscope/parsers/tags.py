"""Strategies reading candidates from element attributes in the parsed body."""

from __future__ import annotations

from typing import Iterator, Sequence

from ..types import NavigationRequest, NavigationResponse, RequestSource
from ..url import parse_refresh
from .base import ExtractionStrategy


class TagAttributeStrategy(ExtractionStrategy):
    """Emit one request per non-empty attribute value on matching elements.

    Attributes listed in `multi_value_attributes` hold space-separated URLs
    (as `ping` does) and yield one request per URL.
    """

    def __init__(
        self,
        selector: str,
        attributes: Sequence[str],
        source: RequestSource,
        *,
        multi_value_attributes: Sequence[str] = (),
    ) -> None:
        self.selector = selector
        self.attributes = tuple(attributes)
        self.source = source
        self.multi_value_attributes = frozenset(multi_value_attributes)
        self.name = f"tag:{selector}"

    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        for element in response.select(self.selector):
            for attribute in self.attributes:
                value = element.attr(attribute)
                if not value:
                    continue
                targets = value.split() if attribute in self.multi_value_attributes else [value]
                for target in targets:
                    request = NavigationRequest.from_url(target, self.source, response)
                    if request is not None:
                        yield request


class MetaRefreshStrategy(ExtractionStrategy):
    """`<meta http-equiv="refresh" content="0; url=...">` redirects."""

    name = "tag:meta-refresh"
    selector = 'meta[http-equiv="refresh" i]'

    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        for element in response.select(self.selector):
            target = parse_refresh(element.attr("content"))
            if not target:
                continue
            request = NavigationRequest.from_url(target, RequestSource.META, response)
            if request is not None:
                yield request


def anchor_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy(
        "a",
        ("href", "ping"),
        RequestSource.A,
        multi_value_attributes=("ping",),
    )


def embed_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy("embed[src]", ("src",), RequestSource.EMBED)


def frame_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy("frame[src]", ("src",), RequestSource.FRAME)


def iframe_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy("iframe[src]", ("src",), RequestSource.IFRAME)


def input_image_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy('input[type="image" i]', ("src",), RequestSource.INPUT)


def isindex_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy("isindex[action]", ("action",), RequestSource.ISINDEX)


def script_src_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy("script[src]", ("src",), RequestSource.SCRIPT)


def button_formaction_strategy() -> TagAttributeStrategy:
    return TagAttributeStrategy("button[formaction]", ("formaction",), RequestSource.BUTTON)


__all__ = [
    "MetaRefreshStrategy",
    "TagAttributeStrategy",
    "anchor_strategy",
    "button_formaction_strategy",
    "embed_strategy",
    "frame_strategy",
    "iframe_strategy",
    "input_image_strategy",
    "isindex_strategy",
    "script_src_strategy",
]
