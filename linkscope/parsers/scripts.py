"""Optional regex mining of endpoints from JavaScript.

Both strategies are heuristics with false positives and only run when
`scrape_js_responses` is enabled in the discovery options.
"""

from __future__ import annotations

from typing import Iterator

from ..types import NavigationRequest, NavigationResponse, RequestSource
from ..url import extract_relative_endpoints
from .base import ExtractionStrategy


def _js_enabled(response: NavigationResponse) -> bool:
    return bool(getattr(response.options, "scrape_js_responses", False))


class ScriptContentStrategy(ExtractionStrategy):
    """Endpoints quoted inside inline `<script>` elements."""

    name = "script:content"
    selector = "script"

    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        if not _js_enabled(response):
            return
        for element in response.select(self.selector):
            text = element.text()
            if not text.strip():
                continue
            for endpoint in extract_relative_endpoints(text):
                request = NavigationRequest.from_url(endpoint, RequestSource.SCRIPT_CONTENT, response)
                if request is not None:
                    yield request


class JSFileStrategy(ExtractionStrategy):
    """Endpoints quoted anywhere in a JavaScript response body."""

    name = "script:js-file"

    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        if not _js_enabled(response) or not response.is_javascript:
            return
        for endpoint in extract_relative_endpoints(response.text):
            request = NavigationRequest.from_url(endpoint, RequestSource.JS_FILE, response)
            if request is not None:
                yield request


__all__ = ["JSFileStrategy", "ScriptContentStrategy"]
