"""Run the extraction strategy registry against one fetched response."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from .formfill import FormFiller
from .parsers import Emit, ExtractionStrategy, default_strategies
from .scope import ScopeError, ScopeManager
from .types import NavigationRequest, NavigationResponse

LOGGER = logging.getLogger(__name__)


class ExtractionPipeline:
    """Ordered, immutable set of extraction strategies.

    Strategies run in registration order, each one fully before the next, and
    candidates are handed to the caller inline without buffering. A strategy
    that fails on a hostile document is skipped; the rest still run.

    When a scope manager is attached, out-of-scope candidates are dropped
    before reaching the caller.

    The pipeline keeps no per-response state, so one instance can serve many
    concurrent workers.
    """

    def __init__(
        self,
        strategies: Iterable[ExtractionStrategy] | None = None,
        *,
        scope: ScopeManager | None = None,
        filler: FormFiller | None = None,
    ) -> None:
        if strategies is None:
            strategies = default_strategies(filler)
        self._strategies: tuple[ExtractionStrategy, ...] = tuple(strategies)
        self._scope = scope

    @property
    def strategies(self) -> tuple[ExtractionStrategy, ...]:
        return self._strategies

    @property
    def scope(self) -> ScopeManager | None:
        return self._scope

    def run(self, response: NavigationResponse, emit: Emit) -> None:
        """Call `emit` once per candidate, in strategy then document order."""

        for request in self.iter_requests(response):
            emit(request)

    def iter_requests(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        """Lazily yield candidates in the same order `run` emits them."""

        for strategy in self._strategies:
            for request in self._iter_strategy(strategy, response):
                if self._in_scope(request):
                    yield request

    def discover(self, response: NavigationResponse) -> list[NavigationRequest]:
        """Collect every candidate for `response`."""

        return list(self.iter_requests(response))

    @staticmethod
    def _iter_strategy(
        strategy: ExtractionStrategy,
        response: NavigationResponse,
    ) -> Iterator[NavigationRequest]:
        try:
            yield from strategy.extract(response)
        except Exception as exc:
            LOGGER.warning(
                "Strategy %s failed on %s: %s: %s",
                strategy.name,
                response.url,
                exc.__class__.__name__,
                exc,
            )

    def _in_scope(self, request: NavigationRequest) -> bool:
        if self._scope is None:
            return True
        try:
            in_scope = self._scope.validate(request.url)
        except ScopeError as exc:
            LOGGER.debug("Dropping %s candidate %s: %s", request.source, request.url, exc)
            return False
        if not in_scope:
            LOGGER.debug("Out of scope (%s): %s", request.source, request.url)
        return in_scope


__all__ = ["ExtractionPipeline"]
