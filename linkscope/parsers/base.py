"""Extraction strategy interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Iterator

from ..types import NavigationRequest, NavigationResponse

Emit = Callable[[NavigationRequest], None]


class ExtractionStrategy(ABC):
    """One independent rule proposing frontier candidates from a response.

    Subclasses implement `extract` as a generator; `run` adapts it to the
    callback form. Strategies keep no per-response state.
    """

    name: str = "strategy"

    @abstractmethod
    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        """Yield candidates found in `response`, in document order."""

    def run(self, response: NavigationResponse, emit: Emit) -> None:
        for request in self.extract(response):
            emit(request)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


__all__ = ["Emit", "ExtractionStrategy"]
