"""Strategy submitting every `<form action=...>` through the form filler."""

from __future__ import annotations

from typing import Iterator

from ..formfill import FormFiller
from ..types import NavigationRequest, NavigationResponse
from .base import ExtractionStrategy


class FormStrategy(ExtractionStrategy):
    name = "tag:form"
    selector = "form[action]"

    def __init__(self, filler: FormFiller | None = None) -> None:
        self.filler = filler or FormFiller()

    def extract(self, response: NavigationResponse) -> Iterator[NavigationRequest]:
        for form in response.select(self.selector):
            request = self.filler.build_request(form, response)
            if request is not None:
                yield request


__all__ = ["FormStrategy"]
