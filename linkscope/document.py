"""Minimal document traversal interface used by extraction strategies.

Strategies only ever need "find all elements matching selector S, read
attribute A" plus element text, so that is all this module exposes. The
BeautifulSoup implementation below can be swapped for any other tree library
that satisfies the two protocols.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from bs4 import BeautifulSoup, NavigableString, Tag
from soupsieve import SelectorSyntaxError

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Element(Protocol):
    """One element in a parsed document."""

    @property
    def tag(self) -> str: ...

    def attr(self, name: str) -> str | None: ...

    def has_attr(self, name: str) -> bool: ...

    def text(self) -> str: ...

    def select(self, selector: str) -> list["Element"]: ...


@runtime_checkable
class Document(Protocol):
    """A parsed document supporting CSS-selector lookups."""

    def select(self, selector: str) -> list[Element]: ...


def _select(node: Tag, selector: str) -> list["SoupElement"]:
    try:
        matches = node.select(selector)
    except SelectorSyntaxError:
        LOGGER.warning("Invalid CSS selector %r", selector)
        return []
    return [SoupElement(match) for match in matches]


class SoupElement:
    """`Element` backed by a BeautifulSoup tag."""

    __slots__ = ("_tag",)

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    @property
    def tag(self) -> str:
        return (self._tag.name or "").lower()

    def attr(self, name: str) -> str | None:
        value = self._tag.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def has_attr(self, name: str) -> bool:
        return self._tag.has_attr(name)

    def text(self) -> str:
        # Script and style contents are not "interesting" strings for get_text(),
        # so collect raw string nodes directly.
        return "".join(
            str(node) for node in self._tag.descendants if isinstance(node, NavigableString)
        )

    def select(self, selector: str) -> list["SoupElement"]:
        return _select(self._tag, selector)

    def __repr__(self) -> str:
        return f"SoupElement(<{self.tag}>)"


class SoupDocument:
    """`Document` backed by BeautifulSoup with the lxml tree builder."""

    __slots__ = ("_soup",)

    def __init__(self, markup: str | bytes) -> None:
        # Keep attributes such as `rel`/`class` as plain strings.
        self._soup = BeautifulSoup(markup, "lxml", multi_valued_attributes=None)

    def select(self, selector: str) -> list[SoupElement]:
        return _select(self._soup, selector)


def parse_document(body: str | bytes | None) -> SoupDocument | None:
    """Parse an HTML body into a document, or `None` when there is nothing to parse."""

    if body is None:
        return None
    if isinstance(body, bytes):
        if not body.strip():
            return None
    elif not body.strip():
        return None
    return SoupDocument(body)


__all__ = [
    "Document",
    "Element",
    "SoupDocument",
    "SoupElement",
    "parse_document",
]
