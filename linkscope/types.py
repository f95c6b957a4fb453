"""Navigation model shared by the fetcher, extraction strategies, and scope checks.

This module is intentionally dependency-light so every other module can import
the request/response records without introducing cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Mapping
from urllib.parse import urlsplit

from requests.structures import CaseInsensitiveDict

from .constants import DEFAULT_METHOD
from .document import Document, Element, parse_document
from .url import resolve_url

if TYPE_CHECKING:
    from .config import DiscoveryConfig


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


class RequestSource(str, Enum):
    """Tags naming the extraction strategy that produced a request."""

    CONTENT_LOCATION = "content-location"
    LINK = "link"
    LOCATION = "location"
    REFRESH = "refresh"
    A = "a"
    EMBED = "embed"
    FRAME = "frame"
    IFRAME = "iframe"
    INPUT = "input"
    ISINDEX = "isindex"
    SCRIPT = "script"
    BUTTON = "button"
    FORM = "form"
    META = "meta"
    SCRIPT_CONTENT = "script-content"
    JS_FILE = "js-file"


@dataclass(frozen=True, slots=True)
class NavigationRequest:
    """A crawl candidate proposed for the frontier."""

    url: str
    depth: int
    source: str
    method: str = DEFAULT_METHOD
    body: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", (self.method or DEFAULT_METHOD).upper())
        if isinstance(self.source, RequestSource):
            object.__setattr__(self, "source", self.source.value)

    @classmethod
    def from_url(
        cls,
        href: str | None,
        source: RequestSource | str,
        response: "NavigationResponse",
    ) -> "NavigationRequest | None":
        """Build a GET request for `href` resolved against `response`.

        Returns `None` when the reference cannot be resolved.
        """

        url = response.resolve_url(href)
        if not url:
            return None
        return cls(url=url, depth=response.depth + 1, source=source)

    @classmethod
    def seed(cls, url: str, *, method: str = DEFAULT_METHOD) -> "NavigationRequest":
        """Request for a crawl seed (depth 0)."""

        return cls(url=url, depth=0, source="seed", method=method)

    def to_json(self) -> JSONDict:
        return {
            "method": self.method,
            "url": self.url,
            "body": self.body,
            "headers": dict(self.headers),
            "depth": self.depth,
            "source": self.source,
        }


@dataclass(slots=True)
class NavigationResponse:
    """A fetched page as consumed by extraction strategies.

    Created once per fetch and treated as read-only afterwards.
    """

    url: str
    depth: int
    options: "DiscoveryConfig"
    status_code: int = 200
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    body: bytes = b""
    document: Document | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers or {})

    @classmethod
    def from_body(
        cls,
        *,
        url: str,
        depth: int,
        options: "DiscoveryConfig",
        body: bytes | str = b"",
        headers: Mapping[str, str] | None = None,
        status_code: int = 200,
    ) -> "NavigationResponse":
        """Build a response and parse its document from `body`."""

        raw = body.encode("utf-8") if isinstance(body, str) else body
        return cls(
            url=url,
            depth=depth,
            options=options,
            status_code=status_code,
            headers=CaseInsensitiveDict(headers or {}),
            body=raw,
            document=parse_document(raw),
        )

    @classmethod
    def empty(
        cls,
        *,
        url: str,
        depth: int,
        options: "DiscoveryConfig",
        status_code: int = 404,
    ) -> "NavigationResponse":
        """Response with no body and no document (e.g. HTTP 404)."""

        return cls(url=url, depth=depth, options=options, status_code=status_code)

    def resolve_url(self, href: str | None) -> str:
        """Resolve `href` against the final request URL; `""` on failure."""

        return resolve_url(self.url, href)

    def header(self, name: str) -> str:
        return (self.headers.get(name) or "").strip()

    def select(self, selector: str) -> list[Element]:
        if self.document is None:
            return []
        return self.document.select(selector)

    @property
    def content_type(self) -> str:
        return self.header("Content-Type")

    @property
    def is_javascript(self) -> bool:
        path = urlsplit(self.url).path
        return path.endswith(".js") or "/javascript" in self.content_type.lower()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class FormInput:
    """One submittable field of a form: `<input>`, `<textarea>`, or `<select>`."""

    name: str
    type: str = "text"
    value: str = ""
    placeholder: str = ""
    autocomplete: str = ""
    options: tuple[str, ...] = ()
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def has_value(self) -> bool:
        return bool(self.value)

    @classmethod
    def from_element(cls, element: Element) -> "FormInput":
        tag = element.tag
        attributes = {
            name: element.attr(name) or ""
            for name in ("id", "min", "max", "maxlength", "pattern", "required", "checked")
            if element.has_attr(name)
        }

        if tag == "textarea":
            field_type = "textarea"
            value = element.text().strip()
            options: tuple[str, ...] = ()
        elif tag == "select":
            field_type = "select"
            option_elements = element.select("option")
            options = tuple(_option_value(option) for option in option_elements)
            selected = [
                _option_value(option) for option in option_elements if option.has_attr("selected")
            ]
            value = selected[0] if selected else ""
        else:
            field_type = (element.attr("type") or "text").strip().lower() or "text"
            value = element.attr("value") or ""
            options = ()

        return cls(
            name=(element.attr("name") or "").strip(),
            type=field_type,
            value=value,
            placeholder=element.attr("placeholder") or "",
            autocomplete=(element.attr("autocomplete") or "").strip().lower(),
            options=options,
            attributes=attributes,
        )


def _option_value(option: Element) -> str:
    value = option.attr("value")
    if value is not None:
        return value
    return option.text().strip()


__all__ = [
    "FormInput",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "NavigationRequest",
    "NavigationResponse",
    "RequestSource",
]
