"""URL resolution, header directive parsing, and JavaScript endpoint mining."""

from __future__ import annotations

import re
from typing import Sequence
from urllib.parse import urljoin, urlsplit, urlunsplit


DEFAULT_ALLOWED_SCHEMES = ("http", "https")
SKIP_HREF_PREFIXES = ("javascript:", "mailto:", "tel:", "data:")

_LINK_HEADER_URL_RE = re.compile(r"<([^>]*)>")
_REFRESH_URL_RE = re.compile(r"[;,]\s*url\s*=\s*(.*)$", re.IGNORECASE | re.DOTALL)

# Longer quoted strings are never treated as endpoints.
MAX_QUOTED_ENDPOINT_LENGTH = 2048

# Text between a quote and the next quote. The closing quote is left
# unconsumed so it can open the next string when this one is rejected.
_QUOTED_STRING_RE = re.compile(r"""["']([^"']{1,%d})(?=["'])""" % MAX_QUOTED_ENDPOINT_LENGTH)

# Endpoint shapes, each checked against a whole quoted string: absolute or
# protocol-relative URLs, rooted/dotted paths, and bare file names with a web
# extension. Slash-separated paths are checked in `_is_slash_path`.
_ABSOLUTE_ENDPOINT_RE = re.compile(r"(?:[a-zA-Z]{1,10}://|//)[^/]+\.[a-zA-Z]{2,}.*", re.DOTALL)
_ROOTED_ENDPOINT_RE = re.compile(r"(?:/|\.\./|\./)[^><,;| *()%$^/\\\[\]][^><,;|()]+")
_FILE_NAME_ENDPOINT_RE = re.compile(
    r"[a-zA-Z0-9_\-]+\.(?:php|asp|aspx|jsp|json|action|html|js|txt|xml)(?:[?|#][^|]*)?"
)
_PATH_CHARS_RE = re.compile(r"[a-zA-Z0-9_\-/]+")
_EXTENSION_SUFFIX_RE = re.compile(r"\.(?:[a-zA-Z]{1,4}|action)(?:[?|#][^|]*)?")
_QUERY_SUFFIX_RE = re.compile(r"(?:[?|#][^|]*)?")


def host_from_url(url: str) -> str:
    """Extract the lowercased host from a URL, or an empty string."""

    try:
        host = urlsplit(url).hostname
    except ValueError:
        return ""
    return (host or "").strip().lower().strip(".")


def is_http_url(url: str, allowed_schemes: Sequence[str] = DEFAULT_ALLOWED_SCHEMES) -> bool:
    """Return True if URL is absolute and has an allowed HTTP-like scheme."""

    try:
        parsed = urlsplit(url)
        # Accessing `port` validates it.
        parsed.port
    except ValueError:
        return False
    if not parsed.scheme or not parsed.hostname:
        return False
    return parsed.scheme.lower() in {scheme.lower() for scheme in allowed_schemes}


def resolve_url(
    base_url: str,
    href: str | None,
    *,
    allowed_schemes: Sequence[str] = DEFAULT_ALLOWED_SCHEMES,
) -> str:
    """Resolve a possibly relative reference against `base_url`.

    Returns an absolute URL without fragment, or `""` when the reference is
    empty, fragment-only, a non-navigable scheme, or cannot be resolved.
    """

    if href is None:
        return ""

    candidate = href.strip()
    if not candidate or candidate.startswith("#"):
        return ""

    lowered = candidate.lower()
    if any(lowered.startswith(prefix) for prefix in SKIP_HREF_PREFIXES):
        return ""

    try:
        absolute = urljoin(base_url, candidate)
        parsed = urlsplit(absolute)
    except ValueError:
        return ""

    resolved = urlunsplit((parsed.scheme, parsed.netloc, parsed.path, parsed.query, ""))
    if not is_http_url(resolved, allowed_schemes=allowed_schemes):
        return ""
    return resolved


def parse_link_header(value: str | None) -> list[str]:
    """Return every `<url>` target of a `Link` header, in order."""

    if not value:
        return []
    targets: list[str] = []
    for match in _LINK_HEADER_URL_RE.finditer(value):
        target = match.group(1).strip()
        if target:
            targets.append(target)
    return targets


def parse_refresh(value: str | None) -> str:
    """Return the `url=` target of a refresh directive such as `5; url=/next`.

    Malformed directives yield `""`.
    """

    if not value:
        return ""
    match = _REFRESH_URL_RE.search(value)
    if match is None:
        return ""
    target = match.group(1).strip()
    if len(target) >= 2 and target[0] == target[-1] and target[0] in {"'", '"'}:
        target = target[1:-1].strip()
    else:
        target = target.strip("'\"").strip()
    return target


def extract_relative_endpoints(text: str | None) -> list[str]:
    """Mine quoted endpoint-looking strings from script text.

    Returns unique matches in first-seen order.
    """

    if not text:
        return []
    endpoints: list[str] = []
    seen: set[str] = set()
    pos = 0
    while True:
        match = _QUOTED_STRING_RE.search(text, pos)
        if match is None:
            break
        candidate = match.group(1)
        if not _looks_like_endpoint(candidate):
            pos = match.end()
            continue
        # Skip past the closing quote.
        pos = match.end() + 1
        endpoint = candidate.strip()
        if not endpoint or endpoint in seen:
            continue
        seen.add(endpoint)
        endpoints.append(endpoint)
    return endpoints


def _looks_like_endpoint(value: str) -> bool:
    if (
        _ABSOLUTE_ENDPOINT_RE.fullmatch(value)
        or _ROOTED_ENDPOINT_RE.fullmatch(value)
        or _FILE_NAME_ENDPOINT_RE.fullmatch(value)
    ):
        return True
    return _is_slash_path(value)


def _is_slash_path(value: str) -> bool:
    """`dir/name.ext` or `dir/name` (3+ chars after the slash), optionally with `?`/`#` suffix.

    The path run is the longest prefix of path characters, so each check is a
    single linear pass.
    """

    prefix = _PATH_CHARS_RE.match(value)
    if prefix is None:
        return False
    path = prefix.group()
    rest = value[len(path):]
    if "/" in path[1:-1] and _EXTENSION_SUFFIX_RE.fullmatch(rest):
        return True
    return "/" in path[1:-3] and _QUERY_SUFFIX_RE.fullmatch(rest) is not None


def merge_query(url: str, query: str) -> str:
    """Append an encoded query string to `url`, keeping any existing query."""

    if not query:
        return url
    parsed = urlsplit(url)
    merged = f"{parsed.query}&{query}" if parsed.query else query
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, merged, parsed.fragment))


__all__ = [
    "DEFAULT_ALLOWED_SCHEMES",
    "MAX_QUOTED_ENDPOINT_LENGTH",
    "SKIP_HREF_PREFIXES",
    "extract_relative_endpoints",
    "host_from_url",
    "is_http_url",
    "merge_query",
    "parse_link_header",
    "parse_refresh",
    "resolve_url",
]
