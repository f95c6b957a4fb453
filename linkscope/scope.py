"""Regex allow/deny scope matching for discovered URLs."""

from __future__ import annotations

import ipaddress
import logging
import re
from typing import TYPE_CHECKING, Iterable
from urllib.parse import SplitResult

from .url import host_from_url

if TYPE_CHECKING:
    from .config import ScopeConfig

LOGGER = logging.getLogger(__name__)


class ScopeError(ValueError):
    """Raised for invalid scope patterns or URLs the matcher cannot read."""


def _compile_patterns(patterns: Iterable[str], kind: str) -> tuple[re.Pattern[str], ...]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            raise ScopeError(f"Invalid {kind} scope pattern {pattern!r}: {exc}") from exc
    return tuple(compiled)


def _is_ip_literal(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class ScopeManager:
    """Decide whether a URL's host is inside the crawl boundary.

    Deny patterns always win over allow patterns. With no allow patterns, a
    permissive manager accepts everything not denied; a non-permissive one
    accepts nothing.

    Loose mode searches each pattern anywhere in the host. Strict mode requires
    a pattern to match the whole host or a whole dot-suffix of it starting on
    a label boundary, so `google\\..*` accepts `test.google.com` but not
    `notgoogle.com`. IP literal hosts must always match a pattern exactly in
    strict mode.

    Instances hold only compiled patterns and are safe to share between threads.
    """

    __slots__ = ("_allow", "_deny", "_strict", "_permissive")

    def __init__(
        self,
        allow: Iterable[str] = (),
        deny: Iterable[str] = (),
        strict: bool = False,
        *,
        permissive: bool = True,
    ) -> None:
        self._allow = _compile_patterns(allow, "allow")
        self._deny = _compile_patterns(deny, "deny")
        self._strict = bool(strict)
        self._permissive = bool(permissive)

    @classmethod
    def from_config(cls, config: "ScopeConfig") -> "ScopeManager":
        return cls(
            config.allow,
            config.deny,
            config.strict,
            permissive=config.permissive,
        )

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def allow_patterns(self) -> tuple[str, ...]:
        return tuple(pattern.pattern for pattern in self._allow)

    @property
    def deny_patterns(self) -> tuple[str, ...]:
        return tuple(pattern.pattern for pattern in self._deny)

    def validate(self, url: str | SplitResult) -> bool:
        """Return True when `url` is in scope.

        Raises `ScopeError` when no host can be read from `url`.
        """

        host = self._host(url)

        if any(self._matches(pattern, host) for pattern in self._deny):
            return False
        if not self._allow:
            return self._permissive
        return any(self._matches(pattern, host) for pattern in self._allow)

    def is_in_scope(self, url: str | SplitResult) -> bool:
        """Like `validate`, but malformed URLs are simply out of scope."""

        try:
            return self.validate(url)
        except ScopeError as exc:
            LOGGER.debug("Treating malformed URL as out of scope: %s", exc)
            return False

    def filter(self, urls: Iterable[str]) -> list[str]:
        """Keep in-scope URLs while preserving order."""

        return [url for url in urls if self.is_in_scope(url)]

    def _matches(self, pattern: re.Pattern[str], host: str) -> bool:
        if not self._strict:
            return pattern.search(host) is not None

        if _is_ip_literal(host):
            return pattern.fullmatch(host) is not None

        labels = host.split(".")
        return any(
            pattern.fullmatch(".".join(labels[index:])) is not None
            for index in range(len(labels))
        )

    @staticmethod
    def _host(url: str | SplitResult) -> str:
        if isinstance(url, SplitResult):
            url = url.geturl()
        if not isinstance(url, str) or not url.strip():
            raise ScopeError(f"Cannot validate empty or non-string URL: {url!r}")

        host = host_from_url(url.strip())
        if not host:
            raise ScopeError(f"Malformed URL or no host: {url!r}")
        return host

    def __repr__(self) -> str:
        return (
            f"ScopeManager(allow={list(self.allow_patterns)!r}, "
            f"deny={list(self.deny_patterns)!r}, strict={self._strict}, "
            f"permissive={self._permissive})"
        )


__all__ = ["ScopeError", "ScopeManager"]
