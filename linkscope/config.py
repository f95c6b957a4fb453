"""Typed discovery configuration with JSON/YAML load/save helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

import yaml  # type: ignore

from .constants import (
    DEFAULT_BODY_READ_SIZE,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_SCRAPE_JS_RESPONSES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    JSON_INDENT,
    SUPPORTED_CONFIG_SUFFIXES,
)
from .formfill import FormFillData
from .scope import ScopeManager
from .types import JSONDict

if TYPE_CHECKING:
    from .types import NavigationRequest


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"Invalid bool for '{key}': {value!r}")


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid int for '{key}': {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid int for '{key}': {value!r}") from exc


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid float for '{key}': {value!r}") from exc


def _as_str_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise ValueError(f"Invalid list for '{key}': {value!r}")


def _as_headers(value: Any, key: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid header mapping for '{key}': {value!r}")
    return {str(k): str(v) for k, v in value.items()}


@dataclass(slots=True)
class ScopeConfig:
    """Allow/deny regex lists for the scope manager."""

    allow: list[str] = field(default_factory=list)
    deny: list[str] = field(default_factory=list)
    strict: bool = False
    permissive: bool = True

    def build(self) -> ScopeManager:
        """Compile the patterns; raises `ScopeError` on an invalid regex."""

        return ScopeManager.from_config(self)

    def to_dict(self) -> JSONDict:
        return {
            "allow": list(self.allow),
            "deny": list(self.deny),
            "strict": self.strict,
            "permissive": self.permissive,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "ScopeConfig":
        payload = payload or {}
        return cls(
            allow=_as_str_list(payload.get("allow"), "scope.allow"),
            deny=_as_str_list(payload.get("deny"), "scope.deny"),
            strict=_as_bool(payload.get("strict", False), "scope.strict"),
            permissive=_as_bool(payload.get("permissive", True), "scope.permissive"),
        )


@dataclass(slots=True)
class DiscoveryConfig:
    """Options read by extraction strategies and the fetcher.

    Treated as read-only once a crawl starts.
    """

    scrape_js_responses: bool = DEFAULT_SCRAPE_JS_RESPONSES
    custom_headers: dict[str, str] = field(default_factory=dict)
    body_read_size: int = DEFAULT_BODY_READ_SIZE

    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = DEFAULT_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS

    scope: ScopeConfig = field(default_factory=ScopeConfig)
    form_fill: FormFillData = field(default_factory=FormFillData)

    def __post_init__(self) -> None:
        if self.body_read_size <= 0:
            raise ValueError("body_read_size must be > 0")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must be >= 0")
        if not self.user_agent.strip():
            raise ValueError("user_agent cannot be empty")

    def headers_for_request(self, request: "NavigationRequest") -> dict[str, str]:
        """Outgoing headers: default user agent, then request headers, then custom headers."""

        merged: dict[str, str] = {"User-Agent": self.user_agent}
        merged.update(request.headers)
        merged.update(self.custom_headers)
        return merged

    def to_dict(self) -> JSONDict:
        return {
            "scrape_js_responses": self.scrape_js_responses,
            "custom_headers": dict(self.custom_headers),
            "body_read_size": self.body_read_size,
            "user_agent": self.user_agent,
            "timeout_seconds": self.timeout_seconds,
            "retries": self.retries,
            "retry_backoff_seconds": self.retry_backoff_seconds,
            "scope": self.scope.to_dict(),
            "form_fill": self.form_fill.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DiscoveryConfig":
        """Build config from a parsed dictionary; missing keys take defaults."""

        known = {
            "scrape_js_responses",
            "custom_headers",
            "body_read_size",
            "user_agent",
            "timeout_seconds",
            "retries",
            "retry_backoff_seconds",
            "scope",
            "form_fill",
        }
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")

        return cls(
            scrape_js_responses=_as_bool(
                payload.get("scrape_js_responses", DEFAULT_SCRAPE_JS_RESPONSES),
                "scrape_js_responses",
            ),
            custom_headers=_as_headers(payload.get("custom_headers"), "custom_headers"),
            body_read_size=_as_int(
                payload.get("body_read_size", DEFAULT_BODY_READ_SIZE),
                "body_read_size",
            ),
            user_agent=str(payload.get("user_agent", DEFAULT_USER_AGENT)),
            timeout_seconds=_as_float(
                payload.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
                "timeout_seconds",
            ),
            retries=_as_int(payload.get("retries", DEFAULT_RETRIES), "retries"),
            retry_backoff_seconds=_as_float(
                payload.get("retry_backoff_seconds", DEFAULT_RETRY_BACKOFF_SECONDS),
                "retry_backoff_seconds",
            ),
            scope=ScopeConfig.from_dict(payload.get("scope")),
            form_fill=FormFillData.from_dict(payload.get("form_fill")),
        )


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML config at {path} must be a mapping at top level")
    return data


def load_config(path: str | Path) -> DiscoveryConfig:
    """Load DiscoveryConfig from JSON/YAML path."""

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ValueError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    if suffix == ".json":
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    else:
        payload = _load_yaml(config_path)

    if not isinstance(payload, dict):
        raise ValueError(f"Config at {config_path} must be a mapping")

    return DiscoveryConfig.from_dict(payload)


def save_config(config: DiscoveryConfig, path: str | Path) -> None:
    """Save DiscoveryConfig as JSON or YAML based on file extension."""

    out_path = Path(path)
    suffix = out_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ValueError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.to_dict()

    if suffix == ".json":
        out_path.write_text(
            json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return

    out_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")


__all__ = [
    "DiscoveryConfig",
    "ScopeConfig",
    "load_config",
    "save_config",
]
