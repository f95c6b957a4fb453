"""Shared defaults for discovery configuration, fetching, and form filling."""

from __future__ import annotations

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_BODY_READ_SIZE = 4 * 1024 * 1024
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_RETRIES = 1
DEFAULT_RETRY_BACKOFF_SECONDS = 1.0
DEFAULT_SCRAPE_JS_RESPONSES = False

# Unread bytes drained before closing a response so the connection is reusable.
DRAIN_CHUNK_BYTES = 8 * 1024
STREAM_CHUNK_BYTES = 64 * 1024

DEFAULT_METHOD = "GET"
DEFAULT_FORM_ENCTYPE = "application/x-www-form-urlencoded"
MULTIPART_ENCTYPE_PREFIX = "multipart/"

RETRYABLE_STATUS_CODES = frozenset({408, 429})

JSON_INDENT = 2
SUPPORTED_CONFIG_SUFFIXES = (".json", ".yaml", ".yml")

__all__ = [
    "DEFAULT_BODY_READ_SIZE",
    "DEFAULT_FORM_ENCTYPE",
    "DEFAULT_METHOD",
    "DEFAULT_RETRIES",
    "DEFAULT_RETRY_BACKOFF_SECONDS",
    "DEFAULT_SCRAPE_JS_RESPONSES",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_USER_AGENT",
    "DRAIN_CHUNK_BYTES",
    "JSON_INDENT",
    "MULTIPART_ENCTYPE_PREFIX",
    "RETRYABLE_STATUS_CODES",
    "STREAM_CHUNK_BYTES",
    "SUPPORTED_CONFIG_SUFFIXES",
]
