"""Reference fetcher producing navigation responses with requests.

The extraction core never performs I/O; this module is the collaborator that
turns a `NavigationRequest` into a `NavigationResponse` for it.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from .config import DiscoveryConfig
from .constants import DRAIN_CHUNK_BYTES, RETRYABLE_STATUS_CODES, STREAM_CHUNK_BYTES
from .types import NavigationRequest, NavigationResponse

LOGGER = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a request yields no navigation response."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class _AttemptConfig:
    attempts: int
    backoff_seconds: float


@dataclass(slots=True)
class _AttemptResult:
    response: NavigationResponse | None = None
    status_code: int | None = None
    error: str | None = None

    @property
    def retryable(self) -> bool:
        if self.response is not None:
            return False
        if self.status_code is None:
            return True
        return self.status_code in RETRYABLE_STATUS_CODES or self.status_code >= 500


class Fetcher:
    """Fetch navigation requests with retries and a body-size cap.

    - One `requests.Session` per thread, so workers can fetch in parallel.
    - Redirects are not followed; `Location` is left for the extraction
      pipeline to discover.
    - HTTP 404 yields an empty response instead of an error.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        *,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self.config = config
        self._session_factory = session_factory
        self._thread_local = threading.local()

        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()

        self._closed = False
        self._closed_lock = threading.Lock()

    def fetch(self, request: NavigationRequest) -> NavigationResponse:
        """Fetch one request; raises `FetchError` when no response is produced."""

        if self._is_closed():
            raise FetchError("Fetcher is closed", url=request.url)

        attempt_cfg = _AttemptConfig(
            attempts=max(1, self.config.retries + 1),
            backoff_seconds=max(0.0, self.config.retry_backoff_seconds),
        )

        result = _AttemptResult(error="Unknown fetch failure")
        for attempt in range(1, attempt_cfg.attempts + 1):
            result = self._fetch_once(request)
            if not result.retryable:
                break

            LOGGER.debug(
                "Attempt %d/%d for %s failed: %s",
                attempt,
                attempt_cfg.attempts,
                request.url,
                result.error,
            )
            if attempt < attempt_cfg.attempts and attempt_cfg.backoff_seconds > 0:
                # Linear backoff keeps behavior simple and predictable.
                time.sleep(attempt_cfg.backoff_seconds * attempt)

        if result.response is None:
            raise FetchError(
                f"Failed to fetch {request.url}: {result.error}",
                url=request.url,
                status_code=result.status_code,
            )
        return result.response

    def close(self) -> None:
        """Close every session opened by this fetcher."""

        with self._closed_lock:
            self._closed = True

        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _is_closed(self) -> bool:
        with self._closed_lock:
            return self._closed

    def _fetch_once(self, request: NavigationRequest) -> _AttemptResult:
        session = self._thread_local_session()
        data = None if request.body is None else request.body.encode("utf-8")

        try:
            response = session.request(
                request.method,
                request.url,
                data=data,
                headers=self.config.headers_for_request(request),
                timeout=self.config.timeout_seconds,
                allow_redirects=False,
                stream=True,
            )
        except requests.RequestException as exc:
            return _AttemptResult(error=f"{exc.__class__.__name__}: {exc}")

        try:
            return self._to_result(request, response)
        except requests.RequestException as exc:
            return _AttemptResult(
                status_code=response.status_code,
                error=f"{exc.__class__.__name__}: {exc}",
            )
        finally:
            self._drain_and_close(response)

    def _to_result(self, request: NavigationRequest, response: requests.Response) -> _AttemptResult:
        status = response.status_code
        final_url = response.url or request.url

        if status == 404:
            return _AttemptResult(
                response=NavigationResponse.empty(
                    url=final_url,
                    depth=request.depth,
                    options=self.config,
                    status_code=status,
                ),
                status_code=status,
            )

        if not 200 <= status < 400:
            return _AttemptResult(status_code=status, error=f"HTTP {status}")

        body = self._read_capped(response)
        return _AttemptResult(
            response=NavigationResponse.from_body(
                url=final_url,
                depth=request.depth,
                options=self.config,
                body=body,
                headers=response.headers,
                status_code=status,
            ),
            status_code=status,
        )

    def _read_capped(self, response: requests.Response) -> bytes:
        limit = self.config.body_read_size
        chunks: list[bytes] = []
        total = 0
        for chunk in response.iter_content(chunk_size=STREAM_CHUNK_BYTES):
            if not chunk:
                continue
            kept = chunk[: limit - total]
            chunks.append(kept)
            total += len(kept)
            if total >= limit:
                LOGGER.debug("Body of %s truncated at %d bytes", response.url, limit)
                break
        return b"".join(chunks)

    @staticmethod
    def _drain_and_close(response: requests.Response) -> None:
        try:
            raw = response.raw
            if raw is not None:
                raw.read(DRAIN_CHUNK_BYTES)
        except (OSError, ValueError, Urllib3HTTPError, requests.RequestException) as exc:
            LOGGER.debug("Could not drain response body for %s: %s", response.url, exc)
        finally:
            response.close()

    def _thread_local_session(self) -> requests.Session:
        session = getattr(self._thread_local, "session", None)
        if session is None:
            session = self._session_factory()
            self._thread_local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session


__all__ = ["FetchError", "Fetcher"]
