"""Single-page HTTP fetch with a hard timeout and one fixed-delay retry."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from app.config import Settings, settings
from app.core.backoff import retry_schedule
from app.observability.metrics import MetricsReporter
from app.observability.telemetry import PipelineLogger
from app.services.enrichment.errors import (
    AccessDenied,
    FetchFailed,
    NotFound,
    TransportError,
)

ACCEPT_HEADER = "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5"


@dataclass(frozen=True)
class RawPage:
    """Successful fetch outcome."""

    url: str
    status_code: int
    text: str
    size_bytes: int
    attempts: int
    duration_ms: float

    @property
    def retries(self) -> int:
        return max(0, self.attempts - 1)


class ContentFetcher:
    """Fetches one page and classifies failure modes into domain errors."""

    def __init__(
        self,
        *,
        log: PipelineLogger,
        metrics: MetricsReporter | None = None,
        http_client: httpx.Client | None = None,
        config: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = config or settings
        self._log = log
        self._metrics = metrics
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=httpx.Timeout(config.fetch_timeout_seconds),
            follow_redirects=True,
        )
        self._timeout_seconds = config.fetch_timeout_seconds
        self._headers = {"User-Agent": config.fetch_user_agent, "Accept": ACCEPT_HEADER}
        self._max_attempts = 1 + max(0, config.fetch_max_retries)
        self._retry_delay = config.fetch_retry_delay_seconds
        self._size_warning_bytes = config.fetch_max_bytes_warning
        self._sleep = sleep
        self._clock = clock

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._owns_http_client:
            self._http.close()

    def fetch(self, url: str) -> RawPage:
        """GET ``url``; retry once on transport failure, never on an HTTP status.

        Each attempt must finish within ``fetch_timeout_seconds`` in total,
        including a body that trickles in slowly.
        """
        start = time.perf_counter()
        last_error: httpx.HTTPError | None = None
        for attempt, delay in retry_schedule(max_attempts=self._max_attempts, delay=self._retry_delay):
            try:
                return self._fetch_once(url, attempt=attempt, start=start)
            except httpx.InvalidURL as exc:
                self._log.error("fetch.invalid_url", url=url, error=str(exc))
                raise TransportError(f"fetch failed: {exc}") from exc
            except httpx.HTTPError as exc:
                last_error = exc
                if attempt >= self._max_attempts:
                    break
                self._log.warn(
                    "fetch.retry",
                    url=url,
                    attempt=attempt,
                    error=type(exc).__name__,
                    delay_seconds=delay,
                )
                self._sleep(delay)

        duration_ms = _elapsed_ms(start)
        self._log.error(
            "fetch.failed",
            url=url,
            retries=self._max_attempts - 1,
            duration_ms=duration_ms,
            error=str(last_error),
        )
        self._record("fetch.transport_error", duration_ms)
        kind = "timed out" if isinstance(last_error, httpx.TimeoutException) else "transport error"
        raise TransportError(f"fetch failed: {kind} after {self._max_attempts} attempts") from last_error

    def _fetch_once(self, url: str, *, attempt: int, start: float) -> RawPage:
        deadline = self._clock() + self._timeout_seconds
        with self._http.stream("GET", url, headers=self._headers) as response:
            self._check_status(url, response, attempt=attempt, start=start)
            chunks: list[bytes] = []
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if self._clock() > deadline:
                    raise httpx.ReadTimeout(
                        f"response not complete within {self._timeout_seconds}s",
                        request=response.request,
                    )
        return self._page(url, response, b"".join(chunks), attempt=attempt, start=start)

    def _check_status(self, url: str, response: httpx.Response, *, attempt: int, start: float) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return
        duration_ms = _elapsed_ms(start)
        context = {"url": url, "status": status, "retries": attempt - 1, "duration_ms": duration_ms}
        if status == 404:
            self._log.warn("fetch.not_found", **context)
            self._record("fetch.not_found", duration_ms)
            raise NotFound()
        if status == 403:
            self._log.warn("fetch.access_denied", **context)
            self._record("fetch.access_denied", duration_ms)
            raise AccessDenied()
        self._log.warn("fetch.http_error", **context)
        self._record("fetch.http_error", duration_ms)
        raise FetchFailed(status)

    def _page(self, url: str, response: httpx.Response, body: bytes, *, attempt: int, start: float) -> RawPage:
        duration_ms = _elapsed_ms(start)
        size_bytes = len(body)
        if size_bytes > self._size_warning_bytes:
            self._log.warn(
                "fetch.large_response",
                url=url,
                size_mb=round(size_bytes / (1024 * 1024), 2),
            )
        self._log.info(
            "fetch.completed",
            url=url,
            status=response.status_code,
            retries=attempt - 1,
            duration_ms=duration_ms,
            size_bytes=size_bytes,
        )
        self._record("fetch.completed", duration_ms)
        return RawPage(
            url=str(response.url),
            status_code=response.status_code,
            text=body.decode(response.encoding or "utf-8", errors="replace"),
            size_bytes=size_bytes,
            attempts=attempt,
            duration_ms=duration_ms,
        )

    def _record(self, outcome: str, duration_ms: float) -> None:
        if self._metrics is not None:
            self._metrics.timing("fetch_ms", duration_ms, tags={"outcome": outcome})

    def __enter__(self) -> ContentFetcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
