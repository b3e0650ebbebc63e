import httpx
import pytest

from app.services.enrichment.errors import AccessDenied, FetchFailed, NotFound, TransportError
from tests.helpers.factories import make_fetcher, page_html
from tests.helpers.metrics_stub import StubMetrics


def test_fetch_returns_page_with_custom_user_agent(pipeline_log, events):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=page_html())

    metrics = StubMetrics()
    fetcher = make_fetcher(handler, log=pipeline_log, metrics=metrics, fetch_user_agent="ThesisBot/1.0")
    page = fetcher.fetch("https://acme.example")

    assert page.status_code == 200
    assert "Acme Energy" in page.text
    assert page.attempts == 1
    assert page.retries == 0
    assert seen[0].headers["User-Agent"] == "ThesisBot/1.0"
    assert "fetch.completed" in events()
    assert metrics.timing_calls[0]["tags"] == {"outcome": "fetch.completed"}


@pytest.mark.parametrize(
    ("status", "error_cls"),
    [(404, NotFound), (403, AccessDenied)],
)
def test_fetch_maps_client_errors(status, error_cls, pipeline_log):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(status)

    fetcher = make_fetcher(handler, log=pipeline_log)
    with pytest.raises(error_cls):
        fetcher.fetch("https://acme.example")
    assert len(calls) == 1  # status failures are not retried


def test_fetch_maps_other_statuses_to_fetch_failed(pipeline_log):
    fetcher = make_fetcher(lambda request: httpx.Response(502), log=pipeline_log)
    with pytest.raises(FetchFailed) as excinfo:
        fetcher.fetch("https://acme.example")
    assert excinfo.value.status_code == 502
    assert excinfo.value.code == "502_FETCH_FAILED"


def test_fetch_retries_once_after_transport_error(pipeline_log, events):
    attempts = []
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, text=page_html())

    fetcher = make_fetcher(handler, log=pipeline_log, sleeps=sleeps, fetch_retry_delay_seconds=1.0)
    page = fetcher.fetch("https://acme.example")

    assert page.attempts == 2
    assert page.retries == 1
    assert sleeps == [1.0]
    assert "fetch.retry" in events()


def test_fetch_gives_up_after_single_retry_on_timeout(pipeline_log, events):
    attempts = []
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ReadTimeout("too slow", request=request)

    fetcher = make_fetcher(handler, log=pipeline_log, sleeps=sleeps)
    with pytest.raises(TransportError) as excinfo:
        fetcher.fetch("https://slow.example")

    assert len(attempts) == 2
    assert len(sleeps) == 1
    assert "timed out" in str(excinfo.value)
    assert "fetch.failed" in events()


def test_large_response_warns_but_succeeds(pipeline_log, events):
    fetcher = make_fetcher(
        lambda request: httpx.Response(200, text=page_html()),
        log=pipeline_log,
        fetch_max_bytes_warning=64,
    )
    page = fetcher.fetch("https://acme.example")

    assert page.size_bytes > 64
    assert "fetch.large_response" in events()


def test_slow_body_is_cut_off_at_total_deadline(pipeline_log, events):
    now = [0.0]
    attempts = []

    def trickle():
        for _ in range(8):
            now[0] += 0.5
            yield b"<p>chunk</p>"

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(200, content=trickle())

    fetcher = make_fetcher(handler, log=pipeline_log, clock=lambda: now[0], fetch_timeout_seconds=1.0)
    with pytest.raises(TransportError) as excinfo:
        fetcher.fetch("https://slow.example")

    assert len(attempts) == 2
    assert "timed out" in str(excinfo.value)
    assert "fetch.completed" not in events()
    assert "fetch.failed" in events()


def test_body_within_deadline_is_returned(pipeline_log):
    now = [0.0]

    def steady():
        for _ in range(3):
            now[0] += 0.2
            yield b"<p>chunk</p>"

    fetcher = make_fetcher(
        lambda request: httpx.Response(200, content=steady()),
        log=pipeline_log,
        clock=lambda: now[0],
        fetch_timeout_seconds=1.0,
    )
    page = fetcher.fetch("https://acme.example")

    assert page.text == "<p>chunk</p>" * 3
    assert page.size_bytes == 36
