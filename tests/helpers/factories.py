"""Builders shared by enrichment and scoring tests."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Sequence

import httpx

from app.clients.openai_chat import Completion
from app.config import Settings
from app.models.company import CompanyProfile
from app.observability.telemetry import PipelineLogger
from app.services.enrichment.extractor import ExtractionOrchestrator
from app.services.enrichment.fetcher import ContentFetcher
from app.services.enrichment.pipeline import EnrichmentPipeline
from tests.helpers.metrics_stub import StubMetrics

VALID_EXTRACTION = {
    "summary": "Acme builds grid-scale batteries. It sells to utilities across India.",
    "whatTheyDo": ["Designs sodium-ion cells", "Operates pilot storage sites", "Sells to utilities"],
    "keywords": ["Energy storage", "ClimateTech", "Batteries", "Utilities", "Grid"],
    "signals": ["Careers page exists", "Blog exists", "Product changelog"],
}


class StubProvider:
    """Deterministic provider returning queued texts or raising queued errors."""

    def __init__(self, name: str, responses: Sequence[str | Exception]) -> None:
        self.name = name
        self._responses = list(responses)
        self.calls: list[dict[str, object]] = []

    def complete(self, *, system_prompt: str, user_prompt: str, temperature: float) -> Completion:
        self.calls.append(
            {"system_prompt": system_prompt, "user_prompt": user_prompt, "temperature": temperature}
        )
        item = self._responses[min(len(self.calls), len(self._responses)) - 1]
        if isinstance(item, Exception):
            raise item
        return Completion(text=item, total_tokens=128)


def extraction_text(payload: dict | None = None) -> str:
    return "```json\n" + json.dumps(payload or VALID_EXTRACTION) + "\n```"


def page_html(body_text: str | None = None) -> str:
    text = body_text or (
        "Acme Energy builds grid-scale sodium-ion batteries for Indian utilities. "
        "We are hiring battery engineers. Read our blog for product updates and the changelog."
    )
    return (
        "<html><head><title>Acme</title><style>body {color: red}</style></head>"
        "<body><nav>Home About</nav><main><h1>Acme Energy</h1><p>"
        f"{text}"
        "</p><script>window.track()</script></main><footer>(c) Acme</footer></body></html>"
    )


def make_settings(**overrides) -> Settings:
    values = {
        "openai_api_key": None,
        "gemini_api_key": None,
        "fetch_retry_delay_seconds": 0.0,
        "metrics_disable": True,
    }
    values.update(overrides)
    return Settings(**values)


def make_fetcher(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    log: PipelineLogger,
    metrics: StubMetrics | None = None,
    sleeps: list[float] | None = None,
    clock: Callable[[], float] | None = None,
    **settings_overrides,
) -> ContentFetcher:
    sleeps = sleeps if sleeps is not None else []
    return ContentFetcher(
        log=log,
        metrics=metrics,
        http_client=httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True),
        config=make_settings(**settings_overrides),
        sleep=sleeps.append,
        clock=clock or time.monotonic,
    )


def make_pipeline(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    primary: StubProvider | None,
    secondary: StubProvider | None = None,
    log: PipelineLogger | None = None,
    metrics: StubMetrics | None = None,
) -> EnrichmentPipeline:
    log = log or PipelineLogger()
    orchestrator = ExtractionOrchestrator(log=log, primary=primary, secondary=secondary, metrics=metrics)
    return EnrichmentPipeline(
        fetcher=make_fetcher(handler, log=log, metrics=metrics),
        orchestrator=orchestrator,
        log=log,
    )


def make_company(**overrides) -> CompanyProfile:
    payload = {
        "id": "acme-energy",
        "name": "Acme Energy",
        "sector": "ClimateTech",
        "stage": "Seed",
        "location": "India",
        "website": "https://acme.example",
    }
    payload.update(overrides)
    return CompanyProfile(**payload)


def ok_handler(html: str | None = None) -> Callable[[httpx.Request], httpx.Response]:
    body = html if html is not None else page_html()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body, headers={"Content-Type": "text/html"})

    return handler
