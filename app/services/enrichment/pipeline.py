"""Sanitize -> fetch -> reduce -> extract, with graceful demo fallback."""

from __future__ import annotations

import time
from typing import Any

from app.clients.gemini import GeminiClient
from app.clients.openai_chat import OpenAIChatClient
from app.config import Settings, is_live_credential, settings
from app.models.enrichment import EnrichmentEnvelope
from app.observability.metrics import MetricsReporter
from app.observability.telemetry import PipelineLogger, build_pipeline_logger
from app.services.enrichment.errors import EnrichmentError
from app.services.enrichment.extractor import ExtractionOrchestrator, ExtractionOutcome
from app.services.enrichment.fetcher import ContentFetcher
from app.services.enrichment.markup import ensure_sufficient, reduce_markup
from app.services.enrichment.sanitizer import require_url


class EnrichmentPipeline:
    """One independent enrichment call per ``enrich``; holds no per-call state."""

    def __init__(
        self,
        *,
        fetcher: ContentFetcher,
        orchestrator: ExtractionOrchestrator,
        log: PipelineLogger,
        min_content_chars: int = 100,
    ) -> None:
        self._fetcher = fetcher
        self._orchestrator = orchestrator
        self._log = log
        self._min_content_chars = min_content_chars

    def enrich(self, raw_url: Any) -> EnrichmentEnvelope:
        """Return an envelope for ``raw_url``.

        Only ``InvalidInput`` escapes; every downstream failure degrades to
        deterministic demo data flagged ``demo=True``.
        """
        start = time.perf_counter()
        url = require_url(raw_url)
        self._log.info("enrichment.started", url=url)

        if not self._orchestrator.live:
            return self._envelope(self._orchestrator.demo(url, reason="no_live_credentials"), url, start)

        try:
            page = self._fetcher.fetch(url)
            text = ensure_sufficient(reduce_markup(page.text), min_chars=self._min_content_chars)
            outcome = self._orchestrator.extract(text, source_url=url)
        except EnrichmentError as exc:
            self._log.error(
                "enrichment.failed",
                url=url,
                code=exc.code,
                error=str(exc),
                duration_ms=_elapsed_ms(start),
            )
            outcome = self._orchestrator.demo(url, reason=exc.code)
        return self._envelope(outcome, url, start)

    def _envelope(self, outcome: ExtractionOutcome, url: str, start: float) -> EnrichmentEnvelope:
        self._log.info(
            "enrichment.completed",
            url=url,
            provider=outcome.provider,
            demo=outcome.demo,
            duration_ms=_elapsed_ms(start),
        )
        return EnrichmentEnvelope(data=outcome.result, source=url, demo=outcome.demo)


def build_pipeline(
    config: Settings | None = None,
    *,
    log: PipelineLogger | None = None,
    metrics: MetricsReporter | None = None,
) -> EnrichmentPipeline:
    """Assemble the pipeline from settings; live providers only when their keys are real."""
    config = config or settings
    log = log or build_pipeline_logger(config.log_format)
    metrics = metrics or MetricsReporter(config)

    primary = None
    if is_live_credential(config.openai_api_key):
        primary = OpenAIChatClient(config.openai_api_key or "", model=config.openai_model)
    secondary = None
    if is_live_credential(config.gemini_api_key):
        secondary = GeminiClient(
            config.gemini_api_key or "",
            model=config.gemini_model,
            base_url=config.gemini_base_url,
        )

    orchestrator = ExtractionOrchestrator(
        log=log,
        primary=primary,
        secondary=secondary,
        metrics=metrics,
        temperature=config.extraction_temperature,
        primary_excerpt_chars=config.primary_excerpt_chars,
        secondary_excerpt_chars=config.secondary_excerpt_chars,
    )
    fetcher = ContentFetcher(log=log, metrics=metrics, config=config)
    return EnrichmentPipeline(
        fetcher=fetcher,
        orchestrator=orchestrator,
        log=log,
        min_content_chars=config.min_content_chars,
    )


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)
