"""LLM-backed extraction with primary/secondary provider fallback."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Protocol

from app.clients.openai_chat import Completion
from app.models.enrichment import (
    MAX_KEYWORDS,
    MAX_SIGNALS,
    MAX_WHAT_THEY_DO,
    SUMMARY_DEFAULT,
    WHAT_THEY_DO_DEFAULT,
    ExtractionResult,
)
from app.observability.metrics import MetricsReporter
from app.observability.telemetry import PipelineLogger
from app.services.enrichment.demo import DEMO_PROVIDER, build_demo_extraction
from app.services.enrichment.errors import ExtractionParseError, ProviderQuotaExceeded
from app.services.enrichment.markup import excerpt as truncate_excerpt
from app.services.enrichment.sanitizer import sanitize_prompt_input, strip_active_content

SYSTEM_PROMPT: Final[str] = (
    "You are a startup intelligence analyst. Extract structured data and return ONLY valid JSON, "
    "no markdown, no extra text. Follow the exact schema provided."
)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

USER_PROMPT_TEMPLATE: Final[str] = """Extract from this startup website:

1. Summary (2 sentences)
2. What they do (3-6 bullet points)
3. Keywords (5-10 relevant keywords)
4. Signals (2-5 signals like "Careers page exists", "Blog exists", "Actively hiring")

Return ONLY this JSON structure:
{{
  "summary": "...",
  "whatTheyDo": ["..."],
  "keywords": ["..."],
  "signals": ["..."]
}}

Website content:
{content}"""


class ExtractionProvider(Protocol):
    """Minimal contract for a text-completion provider."""

    name: str

    def complete(self, *, system_prompt: str, user_prompt: str, temperature: float) -> Completion:
        ...


class ProviderStage(str, Enum):
    """States of the provider fallback machine."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    DEMO = "demo"


@dataclass(frozen=True)
class ExtractionOutcome:
    """Validated extraction plus which path produced it."""

    result: ExtractionResult
    provider: str
    stage: ProviderStage

    @property
    def demo(self) -> bool:
        return self.stage is ProviderStage.DEMO


def build_user_prompt(text: str, *, limit: int) -> str:
    return USER_PROMPT_TEMPLATE.format(content=truncate_excerpt(sanitize_prompt_input(text), limit))


def strip_code_fences(text: str) -> str:
    """Remove markdown fence markers (three backticks, optionally tagged json), keeping the content."""
    return _CODE_FENCE.sub("", text).strip()


def find_json_object(text: str) -> str:
    """Return the first balanced ``{...}`` span in ``text``.

    Braces inside JSON strings (including escaped quotes) do not count towards
    the balance. Raises ``ExtractionParseError`` when no balanced object exists.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unterminated object starting here; try the next opening brace.
        start = text.find("{", start + 1)
    raise ExtractionParseError("No valid JSON found")


def parse_model_output(raw_text: str) -> dict[str, Any]:
    """Decode the first JSON object embedded in free-form model text."""
    candidate = find_json_object(strip_code_fences(raw_text or ""))
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ExtractionParseError(f"Model output was not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ExtractionParseError("Model output JSON was not an object.")
    return payload


def validate_extraction(payload: Any) -> ExtractionResult:
    """Repair a parsed payload into a well-formed ``ExtractionResult``. Never raises."""
    data = payload if isinstance(payload, dict) else {}

    summary = strip_active_content(data.get("summary"))
    if not summary.strip():
        summary = SUMMARY_DEFAULT

    what_they_do = _string_items(data.get("whatTheyDo"), limit=MAX_WHAT_THEY_DO)
    if not what_they_do:
        what_they_do = [WHAT_THEY_DO_DEFAULT]

    return ExtractionResult(
        summary=summary.strip(),
        what_they_do=what_they_do,
        keywords=_string_items(data.get("keywords"), limit=MAX_KEYWORDS, unique=True),
        signals=_string_items(data.get("signals"), limit=MAX_SIGNALS),
    )


def _string_items(value: Any, *, limit: int, unique: bool = False) -> list[str]:
    if not isinstance(value, list):
        return []
    items: list[str] = []
    seen: set[str] = set()
    for entry in value:
        # Model text is rendered by callers; drop anything executable.
        item = strip_active_content(entry).strip()
        if not item:
            continue
        if unique:
            key = item.casefold()
            if key in seen:
                continue
            seen.add(key)
        items.append(item)
        if len(items) >= limit:
            break
    return items


class ExtractionOrchestrator:
    """Runs PRIMARY -> SECONDARY (on quota) and reports DEMO when no provider is live.

    Transitions:
      * no primary provider configured -> DEMO
      * PRIMARY raises ``ProviderQuotaExceeded`` and a secondary exists -> SECONDARY
      * PRIMARY raises anything else -> error propagates
      * SECONDARY raises anything -> error propagates
    The pipeline turns propagated errors into DEMO results.
    """

    def __init__(
        self,
        *,
        log: PipelineLogger,
        primary: ExtractionProvider | None,
        secondary: ExtractionProvider | None = None,
        metrics: MetricsReporter | None = None,
        temperature: float = 0.1,
        primary_excerpt_chars: int = 12_000,
        secondary_excerpt_chars: int = 15_000,
    ) -> None:
        self._log = log
        self._primary = primary
        self._secondary = secondary
        self._metrics = metrics
        self._temperature = temperature
        self._limits = {
            ProviderStage.PRIMARY: primary_excerpt_chars,
            ProviderStage.SECONDARY: secondary_excerpt_chars,
        }

    @property
    def live(self) -> bool:
        return self._primary is not None

    def demo(self, source_url: str, *, reason: str) -> ExtractionOutcome:
        self._log.warn("extraction.demo_mode", url=source_url, reason=reason)
        if self._metrics is not None:
            self._metrics.increment("demo_fallback", tags={"reason": reason})
        return ExtractionOutcome(
            result=build_demo_extraction(source_url),
            provider=DEMO_PROVIDER,
            stage=ProviderStage.DEMO,
        )

    def extract(self, text: str, *, source_url: str) -> ExtractionOutcome:
        if self._primary is None:
            return self.demo(source_url, reason="no_live_credentials")

        try:
            return self._run(ProviderStage.PRIMARY, self._primary, text, source_url=source_url)
        except ProviderQuotaExceeded as exc:
            if self._secondary is None:
                self._log.warn("extraction.quota_no_secondary", url=source_url, provider=exc.provider)
                raise
            self._log.warn(
                "extraction.fallback_secondary",
                url=source_url,
                primary=exc.provider,
                secondary=self._secondary.name,
            )
            return self._run(ProviderStage.SECONDARY, self._secondary, text, source_url=source_url)

    def _run(
        self,
        stage: ProviderStage,
        provider: ExtractionProvider,
        text: str,
        *,
        source_url: str,
    ) -> ExtractionOutcome:
        start = time.perf_counter()
        completion = provider.complete(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=build_user_prompt(text, limit=self._limits[stage]),
            temperature=self._temperature,
        )
        payload = parse_model_output(completion.text)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        self._log.info(
            "extraction.completed",
            url=source_url,
            provider=provider.name,
            stage=stage.value,
            duration_ms=duration_ms,
            tokens_used=completion.total_tokens or 0,
        )
        if self._metrics is not None:
            self._metrics.timing("extraction_ms", duration_ms, tags={"provider": provider.name})
        return ExtractionOutcome(result=validate_extraction(payload), provider=provider.name, stage=stage)
