"""Request/response models for website enrichment."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer

SUMMARY_DEFAULT = "No summary available"
WHAT_THEY_DO_DEFAULT = "Information not available"
MAX_WHAT_THEY_DO = 6
MAX_KEYWORDS = 10
MAX_SIGNALS = 5


class ExtractionResult(BaseModel):
    """Structured intelligence pulled from a company website."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = SUMMARY_DEFAULT
    what_they_do: list[str] = Field(
        default_factory=lambda: [WHAT_THEY_DO_DEFAULT],
        alias="whatTheyDo",
        min_length=1,
        max_length=MAX_WHAT_THEY_DO,
    )
    keywords: list[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    signals: list[str] = Field(default_factory=list, max_length=MAX_SIGNALS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EnrichmentEnvelope(BaseModel):
    """Successful enrichment handed to the caller for persistence."""

    data: ExtractionResult
    source: str
    timestamp: datetime = Field(default_factory=_utcnow)
    demo: bool = False

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class EnrichRequest(BaseModel):
    """Body of ``POST /api/enrich``. The URL is validated by the pipeline, not here."""

    url: Any = None


class EnrichErrorResponse(BaseModel):
    error: str
    fallback: bool = False
