"""Domain models for thesis scoring."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, conint, field_validator

from app.services.enrichment.errors import InvalidInput
from app.services.enrichment.sanitizer import require_url


class CompanyProfile(BaseModel):
    """Company record owned by the caller; read-only to scoring."""

    id: str
    name: str
    sector: str
    stage: str = Field(description="Funding stage, e.g. Seed or Series A.")
    location: str
    website: str

    @field_validator("website")
    @classmethod
    def _validate_website(cls, value: str) -> str:
        try:
            return require_url(value)
        except InvalidInput as exc:
            raise ValueError(str(exc)) from exc


class Confidence(str, Enum):
    """Reliability label driven by how many signals were available."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ScoreBreakdown(BaseModel):
    """Weighted contribution of each thesis criterion."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    market_alignment: int = Field(alias="marketAlignment")
    stage_alignment: int = Field(alias="stageAlignment")
    geography: int
    traction_signals: int = Field(alias="tractionSignals")

    def total(self) -> int:
        return self.market_alignment + self.stage_alignment + self.geography + self.traction_signals


class ScoringResult(BaseModel):
    """Explainable fit score against the fund thesis."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    score: conint(ge=0, le=100)  # type: ignore[valid-type]
    breakdown: ScoreBreakdown
    reasons: list[str] = Field(default_factory=list)
    confidence: Confidence
