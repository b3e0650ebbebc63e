"""API endpoints for thesis scoring."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from app.models.company import CompanyProfile, ScoringResult
from app.models.enrichment import ExtractionResult
from app.services.scoring.engine import score_company
from app.services.scoring.insight import generate_insight
from app.services.scoring.thesis import THESIS

router = APIRouter()


class ScoreCompanyRequest(BaseModel):
    """Company profile plus the stored extraction, if enrichment has run."""

    company: CompanyProfile
    extraction: ExtractionResult | None = None


class ScoreCompanyResponse(BaseModel):
    result: ScoringResult
    insight: str


@router.post("/scores", response_model=ScoreCompanyResponse)
async def create_score(payload: ScoreCompanyRequest) -> ScoreCompanyResponse:
    """Score a company against the fund thesis. Nothing is cached or stored."""
    result = score_company(payload.company, payload.extraction)
    signals = payload.extraction.signals if payload.extraction else []
    return ScoreCompanyResponse(result=result, insight=generate_insight(signals))


@router.get("/thesis")
async def get_thesis() -> dict[str, object]:
    """Describe the thesis the scores are computed against."""
    return {
        "name": THESIS.name,
        "focus": [{"title": area.title, "description": area.description} for area in THESIS.focus],
        "weights": {key: f"{round(value * 100)}%" for key, value in THESIS.weights.as_dict().items()},
    }
