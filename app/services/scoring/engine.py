"""Deterministic thesis scoring with confidence-dependent weight redistribution."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from app.models.company import CompanyProfile, Confidence, ScoreBreakdown, ScoringResult
from app.models.enrichment import ExtractionResult
from app.services.scoring.thesis import THESIS, TRACTION_FAMILIES, ThesisConfig, ThesisWeights

LOW_CONFIDENCE_TRACTION_FACTOR = 0.9


def confidence_for(signal_count: int) -> Confidence:
    if signal_count >= 4:
        return Confidence.HIGH
    if signal_count >= 2:
        return Confidence.MEDIUM
    return Confidence.LOW


def effective_weights(
    confidence: Confidence,
    signal_count: int,
    base: ThesisWeights | None = None,
) -> ThesisWeights:
    """Weights for one scoring call.

    Low confidence with at least one signal trims traction by 10% of its base
    value and spreads the freed mass evenly over the other three criteria.
    """
    base = base or THESIS.weights
    if confidence is not Confidence.LOW or signal_count < 1:
        return base
    traction = base.traction_signals * LOW_CONFIDENCE_TRACTION_FACTOR
    share = (base.traction_signals - traction) / 3
    return ThesisWeights(
        market_alignment=base.market_alignment + share,
        stage_alignment=base.stage_alignment + share,
        geography=base.geography + share,
        traction_signals=traction,
    )


def score_company(
    company: CompanyProfile,
    extraction: ExtractionResult | Mapping[str, Any] | None,
    *,
    thesis: ThesisConfig = THESIS,
) -> ScoringResult:
    """Score ``company`` against ``thesis`` using the extracted signals."""
    if not _has_enrichment(extraction):
        return _empty_result()

    signals = _signals_of(extraction)
    reasons: list[str] = []

    market = thesis.market_alignment(company.sector)
    stage = thesis.stage_alignment(company.stage)
    geography = thesis.geography_alignment(company.location)
    for alignment in (market, stage, geography):
        if alignment.is_match:
            reasons.append(alignment.label)

    traction_score = 0
    for family in TRACTION_FAMILIES:
        if family.matches(signals):
            traction_score += family.points
            reasons.append(family.reason)

    confidence = confidence_for(len(signals))
    weights = effective_weights(confidence, len(signals), thesis.weights)

    weighted = (
        market.score * weights.market_alignment,
        stage.score * weights.stage_alignment,
        geography.score * weights.geography,
        traction_score * weights.traction_signals,
    )
    breakdown = ScoreBreakdown(
        market_alignment=_round_half_up(weighted[0]),
        stage_alignment=_round_half_up(weighted[1]),
        geography=_round_half_up(weighted[2]),
        traction_signals=_round_half_up(weighted[3]),
    )
    return ScoringResult(
        score=max(0, min(100, _round_half_up(sum(weighted)))),
        breakdown=breakdown,
        reasons=reasons,
        confidence=confidence,
    )


def _has_enrichment(extraction: ExtractionResult | Mapping[str, Any] | None) -> bool:
    """False when nothing was extracted yet: no record, or one with every field empty."""
    if extraction is None:
        return False
    if isinstance(extraction, ExtractionResult):
        return True
    return any(extraction.get(key) for key in ("summary", "whatTheyDo", "what_they_do", "keywords", "signals"))


def _signals_of(extraction: ExtractionResult | Mapping[str, Any]) -> list[str]:
    raw = extraction.signals if isinstance(extraction, ExtractionResult) else extraction.get("signals")
    if not isinstance(raw, list):
        return []
    return [signal for signal in raw if isinstance(signal, str)]


def _empty_result() -> ScoringResult:
    return ScoringResult(
        score=0,
        breakdown=ScoreBreakdown(market_alignment=0, stage_alignment=0, geography=0, traction_signals=0),
        reasons=[],
        confidence=Confidence.LOW,
    )


def _round_half_up(value: float) -> int:
    # Nudge before flooring so 0.5 boundaries hit by float error still round up.
    return int(math.floor(value + 0.5 + 1e-9))
