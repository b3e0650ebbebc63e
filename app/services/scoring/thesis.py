"""Fund thesis: criterion weights, alignment tiers, and traction keyword families."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping


class AlignmentLevel(str, Enum):
    STRONG = "strong"
    PARTIAL = "partial"
    WEAK = "weak"


@dataclass(frozen=True)
class Alignment:
    level: AlignmentLevel
    score: int
    label: str

    @property
    def is_match(self) -> bool:
        return self.level is not AlignmentLevel.WEAK


@dataclass(frozen=True)
class ThesisWeights:
    """Per-criterion weights; the four values sum to 1.0."""

    market_alignment: float
    stage_alignment: float
    geography: float
    traction_signals: float

    def total(self) -> float:
        return self.market_alignment + self.stage_alignment + self.geography + self.traction_signals

    def as_dict(self) -> dict[str, float]:
        return {
            "marketAlignment": self.market_alignment,
            "stageAlignment": self.stage_alignment,
            "geography": self.geography,
            "tractionSignals": self.traction_signals,
        }


@dataclass(frozen=True)
class KeywordFamily:
    """Case-insensitive keyword group that contributes traction points."""

    name: str
    keywords: tuple[str, ...]
    points: int
    reason: str

    def matches(self, signals: list[str]) -> bool:
        return any(keyword in signal.lower() for signal in signals for keyword in self.keywords)


@dataclass(frozen=True)
class FocusArea:
    title: str
    description: str


@dataclass(frozen=True)
class ThesisConfig:
    """Immutable thesis definition shared by every scoring call."""

    name: str
    weights: ThesisWeights
    market: Mapping[str, Alignment]
    market_default: Alignment
    stage: Mapping[str, Alignment]
    stage_default: Alignment
    geography: Mapping[str, Alignment]
    geography_default: Alignment
    focus: tuple[FocusArea, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if abs(self.weights.total() - 1.0) > 1e-9:
            raise ValueError(f"Thesis weights must sum to 1.0, got {self.weights.total():.4f}")

    def market_alignment(self, sector: str) -> Alignment:
        return self.market.get(_normalize(sector), self.market_default)

    def stage_alignment(self, stage: str) -> Alignment:
        return self.stage.get(_normalize(stage), self.stage_default)

    def geography_alignment(self, location: str) -> Alignment:
        return self.geography.get(_normalize(location), self.geography_default)


def _normalize(value: str | None) -> str:
    return " ".join((value or "").split()).casefold()


def _table(entries: dict[str, Alignment]) -> Mapping[str, Alignment]:
    return MappingProxyType({_normalize(key): value for key, value in entries.items()})


HIRING: Final = KeywordFamily("hiring", ("hiring", "careers"), 40, "Actively hiring")
CONTENT: Final = KeywordFamily("content", ("blog", "content"), 30, "Active content")
PRODUCT: Final = KeywordFamily("product", ("product", "changelog"), 30, "Product updates")
TRACTION_FAMILIES: Final[tuple[KeywordFamily, ...]] = (HIRING, CONTENT, PRODUCT)

BASE_WEIGHTS: Final = ThesisWeights(
    market_alignment=0.30,
    stage_alignment=0.20,
    geography=0.20,
    traction_signals=0.30,
)

THESIS: Final = ThesisConfig(
    name="Early Stage India Fund",
    weights=BASE_WEIGHTS,
    market=_table(
        {
            "ClimateTech": Alignment(AlignmentLevel.STRONG, 100, "ClimateTech focus"),
            "DeepTech": Alignment(AlignmentLevel.STRONG, 90, "DeepTech sector"),
            "FinTech": Alignment(AlignmentLevel.PARTIAL, 60, "Adjacent sector"),
            "HealthTech": Alignment(AlignmentLevel.PARTIAL, 60, "Adjacent sector"),
        }
    ),
    market_default=Alignment(AlignmentLevel.WEAK, 30, "Non-core sector"),
    stage=_table(
        {
            "Pre-Seed": Alignment(AlignmentLevel.STRONG, 100, "Pre-Seed stage"),
            "Seed": Alignment(AlignmentLevel.STRONG, 100, "Seed stage"),
            "Series A": Alignment(AlignmentLevel.PARTIAL, 40, "Series A"),
        }
    ),
    stage_default=Alignment(AlignmentLevel.WEAK, 20, "Later stage"),
    geography=_table(
        {
            "India": Alignment(AlignmentLevel.STRONG, 100, "India-based"),
            "Southeast Asia": Alignment(AlignmentLevel.PARTIAL, 60, "Southeast Asia"),
        }
    ),
    geography_default=Alignment(AlignmentLevel.WEAK, 30, "Other location"),
    focus=(
        FocusArea("India-First Startups", "Companies building for and from India"),
        FocusArea("ClimateTech & DeepTech", "Technology-driven solutions for climate and infrastructure"),
        FocusArea("Pre-Seed / Seed Stage", "Early-stage companies with strong founding teams"),
        FocusArea("Technical Founders", "Teams with deep technical expertise and domain knowledge"),
    ),
)
