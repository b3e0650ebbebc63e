"""Deterministic, network-free extraction used when live extraction is unavailable."""

from __future__ import annotations

from app.models.enrichment import ExtractionResult
from app.services.enrichment.sanitizer import domain_of

DEMO_PROVIDER = "demo"
DEMO_SOURCE_FALLBACK = "https://example.com"


def build_demo_extraction(url: str) -> ExtractionResult:
    """Fixed-shape result that depends only on the domain of ``url``."""
    domain = domain_of(url or DEMO_SOURCE_FALLBACK) or "example.com"
    return ExtractionResult(
        summary=(
            f"{domain} is a technology platform focused on innovation and growth. "
            "The company provides solutions for modern digital challenges."
        ),
        what_they_do=[
            "Develops cutting-edge technology solutions",
            "Serves a global customer base",
            "Focuses on scalability and performance",
            "Provides developer-friendly tools and APIs",
        ],
        keywords=["Technology", "Innovation", "Platform", "Digital", "Solutions", "Growth", "Development", "API"],
        signals=["Active website", "Professional design", "Content available", "Established presence"],
    )
