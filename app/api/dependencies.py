"""Request-scoped accessors for collaborators owned by the application instance."""

from __future__ import annotations

from fastapi import Request

from app.services.enrichment.pipeline import EnrichmentPipeline, build_pipeline


def get_enrichment_pipeline(request: Request) -> EnrichmentPipeline:
    """Return the pipeline built at startup, building it on first use when lifespan did not run."""
    pipeline = getattr(request.app.state, "enrichment_pipeline", None)
    if pipeline is None:
        pipeline = build_pipeline()
        request.app.state.enrichment_pipeline = pipeline
    return pipeline
