"""API endpoint for website enrichment."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_enrichment_pipeline
from app.models.enrichment import EnrichErrorResponse, EnrichmentEnvelope, EnrichRequest
from app.services.enrichment.errors import EnrichmentError, InvalidInput
from app.services.enrichment.pipeline import EnrichmentPipeline

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/enrich",
    response_model=EnrichmentEnvelope,
    responses={400: {"model": EnrichErrorResponse}, 500: {"model": EnrichErrorResponse}},
)
def enrich(
    payload: EnrichRequest,
    pipeline: EnrichmentPipeline = Depends(get_enrichment_pipeline),
) -> EnrichmentEnvelope | JSONResponse:
    """Fetch a company website and extract structured intelligence."""
    try:
        return pipeline.enrich(payload.url)
    except InvalidInput as exc:
        logger.warning("enrich.invalid_input", extra={"code": exc.code})
        return _error_response(str(exc), status_code=_map_error_code(exc.code), fallback=False)
    except EnrichmentError as exc:
        logger.error("enrich.api_error", extra={"code": exc.code})
        return _error_response(str(exc), status_code=_map_error_code(exc.code), fallback=True)


def _error_response(message: str, *, status_code: int, fallback: bool) -> JSONResponse:
    body = EnrichErrorResponse(error=message or "Enrichment failed. Please try again.", fallback=fallback)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _map_error_code(code: str) -> int:
    if code == "400_INVALID_INPUT":
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR
