from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.config import is_live_credential, settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check() -> JSONResponse:
    """Health check including provider configuration."""
    checks = {
        "openai": _provider_check(settings.openai_api_key, "demo mode active"),
        "gemini": _provider_check(settings.gemini_api_key, "quota fallback unavailable"),
    }
    healthy = all(check["status"] == "ok" for check in checks.values())
    if not healthy:
        logger.warning("health.degraded", extra={"checks": {name: check["status"] for name, check in checks.items()}})
    body = {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks,
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)


def _provider_check(api_key: str | None, degraded_note: str) -> dict[str, str]:
    if is_live_credential(api_key):
        return {"status": "ok", "message": "API key configured"}
    return {"status": "degraded", "message": f"API key missing - {degraded_note}"}
