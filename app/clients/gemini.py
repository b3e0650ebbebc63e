"""Secondary extraction provider backed by the Gemini generateContent REST API."""

from __future__ import annotations

from typing import Any

import httpx

from app.clients.openai_chat import Completion
from app.services.enrichment.errors import (
    ProviderQuotaExceeded,
    UnknownProviderError,
    is_quota_message,
)

PROVIDER_NAME = "gemini"


class GeminiClient:
    """Minimal Gemini API client."""

    name = PROVIDER_NAME

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required to create a GeminiClient.")
        self._api_key = api_key
        self._model = model
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    @property
    def model(self) -> str:
        return self._model

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._owns_http_client:
            self._http.close()

    def complete(self, *, system_prompt: str, user_prompt: str, temperature: float) -> Completion:
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {"temperature": temperature},
        }
        headers = {"x-goog-api-key": self._api_key}

        try:
            response = self._http.post(f"/models/{self._model}:generateContent", json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise UnknownProviderError(PROVIDER_NAME, "Gemini request timed out") from exc
        except httpx.HTTPError as exc:
            raise UnknownProviderError(PROVIDER_NAME, f"HTTP error calling Gemini: {exc}") from exc

        if response.status_code >= 400:
            detail = _error_detail(response)
            message = f"Gemini request failed: {response.status_code} - {detail}"
            if response.status_code == 429 or is_quota_message(detail):
                raise ProviderQuotaExceeded(PROVIDER_NAME, message)
            raise UnknownProviderError(PROVIDER_NAME, message)

        try:
            data = response.json()
        except ValueError as exc:
            raise UnknownProviderError(PROVIDER_NAME, "Failed to decode Gemini response JSON.") from exc

        text = _candidate_text(data)
        if not text:
            raise UnknownProviderError(PROVIDER_NAME, "Gemini response did not include text output.")
        usage = data.get("usageMetadata") if isinstance(data, dict) else None
        total_tokens = usage.get("totalTokenCount") if isinstance(usage, dict) else None
        return Completion(text=text, total_tokens=total_tokens)

    def __enter__(self) -> GeminiClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _candidate_text(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict)).strip()


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error.get("status") or "")[:200]
    return response.text[:200]
