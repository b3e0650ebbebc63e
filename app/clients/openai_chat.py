"""Primary extraction provider backed by OpenAI chat completions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from openai import APIStatusError, OpenAI, OpenAIError, RateLimitError

from app.services.enrichment.errors import (
    ProviderQuotaExceeded,
    UnknownProviderError,
    is_quota_message,
)

PROVIDER_NAME = "openai"


@dataclass(frozen=True)
class Completion:
    """Raw provider text plus token usage when the provider reports it."""

    text: str
    total_tokens: int | None = None


class OpenAIChatClient:
    """Thin wrapper around the official OpenAI chat completions API."""

    name = PROVIDER_NAME

    def __init__(self, api_key: str, *, model: str = "gpt-4o-mini", client: Any | None = None) -> None:
        if not api_key:
            raise ValueError("OPENAI_API_KEY is required for live extraction.")
        self._model = model
        self._client = client or OpenAI(api_key=api_key)

    @property
    def model(self) -> str:
        return self._model

    def complete(self, *, system_prompt: str, user_prompt: str, temperature: float) -> Completion:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except RateLimitError as exc:
            raise ProviderQuotaExceeded(PROVIDER_NAME, f"OpenAI quota exceeded: {exc}") from exc
        except APIStatusError as exc:
            if exc.status_code == 429 or is_quota_message(str(exc)):
                raise ProviderQuotaExceeded(PROVIDER_NAME, f"OpenAI quota exceeded: {exc}") from exc
            raise UnknownProviderError(PROVIDER_NAME, f"OpenAI request failed: {exc}") from exc
        except OpenAIError as exc:
            if is_quota_message(str(exc)):
                raise ProviderQuotaExceeded(PROVIDER_NAME, f"OpenAI quota exceeded: {exc}") from exc
            raise UnknownProviderError(PROVIDER_NAME, f"OpenAI request failed: {exc}") from exc

        text = _extract_message_text(response)
        if not text:
            raise UnknownProviderError(PROVIDER_NAME, "Empty response from AI")
        usage = getattr(response, "usage", None)
        return Completion(text=text, total_tokens=getattr(usage, "total_tokens", None))


def _extract_message_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    content = getattr(choices[0].message, "content", "")
    if isinstance(content, list):
        return "".join(part.get("text", "") for part in content if isinstance(part, dict)).strip()
    if isinstance(content, str):
        return content.strip()
    return ""
