"""Error taxonomy shared by the enrichment pipeline stages."""

from __future__ import annotations


class EnrichmentError(RuntimeError):
    """Base exception raised by the enrichment pipeline."""

    def __init__(self, message: str, code: str = "ENRICHMENT_ERROR") -> None:
        super().__init__(message)
        self.code = code


class InvalidInput(EnrichmentError):
    """Raised when the submitted URL is empty or not an http(s) URL."""

    def __init__(self, message: str = "Invalid URL format") -> None:
        super().__init__(message, code="400_INVALID_INPUT")


class TransportError(EnrichmentError):
    """Raised when the page could not be reached (network failure or timeout)."""

    def __init__(self, message: str = "fetch failed: transport error") -> None:
        super().__init__(message, code="504_FETCH_TRANSPORT")


class NotFound(EnrichmentError):
    """Raised when the website answers 404."""

    def __init__(self, message: str = "Website not found (404). Unable to access content.") -> None:
        super().__init__(message, code="404_NOT_FOUND")


class AccessDenied(EnrichmentError):
    """Raised when the website answers 403."""

    def __init__(self, message: str = "Access denied. Website may block automated requests.") -> None:
        super().__init__(message, code="403_ACCESS_DENIED")


class FetchFailed(EnrichmentError):
    """Raised for any other non-2xx response."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Failed to fetch website: {status_code}",
            code=f"{status_code}_FETCH_FAILED",
        )
        self.status_code = status_code


class InsufficientContent(EnrichmentError):
    """Raised when the reduced page text is too short to be worth a model call."""

    def __init__(self, length: int) -> None:
        super().__init__(
            "Limited extractable content detected. Website may be JavaScript-heavy or empty.",
            code="422_INSUFFICIENT_CONTENT",
        )
        self.length = length


class ExtractionParseError(EnrichmentError):
    """Raised when no JSON object can be recovered from provider output."""

    def __init__(self, message: str = "No valid JSON found") -> None:
        super().__init__(message, code="502_EXTRACTION_PARSE")


class ProviderQuotaExceeded(EnrichmentError):
    """Raised when a provider rejects the call for quota or rate-limit reasons."""

    def __init__(self, provider: str, message: str | None = None) -> None:
        super().__init__(message or f"{provider} quota exceeded", code="429_PROVIDER_QUOTA")
        self.provider = provider


class UnknownProviderError(EnrichmentError):
    """Raised for any other provider failure."""

    def __init__(self, provider: str, message: str | None = None) -> None:
        super().__init__(message or f"{provider} request failed", code="502_PROVIDER_ERROR")
        self.provider = provider


QUOTA_MARKERS = ("quota", "429", "rate limit", "rate_limit", "resource_exhausted")


def is_quota_message(message: str | None) -> bool:
    """Best-effort quota/rate-limit detection for providers that only expose text.

    Prefer a typed status (HTTP 429) where the client surfaces one; this match is
    the fallback and can misfire on messages that merely mention a quota.
    """
    lowered = (message or "").lower()
    return any(marker in lowered for marker in QUOTA_MARKERS)
