"""Input hygiene applied before any network or model call."""

from __future__ import annotations

import re
from typing import Any, Final
from urllib.parse import urlparse

from app.services.enrichment.errors import InvalidInput

MAX_INPUT_LENGTH: Final[int] = 10_000
FILTERED_MARKER: Final[str] = "[filtered]"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_INJECTION_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"disregard\s+all\s+prior", re.IGNORECASE),
    re.compile(r"forget\s+everything", re.IGNORECASE),
    re.compile(r"new\s+instructions:", re.IGNORECASE),
    re.compile(r"system\s+prompt:", re.IGNORECASE),
)
_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_OPEN_TAG = re.compile(r"<[a-z][^>]*>", re.IGNORECASE)
_HANDLER_ATTR = re.compile(r"""\s+on[a-z]+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]*)""", re.IGNORECASE)
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_ALLOWED_SCHEMES = {"http", "https"}


def sanitize_user_input(raw: Any) -> str:
    """Strip control characters, bound the length, and trim.

    Non-string or empty input yields ``""``; this function never raises.
    """
    if not raw or not isinstance(raw, str):
        return ""
    cleaned = _CONTROL_CHARS.sub("", raw)
    if len(cleaned) > MAX_INPUT_LENGTH:
        cleaned = cleaned[:MAX_INPUT_LENGTH]
    return cleaned.strip()


def sanitize_prompt_input(raw: Any) -> str:
    """Sanitize text bound for a model prompt and neutralize injection phrasing."""
    cleaned = sanitize_user_input(raw)
    for pattern in _INJECTION_PATTERNS:
        cleaned = pattern.sub(FILTERED_MARKER, cleaned)
    return cleaned


def require_url(raw: Any) -> str:
    """Return a sanitized http(s) URL or raise ``InvalidInput``."""
    candidate = sanitize_user_input(raw)
    if not candidate:
        raise InvalidInput("Invalid URL format: empty URL")
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise InvalidInput(f"Invalid URL format: {exc}") from exc
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidInput("Invalid URL format: expected an http(s) URL")
    if any(char.isspace() for char in candidate):
        raise InvalidInput("Invalid URL format: URL contains whitespace")
    return candidate


def domain_of(url: str) -> str:
    """Host portion of ``url`` without a leading ``www.``; raises ``InvalidInput`` if unparseable."""
    try:
        host = urlparse(url).netloc or url.split("/")[0]
    except ValueError as exc:
        raise InvalidInput(f"Invalid URL format: {exc}") from exc
    host = host.rsplit("@", 1)[-1].split(":", 1)[0].lower()
    return host[4:] if host.startswith("www.") else host


def strip_active_content(html: Any) -> str:
    """Remove scripts, styles, inline event handlers, and ``javascript:`` URLs."""
    if not html or not isinstance(html, str):
        return ""
    clean = _SCRIPT_BLOCK.sub("", html)
    clean = _STYLE_BLOCK.sub("", clean)
    # Event handlers only count as attributes inside an opening tag.
    clean = _OPEN_TAG.sub(lambda match: _HANDLER_ATTR.sub("", match.group(0)), clean)
    return _JS_PROTOCOL.sub("", clean)
