"""Reduce raw HTML to the visible text worth sending to a model."""

from __future__ import annotations

from typing import Final

from bs4 import BeautifulSoup

from app.services.enrichment.errors import InsufficientContent

NON_CONTENT_TAGS: Final[tuple[str, ...]] = ("script", "style", "noscript", "template")
MIN_CONTENT_CHARS: Final[int] = 100


def reduce_markup(html: str) -> str:
    """Strip scripts and chrome, prefer the main landmark, and collapse whitespace."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(list(NON_CONTENT_TAGS)):
        tag.decompose()

    container = soup.find("main") or soup.find(attrs={"role": "main"}) or soup.body or soup
    text = container.get_text(" ")
    return " ".join(text.split())


def excerpt(text: str, limit: int) -> str:
    """First ``limit`` characters of the reduced text."""
    if limit <= 0:
        raise ValueError("limit must be a positive integer.")
    return text[:limit]


def ensure_sufficient(text: str, *, min_chars: int = MIN_CONTENT_CHARS) -> str:
    """Return ``text`` unchanged or raise ``InsufficientContent`` when it is too short."""
    if len(text) < min_chars:
        raise InsufficientContent(len(text))
    return text
