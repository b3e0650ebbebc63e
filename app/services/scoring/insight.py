"""One-sentence narrative derived from traction signals."""

from __future__ import annotations

from collections.abc import Sequence

from app.services.scoring.thesis import CONTENT, HIRING, PRODUCT

GROWTH = "Active hiring and product iteration suggest early growth momentum, with the team scaling while building."
HIRING_ONLY = "Active hiring indicates the company is in growth mode and expanding their team."
EXECUTION = "Regular content and product updates show consistent execution and market engagement."
POSITIONING = "Active content creation suggests strong market positioning and thought leadership."
DEVELOPMENT = "Recent product updates indicate active development and customer feedback integration."
OUTREACH = "Limited public signals detected, so consider direct outreach for deeper intelligence."


def generate_insight(signals: Sequence[str] | None) -> str:
    """First matching rule wins."""
    values = [signal for signal in (signals or []) if isinstance(signal, str)]
    hiring = HIRING.matches(values)
    content = CONTENT.matches(values)
    product = PRODUCT.matches(values)

    if hiring and (content or product):
        return GROWTH
    if hiring:
        return HIRING_ONLY
    if content and product:
        return EXECUTION
    if content:
        return POSITIONING
    if product:
        return DEVELOPMENT
    return OUTREACH
