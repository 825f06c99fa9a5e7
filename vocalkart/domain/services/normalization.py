"""
Keyword classifiers that map free-form LLM labels onto the closed vocabularies
stored on alternative links.
"""
from typing import Any, Optional, Sequence, Tuple

from vocalkart.domain.services.constants import (
    QUALITY_RULES,
    PRICE_RULES,
    COMPARISON_DEFAULT,
    CONFIDENCE_VALUES,
    DEFAULT_MATCH_SCORE,
    MIN_MATCH_SCORE,
    MAX_MATCH_SCORE,
)

Rules = Sequence[Tuple[str, Sequence[str]]]


def classify(value: Any, rules: Rules, default: str = COMPARISON_DEFAULT) -> str:
    """Return the label of the first rule with a keyword contained in `value` (case-insensitive)."""
    text = str(value).lower() if value is not None else ""
    for label, keywords in rules:
        if any(k in text for k in keywords):
            return label
    return default


def normalize_quality(value: Any) -> str:
    return classify(value, QUALITY_RULES)


def normalize_price(value: Any) -> str:
    return classify(value, PRICE_RULES)


def normalize_confidence(value: Any, default: str = "medium") -> str:
    s = str(value).strip().lower() if value is not None else ""
    return s if s in CONFIDENCE_VALUES else default


def normalize_match_score(value: Any, default: int = DEFAULT_MATCH_SCORE) -> int:
    """Missing, zero and non-numeric scores fall back to `default`; the rest is clamped to 1..100."""
    if isinstance(value, bool):
        return default
    try:
        score = round(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    if score == 0:
        return default
    return max(MIN_MATCH_SCORE, min(MAX_MATCH_SCORE, score))


def category_term(category: Optional[str]) -> str:
    """First comma-separated segment of a category string, trimmed."""
    raw = category or ""
    return raw.split(",")[0].strip() or raw.strip()
