from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import Optional, List, Literal, Any
from datetime import datetime

from vocalkart.domain.models.product import Confidence, new_id, utcnow
from vocalkart.domain.services.constants import DEFAULT_REASON, DEFAULT_REASON_TAGS, DEFAULT_MATCH_SCORE
from vocalkart.domain.services.normalization import (
    normalize_quality,
    normalize_price,
    normalize_confidence,
    normalize_match_score,
)

QualityComparison = Literal["better", "similar", "good"]
PriceComparison = Literal["cheaper", "similar", "more_expensive"]


class AlternativeLink(BaseModel):
    """Persisted relation: `indian_product_id` is a suggested substitute for `original_product_id`."""
    id: str = Field(default_factory=new_id)
    original_product_id: str
    indian_product_id: str
    match_score: int = Field(ge=1, le=100)
    reason: str
    quality_comparison: QualityComparison
    price_comparison: PriceComparison
    reason_tags: List[str] = []
    confidence: Optional[Confidence] = None
    source_urls: List[str] = []
    created_at: datetime = Field(default_factory=utcnow)

    model_config = {"frozen": True}  # immutable = safe


def _str_list(v: Any) -> Optional[List[str]]:
    if v is None:
        return None
    if isinstance(v, str):
        return [v] if v.strip() else []
    if isinstance(v, (list, tuple)):
        return [str(x) for x in v if x is not None and str(x).strip()]
    return None


class AiAlternative(BaseModel):
    """
    One element of the generator's JSON array, coerced at the boundary.
    `name` is required; everything else is defaulted or normalized:
      - quality/price labels go through the keyword classifiers
      - match_score defaults to 85 (or context["default_match_score"]) and is clamped to 1..100
      - price is dropped when not a positive number
    """
    name: str = Field(..., min_length=1)
    brand: str = "Unknown Brand"
    category: Optional[str] = None
    price: Optional[float] = None
    match_score: int = Field(default=None, validate_default=True)
    reason: str = DEFAULT_REASON
    quality_comparison: QualityComparison = "similar"
    price_comparison: PriceComparison = "similar"
    reason_tags: List[str] = Field(default_factory=lambda: list(DEFAULT_REASON_TAGS))
    confidence: Confidence = "medium"
    source_urls: List[str] = []

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("brand", mode="before")
    @classmethod
    def _brand(cls, v):
        s = str(v).strip() if v is not None else ""
        return s or "Unknown Brand"

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v):
        s = str(v).strip() if v is not None else ""
        return s or None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v):
        if isinstance(v, bool) or v is None:
            return None
        try:
            p = float(v)
        except (TypeError, ValueError):
            return None
        return p if p > 0 else None

    @field_validator("match_score", mode="before")
    @classmethod
    def _score(cls, v, info: ValidationInfo):
        default = (info.context or {}).get("default_match_score", DEFAULT_MATCH_SCORE)
        return normalize_match_score(v, default)

    @field_validator("reason", mode="before")
    @classmethod
    def _reason(cls, v):
        s = str(v).strip() if v is not None else ""
        return s or DEFAULT_REASON

    @field_validator("quality_comparison", mode="before")
    @classmethod
    def _quality(cls, v):
        return normalize_quality(v)

    @field_validator("price_comparison", mode="before")
    @classmethod
    def _price_cmp(cls, v):
        return normalize_price(v)

    @field_validator("reason_tags", mode="before")
    @classmethod
    def _tags(cls, v):
        tags = _str_list(v)
        return tags if tags else list(DEFAULT_REASON_TAGS)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v):
        return normalize_confidence(v)

    @field_validator("source_urls", mode="before")
    @classmethod
    def _urls(cls, v):
        return _str_list(v) or []
