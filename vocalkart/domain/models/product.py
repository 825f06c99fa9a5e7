from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal, Any, Dict
from datetime import datetime, timezone
from uuid import uuid4
import json

Confidence = Literal["low", "medium", "high"]
ProductSource = Literal["OFF", "LLM", "IMPORT"]


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(BaseModel):
    id: str = Field(default_factory=new_id)
    barcode: str
    name: str
    brand: str = "Unknown Brand"
    category: str = "Food"
    country_of_origin: str = "Unknown"
    is_indian: bool = False
    description: Optional[str] = None
    image_url: Optional[str] = None
    price: float = 0
    availability: str = "unknown"
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    where_to_buy: List[str] = []
    source: Optional[ProductSource] = None
    confidence: Optional[Confidence] = None
    verified: Optional[bool] = None
    off_raw: Optional[Dict[str, Any]] = None   # raw OpenFoodFacts payload, only read for scoring
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    model_config = {"frozen": True}  # immutable = safe

    @field_validator("where_to_buy", mode="before")
    @classmethod
    def _channels(cls, v):
        # Older rows carry the channel list as a JSON-encoded string
        if v is None:
            return []
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError:
                return [p.strip() for p in s.split(",") if p.strip()]
            return parsed if isinstance(parsed, list) else [str(parsed)]
        return v

    @property
    def nutriments(self) -> Dict[str, Any]:
        raw = self.off_raw if isinstance(self.off_raw, dict) else {}
        n = raw.get("nutriments")
        return n if isinstance(n, dict) else {}


class ScoredCandidate(BaseModel):
    """A domestic product with its nutrition distance to the source product."""
    product: Product
    distance: float
    model_config = {"frozen": True}
