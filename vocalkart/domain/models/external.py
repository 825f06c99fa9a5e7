from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any, Dict


class OffProduct(BaseModel):
    """
    Raw OpenFoodFacts product record (only the fields we read).
    Unknown keys are kept so the whole payload can be stored as `off_raw`.
    """
    code: Optional[str] = None
    product_name: Optional[str] = None
    generic_name: Optional[str] = None
    brands: Optional[str] = None
    categories: Optional[str] = None
    countries: Optional[str] = None
    countries_tags: List[str] = []
    quantity: Optional[str] = None
    image_url: Optional[str] = None
    image_front_url: Optional[str] = None
    ingredients_text: Optional[str] = None
    nutriments: Dict[str, Any] = {}

    model_config = {"extra": "allow"}

    @field_validator("countries_tags", mode="before")
    @classmethod
    def _tags(cls, v):
        if not isinstance(v, list):
            return []
        return [str(t) for t in v if t is not None]

    @field_validator("nutriments", mode="before")
    @classmethod
    def _nutriments(cls, v):
        return v if isinstance(v, dict) else {}

    @field_validator("code", mode="before")
    @classmethod
    def _code(cls, v):
        return str(v) if v is not None else None

    @property
    def first_category(self) -> Optional[str]:
        if not self.categories:
            return None
        return self.categories.split(",")[0].strip() or None


class AiProductRecord(BaseModel):
    """
    Product description returned by the LLM validator / retriever.
    `is_indian` comes back as "true" | "false" | "unknown" (or a real bool).
    """
    barcode: Optional[str] = None
    name: Optional[str] = None
    brand: Optional[str] = None
    categories: Optional[str] = None
    countries: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_indian: Optional[bool] = None
    reason: Optional[str] = None
    confidence: str = "medium"
    source_urls: List[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("barcode", "name", "brand", "categories", "countries", "description", "image_url", "reason", mode="before")
    @classmethod
    def _text(cls, v):
        if v is None:
            return None
        s = str(v).strip()
        return s or None

    @field_validator("is_indian", mode="before")
    @classmethod
    def _is_indian(cls, v):
        if isinstance(v, bool):
            return v
        s = str(v).strip().lower() if v is not None else ""
        if s == "true":
            return True
        if s == "false":
            return False
        return None

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v):
        s = str(v).strip().lower() if v is not None else ""
        return s if s in ("low", "medium", "high") else "medium"

    @field_validator("source_urls", mode="before")
    @classmethod
    def _urls(cls, v):
        if not isinstance(v, list):
            return []
        return [str(u) for u in v if u]
