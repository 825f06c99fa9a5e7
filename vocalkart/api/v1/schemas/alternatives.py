# vocalkart/api/v1/schemas/alternatives.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SuggestIn(BaseModel):
    # Fields stay optional so a missing one surfaces as a 400 `{"error": ...}`
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(None, alias="productId")
    product_name: Optional[str] = Field(None, alias="productName")
    product_category: Optional[str] = Field(None, alias="productCategory")


class SuggestOut(BaseModel):
    alternatives: List[Dict[str, Any]]


class AlternativeListOut(BaseModel):
    product_id: str
    alternatives: List[Dict[str, Any]]
    count: int
