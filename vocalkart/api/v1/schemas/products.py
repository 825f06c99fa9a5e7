# vocalkart/api/v1/schemas/products.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IdentifyIn(BaseModel):
    barcode: Optional[str] = None


class SearchIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_query: Optional[str] = Field(None, alias="searchQuery")
    category: Optional[str] = None
    indian_only: bool = Field(False, alias="indianOnly")


class SearchOut(BaseModel):
    products: List[Dict[str, Any]]


class ImportIn(BaseModel):
    # Row shapes are validated per row by the import service
    products: Optional[Any] = None
    alternatives: Optional[Any] = None
