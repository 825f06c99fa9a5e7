# vocalkart/domain/repositories/base.py
"""
Capabilities the services need from the datastore.

`ProductRepo` / `AlternativeRepo` implement these over MongoDB; tests plug in
in-memory versions with the same method names.
"""
from __future__ import annotations
from typing import List, Optional, Protocol

from vocalkart.domain.models.product import Product
from vocalkart.domain.models.alternative import AlternativeLink


class ProductStore(Protocol):
    async def get_by_id(self, product_id: str) -> Optional[Product]: ...

    async def find_domestic_by_category(self, term: str, limit: int) -> List[Product]: ...

    async def get_by_name_brand(self, name: str, brand: str) -> Optional[Product]: ...

    async def search_by_name(
        self, query: str, *, category: Optional[str] = None, indian_only: bool = False, limit: int = 10
    ) -> List[Product]: ...

    async def get_many_by_ids(self, ids: List[str]) -> List[Product]: ...

    async def insert(self, product: Product) -> Product: ...

    async def upsert_by_barcode(self, product: Product) -> Product: ...

    async def update_price(self, product_id: str, price: float) -> Optional[Product]: ...

    async def bulk_upsert_by_barcode(self, products: List[Product], batch_size: int = 1000) -> dict: ...


class AlternativeStore(Protocol):
    async def insert(self, link: AlternativeLink) -> AlternativeLink: ...

    async def list_for_product(self, original_product_id: str) -> List[AlternativeLink]: ...

    async def insert_many(self, links: List[AlternativeLink]) -> int: ...
