# vocalkart/domain/repositories/product_repo.py

from __future__ import annotations
from typing import Optional, List
import re
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument, UpdateOne
from vocalkart.domain.models.product import Product, utcnow


def _contains(term: str) -> dict:
    """Case-insensitive substring match (SQL ILIKE '%term%')."""
    return {"$regex": re.escape(term), "$options": "i"}


class ProductRepo:
    """
    Product repository backed by the 'products' collection.
    Documents carry their own string `id`; Mongo's `_id` is never exposed.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        doc = await self.col.find_one({"id": product_id}, {"_id": 0})
        return Product.model_validate(doc) if doc else None

    async def find_domestic_by_category(self, term: str, limit: int) -> List[Product]:
        """Indian products whose category contains `term`, in natural order, at most `limit`."""
        cursor = self.col.find(
            {"is_indian": True, "category": _contains(term)},
            {"_id": 0},
        ).limit(limit)
        return [Product.model_validate(doc) async for doc in cursor]

    async def get_by_name_brand(self, name: str, brand: str) -> Optional[Product]:
        doc = await self.col.find_one({"name": name, "brand": brand}, {"_id": 0})
        return Product.model_validate(doc) if doc else None

    async def search_by_name(
        self,
        query: str,
        *,
        category: Optional[str] = None,
        indian_only: bool = False,
        limit: int = 10,
    ) -> List[Product]:
        filt: dict = {"name": _contains(query)}
        if category:
            filt["category"] = _contains(category)
        if indian_only:
            filt["is_indian"] = True
        cursor = self.col.find(filt, {"_id": 0}).limit(limit)
        return [Product.model_validate(doc) async for doc in cursor]

    # Efficient batch fetch for hydrating alternative links
    async def get_many_by_ids(self, ids: List[str]) -> List[Product]:
        cursor = self.col.find({"id": {"$in": ids}}, {"_id": 0})
        return [Product.model_validate(doc) async for doc in cursor]

    # ----- Writes -----------------------------------------------------------

    async def insert(self, product: Product) -> Product:
        await self.col.insert_one(product.model_dump())
        return product

    async def upsert_by_barcode(self, product: Product) -> Product:
        """
        Insert or update on the barcode natural key.
        An existing row keeps its `id` and `created_at`.
        """
        doc = product.model_dump()
        immutable = {"id": doc.pop("id"), "created_at": doc.pop("created_at")}
        doc["updated_at"] = utcnow()
        saved = await self.col.find_one_and_update(
            {"barcode": product.barcode},
            {"$set": doc, "$setOnInsert": immutable},
            upsert=True,
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )
        return Product.model_validate(saved)

    async def update_price(self, product_id: str, price: float) -> Optional[Product]:
        saved = await self.col.find_one_and_update(
            {"id": product_id},
            {"$set": {"price": price, "updated_at": utcnow()}},
            projection={"_id": 0},
            return_document=ReturnDocument.AFTER,
        )
        return Product.model_validate(saved) if saved else None

    async def bulk_upsert_by_barcode(self, products: List[Product], batch_size: int = 1000) -> dict:
        """Batched `UpdateOne(upsert=True)` on barcode; returns upserted/modified counts."""
        upserted = modified = 0
        ops: List[UpdateOne] = []
        for product in products:
            doc = product.model_dump()
            immutable = {"id": doc.pop("id"), "created_at": doc.pop("created_at")}
            doc["updated_at"] = utcnow()
            ops.append(UpdateOne({"barcode": product.barcode}, {"$set": doc, "$setOnInsert": immutable}, upsert=True))
            if len(ops) >= batch_size:
                res = await self.col.bulk_write(ops, ordered=False)
                upserted += res.upserted_count or 0
                modified += res.modified_count or 0
                ops.clear()
        if ops:
            res = await self.col.bulk_write(ops, ordered=False)
            upserted += res.upserted_count or 0
            modified += res.modified_count or 0
        return {"upserted_count": upserted, "modified_count": modified}
