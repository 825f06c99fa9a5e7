# vocalkart/domain/repositories/alternative_repo.py

from __future__ import annotations
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase
from vocalkart.domain.models.alternative import AlternativeLink


class AlternativeRepo:
    """
    Alternative links backed by the 'alternatives' collection.
    No uniqueness on (original, indian): repeated suggestions add new rows.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "alternatives"):
        self.col = db[collection_name]

    async def insert(self, link: AlternativeLink) -> AlternativeLink:
        await self.col.insert_one(link.model_dump())
        return link

    async def list_for_product(self, original_product_id: str) -> List[AlternativeLink]:
        cursor = self.col.find(
            {"original_product_id": original_product_id}, {"_id": 0}
        ).sort("match_score", -1)
        return [AlternativeLink.model_validate(doc) async for doc in cursor]

    async def insert_many(self, links: List[AlternativeLink]) -> int:
        if not links:
            return 0
        res = await self.col.insert_many([link.model_dump() for link in links], ordered=False)
        return len(res.inserted_ids)
