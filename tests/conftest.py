"""
Shared test fixtures: in-memory stores and a scripted LLM gateway.
"""

from typing import Any, Dict, List, Optional

import pytest

from vocalkart.core.config import Settings
from vocalkart.core.errors import GenerationServiceError
from vocalkart.domain.models.alternative import AlternativeLink
from vocalkart.domain.models.product import Product


# ===================
# IN-MEMORY STORES
# ===================

class FakeProductRepo:
    """Dict-backed ProductStore. Names in `fail_insert_names` raise on insert."""

    def __init__(self, products: Optional[List[Product]] = None):
        self.rows: Dict[str, Product] = {p.id: p for p in (products or [])}
        self.inserted: List[Product] = []
        self.fail_insert_names: set = set()
        self.fail_category_lookup = False

    async def get_by_id(self, product_id):
        return self.rows.get(product_id)

    async def find_domestic_by_category(self, term, limit):
        if self.fail_category_lookup:
            raise RuntimeError("datastore down")
        term = term.lower()
        hits = [p for p in self.rows.values() if p.is_indian and term in p.category.lower()]
        return hits[:limit]

    async def get_by_name_brand(self, name, brand):
        for p in self.rows.values():
            if p.name == name and p.brand == brand:
                return p
        return None

    async def search_by_name(self, query, *, category=None, indian_only=False, limit=10):
        out = []
        for p in self.rows.values():
            if query.lower() not in p.name.lower():
                continue
            if category and category.lower() not in p.category.lower():
                continue
            if indian_only and not p.is_indian:
                continue
            out.append(p)
        return out[:limit]

    async def get_many_by_ids(self, ids):
        return [self.rows[i] for i in ids if i in self.rows]

    async def insert(self, product):
        if product.name in self.fail_insert_names:
            raise RuntimeError(f"insert failed for {product.name}")
        self.rows[product.id] = product
        self.inserted.append(product)
        return product

    async def upsert_by_barcode(self, product):
        for existing in self.rows.values():
            if existing.barcode == product.barcode:
                merged = product.model_copy(update={"id": existing.id, "created_at": existing.created_at})
                self.rows[existing.id] = merged
                return merged
        self.rows[product.id] = product
        return product

    async def update_price(self, product_id, price):
        p = self.rows.get(product_id)
        if not p:
            return None
        updated = p.model_copy(update={"price": price})
        self.rows[product_id] = updated
        return updated

    async def bulk_upsert_by_barcode(self, products, batch_size=1000):
        upserted = modified = 0
        for product in products:
            known = any(p.barcode == product.barcode for p in self.rows.values())
            await self.upsert_by_barcode(product)
            if known:
                modified += 1
            else:
                upserted += 1
        return {"upserted_count": upserted, "modified_count": modified}


class FakeAlternativeRepo:
    def __init__(self):
        self.links: List[AlternativeLink] = []

    async def insert(self, link):
        self.links.append(link)
        return link

    async def list_for_product(self, original_product_id):
        hits = [l for l in self.links if l.original_product_id == original_product_id]
        return sorted(hits, key=lambda l: -l.match_score)

    async def insert_many(self, links):
        self.links.extend(links)
        return len(links)


# ===================
# SCRIPTED LLM
# ===================

class FakeLLM:
    """
    Stands in for LLMGateway. `replies` are returned by complete() in order;
    an Exception instance in the list is raised instead.
    """

    def __init__(self, replies: Optional[List[Any]] = None, tool_args: Optional[dict] = None, configured: bool = True):
        self.replies = list(replies or [])
        self.tool_args = tool_args
        self.configured = configured
        self.prompts: List[str] = []
        self.tool_calls: List[list] = []

    async def complete(self, prompt, *, system=None):
        self.prompts.append(prompt)
        if not self.replies:
            raise GenerationServiceError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def call_tool(self, messages, tool):
        self.tool_calls.append(messages)
        if isinstance(self.tool_args, Exception):
            raise self.tool_args
        return self.tool_args


def make_product(**overrides) -> Product:
    data = {"barcode": overrides.pop("barcode", f"B-{overrides.get('name', 'x')}"), "name": "Product"}
    data.update(overrides)
    return Product(**data)


# ===================
# FIXTURES
# ===================

@pytest.fixture
def settings() -> Settings:
    return Settings(LLM_API_KEY="", MONGO_URI="", REDIS_URL="")


@pytest.fixture
def product_factory():
    return make_product


@pytest.fixture
def alternative_repo() -> FakeAlternativeRepo:
    return FakeAlternativeRepo()


@pytest.fixture
def product_repo_factory():
    return FakeProductRepo


@pytest.fixture
def llm_factory():
    return FakeLLM
