import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from vocalkart.core.errors import InputError
from vocalkart.domain.models.product import Product
from vocalkart.domain.repositories.base import ProductStore
from vocalkart.domain.services.constants import (
    MAX_QUERY_LEN,
    SEARCH_LIMIT,
    OFF_SEARCH_PAGE_SIZE,
    OFF_SEARCH_MAPPED,
    AI_SEARCH_BARCODE_PREFIX,
)
from vocalkart.domain.services.llm_client import LLMGateway
from vocalkart.domain.services.off_client import OpenFoodFactsClient
from vocalkart.domain.services.pricing_svc import backfill_prices
from vocalkart.domain.services.prompts import SEARCH_SYSTEM_PROMPT, RETURN_PRODUCTS_TOOL, search_prompt
from vocalkart.utils.ids import synthetic_barcode
from vocalkart.utils.llm_json import json_preview

logger = logging.getLogger(__name__)


def _off_is_indian(tags: List[str]) -> bool:
    return any("india" in t or "in:" in t for t in tags)


async def _search_off(
    query: str, indian_only: bool, product_repo: ProductStore, off_client: OpenFoodFactsClient
) -> List[Product]:
    saved: List[Product] = []
    for off in (await off_client.search(query, page_size=OFF_SEARCH_PAGE_SIZE))[:OFF_SEARCH_MAPPED]:
        is_indian = _off_is_indian(off.countries_tags)
        if indian_only and not is_indian:
            continue
        product = Product(
            barcode=off.code or synthetic_barcode("OFF"),
            name=off.product_name or "Unknown Product",
            brand=off.brands or "Unknown Brand",
            category=off.first_category or "Food",
            country_of_origin=(off.countries_tags[0].replace("en:", "") if off.countries_tags else "Unknown"),
            is_indian=is_indian,
            description=off.ingredients_text or off.generic_name or "No description available",
            image_url=off.image_url,
            price=0,
            availability="unknown",
            where_to_buy=["Local Stores", "Online Retailers"],
            rating=0,
            source="OFF",
            off_raw=off.model_dump(),
        )
        try:
            saved.append(await product_repo.upsert_by_barcode(product))
        except Exception as e:
            logger.error(f"Saving OpenFoodFacts result '{product.name}' failed: {e}")
    return saved


def _ai_product(data: Dict[str, Any]) -> Optional[Product]:
    name = str(data.get("name") or "").strip()
    if not name:
        return None
    country = str(data.get("country_of_origin") or "Unknown")
    rating = data.get("rating")
    try:
        return Product(
            barcode=synthetic_barcode(AI_SEARCH_BARCODE_PREFIX),
            name=name,
            brand=str(data.get("brand") or "Unknown Brand"),
            category=str(data.get("category") or "Food"),
            country_of_origin=country,
            is_indian="india" in country.lower(),
            description=data.get("description"),
            price=data.get("price") or 0,
            availability=str(data.get("availability") or "unknown"),
            where_to_buy=data.get("where_to_buy") or [],
            rating=rating if isinstance(rating, (int, float)) and 0 <= rating <= 5 else None,
            source="LLM",
            confidence="low",
            verified=False,
        )
    except ValidationError as e:
        logger.warning(f"Dropping AI search result {json_preview(data, 300)}: {e.error_count()} error(s)")
        return None


async def _search_ai(
    query: str, category: Optional[str], indian_only: bool, product_repo: ProductStore, llm: LLMGateway
) -> List[Product]:
    if not llm.configured:
        return []
    messages = [
        {"role": "system", "content": SEARCH_SYSTEM_PROMPT},
        {"role": "user", "content": search_prompt(query, category, indian_only)},
    ]
    args = await llm.call_tool(messages, RETURN_PRODUCTS_TOOL)
    rows = (args or {}).get("products") or []
    saved: List[Product] = []
    for row in rows:
        if not isinstance(row, dict) or not (product := _ai_product(row)):
            continue
        try:
            saved.append(await product_repo.insert(product))
        except Exception as e:
            logger.error(f"Saving AI search result '{product.name}' failed: {e}")
    return saved


async def search_products(
    *,
    query: Any,
    category: Optional[str] = None,
    indian_only: bool = False,
    product_repo: ProductStore,
    off_client: OpenFoodFactsClient,
    llm: LLMGateway,
) -> List[Product]:
    """
    Product search with three tiers: store → OpenFoodFacts → LLM tool call.
    Whatever tier answers, products without a price get one backfilled.
    Upstream failures degrade to an empty list.
    """
    if not isinstance(query, str) or not query.strip() or len(query) > MAX_QUERY_LEN:
        raise InputError("Invalid search query")
    query = query.strip()
    cat = category if category and category != "all" else None
    t0 = time.perf_counter()
    logger.info(f"Searching products for: '{query}' category={cat} indian_only={indian_only}")

    try:
        found = await product_repo.search_by_name(query, category=cat, indian_only=indian_only, limit=SEARCH_LIMIT)
    except Exception as e:
        logger.error(f"Database search error: {e}")
        found = []
    tier = "db"

    try:
        if not found:
            tier = "off"
            found = await _search_off(query, indian_only, product_repo, off_client)
        if not found:
            tier = "ai"
            found = await _search_ai(query, category, indian_only, product_repo, llm)
        products = await backfill_prices(found, product_repo, llm)
    except Exception as e:
        logger.error(f"Search failed at tier={tier} for '{query}': {e}")
        return []

    logger.info(f"Search '{query}' tier={tier} results={len(products)} elapsed={time.perf_counter() - t0:.3f}s")
    return products
