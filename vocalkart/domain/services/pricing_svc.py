"""
Price estimation for products that arrive without one.

`estimate_price` is a keyword heuristic with fixed, underived constants;
`estimate_price_with_ai` asks the generator for a number and falls back to
DEFAULT_PRICE on any failure.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import logging
import re

from vocalkart.core.errors import GenerationServiceError
from vocalkart.domain.models.product import Product
from vocalkart.domain.repositories.base import ProductStore
from vocalkart.domain.services.llm_client import LLMGateway
from vocalkart.domain.services.prompts import price_prompt
from vocalkart.utils.llm_json import first_int

logger = logging.getLogger(__name__)

DEFAULT_PRICE = 50
MIN_AI_PRICE = 5
AI_ESTIMATE_THRESHOLD = 10  # heuristic prices at or below this go to the LLM

# (keywords, indian price, foreign price); first matching band wins
CATEGORY_BANDS: Sequence[Tuple[Tuple[str, ...], int, int]] = (
    (("beverage", "drink", "soda"), 30, 120),
    (("snack", "chip", "crisp"), 20, 150),
    (("chocolate", "candy", "sweet"), 40, 200),
    (("dairy", "milk", "yogurt"), 50, 180),
    (("cereal", "breakfast"), 80, 300),
    (("sauce", "condiment"), 60, 250),
)
PREMIUM_BRANDS = ("coca-cola", "pepsi", "nestle", "unilever", "kellogs", "lays", "doritos")
PREMIUM_MULTIPLIER = 1.5
LARGE_PACK_MULTIPLIER = 1.5
LARGE_PACK_MIN = 500  # ml or g

_QUANTITY_RE = re.compile(r"(\d+)\s*(ml|l|g|kg)")


def estimate_price(name: Optional[str], brand: Optional[str], category: Optional[str], is_indian: bool) -> int:
    cat = (category or "").lower()
    price: float = DEFAULT_PRICE
    for keywords, indian, foreign in CATEGORY_BANDS:
        if any(k in cat for k in keywords):
            price = indian if is_indian else foreign
            break

    brand_l = (brand or "").lower()
    if any(b in brand_l for b in PREMIUM_BRANDS):
        price *= PREMIUM_MULTIPLIER

    m = _QUANTITY_RE.search((name or "").lower())
    if m:
        qty, unit = int(m.group(1)), m.group(2)
        if unit in ("l", "kg"):
            price *= qty
        elif qty >= LARGE_PACK_MIN:
            price *= LARGE_PACK_MULTIPLIER

    return round(price)


async def estimate_price_with_ai(
    llm: LLMGateway,
    *,
    name: str,
    brand: str,
    category: str,
    country_of_origin: str = "Unknown",
    is_indian: bool = False,
    quantity: Optional[str] = None,
) -> int:
    if not llm.configured:
        logger.info("LLM not configured, using default price estimate")
        return DEFAULT_PRICE
    try:
        content = await llm.complete(price_prompt(name, brand, category, country_of_origin, is_indian, quantity))
    except GenerationServiceError as e:
        logger.error(f"AI price estimation failed for '{name}': {e}")
        return DEFAULT_PRICE
    value = first_int(content)
    if value is None or value < MIN_AI_PRICE:
        return DEFAULT_PRICE
    return value


async def estimate_for_new_product(
    llm: LLMGateway,
    *,
    name: str,
    brand: str,
    category: str,
    is_indian: bool,
    quantity: Optional[str] = None,
) -> int:
    """Heuristic first; the LLM only when the heuristic lands at or below the threshold."""
    price = estimate_price(name, brand, category, is_indian)
    if price <= AI_ESTIMATE_THRESHOLD:
        logger.info(f"Using AI for better price estimation of '{name}'")
        price = await estimate_price_with_ai(
            llm, name=name, brand=brand, category=category, is_indian=is_indian, quantity=quantity
        )
    return price


async def backfill_prices(products: Sequence[Product], product_repo: ProductStore, llm: LLMGateway) -> List[Product]:
    """Estimate and persist a price for every product with a missing or non-positive one."""
    out: List[Product] = []
    for p in products:
        if p.price and p.price > 0:
            out.append(p)
            continue
        logger.info(f"Estimating price for: {p.name}")
        price = await estimate_price_with_ai(
            llm,
            name=p.name or "Unknown Product",
            brand=p.brand or "Unknown Brand",
            category=p.category or "Food",
            country_of_origin=p.country_of_origin or "Unknown",
            is_indian=bool(p.is_indian),
        )
        updated = await product_repo.update_price(p.id, price)
        out.append(updated or p.model_copy(update={"price": price}))
    return out
