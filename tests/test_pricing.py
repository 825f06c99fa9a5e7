import pytest

from vocalkart.core.errors import GenerationServiceError
from vocalkart.domain.services.pricing_svc import (
    DEFAULT_PRICE,
    estimate_price,
    estimate_price_with_ai,
    estimate_for_new_product,
    backfill_prices,
)


@pytest.mark.parametrize("category, is_indian, expected", [
    ("Beverages", True, 30),
    ("Beverages", False, 120),
    ("Salty snacks", True, 20),
    ("Dairy", False, 180),
    ("Spices", True, DEFAULT_PRICE),
])
def test_category_bands(category, is_indian, expected):
    assert estimate_price("Thing", "Local", category, is_indian) == expected


def test_premium_brand_and_pack_size():
    assert estimate_price("Cola 2 l", "Coca-Cola", "Beverages", False) == round(120 * 1.5 * 2)
    assert estimate_price("Juice 750ml", "Real", "Drinks", True) == 45


@pytest.mark.asyncio
async def test_ai_price_parses_first_number(llm_factory):
    llm = llm_factory(replies=["Approximately 135 INR"])
    price = await estimate_price_with_ai(llm, name="Maggi", brand="Nestle", category="Noodles")
    assert price == 135
    assert "Maggi" in llm.prompts[0]


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["2", "no idea", GenerationServiceError("timeout")])
async def test_ai_price_falls_back_to_default(llm_factory, reply):
    llm = llm_factory(replies=[reply])
    assert await estimate_price_with_ai(llm, name="X", brand="Y", category="Z") == DEFAULT_PRICE


@pytest.mark.asyncio
async def test_unconfigured_llm_uses_default(llm_factory):
    llm = llm_factory(configured=False)
    assert await estimate_price_with_ai(llm, name="X", brand="Y", category="Z") == DEFAULT_PRICE
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_heuristic_wins_above_threshold(llm_factory):
    llm = llm_factory()
    assert await estimate_for_new_product(llm, name="Limca", brand="Coca-Cola", category="Beverages", is_indian=True) == 45
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_backfill_only_touches_unpriced(product_factory, product_repo_factory, llm_factory):
    priced = product_factory(name="Parle-G", price=10)
    unpriced = product_factory(name="Hide & Seek", price=0)
    repo = product_repo_factory([priced, unpriced])
    llm = llm_factory(replies=["40"])

    out = await backfill_prices([priced, unpriced], repo, llm)

    assert [p.price for p in out] == [10, 40]
    assert repo.rows[unpriced.id].price == 40
    assert len(llm.prompts) == 1
