import json

import pytest

from vocalkart.core.errors import InputError, ProductNotFoundError
from vocalkart.domain.models.external import OffProduct
from vocalkart.domain.services.identify_svc import identify_product, identify_payload


class FakeOff:
    def __init__(self, product=None):
        self.product = product
        self.lookups = []

    async def get_product(self, barcode):
        self.lookups.append(barcode)
        return self.product


COKE = OffProduct.model_validate({
    "code": "5449000000996",
    "product_name": "Coca-Cola",
    "brands": "Coca-Cola",
    "categories": "Beverages, Sodas",
    "countries_tags": ["en:united-kingdom"],
    "nutriments": {"energy-kcal_100g": 42},
})


@pytest.mark.asyncio
async def test_off_product_with_validation(product_repo_factory, llm_factory):
    repo = product_repo_factory()
    validation = {"is_indian": "false", "confidence": "high", "reason": "US brand", "source_urls": ["https://coca-cola.com"]}
    llm = llm_factory(replies=["```json\n" + json.dumps(validation) + "\n```"])

    res = await identify_product(barcode="5449000000996", product_repo=repo, off_client=FakeOff(COKE), llm=llm)

    p = res.product
    assert p.name == "Coca-Cola" and p.category == "Beverages"
    assert p.source == "OFF" and p.verified is True and p.confidence == "high"
    assert p.is_indian is False
    assert p.country_of_origin == "united kingdom"
    assert p.price == 180  # foreign soda, premium brand
    assert p.nutriments["energy-kcal_100g"] == 42
    assert "Energy: 42 kcal" in p.description
    assert res.validation.reason == "US brand"
    assert repo.rows[p.id] == p


@pytest.mark.asyncio
async def test_validation_failure_still_saves_off_product(product_repo_factory, llm_factory):
    repo = product_repo_factory()
    llm = llm_factory(replies=["not json at all"])

    res = await identify_product(barcode="5449000000996", product_repo=repo, off_client=FakeOff(COKE), llm=llm)

    assert res.validation is None
    assert res.product.confidence == "medium" and res.product.verified is False


@pytest.mark.asyncio
async def test_rescan_updates_same_row(product_repo_factory, llm_factory):
    repo = product_repo_factory()
    llm = llm_factory(configured=False)
    first = await identify_product(barcode="5449000000996", product_repo=repo, off_client=FakeOff(COKE), llm=llm)
    second = await identify_product(barcode="5449000000996", product_repo=repo, off_client=FakeOff(COKE), llm=llm)
    assert first.product.id == second.product.id
    assert len(repo.rows) == 1


@pytest.mark.asyncio
async def test_ai_retrieval_fallback(product_repo_factory, llm_factory):
    repo = product_repo_factory()
    record = {
        "barcode": "8901063010024", "name": "Hide & Seek", "brand": "Parle", "categories": "Biscuits",
        "countries": "India", "is_indian": "true", "confidence": "medium",
        "source_urls": ["https://parleproducts.com"],
    }
    llm = llm_factory(replies=[json.dumps(record)])

    res = await identify_product(barcode="8901063010024", product_repo=repo, off_client=FakeOff(), llm=llm)

    assert res.product.source == "LLM"
    assert res.product.is_indian is True
    assert res.product.barcode == "8901063010024"
    assert res.validation is None
    payload = identify_payload(res)
    assert payload["product"]["name"] == "Hide & Seek" and payload["validation"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("record", [
    {"name": "Mystery", "confidence": "low", "source_urls": ["https://x.example"]},
    {"name": "Mystery", "confidence": "high", "source_urls": []},
])
async def test_unreliable_ai_retrieval_is_not_found(product_repo_factory, llm_factory, record):
    repo = product_repo_factory()
    llm = llm_factory(replies=[json.dumps(record)])
    with pytest.raises(ProductNotFoundError):
        await identify_product(barcode="1234", product_repo=repo, off_client=FakeOff(), llm=llm)
    assert repo.rows == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("barcode", [None, "", "   ", "9" * 51])
async def test_bad_barcode(product_repo_factory, llm_factory, barcode):
    off = FakeOff(COKE)
    with pytest.raises(InputError):
        await identify_product(barcode=barcode, product_repo=product_repo_factory(), off_client=off, llm=llm_factory())
    assert off.lookups == []
