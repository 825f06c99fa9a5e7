import json

import pytest

from vocalkart.core.errors import (
    InputError,
    ProductNotFoundError,
    GenerationServiceError,
    MalformedLLMOutputError,
)
from vocalkart.domain.services.alternatives_svc import (
    suggest_alternatives,
    list_alternatives,
    match_candidate,
    parse_alternatives,
)
from vocalkart.domain.models.product import ScoredCandidate


@pytest.fixture
def catalog(product_factory):
    pepsi = product_factory(
        name="Pepsi", brand="PepsiCo", category="Beverages", price=40,
        off_raw={"nutriments": {"energy-kcal_100g": 42, "sugars_100g": 11}},
    )
    thums_up = product_factory(
        name="Thums Up", brand="Coca-Cola India", category="Beverages", is_indian=True, price=35,
        off_raw={"nutriments": {"energy-kcal_100g": 41, "sugars_100g": 10}},
    )
    paper_boat = product_factory(
        name="Paper Boat Aamras", brand="Hector", category="Beverages, Juices", is_indian=True, price=30,
        off_raw={"nutriments": {"energy-kcal_100g": 70, "sugars_100g": 16}},
    )
    rolex = product_factory(name="Rolex Submariner", brand="Rolex", category="Luxury Watches", price=900000)
    return {"pepsi": pepsi, "thums_up": thums_up, "paper_boat": paper_boat, "rolex": rolex}


async def _suggest(product, repo, alt_repo, llm, settings, category=None):
    return await suggest_alternatives(
        product_id=product.id,
        product_name=product.name,
        product_category=category or product.category,
        product_repo=repo,
        alternative_repo=alt_repo,
        llm=llm,
        settings=settings,
    )


@pytest.mark.asyncio
async def test_ranking_mode_links_existing_candidates(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    reply = json.dumps([
        {"name": "Thums Up", "brand": "Coca-Cola India", "match_score": 92,
         "reason": "Cola with a stronger fizz", "quality_comparison": "similar",
         "price_comparison": "cheaper", "reason_tags": ["same_category"], "confidence": "high"},
        {"name": "Paper Boat", "brand": "Hector", "match_score": 70,
         "quality_comparison": "Good", "price_comparison": "less"},
    ])
    llm = llm_factory(replies=[reply])

    res = await _suggest(catalog["pepsi"], repo, alternative_repo, llm, settings)

    assert res.mode == "ranking"
    assert [l.indian_product_id for l in res.alternatives] == [catalog["thums_up"].id, catalog["paper_boat"].id]
    assert res.alternatives[1].quality_comparison == "good"
    assert res.alternatives[1].price_comparison == "cheaper"
    assert repo.inserted == []
    assert len(alternative_repo.links) == 2
    # nearest candidate is listed first in the prompt
    prompt = llm.prompts[0]
    assert prompt.index("Thums Up") < prompt.index("Paper Boat Aamras")


@pytest.mark.asyncio
async def test_generation_mode_creates_new_indian_products(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    reply = "Here are the results: " + json.dumps([
        {"name": "Titan Edge", "brand": "Titan", "price": 25000, "match_score": 80},
        {"name": "HMT Janata", "brand": "HMT", "match_score": 150},
        {"name": "Fastrack Reflex", "brand": "Titan"},
        {"name": "Sonata Gold", "brand": "Titan"},
    ])
    llm = llm_factory(replies=[reply])

    res = await _suggest(catalog["rolex"], repo, alternative_repo, llm, settings)

    assert res.mode == "generation"
    assert len(res.alternatives) == 3
    created_ids = {p.id for p in repo.inserted}
    assert {l.indian_product_id for l in res.alternatives} == created_ids
    assert all(p.id not in created_ids for p in catalog.values())
    assert [l.match_score for l in res.alternatives] == [80, 100, 85]
    titan = repo.inserted[0]
    assert titan.is_indian and titan.country_of_origin == "India"
    assert titan.barcode.startswith("ALT_")
    assert titan.category == "Luxury Watches"
    assert titan.price == 25000
    assert titan.source == "LLM" and titan.confidence == "medium"


@pytest.mark.asyncio
async def test_existing_product_found_by_name_and_brand(catalog, product_factory, product_repo_factory, alternative_repo, llm_factory, settings):
    titan = product_factory(name="Titan Edge", brand="Titan", category="Watches", is_indian=True)
    repo = product_repo_factory(list(catalog.values()) + [titan])
    llm = llm_factory(replies=['[{"name": "Titan Edge", "brand": "Titan"}]'])

    res = await _suggest(catalog["rolex"], repo, alternative_repo, llm, settings)

    assert res.alternatives[0].indian_product_id == titan.id
    assert repo.inserted == []


@pytest.mark.asyncio
async def test_no_array_fails_without_persisting(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    llm = llm_factory(replies=["Sorry, I cannot help with that."])

    with pytest.raises(MalformedLLMOutputError):
        await _suggest(catalog["pepsi"], repo, alternative_repo, llm, settings)

    assert alternative_repo.links == []
    assert repo.inserted == []


@pytest.mark.asyncio
async def test_generation_failure_propagates(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    llm = llm_factory(replies=[GenerationServiceError("gateway returned 500")])

    with pytest.raises(GenerationServiceError):
        await _suggest(catalog["pepsi"], repo, alternative_repo, llm, settings)
    assert alternative_repo.links == []


@pytest.mark.asyncio
async def test_failed_item_is_skipped(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    repo.fail_insert_names = {"HMT Janata"}
    llm = llm_factory(replies=[json.dumps([
        {"name": "Titan Edge", "brand": "Titan"},
        {"name": "HMT Janata", "brand": "HMT"},
        {"name": "Sonata Gold", "brand": "Titan"},
    ])])

    res = await _suggest(catalog["rolex"], repo, alternative_repo, llm, settings)

    assert len(res.alternatives) == 2
    assert [p.name for p in repo.inserted] == ["Titan Edge", "Sonata Gold"]


@pytest.mark.asyncio
async def test_invalid_elements_are_dropped(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    llm = llm_factory(replies=['["just a string", {"brand": "NoName"}, {"name": "Titan Edge"}]'])

    res = await _suggest(catalog["rolex"], repo, alternative_repo, llm, settings)

    assert len(res.alternatives) == 1
    assert repo.inserted[0].brand == "Unknown Brand"


@pytest.mark.asyncio
async def test_repeated_invocations_both_persist(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    reply = '[{"name": "Thums Up", "brand": "Coca-Cola India"}]'
    llm = llm_factory(replies=[reply, reply])

    first = await _suggest(catalog["pepsi"], repo, alternative_repo, llm, settings)
    second = await _suggest(catalog["pepsi"], repo, alternative_repo, llm, settings)

    assert len(first.alternatives) == len(second.alternatives) == 1
    assert len(alternative_repo.links) == 2
    assert first.alternatives[0].id != second.alternatives[0].id


@pytest.mark.asyncio
async def test_missing_fields_are_rejected(product_repo_factory, alternative_repo, llm_factory, settings):
    llm = llm_factory()
    with pytest.raises(InputError) as exc:
        await suggest_alternatives(
            product_id="abc", product_name="", product_category=None,
            product_repo=product_repo_factory(), alternative_repo=alternative_repo, llm=llm, settings=settings,
        )
    assert "productName" in exc.value.message and "productCategory" in exc.value.message
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_unknown_product(product_repo_factory, alternative_repo, llm_factory, settings):
    llm = llm_factory()
    with pytest.raises(ProductNotFoundError):
        await suggest_alternatives(
            product_id="missing", product_name="Pepsi", product_category="Beverages",
            product_repo=product_repo_factory(), alternative_repo=alternative_repo, llm=llm, settings=settings,
        )
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_list_alternatives_hydrates_products(catalog, product_repo_factory, alternative_repo, llm_factory, settings):
    repo = product_repo_factory(list(catalog.values()))
    llm = llm_factory(replies=['[{"name": "Thums Up", "brand": "Coca-Cola India", "match_score": 90}]'])
    await _suggest(catalog["pepsi"], repo, alternative_repo, llm, settings)

    items = await list_alternatives(product_id=catalog["pepsi"].id, product_repo=repo, alternative_repo=alternative_repo)

    assert len(items) == 1
    assert items[0]["indian_product"]["name"] == "Thums Up"
    assert "off_raw" not in items[0]["indian_product"]


def test_match_candidate_is_two_way_substring(product_factory):
    cands = [
        ScoredCandidate(product=product_factory(name=""), distance=0),
        ScoredCandidate(product=product_factory(name="Amul Kool Cafe"), distance=1),
    ]
    assert match_candidate("amul kool", cands).name == "Amul Kool Cafe"
    assert match_candidate("Amul Kool Cafe 200ml", cands).name == "Amul Kool Cafe"
    assert match_candidate("Nescafe", cands) is None


def test_parse_alternatives_stops_at_limit():
    items = [{"name": f"Alt {i}"} for i in range(5)]
    assert [a.name for a in parse_alternatives(items, limit=3)] == ["Alt 0", "Alt 1", "Alt 2"]
