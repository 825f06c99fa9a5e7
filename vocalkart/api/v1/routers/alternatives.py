# vocalkart/api/v1/routers/alternatives.py
from fastapi import APIRouter, Depends
import time
import logging

from vocalkart.api.deps import product_repo_dep, alternative_repo_dep, llm_dep, settings_dep
from vocalkart.api.v1.schemas.alternatives import SuggestIn, SuggestOut, AlternativeListOut
from vocalkart.domain.services.alternatives_svc import suggest_alternatives, list_alternatives

logger = logging.getLogger(__name__)

router = APIRouter(tags=["alternatives"])


@router.post("/alternatives/suggest", response_model=SuggestOut)
async def suggest(
    body: SuggestIn,
    product_repo = Depends(product_repo_dep),
    alternative_repo = Depends(alternative_repo_dep),
    llm = Depends(llm_dep),
    settings = Depends(settings_dep),
):
    """
    Indian-made alternatives for a foreign product.
    Pipeline: category candidates → nutrition ranking → LLM rank/generate → resolve → persist links.
    """
    logger.info(
        "Request: suggest_alternatives product_id=%s, name=%s, category=%s",
        body.product_id, body.product_name, body.product_category,
    )
    start_time = time.perf_counter()

    res = await suggest_alternatives(
        product_id=body.product_id,
        product_name=body.product_name,
        product_category=body.product_category,
        product_repo=product_repo,
        alternative_repo=alternative_repo,
        llm=llm,
        settings=settings,
    )

    elapsed_time = time.perf_counter() - start_time
    logger.info(
        "Response: suggest_alternatives product_id=%s, mode=%s, count=%s, elapsed_time=%.4fs",
        res.source_product_id, res.mode, len(res.alternatives), elapsed_time,
    )
    return {"alternatives": [a.model_dump(mode="json") for a in res.alternatives]}


@router.get("/products/{product_id}/alternatives", response_model=AlternativeListOut)
async def product_alternatives(
    product_id: str,
    product_repo = Depends(product_repo_dep),
    alternative_repo = Depends(alternative_repo_dep),
):
    """Previously suggested alternatives of a product, best match first."""
    logger.info("Request: product_alternatives product_id=%s", product_id)
    start_time = time.perf_counter()

    items = await list_alternatives(
        product_id=product_id, product_repo=product_repo, alternative_repo=alternative_repo
    )

    elapsed_time = time.perf_counter() - start_time
    logger.info(
        "Response: product_alternatives product_id=%s, count=%s, elapsed_time=%.4fs",
        product_id, len(items), elapsed_time,
    )
    return {"product_id": product_id, "alternatives": items, "count": len(items)}
