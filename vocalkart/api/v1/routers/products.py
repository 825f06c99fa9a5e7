# vocalkart/api/v1/routers/products.py

from fastapi import APIRouter, Depends
import time
import logging

from vocalkart.api.deps import product_repo_dep, llm_dep, off_client_dep
from vocalkart.api.v1.schemas.products import IdentifyIn, SearchIn, SearchOut
from vocalkart.domain.services.identify_svc import identify_product, identify_payload
from vocalkart.domain.services.search_svc import search_products

logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.post("/products/identify", summary="Identify a scanned barcode (OpenFoodFacts, then AI retrieval)")
async def identify(
    body: IdentifyIn,
    product_repo = Depends(product_repo_dep),
    off_client = Depends(off_client_dep),
    llm = Depends(llm_dep),
):
    logger.info("Request: identify barcode=%s", body.barcode)
    start_time = time.perf_counter()

    res = await identify_product(
        barcode=body.barcode, product_repo=product_repo, off_client=off_client, llm=llm
    )

    elapsed_time = time.perf_counter() - start_time
    logger.info(
        "Response: identify barcode=%s, product_id=%s, source=%s, elapsed_time=%.4fs",
        body.barcode, res.product.id, res.product.source, elapsed_time,
    )
    return identify_payload(res)


@router.post("/products/search", response_model=SearchOut)
async def search(
    body: SearchIn,
    product_repo = Depends(product_repo_dep),
    off_client = Depends(off_client_dep),
    llm = Depends(llm_dep),
):
    """Store search, falling back to OpenFoodFacts and then to the LLM."""
    logger.info(
        "Request: search query=%s, category=%s, indian_only=%s",
        body.search_query, body.category, body.indian_only,
    )
    start_time = time.perf_counter()

    products = await search_products(
        query=body.search_query,
        category=body.category,
        indian_only=body.indian_only,
        product_repo=product_repo,
        off_client=off_client,
        llm=llm,
    )

    elapsed_time = time.perf_counter() - start_time
    logger.info("Response: search count=%s, elapsed_time=%.4fs", len(products), elapsed_time)
    return {"products": [p.model_dump(mode="json", exclude={"off_raw"}) for p in products]}
