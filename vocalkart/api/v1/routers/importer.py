# vocalkart/api/v1/routers/importer.py
from fastapi import APIRouter, Depends
import time
import logging

from vocalkart.api.deps import product_repo_dep, alternative_repo_dep
from vocalkart.api.v1.schemas.products import ImportIn
from vocalkart.domain.services.import_svc import import_rows

router = APIRouter(prefix="/import", tags=["import"])

logger = logging.getLogger(__name__)


@router.post("")
async def import_json(
    body: ImportIn,
    product_repo = Depends(product_repo_dep),
    alternative_repo = Depends(alternative_repo_dep),
):
    """
    Bulk load products (upsert on barcode) and alternative links (insert).

    Example:
        curl -X POST http://localhost:8000/import -H "Content-Type: application/json" \\
          -d '{"products": [{"barcode": "8901", "name": "Parle-G", "brand": "Parle", "is_indian": true}]}'
    """
    start_time = time.perf_counter()
    counts = await import_rows(
        products=body.products,
        alternatives=body.alternatives,
        product_repo=product_repo,
        alternative_repo=alternative_repo,
    )
    logger.info("Response: import %s, elapsed_time=%.4fs", counts, time.perf_counter() - start_time)
    return counts
