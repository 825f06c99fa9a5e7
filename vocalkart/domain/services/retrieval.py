import logging
from typing import List

from vocalkart.domain.models.product import Product, ScoredCandidate
from vocalkart.domain.repositories.base import ProductStore
from vocalkart.domain.services.normalization import category_term
from vocalkart.domain.services.scoring import NutritionWeights, DEFAULT_WEIGHTS, rank_candidates

logger = logging.getLogger(__name__)


async def retrieve_candidates(
    product_repo: ProductStore,
    source: Product,
    category: str,
    *,
    pool_limit: int,
    ranked_k: int,
    weights: NutritionWeights = DEFAULT_WEIGHTS,
) -> List[ScoredCandidate]:
    """
    Domestic products in the same (textually overlapping) category, ranked by
    nutrition distance to `source`. An empty list means "no candidates" and
    is also what a failing datastore read yields.
    """
    term = category_term(category)
    logger.info(f"Searching Indian alternatives in category term='{term}' (pool_limit={pool_limit})")
    if not term:
        return []

    try:
        pool = await product_repo.find_domestic_by_category(term, pool_limit)
    except Exception as e:
        logger.error(f"Candidate retrieval failed for category term='{term}': {e}")
        return []

    if not pool:
        logger.info("No candidates found in store, generation mode will be used")
        return []

    ranked = rank_candidates(source.nutriments, pool, limit=ranked_k, weights=weights)
    logger.info(f"Found {len(pool)} candidates, kept top {len(ranked)} by nutrition distance")
    logger.debug(f"Top candidates: {[(c.product.name, round(c.distance, 2)) for c in ranked[:3]]}")
    return ranked
