# vocalkart/domain/services/alternatives_svc.py

from __future__ import annotations
from typing import Any, List, Literal, Optional, Sequence
import logging
import time

from pydantic import BaseModel, ValidationError

from vocalkart.core.config import Settings
from vocalkart.core.errors import InputError, ProductNotFoundError
from vocalkart.domain.models.alternative import AiAlternative, AlternativeLink
from vocalkart.domain.models.product import Product, ScoredCandidate
from vocalkart.domain.repositories.base import ProductStore, AlternativeStore
from vocalkart.domain.services.constants import (
    DEFAULT_MATCH_SCORE,
    MODE_RANKING,
    MODE_GENERATION,
    ALT_BARCODE_PREFIX,
    ALT_COUNTRY,
    ALT_AVAILABILITY,
    ALT_WHERE_TO_BUY,
    ALT_RATING,
    ALT_DESCRIPTION,
)
from vocalkart.domain.services.llm_client import LLMGateway
from vocalkart.domain.services.prompts import ranking_prompt, generation_prompt
from vocalkart.domain.services.retrieval import retrieve_candidates
from vocalkart.domain.services.scoring import NutritionWeights
from vocalkart.utils.ids import synthetic_barcode
from vocalkart.utils.llm_json import extract_json_array, json_preview

logger = logging.getLogger(__name__)


class SuggestionResult(BaseModel):
    source_product_id: str
    mode: Literal["ranking", "generation"]
    alternatives: List[AlternativeLink]
    model_config = {"frozen": True}


# =============================================================================
#                               PARSING
# =============================================================================

def parse_alternatives(
    items: Sequence[Any], limit: int, default_score: int = DEFAULT_MATCH_SCORE
) -> List[AiAlternative]:
    """
    Validate raw array elements into AiAlternative values.
    Elements that are not objects or lack a name are dropped with a warning.
    """
    out: List[AiAlternative] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning(f"Dropping alternative #{idx}: not a JSON object ({type(item).__name__})")
            continue
        try:
            out.append(AiAlternative.model_validate(item, context={"default_match_score": default_score}))
        except ValidationError as e:
            logger.warning(f"Dropping alternative #{idx}: {e.error_count()} validation error(s): {json_preview(item, 300)}")
            continue
        if len(out) >= limit:
            break
    return out


# =============================================================================
#                               RESOLUTION
# =============================================================================

def match_candidate(name: str, candidates: Sequence[ScoredCandidate]) -> Optional[Product]:
    """First candidate whose name contains, or is contained in, `name` (case-insensitive)."""
    needle = name.lower()
    for c in candidates:
        hay = (c.product.name or "").lower()
        if not hay:
            continue
        if needle in hay or hay in needle:
            return c.product
    return None


def _new_alternative_product(alt: AiAlternative, fallback_category: str) -> Product:
    return Product(
        barcode=synthetic_barcode(ALT_BARCODE_PREFIX),
        name=alt.name,
        brand=alt.brand,
        category=alt.category or fallback_category,
        price=alt.price or 0,
        is_indian=True,
        country_of_origin=ALT_COUNTRY,
        description=alt.reason or ALT_DESCRIPTION,
        availability=ALT_AVAILABILITY,
        where_to_buy=list(ALT_WHERE_TO_BUY),
        rating=ALT_RATING,
        source="LLM",
        confidence="medium",
        verified=False,
    )


async def resolve_product(
    alt: AiAlternative,
    *,
    candidates: Sequence[ScoredCandidate],
    product_repo: ProductStore,
    fallback_category: str,
) -> Product:
    """
    Resolution order (first hit wins):
      1) ranking mode: substring match against the ranked candidates
      2) exact (name, brand) lookup in the store
      3) create a new Indian product from the AI description
    """
    if candidates:
        matched = match_candidate(alt.name, candidates)
        if matched:
            logger.debug(f"Matched candidate: {matched.name} ({matched.id})")
            return matched

    existing = await product_repo.get_by_name_brand(alt.name, alt.brand)
    if existing:
        logger.debug(f"Found existing product by name/brand: {existing.name} ({existing.id})")
        return existing

    created = await product_repo.insert(_new_alternative_product(alt, fallback_category))
    logger.info(f"Created alternative product '{created.name}' by {created.brand} ({created.id})")
    return created


def build_link(original_product_id: str, indian_product_id: str, alt: AiAlternative) -> AlternativeLink:
    return AlternativeLink(
        original_product_id=original_product_id,
        indian_product_id=indian_product_id,
        match_score=alt.match_score,
        reason=alt.reason,
        quality_comparison=alt.quality_comparison,
        price_comparison=alt.price_comparison,
        reason_tags=alt.reason_tags,
        confidence=alt.confidence,
        source_urls=alt.source_urls,
    )


# =============================================================================
#                               PUBLIC API
# =============================================================================

async def suggest_alternatives(
    *,
    product_id: Optional[str],
    product_name: Optional[str],
    product_category: Optional[str],
    product_repo: ProductStore,
    alternative_repo: AlternativeStore,
    llm: LLMGateway,
    settings: Settings,
) -> SuggestionResult:
    """
    End-to-end alternative suggestion for one foreign product.

    High-level flow:
      1) Validate input and load the source product (hard stop if missing).
      2) Retrieve domestic candidates in the same category and rank them by nutrition distance.
      3) Ranking mode if candidates exist, else generation mode; one LLM call.
      4) Extract the JSON array (hard stop if absent), validate/normalize each element.
      5) Resolve each alternative to a product (match / lookup / create) and insert a link.
         Per-item failures are logged and skipped.

    Notes:
      - No dedup against links persisted by earlier calls.
      - Generation failures and malformed replies propagate; nothing is written in that case.
    """
    missing = [
        field for field, value in (
            ("productId", product_id),
            ("productName", product_name),
            ("productCategory", product_category),
        )
        if not (isinstance(value, str) and value.strip())
    ]
    if missing:
        raise InputError(f"Missing required fields: {', '.join(missing)}")

    t0 = time.perf_counter()
    source = await product_repo.get_by_id(product_id)
    if not source:
        logger.warning(f"Product not found: product_id={product_id}")
        raise ProductNotFoundError("Product not found")

    logger.info(f"Suggesting alternatives for: {product_name} ({product_category})")

    # ---- 1) Candidates ------------------------------------------------------
    ranked = await retrieve_candidates(
        product_repo,
        source,
        product_category,
        pool_limit=settings.candidate_pool_limit,
        ranked_k=settings.ranked_candidates_k,
        weights=NutritionWeights.from_settings(settings),
    )

    # ---- 2) Prompt ----------------------------------------------------------
    if ranked:
        mode = MODE_RANKING
        prompt = ranking_prompt(product_name, product_category, source, ranked[: settings.prompt_candidates_k])
    else:
        mode = MODE_GENERATION
        prompt = generation_prompt(product_name, product_category, source)
    logger.info(f"Prompt mode={mode} candidates={len(ranked)}")
    logger.debug(f"Prompt preview: {prompt[:1500]}")

    # ---- 3) Generation (terminal on failure) --------------------------------
    content = await llm.complete(prompt)
    raw_items = extract_json_array(content)
    alternatives = parse_alternatives(
        raw_items, limit=settings.max_alternatives, default_score=settings.default_match_score
    )
    logger.info(f"Received {len(raw_items)} alternatives from AI, {len(alternatives)} usable")

    # ---- 4) Resolution & persistence ----------------------------------------
    saved: List[AlternativeLink] = []
    for alt in alternatives:
        try:
            target = await resolve_product(
                alt,
                candidates=ranked,
                product_repo=product_repo,
                fallback_category=product_category,
            )
            link = await alternative_repo.insert(build_link(source.id, target.id, alt))
        except Exception as e:
            logger.error(f"Error saving alternative '{alt.name}' for product_id={source.id}: {e}")
            continue
        saved.append(link)

    logger.info(
        f"Saved {len(saved)}/{len(alternatives)} alternatives for product_id={source.id} "
        f"mode={mode} elapsed={time.perf_counter() - t0:.3f}s"
    )
    return SuggestionResult(source_product_id=source.id, mode=mode, alternatives=saved)


async def list_alternatives(
    *,
    product_id: str,
    product_repo: ProductStore,
    alternative_repo: AlternativeStore,
) -> List[dict]:
    """Persisted links of a product, each hydrated with its Indian product (None if it vanished)."""
    links = await alternative_repo.list_for_product(product_id)
    if not links:
        return []
    products = await product_repo.get_many_by_ids(list({link.indian_product_id for link in links}))
    by_id = {p.id: p for p in products}
    return [
        {**link.model_dump(mode="json"), "indian_product": (
            by_id[link.indian_product_id].model_dump(mode="json", exclude={"off_raw"})
            if link.indian_product_id in by_id else None
        )}
        for link in links
    ]
