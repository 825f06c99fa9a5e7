# vocalkart/domain/services/import_svc.py

from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging

from pydantic import ValidationError

from vocalkart.core.errors import InputError
from vocalkart.domain.models.alternative import AlternativeLink
from vocalkart.domain.models.product import Product
from vocalkart.domain.repositories.base import ProductStore, AlternativeStore
from vocalkart.domain.services.constants import DEFAULT_REASON, DEFAULT_REASON_TAGS
from vocalkart.domain.services.normalization import (
    normalize_quality,
    normalize_price,
    normalize_match_score,
    normalize_confidence,
)
from vocalkart.utils.llm_json import json_preview

logger = logging.getLogger(__name__)


def _product_row(row: Dict[str, Any]) -> Product:
    data = {k: v for k, v in row.items() if k != "_id"}
    data.setdefault("source", "IMPORT")
    return Product.model_validate(data)


def _alternative_row(row: Dict[str, Any]) -> AlternativeLink:
    data = {k: v for k, v in row.items() if k != "_id"}
    data["quality_comparison"] = normalize_quality(data.get("quality_comparison"))
    data["price_comparison"] = normalize_price(data.get("price_comparison"))
    data["match_score"] = normalize_match_score(data.get("match_score"))
    data["reason"] = data.get("reason") or DEFAULT_REASON
    data["reason_tags"] = data.get("reason_tags") or list(DEFAULT_REASON_TAGS)
    if data.get("confidence") is not None:
        data["confidence"] = normalize_confidence(data["confidence"])
    return AlternativeLink.model_validate(data)


def _validate_rows(rows: List[Any], parse, what: str) -> tuple[list, int]:
    valid, skipped = [], 0
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            logger.warning(f"[import] {what} #{idx} is not an object, skipped")
            skipped += 1
            continue
        try:
            valid.append(parse(row))
        except ValidationError as e:
            logger.warning(f"[import] {what} #{idx} invalid ({e.error_count()} error(s)): {json_preview(row, 200)}")
            skipped += 1
    return valid, skipped


async def import_rows(
    *,
    products: Optional[Any],
    alternatives: Optional[Any],
    product_repo: ProductStore,
    alternative_repo: AlternativeStore,
) -> Dict[str, int]:
    """
    Bulk load of products and alternative links.
    Products are upserted on barcode; alternative rows are normalized the same
    way generated ones are, then inserted. Invalid rows are skipped and counted.
    """
    if products is None and alternatives is None:
        raise InputError("Nothing to import: provide products and/or alternatives")
    for field, value in (("products", products), ("alternatives", alternatives)):
        if value is not None and not isinstance(value, list):
            raise InputError(f"'{field}' must be an array")

    counts = {"products_upserted": 0, "products_modified": 0, "products_skipped": 0,
              "alternatives_inserted": 0, "alternatives_skipped": 0}

    if products:
        valid, counts["products_skipped"] = _validate_rows(products, _product_row, "product")
        if valid:
            res = await product_repo.bulk_upsert_by_barcode(valid)
            counts["products_upserted"] = res.get("upserted_count", 0)
            counts["products_modified"] = res.get("modified_count", 0)

    if alternatives:
        valid, counts["alternatives_skipped"] = _validate_rows(alternatives, _alternative_row, "alternative")
        counts["alternatives_inserted"] = await alternative_repo.insert_many(valid)

    logger.info(f"[import] done: {counts}")
    return counts
