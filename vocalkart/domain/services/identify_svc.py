# vocalkart/domain/services/identify_svc.py

from __future__ import annotations
from typing import Any, Dict, Optional
import logging

from pydantic import BaseModel, ValidationError

from vocalkart.core.errors import InputError, ProductNotFoundError, GenerationServiceError, MalformedLLMOutputError
from vocalkart.domain.models.external import AiProductRecord, OffProduct
from vocalkart.domain.models.product import Product
from vocalkart.domain.repositories.base import ProductStore
from vocalkart.domain.services.constants import MAX_BARCODE_LEN
from vocalkart.domain.services.llm_client import LLMGateway
from vocalkart.domain.services.off_client import OpenFoodFactsClient, is_indian_by_tags, country_from_tags
from vocalkart.domain.services.pricing_svc import estimate_for_new_product
from vocalkart.domain.services.prompts import validation_prompt, retrieval_prompt
from vocalkart.utils.llm_json import extract_json_object

logger = logging.getLogger(__name__)


class IdentifyResult(BaseModel):
    product: Product
    validation: Optional[AiProductRecord] = None


async def _ask_for_record(llm: LLMGateway, prompt: str, what: str) -> Optional[AiProductRecord]:
    """One LLM call expected to return a product JSON object; None on any failure."""
    if not llm.configured:
        logger.info(f"LLM not configured, skipping AI {what}")
        return None
    try:
        content = await llm.complete(prompt)
        return AiProductRecord.model_validate(extract_json_object(content))
    except (GenerationServiceError, MalformedLLMOutputError, ValidationError) as e:
        logger.error(f"AI {what} failed: {e}")
        return None


def _describe(off: OffProduct) -> str:
    description = off.ingredients_text or off.generic_name or "No description available"
    energy = off.nutriments.get("energy-kcal_100g")
    if energy:
        description += f" Energy: {energy} kcal per 100g."
    return description


async def _from_off(off: OffProduct, barcode: str, llm: LLMGateway) -> IdentifyResult:
    logger.info(f"Product found in OpenFoodFacts: {off.product_name}")
    validation = await _ask_for_record(llm, validation_prompt(off.model_dump()), "validation")

    confidence = validation.confidence if validation else "medium"
    is_indian = bool(validation and validation.is_indian) or is_indian_by_tags(off.countries_tags, off.countries)
    name = off.product_name or "Unknown Product"
    brand = off.brands or "Unknown Brand"
    category = off.first_category or "Food"

    price = await estimate_for_new_product(
        llm, name=name, brand=brand, category=category, is_indian=is_indian, quantity=off.quantity
    )
    product = Product(
        barcode=off.code or barcode,
        name=name,
        brand=brand,
        category=category,
        country_of_origin=country_from_tags(off.countries_tags) or "Unknown",
        is_indian=is_indian,
        description=_describe(off),
        image_url=off.image_url or off.image_front_url,
        price=price,
        availability="unknown",
        where_to_buy=["Local Stores", "Online Retailers"],
        rating=0,
        source="OFF",
        verified=confidence == "high",
        confidence=confidence,
        off_raw=off.model_dump(),
    )
    return IdentifyResult(product=product, validation=validation)


async def _from_ai(barcode: str, llm: LLMGateway) -> Optional[IdentifyResult]:
    logger.info(f"Falling back to AI retrieval for barcode: {barcode}")
    record = await _ask_for_record(llm, retrieval_prompt(barcode), "retrieval")
    if not record or record.confidence == "low" or not record.source_urls:
        logger.info("AI retrieval returned low confidence or no sources")
        return None

    is_indian = bool(record.is_indian)
    name = record.name or "Unknown Product"
    brand = record.brand or "Unknown Brand"
    category = record.categories or "Unknown"
    price = await estimate_for_new_product(llm, name=name, brand=brand, category=category, is_indian=is_indian)
    product = Product(
        barcode=barcode,
        name=name,
        brand=brand,
        category=category,
        country_of_origin=record.countries or "Unknown",
        is_indian=is_indian,
        description=record.description or "No description available",
        image_url=record.image_url,
        price=price,
        availability="unknown",
        where_to_buy=["Online Stores"],
        rating=0,
        source="LLM",
        verified=record.confidence == "high",
        confidence=record.confidence,
        off_raw={},
    )
    return IdentifyResult(product=product, validation=None)


async def identify_product(
    *,
    barcode: Any,
    product_repo: ProductStore,
    off_client: OpenFoodFactsClient,
    llm: LLMGateway,
) -> IdentifyResult:
    """
    Identify a scanned product:
      1) OpenFoodFacts lookup (+ AI validation of the payload)
      2) AI retrieval when OpenFoodFacts has nothing; accepted only with sources and non-low confidence
      3) upsert on barcode and return
    """
    if not isinstance(barcode, str) or not barcode.strip():
        raise InputError("Barcode is required")
    if len(barcode) > MAX_BARCODE_LEN:
        raise InputError("Invalid barcode format")
    barcode = barcode.strip()
    logger.info(f"Identifying product for barcode: {barcode}")

    result: Optional[IdentifyResult] = None
    off = await off_client.get_product(barcode)
    if off:
        result = await _from_off(off, barcode, llm)
    else:
        result = await _from_ai(barcode, llm)

    if result is None:
        logger.info(f"No product found through any method for barcode={barcode}")
        raise ProductNotFoundError("Product not found")

    saved = await product_repo.upsert_by_barcode(result.product)
    logger.info(f"Product saved: {saved.name} source={saved.source} confidence={saved.confidence}")
    return IdentifyResult(product=saved, validation=result.validation)


def identify_payload(result: IdentifyResult) -> Dict[str, Any]:
    return {
        "product": result.product.model_dump(mode="json"),
        "validation": result.validation.model_dump(mode="json") if result.validation else None,
    }
