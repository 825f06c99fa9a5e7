"""
OpenFoodFacts API client.

Base URL: https://world.openfoodfacts.org (no authentication).
Lookups are best-effort: network errors, HTTP errors and unknown barcodes
all come back as "not found" and are logged.
"""
from __future__ import annotations
from typing import List, Optional
import logging

import httpx
from pydantic import ValidationError

from vocalkart.core.config import Settings
from vocalkart.domain.models.external import OffProduct
from vocalkart.domain.repositories.off_cache_repo import OffCacheRepo

logger = logging.getLogger(__name__)


class OpenFoodFactsClient:
    def __init__(
        self,
        settings: Settings,
        cache: Optional[OffCacheRepo] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = settings.OFF_BASE_URL.rstrip("/")
        self.timeout = settings.off_timeout_s
        self.cache = cache or OffCacheRepo(None)
        self._transport = transport  # injectable for tests (httpx.MockTransport)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": "VocalKart/1.0"},
        )

    async def get_product(self, barcode: str) -> Optional[OffProduct]:
        """Product by barcode, or None when unknown / unreachable."""
        cached = await self.cache.get(barcode)
        if cached is not None:
            logger.debug(f"OFF cache hit barcode={barcode} found={bool(cached)}")
            return self._to_product(cached, barcode) if cached else None

        try:
            async with self._client() as client:
                resp = await client.get(f"/api/v0/product/{barcode}.json")
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OpenFoodFacts lookup failed for barcode={barcode}: {e}")
            return None

        logger.info(f"OpenFoodFacts response status={data.get('status')} barcode={barcode}")
        payload = data.get("product") if data.get("status") == 1 else None
        if not isinstance(payload, dict):
            await self.cache.set(barcode, None)
            return None

        payload.setdefault("code", data.get("code") or barcode)
        await self.cache.set(barcode, payload)
        return self._to_product(payload, barcode)

    async def search(self, terms: str, page_size: int = 10) -> List[OffProduct]:
        params = {
            "search_terms": terms,
            "search_simple": "1",
            "action": "process",
            "json": "1",
            "page_size": str(page_size),
        }
        try:
            async with self._client() as client:
                resp = await client.get("/cgi/search.pl", params=params)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OpenFoodFacts search failed for terms='{terms}': {e}")
            return []

        products: List[OffProduct] = []
        for raw in data.get("products") or []:
            if isinstance(raw, dict) and (p := self._to_product(raw, raw.get("code"))):
                products.append(p)
        logger.info(f"OpenFoodFacts search returned {len(products)} products for terms='{terms}'")
        return products

    @staticmethod
    def _to_product(payload: dict, barcode: Optional[str]) -> Optional[OffProduct]:
        try:
            return OffProduct.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Unusable OpenFoodFacts payload for barcode={barcode}: {e.error_count()} error(s)")
            return None


def is_indian_by_tags(countries_tags: Optional[List[str]] = None, country_raw: Optional[str] = "") -> bool:
    """True when a country tag or the free-text country field points to India."""
    tags = [str(t).lower() for t in (countries_tags or [])]
    if any("india" in t or t == "in" or t == "en:india" for t in tags):
        return True
    return "india" in (country_raw or "").lower()


def country_from_tags(countries_tags: Optional[List[str]]) -> Optional[str]:
    """'en:united-kingdom' -> 'united kingdom'."""
    if not countries_tags:
        return None
    return countries_tags[0].replace("en:", "").replace("-", " ") or None
