# vocalkart/domain/repositories/off_cache_repo.py
from __future__ import annotations
from typing import Optional, Any, Dict
import json
import logging

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class OffCacheRepo:
    """
    Adapter for caching OpenFoodFacts product payloads in Redis.
    Misses are cached too (as an empty dict) so unknown barcodes are not re-fetched.
    A None client turns every call into a no-op; Redis errors degrade to a cache miss.
    """
    def __init__(self, redis: Optional[Redis], prefix: str = "off", ttl: int = 24 * 3600):
        self.redis = redis
        self.prefix = prefix
        self.ttl = ttl

    def key(self, barcode: str) -> str:
        return f"{self.prefix}:product:{barcode}"

    async def get(self, barcode: str) -> Optional[Dict[str, Any]]:
        """
        Returns the cached payload, {} for a cached miss, None when not cached.
        """
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(self.key(barcode))
        except RedisError as e:
            logger.warning(f"OFF cache read failed for barcode={barcode}: {e}")
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"Corrupt OFF cache entry for barcode={barcode}, ignoring: {e}")
            return None

    async def set(self, barcode: str, payload: Optional[Dict[str, Any]]) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.set(
                self.key(barcode),
                json.dumps(payload or {}, ensure_ascii=False, separators=(",", ":"), default=str),
                ex=self.ttl,
            )
        except RedisError as e:
            logger.warning(f"OFF cache write failed for barcode={barcode}: {e}")
