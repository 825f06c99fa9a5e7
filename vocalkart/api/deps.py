# vocalkart/api/deps.py
from functools import lru_cache

from fastapi import Depends

from vocalkart.core.config import Settings, get_settings
from vocalkart.db.mongo import get_db
from vocalkart.db.redis import get_redis
from vocalkart.domain.repositories.alternative_repo import AlternativeRepo
from vocalkart.domain.repositories.off_cache_repo import OffCacheRepo
from vocalkart.domain.repositories.product_repo import ProductRepo
from vocalkart.domain.services.llm_client import LLMGateway
from vocalkart.domain.services.off_client import OpenFoodFactsClient


# Dependency for injecting the MongoDB database into endpoints/services
async def mongo_db(db = Depends(get_db)):
    return db


# Redis client or None (cache disabled)
def redis_dep():
    return get_redis()


def settings_dep() -> Settings:
    return get_settings()


def product_repo_dep(db = Depends(mongo_db)) -> ProductRepo:
    return ProductRepo(db)


def alternative_repo_dep(db = Depends(mongo_db)) -> AlternativeRepo:
    return AlternativeRepo(db)


@lru_cache
def _llm_gateway() -> LLMGateway:
    # One SDK client (and connection pool) per process
    return LLMGateway(get_settings())


def llm_dep() -> LLMGateway:
    return _llm_gateway()


def off_client_dep(redis = Depends(redis_dep), settings: Settings = Depends(settings_dep)) -> OpenFoodFactsClient:
    cache = OffCacheRepo(redis, prefix=settings.off_cache_prefix, ttl=settings.off_cache_ttl)
    return OpenFoodFactsClient(settings, cache=cache)
