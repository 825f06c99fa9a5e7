# vocalkart/core/lifespan.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from vocalkart.db import mongo, redis as r
from vocalkart.core.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # --- Startup ---
    # Mongo is required when a URI is configured
    if settings.MONGO_URI:
        try:
            await mongo.connect()
            logger.info("Mongo connected")
        except Exception as e:
            logger.error(f"Mongo connection failed: {e}")
            raise
    else:
        logger.warning("No MONGO_URI provided, skipping Mongo connection")

    # Redis is optional
    if settings.REDIS_URL:
        await r.connect()
    else:
        logger.warning("No REDIS_URL provided, skipping Redis connection")

    yield

    # --- Shutdown ---
    if settings.REDIS_URL:
        await r.disconnect()

    if settings.MONGO_URI:
        await mongo.disconnect()
        logger.info("Mongo disconnected")
