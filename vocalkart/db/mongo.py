# vocalkart/db/mongo.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from vocalkart.core.config import get_settings
import certifi

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


async def connect():
    """
    Create the Motor client and ensure the indexes the pipeline relies on.
    A failed ping at startup is not fatal: the lazy client retries on first query.
    """
    global _client, _db
    settings = get_settings()

    def _new_client() -> AsyncIOMotorClient:
        kwargs = dict(
            uuidRepresentation="standard",
            serverSelectionTimeoutMS=6000,
            connectTimeoutMS=6000,
        )
        if settings.MONGO_URI.startswith("mongodb+srv://"):
            kwargs.update(tls=True, tlsCAFile=certifi.where())
        return AsyncIOMotorClient(settings.MONGO_URI, **kwargs)

    try:
        _client = _new_client()
        _db = _client[settings.MONGO_DB]
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok)")
    except Exception as e:
        logger.warning(f"Mongo ping at startup failed: {e}; will attempt lazy connection on first query")
        return

    try:
        await ensure_indexes(_db)
    except Exception as e:
        logger.error(f"Mongo index creation failed: {e}")


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    products = db["products"]
    await products.create_index("id", unique=True)
    await products.create_index("barcode", unique=True)
    await products.create_index([("is_indian", 1), ("category", 1)])
    await products.create_index([("name", 1), ("brand", 1)])
    alternatives = db["alternatives"]
    await alternatives.create_index("id", unique=True)
    await alternatives.create_index("original_product_id")


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
