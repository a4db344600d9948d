import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from storefront.core.config import settings

logger = logging.getLogger(__name__)

# Global MongoDB client
_client: AsyncIOMotorClient = None
_database: AsyncIOMotorDatabase = None


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Create the indexes the storefront queries rely on.

    The unique index on carts.user_id backs the one-cart-per-user upsert.
    """
    await db.carts.create_index("user_id", unique=True)
    await db.users.create_index("email", unique=True)
    await db.categories.create_index("slug", unique=True)
    await db.products.create_index([("category", ASCENDING), ("created_at", DESCENDING)])
    await db.orders.create_index([("user_id", ASCENDING), ("created_at", DESCENDING)])
    await db.orders.create_index("order_number", unique=True)


async def connect_to_mongo():
    """Connect to MongoDB and make sure the indexes exist."""
    global _client, _database
    _client = AsyncIOMotorClient(settings.MONGODB_URI)
    _database = _client[settings.MONGODB_DB_NAME]
    await ensure_indexes(_database)
    logger.info(f"Connected to MongoDB: {settings.MONGODB_DB_NAME}")


async def close_mongo_connection():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        logger.info("Closed MongoDB connection")


def get_database() -> AsyncIOMotorDatabase:
    return _database
