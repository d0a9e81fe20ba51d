"""
Database Connection Module
Handles the MongoDB connection using PyMongo's asyncio client.
"""

import logging
from functools import lru_cache

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection

from app.core.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_client() -> AsyncMongoClient:
    """
    Get the shared MongoDB client.

    The client owns the connection pool and is safe to share between
    concurrent requests. Creating it does not open a connection.
    """
    settings = get_settings()
    return AsyncMongoClient(
        settings.mongo_url,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        tz_aware=True,
    )


def get_orders_collection() -> AsyncCollection:
    """Return the handle of the orders collection."""
    settings = get_settings()
    return get_client()[settings.mongo_database][settings.orders_collection]


async def init_db() -> None:
    """
    Verify connectivity and ensure indexes.
    Called once at application startup.
    """
    client = get_client()
    await client.admin.command("ping")
    await get_orders_collection().create_index([("server", ASCENDING)])
    logger.info("MongoDB reachable, orders indexes ensured")


async def close_db() -> None:
    """Close the shared client, if one was created."""
    if get_client.cache_info().currsize:
        await get_client().close()
        get_client.cache_clear()
