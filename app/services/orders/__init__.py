"""
Order Store Factory

Provides a single entry point for obtaining the order store.
Handlers receive it through FastAPI dependency injection, so tests can
substitute any BaseOrderStore via app.dependency_overrides.

Usage:
    from app.services.orders import get_order_store

    store = get_order_store()
    orders = await store.find_orders()

Environment Switching:
    - ENV_MODE=development → MockOrderStore (in memory)
    - ENV_MODE=staging → MongoOrderStore
    - ENV_MODE=production → MongoOrderStore
"""

import logging
from functools import lru_cache

from app.core.config import get_settings
from app.services.orders.base import (
    BaseOrderStore,
    DeleteResult,
    InsertResult,
    UpdateResult,
)
from app.services.orders.mock import MockOrderStore
from app.services.orders.mongo import MongoOrderStore

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_store() -> BaseOrderStore:
    """
    Get the configured order store instance.

    The instance is cached so every request shares one collection
    handle (and one in-memory dataset in development mode).

    Returns:
        BaseOrderStore: Configured order store
    """
    settings = get_settings()

    if settings.use_mongo:
        logger.info(
            f"Order Store: Using MongoOrderStore "
            f"({settings.env_mode.value} mode)"
        )
        return MongoOrderStore()

    logger.info("Order Store: Using MockOrderStore (development mode)")
    return MockOrderStore()


def reset_order_store() -> None:
    """
    Clear the cached order store instance.

    The next call to get_order_store() will create a new instance.
    """
    get_order_store.cache_clear()
    logger.debug("Order store cache cleared")


__all__ = [
    "get_order_store",
    "reset_order_store",
    "BaseOrderStore",
    "InsertResult",
    "UpdateResult",
    "DeleteResult",
    "MockOrderStore",
    "MongoOrderStore",
]
