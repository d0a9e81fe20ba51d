"""
MongoDB Order Store Implementation

Production store backed by a single MongoDB collection through
PyMongo's asyncio API. Used when ENV_MODE is staging or production.

Driver errors are wrapped in PersistenceError; nothing is retried.
"""

import logging
from typing import Any, Mapping, Optional

from bson import ObjectId
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.database import get_orders_collection
from app.exceptions import OrderNotFoundError, PersistenceError
from app.models import new_order_document, order_fields
from app.services.orders.base import (
    BaseOrderStore,
    DeleteResult,
    InsertResult,
    UpdateResult,
)

logger = logging.getLogger(__name__)


class MongoOrderStore(BaseOrderStore):
    """
    MongoDB implementation of the order store.

    Attributes:
        collection: Handle of the orders collection
        timeout: Seconds a single operation may take

    Example:
        >>> store = MongoOrderStore()
        >>> orders = await store.find_orders(server="Alice")
    """

    def __init__(
        self,
        collection: Optional[AsyncCollection] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the MongoDB store.

        Args:
            collection: Collection handle (default: configured orders collection)
            timeout: Operation timeout in seconds (default: DB_OPERATION_TIMEOUT)
        """
        settings = get_settings()
        super().__init__(timeout if timeout is not None else settings.db_operation_timeout)
        self.collection = collection if collection is not None else get_orders_collection()

        logger.info(
            f"MongoOrderStore initialized "
            f"(collection={self.collection.full_name}, timeout={self.timeout:g}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mongo"

    async def insert_order(self, fields: Mapping[str, Any]) -> InsertResult:
        document = new_order_document(fields)
        try:
            result = await self._with_timeout(
                "insert_order", self.collection.insert_one(document)
            )
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e
        return InsertResult(inserted_id=result.inserted_id)

    async def find_orders(self, server: Optional[str] = None) -> list[dict[str, Any]]:
        query = {} if server is None else {"server": server}

        async def _fetch() -> list[dict[str, Any]]:
            return await self.collection.find(query).to_list()

        try:
            return await self._with_timeout("find_orders", _fetch())
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e

    async def find_order(self, order_id: ObjectId) -> dict[str, Any]:
        try:
            document = await self._with_timeout(
                "find_order", self.collection.find_one({"_id": order_id})
            )
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e
        if document is None:
            raise OrderNotFoundError()
        return document

    async def update_waiter(self, order_id: ObjectId, server: Optional[str]) -> UpdateResult:
        try:
            result = await self._with_timeout(
                "update_waiter",
                self.collection.update_one({"_id": order_id}, {"$set": {"server": server}}),
            )
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e
        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def replace_order(self, order_id: ObjectId, fields: Mapping[str, Any]) -> UpdateResult:
        try:
            result = await self._with_timeout(
                "replace_order",
                self.collection.replace_one({"_id": order_id}, order_fields(fields)),
            )
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e
        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def delete_order(self, order_id: ObjectId) -> DeleteResult:
        try:
            result = await self._with_timeout(
                "delete_order", self.collection.delete_one({"_id": order_id})
            )
        except PyMongoError as e:
            raise PersistenceError(str(e)) from e
        return DeleteResult(deleted_count=result.deleted_count)

    async def health_check(self) -> bool:
        """Ping the server through the collection's database."""
        try:
            await self._with_timeout(
                "health_check", self.collection.database.command("ping")
            )
            return True
        except (PyMongoError, PersistenceError) as e:
            logger.error(f"MongoDB health check failed: {e}")
            return False
