"""
Mock Order Store Implementation

Keeps orders in process memory instead of MongoDB.
Used in development mode (ENV_MODE=development) and by the test suite.

Behavior:
    - Mirrors MongoDB result semantics (matched/modified/deleted counts)
    - Optional simulated latency, to exercise operation timeouts
    - Optional random failure rate, to exercise error handling
"""

import asyncio
import copy
import logging
import random
from typing import Any, Mapping, Optional

from bson import ObjectId

from app.core.config import get_settings
from app.exceptions import OrderNotFoundError, PersistenceError
from app.models import new_order_document, order_fields
from app.services.orders.base import (
    BaseOrderStore,
    DeleteResult,
    InsertResult,
    UpdateResult,
)

logger = logging.getLogger(__name__)


class MockOrderStore(BaseOrderStore):
    """
    In-memory implementation of the order store.

    Documents are kept in insertion order and copied on the way in and
    out, so callers never share state with the store.

    Attributes:
        latency: Seconds each operation sleeps before running
        failure_rate: Probability of a simulated store failure (0.0-1.0)

    Example:
        >>> store = MockOrderStore()
        >>> result = await store.insert_order({"dish": "Soup"})
        >>> (await store.find_order(result.inserted_id))["dish"]
        'Soup'
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        latency: float = 0.0,
        failure_rate: float = 0.0,
    ):
        """
        Initialize the mock store.

        Args:
            timeout: Operation timeout in seconds (default: DB_OPERATION_TIMEOUT)
            latency: Simulated latency per operation in seconds
            failure_rate: Probability of a simulated failure (default: never)
        """
        if timeout is None:
            timeout = get_settings().db_operation_timeout
        super().__init__(timeout)
        self.latency = latency
        self.failure_rate = failure_rate
        self._documents: dict[ObjectId, dict[str, Any]] = {}

        logger.info(
            f"MockOrderStore initialized "
            f"(timeout={self.timeout:g}s, failure_rate={failure_rate:.0%})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate(self, operation: str) -> None:
        """Sleep for the configured latency, then maybe fail."""
        if self.latency:
            await asyncio.sleep(self.latency)
        if self.failure_rate and random.random() < self.failure_rate:
            logger.debug(f"Mock: Simulated failure in {operation}")
            raise PersistenceError(f"simulated store failure during {operation}")

    async def _run(self, operation: str, action):
        async def _call():
            await self._simulate(operation)
            return action()

        return await self._with_timeout(operation, _call())

    async def insert_order(self, fields: Mapping[str, Any]) -> InsertResult:
        def action() -> InsertResult:
            document = new_order_document(fields)
            self._documents[document["_id"]] = document
            return InsertResult(inserted_id=document["_id"])

        return await self._run("insert_order", action)

    async def find_orders(self, server: Optional[str] = None) -> list[dict[str, Any]]:
        def action() -> list[dict[str, Any]]:
            return [
                copy.deepcopy(doc)
                for doc in self._documents.values()
                if server is None or doc.get("server") == server
            ]

        return await self._run("find_orders", action)

    async def find_order(self, order_id: ObjectId) -> dict[str, Any]:
        def action() -> dict[str, Any]:
            document = self._documents.get(order_id)
            if document is None:
                raise OrderNotFoundError()
            return copy.deepcopy(document)

        return await self._run("find_order", action)

    async def update_waiter(self, order_id: ObjectId, server: Optional[str]) -> UpdateResult:
        def action() -> UpdateResult:
            document = self._documents.get(order_id)
            if document is None:
                return UpdateResult(matched_count=0, modified_count=0)
            if document["server"] == server:
                return UpdateResult(matched_count=1, modified_count=0)
            document["server"] = server
            return UpdateResult(matched_count=1, modified_count=1)

        return await self._run("update_waiter", action)

    async def replace_order(self, order_id: ObjectId, fields: Mapping[str, Any]) -> UpdateResult:
        def action() -> UpdateResult:
            document = self._documents.get(order_id)
            if document is None:
                return UpdateResult(matched_count=0, modified_count=0)
            replacement = {"_id": order_id, **order_fields(fields)}
            if replacement == document:
                return UpdateResult(matched_count=1, modified_count=0)
            self._documents[order_id] = replacement
            return UpdateResult(matched_count=1, modified_count=1)

        return await self._run("replace_order", action)

    async def delete_order(self, order_id: ObjectId) -> DeleteResult:
        def action() -> DeleteResult:
            removed = self._documents.pop(order_id, None)
            return DeleteResult(deleted_count=0 if removed is None else 1)

        return await self._run("delete_order", action)

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        logger.debug("Mock: Order store health check passed")
        return True
