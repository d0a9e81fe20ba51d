"""
Order Store Abstract Base Class

Defines the persistence contract used by every request handler.
Both MockOrderStore and MongoOrderStore must implement these methods.

Every operation is bounded by a timeout; a store that exceeds it raises
PersistenceTimeoutError, any other failure raises PersistenceError.
Partial updates (waiter only) and full replaces are separate operations.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Optional, TypeVar

from bson import ObjectId

from app.exceptions import PersistenceTimeoutError

T = TypeVar("T")


@dataclass
class InsertResult:
    """
    Result of inserting an order.

    Attributes:
        inserted_id: Id generated for the new document
    """
    inserted_id: ObjectId


@dataclass
class UpdateResult:
    """
    Result of a partial update or full replace.

    Attributes:
        matched_count: Documents matching the id (0 or 1)
        modified_count: Documents actually changed; 0 when the stored
            values already equal the requested ones
    """
    matched_count: int
    modified_count: int


@dataclass
class DeleteResult:
    """
    Result of deleting an order.

    Attributes:
        deleted_count: Documents removed (0 or 1)
    """
    deleted_count: int


class BaseOrderStore(ABC):
    """
    Abstract base class for order persistence.

    All store implementations (Mock, MongoDB) must inherit from this
    class and implement all abstract methods.

    Example:
        >>> store = get_order_store()
        >>> result = await store.insert_order({"dish": "Pasta", "price": 12.5})
        >>> order = await store.find_order(result.inserted_id)
        >>> print(order["dish"])
        Pasta
    """

    def __init__(self, timeout: float):
        """
        Args:
            timeout: Seconds a single operation may take
        """
        self.timeout = timeout

    async def _with_timeout(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await an operation, converting a timeout into PersistenceTimeoutError."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise PersistenceTimeoutError(operation, self.timeout)

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the store provider.

        Returns:
            str: Provider name (e.g., "mock", "mongo")
        """
        pass

    @abstractmethod
    async def insert_order(self, fields: Mapping[str, Any]) -> InsertResult:
        """
        Insert a new order under a freshly generated id.

        Args:
            fields: dish/price/server/table values; missing ones are stored as None

        Returns:
            InsertResult: The generated id
        """
        pass

    @abstractmethod
    async def find_orders(self, server: Optional[str] = None) -> list[dict[str, Any]]:
        """
        List orders, optionally only those served by one waiter.

        Args:
            server: Exact waiter name to match, or None for every order

        Returns:
            list: Matching documents, empty when nothing matches
        """
        pass

    @abstractmethod
    async def find_order(self, order_id: ObjectId) -> dict[str, Any]:
        """
        Fetch a single order.

        Raises:
            OrderNotFoundError: No document has this id
        """
        pass

    @abstractmethod
    async def update_waiter(self, order_id: ObjectId, server: Optional[str]) -> UpdateResult:
        """Set the server field only, leaving the other fields untouched."""
        pass

    @abstractmethod
    async def replace_order(self, order_id: ObjectId, fields: Mapping[str, Any]) -> UpdateResult:
        """Overwrite every field except the id; missing fields become None."""
        pass

    @abstractmethod
    async def delete_order(self, order_id: ObjectId) -> DeleteResult:
        """Remove an order. Deleting an unknown id is not an error."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify the store is reachable.

        Returns:
            bool: True if the store is operational
        """
        pass
