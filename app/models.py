"""
Order Document Model

MongoDB stores orders as plain documents:

    {
        "_id": ObjectId("65f1c0..."),
        "dish": "Pasta",        # optional
        "price": 12.5,          # optional
        "server": "Alice",      # optional, waiter name
        "table": "T1",          # optional
    }

Every document carries all four fields; a field the client left out is
stored as null. The id is generated when the order is created and is
never taken from the client.
"""

from typing import Any, Mapping

from bson import ObjectId
from bson.errors import InvalidId

from app.exceptions import InvalidOrderIdError


ORDER_FIELDS = ("dish", "price", "server", "table")

# Lookup key used when a malformed id is tolerated; matches no document.
ZERO_OBJECT_ID = ObjectId(b"\x00" * 12)


def order_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Project a mapping onto the order fields, filling gaps with None."""
    return {field: data.get(field) for field in ORDER_FIELDS}


def new_order_document(data: Mapping[str, Any]) -> dict[str, Any]:
    """Build a document ready for insertion with a freshly generated id."""
    return {"_id": ObjectId(), **order_fields(data)}


def parse_order_id(value: str, strict: bool = False) -> ObjectId:
    """
    Parse the hex representation of an order id.

    Malformed values resolve to ZERO_OBJECT_ID unless strict is set, so the
    lookup proceeds and reports not-found (GET) or a zero count (PUT/DELETE).

    Raises:
        InvalidOrderIdError: malformed value with strict parsing
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        if strict:
            raise InvalidOrderIdError(value)
        return ZERO_OBJECT_ID


def serialize_order(document: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a stored document into its JSON form (hex string id)."""
    result = dict(document)
    if isinstance(result.get("_id"), ObjectId):
        result["_id"] = str(result["_id"])
    return result
