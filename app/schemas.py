"""
Pydantic Schemas for Request/Response Validation

Request bodies are validated strictly: a field may be missing or null,
but a present value must have the right JSON type (no "12.5" for price,
no 7 for table). Unknown keys, including any client-supplied id, are
ignored.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderPayload(BaseModel):
    """Request body for creating or fully replacing an order."""

    model_config = ConfigDict(strict=True, extra="ignore")

    dish: Optional[str] = Field(None, examples=["Pasta"])
    price: Optional[float] = Field(None, examples=[12.5])
    server: Optional[str] = Field(None, examples=["Alice"])
    table: Optional[str] = Field(None, examples=["T1"])


class WaiterUpdate(BaseModel):
    """Request body for reassigning the waiter of an order."""

    model_config = ConfigDict(strict=True, extra="ignore")

    server: Optional[str] = Field(None, examples=["Bob"])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class OrderResponse(BaseModel):
    """A stored order as returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", examples=["65f1c0a4e13823a2c5a1b2c3"])
    dish: Optional[str] = None
    price: Optional[float] = None
    server: Optional[str] = None
    table: Optional[str] = None


class InsertResultResponse(BaseModel):
    """Result of creating an order."""

    model_config = ConfigDict(populate_by_name=True)

    inserted_id: str = Field(..., alias="InsertedID")


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    order_store: str
    provider: str
    timestamp: datetime


class RootResponse(BaseModel):
    """API root with navigation links."""
    message: str
    version: str
    environment: str
    documentation: str
    health: str
    endpoints: List[str]
