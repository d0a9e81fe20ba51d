"""
FastAPI Application Entry Point

Order Management API - CRUD over restaurant order lines.
Uses the in-memory store in development and MongoDB in staging/production.

Endpoints:
    - POST /order/create: Create an order
    - GET /orders: List all orders
    - GET /waiter/{waiter}: List orders served by one waiter
    - GET /order/{order_id}/: Get a single order
    - PUT /waiter/update/{order_id}: Reassign the waiter of an order
    - PUT /order/update/{order_id}: Replace an order
    - DELETE /order/delete/{order_id}: Delete an order
    - GET /health: System health check

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, List

import uvicorn
from bson import ObjectId
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings, setup_logging
from app.database import close_db, init_db
from app.exceptions import InvalidOrderIdError, PersistenceError
from app.models import parse_order_id, serialize_order
from app.schemas import (
    ErrorResponse,
    HealthResponse,
    InsertResultResponse,
    OrderPayload,
    OrderResponse,
    RootResponse,
    WaiterUpdate,
)
from app.services.orders import BaseOrderStore, get_order_store

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    if settings.use_mongo:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"Missing production config: {missing}")
        await init_db()

    store = get_order_store()
    logger.info(f"Order Store: {store.provider_name}")
    logger.info("Application ready")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    if settings.use_mongo:
        await close_db()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Create, read, update and delete restaurant orders.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def order_object_id(order_id: str) -> ObjectId:
    """Resolve the {order_id} path segment into an ObjectId."""
    return parse_order_id(order_id, strict=get_settings().strict_object_ids)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", response_model=RootResponse, tags=["Root"])
async def root() -> RootResponse:
    """API root with navigation links."""
    return RootResponse(
        message=f"Welcome to {settings.app_name}",
        version=settings.app_version,
        environment=settings.env_mode.value,
        documentation="/docs",
        health="/health",
        endpoints=[
            "POST /order/create",
            "GET /orders",
            "GET /waiter/{waiter}",
            "GET /order/{order_id}/",
            "PUT /waiter/update/{order_id}",
            "PUT /order/update/{order_id}",
            "DELETE /order/delete/{order_id}",
        ],
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    store: BaseOrderStore = Depends(get_order_store),
) -> HealthResponse:
    """Verify the order store is operational."""
    store_status = "healthy" if await store.health_check() else "unhealthy"

    return HealthResponse(
        status="operational" if store_status == "healthy" else "degraded",
        order_store=store_status,
        provider=store.provider_name,
        timestamp=datetime.now(),
    )


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/order/create",
    response_model=InsertResultResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Create Order",
)
async def add_order(
    order: OrderPayload,
    store: BaseOrderStore = Depends(get_order_store),
) -> InsertResultResponse:
    """Store a new order; the id is generated server side."""
    try:
        result = await store.insert_order(order.model_dump())
    except PersistenceError as e:
        logger.error(f"Error creating order: {e}")
        raise HTTPException(status_code=500, detail="order item was not created")

    logger.info(f"Order {result.inserted_id} created")
    return InsertResultResponse(inserted_id=str(result.inserted_id))


@app.get(
    "/orders",
    response_model=List[OrderResponse],
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="List Orders",
)
async def get_orders(
    store: BaseOrderStore = Depends(get_order_store),
) -> list[dict[str, Any]]:
    """Return every order in the collection."""
    try:
        orders = await store.find_orders()
    except PersistenceError as e:
        logger.error(f"Error listing orders: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.debug(f"Listed {len(orders)} orders")
    return [serialize_order(order) for order in orders]


@app.get(
    "/waiter/{waiter}",
    response_model=List[OrderResponse],
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="List Orders by Waiter",
)
async def get_orders_by_waiter(
    waiter: str,
    store: BaseOrderStore = Depends(get_order_store),
) -> list[dict[str, Any]]:
    """Return the orders whose server is exactly the given name."""
    try:
        orders = await store.find_orders(server=waiter)
    except PersistenceError as e:
        logger.error(f"Error listing orders for waiter {waiter!r}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.debug(f"Listed {len(orders)} orders for waiter {waiter!r}")
    return [serialize_order(order) for order in orders]


@app.get(
    "/order/{order_id}/",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Get Order",
)
async def get_order_by_id(
    order_id: ObjectId = Depends(order_object_id),
    store: BaseOrderStore = Depends(get_order_store),
) -> dict[str, Any]:
    """
    Get a specific order by id.

    A missing order is reported as a store error (500), not 404.
    """
    try:
        order = await store.find_order(order_id)
    except PersistenceError as e:
        logger.error(f"Error fetching order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    logger.debug(f"Fetched order {order_id}")
    return serialize_order(order)


@app.put(
    "/waiter/update/{order_id}",
    response_model=int,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Reassign Waiter",
)
async def update_waiter(
    waiter: WaiterUpdate,
    order_id: ObjectId = Depends(order_object_id),
    store: BaseOrderStore = Depends(get_order_store),
) -> int:
    """Set the server of an order; returns the number of modified orders."""
    try:
        result = await store.update_waiter(order_id, waiter.server)
    except PersistenceError as e:
        logger.error(f"Error updating waiter of order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return result.modified_count


@app.put(
    "/order/update/{order_id}",
    response_model=int,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Replace Order",
)
async def update_order(
    order: OrderPayload,
    order_id: ObjectId = Depends(order_object_id),
    store: BaseOrderStore = Depends(get_order_store),
) -> int:
    """Overwrite every field of an order; omitted fields are cleared."""
    try:
        result = await store.replace_order(order_id, order.model_dump())
    except PersistenceError as e:
        logger.error(f"Error replacing order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return result.modified_count


@app.delete(
    "/order/delete/{order_id}",
    response_model=int,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Delete Order",
)
async def delete_order(
    order_id: ObjectId = Depends(order_object_id),
    store: BaseOrderStore = Depends(get_order_store),
) -> int:
    """Delete an order; returns the number of deleted orders."""
    try:
        result = await store.delete_order(order_id)
    except PersistenceError as e:
        logger.error(f"Error deleting order {order_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return result.deleted_count


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _describe_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Render validation errors as one line, e.g. 'body.price: Input should be ...'."""
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "invalid request"


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or ill-typed request bodies are client errors (400)."""
    errors = exc.errors()
    message = _describe_validation_errors(errors)
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")

    return JSONResponse(
        status_code=400,
        content={"error": message, "detail": jsonable_encoder(errors)},
    )


@app.exception_handler(InvalidOrderIdError)
async def invalid_order_id_handler(request: Request, exc: InvalidOrderIdError) -> JSONResponse:
    """Malformed order ids when STRICT_OBJECT_IDS is enabled."""
    logger.warning(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler.

    Runs outside CORSMiddleware, so the allow-origin header is added here.
    """
    logger.exception(f"Unhandled exception: {exc}")

    headers = {}
    origin = request.headers.get("origin")
    allowed = settings.cors_allow_origins_list
    if "*" in allowed:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin in allowed:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
        headers=headers,
    )


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
