"""Order Service Server."""

import json
import time
from contextlib import asynccontextmanager
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from confluent_kafka.admin import AdminClient
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from .config import Settings, load_settings
from .errors import (
    InvalidRequest,
    InventoryUnavailable,
    OutOfStock,
    PersistenceFailed,
    PlacementError,
    PlacementTimeout,
)
from .inventory import InventoryClient
from .logger import logger, setup_service_logger
from .producer import OrderEventProducer
from .repository import SqlOrderRepository, create_engine_from_url
from .schemas import OrderRequest
from .service import OrderService

ERROR_STATUS = {
    InvalidRequest: status.HTTP_400_BAD_REQUEST,
    OutOfStock: status.HTTP_409_CONFLICT,
    InventoryUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    PersistenceFailed: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PlacementTimeout: status.HTTP_504_GATEWAY_TIMEOUT,
}


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return load_settings()


def build_order_service(settings: Settings) -> OrderService:
    """Wire the order service to its inventory, storage and Kafka collaborators.

    Args:
        settings: Runtime configuration

    Returns:
        OrderService: A ready-to-use order service
    """
    repository = SqlOrderRepository(create_engine_from_url(settings.database_url))
    repository.create_schema()
    return OrderService(
        inventory=InventoryClient(settings.inventory_service_url, timeout=settings.inventory_timeout),
        store=repository,
        publisher=OrderEventProducer(settings.kafka_bootstrap_servers),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the order service on startup and flush pending events on shutdown.

    Args:
        app: The FastAPI application instance
    """
    settings = get_settings()
    setup_service_logger(log_level=settings.log_level, log_file=settings.log_file)
    app.state.order_service = build_order_service(settings)
    logger.info("Order service started")

    yield

    logger.info("Shutting down order service...")
    publisher = app.state.order_service.publisher
    if isinstance(publisher, OrderEventProducer):
        publisher.close()
    logger.info("Shutdown complete")


app = FastAPI(title="Order Service", lifespan=lifespan)
router = APIRouter()


def get_order_service(request: Request) -> OrderService:
    """Dependency returning the order service built at startup."""
    order_service = getattr(request.app.state, "order_service", None)
    if order_service is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service unavailable")
    return order_service


async def read_order_request(request: Request) -> Optional[OrderRequest]:
    """Decode the order body, parsing JSON numbers straight into Decimal.

    Returns:
        OrderRequest | None: The request, or None when the body is JSON null.

    Raises:
        RequestValidationError: If the body is not JSON or does not fit the schema.
    """
    body = await request.body()
    try:
        data = json.loads(body, parse_float=Decimal)
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": f"JSON decode error: {e}", "input": {}}]
        ) from e
    if data is None:
        return None
    try:
        return OrderRequest.model_validate(data)
    except ValidationError as e:
        errors = [
            {**error, "loc": ("body", *error["loc"])}
            for error in e.errors(include_url=False, include_context=False)
        ]
        raise RequestValidationError(errors) from e


def error_status(error: PlacementError) -> int:
    """Map a placement error to its HTTP status code."""
    return ERROR_STATUS.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("/health")
def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready")
def readiness_check(settings: Settings = Depends(get_settings)):
    """Check if the service is ready to accept traffic.

    Returns:
        dict: Service readiness status and Kafka connection status.
    """
    kafka_ok = _check_kafka_connection(settings.kafka_bootstrap_servers)
    return {"status": "ready" if kafka_ok else "not_ready", "kafka": kafka_ok}


@router.post("/api/order", status_code=status.HTTP_201_CREATED)
def place_order(
    order_request: Optional[OrderRequest] = Depends(read_order_request),
    order_service: OrderService = Depends(get_order_service),
    settings: Settings = Depends(get_settings),
):
    """Place an order.

    Args:
        order_request (OrderRequest | None): The decoded order request, None for a JSON null body.

    Returns:
        str: Confirmation message.

    Raises:
        HTTPException: With a status code matching the placement error.
    """
    logger.info(f"Received order request: {order_request!r}")
    deadline = None
    if settings.placement_timeout is not None:
        deadline = time.monotonic() + settings.placement_timeout

    result = order_service.place_order(order_request, deadline=deadline)
    if not result.ok:
        raise HTTPException(status_code=error_status(result.error), detail=result.error.reason)
    return "Order Placed Successfully"


def _check_kafka_connection(bootstrap_servers: str) -> bool:
    """Check if Kafka connection is available.

    Returns:
        bool: True if Kafka is accessible, False otherwise.
    """
    try:
        admin = AdminClient({"bootstrap.servers": bootstrap_servers})
        return bool(admin.list_topics(timeout=5))
    except Exception as e:
        logger.error(f"Kafka connection failed: {e}")
        return False


app.include_router(router)
