"""Tests for the Order Service HTTP surface."""

from decimal import Decimal
from http import HTTPStatus
from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import inspect

from order_service.config import Settings
from order_service.errors import (
    InvalidRequest,
    InventoryUnavailable,
    OutOfStock,
    PersistenceFailed,
    PlacementTimeout,
)
from order_service.inventory import InventoryClient
from order_service.producer import OrderEventProducer
from order_service.repository import SqlOrderRepository
from order_service.server import app, build_order_service, error_status, get_order_service, get_settings
from order_service.service import OrderService, PlacementResult

IPHONE_ORDER = {
    "skuCode": "iphone_15",
    "quantity": 1,
    "price": 999.99,
    "userDetails": {"email": "a@b.com", "firstName": "A", "lastName": "B"},
}


@pytest.fixture
def test_client(order_service):
    """Create a test client wired to the fixture order service."""
    app.dependency_overrides[get_order_service] = lambda: order_service
    app.dependency_overrides[get_settings] = lambda: Settings(kafka_bootstrap_servers="localhost:9092")
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(test_client):
    """Test the basic health check endpoint."""
    response = test_client.get("/health")
    assert response.status_code == HTTPStatus.OK
    assert response.json() == {"status": "healthy"}


@patch("order_service.server.AdminClient")
def test_readiness_check(mock_admin_client, test_client):
    """Test the readiness check when Kafka is available."""
    mock_admin_client.return_value.list_topics.return_value = {"topics": ["order-placed-topic"]}

    response = test_client.get("/health/ready")

    assert response.json() == {"status": "ready", "kafka": True}
    mock_admin_client.assert_called_once_with({"bootstrap.servers": "localhost:9092"})


@patch("order_service.server.AdminClient")
def test_readiness_check_kafka_down(mock_admin_client, test_client):
    """Test the readiness check when Kafka cannot be reached."""
    mock_admin_client.return_value.list_topics.side_effect = Exception("no brokers")

    response = test_client.get("/health/ready")

    assert response.json() == {"status": "not_ready", "kafka": False}


def test_place_order_created(test_client, stored_orders, publisher):
    """Test that a valid order is stored, announced and confirmed with 201."""
    response = test_client.post("/api/order", json=IPHONE_ORDER)

    assert response.status_code == HTTPStatus.CREATED
    assert response.json() == "Order Placed Successfully"
    stored = stored_orders()
    assert len(stored) == 1
    event = publisher.publish.call_args.args[1]
    assert stored[event.order_number].price == Decimal("999.99")
    assert event.email == "a@b.com"


def test_place_order_keeps_every_price_digit(test_client, stored_orders):
    """Test that JSON prices beyond float precision are stored exactly."""
    response = test_client.post(
        "/api/order",
        content=b'{"skuCode": "gpu", "quantity": 1, "price": 0.12345678901234567890123}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == HTTPStatus.CREATED
    (saved,) = stored_orders().values()
    assert str(saved.price) == "0.12345678901234567890123"


def test_place_order_accepts_customer_alias(test_client, publisher):
    """Test that customer details may be sent under the customer key."""
    body = dict(IPHONE_ORDER)
    body["customer"] = body.pop("userDetails")

    response = test_client.post("/api/order", json=body)

    assert response.status_code == HTTPStatus.CREATED
    assert publisher.publish.call_args.args[1].first_name == "A"


def test_place_order_missing_sku_is_bad_request(test_client, inventory):
    """Test that a request without a SKU is rejected with its reason."""
    response = test_client.post("/api/order", json={"quantity": 1})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"detail": "SKU Code must not be null or empty."}
    inventory.is_in_stock.assert_not_called()


def test_place_order_null_body_is_bad_request(test_client, inventory):
    """Test that a JSON null body is reported as an empty order request."""
    response = test_client.post("/api/order", content=b"null", headers={"Content-Type": "application/json"})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json() == {"detail": "Order request must not be empty."}
    inventory.is_in_stock.assert_not_called()


@pytest.mark.parametrize(
    "body",
    [b"{not json", b'{"skuCode": "iphone_15", "quantity": "many"}', b'{"skuCode": "x", "quantity": 1, "price": -1}'],
)
def test_place_order_malformed_body_is_unprocessable(test_client, inventory, body):
    """Test that bodies that are not JSON or do not fit the schema get 422.

    Args:
        body: The raw request body
    """
    response = test_client.post("/api/order", content=body, headers={"Content-Type": "application/json"})

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.json()["detail"][0]["loc"][0] == "body"
    inventory.is_in_stock.assert_not_called()


def test_place_order_out_of_stock(test_client, inventory, stored_orders):
    """Test that an out-of-stock product is rejected with 409 and nothing stored."""
    inventory.is_in_stock.return_value = False

    response = test_client.post("/api/order", json=IPHONE_ORDER)

    assert response.status_code == HTTPStatus.CONFLICT
    assert response.json() == {"detail": "Product with SKU Code iphone_15 is not in stock."}
    assert stored_orders() == {}


def test_place_order_passes_deadline_when_configured():
    """Test that a configured placement timeout becomes a deadline for the service."""
    service = Mock(spec=OrderService)
    service.place_order.return_value = PlacementResult.failure(PlacementTimeout("Deadline expired before stock check."))
    app.dependency_overrides[get_order_service] = lambda: service
    app.dependency_overrides[get_settings] = lambda: Settings(placement_timeout=2.5)
    try:
        response = TestClient(app).post("/api/order", json=IPHONE_ORDER)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == HTTPStatus.GATEWAY_TIMEOUT
    assert service.place_order.call_args.kwargs["deadline"] is not None


@pytest.mark.parametrize(
    "error, expected",
    [
        (InvalidRequest("bad"), HTTPStatus.BAD_REQUEST),
        (OutOfStock("iphone_15"), HTTPStatus.CONFLICT),
        (InventoryUnavailable("down"), HTTPStatus.SERVICE_UNAVAILABLE),
        (PersistenceFailed("disk full"), HTTPStatus.INTERNAL_SERVER_ERROR),
        (PlacementTimeout("late"), HTTPStatus.GATEWAY_TIMEOUT),
    ],
)
def test_error_status(error, expected):
    """Test the mapping of placement errors to HTTP status codes."""
    assert error_status(error) == expected


@patch("order_service.producer.Producer")
def test_build_order_service_wires_collaborators(mock_producer_class):
    """Test that the service is built from settings with its three collaborators."""
    settings = Settings(
        kafka_bootstrap_servers="broker:29092",
        inventory_service_url="http://inventory:8082",
        inventory_timeout=1.0,
        database_url="sqlite://",
    )

    service = build_order_service(settings)

    assert isinstance(service.inventory, InventoryClient)
    assert service.inventory.base_url == "http://inventory:8082"
    assert service.inventory.timeout == 1.0
    assert isinstance(service.store, SqlOrderRepository)
    assert inspect(service.store.engine).has_table("orders")
    assert isinstance(service.publisher, OrderEventProducer)
    assert mock_producer_class.call_args.args[0]["bootstrap.servers"] == "broker:29092"


def test_place_order_without_started_service_is_unavailable():
    """Test that requests before startup are answered with 503."""
    response = TestClient(app).post("/api/order", json=IPHONE_ORDER)

    assert response.status_code == HTTPStatus.SERVICE_UNAVAILABLE
