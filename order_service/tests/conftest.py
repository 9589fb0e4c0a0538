"""Test fixtures for the order service tests."""

from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from order_service.repository import OrderRecord, SqlOrderRepository, create_engine_from_url
from order_service.schemas import CustomerDetails, OrderRequest
from order_service.service import OrderService


@pytest.fixture
def iphone_request():
    """Create the reference order request.

    Returns:
        OrderRequest: One iphone_15 at 999.99 for customer A B.
    """
    return OrderRequest(
        sku_code="iphone_15",
        quantity=1,
        price=Decimal("999.99"),
        user_details=CustomerDetails(email="a@b.com", first_name="A", last_name="B"),
    )


@pytest.fixture
def inventory():
    """Inventory gateway that reports every product as in stock."""
    gateway = Mock()
    gateway.is_in_stock.return_value = True
    return gateway


@pytest.fixture
def repository():
    """Order repository backed by an in-memory SQLite database."""
    repo = SqlOrderRepository(create_engine_from_url("sqlite://"))
    repo.create_schema()
    return repo


@pytest.fixture
def stored_orders(repository):
    """Read back the rows of the orders table.

    Returns:
        Callable[[], dict[str, Order]]: Loads the stored orders keyed by order number.
    """

    def load():
        with Session(repository.engine) as session:
            records = session.scalars(select(OrderRecord)).all()
            return {record.order_number: record.to_order() for record in records}

    return load


@pytest.fixture
def publisher():
    """Event publisher that accepts every event."""
    return Mock()


@pytest.fixture
def order_service(inventory, repository, publisher):
    """Order service wired to the mocked gateway, SQLite store and mocked publisher."""
    return OrderService(inventory=inventory, store=repository, publisher=publisher)
