"""Order placement: validate, check stock, persist, then announce."""

from dataclasses import dataclass
from time import monotonic
from typing import Optional

from .errors import (
    InvalidRequest,
    InventoryUnavailable,
    OutOfStock,
    PersistenceFailed,
    PlacementError,
    PlacementTimeout,
)
from .inventory import InventoryGateway
from .logger import logger
from .producer import ORDER_PLACED_TOPIC, EventPublisher
from .repository import OrderStore
from .schemas import Order, OrderPlacedEvent, OrderRequest


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of a placement attempt.

    Attributes:
        order: The saved order when placement succeeded.
        error: The reason placement failed, None on success.
    """

    order: Optional[Order] = None
    error: Optional[PlacementError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, order: Order) -> "PlacementResult":
        return cls(order=order)

    @classmethod
    def failure(cls, error: PlacementError) -> "PlacementResult":
        return cls(error=error)


def validate_request(request: Optional[OrderRequest]) -> None:
    """Check the preconditions of placement, stopping at the first violation.

    Raises:
        InvalidRequest: With a reason naming the violated precondition
    """
    if request is None:
        raise InvalidRequest("Order request must not be empty.")
    if request.sku_code is None or not request.sku_code.strip():
        raise InvalidRequest("SKU Code must not be null or empty.")
    if request.quantity is None:
        raise InvalidRequest("Quantity must not be null.")
    if request.quantity <= 0:
        raise InvalidRequest("Quantity must be greater than zero.")


def _remaining(deadline: Optional[float], step: str) -> Optional[float]:
    """Seconds left before the deadline, raising if it has already passed."""
    if deadline is None:
        return None
    remaining = deadline - monotonic()
    if remaining <= 0:
        raise PlacementTimeout(f"Deadline expired before {step}.")
    return remaining


class OrderService:
    """Places orders against injected inventory, storage and event collaborators.

    The service holds no per-request state, so one instance can serve
    concurrent requests.
    """

    def __init__(self, inventory: InventoryGateway, store: OrderStore, publisher: EventPublisher):
        self.inventory = inventory
        self.store = store
        self.publisher = publisher

    def place_order(self, request: Optional[OrderRequest], deadline: Optional[float] = None) -> PlacementResult:
        """Place an order.

        Nothing is written or published unless the product is in stock. Once
        the order is saved the placement counts as successful, even if the
        event cannot be published.

        Args:
            request: The order request
            deadline: Optional absolute time.monotonic() value; steps that have
                not started by then are skipped

        Returns:
            PlacementResult: The saved order, or the error that stopped placement
        """
        try:
            order = self._persist_if_in_stock(request, deadline)
        except PlacementError as e:
            logger.warning(f"Order rejected: {e.kind}: {e.reason}")
            return PlacementResult.failure(e)

        self._announce(order, request)
        return PlacementResult.success(order)

    def _persist_if_in_stock(self, request: Optional[OrderRequest], deadline: Optional[float]) -> Order:
        validate_request(request)

        timeout = _remaining(deadline, "stock check")
        try:
            in_stock = self.inventory.is_in_stock(request.sku_code, request.quantity, timeout=timeout)
        except PlacementError:
            raise
        except Exception as e:
            raise InventoryUnavailable(f"Inventory check failed: {e}") from e
        if not in_stock:
            raise OutOfStock(request.sku_code)

        order = Order.from_request(request)

        _remaining(deadline, "persisting the order")
        try:
            saved = self.store.save(order)
        except PersistenceFailed:
            raise
        except Exception as e:
            raise PersistenceFailed(f"Could not save order {order.order_number}: {e}") from e

        logger.info(f"Order {saved.order_number} saved for {saved.quantity}x {saved.sku_code}")
        return saved

    def _announce(self, order: Order, request: OrderRequest) -> None:
        event = OrderPlacedEvent.from_order(order, request.user_details)
        logger.info(f"Start - Sending OrderPlacedEvent {event.order_number} to Kafka topic {ORDER_PLACED_TOPIC}")
        try:
            self.publisher.publish(ORDER_PLACED_TOPIC, event)
        except Exception as e:
            logger.opt(exception=e).error(f"Failed to publish OrderPlacedEvent {event.order_number}: {e}")
            return
        logger.info(f"End - Sending OrderPlacedEvent {event.order_number} to Kafka topic {ORDER_PLACED_TOPIC}")
