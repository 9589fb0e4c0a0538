"""Client for the inventory service stock check."""

from typing import Optional, Protocol

import requests

from .errors import InventoryUnavailable
from .logger import logger


class InventoryGateway(Protocol):
    """Protocol for anything that can answer whether a product is in stock."""

    def is_in_stock(self, sku_code: str, quantity: int, timeout: Optional[float] = None) -> bool:
        """Check whether the given quantity of a product is available.

        Args:
            sku_code: SKU of the product
            quantity: Number of units requested
            timeout: Optional upper bound in seconds for the check

        Returns:
            bool: True if the quantity is available, False otherwise

        Raises:
            InventoryUnavailable: If the inventory authority cannot be reached
        """
        ...


class InventoryClient:
    """HTTP client for the inventory service.

    Attributes:
        base_url: Base URL of the inventory service.
        timeout: Default request timeout in seconds.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        """Initialize the client.

        Args:
            base_url: Base URL of the inventory service, e.g. http://inventory-service:8082
            timeout: Default request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def is_in_stock(self, sku_code: str, quantity: int, timeout: Optional[float] = None) -> bool:
        """Ask the inventory service whether a product is in stock.

        Args:
            sku_code: SKU of the product
            quantity: Number of units requested
            timeout: Optional timeout overriding the client default

        Returns:
            bool: The inventory service's answer

        Raises:
            InventoryUnavailable: On connection errors, timeouts, non-2xx
                responses or a body that is not a JSON boolean
        """
        url = f"{self.base_url}/api/inventory"
        try:
            response = self._session.get(
                url,
                params={"skuCode": sku_code, "quantity": quantity},
                timeout=timeout if timeout is not None else self.timeout,
            )
            response.raise_for_status()
            in_stock = response.json()
        except requests.JSONDecodeError as e:
            raise InventoryUnavailable(f"Inventory service returned an invalid body: {e}") from e
        except requests.RequestException as e:
            logger.error(f"Inventory check failed for {sku_code}: {e}")
            raise InventoryUnavailable(f"Inventory service unavailable: {e}") from e

        if not isinstance(in_stock, bool):
            raise InventoryUnavailable(f"Inventory service returned a non-boolean answer: {in_stock!r}")

        logger.debug(f"Inventory check for {quantity}x {sku_code}: {in_stock}")
        return in_stock
