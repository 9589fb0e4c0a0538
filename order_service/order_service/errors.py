"""Typed failures of order placement."""


class PlacementError(Exception):
    """Base class for every reason an order could not be placed.

    Attributes:
        kind: Short machine-readable name of the failure.
        reason: Human-readable explanation, safe to return to clients.
    """

    kind = "placement_error"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason

    def __eq__(self, other):
        return type(self) is type(other) and self.reason == other.reason

    def __hash__(self):
        return hash((type(self), self.reason))

    def __repr__(self):
        return f"{type(self).__name__}({self.reason!r})"


class InvalidRequest(PlacementError):
    """The request is missing required data. Nothing was called downstream."""

    kind = "invalid_request"


class InventoryUnavailable(PlacementError):
    """The inventory service could not be reached or gave an unusable answer."""

    kind = "inventory_unavailable"


class OutOfStock(PlacementError):
    """The inventory service reported the product as unavailable."""

    kind = "out_of_stock"

    def __init__(self, sku_code: str):
        super().__init__(f"Product with SKU Code {sku_code} is not in stock.")
        self.sku_code = sku_code


class PersistenceFailed(PlacementError):
    """The order could not be written to the order store."""

    kind = "persistence_failed"


class PlacementTimeout(PlacementError):
    """The caller's deadline passed before a step could start."""

    kind = "timeout"
