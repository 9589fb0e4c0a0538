"""Pydantic models for order requests, persisted orders and placement events."""

import uuid
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CustomerDetails(BaseModel):
    """Contact details of the customer, used only for downstream notification.

    Attributes:
        email (str | None): Customer email address.
        first_name (str | None): Customer first name.
        last_name (str | None): Customer last name.
    """

    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderRequest(BaseModel):
    """Incoming request to place an order.

    SKU code and quantity are optional here so that the order service can
    reject them with a readable reason instead of a schema error.

    Attributes:
        sku_code (str | None): Stock Keeping Unit identifier of the product.
        quantity (int | None): Number of units ordered.
        price (Decimal | None): Price of the order, kept at full precision.
        user_details (CustomerDetails | None): Customer to notify.
    """

    sku_code: Optional[str] = None
    quantity: Optional[int] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    user_details: Optional[CustomerDetails] = Field(
        default=None,
        validation_alias=AliasChoices("userDetails", "customer", "user_details"),
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "properties": {
                "skuCode": {"example": "iphone_15"},
                "quantity": {"example": 1},
                "price": {"example": 999.99},
                "userDetails": {
                    "example": {"email": "a@b.com", "firstName": "A", "lastName": "B"},
                },
            }
        },
    )


class Order(BaseModel):
    """An order as written to the order store.

    Attributes:
        id (int | None): Store-assigned identifier, None until saved.
        order_number (str): Globally unique order number.
        sku_code (str): SKU copied from the request.
        quantity (int): Quantity copied from the request.
        price (Decimal | None): Price copied from the request.
    """

    id: Optional[int] = None
    order_number: str
    sku_code: str
    quantity: int
    price: Optional[Decimal] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_request(cls, request: OrderRequest) -> "Order":
        """Build a new unsaved order with a fresh random order number."""
        return cls(
            order_number=str(uuid.uuid4()),
            sku_code=request.sku_code,
            quantity=request.quantity,
            price=request.price,
        )


class OrderPlacedEvent(BaseModel):
    """Event announcing that an order was durably placed."""

    order_number: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @classmethod
    def from_order(cls, order: Order, customer: Optional[CustomerDetails]) -> "OrderPlacedEvent":
        customer = customer or CustomerDetails()
        return cls(
            order_number=order.order_number,
            email=customer.email,
            first_name=customer.first_name,
            last_name=customer.last_name,
        )

    def to_json(self) -> str:
        """Serialize with camelCase keys, as consumers of the topic expect."""
        return self.model_dump_json(by_alias=True)
