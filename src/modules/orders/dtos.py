"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``OrderItemDTO``: a single line item as sent by the storefront.
- ``ShippingAddressDTO``: where the order goes.
- ``CreateOrderDTO``: input for order creation (nested items + address).
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import DEFAULT_ITEM_IMAGE, PaymentMethod


class OrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    quantity: int
    unit_price: Decimal
    image: str = DEFAULT_ITEM_IMAGE
    product_ref: str = Field(min_length=1)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity cannot be less than 1.")
        return v

    @field_validator("unit_price")
    @classmethod
    def price_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v


class ShippingAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    An empty ``items`` list is accepted here; the service rejects it with
    a domain ``ValidationError`` so the API answers with a plain message.
    ``email`` is only consulted for guest checkouts.
    """

    model_config = ConfigDict(frozen=True)

    items: List[OrderItemDTO]
    shipping_address: ShippingAddressDTO
    total_price: Decimal
    payment_method: str = PaymentMethod.PAYSTACK
    email: Optional[str] = None

    @field_validator("total_price")
    @classmethod
    def total_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Total price cannot be negative.")
        return v

    @field_validator("payment_method")
    @classmethod
    def payment_method_must_be_known(cls, v: str) -> str:
        if v not in PaymentMethod.values:
            raise ValueError(f"Unsupported payment method: {v}.")
        return v
