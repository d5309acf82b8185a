from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from models.order import OrderStatus, PaymentStatus, PaymentMethod


# Structured shipping address; every field is required and non-blank
class ShippingAddress(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    street: str
    city: str
    state: str
    postal_code: str
    country: str

    @field_validator("first_name", "last_name", "street", "city", "state", "postal_code", "country")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


# One line of an order request, copied by value into the order
class OrderLineIn(BaseModel):
    product_id: int
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)
    image: Optional[str] = None


# Checkout submission. Client-side subtotal/total fields are ignored.
class OrderCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lines: List[OrderLineIn] = Field(min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    notes: Optional[str] = Field(default=None, max_length=2000)


# Checkout from the session cart: the lines come from the cart itself
class CheckoutPayload(BaseModel):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    notes: Optional[str] = Field(default=None, max_length=2000)


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: str
    price: float
    quantity: int
    image: Optional[str] = None
    line_total: float


class ShippingAddressOut(BaseModel):
    first_name: str
    last_name: str
    email: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str


# Output schema representing the full order details
class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    user_id: int
    items: List[OrderItemOut]
    shipping_address: ShippingAddressOut
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    order_status: OrderStatus
    subtotal: float
    shipping: float
    tax: float
    total: float
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


class ShipPayload(BaseModel):
    tracking_number: str = Field(min_length=1, max_length=64)


class PaymentStatusPatch(BaseModel):
    status: str


class PaymentAttempt(BaseModel):
    # Simulated gateway outcome; a real gateway would decide this
    succeed: bool = True
