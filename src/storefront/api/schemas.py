"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the internal Protean
commands. Business rules (empty cart, quantities, reason length) are left to
the domain so they surface as 400s with the domain's messages.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = 1
    weight: str | None = None


class PlaceOrderRequest(BaseModel):
    items: list[OrderItemRequest]
    shipping_address_id: str
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2, "weight": "500g"}],
                    "shipping_address_id": "addr-001",
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class ShipOrderRequest(BaseModel):
    tracking_number: str


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(BaseModel):
    order_id: str


class PaymentIntentResponse(BaseModel):
    intent_id: str
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str


class ConfirmPaymentRequest(BaseModel):
    """The three values the gateway's checkout widget hands back to the browser."""

    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class ConfirmPaymentResponse(BaseModel):
    order_id: str
    status: str


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Gateway unavailable"


# ---------------------------------------------------------------------------
# Refunds
# ---------------------------------------------------------------------------
class RequestRefundRequest(BaseModel):
    order_id: str
    reason: str
    kind: str = "Refund"
    description: str | None = None


class ProcessRefundRequest(BaseModel):
    action: str
    notes: str | None = None


# ---------------------------------------------------------------------------
# Products and addresses
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    sku: str
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    weight: str | None = None
    description: str | None = None


class RestockRequest(BaseModel):
    quantity: int


class StockResponse(BaseModel):
    product_id: str
    name: str
    stock: int
    is_active: bool


class AddressRequest(BaseModel):
    name: str
    phone: str | None = None
    line1: str
    line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str | None = None


# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class MarkAllReadResponse(BaseModel):
    updated: int
