"""API request/response schemas for checkout endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class CreateOrderRequest(BaseModel):
    """Payload accepted by `POST /api/orders`.

    The cart is opaque: any JSON value passes through untouched.
    """

    cart: Any = None


class RefundCaptureRequest(BaseModel):
    """Payload accepted by `POST /api/payments/refund`."""

    captured_payment_id: str = Field(alias="capturedPaymentId", min_length=1)


class GatewayResponse(BaseModel):
    """Status code and JSON body returned to the browser."""

    status_code: int
    body: dict[str, Any]
