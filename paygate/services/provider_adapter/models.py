"""PayPal Orders v2 request models and the adapter's response value."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class Money(BaseModel):
    """Currency amount as PayPal expects it (decimal string value)."""

    currency_code: str = Field(min_length=3, max_length=3)
    value: str


class ShippingOption(BaseModel):
    id: str
    label: str
    selected: bool
    type: Literal["SHIPPING", "PICKUP"] = "SHIPPING"
    amount: Money


class ShippingDetails(BaseModel):
    options: list[ShippingOption] = Field(default_factory=list)


class PurchaseUnitRequest(BaseModel):
    amount: Money
    shipping: ShippingDetails | None = None


class CardVerification(BaseModel):
    method: Literal["SCA_WHEN_REQUIRED", "SCA_ALWAYS"] = "SCA_WHEN_REQUIRED"


class CardAttributes(BaseModel):
    verification: CardVerification


class CardRequest(BaseModel):
    attributes: CardAttributes


class PaymentSource(BaseModel):
    card: CardRequest


class OrderRequest(BaseModel):
    """Body of `POST /v2/checkout/orders`."""

    intent: Literal["CAPTURE", "AUTHORIZE"] = "CAPTURE"
    purchase_units: list[PurchaseUnitRequest] = Field(min_length=1)
    payment_source: PaymentSource | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ProviderResponse(BaseModel):
    """Status code and decoded JSON body of one successful PayPal call."""

    status_code: int
    body: dict[str, Any] = Field(default_factory=dict)
