"""Checkout gateway operations.

Each operation makes exactly one upstream call and either passes the upstream
status code and body through unchanged or collapses the failure into a fixed
500 message. Upstream error details stay in the server log.
"""

import asyncio
from time import perf_counter
from typing import Any

from paygate.common.config import CheckoutSettings
from paygate.common.errors import UpstreamApiError
from paygate.common.logging import logger, operation_ctx, resource_id_ctx
from paygate.common.metrics import provider_latency_seconds, provider_requests_total
from paygate.services.checkout.schemas import GatewayResponse
from paygate.services.provider_adapter.interface import PaymentProvider
from paygate.services.provider_adapter.models import (
    CardAttributes,
    CardRequest,
    CardVerification,
    Money,
    OrderRequest,
    PaymentSource,
    PurchaseUnitRequest,
    ShippingDetails,
    ShippingOption,
)

ERROR_MESSAGES = {
    "create_order": "Failed to create order.",
    "capture_order": "Failed to capture order.",
    "authorize_order": "Failed to authorize order.",
    "capture_authorization": "Failed to capture authorization.",
    "refund_capture": "Failed refund capture.",
}


def build_order_request(cart: Any, settings: CheckoutSettings) -> OrderRequest:
    """Build the demo order: fixed amount, two shipping options, the first selected.

    The cart is not priced here; see DESIGN.md for the open question.
    """

    currency = settings.order_currency_code
    payment_source = None
    if settings.card_sca_when_required:
        payment_source = PaymentSource(
            card=CardRequest(attributes=CardAttributes(verification=CardVerification()))
        )
    return OrderRequest(
        intent="CAPTURE",
        purchase_units=[
            PurchaseUnitRequest(
                amount=Money(currency_code=currency, value=settings.order_amount_value),
                shipping=ShippingDetails(
                    options=[
                        ShippingOption(
                            id="1",
                            label="Free Shipping",
                            selected=True,
                            type="SHIPPING",
                            amount=Money(currency_code=currency, value="0"),
                        ),
                        ShippingOption(
                            id="2",
                            label="USPS Priority Shipping",
                            selected=False,
                            type="SHIPPING",
                            amount=Money(currency_code=currency, value="5"),
                        ),
                    ]
                ),
            )
        ],
        payment_source=payment_source,
    )


class CheckoutService:
    """Relays checkout operations to the payment provider."""

    def __init__(self, provider: PaymentProvider, settings: CheckoutSettings) -> None:
        self.provider = provider
        self.settings = settings

    def _failure(self, operation: str) -> GatewayResponse:
        return GatewayResponse(status_code=500, body={"error": ERROR_MESSAGES[operation]})

    async def _relay(self, operation: str, call, resource_id: str = "") -> GatewayResponse:
        """Await one upstream call under the configured timeout and map the outcome."""

        operation_ctx.set(operation)
        resource_id_ctx.set(resource_id)
        service = self.settings.service_name
        outcome = "error"
        start = perf_counter()
        try:
            result = await asyncio.wait_for(call, timeout=self.settings.upstream_timeout_seconds)
            outcome = "success"
            return GatewayResponse(status_code=result.status_code, body=result.body)
        except asyncio.TimeoutError:
            outcome = "timeout"
            logger.error(
                "upstream timeout operation=%s resource_id=%s timeout_s=%s",
                operation,
                resource_id,
                self.settings.upstream_timeout_seconds,
            )
            return self._failure(operation)
        except UpstreamApiError as exc:
            outcome = "api_error"
            logger.error(
                "upstream rejected operation=%s resource_id=%s status=%s name=%s debug_id=%s",
                operation,
                resource_id,
                exc.status_code,
                exc.name,
                exc.debug_id,
            )
            return self._failure(operation)
        except Exception as exc:
            logger.exception("upstream call failed operation=%s resource_id=%s: %s", operation, resource_id, exc)
            return self._failure(operation)
        finally:
            provider_latency_seconds.labels(service=service, operation=operation).observe(
                max(0.0, perf_counter() - start)
            )
            provider_requests_total.labels(service=service, operation=operation, outcome=outcome).inc()

    async def create_order(self, cart: Any = None) -> GatewayResponse:
        cart_items = len(cart) if isinstance(cart, list) else None
        logger.info("create order requested cart_items=%s", cart_items)
        order_request = build_order_request(cart, self.settings)
        return await self._relay("create_order", self.provider.create_order(order_request))

    async def capture_order(self, order_id: str) -> GatewayResponse:
        return await self._relay("capture_order", self.provider.capture_order(order_id), order_id)

    async def authorize_order(self, order_id: str) -> GatewayResponse:
        return await self._relay("authorize_order", self.provider.authorize_order(order_id), order_id)

    async def capture_authorization(self, authorization_id: str) -> GatewayResponse:
        return await self._relay(
            "capture_authorization",
            self.provider.capture_authorization(authorization_id),
            authorization_id,
        )

    async def refund_capture(self, capture_id: str) -> GatewayResponse:
        return await self._relay("refund_capture", self.provider.refund_capture(capture_id), capture_id)
