"""Replaceable payment-provider protocol the checkout gateway depends on."""

from typing import Protocol, runtime_checkable

from paygate.services.provider_adapter.models import OrderRequest, ProviderResponse


@runtime_checkable
class PaymentProvider(Protocol):
    """Five upstream operations, one HTTP call each.

    Implementations return the upstream status code and JSON body on success
    and raise `UpstreamError` (or `UpstreamApiError`) on any failure.
    """

    async def create_order(self, order_request: OrderRequest) -> ProviderResponse: ...

    async def capture_order(self, order_id: str) -> ProviderResponse: ...

    async def authorize_order(self, order_id: str) -> ProviderResponse: ...

    async def capture_authorization(self, authorization_id: str) -> ProviderResponse: ...

    async def refund_capture(self, capture_id: str) -> ProviderResponse: ...

    async def close(self) -> None: ...
