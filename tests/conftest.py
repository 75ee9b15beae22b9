"""Shared fixtures: test settings and a recording stub payment provider."""

import asyncio
import itertools

import pytest

from paygate.common.config import CheckoutSettings
from paygate.services.provider_adapter.models import OrderRequest, ProviderResponse


class StubProvider:
    """In-memory `PaymentProvider` that records every call it receives.

    By default each operation answers with a body naming the operation and the
    identifier it was given; `create_order` issues sequential order ids.
    """

    def __init__(self, error: Exception | None = None, delay: float = 0.0, response: ProviderResponse | None = None):
        self.error = error
        self.delay = delay
        self.response = response
        self.calls: list[tuple[str, object]] = []
        self.closed = False
        self._order_ids = itertools.count(1)

    async def _answer(self, operation: str, argument, default: ProviderResponse) -> ProviderResponse:
        self.calls.append((operation, argument))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response or default

    async def create_order(self, order_request: OrderRequest) -> ProviderResponse:
        order_id = f"ORDER-{next(self._order_ids)}"
        return await self._answer(
            "create_order",
            order_request,
            ProviderResponse(status_code=201, body={"id": order_id, "status": "CREATED"}),
        )

    async def capture_order(self, order_id: str) -> ProviderResponse:
        return await self._answer(
            "capture_order",
            order_id,
            ProviderResponse(status_code=201, body={"id": order_id, "status": "COMPLETED"}),
        )

    async def authorize_order(self, order_id: str) -> ProviderResponse:
        return await self._answer(
            "authorize_order",
            order_id,
            ProviderResponse(status_code=201, body={"id": order_id, "intent": "AUTHORIZE"}),
        )

    async def capture_authorization(self, authorization_id: str) -> ProviderResponse:
        return await self._answer(
            "capture_authorization",
            authorization_id,
            ProviderResponse(status_code=201, body={"authorization_id": authorization_id, "status": "COMPLETED"}),
        )

    async def refund_capture(self, capture_id: str) -> ProviderResponse:
        return await self._answer(
            "refund_capture",
            capture_id,
            ProviderResponse(status_code=201, body={"capture_id": capture_id, "status": "COMPLETED"}),
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> CheckoutSettings:
    return CheckoutSettings(
        _env_file=None,
        paypal_client_id="test-client-id",
        paypal_client_secret="test-client-secret",
        upstream_timeout_seconds=2.0,
    )


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def provider_factory():
    """Build stub providers with custom errors, delays or responses."""

    return StubProvider
