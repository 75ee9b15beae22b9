"""PayPal REST adapter for Orders v2 and Payments v2.

One `PayPalClient` is built at process start and shared by every request. It
holds a single `httpx.AsyncClient` and the current OAuth2 bearer token; nothing
else is kept between calls.
"""

import asyncio
import time
from typing import Any
from urllib.parse import quote

import httpx

from paygate.common.config import CheckoutSettings
from paygate.common.errors import UpstreamApiError, UpstreamError
from paygate.common.logging import logger
from paygate.services.provider_adapter.models import OrderRequest, ProviderResponse

# Refresh the bearer token this long before PayPal says it expires.
TOKEN_EXPIRY_MARGIN_SECONDS = 60


def _path_id(value: str) -> str:
    return quote(value, safe="")


class PayPalClient:
    """`PaymentProvider` implementation over PayPal's REST API."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self._client_secret = client_secret
        self.http = httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds, transport=transport)
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: CheckoutSettings) -> "PayPalClient":
        return cls(
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret.get_secret_value(),
            base_url=settings.resolved_paypal_base_url,
            timeout_seconds=settings.upstream_timeout_seconds,
        )

    async def close(self) -> None:
        await self.http.aclose()

    def _decode(self, operation: str, resp: httpx.Response) -> dict[str, Any]:
        """Parse a PayPal reply body; empty bodies become `{}`."""

        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamError(operation, f"non-JSON response status={resp.status_code}") from exc
        if not isinstance(body, dict):
            raise UpstreamError(operation, f"unexpected JSON type {type(body).__name__}")
        return body

    async def _access_token(self) -> str:
        """Return a cached client-credentials token, fetching one when needed."""

        async with self._token_lock:
            if self._token is not None and time.monotonic() < self._token_expires_at:
                return self._token
            try:
                resp = await self.http.post(
                    "/v1/oauth2/token",
                    data={"grant_type": "client_credentials"},
                    auth=(self.client_id, self._client_secret),
                )
            except httpx.HTTPError as exc:
                raise UpstreamError("oauth2_token", f"{type(exc).__name__}: {exc}") from exc
            body = self._decode("oauth2_token", resp)
            if resp.status_code >= 400 or "access_token" not in body:
                raise UpstreamApiError(
                    "oauth2_token",
                    resp.status_code,
                    name=body.get("error"),
                    debug_id=resp.headers.get("paypal-debug-id"),
                )
            expires_in = int(body.get("expires_in", 0))
            self._token = body["access_token"]
            self._token_expires_at = time.monotonic() + max(0, expires_in - TOKEN_EXPIRY_MARGIN_SECONDS)
            logger.info("paypal token acquired expires_in=%s", expires_in)
            return self._token

    async def _post(self, operation: str, path: str, payload: dict[str, Any] | None = None) -> ProviderResponse:
        """Send one authenticated POST and map the reply to a response or error."""

        token = await self._access_token()
        logger.debug("paypal request operation=%s path=%s body=%s", operation, path, payload)
        try:
            resp = await self.http.post(
                path,
                json=payload or {},
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.TimeoutException as exc:
            raise UpstreamError(operation, "timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(operation, f"{type(exc).__name__}: {exc}") from exc

        debug_id = resp.headers.get("paypal-debug-id")
        logger.info(
            "paypal response operation=%s status=%s debug_id=%s",
            operation,
            resp.status_code,
            debug_id,
        )
        body = self._decode(operation, resp)
        if resp.status_code >= 400:
            raise UpstreamApiError(
                operation,
                resp.status_code,
                name=body.get("name"),
                debug_id=body.get("debug_id") or debug_id,
                body=body,
            )
        return ProviderResponse(status_code=resp.status_code, body=body)

    async def create_order(self, order_request: OrderRequest) -> ProviderResponse:
        return await self._post("create_order", "/v2/checkout/orders", order_request.to_payload())

    async def capture_order(self, order_id: str) -> ProviderResponse:
        return await self._post("capture_order", f"/v2/checkout/orders/{_path_id(order_id)}/capture")

    async def authorize_order(self, order_id: str) -> ProviderResponse:
        return await self._post("authorize_order", f"/v2/checkout/orders/{_path_id(order_id)}/authorize")

    async def capture_authorization(self, authorization_id: str) -> ProviderResponse:
        return await self._post(
            "capture_authorization",
            f"/v2/payments/authorizations/{_path_id(authorization_id)}/capture",
        )

    async def refund_capture(self, capture_id: str) -> ProviderResponse:
        return await self._post("refund_capture", f"/v2/payments/captures/{_path_id(capture_id)}/refund")
