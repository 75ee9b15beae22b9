"""Browser-facing checkout API.

Five POST routes relay to PayPal through one shared provider client. The app is
built by `create_app` from an explicit settings object; `run` is the console
entrypoint and refuses to start without PayPal credentials.
"""

import sys
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from paygate.common.config import CheckoutSettings, load_settings
from paygate.common.errors import ClientInputError, ConfigurationError
from paygate.common.logging import configure_logging, logger, trace_id_ctx
from paygate.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from paygate.common.startup import log_startup_config
from paygate.common.tracing import instrument_app, setup_tracing
from paygate.services.checkout.schemas import CreateOrderRequest, GatewayResponse, RefundCaptureRequest
from paygate.services.checkout.service import CheckoutService
from paygate.services.provider_adapter.interface import PaymentProvider
from paygate.services.provider_adapter.service import PayPalClient

# Metrics route label for requests that matched no route.
UNMATCHED_ROUTE = "unmatched"

STARTUP_KEYS = [
    "paypal_client_id",
    "paypal_client_secret",
    "paypal_environment",
    "host",
    "port",
    "upstream_timeout_seconds",
    "otel_exporter_otlp_endpoint",
]


def _field_from_validation(exc: RequestValidationError) -> str:
    """Name the first offending body field, e.g. `capturedPaymentId`."""

    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        if loc:
            return ".".join(loc)
    return "body"


def _relay_response(result: GatewayResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body)


def create_app(settings: CheckoutSettings, provider: PaymentProvider | None = None) -> FastAPI:
    """Build the gateway app around one provider shared by all requests."""

    owns_provider = provider is None
    if provider is None:
        provider = PayPalClient.from_settings(settings)
    service = CheckoutService(provider, settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        """Close the provider's HTTP pool on shutdown."""

        yield
        if owns_provider:
            await provider.close()

    app = FastAPI(title="Checkout Gateway", lifespan=lifespan)
    app.state.settings = settings
    app.state.checkout = service
    instrument_app(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Tag the request with a trace id and record count and latency."""

        trace_id_ctx.set(request.headers.get("x-correlation-id") or str(uuid4()))
        start = perf_counter()
        route = UNMATCHED_ROUTE
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    @app.exception_handler(ClientInputError)
    async def client_input_error_handler(_: Request, exc: ClientInputError):
        logger.warning("rejected request field=%s: %s", exc.field, exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message, "field": exc.field})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        field = _field_from_validation(exc)
        return await client_input_error_handler(request, ClientInputError(field))

    @app.post("/api/orders")
    async def create_order(req: CreateOrderRequest | None = None):
        """Create an order; the cart is accepted but the demo amount is charged."""

        cart = req.cart if req is not None else None
        return _relay_response(await service.create_order(cart))

    @app.post("/api/orders/{order_id}/capture")
    async def capture_order(order_id: str):
        """Capture payment for an approved order."""

        return _relay_response(await service.capture_order(order_id))

    @app.post("/api/orders/{order_id}/authorize")
    async def authorize_order(order_id: str):
        """Authorize payment for an approved order."""

        return _relay_response(await service.authorize_order(order_id))

    @app.post("/api/orders/{authorization_id}/captureAuthorize")
    async def capture_authorization(authorization_id: str):
        """Capture a previously authorized payment."""

        return _relay_response(await service.capture_authorization(authorization_id))

    @app.post("/api/payments/refund")
    async def refund_capture(req: RefundCaptureRequest):
        """Refund a captured payment."""

        return _relay_response(await service.refund_capture(req.captured_payment_id))

    @app.get("/")
    def index():
        """Liveness message for the sample front-ends."""

        return {"message": "Server is running"}

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    return app


def app_factory() -> FastAPI:
    """`uvicorn --factory` entrypoint; raises `ConfigurationError` without credentials."""

    settings = load_settings()
    configure_logging(settings.log_level, settings.service_name)
    setup_tracing(settings.service_name, settings.otel_exporter_otlp_endpoint)
    log_startup_config(settings, STARTUP_KEYS)
    return create_app(settings)


def run() -> None:
    """Console entrypoint: fail fast on bad config, otherwise serve with uvicorn."""

    configure_logging()
    try:
        app = app_factory()
    except ConfigurationError as exc:
        logger.critical("refusing to start: %s", exc)
        sys.exit(1)
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
