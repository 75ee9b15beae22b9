"""Environment-driven settings for the checkout gateway.

The process builds one `CheckoutSettings` at startup and hands it to the app
factory. Missing PayPal credentials abort startup (see `.env.example`).
"""

from typing import Literal

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from paygate.common.errors import ConfigurationError


PAYPAL_BASE_URLS = {
    "sandbox": "https://api-m.sandbox.paypal.com",
    "live": "https://api-m.paypal.com",
}


class CheckoutSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "checkout-gateway"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    paypal_client_id: str = Field(min_length=1)
    paypal_client_secret: SecretStr
    paypal_environment: Literal["sandbox", "live"] = "sandbox"
    paypal_base_url: str | None = None
    upstream_timeout_seconds: float = Field(default=30.0, gt=0)
    order_currency_code: str = Field(default="USD", min_length=3, max_length=3)
    order_amount_value: str = "100"
    card_sca_when_required: bool = False
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("paypal_client_secret")
    @classmethod
    def _secret_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("must not be empty")
        return value

    @property
    def resolved_paypal_base_url(self) -> str:
        return self.paypal_base_url or PAYPAL_BASE_URLS[self.paypal_environment]


def load_settings(**overrides) -> CheckoutSettings:
    """Build settings, turning validation failures into one startup error."""

    try:
        return CheckoutSettings(**overrides)
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]).upper() for err in exc.errors() if err["loc"]})
        raise ConfigurationError(fields) from exc
