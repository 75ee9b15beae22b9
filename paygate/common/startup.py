"""Startup-time helpers for safe config logging."""

from pydantic import SecretStr

from paygate.common.config import CheckoutSettings
from paygate.common.logging import logger


SECRET_MARKERS = ["KEY", "SECRET", "PASSWORD", "TOKEN"]


def _safe_value(name: str, value) -> str:
    """Render a setting value, redacting secrets and secret-like names."""

    if value is None:
        return "<unset>"
    if isinstance(value, SecretStr) or any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    return str(value)


def startup_config(settings: CheckoutSettings, keys: list[str]) -> dict[str, str]:
    config = {"service": settings.service_name}
    for key in keys:
        config[key.upper()] = _safe_value(key, getattr(settings, key, None))
    return config


def log_startup_config(settings: CheckoutSettings, keys: list[str]) -> None:
    """Log selected settings for quick troubleshooting."""

    logger.info("startup_config=%s", startup_config(settings, keys))
