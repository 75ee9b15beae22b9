"""Startup configuration: fail fast without credentials, redact secrets."""

import pytest

from paygate.common.config import load_settings
from paygate.common.errors import ConfigurationError
from paygate.common.startup import startup_config
from paygate.services.checkout import main


@pytest.fixture
def bare_env(monkeypatch, tmp_path):
    """No PayPal credentials in the environment and no `.env` file in cwd."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PAYPAL_CLIENT_ID", raising=False)
    monkeypatch.delenv("PAYPAL_CLIENT_SECRET", raising=False)


def test_missing_credentials_raise_configuration_error(bare_env):
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings()

    assert excinfo.value.fields == ["PAYPAL_CLIENT_ID", "PAYPAL_CLIENT_SECRET"]


def test_empty_credentials_are_rejected(bare_env, monkeypatch):
    monkeypatch.setenv("PAYPAL_CLIENT_ID", "")
    monkeypatch.setenv("PAYPAL_CLIENT_SECRET", "")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_settings_read_from_environment(bare_env, monkeypatch):
    monkeypatch.setenv("PAYPAL_CLIENT_ID", "env-client")
    monkeypatch.setenv("PAYPAL_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("PORT", "9090")

    settings = load_settings()

    assert settings.paypal_client_id == "env-client"
    assert settings.paypal_client_secret.get_secret_value() == "env-secret"
    assert settings.port == 9090
    assert settings.resolved_paypal_base_url == "https://api-m.sandbox.paypal.com"


def test_run_exits_before_binding_without_credentials(bare_env, monkeypatch):
    """The server never starts listening when credentials are absent."""

    served = []
    monkeypatch.setattr(main.uvicorn, "run", lambda *args, **kwargs: served.append(args))

    with pytest.raises(SystemExit) as excinfo:
        main.run()

    assert excinfo.value.code == 1
    assert served == []


def test_run_serves_with_configured_port(bare_env, monkeypatch):
    monkeypatch.setenv("PAYPAL_CLIENT_ID", "env-client")
    monkeypatch.setenv("PAYPAL_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("PORT", "9191")
    served = {}

    def fake_run(app, host, port, log_config):
        served.update(app=app, host=host, port=port)

    monkeypatch.setattr(main.uvicorn, "run", fake_run)

    main.run()

    assert served["port"] == 9191
    assert served["app"].state.settings.paypal_client_id == "env-client"


def test_startup_config_redacts_secret(settings):
    config = startup_config(settings, ["paypal_client_id", "paypal_client_secret", "otel_exporter_otlp_endpoint"])

    assert config == {
        "service": "checkout-gateway",
        "PAYPAL_CLIENT_ID": "test-client-id",
        "PAYPAL_CLIENT_SECRET": "<redacted>",
        "OTEL_EXPORTER_OTLP_ENDPOINT": "<unset>",
    }
