"""Transport settings tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from DataLakeStore.settings import LogLevel, TransportSettings, get_settings, reset_settings


def test_defaults():
    settings = TransportSettings()

    assert settings.timeout_sec == 60.0
    assert settings.scheme == "https"
    assert settings.msi_port == 50342
    assert settings.http2_enabled is False
    assert settings.latency_tracking_enabled is True
    assert settings.log_level is LogLevel.INFO
    assert settings.common_token_endpoint == "https://login.microsoftonline.com/Common/oauth2/token"
    assert settings.authority_for_tenant("t-1") == "https://login.microsoftonline.com/t-1"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATALAKESTORE_TIMEOUT_SEC", "15")
    monkeypatch.setenv("DATALAKESTORE_SCHEME", "HTTP")
    monkeypatch.setenv("DATALAKESTORE_LATENCY_TRACKING_ENABLED", "false")
    monkeypatch.setenv("DATALAKESTORE_LOGIN_ENDPOINT", "https://login.example/")

    settings = TransportSettings()

    assert settings.timeout_sec == 15.0
    assert settings.scheme == "http"
    assert settings.latency_tracking_enabled is False
    assert settings.login_endpoint == "https://login.example"


@pytest.mark.parametrize(
    "field,value",
    [("scheme", "ftp"), ("timeout_sec", 0), ("msi_port", 70000), ("max_connections", 0)],
)
def test_invalid_values_rejected(field, value):
    with pytest.raises(ValidationError):
        TransportSettings(**{field: value})


def test_get_settings_is_cached_until_reset(monkeypatch):
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("DATALAKESTORE_USER_AGENT", "custom/2")
    assert get_settings().user_agent != "custom/2"

    reset_settings()
    assert get_settings().user_agent == "custom/2"
