"""Azure AD token flow tests against a mocked token endpoint."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from DataLakeStore.errors import TokenAcquisitionError
from DataLakeStore.oauth2 import authenticator
from DataLakeStore.settings import TransportSettings

TOKEN_BODY = {"token_type": "Bearer", "expires_in": "3600", "access_token": "tok-123"}


def _token_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=TOKEN_BODY)


def _form(request: httpx.Request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode("utf-8")).items()}


def test_client_credentials_flow(mock_http, recording_handler):
    handler = recording_handler(_token_ok)

    token = authenticator.get_token_using_client_creds(
        "https://login.example/tenant/oauth2/token",
        "app-id",
        "s3cr3t&key",
        client=mock_http(handler),
    )

    request = handler.requests[0]
    assert token.access_token == "tok-123"
    assert request.method == "POST"
    assert str(request.url) == "https://login.example/tenant/oauth2/token"
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert _form(request) == {
        "resource": "https://datalake.azure.net/",
        "grant_type": "client_credentials",
        "client_id": "app-id",
        "client_secret": "s3cr3t&key",
    }


def test_msi_flow_default_port_and_metadata_header(mock_http, recording_handler):
    handler = recording_handler(_token_ok)

    authenticator.get_token_from_msi(client=mock_http(handler))

    request = handler.requests[0]
    assert str(request.url) == "http://localhost:50342/oauth2/token"
    assert request.headers["Metadata"] == "true"
    assert _form(request) == {"resource": "https://datalake.azure.net/"}


def test_msi_flow_with_port_and_tenant(mock_http, recording_handler):
    handler = recording_handler(_token_ok)

    authenticator.get_token_from_msi(8123, "tenant-guid", client=mock_http(handler))

    request = handler.requests[0]
    assert str(request.url) == "http://localhost:8123/oauth2/token"
    assert _form(request)["authority"] == "https://login.microsoftonline.com/tenant-guid"


def test_refresh_token_flow(mock_http, recording_handler):
    handler = recording_handler(_token_ok)

    authenticator.get_token_using_refresh_token("app-id", "refresh-1", client=mock_http(handler))

    request = handler.requests[0]
    assert str(request.url) == "https://login.microsoftonline.com/Common/oauth2/token"
    assert _form(request) == {
        "grant_type": "refresh_token",
        "refresh_token": "refresh-1",
        "client_id": "app-id",
    }


def test_refresh_token_flow_without_client_id(mock_http, recording_handler):
    handler = recording_handler(_token_ok)

    authenticator.get_token_using_refresh_token(None, "refresh-1", client=mock_http(handler))

    assert "client_id" not in _form(handler.requests[0])


def test_user_credentials_flow(mock_http, recording_handler):
    handler = recording_handler(_token_ok)

    authenticator.get_token_using_user_creds("app-id", "user@example.com", "pw", client=mock_http(handler))

    assert _form(handler.requests[0]) == {
        "grant_type": "password",
        "resource": "https://datalake.azure.net/",
        "scope": "openid",
        "client_id": "app-id",
        "username": "user@example.com",
        "password": "pw",
    }


def test_settings_override_endpoints(mock_http, recording_handler):
    handler = recording_handler(_token_ok)
    settings = TransportSettings(
        login_endpoint="https://login.sovereign.example/", resource="https://custom/"
    )

    authenticator.get_token_using_user_creds(
        "app-id", "u", "p", client=mock_http(handler), settings=settings
    )

    request = handler.requests[0]
    assert str(request.url) == "https://login.sovereign.example/Common/oauth2/token"
    assert _form(request)["resource"] == "https://custom/"


def test_environment_overrides_msi_port(mock_http, recording_handler, monkeypatch):
    monkeypatch.setenv("DATALAKESTORE_MSI_PORT", "6000")
    handler = recording_handler(_token_ok)

    authenticator.get_token_from_msi(client=mock_http(handler))

    assert handler.requests[0].url.port == 6000


def test_non_200_raises_with_status(mock_http, recording_handler):
    handler = recording_handler(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

    with pytest.raises(TokenAcquisitionError) as excinfo:
        authenticator.get_token_using_client_creds("https://login.example/t", "a", "b", client=mock_http(handler))

    assert excinfo.value.status_code == 400
    assert excinfo.value.reason == "Bad Request"
    assert "400 Bad Request" in str(excinfo.value)


def test_transport_error_is_wrapped(mock_http, recording_handler):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(TokenAcquisitionError) as excinfo:
        authenticator.get_token_from_msi(client=mock_http(recording_handler(refuse)))

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert isinstance(excinfo.value, OSError)


def test_secrets_are_masked_in_debug_log(mock_http, recording_handler, caplog):
    handler = recording_handler(_token_ok)

    with caplog.at_level("DEBUG", logger="DataLakeStore.oauth2.authenticator"):
        authenticator.get_token_using_client_creds(
            "https://login.example/t", "app-id", "very-secret", client=mock_http(handler)
        )

    post_records = [r for r in caplog.records if r.getMessage().startswith("AADToken: POST")]
    assert post_records
    assert post_records[0].extra_fields["client_secret"] == "***masked***"
    assert all("very-secret" not in r.getMessage() for r in caplog.records)
