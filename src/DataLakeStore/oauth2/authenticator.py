# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.oauth2.authenticator",
#   "purpose": "OAuth token acquisition flows against Azure AD and the MSI endpoint",
#   "sections": [
#     {
#       "id": "get-token-using-client-creds",
#       "name": "get_token_using_client_creds",
#       "anchor": "function-get-token-using-client-creds",
#       "kind": "function"
#     },
#     {
#       "id": "get-token-from-msi",
#       "name": "get_token_from_msi",
#       "anchor": "function-get-token-from-msi",
#       "kind": "function"
#     },
#     {
#       "id": "get-token-using-refresh-token",
#       "name": "get_token_using_refresh_token",
#       "anchor": "function-get-token-using-refresh-token",
#       "kind": "function"
#     },
#     {
#       "id": "get-token-using-user-creds",
#       "name": "get_token_using_user_creds",
#       "anchor": "function-get-token-using-user-creds",
#       "kind": "function"
#     },
#     {
#       "id": "get-token-call",
#       "name": "_get_token_call",
#       "anchor": "function-get-token-call",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Convenience flows for obtaining Azure AD tokens.

Each flow builds an ``application/x-www-form-urlencoded`` body, makes one
blocking POST to a token endpoint and decodes the JSON answer into an
:class:`~DataLakeStore.oauth2.token.AzureADToken`. Nothing is retried here;
every failure, HTTP or transport, surfaces as
:class:`~DataLakeStore.errors.TokenAcquisitionError` (an :class:`OSError`).

These helpers are optional: any other means of producing a bearer token can
feed the transport.

Example:
    >>> token = get_token_using_client_creds(
    ...     "https://login.microsoftonline.com/<tenant>/oauth2/token",
    ...     client_id="<app id>",
    ...     client_secret="<key>",
    ... )  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional

import httpx

from DataLakeStore.errors import TokenAcquisitionError
from DataLakeStore.logging_utils import mask_sensitive_data
from DataLakeStore.oauth2.token import AzureADToken, Clock, parse_token_from_stream
from DataLakeStore.query_params import QueryParams
from DataLakeStore.settings import TransportSettings, get_settings
from DataLakeStore.transport.streams import ResponseStream

LOGGER = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def get_token_using_client_creds(
    auth_endpoint: str,
    client_id: str,
    client_secret: str,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[TransportSettings] = None,
) -> AzureADToken:
    """Get a token for a service principal (an Azure AD web app) using its key.

    Args:
        auth_endpoint: OAuth 2.0 token endpoint of the user's directory.
        client_id: Application (client) id of the service principal.
        client_secret: Key of the service principal.
        client: Optional HTTPX client; a short-lived one is used otherwise.
        settings: Overrides the resource URI and timeout.

    Raises:
        TokenAcquisitionError: If the endpoint cannot be reached or refuses.
    """
    settings = settings or get_settings()
    form = QueryParams()
    form.add("resource", settings.resource)
    form.add("grant_type", "client_credentials")
    form.add("client_id", client_id)
    form.add("client_secret", client_secret)
    LOGGER.debug("AADToken: starting to fetch token using client creds for client ID %s", client_id)
    return _get_token_call(auth_endpoint, form, client=client, settings=settings)


def get_token_from_msi(
    local_port: int = 0,
    tenant_guid: Optional[str] = None,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[TransportSettings] = None,
) -> AzureADToken:
    """Get a token from the managed-identity endpoint of the local VM.

    Args:
        local_port: Port of the MSI endpoint; ``0`` or negative selects the
            configured default (50342).
        tenant_guid: Optional tenant whose authority is requested.

    Raises:
        TokenAcquisitionError: If the endpoint cannot be reached or refuses.
    """
    settings = settings or get_settings()
    if local_port <= 0:
        local_port = settings.msi_port
    auth_endpoint = f"http://localhost:{local_port}/oauth2/token"

    form = QueryParams()
    form.add("resource", settings.resource)
    if tenant_guid:
        form.add("authority", settings.authority_for_tenant(tenant_guid))

    LOGGER.debug("AADToken: starting to fetch token using MSI")
    return _get_token_call(
        auth_endpoint,
        form,
        headers={"Metadata": "true"},
        client=client,
        settings=settings,
    )


def get_token_using_refresh_token(
    client_id: Optional[str],
    refresh_token: str,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[TransportSettings] = None,
) -> AzureADToken:
    """Exchange a refresh token for a new access token at the common endpoint."""
    settings = settings or get_settings()
    form = QueryParams()
    form.add("grant_type", "refresh_token")
    form.add("refresh_token", refresh_token)
    if client_id is not None:
        form.add("client_id", client_id)
    LOGGER.debug("AADToken: starting to fetch token using refresh token for client ID %s", client_id)
    return _get_token_call(settings.common_token_endpoint, form, client=client, settings=settings)


def get_token_using_user_creds(
    client_id: str,
    username: str,
    password: str,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[TransportSettings] = None,
) -> AzureADToken:
    """Get a token with a user's name and password.

    Only works for identities Azure AD can authenticate directly (no
    federation, no multi-factor authentication). Meant for test accounts.
    """
    settings = settings or get_settings()
    form = QueryParams()
    form.add("grant_type", "password")
    form.add("resource", settings.resource)
    form.add("scope", "openid")
    form.add("client_id", client_id)
    form.add("username", username)
    form.add("password", password)
    LOGGER.debug("AADToken: starting to fetch token using username for user %s", username)
    return _get_token_call(settings.common_token_endpoint, form, client=client, settings=settings)


def _get_token_call(
    auth_endpoint: str,
    form: QueryParams,
    *,
    headers: Optional[Dict[str, str]] = None,
    client: Optional[httpx.Client] = None,
    settings: Optional[TransportSettings] = None,
    clock: Clock = time.time,
) -> AzureADToken:
    settings = settings or get_settings()
    request_headers = {"Content-Type": FORM_CONTENT_TYPE}
    request_headers.update(headers or {})
    LOGGER.debug(
        "AADToken: POST %s",
        auth_endpoint,
        extra={"extra_fields": mask_sensitive_data(dict(form.items()))},
    )

    owned = client is None
    http = client if client is not None else httpx.Client(timeout=settings.timeout_sec)
    try:
        response = http.send(
            http.build_request(
                "POST",
                auth_endpoint,
                content=form.serialize().encode("utf-8"),
                headers=request_headers,
            ),
            stream=True,
        )
        if response.status_code != 200:
            reason = response.reason_phrase
            response.close()
            LOGGER.debug(
                "AADToken: HTTP connection failed for getting token from AzureAD. "
                "Http response: %s %s",
                response.status_code,
                reason,
            )
            raise TokenAcquisitionError(
                "Failed to acquire token from AzureAD. Http response: "
                f"{response.status_code} {reason}",
                status_code=response.status_code,
                reason=reason,
            )
        return parse_token_from_stream(ResponseStream(response), clock=clock)
    except httpx.HTTPError as exc:
        raise TokenAcquisitionError(
            f"Failed to acquire token from AzureAD: {type(exc).__name__}: {exc}"
        ) from exc
    finally:
        if owned:
            http.close()


__all__ = [
    "FORM_CONTENT_TYPE",
    "get_token_from_msi",
    "get_token_using_client_creds",
    "get_token_using_refresh_token",
    "get_token_using_user_creds",
]
