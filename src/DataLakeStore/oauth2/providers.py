"""Caller-side token providers that cache and refresh Azure AD tokens.

The transport itself never caches tokens; it calls the account's token
accessor once per attempt. These providers are ready-made accessors: each
keeps the last token and fetches a new one through the matching flow in
:mod:`DataLakeStore.oauth2.authenticator` when the cached token is missing or
about to expire.

Usage::

    provider = ClientCredsTokenProvider(endpoint, client_id, client_secret)
    account = StoreAccount("contoso.azuredatalakestore.net", provider.authorization_header)
"""

from __future__ import annotations

import abc
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from DataLakeStore.oauth2 import authenticator
from DataLakeStore.oauth2.token import AzureADToken

LOGGER = logging.getLogger(__name__)

#: Tokens are refreshed this many seconds before they expire
DEFAULT_REFRESH_WINDOW_SECONDS = 5 * 60

Now = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessTokenProvider(abc.ABC):
    """Return a valid token, refreshing it under a lock when needed."""

    def __init__(
        self,
        *,
        refresh_window_seconds: float = DEFAULT_REFRESH_WINDOW_SECONDS,
        now: Now = _utcnow,
    ) -> None:
        self._token: Optional[AzureADToken] = None
        self._lock = threading.Lock()
        self._refresh_window = refresh_window_seconds
        self._now = now

    def get_token(self) -> AzureADToken:
        with self._lock:
            token = self._token
            if token is None or token.expires_within(self._refresh_window, now=self._now()):
                LOGGER.debug("AADToken: refreshing token from %s", type(self).__name__)
                token = self.refresh_token()
                self._token = token
            return token

    def authorization_header(self) -> str:
        """Value for the ``Authorization`` header: ``Bearer <token>``."""
        return self.get_token().authorization_header

    def invalidate(self) -> None:
        """Forget the cached token so the next call fetches a fresh one."""
        with self._lock:
            self._token = None

    @abc.abstractmethod
    def refresh_token(self) -> AzureADToken:
        """Fetch a new token; errors propagate to the caller."""


class ClientCredsTokenProvider(AccessTokenProvider):
    """Service principal (client id + key) against a tenant token endpoint."""

    def __init__(self, auth_endpoint: str, client_id: str, client_secret: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.auth_endpoint = auth_endpoint
        self.client_id = client_id
        self._client_secret = client_secret

    def refresh_token(self) -> AzureADToken:
        return authenticator.get_token_using_client_creds(
            self.auth_endpoint, self.client_id, self._client_secret
        )


class MsiTokenProvider(AccessTokenProvider):
    """Managed identity of the local VM."""

    def __init__(self, local_port: int = 0, tenant_guid: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.local_port = local_port
        self.tenant_guid = tenant_guid

    def refresh_token(self) -> AzureADToken:
        return authenticator.get_token_from_msi(self.local_port, self.tenant_guid)


class RefreshTokenBasedTokenProvider(AccessTokenProvider):
    """Refresh token obtained out of band (for example an interactive login)."""

    def __init__(
        self,
        client_id: Optional[str],
        refresh_token: str,
        initial_token: Optional[AzureADToken] = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.client_id = client_id
        self._refresh_token = refresh_token
        self._token = initial_token

    def refresh_token(self) -> AzureADToken:
        return authenticator.get_token_using_refresh_token(self.client_id, self._refresh_token)


class UserPasswordTokenProvider(AccessTokenProvider):
    """Username and password of a cloud-only test user."""

    def __init__(self, client_id: str, username: str, password: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.client_id = client_id
        self.username = username
        self._password = password

    def refresh_token(self) -> AzureADToken:
        return authenticator.get_token_using_user_creds(self.client_id, self.username, self._password)


__all__ = [
    "AccessTokenProvider",
    "ClientCredsTokenProvider",
    "DEFAULT_REFRESH_WINDOW_SECONDS",
    "MsiTokenProvider",
    "RefreshTokenBasedTokenProvider",
    "UserPasswordTokenProvider",
]
