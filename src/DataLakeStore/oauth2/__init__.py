"""Azure AD token acquisition.

Modules:
- authenticator: one-shot token flows (client credentials, managed identity,
  refresh token, username/password)
- token: AzureADToken and the streaming token-response parser
- providers: caching accessors built on the flows
"""

from DataLakeStore.oauth2.authenticator import (
    get_token_from_msi,
    get_token_using_client_creds,
    get_token_using_refresh_token,
    get_token_using_user_creds,
)
from DataLakeStore.oauth2.providers import (
    AccessTokenProvider,
    ClientCredsTokenProvider,
    MsiTokenProvider,
    RefreshTokenBasedTokenProvider,
    UserPasswordTokenProvider,
)
from DataLakeStore.oauth2.token import AzureADToken, parse_token_from_stream

__all__ = [
    "AzureADToken",
    "parse_token_from_stream",
    "get_token_using_client_creds",
    "get_token_from_msi",
    "get_token_using_refresh_token",
    "get_token_using_user_creds",
    "AccessTokenProvider",
    "ClientCredsTokenProvider",
    "MsiTokenProvider",
    "RefreshTokenBasedTokenProvider",
    "UserPasswordTokenProvider",
]
