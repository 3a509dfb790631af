"""Caching token provider tests."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from DataLakeStore.errors import TokenAcquisitionError
from DataLakeStore.oauth2 import authenticator
from DataLakeStore.oauth2.providers import (
    AccessTokenProvider,
    ClientCredsTokenProvider,
    MsiTokenProvider,
    RefreshTokenBasedTokenProvider,
    UserPasswordTokenProvider,
)
from DataLakeStore.oauth2.token import AzureADToken

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


class CountingProvider(AccessTokenProvider):
    def __init__(self, lifetimes: List[int], **kwargs) -> None:
        super().__init__(now=lambda: NOW, **kwargs)
        self.lifetimes = list(lifetimes)
        self.refreshes = 0

    def refresh_token(self) -> AzureADToken:
        self.refreshes += 1
        lifetime = self.lifetimes.pop(0)
        return AzureADToken(f"tok-{self.refreshes}", NOW + timedelta(seconds=lifetime))


def test_token_is_cached_while_fresh():
    provider = CountingProvider([3600])

    first = provider.get_token()
    second = provider.get_token()

    assert first is second
    assert provider.refreshes == 1
    assert provider.authorization_header() == "Bearer tok-1"


def test_token_refreshed_inside_window():
    provider = CountingProvider([120, 3600])

    provider.get_token()
    token = provider.get_token()

    assert provider.refreshes == 2
    assert token.access_token == "tok-2"


def test_custom_refresh_window():
    provider = CountingProvider([120], refresh_window_seconds=60)

    provider.get_token()
    provider.get_token()

    assert provider.refreshes == 1


def test_invalidate_forces_refresh():
    provider = CountingProvider([3600, 3600])
    provider.get_token()

    provider.invalidate()

    assert provider.get_token().access_token == "tok-2"


def test_refresh_errors_propagate():
    class Failing(AccessTokenProvider):
        def refresh_token(self) -> AzureADToken:
            raise TokenAcquisitionError("denied", status_code=401)

    with pytest.raises(TokenAcquisitionError):
        Failing().authorization_header()


def test_concurrent_callers_share_one_refresh():
    provider = CountingProvider([3600] * 10)
    barrier = threading.Barrier(8)

    def fetch() -> None:
        barrier.wait()
        provider.get_token()

    threads = [threading.Thread(target=fetch) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert provider.refreshes == 1


def _fake_token(*args, **kwargs) -> AzureADToken:
    return AzureADToken("flow-token", datetime.now(timezone.utc) + timedelta(hours=1))


def test_concrete_providers_call_their_flows(monkeypatch):
    calls = []

    def recorder(name):
        def _flow(*args, **kwargs):
            calls.append((name, args))
            return _fake_token()

        return _flow

    monkeypatch.setattr(authenticator, "get_token_using_client_creds", recorder("client"))
    monkeypatch.setattr(authenticator, "get_token_from_msi", recorder("msi"))
    monkeypatch.setattr(authenticator, "get_token_using_refresh_token", recorder("refresh"))
    monkeypatch.setattr(authenticator, "get_token_using_user_creds", recorder("user"))

    ClientCredsTokenProvider("https://login/t", "app", "key").get_token()
    MsiTokenProvider(8123, "tenant").get_token()
    RefreshTokenBasedTokenProvider("app", "rt").get_token()
    UserPasswordTokenProvider("app", "user", "pw").get_token()

    assert calls == [
        ("client", ("https://login/t", "app", "key")),
        ("msi", (8123, "tenant")),
        ("refresh", ("app", "rt")),
        ("user", ("app", "user", "pw")),
    ]


def test_refresh_provider_uses_initial_token_until_expiry(monkeypatch):
    monkeypatch.setattr(authenticator, "get_token_using_refresh_token", _fake_token)
    initial = AzureADToken("initial", datetime.now(timezone.utc) + timedelta(hours=1))

    provider = RefreshTokenBasedTokenProvider("app", "rt", initial_token=initial)

    assert provider.get_token() is initial
