# === NAVMAP v1 ===
# {
#   "module": "tests.conftest",
#   "purpose": "Shared pytest fixtures for the transport suite",
#   "sections": [
#     {
#       "id": "isolated-settings",
#       "name": "isolated_settings",
#       "anchor": "function-isolated-settings",
#       "kind": "function"
#     },
#     {
#       "id": "mock-http",
#       "name": "mock_http",
#       "anchor": "function-mock-http",
#       "kind": "function"
#     },
#     {
#       "id": "account",
#       "name": "account",
#       "anchor": "function-account",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Pytest Configuration

Shared fixtures: settings isolated from the developer's environment, HTTPX
clients backed by ``MockTransport`` so no test touches the network, and a
ready-made store account.
"""

from __future__ import annotations

import contextlib
import os
from collections import deque
from typing import Callable, Deque, List

import httpx
import pytest

from DataLakeStore.account import StoreAccount
from DataLakeStore.settings import reset_settings

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Drop DATALAKESTORE_* variables and cached settings around each test."""

    for name in list(os.environ):
        if name.upper().startswith("DATALAKESTORE_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def mock_http():
    """Return a factory building HTTPX clients that answer through ``handler``."""

    created: Deque[httpx.Client] = deque()

    def _install(handler: Handler) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        created.append(client)
        return client

    yield _install

    while created:
        client = created.pop()
        with contextlib.suppress(Exception):
            client.close()


@pytest.fixture
def account() -> StoreAccount:
    return StoreAccount(
        "contoso.azuredatalakestore.net",
        lambda: "Bearer test-token",
        client_id="client-1",
    )


class RecordingHandler:
    """MockTransport handler replaying canned responses and keeping requests."""

    def __init__(self, *responders: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []
        self._responders = list(responders)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self._responders)) - 1
        return self._responders[index](request)


@pytest.fixture
def recording_handler():
    return RecordingHandler
