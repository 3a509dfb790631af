# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.pool",
#   "purpose": "Pool of HTTPX clients leased for the duration of a call",
#   "sections": [
#     {
#       "id": "create-http-client",
#       "name": "create_http_client",
#       "anchor": "function-create-http-client",
#       "kind": "function"
#     },
#     {
#       "id": "clientpool",
#       "name": "ClientPool",
#       "anchor": "class-clientpool",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Pool of HTTPX clients.

Each :class:`httpx.Client` owns its own keep-alive connection pool. The
:class:`ClientPool` hands a client to one call at a time and takes it back
afterwards, so concurrent calls on different threads never share a client
while keep-alive connections are still reused across calls.

Example:
    >>> pool = ClientPool()
    >>> with pool.lease() as client:
    ...     isinstance(client, httpx.Client)
    True
    >>> pool.close()
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import Callable, Iterator, List, Optional

import httpx

from DataLakeStore.settings import TransportSettings, get_settings

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.Client]


def create_http_client(settings: Optional[TransportSettings] = None) -> httpx.Client:
    """Create an HTTPX client configured from transport settings.

    Redirects are not followed: a redirect from the store is returned to the
    caller as a non-success status. Per-attempt timeouts are applied on each
    request, the client-level timeout is only the fallback.
    """
    settings = settings or get_settings()
    client = httpx.Client(
        timeout=httpx.Timeout(settings.timeout_sec),
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
            keepalive_expiry=settings.keepalive_expiry_sec,
        ),
        http2=settings.http2_enabled,
        follow_redirects=False,
    )
    LOGGER.debug(
        "HTTPX client created",
        extra={
            "http2": settings.http2_enabled,
            "max_connections": settings.max_connections,
            "max_keepalive": settings.max_keepalive_connections,
        },
    )
    return client


class ClientPool:
    """Thread-safe lease/return of :class:`httpx.Client` instances."""

    def __init__(
        self,
        factory: Optional[ClientFactory] = None,
        *,
        max_idle: int = 8,
    ) -> None:
        self._factory: ClientFactory = factory or create_http_client
        self._max_idle = max_idle
        self._idle: List[httpx.Client] = []
        self._lock = threading.Lock()
        self._closed = False
        self._created = 0

    @property
    def created(self) -> int:
        """Number of clients this pool has created."""
        return self._created

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    def acquire(self) -> httpx.Client:
        with self._lock:
            if self._closed:
                raise RuntimeError("ClientPool is closed")
            if self._idle:
                return self._idle.pop()
        client = self._factory()
        with self._lock:
            self._created += 1
        return client

    def release(self, client: httpx.Client) -> None:
        with self._lock:
            if not self._closed and not client.is_closed and len(self._idle) < self._max_idle:
                self._idle.append(client)
                return
        client.close()

    @contextlib.contextmanager
    def lease(self) -> Iterator[httpx.Client]:
        """Acquire a client and return it to the pool on every exit path."""
        client = self.acquire()
        try:
            yield client
        finally:
            self.release(client)

    def close(self) -> None:
        """Close idle clients; clients still leased are closed on release."""
        with self._lock:
            self._closed = True
            idle, self._idle = self._idle, []
        for client in idle:
            try:
                client.close()
            except Exception as exc:
                LOGGER.debug("Error closing pooled client: %s", exc)


__all__ = ["ClientFactory", "ClientPool", "create_http_client"]
