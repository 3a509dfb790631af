"""File-like view over a streamed :class:`httpx.Response` body."""

from __future__ import annotations

import contextlib
import io
from typing import Iterator, Optional

import httpx

DEFAULT_CHUNK_SIZE = 64 * 1024


class ResponseStream(io.RawIOBase):
    """Read a response body incrementally without buffering it.

    Closing the stream closes the underlying response, which returns the
    connection to the client's pool (or discards it when the body was not
    fully read).
    """

    def __init__(self, response: httpx.Response, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__()
        self._response = response
        self._chunk_size = chunk_size
        self._chunks: Optional[Iterator[bytes]] = None
        self._pending = b""

    @property
    def response(self) -> httpx.Response:
        return self._response

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed response stream")
        wanted = len(buffer)
        if wanted == 0:
            return 0
        if not self._pending:
            if self._chunks is None:
                self._chunks = self._response.iter_bytes(self._chunk_size)
            self._pending = next(self._chunks, b"")
            if not self._pending:
                return 0
        count = min(wanted, len(self._pending))
        buffer[:count] = self._pending[:count]
        self._pending = self._pending[count:]
        return count

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


def drain_and_close(response: Optional[httpx.Response]) -> None:
    """Consume whatever is left of ``response`` best-effort, then close it."""
    if response is None:
        return
    with contextlib.suppress(httpx.HTTPError, httpx.StreamError):
        response.read()
    with contextlib.suppress(Exception):
        response.close()


__all__ = ["DEFAULT_CHUNK_SIZE", "ResponseStream", "drain_and_close"]
