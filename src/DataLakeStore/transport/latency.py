# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.latency",
#   "purpose": "Telemetry sink recording per-attempt latency and errors",
#   "sections": [
#     {
#       "id": "telemetrysink",
#       "name": "TelemetrySink",
#       "anchor": "class-telemetrysink",
#       "kind": "class"
#     },
#     {
#       "id": "latencytracker",
#       "name": "LatencyTracker",
#       "anchor": "class-latencytracker",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Client-side latency breadcrumbs.

Every attempt produces one record: ``add_latency`` for successful attempts and
``add_error`` for failed ones. The :class:`LatencyTracker` keeps a bounded
queue of these records and hands a few of them back, joined by ``;``, for the
``x-ms-adl-client-latency`` header of the next request so the service can
correlate client-observed latency with its own logs.

Record layout (comma separated)::

    client-request-id,attempt,latency-ms,error,,operation,bytes,client-id
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional, Protocol, runtime_checkable

MAX_QUEUE_SIZE = 256
MAX_RECORDS_PER_HEADER = 3


@runtime_checkable
class TelemetrySink(Protocol):
    """Receives exactly one latency or error record per attempt."""

    def add_latency(
        self,
        client_request_id: str,
        attempt: int,
        latency_ms: int,
        operation: str,
        size: int,
        client_id: str,
    ) -> None:
        ...

    def add_error(
        self,
        client_request_id: str,
        attempt: int,
        latency_ms: int,
        error: str,
        operation: str,
        size: int,
        client_id: str,
    ) -> None:
        ...

    def get(self) -> Optional[str]:
        """Return the value for the latency header, or ``None`` to omit it."""
        ...


class LatencyTracker:
    """Thread-safe, bounded queue of latency records."""

    def __init__(
        self,
        *,
        enabled: bool = True,
        max_queue_size: int = MAX_QUEUE_SIZE,
        max_records_per_header: int = MAX_RECORDS_PER_HEADER,
    ) -> None:
        self._lock = threading.Lock()
        self._queue: Deque[str] = deque()
        self._enabled = enabled
        self._max_queue_size = max_queue_size
        self._max_records_per_header = max_records_per_header

    @property
    def enabled(self) -> bool:
        return self._enabled

    def disable(self) -> None:
        """Stop recording and drop anything already queued."""
        with self._lock:
            self._enabled = False
            self._queue.clear()

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def add_latency(
        self,
        client_request_id: str,
        attempt: int,
        latency_ms: int,
        operation: str,
        size: int,
        client_id: str,
    ) -> None:
        self._offer(
            f"{client_request_id},{attempt},{latency_ms},,,{operation},{size},{client_id}"
        )

    def add_error(
        self,
        client_request_id: str,
        attempt: int,
        latency_ms: int,
        error: str,
        operation: str,
        size: int,
        client_id: str,
    ) -> None:
        self._offer(
            f"{client_request_id},{attempt},{latency_ms},{error},,{operation},{size},{client_id}"
        )

    def get(self) -> Optional[str]:
        with self._lock:
            if not self._enabled or not self._queue:
                return None
            records = []
            while self._queue and len(records) < self._max_records_per_header:
                records.append(self._queue.popleft())
        return ";".join(records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def _offer(self, line: str) -> None:
        with self._lock:
            if not self._enabled:
                return
            # full queue: newest record is dropped
            if len(self._queue) >= self._max_queue_size:
                return
            self._queue.append(line)


class NullTelemetrySink:
    """Sink that records nothing and never emits a latency header."""

    def add_latency(self, *args, **kwargs) -> None:
        return None

    def add_error(self, *args, **kwargs) -> None:
        return None

    def get(self) -> Optional[str]:
        return None


__all__ = [
    "LatencyTracker",
    "MAX_QUEUE_SIZE",
    "MAX_RECORDS_PER_HEADER",
    "NullTelemetrySink",
    "TelemetrySink",
]
