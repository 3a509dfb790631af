"""Transport subsystem: authenticated, retrying REST calls over HTTPX.

Modules:
- orchestrator: retry loop (Tenacity-driven, policy-decided) and telemetry
- invoker: one HTTP round-trip per attempt, preflight validation
- error_body: streaming decoder for RemoteException error bodies
- results: RequestOptions and the OperationResponse accumulator
- pool: HTTPX client pool leased per call
- latency: per-attempt latency records and the client-latency header
- streams: file-like wrapper over streamed response bodies
- policy: header names, API version and method constants

Example:
    >>> from DataLakeStore.transport import HttpTransport, RequestOptions
    >>> transport = HttpTransport()
    >>> options = RequestOptions(timeout=30.0)
"""

from DataLakeStore.transport.error_body import (
    RemoteExceptionInfo,
    apply_remote_exception,
    decode_remote_exception,
)
from DataLakeStore.transport.invoker import invoke_once, quote_path, validate_body_range
from DataLakeStore.transport.latency import LatencyTracker, NullTelemetrySink, TelemetrySink
from DataLakeStore.transport.orchestrator import HttpTransport, error_tag, is_successful_attempt
from DataLakeStore.transport.policy import API_VERSION
from DataLakeStore.transport.pool import ClientPool, create_http_client
from DataLakeStore.transport.results import OperationResponse, RequestOptions
from DataLakeStore.transport.streams import ResponseStream

__all__ = [
    # Orchestration
    "HttpTransport",
    "RequestOptions",
    "OperationResponse",
    "is_successful_attempt",
    "error_tag",
    # Single attempt
    "invoke_once",
    "quote_path",
    "validate_body_range",
    "API_VERSION",
    # Error bodies
    "RemoteExceptionInfo",
    "decode_remote_exception",
    "apply_remote_exception",
    # Resources
    "ClientPool",
    "create_http_client",
    "ResponseStream",
    # Telemetry
    "TelemetrySink",
    "LatencyTracker",
    "NullTelemetrySink",
]
