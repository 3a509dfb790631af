# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.errors",
#   "purpose": "Exception hierarchy for the Data Lake Store transport",
#   "sections": [
#     {
#       "id": "datalakestoreerror",
#       "name": "DataLakeStoreError",
#       "anchor": "class-datalakestoreerror",
#       "kind": "class"
#     },
#     {
#       "id": "invalidrequesterror",
#       "name": "InvalidRequestError",
#       "anchor": "class-invalidrequesterror",
#       "kind": "class"
#     },
#     {
#       "id": "bodyrangeerror",
#       "name": "BodyRangeError",
#       "anchor": "class-bodyrangeerror",
#       "kind": "class"
#     },
#     {
#       "id": "remoteoperationerror",
#       "name": "RemoteOperationError",
#       "anchor": "class-remoteoperationerror",
#       "kind": "class"
#     },
#     {
#       "id": "tokenacquisitionerror",
#       "name": "TokenAcquisitionError",
#       "anchor": "class-tokenacquisitionerror",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared by the transport and OAuth token flows.

Ordinary call failures (network errors, HTTP 4xx/5xx) are never raised by the
transport; they are recorded on :class:`~DataLakeStore.transport.results.OperationResponse`.
The classes here cover the remaining categories:

- programming errors raised synchronously before any network activity,
- failures rendered from a completed response for callers that prefer
  exceptions, and
- token acquisition failures, which always propagate to the caller.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "DataLakeStoreError",
    "InvalidRequestError",
    "BodyRangeError",
    "RemoteOperationError",
    "TokenAcquisitionError",
]


class DataLakeStoreError(RuntimeError):
    """Base exception for Data Lake Store transport failures."""


class InvalidRequestError(DataLakeStoreError, ValueError):
    """Raised when a call is made with missing or invalid arguments."""


class BodyRangeError(InvalidRequestError, IndexError):
    """Raised when ``offset``/``length`` do not describe a slice of the request body."""


class RemoteOperationError(DataLakeStoreError):
    """Raised when a caller renders an unsuccessful operation response as an exception."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int = 0,
        http_message: Optional[str] = None,
        remote_exception_name: Optional[str] = None,
        remote_exception_message: Optional[str] = None,
        remote_exception_java_class_name: Optional[str] = None,
        num_retries: int = 0,
        last_call_latency_ms: int = 0,
        exception_history: Optional[str] = None,
        request_id: Optional[str] = None,
        client_request_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.http_status = http_status
        self.http_message = http_message
        self.remote_exception_name = remote_exception_name
        self.remote_exception_message = remote_exception_message
        self.remote_exception_java_class_name = remote_exception_java_class_name
        self.num_retries = num_retries
        self.last_call_latency_ms = last_call_latency_ms
        self.exception_history = exception_history
        self.request_id = request_id
        self.client_request_id = client_request_id


class TokenAcquisitionError(OSError):
    """Raised when an OAuth token endpoint cannot produce a token."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
