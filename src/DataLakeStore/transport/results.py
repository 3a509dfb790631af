# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.results",
#   "purpose": "Per-call options and the result accumulator of the retry loop",
#   "sections": [
#     {
#       "id": "requestoptions",
#       "name": "RequestOptions",
#       "anchor": "class-requestoptions",
#       "kind": "class"
#     },
#     {
#       "id": "operationresponse",
#       "name": "OperationResponse",
#       "anchor": "class-operationresponse",
#       "kind": "class"
#     }
#   ]
# }
# === /NAVMAP ===

"""Options and results of a transport call.

:class:`OperationResponse` separates two kinds of fields:

- *attempt* fields describe the most recent round-trip and are cleared by
  :meth:`OperationResponse.reset_attempt` before every attempt;
- *call* fields (``num_retries``, ``exception_history``) describe the call as
  a whole and only ever grow while the retry loop runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from DataLakeStore.errors import RemoteOperationError
from DataLakeStore.retrypolicies import RetryPolicy
from DataLakeStore.settings import get_settings

if TYPE_CHECKING:  # pragma: no cover - typing-only imports
    from DataLakeStore.transport.streams import ResponseStream


def _default_timeout() -> float:
    return get_settings().timeout_sec


@dataclass(frozen=True)
class RequestOptions:
    """Caller-owned configuration for one logical call.

    Attributes:
        retry_policy: Consulted after each failed attempt; ``None`` means the
            call is attempted exactly once.
        request_id: Correlation id; a random UUID is used when absent.
        timeout: Per-attempt timeout in seconds, applied to connect, pool
            acquisition, read and write alike.
    """

    retry_policy: Optional[RetryPolicy] = None
    request_id: Optional[str] = None
    timeout: float = field(default_factory=_default_timeout)


@dataclass
class OperationResponse:
    """Mutable accumulator threaded through every attempt of one call."""

    # attempt fields
    successful: bool = True
    http_response_code: int = 0
    http_response_message: Optional[str] = None
    message: Optional[str] = None
    exception: Optional[BaseException] = None
    remote_exception_name: Optional[str] = None
    remote_exception_message: Optional[str] = None
    remote_exception_java_class_name: Optional[str] = None
    response_content_length: int = 0
    response_chunked: bool = False
    last_call_latency_ms: int = 0
    token_acquisition_latency_ns: int = 0
    request_id: Optional[str] = None
    client_request_id: Optional[str] = None
    op_code: Optional[str] = None
    response_stream: Optional["ResponseStream"] = None

    # call fields
    num_retries: int = 0
    exception_history: Optional[str] = None

    def reset_attempt(self) -> None:
        """Clear everything that describes the previous attempt."""
        self.successful = True
        self.http_response_code = 0
        self.http_response_message = None
        self.message = None
        self.exception = None
        self.remote_exception_name = None
        self.remote_exception_message = None
        self.remote_exception_java_class_name = None
        self.response_content_length = 0
        self.response_chunked = False
        self.last_call_latency_ms = 0
        self.token_acquisition_latency_ns = 0
        self.request_id = None
        self.op_code = None
        self.response_stream = None

    def record_error(self, error_tag: str) -> None:
        if self.exception_history is None:
            self.exception_history = error_tag
        else:
            self.exception_history = f"{self.exception_history},{error_tag}"

    @property
    def content_length_label(self) -> str:
        return "chunked" if self.response_chunked else str(self.response_content_length)

    def raise_for_failure(self, message: str) -> None:
        """Raise :class:`RemoteOperationError` if the call did not succeed."""
        if self.successful:
            return
        parts = [message]
        if self.message:
            parts.append(self.message)
        if self.exception is not None:
            parts.append(f"{type(self.exception).__name__}: {self.exception}")
        elif self.http_response_code:
            parts.append(
                f"Operation {self.op_code} failed with HTTP{self.http_response_code}"
                f" : {self.remote_exception_name}"
            )
            if self.remote_exception_message:
                parts.append(self.remote_exception_message)
        parts.append(
            f"[{self.request_id}] failed with error {self.exception_history} "
            f"after {self.num_retries} retries; last latency {self.last_call_latency_ms}ms"
        )
        raise RemoteOperationError(
            "\n".join(parts),
            http_status=self.http_response_code,
            http_message=self.http_response_message,
            remote_exception_name=self.remote_exception_name,
            remote_exception_message=self.remote_exception_message,
            remote_exception_java_class_name=self.remote_exception_java_class_name,
            num_retries=self.num_retries,
            last_call_latency_ms=self.last_call_latency_ms,
            exception_history=self.exception_history,
            request_id=self.request_id,
            client_request_id=self.client_request_id,
        ) from self.exception


__all__ = ["OperationResponse", "RequestOptions"]
