# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.orchestrator",
#   "purpose": "Retry orchestration around single HTTP attempts",
#   "sections": [
#     {
#       "id": "callstate",
#       "name": "_CallState",
#       "anchor": "class-callstate",
#       "kind": "class"
#     },
#     {
#       "id": "httptransport",
#       "name": "HttpTransport",
#       "anchor": "class-httptransport",
#       "kind": "class"
#     },
#     {
#       "id": "is-successful-attempt",
#       "name": "is_successful_attempt",
#       "anchor": "function-is-successful-attempt",
#       "kind": "function"
#     },
#     {
#       "id": "error-tag",
#       "name": "error_tag",
#       "anchor": "function-error-tag",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Retry orchestration for Data Lake Store REST calls.

:class:`HttpTransport` turns one logical operation into one or more attempts
made through :func:`~DataLakeStore.transport.invoker.invoke_once`. The loop is
a Tenacity :class:`~tenacity.Retrying` controller whose retry predicate is the
caller's retry policy: Tenacity drives the attempts, the policy alone decides
(and, if it wants to back off, sleeps) between them.

Per attempt the transport:

1. sets ``x-ms-client-request-id`` to ``{correlation-id}.{attempt}``,
2. clears the attempt fields of the response,
3. times the round-trip,
4. records one telemetry event (latency on success, latency plus error tag
   on failure), and
5. on failure appends the error tag to ``exception_history``.

Ordinary failures never raise; programming errors (missing options, bad body
range, unsupported method) do.

Usage::

    transport = HttpTransport(ClientPool())
    account = StoreAccount("contoso.azuredatalakestore.net", provider.authorization_header)
    resp = transport.make_call(
        account, GETFILESTATUS, "/data/a.csv", None, None, 0, 0,
        RequestOptions(retry_policy=ExponentialBackoffPolicy()),
    )
    resp.raise_for_failure("Error getting file status")
"""

from __future__ import annotations

import contextlib
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Iterator, Optional

import httpx
from tenacity import Retrying, retry_if_result, stop_never, wait_none

from DataLakeStore.account import StoreAccount
from DataLakeStore.errors import InvalidRequestError
from DataLakeStore.operations import Operation
from DataLakeStore.query_params import QueryParams
from DataLakeStore.retrypolicies import NoRetryPolicy, RetryPolicy
from DataLakeStore.settings import get_settings
from DataLakeStore.transport.invoker import BodyLike, invoke_once
from DataLakeStore.transport.latency import LatencyTracker, TelemetrySink
from DataLakeStore.transport.policy import (
    API_VERSION,
    SUCCESS_STATUS_MAX,
    SUCCESS_STATUS_MIN,
)
from DataLakeStore.transport.pool import ClientPool
from DataLakeStore.transport.results import OperationResponse, RequestOptions

LOGGER = logging.getLogger(__name__)


def is_successful_attempt(response: OperationResponse) -> bool:
    """An attempt succeeded iff no local error, marked successful, and 1xx/2xx."""
    if response.exception is not None:
        return False
    if not response.successful:
        return False
    return SUCCESS_STATUS_MIN <= response.http_response_code < SUCCESS_STATUS_MAX


def error_tag(response: OperationResponse) -> str:
    """Short label for a failed attempt, as recorded in ``exception_history``."""
    if response.exception is not None:
        return type(response.exception).__name__
    return f"HTTP{response.http_response_code}({response.remote_exception_name})"


@dataclass
class _CallState:
    """Everything one call's attempts share; never shared across calls."""

    client: httpx.Client
    account: StoreAccount
    op: Optional[Operation]
    path: Optional[str]
    query_params: QueryParams
    body: Optional[BodyLike]
    offset: int
    length: int
    timeout: float
    correlation_id: str
    policy: RetryPolicy
    response: OperationResponse
    attempt: int = 0


class HttpTransport:
    """Stateless front end issuing REST calls with retries.

    Args:
        pool: Source of HTTPX clients for calls that do not bring their own.
        telemetry: Receives one record per attempt and supplies the
            client-latency header. Defaults to a :class:`LatencyTracker`
            owned by this transport.
    """

    def __init__(
        self,
        pool: Optional[ClientPool] = None,
        *,
        telemetry: Optional[TelemetrySink] = None,
    ) -> None:
        self._pool = pool or ClientPool()
        if telemetry is None:
            telemetry = LatencyTracker(enabled=get_settings().latency_tracking_enabled)
        self._telemetry = telemetry

    @property
    def telemetry(self) -> TelemetrySink:
        return self._telemetry

    @property
    def pool(self) -> ClientPool:
        return self._pool

    @contextlib.contextmanager
    def _connection(self, client: Optional[httpx.Client]) -> Iterator[httpx.Client]:
        if client is not None:
            yield client
            return
        with self._pool.lease() as leased:
            yield leased

    def make_call(
        self,
        account: StoreAccount,
        op: Optional[Operation],
        path: Optional[str],
        query_params: Optional[QueryParams],
        body: Optional[BodyLike],
        offset: int,
        length: int,
        options: Optional[RequestOptions],
        *,
        client: Optional[httpx.Client] = None,
    ) -> OperationResponse:
        """Run ``op`` against ``path`` until it succeeds or the policy gives up.

        Args:
            account: Target account and credential accessor.
            op: Operation descriptor.
            path: Store path.
            query_params: Operation-specific parameters; copied, not mutated.
            body: Request body, or ``None``.
            offset: Start of the slice of ``body`` to send.
            length: Number of bytes of ``body`` to send.
            options: Retry policy, correlation id and timeout.
            client: Connection resource to use; leased from the pool when
                omitted and returned when the call finishes.

        Returns:
            The final :class:`OperationResponse`: the successful attempt, or the
            last failed one, with ``num_retries`` and ``exception_history``
            covering the whole call.

        Raises:
            InvalidRequestError: If ``options`` is missing or the operation's
                method is unsupported.
            BodyRangeError: If ``offset``/``length`` do not fit ``body``.
        """
        if options is None:
            raise InvalidRequestError("RequestOptions parameter missing from call")

        policy: RetryPolicy = options.retry_policy or NoRetryPolicy()
        correlation_id = options.request_id or str(uuid.uuid4())

        params = query_params.copy() if query_params is not None else QueryParams()
        if op is not None:
            params.set_op(op)
        params.set_api_version(API_VERSION)

        response = OperationResponse()
        with self._connection(client) as connection:
            state = _CallState(
                client=connection,
                account=account,
                op=op,
                path=path,
                query_params=params,
                body=body,
                offset=offset,
                length=length,
                timeout=options.timeout,
                correlation_id=correlation_id,
                policy=policy,
                response=response,
            )
            retrying = Retrying(
                retry=retry_if_result(lambda resp: self._should_retry(state, resp)),
                stop=stop_never,
                wait=wait_none(),
                reraise=True,
            )
            return retrying(self._attempt, state)

    def _attempt(self, state: _CallState) -> OperationResponse:
        response = state.response
        client_request_id = f"{state.correlation_id}.{state.attempt}"
        response.client_request_id = client_request_id
        response.reset_attempt()

        started = time.perf_counter()
        invoke_once(
            state.client,
            state.account,
            state.op,
            state.path,
            state.query_params,
            state.body,
            state.offset,
            state.length,
            state.timeout,
            client_request_id,
            response,
            latency_header=self._telemetry.get(),
        )
        response.last_call_latency_ms = int((time.perf_counter() - started) * 1000)
        response.num_retries = state.attempt

        op_name = state.op.name if state.op is not None else ""
        client_id = state.account.client_id if state.account is not None else ""
        error = ""
        if is_successful_attempt(response):
            response.successful = True
            outcome = "Succeeded"
            self._telemetry.add_latency(
                client_request_id,
                state.attempt,
                response.last_call_latency_ms,
                op_name,
                state.length + response.response_content_length,
                client_id,
            )
        else:
            response.successful = False
            outcome = "Failed"
            if response.response_stream is not None:
                response.response_stream.close()
                response.response_stream = None
            error = error_tag(response)
            self._telemetry.add_error(
                client_request_id,
                state.attempt,
                response.last_call_latency_ms,
                error,
                op_name,
                state.length,
                client_id,
            )
            response.record_error(error)
            state.attempt += 1

        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "HTTPRequest,%s,cReqId:%s,lat:%d,err:%s,Reqlen:%d,Resplen:%s,token_ns:%d,"
                "sReqId:%s,path:%s,qp:%s",
                outcome,
                client_request_id,
                response.last_call_latency_ms,
                error,
                state.length,
                response.content_length_label,
                response.token_acquisition_latency_ns,
                response.request_id,
                state.path,
                state.query_params.serialize(),
                extra={"client_request_id": client_request_id, "operation": op_name},
            )
        return response

    @staticmethod
    def _should_retry(state: _CallState, response: OperationResponse) -> bool:
        if response.successful:
            return False
        return bool(state.policy.should_retry(response.http_response_code, response.exception))


__all__ = ["HttpTransport", "error_tag", "is_successful_attempt"]
