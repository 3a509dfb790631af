# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.invoker",
#   "purpose": "One HTTP round-trip for one attempt of a transport call",
#   "sections": [
#     {
#       "id": "validate-body-range",
#       "name": "validate_body_range",
#       "anchor": "function-validate-body-range",
#       "kind": "function"
#     },
#     {
#       "id": "quote-path",
#       "name": "quote_path",
#       "anchor": "function-quote-path",
#       "kind": "function"
#     },
#     {
#       "id": "build-url",
#       "name": "build_url",
#       "anchor": "function-build-url",
#       "kind": "function"
#     },
#     {
#       "id": "build-request",
#       "name": "build_request",
#       "anchor": "function-build-request",
#       "kind": "function"
#     },
#     {
#       "id": "invoke-once",
#       "name": "invoke_once",
#       "anchor": "function-invoke-once",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Single-attempt HTTP invocation.

:func:`invoke_once` performs exactly one round-trip and records what happened
on the :class:`~DataLakeStore.transport.results.OperationResponse` attempt
fields. It never retries and never touches the call-level bookkeeping
(``num_retries``/``exception_history``); that belongs to the orchestrator.

Failure classes handled here:

- *programming errors* (bad body range, unsupported method) raise
  immediately;
- *preflight failures* (no account, no token, no operation, no path) mark the
  attempt unsuccessful without touching the network;
- *transport errors* (any :class:`httpx.HTTPError`) are recorded as the
  attempt's local exception;
- *remote errors* (HTTP >= 400) are recorded with whatever the error body
  decoder extracted.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Union
from urllib.parse import quote

import httpx

from DataLakeStore.account import StoreAccount
from DataLakeStore.errors import BodyRangeError, InvalidRequestError
from DataLakeStore.operations import Operation
from DataLakeStore.query_params import QueryParams
from DataLakeStore.transport.error_body import apply_remote_exception
from DataLakeStore.transport.policy import (
    AUTHORIZATION_HEADER,
    BODY_METHODS,
    CLIENT_LATENCY_HEADER,
    CLIENT_REQUEST_ID_HEADER,
    SERVER_REQUEST_ID_HEADER,
    SUPPORTED_METHODS,
    TRACKING_INFO_HEADER,
    USER_AGENT_HEADER,
)
from DataLakeStore.transport.results import OperationResponse
from DataLakeStore.transport.streams import ResponseStream, drain_and_close

LOGGER = logging.getLogger(__name__)
TOKEN_LOGGER = logging.getLogger("DataLakeStore.transport.tokens")

BodyLike = Union[bytes, bytearray, memoryview]

# RFC 3986 pchar minus percent: unreserved chars and sub-delims stay literal
_PATH_SAFE_CHARS = "/:@!$&'()*+,;=-._~"


def validate_body_range(
    body: Optional[BodyLike], offset: int, length: int, path: Optional[str] = None
) -> None:
    """Check that ``[offset, offset + length)`` is a slice of ``body``.

    Raises:
        BodyRangeError: If the range is negative or out of bounds for a
            non-empty body, or non-zero for an empty body.
    """
    if body is not None and len(body) > 0:
        if (
            offset < 0
            or length < 0
            or offset >= len(body)
            or offset + length > len(body)
        ):
            raise BodyRangeError(f"offset+length overflows byte buffer for path {path}")
    elif offset != 0 or length != 0:
        raise BodyRangeError(f"Non-zero offset or length with null body for path {path}")


def quote_path(path: str) -> str:
    """Percent-encode ``path`` using URI path rules (not query rules)."""
    return quote(path, safe=_PATH_SAFE_CHARS)


def build_url(
    account: StoreAccount, op: Operation, path: str, query_params: QueryParams
) -> str:
    parts = [account.scheme, "://", account.account_name or "", op.namespace]
    if account.path_prefix:
        parts.append(account.path_prefix)
    if not path.startswith("/"):
        parts.append("/")
    parts.append(quote_path(path))
    parts.append("?")
    parts.append(query_params.serialize())
    return "".join(parts)


def build_request(
    client: httpx.Client,
    account: StoreAccount,
    op: Operation,
    url: str,
    token: str,
    client_request_id: str,
    body: Optional[BodyLike],
    offset: int,
    length: int,
    timeout: float,
    latency_header: Optional[str] = None,
) -> httpx.Request:
    """Assemble the request for one attempt.

    Raises:
        InvalidRequestError: If ``op.method`` is not a method the store uses.
    """
    method = op.method.upper()
    if method not in SUPPORTED_METHODS:
        raise InvalidRequestError(f"Unknown op - {op.method}")

    headers = {
        AUTHORIZATION_HEADER: token,
        USER_AGENT_HEADER: account.user_agent,
        CLIENT_REQUEST_ID_HEADER: client_request_id,
    }
    if latency_header is not None:
        headers[CLIENT_LATENCY_HEADER] = latency_header
    if account.tracking_info is not None:
        headers[TRACKING_INFO_HEADER] = account.tracking_info

    content: Optional[bytes] = None
    if method in BODY_METHODS:
        if op.requires_body and body is not None:
            content = bytes(memoryview(body)[offset : offset + length])
        else:
            content = b""

    return client.build_request(
        method,
        url,
        headers=headers,
        content=content,
        timeout=httpx.Timeout(timeout),
    )


def _fetch_token(account: StoreAccount, response: OperationResponse) -> Optional[str]:
    started = time.perf_counter_ns()
    try:
        token = account.token_provider()
    except Exception as exc:
        response.successful = False
        response.message = "Error fetching access token"
        response.exception = exc
        response.token_acquisition_latency_ns = time.perf_counter_ns() - started
        LOGGER.debug("Token accessor raised %s", type(exc).__name__, exc_info=True)
        return None
    response.token_acquisition_latency_ns = time.perf_counter_ns() - started
    if token is None or not str(token).strip():
        response.successful = False
        response.message = "Access token is null or blank"
        return None
    return token


def _record_response_metadata(http_response: httpx.Response, response: OperationResponse) -> None:
    response.http_response_code = http_response.status_code
    response.http_response_message = http_response.reason_phrase
    response.request_id = http_response.headers.get(SERVER_REQUEST_ID_HEADER)

    content_length = http_response.headers.get("Content-Length")
    if content_length is not None:
        try:
            response.response_content_length = int(content_length)
        except ValueError:
            LOGGER.debug("Ignoring malformed Content-Length %r", content_length)
    transfer_encoding = http_response.headers.get("Transfer-Encoding")
    if transfer_encoding is not None and transfer_encoding.strip().lower() == "chunked":
        response.response_chunked = True


def _declares_empty_body(http_response: httpx.Response) -> bool:
    # only an explicit zero length rules out a body; HTTP/2 sends no framing headers
    if http_response.headers.get("Transfer-Encoding") is not None:
        return False
    return (http_response.headers.get("Content-Length") or "").strip() == "0"


def invoke_once(
    client: httpx.Client,
    account: Optional[StoreAccount],
    op: Optional[Operation],
    path: Optional[str],
    query_params: QueryParams,
    body: Optional[BodyLike],
    offset: int,
    length: int,
    timeout: float,
    client_request_id: str,
    response: OperationResponse,
    *,
    latency_header: Optional[str] = None,
) -> None:
    """Perform one HTTP round-trip and record its outcome on ``response``.

    Args:
        client: Client whose connection pool carries the request.
        account: Target account and credential accessor.
        op: Operation descriptor.
        path: Store path the operation applies to.
        query_params: Fully populated query parameters (``op`` and
            ``api-version`` included).
        body: Request body, or ``None``.
        offset: Start of the slice of ``body`` to send.
        length: Number of bytes of ``body`` to send.
        timeout: Seconds allowed for connect, pool acquisition, read and write.
        client_request_id: Value of ``x-ms-client-request-id``.
        response: Accumulator whose attempt fields are filled in.
        latency_header: Optional ``x-ms-adl-client-latency`` value.

    Raises:
        BodyRangeError: If ``offset``/``length`` do not fit ``body``.
        InvalidRequestError: If the operation uses an unsupported method.
    """
    validate_body_range(body, offset, length, path)

    if account is None or not (account.account_name or "").strip():
        response.successful = False
        response.message = "Account name or client is null or blank"
        return

    token = _fetch_token(account, response)
    if token is None:
        return

    if op is None:
        response.successful = False
        response.message = "operation is null"
        return

    if path is None or not path.strip():
        response.successful = False
        response.message = "path is null"
        return

    response.op_code = op.name

    url = build_url(account, op, path, query_params)
    request = build_request(
        client,
        account,
        op,
        url,
        token,
        client_request_id,
        body,
        offset,
        length,
        timeout,
        latency_header=latency_header,
    )

    http_response: Optional[httpx.Response] = None
    try:
        http_response = client.send(request, stream=True)
        _record_response_metadata(http_response, response)

        if response.http_response_code >= 400:
            if response.http_response_code == 401:
                # the token is not working anyway, so logging it is acceptable
                TOKEN_LOGGER.debug(
                    "HTTPRequest,HTTP401,cReqId:%s,sReqId:%s,path:%s,token:%s",
                    client_request_id,
                    response.request_id,
                    path,
                    token,
                )
            if response.request_id is None:
                LOGGER.debug(
                    "HTTP%s without %s header (cReqId:%s, path:%s)",
                    response.http_response_code,
                    SERVER_REQUEST_ID_HEADER,
                    client_request_id,
                    path,
                )
            if _declares_empty_body(http_response):
                http_response.close()
            else:
                apply_remote_exception(ResponseStream(http_response), response)
        elif op.returns_body:
            # caller reads and closes the stream
            response.response_stream = ResponseStream(http_response)
        else:
            http_response.read()
            http_response.close()
    except httpx.HTTPError as exc:
        response.exception = exc
        response.successful = False
        drain_and_close(http_response)


__all__ = [
    "build_request",
    "build_url",
    "invoke_once",
    "quote_path",
    "validate_body_range",
]
