# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.error_body",
#   "purpose": "Streaming decoder for RemoteException error envelopes",
#   "sections": [
#     {
#       "id": "remoteexceptioninfo",
#       "name": "RemoteExceptionInfo",
#       "anchor": "class-remoteexceptioninfo",
#       "kind": "class"
#     },
#     {
#       "id": "decoderstate",
#       "name": "_DecoderState",
#       "anchor": "class-decoderstate",
#       "kind": "class"
#     },
#     {
#       "id": "decode-remote-exception",
#       "name": "decode_remote_exception",
#       "anchor": "function-decode-remote-exception",
#       "kind": "function"
#     },
#     {
#       "id": "apply-remote-exception",
#       "name": "apply_remote_exception",
#       "anchor": "function-apply-remote-exception",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Streaming decoder for the store's JSON error envelope.

Error responses (HTTP >= 400) carry a body shaped like::

    {"RemoteException": {"exception": "FileNotFoundException",
                          "message": "File /a does not exist.",
                          "javaClassName": "java.io.FileNotFoundException"}}

The decoder walks :func:`ijson.basic_parse` events through a small state
machine so only the parser cursor is held in memory:

``EXPECT_OUTER_OBJECT`` -> ``EXPECT_WRAPPER_FIELD`` -> ``EXPECT_INNER_OBJECT``
-> ``IN_FIELDS`` -> ``DONE``. After the wrapper closes the rest of the
document is still read, so fields are only reported for a complete, well-formed
body.

Unknown fields at either level are skipped whatever their structure. A body
of any other JSON shape yields no fields. A malformed or truncated body yields
no fields either: the error body is diagnostic only and a broken one must not
turn a remote failure into a local exception.
"""

from __future__ import annotations

import contextlib
import enum
import logging
from dataclasses import dataclass
from typing import IO, Dict, Iterator, Optional, Tuple

import httpx
import ijson

from DataLakeStore.transport.results import OperationResponse

LOGGER = logging.getLogger(__name__)

WRAPPER_FIELD = "RemoteException"

_FIELD_MAP = {
    "exception": "name",
    "message": "message",
    "javaClassName": "java_class_name",
}

_SCALAR_EVENTS = frozenset({"string", "number", "integer", "double", "boolean", "null"})
_OPEN_EVENTS = frozenset({"start_map", "start_array"})
_CLOSE_EVENTS = frozenset({"end_map", "end_array"})


@dataclass(frozen=True)
class RemoteExceptionInfo:
    """Fields extracted from a ``RemoteException`` envelope."""

    name: Optional[str] = None
    message: Optional[str] = None
    java_class_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.name is None and self.message is None and self.java_class_name is None


class _DecoderState(enum.Enum):
    EXPECT_OUTER_OBJECT = "expect-outer-object"
    EXPECT_WRAPPER_FIELD = "expect-wrapper-field"
    EXPECT_INNER_OBJECT = "expect-inner-object"
    IN_FIELDS = "in-fields"
    DONE = "done"


def _skip_value(events: Iterator[Tuple[str, object]], first_event: str) -> None:
    """Consume the value that starts with ``first_event``."""
    if first_event not in _OPEN_EVENTS:
        return
    depth = 1
    for event, _ in events:
        if event in _OPEN_EVENTS:
            depth += 1
        elif event in _CLOSE_EVENTS:
            depth -= 1
            if depth == 0:
                return


def _as_text(event: str, value: object) -> Optional[str]:
    if event == "null":
        return None
    if event == "boolean":
        return "true" if value else "false"
    return str(value)


def _walk(events: Iterator[Tuple[str, object]]) -> Dict[str, Optional[str]]:
    found: Dict[str, Optional[str]] = {}
    state = _DecoderState.EXPECT_OUTER_OBJECT

    for event, value in events:
        if state is _DecoderState.EXPECT_OUTER_OBJECT:
            if event != "start_map":
                break
            state = _DecoderState.EXPECT_WRAPPER_FIELD

        elif state is _DecoderState.EXPECT_WRAPPER_FIELD:
            if event != "map_key":
                break
            if value == WRAPPER_FIELD:
                state = _DecoderState.EXPECT_INNER_OBJECT
            else:
                value_event, _ = next(events)
                _skip_value(events, value_event)

        elif state is _DecoderState.EXPECT_INNER_OBJECT:
            if event != "start_map":
                _skip_value(events, event)
                state = _DecoderState.EXPECT_WRAPPER_FIELD
                continue
            state = _DecoderState.IN_FIELDS

        elif state is _DecoderState.DONE:
            # read to the end so a truncated or trailing-garbage body fails
            continue

        elif state is _DecoderState.IN_FIELDS:
            if event == "end_map":
                state = _DecoderState.DONE
                continue
            if event != "map_key":
                break
            value_event, field_value = next(events)
            target = _FIELD_MAP.get(str(value))
            if target is not None and value_event in _SCALAR_EVENTS:
                found[target] = _as_text(value_event, field_value)
            else:
                _skip_value(events, value_event)

    if state is not _DecoderState.DONE:
        return {}
    return found


def decode_remote_exception(stream: IO[bytes]) -> RemoteExceptionInfo:
    """Extract ``exception``/``message``/``javaClassName`` from an error body.

    The stream is always closed. Malformed JSON, or a read failure part way
    through, yields an empty :class:`RemoteExceptionInfo`.
    """
    try:
        found = _walk(iter(ijson.basic_parse(stream)))
    except (ijson.JSONError, StopIteration, ValueError, OSError, httpx.HTTPError) as exc:
        LOGGER.debug("Could not decode RemoteException body: %s", exc)
        return RemoteExceptionInfo()
    finally:
        with contextlib.suppress(Exception):
            stream.close()
    return RemoteExceptionInfo(**found)


def apply_remote_exception(stream: IO[bytes], response: OperationResponse) -> None:
    """Decode an error body into the remote-exception fields of ``response``."""
    info = decode_remote_exception(stream)
    response.remote_exception_name = info.name
    response.remote_exception_message = info.message
    response.remote_exception_java_class_name = info.java_class_name


__all__ = [
    "RemoteExceptionInfo",
    "WRAPPER_FIELD",
    "apply_remote_exception",
    "decode_remote_exception",
]
