"""Operation table tests."""

from __future__ import annotations

import dataclasses

import pytest

from DataLakeStore.operations import (
    ALL_OPERATIONS,
    APPEND,
    CHECKACCESS,
    CONCURRENTAPPEND,
    CREATE,
    DELETE,
    GETFILEINFO,
    OPEN,
    SETEXPIRY,
    SETOWNER,
    get_operation,
)
from DataLakeStore.transport.policy import SUPPORTED_METHODS


def test_every_operation_uses_a_supported_method():
    assert all(op.method in SUPPORTED_METHODS for op in ALL_OPERATIONS)


def test_names_are_unique():
    names = [op.name for op in ALL_OPERATIONS]
    assert len(names) == len(set(names))


@pytest.mark.parametrize(
    "op,method,requires_body,returns_body",
    [
        (OPEN, "GET", False, True),
        (CHECKACCESS, "GET", False, False),
        (CREATE, "PUT", True, False),
        (SETOWNER, "PUT", False, False),
        (APPEND, "POST", True, False),
        (DELETE, "DELETE", False, True),
    ],
)
def test_descriptor_flags(op, method, requires_body, returns_body):
    assert op.method == method
    assert op.requires_body is requires_body
    assert op.returns_body is returns_body


def test_extension_namespace():
    for op in (CONCURRENTAPPEND, SETEXPIRY, GETFILEINFO):
        assert op.namespace == "/WebHdfsExt"
    assert OPEN.namespace == "/webhdfs/v1"


def test_lookup_is_case_insensitive():
    assert get_operation("open") is OPEN
    assert get_operation("ConcurrentAppend") is CONCURRENTAPPEND


def test_unknown_lookup_raises():
    with pytest.raises(KeyError):
        get_operation("TRUNCATE")


def test_descriptors_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        OPEN.method = "POST"
