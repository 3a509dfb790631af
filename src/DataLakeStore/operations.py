# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.operations",
#   "purpose": "Fixed table of WebHDFS operations understood by the store",
#   "sections": [
#     {
#       "id": "operation",
#       "name": "Operation",
#       "anchor": "class-operation",
#       "kind": "class"
#     },
#     {
#       "id": "get-operation",
#       "name": "get_operation",
#       "anchor": "function-get-operation",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""WebHDFS operation descriptors.

Each descriptor names the ``op=`` query value, the HTTP method, the REST
namespace the request is routed under, and whether the request carries a
body and whether a successful response carries one the caller must read.
The set is fixed at import time; descriptors are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

WEBHDFS_NAMESPACE = "/webhdfs/v1"
WEBHDFS_EXT_NAMESPACE = "/WebHdfsExt"


@dataclass(frozen=True)
class Operation:
    """Immutable description of one REST operation."""

    name: str
    method: str
    namespace: str = WEBHDFS_NAMESPACE
    requires_body: bool = False
    returns_body: bool = False


OPEN = Operation("OPEN", "GET", returns_body=True)
GETFILESTATUS = Operation("GETFILESTATUS", "GET", returns_body=True)
MSGETFILESTATUS = Operation("MSGETFILESTATUS", "GET", returns_body=True)
LISTSTATUS = Operation("LISTSTATUS", "GET", returns_body=True)
MSLISTSTATUS = Operation("MSLISTSTATUS", "GET", returns_body=True)
GETCONTENTSUMMARY = Operation("GETCONTENTSUMMARY", "GET", returns_body=True)
GETFILECHECKSUM = Operation("GETFILECHECKSUM", "GET", returns_body=True)
GETACLSTATUS = Operation("GETACLSTATUS", "GET", returns_body=True)
MSGETACLSTATUS = Operation("MSGETACLSTATUS", "GET", returns_body=True)
CHECKACCESS = Operation("CHECKACCESS", "GET")
CREATE = Operation("CREATE", "PUT", requires_body=True)
MKDIRS = Operation("MKDIRS", "PUT", returns_body=True)
RENAME = Operation("RENAME", "PUT", returns_body=True)
SETOWNER = Operation("SETOWNER", "PUT")
SETPERMISSION = Operation("SETPERMISSION", "PUT")
SETTIMES = Operation("SETTIMES", "PUT")
MODIFYACLENTRIES = Operation("MODIFYACLENTRIES", "PUT")
REMOVEACLENTRIES = Operation("REMOVEACLENTRIES", "PUT")
REMOVEDEFAULTACL = Operation("REMOVEDEFAULTACL", "PUT")
REMOVEACL = Operation("REMOVEACL", "PUT")
SETACL = Operation("SETACL", "PUT")
CREATENONRECURSIVE = Operation("CREATENONRECURSIVE", "PUT", requires_body=True)
APPEND = Operation("APPEND", "POST", requires_body=True)
CONCAT = Operation("CONCAT", "POST")
MSCONCAT = Operation("MSCONCAT", "POST", requires_body=True)
DELETE = Operation("DELETE", "DELETE", returns_body=True)
CONCURRENTAPPEND = Operation(
    "CONCURRENTAPPEND", "POST", namespace=WEBHDFS_EXT_NAMESPACE, requires_body=True
)
SETEXPIRY = Operation("SETEXPIRY", "PUT", namespace=WEBHDFS_EXT_NAMESPACE)
GETFILEINFO = Operation(
    "GETFILEINFO", "GET", namespace=WEBHDFS_EXT_NAMESPACE, returns_body=True
)

ALL_OPERATIONS: Tuple[Operation, ...] = (
    OPEN,
    GETFILESTATUS,
    MSGETFILESTATUS,
    LISTSTATUS,
    MSLISTSTATUS,
    GETCONTENTSUMMARY,
    GETFILECHECKSUM,
    GETACLSTATUS,
    MSGETACLSTATUS,
    CHECKACCESS,
    CREATE,
    MKDIRS,
    RENAME,
    SETOWNER,
    SETPERMISSION,
    SETTIMES,
    MODIFYACLENTRIES,
    REMOVEACLENTRIES,
    REMOVEDEFAULTACL,
    REMOVEACL,
    SETACL,
    CREATENONRECURSIVE,
    APPEND,
    CONCAT,
    MSCONCAT,
    DELETE,
    CONCURRENTAPPEND,
    SETEXPIRY,
    GETFILEINFO,
)

_BY_NAME: Dict[str, Operation] = {op.name: op for op in ALL_OPERATIONS}


def get_operation(name: str) -> Operation:
    """Look up a descriptor by its ``op=`` name (case-insensitive).

    Raises:
        KeyError: If the store does not define an operation with that name.
    """
    try:
        return _BY_NAME[name.upper()]
    except KeyError:
        raise KeyError(f"Unknown operation: {name!r}") from None


__all__ = ["ALL_OPERATIONS", "Operation", "get_operation"] + [op.name for op in ALL_OPERATIONS]
