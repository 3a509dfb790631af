"""Client-side transport for Azure Data Lake Store's WebHDFS-style REST API.

The package turns logical filesystem operations into authenticated HTTP
round-trips with retries:

- :mod:`DataLakeStore.transport` issues the calls,
- :mod:`DataLakeStore.oauth2` obtains the bearer tokens they carry,
- :mod:`DataLakeStore.retrypolicies` decides when a failed attempt is retried.
"""

from DataLakeStore.account import StoreAccount
from DataLakeStore.errors import (
    BodyRangeError,
    DataLakeStoreError,
    InvalidRequestError,
    RemoteOperationError,
    TokenAcquisitionError,
)
from DataLakeStore.operations import Operation, get_operation
from DataLakeStore.query_params import QueryParams
from DataLakeStore.retrypolicies import (
    ExponentialBackoffPolicy,
    NoRetryPolicy,
    NonIdempotentRetryPolicy,
    RetryPolicy,
)
from DataLakeStore.transport import HttpTransport, OperationResponse, RequestOptions

__version__ = "0.1.0"

__all__ = [
    "StoreAccount",
    "Operation",
    "get_operation",
    "QueryParams",
    "HttpTransport",
    "RequestOptions",
    "OperationResponse",
    "RetryPolicy",
    "NoRetryPolicy",
    "ExponentialBackoffPolicy",
    "NonIdempotentRetryPolicy",
    "DataLakeStoreError",
    "InvalidRequestError",
    "BodyRangeError",
    "RemoteOperationError",
    "TokenAcquisitionError",
]
