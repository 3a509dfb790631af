# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.transport.policy",
#   "purpose": "Wire-level constants for the REST transport.",
#   "sections": []
# }
# === /NAVMAP ===

"""Wire-level constants for the REST transport.

Header names, the protocol version sent on every request, and the HTTP
methods the store's REST dialect uses.
"""

#: Protocol version sent as ``api-version`` on every request
API_VERSION = "2016-11-01"

# ============================================================================
# Header names
# ============================================================================

AUTHORIZATION_HEADER = "Authorization"
USER_AGENT_HEADER = "User-Agent"
CLIENT_REQUEST_ID_HEADER = "x-ms-client-request-id"
CLIENT_LATENCY_HEADER = "x-ms-adl-client-latency"
TRACKING_INFO_HEADER = "x-ms-tracking-info"

#: Server-assigned request id echoed on every response
SERVER_REQUEST_ID_HEADER = "x-ms-request-id"

# ============================================================================
# Methods
# ============================================================================

SUPPORTED_METHODS = frozenset({"GET", "PUT", "POST", "DELETE"})

#: Methods that always carry an entity, even an empty one
BODY_METHODS = frozenset({"PUT", "POST"})

#: Range treated as a successful attempt
SUCCESS_STATUS_MIN = 100
SUCCESS_STATUS_MAX = 300
