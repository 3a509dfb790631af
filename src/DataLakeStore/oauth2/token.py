# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.oauth2.token",
#   "purpose": "Bearer token value type and streaming token-response parser",
#   "sections": [
#     {
#       "id": "azureadtoken",
#       "name": "AzureADToken",
#       "anchor": "class-azureadtoken",
#       "kind": "class"
#     },
#     {
#       "id": "parse-token-from-stream",
#       "name": "parse_token_from_stream",
#       "anchor": "function-parse-token-from-stream",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Azure AD bearer tokens.

:func:`parse_token_from_stream` reads the token endpoint's JSON response
incrementally and turns the relative ``expires_in`` into an absolute expiry.
Unlike error-body decoding, any parse failure here propagates: a caller that
cannot get a token should not attempt the request at all.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import IO, Callable, Optional

import ijson

from DataLakeStore.errors import TokenAcquisitionError

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class AzureADToken:
    """Access token plus the absolute time it stops being valid."""

    access_token: str
    expiry: datetime

    def expires_within(self, seconds: float, *, now: Optional[datetime] = None) -> bool:
        """True if the token expires within ``seconds`` of ``now``."""
        now = now or datetime.now(timezone.utc)
        return (self.expiry - now).total_seconds() <= seconds

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"

    def __repr__(self) -> str:
        return f"AzureADToken(access_token='***', expiry={self.expiry.isoformat()})"


def parse_token_from_stream(stream: IO[bytes], *, clock: Clock = time.time) -> AzureADToken:
    """Parse ``access_token`` and ``expires_in`` from a token endpoint response.

    Only top-level members are considered. ``expires_in`` may be a JSON number
    or a string holding an integer, as Azure AD sends it.

    Args:
        stream: Response body; always closed before returning.
        clock: Source of the acquisition timestamp (seconds since the epoch).

    Returns:
        The token, expiring ``expires_in`` seconds after acquisition.

    Raises:
        ijson.JSONError: If the body is not well-formed JSON.
        ValueError: If ``expires_in`` is not an integer.
        TokenAcquisitionError: If no ``access_token`` is present.
    """
    access_token: Optional[str] = None
    expires_in = 0
    try:
        depth = 0
        current_key: Optional[str] = None
        for event, value in ijson.basic_parse(stream):
            if event in ("start_map", "start_array"):
                depth += 1
                current_key = None
                continue
            if event in ("end_map", "end_array"):
                depth -= 1
                continue
            if depth != 1:
                continue
            if event == "map_key":
                current_key = str(value)
                continue
            if current_key == "access_token":
                access_token = None if value is None else str(value)
            elif current_key == "expires_in":
                expires_in = int(str(value)) if event == "string" else int(value)
            current_key = None
        acquired_at = clock()
    except Exception as exc:
        LOGGER.debug("AADToken: got exception when parsing json token %r", exc)
        raise
    finally:
        stream.close()

    if not access_token:
        raise TokenAcquisitionError("Token response did not contain an access_token")

    expiry = datetime.fromtimestamp(acquired_at + expires_in, tz=timezone.utc)
    LOGGER.debug("AADToken: fetched token with expiry %s", expiry.isoformat())
    return AzureADToken(access_token=access_token, expiry=expiry)


__all__ = ["AzureADToken", "Clock", "parse_token_from_stream"]
