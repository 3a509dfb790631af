# === NAVMAP v1 ===
# {
#   "module": "DataLakeStore.settings",
#   "purpose": "Environment-backed transport settings",
#   "sections": [
#     {
#       "id": "loglevel",
#       "name": "LogLevel",
#       "anchor": "class-loglevel",
#       "kind": "class"
#     },
#     {
#       "id": "transportsettings",
#       "name": "TransportSettings",
#       "anchor": "class-transportsettings",
#       "kind": "class"
#     },
#     {
#       "id": "get-settings",
#       "name": "get_settings",
#       "anchor": "function-get-settings",
#       "kind": "function"
#     },
#     {
#       "id": "reset-settings",
#       "name": "reset_settings",
#       "anchor": "function-reset-settings",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""
Pydantic v2 settings for the Data Lake Store transport.

Every field can be overridden through the environment with the
``DATALAKESTORE_`` prefix (for example ``DATALAKESTORE_TIMEOUT_SEC=30``).
The settings feed the connection pool limits, the default per-attempt timeout,
the User-Agent header and the OAuth endpoints used by the token flows.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["LogLevel", "TransportSettings", "get_settings", "reset_settings"]


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class TransportSettings(BaseSettings):
    """Connection, timeout, and identity settings for the transport."""

    model_config = SettingsConfigDict(
        env_prefix="DATALAKESTORE_",
        case_sensitive=False,
        extra="ignore",
    )

    timeout_sec: float = Field(
        60.0, gt=0.0, le=3600.0, description="Per-attempt connect/pool/read/write timeout"
    )
    scheme: str = Field("https", description="URL scheme used to reach the account endpoint")
    user_agent: str = Field(
        "datalakestore-transport/0.1.0", description="Value of the User-Agent header"
    )
    max_connections: int = Field(100, ge=1, le=1024)
    max_keepalive_connections: int = Field(20, ge=0, le=1024)
    keepalive_expiry_sec: float = Field(5.0, gt=0.0, le=600.0)
    http2_enabled: bool = Field(False, description="Negotiate HTTP/2 on pooled clients")
    latency_tracking_enabled: bool = Field(
        True, description="Send recent call latencies in the x-ms-adl-client-latency header"
    )
    msi_port: int = Field(50342, ge=1, le=65535, description="Managed-identity endpoint port")
    login_endpoint: str = Field(
        "https://login.microsoftonline.com", description="Azure AD authority host"
    )
    resource: str = Field(
        "https://datalake.azure.net/", description="OAuth resource the tokens are issued for"
    )
    log_level: LogLevel = Field(LogLevel.INFO, description="Level for the DataLakeStore logger")

    @field_validator("scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        """Only plain and TLS HTTP are meaningful for the REST endpoint."""
        lowered = v.strip().lower()
        if lowered not in {"http", "https"}:
            raise ValueError(f"scheme must be 'http' or 'https', got {v!r}")
        return lowered

    @field_validator("login_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def common_token_endpoint(self) -> str:
        """Token endpoint of the multi-tenant ``Common`` authority."""
        return f"{self.login_endpoint}/Common/oauth2/token"

    def authority_for_tenant(self, tenant_guid: str) -> str:
        return f"{self.login_endpoint}/{tenant_guid}"


_SETTINGS_LOCK = threading.Lock()
_settings: Optional[TransportSettings] = None


def get_settings() -> TransportSettings:
    """Return the process-wide settings, loading them from the environment once."""
    global _settings
    if _settings is not None:
        return _settings
    with _SETTINGS_LOCK:
        if _settings is None:
            _settings = TransportSettings()
        return _settings


def reset_settings() -> None:
    """Drop cached settings so the next :func:`get_settings` re-reads the environment."""
    global _settings
    with _SETTINGS_LOCK:
        _settings = None
