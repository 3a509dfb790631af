"""Identity of the store account a transport call is addressed to."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from .settings import get_settings

TokenAccessor = Callable[[], str]


def _default_scheme() -> str:
    return get_settings().scheme


def _default_user_agent() -> str:
    return get_settings().user_agent


@dataclass(frozen=True)
class StoreAccount:
    """Account endpoint plus the credential accessor used for every request.

    Attributes:
        account_name: Fully qualified account host, e.g.
            ``contoso.azuredatalakestore.net``.
        token_provider: Called once per attempt; the return value is sent as
            the ``Authorization`` header verbatim (``"Bearer <token>"``).
        scheme: ``https`` in production; ``http`` for local emulators.
        path_prefix: Optional path prepended to every operation path.
        user_agent: ``User-Agent`` header value.
        tracking_info: Optional ``x-ms-tracking-info`` header value.
        client_id: Identifies this client instance in latency records.
    """

    account_name: Optional[str]
    token_provider: TokenAccessor
    scheme: str = field(default_factory=_default_scheme)
    path_prefix: Optional[str] = None
    user_agent: str = field(default_factory=_default_user_agent)
    tracking_info: Optional[str] = None
    client_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])


__all__ = ["StoreAccount", "TokenAccessor"]
