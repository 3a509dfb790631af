"""Query-string and form-body builder with a stable parameter order."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlencode

from .operations import Operation


class QueryParams:
    """Ordered set of query parameters.

    ``op`` is always serialized first and ``api-version`` last; everything
    else keeps insertion order. Re-adding a name replaces its value in place.
    Values are form-encoded, which also makes the serialized text usable as an
    ``application/x-www-form-urlencoded`` body.
    """

    def __init__(self, params: Optional[Dict[str, str]] = None) -> None:
        self._params: Dict[str, str] = {}
        self._op: Optional[str] = None
        self._api_version: Optional[str] = None
        for name, value in (params or {}).items():
            self.add(name, value)

    def add(self, name: str, value: str) -> "QueryParams":
        if not name:
            raise ValueError("query parameter name must not be empty")
        self._params[name] = value
        return self

    def set_op(self, op: Operation) -> "QueryParams":
        self._op = op.name
        return self

    def set_api_version(self, version: str) -> "QueryParams":
        self._api_version = version
        return self

    def copy(self) -> "QueryParams":
        clone = QueryParams()
        clone._params = dict(self._params)
        clone._op = self._op
        clone._api_version = self._api_version
        return clone

    def items(self) -> List[Tuple[str, str]]:
        pairs: List[Tuple[str, str]] = []
        if self._op is not None:
            pairs.append(("op", self._op))
        pairs.extend(self._params.items())
        if self._api_version is not None:
            pairs.append(("api-version", self._api_version))
        return pairs

    def serialize(self) -> str:
        return urlencode(self.items())

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self.items())

    def __repr__(self) -> str:
        return f"QueryParams({self.serialize()!r})"


__all__ = ["QueryParams"]
