"""Read-only parameter containers."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from .errors import ImmutabilityViolation


class Params(Mapping[str, Any]):
    """Immutable mapping with "dot" notation lookups.

    >>> p = Params({"db": {"driver": "sqlite"}})
    >>> p.get("db.driver")
    'sqlite'
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data = dict(data or {})

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __setitem__(self, key: str, value: Any) -> None:
        raise ImmutabilityViolation("Params objects are immutable")

    def __delitem__(self, key: str) -> None:
        raise ImmutabilityViolation("Params objects are immutable")

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._data:
            return self._data[key]

        value: Any = self._data
        for segment in key.split("."):
            if not isinstance(value, Mapping) or segment not in value:
                return default
            value = value[segment]
        return value

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def __repr__(self) -> str:
        return f"Params({self._data!r})"
