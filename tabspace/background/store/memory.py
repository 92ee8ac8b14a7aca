"""In-memory storage gateway.

Used for ephemeral runs (``TABSPACE_STORAGE=memory``) and in tests.  Values
are deep-copied on the way in and out so callers never share state with the
store.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any


class MemoryStorage:
    """Dict-backed implementation of the StorageGateway protocol."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(dict(initial or {}))

    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def set(self, items: Mapping[str, Any]) -> None:
        self._data.update(copy.deepcopy(dict(items)))

    async def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, Any]:
        """Return a copy of everything stored."""
        return copy.deepcopy(self._data)
