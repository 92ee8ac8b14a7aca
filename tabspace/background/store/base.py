"""Storage gateway interface.

A flat key/value store of JSON-compatible values, mirroring the host's
synced extension storage.  Keys are workspace ids (as strings) or the
well-known meta-keys below.  The gateway does marshaling only; all workspace
semantics live in ``managers.workspaces``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

WORKSPACE_IDS_KEY = "__workspaces_ids__"
LAST_ID_KEY = "__workspaces_last_id__"
SETTINGS_KEY = "__settings__"


class StorageError(RuntimeError):
    """Raised when the backing store cannot be read or written."""


@runtime_checkable
class StorageGateway(Protocol):
    """Async protocol for the persisted key/value store."""

    async def get(self, key: str, default: Any = None) -> Any:
        """Return the value under *key*, or *default* when it was never written."""
        ...

    async def set(self, items: Mapping[str, Any]) -> None:
        """Write all *items* in one call.  Either every key is written or none is."""
        ...

    async def remove(self, *keys: str) -> None:
        """Delete *keys*.  Missing keys are ignored."""
        ...
