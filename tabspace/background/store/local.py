"""Local filesystem storage gateway.

Keeps the whole key/value store in a single JSON document::

    {data_root}/{prefix}/storage.json

When prefix is None, the path collapses to::

    {data_root}/storage.json

Uses ``anyio.to_thread.run_sync`` for non-blocking file I/O.

Writes are atomic: the updated document is written to a temporary file in
the same directory, then renamed over the target.  A multi-key ``set`` is
therefore one atomic write, which is what keeps a workspace record and the
id index consistent with each other.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from collections.abc import Mapping
from functools import partial
from pathlib import Path
from typing import Any

import anyio
from anyio import to_thread

from tabspace.background.store.base import StorageError


class LocalStorage:
    """Single-file JSON implementation of the StorageGateway protocol."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = anyio.Lock()

    @classmethod
    def in_data_root(cls, data_root: str | Path, prefix: str | None = None) -> LocalStorage:
        base = Path(data_root)
        if prefix:
            base = base / prefix
        return cls(base / "storage.json")

    @property
    def path(self) -> Path:
        return self._path

    # -- Read ------------------------------------------------------------------

    async def get(self, key: str, default: Any = None) -> Any:
        data = await self._load()
        return data.get(key, default)

    # -- Write -----------------------------------------------------------------

    async def set(self, items: Mapping[str, Any]) -> None:
        async with self._lock:
            data = await self._load()
            data.update(items)
            await self._dump(data)

    async def remove(self, *keys: str) -> None:
        async with self._lock:
            data = await self._load()
            if not any(key in data for key in keys):
                return
            for key in keys:
                data.pop(key, None)
            await self._dump(data)

    # -- Helpers ---------------------------------------------------------------

    async def _load(self) -> dict[str, Any]:
        try:
            raw = await to_thread.run_sync(partial(_read_file, self._path))
        except OSError as exc:
            msg = f"Cannot read {self._path}: {exc}"
            raise StorageError(msg) from exc
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"Corrupt store {self._path}: {exc}"
            raise StorageError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Corrupt store {self._path}: top-level value is not an object"
            raise StorageError(msg)
        return data

    async def _dump(self, data: dict[str, Any]) -> None:
        payload = json.dumps(data, indent=2, sort_keys=True)
        try:
            await to_thread.run_sync(partial(_atomic_write, self._path, payload))
        except OSError as exc:
            msg = f"Cannot write {self._path}: {exc}"
            raise StorageError(msg) from exc


# -- Sync helpers (run in thread pool) -----------------------------------------


def _atomic_write(path: Path, data: str) -> None:
    """Write data atomically: temp file + rename.

    The temp file is created in the same directory so ``os.replace`` is
    atomic on POSIX.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def _read_file(path: Path) -> str | None:
    """Read file contents, or ``None`` if the store was never written."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
