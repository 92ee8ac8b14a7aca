"""Storage gateway implementations for workspace persistence."""

from tabspace.background.store.base import StorageError, StorageGateway
from tabspace.background.store.local import LocalStorage
from tabspace.background.store.memory import MemoryStorage

__all__ = ["LocalStorage", "MemoryStorage", "StorageError", "StorageGateway"]
