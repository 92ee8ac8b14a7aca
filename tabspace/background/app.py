"""Wiring for the background engine.

A host adapter (the browser bridge) owns the process; it enters ``lifespan``
with its ``BrowserHost`` implementation and feeds client messages to
``engine.handle_message`` while the context is open::

    channel = BroadcastChannel()
    async with lifespan(host, channel=channel) as engine:
        with channel.subscribe() as subscription:
            ...
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from loguru import logger

from tabspace.background.broadcast import BroadcastChannel
from tabspace.background.engine import Engine
from tabspace.background.log import setup_logging
from tabspace.background.managers.user_settings import UserSettingsRepository
from tabspace.background.managers.workspaces import WorkspaceRepository
from tabspace.background.settings import TabspaceSettings, get_settings
from tabspace.background.store.base import StorageGateway
from tabspace.background.store.local import LocalStorage
from tabspace.background.store.memory import MemoryStorage

if TYPE_CHECKING:
    from tabspace.background.host import BrowserHost


def create_storage(settings: TabspaceSettings) -> StorageGateway:
    """Create the storage backend based on configuration."""
    if settings.storage == "memory":
        return MemoryStorage()
    return LocalStorage.in_data_root(settings.data_root, prefix=settings.data_prefix)


def create_engine(
    host: BrowserHost,
    settings: TabspaceSettings | None = None,
    *,
    storage: StorageGateway | None = None,
    channel: BroadcastChannel | None = None,
) -> Engine:
    settings = settings or get_settings()
    storage = storage if storage is not None else create_storage(settings)
    return Engine(
        host=host,
        repository=WorkspaceRepository(storage),
        user_settings=UserSettingsRepository(storage, default_theme=settings.default_theme),
        channel=channel if channel is not None else BroadcastChannel(settings.broadcast_queue_size),
        settings=settings,
    )


@asynccontextmanager
async def lifespan(
    host: BrowserHost,
    settings: TabspaceSettings | None = None,
    *,
    channel: BroadcastChannel | None = None,
) -> AsyncIterator[Engine]:
    """Start an engine for *host* and close it on exit."""
    # -- Startup ---------------------------------------------------------------
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    location = "in memory" if settings.storage == "memory" else str(settings.storage_path())
    logger.info("Background engine starting (store={}, swap_timeout={}s)", location, settings.swap_timeout)

    engine = create_engine(host, settings, channel=channel)
    await engine.start()

    try:
        yield engine
    finally:
        # -- Shutdown ----------------------------------------------------------
        logger.info("Background engine shutting down (windows={})", len(engine.model.window_states))
        await engine.close()
