"""Fixtures for background-engine tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import pytest
from helpers import FailingStorage, FakeHost

from tabspace.background.app import create_engine
from tabspace.background.broadcast import BroadcastChannel, Subscription
from tabspace.background.engine import Engine
from tabspace.background.managers.workspaces import WorkspaceRepository
from tabspace.background.settings import TabspaceSettings

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> TabspaceSettings:
    return TabspaceSettings(storage="memory", data_root=str(tmp_path), swap_timeout=30.0)


@pytest.fixture
def storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def repository(storage: FailingStorage) -> WorkspaceRepository:
    return WorkspaceRepository(storage)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def channel() -> BroadcastChannel:
    return BroadcastChannel()


@pytest.fixture
def subscription(channel: BroadcastChannel) -> Subscription:
    return channel.subscribe()


@pytest.fixture
async def start_engine(
    host: FakeHost,
    storage: FailingStorage,
    channel: BroadcastChannel,
    settings: TabspaceSettings,
) -> AsyncIterator[Callable[..., Awaitable[Engine]]]:
    """Start an engine over the current host/storage state.

    Seed windows and workspaces first, then call ``await start_engine()``.
    """
    engines: list[Engine] = []

    async def _start(**overrides: Any) -> Engine:
        engine = create_engine(
            host,
            settings.model_copy(update=overrides) if overrides else settings,
            storage=storage,
            channel=channel,
        )
        await engine.start()
        engines.append(engine)
        return engine

    yield _start

    for engine in engines:
        await engine.close()


