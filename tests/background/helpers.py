"""Fakes and helpers shared by the background-engine tests.

``FakeHost`` stands in for the browser.  It applies creates and removes to
its own tab table immediately but never emits events by itself: tests
deliver ``complete`` updates and removals to the engine explicitly, in
whatever order the scenario needs.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from tabspace.background.host import HostError, HostEventListener, HostTab
from tabspace.background.managers.workspaces import WorkspaceRepository
from tabspace.background.models.workspace import Tab, Workspace
from tabspace.background.store.base import StorageError
from tabspace.background.store.memory import MemoryStorage

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeHost:
    """In-memory browser with windows, tabs and failure switches."""

    def __init__(self) -> None:
        self.tabs: dict[int, list[HostTab]] = {}
        self.created: list[tuple[int, str]] = []
        self.removed: list[int] = []
        self.listener: HostEventListener | None = None
        self.query_count = 0

        self.fail_create_urls: set[str] = set()
        self.fail_remove = False
        self.query_delay = 0.0
        self._next_tab_id = 1000

    def add_window(self, window_id: int, urls: Iterable[str]) -> list[HostTab]:
        self.tabs[window_id] = []
        for url in urls:
            self.add_tab(window_id, url)
        return list(self.tabs[window_id])

    def add_tab(self, window_id: int, url: str) -> HostTab:
        self._next_tab_id += 1
        tab = HostTab(id=self._next_tab_id, window_id=window_id, url=url, title=url.removeprefix("http://"))
        self.tabs.setdefault(window_id, []).append(tab)
        return tab

    def tab_ids(self, window_id: int) -> list[int]:
        return [tab.id for tab in self.tabs.get(window_id, [])]

    # -- BrowserHost -----------------------------------------------------------

    async def get_all_windows(self) -> list[int]:
        return list(self.tabs)

    async def query_tabs(self, window_id: int) -> list[HostTab]:
        self.query_count += 1
        if self.query_delay:
            await asyncio.sleep(self.query_delay)
        return list(self.tabs.get(window_id, []))

    async def create_tab(self, window_id: int, url: str) -> int:
        if url in self.fail_create_urls:
            msg = f"cannot open {url}"
            raise HostError(msg)
        self.created.append((window_id, url))
        return self.add_tab(window_id, url).id

    async def remove_tabs(self, tab_ids: Sequence[int]) -> None:
        if self.fail_remove:
            msg = "cannot close tabs"
            raise HostError(msg)
        doomed = set(tab_ids)
        for window_id, tabs in self.tabs.items():
            self.tabs[window_id] = [tab for tab in tabs if tab.id not in doomed]
        self.removed.extend(tab_ids)

    def subscribe(self, listener: HostEventListener) -> None:
        self.listener = listener


class FailingStorage(MemoryStorage):
    """Memory store whose writes can be switched off."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        super().__init__(initial)
        self.fail_writes = False
        self.fail_reads = False

    async def get(self, key: str, default: Any = None) -> Any:
        if self.fail_reads:
            msg = "store unavailable"
            raise StorageError(msg)
        return await super().get(key, default)

    async def set(self, items: Mapping[str, Any]) -> None:
        if self.fail_writes:
            msg = "store is read-only"
            raise StorageError(msg)
        await super().set(items)

    async def remove(self, *keys: str) -> None:
        if self.fail_writes:
            msg = "store is read-only"
            raise StorageError(msg)
        await super().remove(*keys)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def seed_workspace(
    repository: WorkspaceRepository, name: str, urls: Iterable[str], color: str = "blue"
) -> int:
    tabs = [Tab(title=url.removeprefix("http://"), url=url) for url in urls]
    saved = await repository.save(Workspace(name=name, color=color), tabs)
    return saved.id


def message(type_: str, window_id: int | None = None, payload: Any = None) -> dict[str, Any]:
    raw: dict[str, Any] = {"type": type_}
    if window_id is not None:
        raw["window"] = {"id": window_id, "focused": True}
    if payload is not None:
        raw["payload"] = payload
    return raw
