"""Tab/window capability consumed by the engine.

The browser's tab and window primitives are reached through ``BrowserHost``;
the host reports tab and window events back through ``HostEventListener``.
Operations are asynchronous and complete out of order: a ``create_tab`` call
returning does *not* mean the tab finished loading -- that arrives later as a
``complete`` tab update.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tabspace.background.models.workspace import Tab


class HostError(RuntimeError):
    """Raised by a host adapter when a browser operation is rejected."""


@dataclass(frozen=True)
class HostTab:
    """A live tab as reported by the host."""

    id: int
    window_id: int
    url: str
    title: str = ""
    fav_icon_url: str | None = None

    def to_tab(self) -> Tab:
        return Tab(title=self.title, url=self.url, fav_icon_url=self.fav_icon_url)


@runtime_checkable
class HostEventListener(Protocol):
    """Receiver of host events.  Implemented by ``Engine``."""

    async def on_window_created(self, window_id: int) -> None: ...

    async def on_window_removed(self, window_id: int) -> None: ...

    async def on_tab_updated(self, window_id: int, tab_id: int, status: str) -> None: ...

    async def on_tab_removed(self, window_id: int, tab_id: int, is_window_closing: bool = False) -> None: ...


@runtime_checkable
class BrowserHost(Protocol):
    """Async protocol over the browser's tab and window primitives."""

    async def get_all_windows(self) -> list[int]:
        """Return the ids of every open window."""
        ...

    async def query_tabs(self, window_id: int) -> list[HostTab]:
        """Return the tabs currently open in *window_id*, in strip order."""
        ...

    async def create_tab(self, window_id: int, url: str) -> int:
        """Open *url* in a new tab of *window_id*.  Returns the new tab id."""
        ...

    async def remove_tabs(self, tab_ids: Sequence[int]) -> None:
        """Close *tab_ids*.  Each closure is reported as its own event."""
        ...

    def subscribe(self, listener: HostEventListener) -> None:
        """Start delivering host events to *listener*."""
        ...
