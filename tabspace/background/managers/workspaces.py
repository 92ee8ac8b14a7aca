"""Workspace repository: identity assignment, CRUD and the id index.

Storage layout (see ``store.base``)::

    __workspaces_ids__      -> [1, 2, 5]              ordered id index
    __workspaces_last_id__  -> 5                      highest id ever allocated
    "1"                     -> {id, name, color, tabs}

A workspace record, the index and the high-water mark are written in one
``StorageGateway.set`` call, so they are never observed out of step.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, NamedTuple

from loguru import logger

from tabspace.background.models.workspace import LAST_SESSION_ID, Tab, Workspace
from tabspace.background.store.base import LAST_ID_KEY, WORKSPACE_IDS_KEY

if TYPE_CHECKING:
    from tabspace.background.store.base import StorageGateway


class WorkspaceNotFoundError(LookupError):
    """Raised when a workspace is not found."""


class SavedWorkspace(NamedTuple):
    """Result of a write: the workspace id and the exact delta persisted."""

    id: int
    delta: dict[str, Any]

    @property
    def workspace(self) -> Workspace:
        return Workspace.model_validate(self.delta[str(self.id)])

    @property
    def workspace_ids(self) -> tuple[int, ...] | None:
        """The new index, or ``None`` when the write left it untouched."""
        ids = self.delta.get(WORKSPACE_IDS_KEY)
        return tuple(ids) if ids is not None else None


def next_workspace_id(ids: Iterable[int], last_id: int = 0) -> int:
    """Allocate the id after every id in use and every id ever handed out."""
    return max((*ids, last_id), default=0) + 1


class WorkspaceRepository:
    """CRUD over persisted workspaces.  Stateless beyond its storage reference."""

    def __init__(self, storage: StorageGateway) -> None:
        self._storage = storage

    # -- Read ------------------------------------------------------------------

    async def get_ids(self) -> tuple[int, ...]:
        ids = await self._storage.get(WORKSPACE_IDS_KEY, [])
        return tuple(int(i) for i in ids if i is not None)

    async def get(self, workspace_id: int) -> Workspace | None:
        raw = await self._storage.get(str(workspace_id))
        if raw is None:
            return None
        return Workspace.model_validate(raw)

    async def require(self, workspace_id: int) -> Workspace:
        """Get a workspace by id.  Raises ``WorkspaceNotFoundError`` if missing."""
        workspace = await self.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        return workspace

    async def get_all(self) -> dict[int, Workspace]:
        """Load every indexed workspace, in index order."""
        workspaces: dict[int, Workspace] = {}
        for workspace_id in await self.get_ids():
            workspace = await self.get(workspace_id)
            if workspace is None:
                logger.warning("Workspace {} is indexed but has no record; skipping", workspace_id)
                continue
            workspaces[workspace_id] = workspace
        return workspaces

    # -- Write -----------------------------------------------------------------

    async def save(self, workspace: Workspace, tabs: Iterable[Tab]) -> SavedWorkspace:
        """Write *workspace* with *tabs*, allocating an id when it has none.

        Id ``0`` (the last-session slot) is never persisted; saving it
        allocates a fresh id instead.
        """
        ids = await self.get_ids()
        last_id = int(await self._storage.get(LAST_ID_KEY, 0))

        if workspace.id is None or workspace.id == LAST_SESSION_ID:
            workspace_id = next_workspace_id(ids, last_id)
        else:
            workspace_id = workspace.id

        record = workspace.model_copy(update={"id": workspace_id, "tabs": tuple(tabs)})
        index = [*ids] if workspace_id in ids else [*ids, workspace_id]
        delta: dict[str, Any] = {
            str(workspace_id): record.dump(),
            WORKSPACE_IDS_KEY: index,
            LAST_ID_KEY: max(last_id, workspace_id),
        }
        await self._storage.set(delta)

        logger.info("Workspace saved: {} ({!r}, {} tabs)", workspace_id, record.name, len(record.tabs))
        return SavedWorkspace(workspace_id, delta)

    async def update(self, workspace: Workspace, tabs: Iterable[Tab]) -> SavedWorkspace:
        """Overwrite an existing record.  The index is left untouched."""
        if workspace.id is None:
            msg = "Cannot update a workspace without an id"
            raise ValueError(msg)
        if workspace.id == LAST_SESSION_ID:
            msg = "The last-session slot is not persisted; save it to promote it"
            raise ValueError(msg)

        record = workspace.model_copy(update={"tabs": tuple(tabs)})
        delta: dict[str, Any] = {str(workspace.id): record.dump()}
        await self._storage.set(delta)

        logger.debug("Workspace updated: {} ({} tabs)", workspace.id, len(record.tabs))
        return SavedWorkspace(workspace.id, delta)

    async def remove(self, workspace_id: int) -> tuple[int, ...]:
        """Delete a record and its index entry.  Returns the new index.

        The index is rewritten before the record is dropped, so a failure
        in between leaves an unreachable record rather than a dangling id.
        """
        ids = await self.get_ids()
        remaining = tuple(i for i in ids if i != workspace_id)
        await self._storage.set({WORKSPACE_IDS_KEY: list(remaining)})
        await self._storage.remove(str(workspace_id))

        logger.info("Workspace removed: {}", workspace_id)
        return remaining
