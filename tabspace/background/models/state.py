"""Runtime state owned by the synchronization engine.

Every value here is frozen.  Transitions build a new ``Model`` by shallow copy
so untouched sub-trees are shared verbatim between the previous and the next
snapshot; ``Engine.set_model`` relies on identity to detect change.
"""

from __future__ import annotations

from pydantic import Field

from tabspace.background.models.enums import AppState, WindowState
from tabspace.background.models.workspace import CamelModel, UserSettings, Workspace


class WindowRuntimeState(CamelModel):
    """Per-window record.  Created when a window appears, dropped when it closes."""

    window_id: int
    machine_state: WindowState = WindowState.IDLE
    workspace_id_in_use: int | None = None
    num_tabs: int = 0

    # -- Swap bookkeeping ------------------------------------------------------
    num_tabs_opening: int = 0
    num_tabs_closing: int = 0
    workspace_id_opening: int | None = None
    swap_generation: int = 0

    @property
    def is_quiescent(self) -> bool:
        return self.num_tabs_opening == 0 and self.num_tabs_closing == 0

    def evolve(self, **changes: object) -> WindowRuntimeState:
        return self.model_copy(update=changes)


class Model(CamelModel):
    """The single authoritative aggregate broadcast to UI clients."""

    app_state: AppState = AppState.LOADING_APP
    workspaces_by_id: dict[int, Workspace] = Field(default_factory=dict)
    workspace_ids: tuple[int, ...] = Field(default_factory=tuple)
    """Persisted ids in index order.  Excludes the last-session slot."""
    window_states: dict[int, WindowRuntimeState] = Field(default_factory=dict)
    settings: UserSettings = Field(default_factory=UserSettings)

    def evolve(self, **changes: object) -> Model:
        return self.model_copy(update=changes)

    # -- Windows ---------------------------------------------------------------

    def window(self, window_id: int) -> WindowRuntimeState | None:
        return self.window_states.get(window_id)

    def with_window(self, record: WindowRuntimeState) -> Model:
        if self.window_states.get(record.window_id) is record:
            return self
        return self.evolve(window_states={**self.window_states, record.window_id: record})

    def without_window(self, window_id: int) -> Model:
        if window_id not in self.window_states:
            return self
        states = {k: v for k, v in self.window_states.items() if k != window_id}
        return self.evolve(window_states=states)

    # -- Workspaces ------------------------------------------------------------

    def with_workspace(self, workspace: Workspace, workspace_ids: tuple[int, ...] | None = None) -> Model:
        changes: dict[str, object] = {"workspaces_by_id": {**self.workspaces_by_id, workspace.id: workspace}}
        if workspace_ids is not None:
            changes["workspace_ids"] = workspace_ids
        return self.evolve(**changes)

    def without_workspace(self, workspace_id: int, workspace_ids: tuple[int, ...]) -> Model:
        workspaces = {k: v for k, v in self.workspaces_by_id.items() if k != workspace_id}
        return self.evolve(workspaces_by_id=workspaces, workspace_ids=workspace_ids)


class WindowView(CamelModel):
    """What a popup or new-tab page renders for its own window."""

    workspaces: tuple[int, ...]
    workspaces_info: dict[int, Workspace]
    status: WindowRuntimeState | None
    num_tabs: int
    settings: UserSettings


def project_window(model: Model, window_id: int) -> WindowView:
    """Project *model* onto the view a client in *window_id* renders."""
    status = model.window(window_id)
    return WindowView(
        workspaces=model.workspace_ids,
        workspaces_info=model.workspaces_by_id,
        status=status,
        num_tabs=status.num_tabs if status else 0,
        settings=model.settings,
    )
