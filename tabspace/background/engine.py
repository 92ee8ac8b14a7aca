"""Synchronization engine -- owns the Model and keeps windows and workspaces in step.

The engine is the only writer of the Model.  Every handler runs on the one
asyncio event loop; a handler may suspend at any storage or host call and
other events interleave there.  Two rules keep that safe:

1. **Check, transition, then await.**  A window transition is applied with
   ``set_model`` before the handler's first suspension point, so a second
   command for the same window sees the new state and is rejected by the
   transition table instead of starting a concurrent operation.
2. **Re-read after every await.**  Window records are looked up again after
   each suspension; a record whose ``swap_generation`` moved on, or that
   disappeared with its window, is left alone.

Tab swap (``use_workspace``):

1. ``OPEN_WORKSPACE`` moves the window to ``openingWorkspace``.
2. The target workspace and the window's current tabs are read.
3. ``numTabsOpening`` / ``numTabsClosing`` are armed, then every create and
   every remove is issued.
4. ``complete`` tab updates and tab removals for that window count down.
5. When both counters reach zero the window is re-queried and
   ``WORKSPACE_OPENED`` is applied together with the attachment.

A swap that never quiesces is forced after ``settings.swap_timeout``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Mapping, Sequence
from typing import TYPE_CHECKING, Any, assert_never

from loguru import logger
from pydantic import ValidationError

from tabspace.background.host import HostError, HostTab
from tabspace.background.machines import WINDOW_TRANSITIONS, create_app_machine, initial_window_state
from tabspace.background.managers.workspaces import WorkspaceNotFoundError
from tabspace.background.models.enums import AppEvent, AppState, BroadcastType, TabStatus, WindowEvent, WindowState
from tabspace.background.models.messages import (
    Broadcast,
    ChangeTheme,
    Command,
    CreateWorkspace,
    DeleteWorkspace,
    DisconnectWorkspace,
    GetModel,
    NewtabOpened,
    OpenChromePage,
    PopupOpened,
    UpdateWorkspace,
    UseWorkspace,
    WorkspaceDraft,
    WorkspaceEdit,
    parse_command,
)
from tabspace.background.models.state import Model, WindowRuntimeState
from tabspace.background.models.workspace import LAST_SESSION_ID, Tab, Workspace, last_session
from tabspace.background.settings import TabspaceSettings, get_settings
from tabspace.background.store.base import StorageError

if TYPE_CHECKING:
    from tabspace.background.broadcast import BroadcastChannel
    from tabspace.background.host import BrowserHost
    from tabspace.background.managers.user_settings import UserSettingsRepository
    from tabspace.background.managers.workspaces import WorkspaceRepository


class Engine:
    """Background synchronization engine.

    Implements ``HostEventListener``; the host adapter feeds tab and window
    events in, UI adapters feed command messages in via ``handle_message``.
    """

    def __init__(
        self,
        *,
        host: BrowserHost,
        repository: WorkspaceRepository,
        user_settings: UserSettingsRepository,
        channel: BroadcastChannel,
        settings: TabspaceSettings | None = None,
    ) -> None:
        self._host = host
        self._repository = repository
        self._user_settings = user_settings
        self._channel = channel
        self._settings = settings or get_settings()

        self._app = create_app_machine()
        self._model = Model(app_state=self._app.current_state)

        self._tasks: set[asyncio.Task[Any]] = set()
        self._swap_timers: dict[int, asyncio.TimerHandle] = {}
        self._syncing: set[int] = set()
        self._sync_dirty: set[int] = set()

    # -- Model gate ------------------------------------------------------------

    @property
    def model(self) -> Model:
        return self._model

    @property
    def app_state(self) -> AppState:
        return self._app.current_state

    @property
    def is_loaded(self) -> bool:
        return self._app.current_state is AppState.APP_LOADED

    def set_model(self, model: Model) -> bool:
        """Replace the Model if *model* is a different object.

        Broadcasts the new Model when the application is loaded.  Returns
        whether anything changed.
        """
        if model is self._model:
            return False
        self._model = model
        if self.is_loaded:
            self._channel.publish(Broadcast(type=BroadcastType.MODEL_UPDATED, payload=model))
        return True

    def _reply(self, broadcast_type: BroadcastType) -> None:
        if not self.is_loaded:
            logger.debug("App not loaded yet; {} deferred until the first broadcast", broadcast_type)
            return
        self._channel.publish(Broadcast(type=broadcast_type, payload=self._model))

    def _set_window(self, record: WindowRuntimeState) -> None:
        self.set_model(self._model.with_window(record))

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        """Load data, adopt already-open windows, then subscribe to host events."""
        # -- Data ------------------------------------------------------------------
        try:
            workspaces = await self._repository.get_all()
            user_settings = await self._user_settings.get()
        except StorageError as exc:
            logger.warning("Could not load workspaces, starting empty: {}", exc)
            workspaces = {}
            user_settings = self._model.settings.model_copy(update={"theme": self._settings.default_theme})

        self._app.send(AppEvent.DATA_LOADED)
        self.set_model(
            self._model.evolve(
                app_state=self._app.current_state,
                workspaces_by_id=workspaces,
                workspace_ids=tuple(workspaces),
                settings=user_settings,
            )
        )
        logger.info("Loaded {} workspaces", len(workspaces))

        # -- Windows ---------------------------------------------------------------
        state = initial_window_state(bool(workspaces))
        records: dict[int, WindowRuntimeState] = {}
        try:
            window_ids = await self._host.get_all_windows()
        except HostError as exc:
            logger.warning("Could not enumerate open windows: {}", exc)
            window_ids = []
        for window_id in window_ids:
            tabs = await self._query_tabs_or_empty(window_id)
            records[window_id] = WindowRuntimeState(window_id=window_id, machine_state=state, num_tabs=len(tabs))

        self._app.send(AppEvent.CHECK_COMPLETED)
        self.set_model(
            self._model.evolve(
                app_state=self._app.current_state,
                window_states={**self._model.window_states, **records},
            )
        )
        logger.info("Adopted {} open windows", len(records))

        # -- Events ----------------------------------------------------------------
        self._host.subscribe(self)
        self._app.send(AppEvent.SUBSCRIBED_TO_EVENTS)
        self.set_model(self._model.evolve(app_state=self._app.current_state))
        logger.info("Engine loaded")

    async def wait_idle(self) -> None:
        """Wait until every background task spawned by the engine has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Cancel pending swap timeouts and background tasks, close the channel."""
        for handle in self._swap_timers.values():
            handle.cancel()
        self._swap_timers.clear()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._channel.close()
        logger.info("Engine closed")

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -- Commands --------------------------------------------------------------

    async def handle_message(self, raw: Mapping[str, Any]) -> None:
        """Validate and dispatch a raw client message.  Invalid ones are dropped."""
        try:
            command = parse_command(raw)
        except ValidationError as exc:
            logger.warning("Dropping invalid message {!r}: {}", raw.get("type"), exc)
            return
        await self.handle_command(command)

    async def handle_command(self, command: Command) -> None:
        window_id = command.window.id if command.window else None
        logger.debug("Command {} (window={})", command.type, window_id)

        match command:
            case PopupOpened():
                self._reply(BroadcastType.INIT_POPUP)
            case NewtabOpened():
                self._reply(BroadcastType.INIT_NEWTAB)
            case GetModel():
                self._reply(BroadcastType.MODEL_UPDATED)
            case UseWorkspace():
                await self.use_workspace(command.payload, window_id)
            case CreateWorkspace():
                await self.create_workspace(command.payload, window_id)
            case UpdateWorkspace():
                await self.update_workspace(command.payload, window_id)
            case DeleteWorkspace():
                await self.delete_workspace(command.payload, window_id)
            case DisconnectWorkspace():
                self.disconnect_workspace(window_id)
            case OpenChromePage():
                await self.open_page(command.payload, window_id)
            case ChangeTheme():
                await self.change_theme(command.payload)
            case _:
                assert_never(command)

    def _window_for(self, window_id: int | None, event: WindowEvent) -> WindowRuntimeState | None:
        """Return the window record if *event* is available for it, else ``None``."""
        record = self._model.window(window_id) if window_id is not None else None
        if record is None:
            logger.debug("Unknown window {}; {} ignored", window_id, event)
            return None
        if not WINDOW_TRANSITIONS.is_available(record.machine_state, event):
            logger.debug("Window {}: {} unavailable in {}; ignored", window_id, event, record.machine_state)
            return None
        return record

    # -- use_workspace (tab swap) ------------------------------------------------

    async def use_workspace(self, workspace_id: int, window_id: int | None) -> None:
        previous = self._window_for(window_id, WindowEvent.OPEN_WORKSPACE)
        if previous is None:
            return
        window_id = previous.window_id

        generation = previous.swap_generation + 1
        self._set_window(
            previous.evolve(
                machine_state=WINDOW_TRANSITIONS.next_state(previous.machine_state, WindowEvent.OPEN_WORKSPACE),
                workspace_id_opening=workspace_id,
                num_tabs_opening=0,
                num_tabs_closing=0,
                swap_generation=generation,
            )
        )

        try:
            target = await self._load_workspace(workspace_id)
            current_tabs = await self._host.query_tabs(window_id)
            await self._capture_outgoing(previous, current_tabs)
            if _is_attached_to(previous, workspace_id):
                # Reopening the attached workspace: use the tabs just captured.
                target = await self._load_workspace(workspace_id)
        except WorkspaceNotFoundError:
            logger.warning("Window {}: workspace {} not found, nothing to open", window_id, workspace_id)
            self._rollback_swap(previous, generation)
            return
        except (StorageError, HostError) as exc:
            logger.warning("Window {}: could not start swap to workspace {}: {}", window_id, workspace_id, exc)
            self._rollback_swap(previous, generation)
            return

        record = self._model.window(window_id)
        if record is None or record.swap_generation != generation:
            logger.debug("Window {} went away before its swap started", window_id)
            return

        urls = [tab.url for tab in target.tabs] or [self._settings.new_tab_url]
        tab_ids = [tab.id for tab in current_tabs]

        # Counters must be armed before the first create/remove is issued.
        self._set_window(record.evolve(num_tabs_opening=len(urls), num_tabs_closing=len(tab_ids)))
        self._schedule_swap_timeout(window_id, generation)
        logger.info(
            "Window {}: swapping to workspace {} (+{} / -{} tabs)", window_id, workspace_id, len(urls), len(tab_ids)
        )

        await self._issue_swap(window_id, generation, urls, tab_ids)

    async def _load_workspace(self, workspace_id: int) -> Workspace:
        if workspace_id == LAST_SESSION_ID:
            workspace = self._model.workspaces_by_id.get(LAST_SESSION_ID)
            if workspace is None:
                raise WorkspaceNotFoundError(workspace_id)
            return workspace
        return await self._repository.require(workspace_id)

    async def _capture_outgoing(self, previous: WindowRuntimeState, current_tabs: Sequence[HostTab]) -> None:
        """Keep the tabs about to be closed: in the attached workspace or the last-session slot."""
        tabs = tuple(tab.to_tab() for tab in current_tabs)
        if previous.machine_state is WindowState.WORKSPACE_IN_USE and previous.workspace_id_in_use is not None:
            try:
                await self._store_tabs(previous.workspace_id_in_use, tabs)
            except WorkspaceNotFoundError:
                logger.debug("Outgoing workspace {} no longer exists", previous.workspace_id_in_use)
            return
        self.set_model(self._model.with_workspace(last_session(tabs)))

    async def _issue_swap(self, window_id: int, generation: int, urls: list[str], tab_ids: list[int]) -> None:
        # Creates go first: removing every tab first would close the window.
        results = await asyncio.gather(
            *(self._host.create_tab(window_id, url) for url in urls),
            return_exceptions=True,
        )
        failed = [r for r in results if isinstance(r, Exception)]
        if failed:
            logger.warning("Window {}: {} of {} tab creations failed: {}", window_id, len(failed), len(urls), failed[0])
            await self._count_down(window_id, opening=len(failed), generation=generation)

        if not tab_ids:
            return
        try:
            await self._host.remove_tabs(tab_ids)
        except HostError as exc:
            logger.warning("Window {}: removing {} tabs failed: {}", window_id, len(tab_ids), exc)
            await self._count_down(window_id, closing=len(tab_ids), generation=generation)

    def _rollback_swap(self, previous: WindowRuntimeState, generation: int) -> None:
        record = self._model.window(previous.window_id)
        if record is None or record.swap_generation != generation:
            return
        self._set_window(
            record.evolve(
                machine_state=previous.machine_state,
                workspace_id_opening=None,
                num_tabs_opening=0,
                num_tabs_closing=0,
            )
        )

    async def _count_down(
        self, window_id: int, *, opening: int = 0, closing: int = 0, generation: int | None = None
    ) -> None:
        """Account for finished swap operations; complete the swap at quiescence."""
        record = self._model.window(window_id)
        if record is None or record.machine_state is not WindowState.OPENING_WORKSPACE:
            return
        if generation is not None and record.swap_generation != generation:
            return
        # Not armed yet, or already quiescent: the event is not part of a swap.
        if record.is_quiescent:
            return

        num_opening = max(0, record.num_tabs_opening - opening)
        num_closing = max(0, record.num_tabs_closing - closing)
        if (num_opening, num_closing) == (record.num_tabs_opening, record.num_tabs_closing):
            return

        updated = record.evolve(num_tabs_opening=num_opening, num_tabs_closing=num_closing)
        self._set_window(updated)
        if updated.is_quiescent:
            await self._complete_swap(window_id, updated.swap_generation)

    async def _complete_swap(self, window_id: int, generation: int) -> None:
        tabs = await self._query_tabs_or_none(window_id)

        record = self._model.window(window_id)
        if (
            record is None
            or record.swap_generation != generation
            or record.machine_state is not WindowState.OPENING_WORKSPACE
        ):
            return

        self._cancel_swap_timeout(window_id)
        opened = record.evolve(
            machine_state=WINDOW_TRANSITIONS.next_state(record.machine_state, WindowEvent.WORKSPACE_OPENED),
            workspace_id_in_use=record.workspace_id_opening,
            workspace_id_opening=None,
            num_tabs=len(tabs) if tabs is not None else record.num_tabs,
            num_tabs_opening=0,
            num_tabs_closing=0,
        )
        if opened.workspace_id_in_use not in self._model.workspaces_by_id:
            logger.warning("Window {}: workspace {} was deleted while opening", window_id, opened.workspace_id_in_use)
            self.set_model(_refresh_hints(self._model.with_window(_detach(opened))))
            return
        self._set_window(opened)
        logger.info("Window {}: workspace {} in use ({} tabs)", window_id, opened.workspace_id_in_use, opened.num_tabs)

    def _schedule_swap_timeout(self, window_id: int, generation: int) -> None:
        self._cancel_swap_timeout(window_id)
        loop = asyncio.get_running_loop()
        self._swap_timers[window_id] = loop.call_later(
            self._settings.swap_timeout, self._on_swap_timeout, window_id, generation
        )

    def _cancel_swap_timeout(self, window_id: int) -> None:
        handle = self._swap_timers.pop(window_id, None)
        if handle is not None:
            handle.cancel()

    def _on_swap_timeout(self, window_id: int, generation: int) -> None:
        self._swap_timers.pop(window_id, None)
        record = self._model.window(window_id)
        if (
            record is None
            or record.swap_generation != generation
            or record.machine_state is not WindowState.OPENING_WORKSPACE
        ):
            return
        logger.warning(
            "Window {}: swap still pending after {}s ({} opening, {} closing); forcing quiescence",
            window_id,
            self._settings.swap_timeout,
            record.num_tabs_opening,
            record.num_tabs_closing,
        )
        self._set_window(record.evolve(num_tabs_opening=0, num_tabs_closing=0))
        self._spawn(self._complete_swap(window_id, generation))

    # -- create / update / delete / disconnect -----------------------------------

    async def create_workspace(self, draft: WorkspaceDraft, window_id: int | None) -> None:
        """Save the window's current tabs as a new workspace and attach it."""
        previous = self._window_for(window_id, WindowEvent.CREATE_WORKSPACE)
        if previous is None:
            return
        window_id = previous.window_id

        # Attach first so a double-submitted form is rejected by the table.
        self._set_window(
            previous.evolve(
                machine_state=WINDOW_TRANSITIONS.next_state(previous.machine_state, WindowEvent.CREATE_WORKSPACE),
                workspace_id_in_use=None,
            )
        )

        try:
            host_tabs = await self._host.query_tabs(window_id)
            saved = await self._repository.save(
                Workspace(name=draft.name, color=draft.color),
                (tab.to_tab() for tab in host_tabs),
            )
        except (StorageError, HostError) as exc:
            logger.warning("Window {}: could not create workspace {!r}: {}", window_id, draft.name, exc)
            record = self._model.window(window_id)
            if record is not None and record.workspace_id_in_use is None:
                self._set_window(record.evolve(machine_state=previous.machine_state))
            return

        model = self._model.with_workspace(saved.workspace, saved.workspace_ids)
        record = model.window(window_id)
        if (
            record is not None
            and record.machine_state is WindowState.WORKSPACE_IN_USE
            and record.workspace_id_in_use is None
        ):
            model = model.with_window(record.evolve(workspace_id_in_use=saved.id, num_tabs=len(host_tabs)))
        self.set_model(_refresh_hints(model))

    async def update_workspace(self, edit: WorkspaceEdit, window_id: int | None) -> None:
        """Edit a workspace's name, color and tabs.  Id ``0`` promotes the last session."""
        if self._window_for(window_id, WindowEvent.UPDATE_WORKSPACE) is None:
            return

        if edit.id == LAST_SESSION_ID:
            await self._promote_last_session(edit)
            return

        if edit.id not in self._model.workspaces_by_id:
            logger.warning("Cannot update workspace {}: not found", edit.id)
            return
        try:
            saved = await self._repository.update(
                Workspace(id=edit.id, name=edit.name, color=edit.color),
                edit.tabs,
            )
        except StorageError as exc:
            logger.warning("Could not update workspace {}: {}", edit.id, exc)
            return
        if edit.id not in self._model.workspaces_by_id:
            return
        self.set_model(self._model.with_workspace(saved.workspace))

    async def _promote_last_session(self, edit: WorkspaceEdit) -> None:
        if LAST_SESSION_ID not in self._model.workspaces_by_id:
            logger.warning("No last session to save")
            return
        try:
            saved = await self._repository.save(
                Workspace(id=LAST_SESSION_ID, name=edit.name, color=edit.color),
                edit.tabs,
            )
        except StorageError as exc:
            logger.warning("Could not save the last session: {}", exc)
            return

        model = self._model.without_workspace(LAST_SESSION_ID, self._model.workspace_ids)
        model = model.with_workspace(saved.workspace, saved.workspace_ids)
        for record in model.window_states.values():
            if record.workspace_id_in_use == LAST_SESSION_ID:
                model = model.with_window(record.evolve(workspace_id_in_use=saved.id))
        self.set_model(_refresh_hints(model))
        logger.info("Last session saved as workspace {}", saved.id)

    async def delete_workspace(self, workspace_id: int, window_id: int | None) -> None:
        """Delete a workspace; windows using it are disconnected and keep their tabs."""
        if self._window_for(window_id, WindowEvent.DELETE_WORKSPACE) is None:
            return
        if workspace_id not in self._model.workspace_ids:
            logger.warning("Cannot delete workspace {}: not found", workspace_id)
            return

        try:
            remaining = await self._repository.remove(workspace_id)
        except StorageError as exc:
            logger.warning("Could not delete workspace {}: {}", workspace_id, exc)
            return

        model = self._model.without_workspace(workspace_id, remaining)
        for record in model.window_states.values():
            if record.workspace_id_in_use == workspace_id:
                model = model.with_window(_detach(record))
        self.set_model(_refresh_hints(model))

    def disconnect_workspace(self, window_id: int | None) -> None:
        """Detach the window from its workspace, keeping its tabs as they are."""
        record = self._window_for(window_id, WindowEvent.DISCONNECT_WORKSPACE)
        if record is None:
            return
        self.set_model(_refresh_hints(self._model.with_window(_detach(record))))

    # -- Misc commands -----------------------------------------------------------

    async def open_page(self, url: str, window_id: int | None) -> None:
        """Open a browser page (settings, extensions, ...) in the sender's window."""
        if window_id is None:
            logger.debug("open_chrome_page without a window; ignored")
            return
        try:
            await self._host.create_tab(window_id, url)
        except HostError as exc:
            logger.warning("Could not open {}: {}", url, exc)

    async def change_theme(self, theme: str) -> None:
        try:
            user_settings = await self._user_settings.set_theme(theme)
        except StorageError as exc:
            logger.warning("Could not change theme to {!r}: {}", theme, exc)
            return
        if user_settings != self._model.settings:
            self.set_model(self._model.evolve(settings=user_settings))

    # -- Host events -------------------------------------------------------------

    async def on_window_created(self, window_id: int) -> None:
        if self._model.window(window_id) is not None:
            return
        state = initial_window_state(bool(self._model.workspace_ids))
        self._set_window(WindowRuntimeState(window_id=window_id, machine_state=state))
        await self._refresh_tab_count(window_id)

    async def on_window_removed(self, window_id: int) -> None:
        # An in-flight swap is abandoned with its window.
        self._cancel_swap_timeout(window_id)
        self._sync_dirty.discard(window_id)
        self.set_model(self._model.without_window(window_id))

    async def on_tab_updated(self, window_id: int, tab_id: int, status: str) -> None:
        if status != TabStatus.COMPLETE:
            return
        await self._on_tab_changed(window_id, opening=1)

    async def on_tab_removed(self, window_id: int, tab_id: int, is_window_closing: bool = False) -> None:
        if is_window_closing:
            return
        await self._on_tab_changed(window_id, closing=1)

    async def _on_tab_changed(self, window_id: int, *, opening: int = 0, closing: int = 0) -> None:
        record = self._model.window(window_id)
        if record is None:
            return
        match record.machine_state:
            case WindowState.OPENING_WORKSPACE:
                await self._count_down(window_id, opening=opening, closing=closing)
            case WindowState.WORKSPACE_IN_USE:
                await self._sync_window(window_id)
            case WindowState.IDLE | WindowState.NO_DATA:
                await self._refresh_tab_count(window_id)

    # -- Ambient sync ------------------------------------------------------------

    async def _sync_window(self, window_id: int) -> None:
        """Rewrite the attached workspace from the window's tabs.

        Rewrites for one window are coalesced: events arriving while a rewrite
        is in flight trigger exactly one more rewrite once it finishes.
        """
        if window_id in self._syncing:
            self._sync_dirty.add(window_id)
            return
        self._syncing.add(window_id)
        try:
            while True:
                self._sync_dirty.discard(window_id)
                await self._sync_once(window_id)
                if window_id not in self._sync_dirty:
                    break
        finally:
            self._syncing.discard(window_id)
            self._sync_dirty.discard(window_id)

    async def _sync_once(self, window_id: int) -> None:
        record = self._model.window(window_id)
        if record is None or record.machine_state is not WindowState.WORKSPACE_IN_USE:
            return
        workspace_id = record.workspace_id_in_use
        if workspace_id is None:
            return
        generation = record.swap_generation

        host_tabs = await self._query_tabs_or_none(window_id)
        if host_tabs is None:
            return

        # A swap or disconnect during the query means the tabs belong elsewhere.
        record = self._model.window(window_id)
        if (
            record is None
            or record.machine_state is not WindowState.WORKSPACE_IN_USE
            or record.workspace_id_in_use != workspace_id
            or record.swap_generation != generation
        ):
            logger.debug("Window {}: attachment changed during sync; dropped", window_id)
            return
        tabs = tuple(tab.to_tab() for tab in host_tabs)

        try:
            await self._store_tabs(workspace_id, tabs)
        except WorkspaceNotFoundError:
            logger.warning("Window {}: workspace {} is gone; disconnecting", window_id, workspace_id)
            record = self._model.window(window_id)
            if record is not None and record.workspace_id_in_use == workspace_id:
                self.set_model(_refresh_hints(self._model.with_window(_detach(record))))
            return
        except StorageError as exc:
            logger.warning("Window {}: could not sync workspace {}: {}", window_id, workspace_id, exc)
            return

        record = self._model.window(window_id)
        if record is not None and record.workspace_id_in_use == workspace_id and record.num_tabs != len(tabs):
            self._set_window(record.evolve(num_tabs=len(tabs)))

    async def _store_tabs(self, workspace_id: int, tabs: tuple[Tab, ...]) -> None:
        """Overwrite a workspace's tabs, persisting unless it is the last session."""
        if workspace_id == LAST_SESSION_ID:
            self.set_model(self._model.with_workspace(last_session(tabs)))
            return

        workspace = self._model.workspaces_by_id.get(workspace_id)
        if workspace is None:
            raise WorkspaceNotFoundError(workspace_id)
        saved = await self._repository.update(workspace, tabs)
        if workspace_id in self._model.workspaces_by_id:
            self.set_model(self._model.with_workspace(saved.workspace))

    async def _refresh_tab_count(self, window_id: int) -> None:
        tabs = await self._query_tabs_or_none(window_id)
        record = self._model.window(window_id)
        if tabs is None or record is None or record.num_tabs == len(tabs):
            return
        self._set_window(record.evolve(num_tabs=len(tabs)))

    # -- Host helpers ------------------------------------------------------------

    async def _query_tabs_or_none(self, window_id: int) -> list[HostTab] | None:
        try:
            return await self._host.query_tabs(window_id)
        except HostError as exc:
            logger.warning("Could not query tabs of window {}: {}", window_id, exc)
            return None

    async def _query_tabs_or_empty(self, window_id: int) -> list[HostTab]:
        tabs = await self._query_tabs_or_none(window_id)
        return tabs if tabs is not None else []


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def _is_attached_to(record: WindowRuntimeState, workspace_id: int) -> bool:
    return record.machine_state is WindowState.WORKSPACE_IN_USE and record.workspace_id_in_use == workspace_id


def _detach(record: WindowRuntimeState) -> WindowRuntimeState:
    """Apply ``DISCONNECT_WORKSPACE`` to an attached window record."""
    target = WINDOW_TRANSITIONS.next_state(record.machine_state, WindowEvent.DISCONNECT_WORKSPACE)
    return record.evolve(machine_state=target or record.machine_state, workspace_id_in_use=None)


def _refresh_hints(model: Model) -> Model:
    """Swap detached windows between ``idle`` and ``noData`` as workspaces come and go."""
    wanted = initial_window_state(bool(model.workspace_ids))
    stale = {WindowState.IDLE, WindowState.NO_DATA} - {wanted}
    for record in model.window_states.values():
        if record.machine_state in stale:
            model = model.with_window(record.evolve(machine_state=wanted))
    return model
