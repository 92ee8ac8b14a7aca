"""Finite state machines for the application lifecycle and window usage.

Both machines share one shape: an explicit enumerated state plus a
transition table keyed by ``(state, event)``.  An event that is not listed
for the current state is *unavailable*; sending it is a silent no-op.  That
is the normal outcome of concurrent UI actions (a double-clicked "open"
during an in-flight swap), not an error.

The application machine lives for the whole process and keeps its current
state in a ``Machine``.  Window machines keep their state in the window's
``WindowRuntimeState`` record, so the engine uses the bare
``TransitionTable`` for them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Generic, TypeVar

from loguru import logger

from tabspace.background.models.enums import AppEvent, AppState, WindowEvent, WindowState

S = TypeVar("S")
E = TypeVar("E")


class TransitionTable(Generic[S, E]):
    """Immutable ``state -> {event -> next_state}`` table."""

    def __init__(self, transitions: Mapping[S, Mapping[E, S]], initial: S) -> None:
        if initial not in transitions:
            msg = f"Initial state {initial!r} has no entry in the table"
            raise ValueError(msg)
        self._transitions = {state: dict(events) for state, events in transitions.items()}
        self.initial = initial

    def is_available(self, state: S, event: E) -> bool:
        return event in self._transitions.get(state, {})

    def next_state(self, state: S, event: E) -> S | None:
        """Return the target of *event* from *state*, or ``None`` if unavailable."""
        return self._transitions.get(state, {}).get(event)

    def events(self, state: S) -> frozenset[E]:
        return frozenset(self._transitions.get(state, {}))


class Machine(Generic[S, E]):
    """A transition table plus the current state."""

    def __init__(self, table: TransitionTable[S, E], state: S | None = None) -> None:
        self.table = table
        self.current_state: S = table.initial if state is None else state

    def is_available(self, event: E) -> bool:
        return self.table.is_available(self.current_state, event)

    def send(self, event: E) -> S:
        """Apply *event* if available.  Returns the (possibly unchanged) state."""
        target = self.table.next_state(self.current_state, event)
        if target is None:
            logger.debug("Event {} unavailable in state {}; ignored", event, self.current_state)
            return self.current_state
        logger.debug("{} -> {} (event {})", self.current_state, target, event)
        self.current_state = target
        return target


# -- Application lifecycle ---------------------------------------------------

APP_TRANSITIONS: TransitionTable[AppState, AppEvent] = TransitionTable(
    {
        AppState.LOADING_APP: {AppEvent.DATA_LOADED: AppState.CHECKING_FOR_OPENED_WINDOWS},
        AppState.CHECKING_FOR_OPENED_WINDOWS: {AppEvent.CHECK_COMPLETED: AppState.SUBSCRIBING_EVENTS},
        AppState.SUBSCRIBING_EVENTS: {AppEvent.SUBSCRIBED_TO_EVENTS: AppState.APP_LOADED},
        AppState.APP_LOADED: {},
    },
    initial=AppState.LOADING_APP,
)


def create_app_machine() -> Machine[AppState, AppEvent]:
    return Machine(APP_TRANSITIONS)


# -- Window workspace usage --------------------------------------------------

_DETACHED = {
    WindowEvent.OPEN_WORKSPACE: WindowState.OPENING_WORKSPACE,
    WindowEvent.CREATE_WORKSPACE: WindowState.WORKSPACE_IN_USE,
}

WINDOW_TRANSITIONS: TransitionTable[WindowState, WindowEvent] = TransitionTable(
    {
        WindowState.IDLE: {
            **_DETACHED,
            WindowEvent.UPDATE_WORKSPACE: WindowState.IDLE,
            WindowEvent.DELETE_WORKSPACE: WindowState.IDLE,
        },
        WindowState.NO_DATA: {
            **_DETACHED,
            WindowEvent.UPDATE_WORKSPACE: WindowState.NO_DATA,
            WindowEvent.DELETE_WORKSPACE: WindowState.NO_DATA,
        },
        WindowState.OPENING_WORKSPACE: {
            WindowEvent.WORKSPACE_OPENED: WindowState.WORKSPACE_IN_USE,
            WindowEvent.DELETE_WORKSPACE: WindowState.OPENING_WORKSPACE,
        },
        WindowState.WORKSPACE_IN_USE: {
            WindowEvent.OPEN_WORKSPACE: WindowState.OPENING_WORKSPACE,
            WindowEvent.UPDATE_WORKSPACE: WindowState.WORKSPACE_IN_USE,
            WindowEvent.DELETE_WORKSPACE: WindowState.WORKSPACE_IN_USE,
            WindowEvent.DISCONNECT_WORKSPACE: WindowState.IDLE,
        },
    },
    initial=WindowState.IDLE,
)


def initial_window_state(has_workspaces: bool) -> WindowState:
    """``noData`` hints the UI that there is nothing to open yet."""
    return WindowState.IDLE if has_workspaces else WindowState.NO_DATA
