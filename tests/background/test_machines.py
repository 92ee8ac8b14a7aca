"""Unit tests for the lifecycle and window transition tables."""

from __future__ import annotations

import pytest

from tabspace.background.machines import (
    APP_TRANSITIONS,
    WINDOW_TRANSITIONS,
    Machine,
    TransitionTable,
    create_app_machine,
    initial_window_state,
)
from tabspace.background.models.enums import AppEvent, AppState, WindowEvent, WindowState

# ---------------------------------------------------------------------------
# Application lifecycle
# ---------------------------------------------------------------------------


def test_app_machine_is_linear() -> None:
    machine = create_app_machine()
    assert machine.current_state is AppState.LOADING_APP

    assert machine.send(AppEvent.DATA_LOADED) is AppState.CHECKING_FOR_OPENED_WINDOWS
    assert machine.send(AppEvent.CHECK_COMPLETED) is AppState.SUBSCRIBING_EVENTS
    assert machine.send(AppEvent.SUBSCRIBED_TO_EVENTS) is AppState.APP_LOADED


def test_app_machine_ignores_out_of_order_events() -> None:
    machine = create_app_machine()

    assert machine.send(AppEvent.SUBSCRIBED_TO_EVENTS) is AppState.LOADING_APP
    assert machine.send(AppEvent.CHECK_COMPLETED) is AppState.LOADING_APP
    assert machine.is_available(AppEvent.DATA_LOADED)


def test_app_machine_never_leaves_app_loaded() -> None:
    machine = Machine(APP_TRANSITIONS, AppState.APP_LOADED)
    for event in AppEvent:
        assert machine.send(event) is AppState.APP_LOADED
    assert APP_TRANSITIONS.events(AppState.APP_LOADED) == frozenset()


# ---------------------------------------------------------------------------
# Window workspace usage
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("state", "event", "expected"),
    [
        (WindowState.IDLE, WindowEvent.OPEN_WORKSPACE, WindowState.OPENING_WORKSPACE),
        (WindowState.NO_DATA, WindowEvent.OPEN_WORKSPACE, WindowState.OPENING_WORKSPACE),
        (WindowState.WORKSPACE_IN_USE, WindowEvent.OPEN_WORKSPACE, WindowState.OPENING_WORKSPACE),
        (WindowState.OPENING_WORKSPACE, WindowEvent.WORKSPACE_OPENED, WindowState.WORKSPACE_IN_USE),
        (WindowState.IDLE, WindowEvent.CREATE_WORKSPACE, WindowState.WORKSPACE_IN_USE),
        (WindowState.NO_DATA, WindowEvent.CREATE_WORKSPACE, WindowState.WORKSPACE_IN_USE),
        (WindowState.IDLE, WindowEvent.UPDATE_WORKSPACE, WindowState.IDLE),
        (WindowState.WORKSPACE_IN_USE, WindowEvent.UPDATE_WORKSPACE, WindowState.WORKSPACE_IN_USE),
        (WindowState.IDLE, WindowEvent.DELETE_WORKSPACE, WindowState.IDLE),
        (WindowState.WORKSPACE_IN_USE, WindowEvent.DELETE_WORKSPACE, WindowState.WORKSPACE_IN_USE),
        (WindowState.OPENING_WORKSPACE, WindowEvent.DELETE_WORKSPACE, WindowState.OPENING_WORKSPACE),
        (WindowState.WORKSPACE_IN_USE, WindowEvent.DISCONNECT_WORKSPACE, WindowState.IDLE),
    ],
)
def test_window_transitions(state: WindowState, event: WindowEvent, expected: WindowState) -> None:
    assert WINDOW_TRANSITIONS.next_state(state, event) is expected


@pytest.mark.parametrize(
    ("state", "event"),
    [
        (WindowState.OPENING_WORKSPACE, WindowEvent.OPEN_WORKSPACE),
        (WindowState.OPENING_WORKSPACE, WindowEvent.CREATE_WORKSPACE),
        (WindowState.OPENING_WORKSPACE, WindowEvent.DISCONNECT_WORKSPACE),
        (WindowState.WORKSPACE_IN_USE, WindowEvent.CREATE_WORKSPACE),
        (WindowState.IDLE, WindowEvent.DISCONNECT_WORKSPACE),
        (WindowState.IDLE, WindowEvent.WORKSPACE_OPENED),
        (WindowState.WORKSPACE_IN_USE, WindowEvent.WORKSPACE_OPENED),
    ],
)
def test_window_unavailable_events(state: WindowState, event: WindowEvent) -> None:
    assert not WINDOW_TRANSITIONS.is_available(state, event)
    assert WINDOW_TRANSITIONS.next_state(state, event) is None


def test_double_open_is_rejected_while_opening() -> None:
    machine = Machine(WINDOW_TRANSITIONS)

    assert machine.send(WindowEvent.OPEN_WORKSPACE) is WindowState.OPENING_WORKSPACE
    assert not machine.is_available(WindowEvent.OPEN_WORKSPACE)
    assert machine.send(WindowEvent.OPEN_WORKSPACE) is WindowState.OPENING_WORKSPACE
    assert machine.send(WindowEvent.WORKSPACE_OPENED) is WindowState.WORKSPACE_IN_USE


def test_initial_window_state() -> None:
    assert initial_window_state(has_workspaces=True) is WindowState.IDLE
    assert initial_window_state(has_workspaces=False) is WindowState.NO_DATA


def test_transition_table_requires_initial_entry() -> None:
    with pytest.raises(ValueError, match="Initial state"):
        TransitionTable({"a": {"go": "b"}}, initial="b")
