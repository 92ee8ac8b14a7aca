"""Shared enumerations used across the background engine."""

from __future__ import annotations

from enum import StrEnum

# -- Application lifecycle ---------------------------------------------------


class AppState(StrEnum):
    LOADING_APP = "loadingApp"
    CHECKING_FOR_OPENED_WINDOWS = "checkingForOpenedWindows"
    SUBSCRIBING_EVENTS = "subscribingEvents"
    APP_LOADED = "appLoaded"


class AppEvent(StrEnum):
    DATA_LOADED = "DATA_LOADED"
    CHECK_COMPLETED = "CHECK_COMPLETED"
    SUBSCRIBED_TO_EVENTS = "SUBSCRIBED_TO_EVENTS"


# -- Window workspace usage --------------------------------------------------


class WindowState(StrEnum):
    """Attachment state of a single browser window.

    ``NO_DATA`` behaves like ``IDLE``; it only tells the UI that no workspace
    exists yet.
    """

    IDLE = "idle"
    NO_DATA = "noData"
    OPENING_WORKSPACE = "openingWorkspace"
    WORKSPACE_IN_USE = "workspaceInUse"


class WindowEvent(StrEnum):
    OPEN_WORKSPACE = "OPEN_WORKSPACE"
    WORKSPACE_OPENED = "WORKSPACE_OPENED"
    CREATE_WORKSPACE = "CREATE_WORKSPACE"
    UPDATE_WORKSPACE = "UPDATE_WORKSPACE"
    DELETE_WORKSPACE = "DELETE_WORKSPACE"
    DISCONNECT_WORKSPACE = "DISCONNECT_WORKSPACE"


# -- Messages ----------------------------------------------------------------


class BroadcastType(StrEnum):
    """Messages sent by the engine to UI clients."""

    MODEL_UPDATED = "MODEL_UPDATED"
    INIT_POPUP = "INIT_POPUP"
    INIT_NEWTAB = "INIT_NEWTAB"


# -- Host --------------------------------------------------------------------


class TabStatus(StrEnum):
    LOADING = "loading"
    COMPLETE = "complete"
