"""Data models for the background engine."""

from tabspace.background.models.enums import (
    AppEvent,
    AppState,
    BroadcastType,
    TabStatus,
    WindowEvent,
    WindowState,
)
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
    WindowRef,
    WorkspaceDraft,
    WorkspaceEdit,
    parse_command,
)
from tabspace.background.models.state import Model, WindowRuntimeState, WindowView, project_window
from tabspace.background.models.workspace import (
    LAST_SESSION_ID,
    Tab,
    UserSettings,
    Workspace,
    last_session,
)

__all__ = [
    "LAST_SESSION_ID",
    "AppEvent",
    "AppState",
    "Broadcast",
    "BroadcastType",
    "ChangeTheme",
    "Command",
    "CreateWorkspace",
    "DeleteWorkspace",
    "DisconnectWorkspace",
    "GetModel",
    "Model",
    "NewtabOpened",
    "OpenChromePage",
    "PopupOpened",
    "Tab",
    "TabStatus",
    "UpdateWorkspace",
    "UseWorkspace",
    "UserSettings",
    "WindowEvent",
    "WindowRef",
    "WindowRuntimeState",
    "WindowState",
    "WindowView",
    "Workspace",
    "WorkspaceDraft",
    "WorkspaceEdit",
    "last_session",
    "parse_command",
    "project_window",
]
