"""Wire-format messages exchanged with UI clients.

Commands are a closed, discriminated union on ``type``.  Anything that does
not validate against one of the variants is rejected at the boundary by
``parse_command`` and never reaches the engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tabspace.background.models.enums import BroadcastType
from tabspace.background.models.state import Model
from tabspace.background.models.workspace import CamelModel, Tab


class WindowRef(BaseModel):
    """The sender's window.  Clients send the whole host window object."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    window: WindowRef | None = None


# -- Payloads ----------------------------------------------------------------


class WorkspaceDraft(CamelModel):
    name: str
    color: str = "gray"


class WorkspaceEdit(CamelModel):
    id: int
    name: str
    color: str = "gray"
    tabs: tuple[Tab, ...] = Field(default_factory=tuple)


# -- Commands ----------------------------------------------------------------


class PopupOpened(_Command):
    type: Literal["popup_opened"] = "popup_opened"


class NewtabOpened(_Command):
    type: Literal["newtab_opened"] = "newtab_opened"


class UseWorkspace(_Command):
    type: Literal["use_workspace"] = "use_workspace"
    payload: int


class CreateWorkspace(_Command):
    type: Literal["create_workspace"] = "create_workspace"
    payload: WorkspaceDraft


class UpdateWorkspace(_Command):
    type: Literal["update_workspace"] = "update_workspace"
    payload: WorkspaceEdit


class DeleteWorkspace(_Command):
    type: Literal["delete_workspace"] = "delete_workspace"
    payload: int


class DisconnectWorkspace(_Command):
    type: Literal["disconnect_workspace"] = "disconnect_workspace"


class OpenChromePage(_Command):
    type: Literal["open_chrome_page"] = "open_chrome_page"
    payload: str


class ChangeTheme(_Command):
    type: Literal["change_theme"] = "change_theme"
    payload: str


class GetModel(_Command):
    type: Literal["get_model"] = "get_model"


Command = Annotated[
    PopupOpened
    | NewtabOpened
    | UseWorkspace
    | CreateWorkspace
    | UpdateWorkspace
    | DeleteWorkspace
    | DisconnectWorkspace
    | OpenChromePage
    | ChangeTheme
    | GetModel,
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(raw: Mapping[str, Any]) -> Command:
    """Validate a raw client message.  Raises ``pydantic.ValidationError``."""
    return _command_adapter.validate_python(raw)


# -- Broadcasts --------------------------------------------------------------


class Broadcast(BaseModel):
    """Engine -> client message carrying a Model snapshot."""

    model_config = ConfigDict(frozen=True)

    type: BroadcastType = BroadcastType.MODEL_UPDATED
    payload: Model

    def dump(self) -> dict[str, Any]:
        return {"type": str(self.type), "payload": self.payload.dump()}
