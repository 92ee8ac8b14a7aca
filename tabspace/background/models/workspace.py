"""Workspace data model.

A workspace is a named, colored, persisted collection of saved tabs.  The
persisted form uses the camelCase keys the extension clients read
(``favIconUrl``), so every model here serialises ``by_alias``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LAST_SESSION_ID = 0
"""Reserved id of the in-memory "last session" slot.  Never persisted."""

LAST_SESSION_NAME = "Last session"


class CamelModel(BaseModel):
    """Frozen base with camelCase aliases for wire and storage formats."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Tab(CamelModel):
    """A saved tab.  Host tab ids are deliberately not kept."""

    title: str = ""
    url: str
    fav_icon_url: str | None = None


class Workspace(CamelModel):
    id: int | None = None
    name: str
    color: str = "gray"
    tabs: tuple[Tab, ...] = Field(default_factory=tuple)

    @property
    def is_last_session(self) -> bool:
        return self.id == LAST_SESSION_ID


class UserSettings(CamelModel):
    """Persisted user preferences (``__settings__``)."""

    theme: str = "dark"


def last_session(tabs: tuple[Tab, ...]) -> Workspace:
    """Build the ephemeral last-session workspace holding *tabs*."""
    return Workspace(id=LAST_SESSION_ID, name=LAST_SESSION_NAME, tabs=tabs)
