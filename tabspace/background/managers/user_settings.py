"""Persisted user preferences (``__settings__``)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tabspace.background.models.workspace import UserSettings
from tabspace.background.store.base import SETTINGS_KEY

if TYPE_CHECKING:
    from tabspace.background.store.base import StorageGateway


class UserSettingsRepository:
    def __init__(self, storage: StorageGateway, default_theme: str = "dark") -> None:
        self._storage = storage
        self._default_theme = default_theme

    async def get(self) -> UserSettings:
        raw = await self._storage.get(SETTINGS_KEY)
        if raw is None:
            return UserSettings(theme=self._default_theme)
        return UserSettings.model_validate({"theme": self._default_theme, **raw})

    async def set_theme(self, theme: str) -> UserSettings:
        """Merge *theme* into the stored settings and return what was persisted."""
        current = await self.get()
        await self._storage.set({SETTINGS_KEY: current.model_copy(update={"theme": theme}).dump()})
        return await self.get()
