"""Service configuration loaded from TABSPACE_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class TabspaceSettings(BaseSettings):
    """Background engine settings.

    All fields are read from environment variables with the ``TABSPACE_``
    prefix.  For example, ``TABSPACE_SWAP_TIMEOUT=30`` maps to ``swap_timeout``.

    User-facing preferences (the UI theme) are *not* configured here; they
    live in the persisted store under ``__settings__`` and travel with the
    workspaces.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Storage ---------------------------------------------------------------
    storage: Literal["memory", "local"] = "local"

    data_root: str = "./data"
    """Directory holding the local key/value store file."""

    data_prefix: str | None = None
    """Optional namespace inserted into the storage path.

    When set, the store lives at ``{data_root}/{data_prefix}/storage.json``.
    """

    # -- Engine ----------------------------------------------------------------
    swap_timeout: float = 10.0
    """Seconds a window may stay in ``openingWorkspace`` before quiescence is forced."""

    new_tab_url: str = "chrome://newtab/"
    """Page opened in place of an empty workspace so the window keeps one tab."""

    default_theme: str = "dark"

    broadcast_queue_size: int = 100
    """Per-subscriber backlog; the oldest snapshot is dropped when full."""

    # -- Helpers ---------------------------------------------------------------

    def storage_path(self) -> Path:
        """Return the local store file path for this configuration."""
        base = Path(self.data_root)
        if self.data_prefix:
            base = base / self.data_prefix
        return base / "storage.json"


def get_settings() -> TabspaceSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return _get_settings_cached()


@lru_cache(maxsize=1)
def _get_settings_cached() -> TabspaceSettings:
    return TabspaceSettings()


get_settings.cache_clear = _get_settings_cached.cache_clear  # type: ignore[attr-defined]
