"""Tests for the ``tabspace`` command line."""

from __future__ import annotations

import asyncio

import pytest
from click.testing import CliRunner

from tabspace.background.managers.workspaces import WorkspaceRepository
from tabspace.background.models.workspace import Tab, Workspace
from tabspace.background.store.local import LocalStorage
from tabspace.cli import main


@pytest.fixture
def data_root(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TABSPACE_DATA_ROOT", str(tmp_path))
    monkeypatch.setenv("TABSPACE_LOG_LEVEL", "ERROR")
    return tmp_path


@pytest.fixture
def repository(data_root) -> WorkspaceRepository:
    return WorkspaceRepository(LocalStorage.in_data_root(data_root))


def seed(repository: WorkspaceRepository, name: str, urls: list[str], color: str = "blue") -> int:
    tabs = [Tab(title=url.removeprefix("http://"), url=url) for url in urls]
    return asyncio.run(repository.save(Workspace(name=name, color=color), tabs)).id


def test_list_empty(data_root) -> None:
    result = CliRunner().invoke(main, ["workspaces", "list"])

    assert result.exit_code == 0
    assert "No workspaces." in result.output


def test_list_workspaces(repository: WorkspaceRepository) -> None:
    seed(repository, "Work", ["http://a", "http://b"])
    seed(repository, "Read", [], color="green")

    result = CliRunner().invoke(main, ["workspaces", "list"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines == ["   1  Work  [blue]  2 tabs", "   2  Read  [green]  0 tabs"]


def test_show_workspace(repository: WorkspaceRepository) -> None:
    workspace_id = seed(repository, "Work", ["http://a"])

    result = CliRunner().invoke(main, ["workspaces", "show", str(workspace_id)])

    assert result.exit_code == 0
    assert "Work [blue]" in result.output
    assert "a  http://a" in result.output


def test_show_missing_workspace(data_root) -> None:
    result = CliRunner().invoke(main, ["workspaces", "show", "9"])

    assert result.exit_code == 1
    assert "Workspace 9 not found." in result.output


def test_delete_workspace(repository: WorkspaceRepository) -> None:
    workspace_id = seed(repository, "Work", [])

    result = CliRunner().invoke(main, ["workspaces", "delete", str(workspace_id), "--yes"])

    assert result.exit_code == 0
    assert f"Workspace {workspace_id} deleted." in result.output
    assert asyncio.run(repository.get_ids()) == ()
    # The id stays retired.
    assert seed(repository, "Next", []) == workspace_id + 1


def test_delete_missing_workspace(data_root) -> None:
    result = CliRunner().invoke(main, ["workspaces", "delete", "3", "--yes"])

    assert result.exit_code == 1
    assert "Workspace 3 not found." in result.output


def test_theme_show_and_set(data_root) -> None:
    runner = CliRunner()

    assert "Theme: dark" in runner.invoke(main, ["settings", "theme"]).output
    assert "Theme: light" in runner.invoke(main, ["settings", "theme", "light"]).output
    assert "Theme: light" in runner.invoke(main, ["settings", "theme"]).output
