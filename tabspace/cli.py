import asyncio

import click


@click.group()
def main() -> None:
    """Tabspace - browser workspaces kept in sync with their windows."""


def _repositories():
    """Build the repositories over the configured store.

    Imported lazily so ``--help`` stays fast.
    """
    from tabspace.background.app import create_storage
    from tabspace.background.log import setup_logging
    from tabspace.background.managers.user_settings import UserSettingsRepository
    from tabspace.background.managers.workspaces import WorkspaceRepository
    from tabspace.background.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)
    storage = create_storage(settings)
    return WorkspaceRepository(storage), UserSettingsRepository(storage, default_theme=settings.default_theme)


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------


@main.group()
def workspaces() -> None:
    """Inspect and manage saved workspaces."""


@workspaces.command("list")
def list_workspaces() -> None:
    """List saved workspaces in index order."""
    repository, _ = _repositories()
    saved = asyncio.run(repository.get_all())
    if not saved:
        click.echo("No workspaces.")
        return
    for workspace in saved.values():
        click.echo(f"{workspace.id:>4}  {workspace.name}  [{workspace.color}]  {len(workspace.tabs)} tabs")


@workspaces.command()
@click.argument("workspace_id", type=int)
def show(workspace_id: int) -> None:
    """Show the tabs of one workspace."""
    from tabspace.background.managers.workspaces import WorkspaceNotFoundError

    repository, _ = _repositories()
    try:
        workspace = asyncio.run(repository.require(workspace_id))
    except WorkspaceNotFoundError:
        raise click.ClickException(f"Workspace {workspace_id} not found.") from None

    click.echo(f"{workspace.name} [{workspace.color}]")
    for tab in workspace.tabs:
        click.echo(f"  {tab.title or '(untitled)'}  {tab.url}")


@workspaces.command()
@click.argument("workspace_id", type=int)
@click.confirmation_option(prompt="Delete this workspace?")
def delete(workspace_id: int) -> None:
    """Delete a workspace.  Its id is never reused."""
    repository, _ = _repositories()

    async def _delete() -> bool:
        if workspace_id not in await repository.get_ids():
            return False
        await repository.remove(workspace_id)
        return True

    if not asyncio.run(_delete()):
        raise click.ClickException(f"Workspace {workspace_id} not found.")
    click.echo(f"Workspace {workspace_id} deleted.")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@main.group()
def settings() -> None:
    """User preferences shared with the extension UI."""


@settings.command()
@click.argument("name", required=False)
def theme(name: str | None) -> None:
    """Show the UI theme, or set it to NAME."""
    _, user_settings = _repositories()
    current = asyncio.run(user_settings.set_theme(name) if name else user_settings.get())
    click.echo(f"Theme: {current.theme}")


if __name__ == "__main__":
    main()
