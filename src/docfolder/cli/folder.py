"""Folder commands: open, status, files, revoke, forget."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.panel import Panel

from ..capability import GrantStore
from ..config import resolve_home
from ..errors import StorageUnavailable
from ..index import list_documents
from ..models import PermissionMode, PermissionState
from ..store import CapabilityStore
from ._common import DOCFOLDER_HOME, HOME_HELP, build_engine, console


def register_folder_commands(main: click.Group) -> None:
    """Register the folder commands."""

    @main.command("open")
    @click.argument("path", type=click.Path(file_okay=False, path_type=Path))
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def open_folder(path, home):
        """Grant access to PATH and remember it as the document folder."""
        engine = build_engine(home, folder=path)

        async def _run():
            await engine.start(restore=False)
            try:
                return await engine.open_folder()
            finally:
                await engine.stop()

        if not asyncio.run(_run()):
            console.print("[red]Folder not opened.[/]")
            sys.exit(1)

        console.print(f"\n  Folder: [cyan]{engine.folder_name}[/]")
        console.print(f"  [dim]{len(engine.files)} document(s)[/]\n")

    @main.command("status")
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def status(home):
        """Show the remembered folder and whether access is still granted."""
        home_path = resolve_home(home)
        store = CapabilityStore(home_path)
        engine = build_engine(home)

        async def _run():
            try:
                record = await store.load()
            except StorageUnavailable as exc:
                console.print(f"[yellow]Store unavailable:[/] {exc}")
                return None, None, []
            if record is None:
                return None, None, []
            try:
                directory = await engine.host.restore_directory(record)
            except ValueError as exc:
                console.print(f"[yellow]Remembered folder is unusable:[/] {exc}")
                return record, PermissionState.DENIED, []
            state = await directory.query_permission(PermissionMode.READ_WRITE)
            files = []
            if state is PermissionState.GRANTED:
                files = await list_documents(directory, engine.config.suffix)
            return record, state, files

        record, state, files = asyncio.run(_run())
        if record is None:
            console.print("\n  [dim]No folder remembered.[/] Run [cyan]docfolder open PATH[/].\n")
            return

        state_markup = {
            PermissionState.GRANTED: "[green]granted[/]",
            PermissionState.PROMPT: "[yellow]needs permission[/]",
            PermissionState.DENIED: "[red]denied[/]",
        }[state]
        console.print()
        console.print(
            Panel(
                f"Folder: [cyan]{record.name}[/]\n"
                f"Location: {record.location}\n"
                f"Access: {state_markup}\n"
                f"Remembered: {record.saved_at:%Y-%m-%d %H:%M}\n"
                f"Documents: [bold]{len(files)}[/]",
                title="docfolder",
                border_style="cyan",
            )
        )
        console.print()

    @main.command("files")
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def files(home):
        """List the documents in the remembered folder."""
        engine = build_engine(home)

        async def _run():
            await engine.start()
            try:
                await engine.refresh_files()
            finally:
                await engine.stop()

        asyncio.run(_run())
        if engine.folder_name is None:
            console.print("[bold red]No folder available.[/] Run docfolder open PATH first.")
            sys.exit(1)
        if not engine.files:
            console.print("[dim]No JSON files[/]")
            return
        for name in engine.files:
            click.echo(name)

    @main.command("revoke")
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def revoke(home):
        """Withdraw access to the remembered folder (kept on record)."""
        home_path = resolve_home(home)
        try:
            record = asyncio.run(CapabilityStore(home_path).load())
        except StorageUnavailable as exc:
            console.print(f"[red]Store unavailable:[/] {exc}")
            sys.exit(1)
        if record is None:
            console.print("[dim]No folder remembered.[/]")
            return
        if GrantStore(home_path).revoke(Path(record.location)):
            console.print(f"Access to [cyan]{record.name}[/] revoked.")
        else:
            console.print(f"[dim]{record.name} had no grant.[/]")

    @main.command("forget")
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def forget(home):
        """Stop remembering the folder."""
        try:
            asyncio.run(CapabilityStore(resolve_home(home)).clear())
        except StorageUnavailable as exc:
            console.print(f"[red]Store unavailable:[/] {exc}")
            sys.exit(1)
        console.print("Folder forgotten.")
