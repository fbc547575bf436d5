"""Document commands: show, new, put."""

from __future__ import annotations

import asyncio
import sys

import click

from ..models import SaveStatus
from ._common import DOCFOLDER_HOME, HOME_HELP, build_engine, console, status_label


def register_document_commands(main: click.Group) -> None:
    """Register the document commands."""

    @main.command("show")
    @click.argument("name")
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def show(name, home):
        """Load NAME and print it."""
        engine = build_engine(home)

        async def _run():
            await engine.start()
            try:
                return await engine.select_file(name)
            finally:
                await engine.stop()

        if not asyncio.run(_run()):
            sys.exit(1)
        console.print_json(data=engine.document.value)

    @main.command("new")
    @click.argument("name", required=False)
    @click.option("--yes", "-y", is_flag=True, help="Overwrite an existing file without asking.")
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def new(name, yes, home):
        """Create a document from the empty template (prompts for NAME)."""
        engine = build_engine(home, assume_yes=yes)

        async def _run():
            await engine.start()
            try:
                if engine.folder_name is None:
                    return None
                return await engine.create_file(name)
            finally:
                await engine.stop()

        created = asyncio.run(_run())
        if engine.folder_name is None:
            console.print("[bold red]No folder available.[/] Run docfolder open PATH first.")
            sys.exit(1)
        if created is None:
            console.print("[yellow]Nothing created.[/]")
            sys.exit(1)
        console.print(f"Created [cyan]{created}[/] {status_label(engine.save_status)}")

    @main.command("put")
    @click.argument("name")
    @click.argument("source", type=click.File("r", encoding="utf-8"))
    @click.option("--home", default=DOCFOLDER_HOME, type=click.Path(), help=HOME_HELP)
    def put(name, source, home):
        """Replace the content of NAME with the JSON in SOURCE."""
        engine = build_engine(home)
        result = engine.validator(source.read())
        if not result.ok:
            console.print(f"[red]Invalid document:[/] {result.error}")
            sys.exit(1)

        async def _run():
            await engine.start()
            try:
                if not await engine.select_file(name):
                    return False
                engine.document.update(result.data)
                return await engine.flush()
            finally:
                await engine.stop()

        ok = asyncio.run(_run())
        if not ok or engine.save_status is not SaveStatus.SAVED:
            console.print(f"[red]{name} not saved.[/] {status_label(engine.save_status)}")
            sys.exit(1)
        console.print(f"{name}: {status_label(engine.save_status)}")
