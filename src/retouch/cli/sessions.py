"""CLI: retouch sessions list|show|delete"""

import base64
import json
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import unquote_to_bytes

import click
import httpx
from rich.console import Console
from rich.table import Table

from retouch.errors import RetouchError
from retouch.history import numbered
from retouch.models.session import now_ms

console = Console()


def _get_client():
    from retouch.cli.main import _get_client
    return _get_client()


def _run(coro):
    from retouch.cli.main import _run
    return _run(coro)


def _when(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


@click.group()
def sessions():
    """Session management."""


@sessions.command("list")
@click.option("--json-output", "--json", is_flag=True)
def sessions_list(json_output):
    """List sessions, most recently updated first."""

    async def _list():
        client = _get_client()
        try:
            result = await client.store.list()
        finally:
            await client.close()
        if json_output:
            click.echo(json.dumps([s.to_record() for s in result], indent=2))
            return
        table = Table(title=f"Sessions ({len(result)} total)")
        table.add_column("ID", style="bold")
        table.add_column("Title")
        table.add_column("Turns", justify="right")
        table.add_column("Versions", justify="right")
        table.add_column("Updated")
        for s in result:
            table.add_row(s.id, s.title, str(len(s.turns)), str(len(s.versions)), _when(s.updated_at))
        console.print(table)

    _run(_list())


@sessions.command("show")
@click.argument("session_id")
def sessions_show(session_id):
    """Show a session's turns and versions."""

    async def _show() -> int:
        client = _get_client()
        try:
            session = await client.store.get(session_id)
        except RetouchError as e:
            console.print(f"[red]{e}[/red]")
            return 1
        finally:
            await client.close()
        console.print(f"[bold]{session.title}[/bold] [dim]{session.id}[/dim]")
        for turn in session.turns:
            who = "[cyan]You[/cyan]" if turn.role == "user" else "[green]retouch[/green]"
            text = f"[red]{turn.content}[/red]" if turn.error else turn.content
            console.print(f"{who}: {text}")
        table = Table(title="Versions")
        table.add_column("#", justify="right")
        table.add_column("Prompt")
        table.add_column("Backend")
        table.add_column("URL", overflow="fold")
        for number, version in numbered(session.versions):
            table.add_row(f"v{number}", version.prompt, version.backend, version.url[:80])
        console.print(table)
        return 0

    if _run(_show()):
        raise SystemExit(1)


@sessions.command("delete")
@click.argument("session_id")
def sessions_delete(session_id):
    """Delete a session."""

    async def _delete() -> bool:
        client = _get_client()
        try:
            with console.status("Deleting..."):
                return await client.editor.delete_session(session_id)
        finally:
            await client.close()

    if not _run(_delete()):
        console.print(f"[red]Could not delete session {session_id}.[/red]")
        raise SystemExit(1)
    console.print(f"[green]Session {session_id} deleted.[/green]")


async def fetch_image(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> bytes:
    """Bytes behind a version URL: data: URLs are decoded, anything else is fetched."""
    if url.startswith("data:"):
        header, _, payload = url.partition(",")
        if header.endswith(";base64"):
            return base64.b64decode(payload)
        return unquote_to_bytes(payload)
    async with httpx.AsyncClient(timeout=60.0, follow_redirects=True, transport=transport) as client:
        resp = await client.get(url)
        resp.raise_for_status()
        return resp.content


@sessions.command("export")
@click.argument("session_id")
@click.option("--version", "version_number", type=int, default=None, help="Version to save (vN), default latest")
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None,
              help="File or directory to write to")
def sessions_export(session_id, version_number, output):
    """Save a version's image to disk."""

    async def _export() -> int:
        client = _get_client()
        try:
            session = await client.store.get(session_id)
        except RetouchError as e:
            console.print(f"[red]{e}[/red]")
            return 1
        finally:
            await client.close()

        versions = numbered(session.versions)
        if not versions:
            console.print("[red]This session has no versions yet.[/red]")
            return 1
        if version_number is None:
            number, version = versions[0]
        else:
            match = [(n, v) for n, v in versions if n == version_number]
            if not match:
                console.print(f"[red]No version v{version_number} in this session.[/red]")
                return 1
            number, version = match[0]

        try:
            data = await fetch_image(version.url)
        except (httpx.HTTPError, ValueError) as e:
            console.print(f"[red]Could not download v{number}: {e}[/red]")
            return 1

        name = f"image-edit-v{number}-{now_ms()}.png"
        if output is None:
            path = Path(name)
        elif output.is_dir():
            path = output / name
        else:
            path = output
        path.write_bytes(data)
        console.print(f"[green]Saved v{number} to {path}[/green]")
        return 0

    if _run(_export()):
        raise SystemExit(1)
