"""CLI: retouch edit, retouch backends"""

import base64
import json
import mimetypes
from contextlib import nullcontext
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from retouch.backends import PROFILES, resolve_backend
from retouch.errors import ConfigurationError, ValidationError

console = Console()


def _get_client():
    from retouch.cli.main import _get_client
    return _get_client()


def _run(coro):
    from retouch.cli.main import _run
    return _run(coro)


def image_ref(value: str) -> str:
    """URLs pass through; local files become data: URLs."""
    if value.startswith(("http://", "https://", "data:")):
        return value
    path = Path(value).expanduser()
    if not path.is_file():
        raise click.BadParameter(f"No such image file: {value}", param_hint="--image")
    mime = mimetypes.guess_type(path.name)[0] or "image/png"
    return f"data:{mime};base64,{base64.b64encode(path.read_bytes()).decode('ascii')}"


@click.command("edit")
@click.argument("prompt")
@click.option("-i", "--image", default=None, help="Image file or URL to edit")
@click.option("-s", "--session", "session_id", default=None, help="Continue an existing session")
@click.option("-b", "--backend", "backend_id", default=None, help="Backend id (see `retouch backends`)")
@click.option("--version", "version_number", type=int, default=None, help="Edit this version (vN) instead of the latest")
@click.option("--json-output", "--json", is_flag=True)
def edit_cmd(prompt: str, image: Optional[str], session_id: Optional[str], backend_id: Optional[str],
             version_number: Optional[int], json_output: bool):
    """Edit an image with a prompt."""
    source = image_ref(image) if image else None

    async def _edit() -> int:
        client = _get_client()
        try:
            editor = await client.connect()
            if session_id:
                await editor.load_session(session_id)
            else:
                editor.new_session()
            if source:
                editor.attach_image(source)
            if version_number is not None:
                match = [v for n, v in editor.versions() if n == version_number]
                if not match:
                    console.print(f"[red]No version v{version_number} in this session.[/red]")
                    return 1
                editor.select_version(match[0].id)
            status = nullcontext() if json_output else console.status("Generating...")
            try:
                with status:
                    reply = await editor.submit_turn(prompt, backend_id)
            except (ConfigurationError, ValidationError) as e:
                console.print(f"[red]{e.message}[/red]")
                return 1

            sid = editor.active_id
            if json_output:
                click.echo(json.dumps({"sessionId": sid, "turn": reply.model_dump(by_alias=True, mode="json")}))
            elif reply.version is not None:
                console.print(f"[dim]Session: {sid}[/dim]")
                console.print(f"[green]{reply.content}[/green] v{editor.selected_display_number()}")
                console.print(reply.version.url)
            else:
                console.print(f"[dim]Session: {sid}[/dim]")
                console.print(f"[red]{reply.content}[/red]")
            return 1 if reply.error else 0
        finally:
            await client.close()

    code = _run(_edit())
    if code:
        raise SystemExit(code)


@click.command("backends")
def backends_cmd():
    """List generation backends and their parameters."""
    table = Table(title="Backends")
    table.add_column("ID", style="bold")
    table.add_column("Label")
    table.add_column("Endpoint")
    table.add_column("Strength", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Guidance", justify="right")
    for profile in PROFILES.values():
        table.add_row(
            profile.id, profile.label, profile.endpoint,
            str(profile.strength or "-"), str(profile.num_inference_steps or "-"),
            str(profile.guidance_scale or "-"),
        )
    console.print(table)
    console.print(f"[dim]Anything else falls back to {resolve_backend(None).endpoint} with no extra parameters.[/dim]")
