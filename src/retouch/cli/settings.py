"""CLI: retouch settings show|set-key|clear-key|set-backend|set-server"""

from typing import Optional

import click
from rich.console import Console

from retouch.auth import describe
from retouch.backends import resolve_backend

console = Console()


def _load_config():
    from retouch.cli.main import _load_config
    return _load_config()


def _save_config(cfg) -> None:
    from retouch.cli.main import _save_config
    _save_config(cfg)


def _get_client():
    from retouch.cli.main import _get_client
    return _get_client()


def _run(coro):
    from retouch.cli.main import _run
    return _run(coro)


@click.group()
def settings():
    """API key and defaults."""


@settings.command("show")
def settings_show():
    """Show which credential and backend would be used."""

    async def _show():
        client = _get_client()
        try:
            editor = await client.connect()
            cfg = client.config
            console.print(f"Credential: [bold]{describe(editor.credentials.resolve())}[/bold]")
            console.print(f"Server default key available: {editor.credentials.server_default_available}")
            console.print(f"Backend: {resolve_backend(cfg.backend).label} ({cfg.backend})")
            console.print(f"Server: {cfg.server_url or '[dim]none, calling fal.ai directly[/dim]'}")
            console.print(f"Storage: {cfg.storage} in {cfg.data_dir}")
        finally:
            await client.close()

    _run(_show())


@settings.command("set-key")
@click.option("--key", default=None, help="fal.ai API key (prompted when omitted)")
def settings_set_key(key: Optional[str]):
    """Store your fal.ai API key."""
    cfg = _load_config()
    key = key or click.prompt("fal.ai API key", hide_input=True)
    cfg.fal_key = key.strip()
    _save_config(cfg)
    console.print("[green]API key saved.[/green]")


@settings.command("clear-key")
def settings_clear_key():
    """Forget the stored API key (the server default applies, if any)."""
    cfg = _load_config()
    cfg.fal_key = ""
    _save_config(cfg)
    console.print("[green]API key cleared.[/green]")


@settings.command("set-backend")
@click.argument("backend_id")
def settings_set_backend(backend_id: str):
    """Choose the default generation backend."""
    profile = resolve_backend(backend_id)
    if profile.backend is None:
        console.print(f"[yellow]Unknown backend {backend_id!r}; requests will use the fallback profile.[/yellow]")
    cfg = _load_config()
    cfg.backend = backend_id
    _save_config(cfg)
    console.print(f"[green]Default backend: {profile.label}[/green]")


@settings.command("set-server")
@click.argument("url", required=False)
def settings_set_server(url: Optional[str]):
    """Send edits through a retouch server (no URL: call fal.ai directly)."""
    cfg = _load_config()
    cfg.server_url = url or None
    _save_config(cfg)
    console.print(f"[green]Server: {url or 'none'}[/green]")
