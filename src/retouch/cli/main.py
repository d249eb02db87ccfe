"""
retouch CLI — `retouch` command.

Commands:
  retouch settings <cmd>      API key, default backend, server URL
  retouch sessions <cmd>      List, show and delete sessions
  retouch edit <prompt>       Run one edit in a session
  retouch backends            List generation backends
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install retouch[cli]")

from retouch.client import AsyncRetouch
from retouch.config import CONFIG_FILE, RetouchConfig, load_config, save_config

console = Console()


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _config_path() -> Path:
    ctx = click.get_current_context(silent=True)
    if ctx is not None and ctx.find_root().obj:
        return ctx.find_root().obj["config_path"]
    return CONFIG_FILE


def _load_config() -> RetouchConfig:
    return load_config(_config_path())


def _save_config(cfg: RetouchConfig) -> None:
    save_config(cfg, _config_path())


def _get_client() -> AsyncRetouch:
    return AsyncRetouch(_load_config())


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              envvar="RETOUCH_CONFIG", help="Config file (default ~/.retouch/config.json)")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """retouch — edit images one prompt at a time."""
    setup_logging(verbose)
    ctx.obj = {"config_path": config_path or CONFIG_FILE}


# Register subcommands from separate modules
from retouch.cli.settings import settings
from retouch.cli.edit import edit_cmd, backends_cmd
from retouch.cli.sessions import sessions

main.add_command(settings)
main.add_command(edit_cmd)
main.add_command(backends_cmd)
main.add_command(sessions)


if __name__ == "__main__":
    main()
