"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from sekai_fetch import __version__
from sekai_fetch.api.client import MasterDbClient
from sekai_fetch.core.orchestrator import FetchOrchestrator
from sekai_fetch.exceptions import SekaiFetchError
from sekai_fetch.media.downloader import close_connection_pool
from sekai_fetch.media.tagger import resolve_tag_writer
from sekai_fetch.models.config import FetchConfig
from sekai_fetch.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_resource_table,
    print_summary_panel,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("sekai_fetch")

app = typer.Typer(
    name="sekai-fetch",
    help=(
        "Mirror Project SEKAI song audio and jacket art, one vocal version at a"
        " time. Use 'sekai-fetch <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "sekai-fetch"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict[str, Any] | None = None) -> FetchConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except SekaiFetchError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


def _filter_options(
    music_ids: list[int] | None, vocal_types: list[str] | None
) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if music_ids:
        options["music_ids"] = music_ids
    if vocal_types:
        options["vocal_types"] = vocal_types
    return options


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
):
    """Project SEKAI music fetcher"""
    if version:
        console.print(f"[bold]sekai-fetch[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("sekai_fetch").setLevel(log_level)

    if show_config:
        config = _load_config()
        source = CONFIG_FILE if CONFIG_FILE.is_file() else "built-in defaults"
        print_config(source, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing file without asking."
    ),
):
    """Write a configuration file holding every default value."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(CONFIG_FILE).save_default_config()
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command(name="fetch")
def fetch_command(
    output_folder: str | None = typer.Option(
        None, "-o", "--output", help="Folder to mirror into (default ./output)."
    ),
    tagger: str | None = typer.Option(
        None,
        "--tagger",
        help="Tagging backend: metaflac (external tool), mutagen, or none.",
    ),
    download_covers: bool | None = typer.Option(
        None, "--cover/--no-cover", help="Download the jacket image as cover.png."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Show what would be saved without writing files."
    ),
    music_ids: list[int] | None = typer.Option(  # noqa: B008
        None, "-m", "--music-id", help="Only fetch this song ID (repeatable)."
    ),
    vocal_types: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--vocal-type",
        help="Only fetch this vocal type, e.g. sekai or virtual_singer (repeatable).",
    ),
):
    """Download audio and cover art for every song and vocal version."""
    cli_options = {
        key: value
        for key, value in {
            "output_folder": output_folder,
            "tagger": tagger,
            "download_covers": download_covers,
        }.items()
        if value is not None
    }
    cli_options.update(_filter_options(music_ids, vocal_types))
    cli_options["dry_run"] = dry_run
    config = _load_config(cli_options)

    # Decided once for the whole run
    tag_writer = None if config.dry_run else resolve_tag_writer(config.tagger)

    async def _fetch_async():
        async with MasterDbClient(
            config.musics_url, config.music_vocals_url, config.request_timeout
        ) as client:
            orchestrator = FetchOrchestrator(config, client, tag_writer)
            try:
                return await orchestrator.run()
            finally:
                await close_connection_pool()

    if config.dry_run:
        console.print("[bold cyan]🎵 Starting dry run session...[/bold cyan]")
    else:
        console.print("[bold cyan]🎵 Starting fetch session...[/bold cyan]")

    start_time = time.monotonic()
    stats = asyncio.run(_fetch_async())
    print_summary_panel(stats, time.monotonic() - start_time)
    console.print("[bold green]✓ Done.[/bold green]")


@app.command(name="list")
def list_command(
    music_ids: list[int] | None = typer.Option(  # noqa: B008
        None, "-m", "--music-id", help="Only list this song ID (repeatable)."
    ),
    vocal_types: list[str] | None = typer.Option(  # noqa: B008
        None, "--vocal-type", help="Only list this vocal type (repeatable)."
    ),
):
    """List the song and vocal pairs that 'fetch' would download."""
    config = _load_config(_filter_options(music_ids, vocal_types))

    async def _collect_async():
        async with MasterDbClient(
            config.musics_url, config.music_vocals_url, config.request_timeout
        ) as client:
            return await FetchOrchestrator(config, client, None).collect_resources()

    print_resource_table(asyncio.run(_collect_async()))
