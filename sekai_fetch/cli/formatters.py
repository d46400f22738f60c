"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Iterable

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sekai_fetch.models.records import SongResource
from sekai_fetch.models.stats import FetchStats
from sekai_fetch.utils.formatting import format_duration, format_size
from sekai_fetch.utils.path import audio_file_name


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "FetchError": [
            "• Check your internet connection.",
            "• The master database mirror may be temporarily unavailable.",
            "• Verify 'musics_url' and 'music_vocals_url' in your config file.",
        ],
        "ConfigurationError": [
            "• Run `sekai-fetch --show-config` to inspect the current values.",
            "• Run `sekai-fetch init --force` to reset the configuration file.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• Please try again in a few minutes.",
        ],
        "TimeoutError": [
            "• A request timed out, which may indicate network throttling.",
            "• Raise 'request_timeout' or 'download_timeout' in your config file.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path | str, config_data: dict[str, Any]):
    """Displays the effective configuration."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        if isinstance(value, list):
            value = ", ".join(map(str, value)) or "(all)"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_resource_table(resources: Iterable[SongResource]):
    """Lists joined resources with the file name each one would be saved as."""
    console = Console()
    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Song", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Vocal", style="magenta")
    table.add_column("Caption")
    table.add_column("File", style="green")

    count = 0
    for resource in resources:
        count += 1
        table.add_row(
            str(resource.schema.id),
            Text(resource.title),
            Text(resource.asset.music_vocal_type or ""),
            Text(resource.caption),
            Text(audio_file_name(resource)),
        )

    console.print(table)
    console.print(f"[bold]{count}[/bold] resources.")


def print_summary_panel(stats: FetchStats, duration_s: float):
    """Displays the final summary of the fetch session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("Resources:", f"[bold]{stats.resources_total}[/bold]")
    stats_table.add_row(
        "✓ Audio:", f"[bold green]{stats.audio_downloaded}[/bold green]"
    )
    stats_table.add_row(
        "✓ Covers:", f"[bold green]{stats.covers_downloaded}[/bold green]"
    )
    if stats.tracks_tagged:
        stats_table.add_row("✓ Tagged:", f"[green]{stats.tracks_tagged}[/green]")

    # Failure metrics (only show if non-zero)
    failures = []
    if stats.audio_failed:
        failures.append(f"[red]{stats.audio_failed} (audio)[/red]")
    if stats.covers_failed:
        failures.append(f"[red]{stats.covers_failed} (cover)[/red]")
    if stats.tags_failed:
        failures.append(f"[red]{stats.tags_failed} (tags)[/red]")
    if failures:
        stats_table.add_row("✗ Failed:", " + ".join(failures))

    if stats.collisions:
        stats_table.add_row(
            "⚠ Overwritten:", f"[yellow]{stats.collisions}[/yellow]"
        )

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    if stats.dry_run:
        title = "🔍 [bold]Dry Run Summary[/bold]"
        border_color = "yellow"
    else:
        title = "🎵 [bold]Fetch Complete![/bold]"
        border_color = "green" if not stats.failures else "yellow"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
