"""
Console entry point for sekai-fetch.

Errors that escape the Typer app are rendered as a Rich panel with hints;
the context line names the config file when changing it could help.
"""

import asyncio
import logging
import os
import sys

import typer
from rich.console import Console

from sekai_fetch.cli import app as cli
from sekai_fetch.cli.formatters import format_error_with_suggestions
from sekai_fetch.exceptions import ConfigurationError, FetchError, SekaiFetchError

log = logging.getLogger("sekai_fetch")


def _error_context(error: SekaiFetchError) -> dict | None:
    # Source URLs and timeouts live in the config file too.
    if isinstance(error, (ConfigurationError, FetchError)):
        return {"config": str(cli.CONFIG_FILE)}
    return None


def main() -> None:
    # Song titles and captions are mostly Japanese.
    if os.name == "nt":
        try:
            sys.stdout.reconfigure(encoding="utf-8")
            sys.stderr.reconfigure(encoding="utf-8")
        except (TypeError, AttributeError):
            pass

    console = Console()

    try:
        cli.app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print(
            "\n[yellow]⚠️  Fetch cancelled. Finished files are kept; "
            "run the command again to refetch the rest.[/yellow]"
        )
        sys.exit(0)
    except SekaiFetchError as e:
        console.print(f"\n{format_error_with_suggestions(e, _error_context(e))}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
