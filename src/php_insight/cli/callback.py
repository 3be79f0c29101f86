"""Top-level options shared by every command."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from . import app
from ._common import console


@app.callback(invoke_without_command=True, no_args_is_help=False)
def root(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Project root to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging, including --fix remediation intents",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write the log (INFO and above) to this file",
        file_okay=True,
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Analyze PHP and Laravel codebases and generate project documentation.

    Every command scans the project once, read-only. Reports go to stdout
    unless --output is given.

    [bold cyan]Examples:[/bold cyan]

      php-insight code:quality

      php-insight -C /path/to/app code:quality --detailed

      php-insight testing:analyze --coverage --generate

      php-insight docs:generate-api --format html
    """
    from .. import __version__

    if version:
        console.print(f"[bold cyan]PHP Insight[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)

    ctx.ensure_object(dict)
    ctx.obj["path"] = Path(path) if path else Path.cwd()
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit(0)
