"""code:reduce-complexity - complexity, size, nesting, parameters and smells."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import (
    ReportFormat,
    analyze_project,
    command_errors,
    emit_report,
    logger,
    project_root,
    run_fix,
)


@app.command("code:reduce-complexity")
def reduce_complexity(
    ctx: typer.Context,
    analyze_only: bool = typer.Option(
        False,
        "--analyze",
        help="Analyze complexity only; --fix is ignored",
    ),
    fix: bool = typer.Option(
        False,
        "--fix",
        help="Log the refactorings that would be applied (no files are changed)",
    ),
    detailed: bool = typer.Option(
        False,
        "--detailed",
        help="Show findings per category and the top recommendations",
    ),
    output_format: ReportFormat = typer.Option(
        ReportFormat.RICH,
        "--format",
        "-f",
        help="Report format: rich | json | markdown | html",
        case_sensitive=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the report to a file (relative to the project root)",
    ),
):
    """
    Find complex methods, large classes, deep nesting, long parameter lists
    and code smells.

    [bold cyan]Examples:[/bold cyan]

      php-insight code:reduce-complexity

      php-insight code:reduce-complexity --detailed --fix -v

      php-insight code:reduce-complexity --format json > complexity.json
    """
    with command_errors("complexity analysis"):
        config, _facts, report = analyze_project(ctx, "complexity")
        emit_report(report, output_format.value, detailed, config, output, project_root(ctx))
        if fix and analyze_only:
            logger.debug("--analyze given, skipping --fix")
        elif fix:
            run_fix(report)
