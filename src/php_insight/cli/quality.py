"""code:quality - the full nine-category quality report."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import ReportFormat, analyze_project, command_errors, emit_report, project_root, run_fix


@app.command("code:quality")
def code_quality(
    ctx: typer.Context,
    fix: bool = typer.Option(
        False,
        "--fix",
        help="Log the fixes that would be applied (no files are changed)",
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
    Grade complexity, maintainability, duplication, documentation, naming,
    structure, performance, security and testing.

    [bold cyan]Examples:[/bold cyan]

      php-insight code:quality

      php-insight code:quality --detailed

      php-insight code:quality --format markdown --output reports/quality.md
    """
    with command_errors("code quality analysis"):
        config, _facts, report = analyze_project(ctx, "quality")
        emit_report(report, output_format.value, detailed, config, output, project_root(ctx))
        if fix:
            run_fix(report)
