"""testing:analyze - coverage by naming convention and test-suite health."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..generators import TestStubGenerator
from ..grading import grade_color
from ..models import CategoryResult
from . import app
from ._common import (
    ReportFormat,
    analyze_project,
    command_errors,
    console,
    emit_report,
    err_console,
    project_root,
)


def _print_coverage(result: Optional[CategoryResult], out: Console) -> None:
    if result is None or not result.ok:
        out.print("[yellow]Coverage details unavailable[/yellow]")
        return

    details = result.details
    out.print()
    out.print(
        f"[bold cyan]TEST COVERAGE[/bold cyan] -- "
        f"{details['tested_classes']}/{details['total_classes']} classes "
        f"([{grade_color(result.grade)}]{result.percentage:.1f}%[/])"
    )

    table = Table(show_header=True, pad_edge=True)
    table.add_column("Class Type")
    table.add_column("Tested", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Coverage", justify="right")
    for kind, bucket in sorted(details["coverage_by_type"].items()):
        table.add_row(
            kind.title(), str(bucket["tested"]), str(bucket["total"]), f"{bucket['percentage']:.1f}%"
        )
    out.print(table)

    untested = details["untested_classes"]
    if untested:
        out.print(f"[dim]Untested:[/dim] {', '.join(untested)}")


@app.command("testing:analyze")
def testing_analyze(
    ctx: typer.Context,
    generate: bool = typer.Option(
        False,
        "--generate",
        help="Write PHPUnit stubs for high-priority untested classes",
    ),
    coverage: bool = typer.Option(
        False,
        "--coverage",
        help="Show coverage per class type",
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
    Analyze test coverage, missing tests, test quality, test patterns and
    slow tests.

    Stubs are only ever created, never overwritten.

    [bold cyan]Examples:[/bold cyan]

      php-insight testing:analyze

      php-insight testing:analyze --coverage

      php-insight testing:analyze --generate
    """
    with command_errors("testing analysis"):
        root = project_root(ctx)
        config, facts, report = analyze_project(ctx, "testing")
        emit_report(report, output_format.value, detailed, config, output, root)

        if coverage:
            to_stdout = output_format is ReportFormat.RICH and output is None
            _print_coverage(report.get("test_coverage"), console if to_stdout else err_console)

        if generate:
            created = TestStubGenerator(root).generate(report.recommendations, facts)
            err_console.print(f"[green]Generated {len(created)} test files[/green]")
            for path in created:
                err_console.print(f"  {path.relative_to(root)}")
