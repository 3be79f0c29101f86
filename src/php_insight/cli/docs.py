"""docs:* commands - doc-comment coverage and generated project documentation."""

from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from ..docs import (
    build_inventory,
    build_user_guide,
    collect_api_documentation,
    render_api_documentation,
    render_architecture,
)
from ..docs.laravel import project_name, read_composer
from . import app
from ._common import (
    ReportFormat,
    analyze_project,
    command_errors,
    emit_report,
    err_console,
    extract,
    project_root,
    resolve_config,
    resolve_output,
    run_fix,
    write_output,
)


class ApiFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"
    HTML = "html"


_API_EXTENSIONS = {ApiFormat.MARKDOWN: "md", ApiFormat.JSON: "json", ApiFormat.HTML: "html"}


@app.command("docs:enhance-code")
def docs_enhance_code(
    ctx: typer.Context,
    fix: bool = typer.Option(
        False,
        "--fix",
        help="Log the doc comments that would be added (no files are changed)",
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
    Measure doc-comment coverage of classes, methods, properties,
    interfaces and traits.

    [bold cyan]Examples:[/bold cyan]

      php-insight docs:enhance-code

      php-insight docs:enhance-code --detailed --fix -v
    """
    with command_errors("documentation analysis"):
        config, _facts, report = analyze_project(ctx, "documentation")
        emit_report(report, output_format.value, detailed, config, output, project_root(ctx))
        if fix:
            run_fix(report)


@app.command("docs:architecture")
def docs_architecture(
    ctx: typer.Context,
    output: Path = typer.Option(
        Path("docs") / "architecture.md",
        "--output",
        "-o",
        help="Output file (relative to the project root)",
    ),
    detailed: bool = typer.Option(
        False,
        "--detailed",
        help="List every service, controller, model, route and migration",
    ),
):
    """
    Generate Markdown architecture documentation: layers, modules,
    components, routes, database, configuration and dependencies.

    [bold cyan]Examples:[/bold cyan]

      php-insight docs:architecture

      php-insight docs:architecture --detailed --output ARCHITECTURE.md
    """
    with command_errors("architecture documentation"):
        root = project_root(ctx)
        facts = extract(ctx, resolve_config(ctx))
        content = render_architecture(build_inventory(root, facts), detailed=detailed)
        target = write_output(resolve_output(root, output), content)
        err_console.print(f"[green]Architecture documentation written to[/green] {target}")


@app.command("docs:generate-api")
def docs_generate_api(
    ctx: typer.Context,
    output_format: ApiFormat = typer.Option(
        ApiFormat.MARKDOWN,
        "--format",
        "-f",
        help="Output format: markdown | json | html",
        case_sensitive=False,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file (default: docs/api.md, extension follows --format)",
    ),
):
    """
    Generate API documentation from routes, controllers and Eloquent models.

    [bold cyan]Examples:[/bold cyan]

      php-insight docs:generate-api

      php-insight docs:generate-api --format json

      php-insight docs:generate-api --format html --output public/api.html
    """
    if output is None:
        output = Path("docs") / f"api.{_API_EXTENSIONS[output_format]}"

    with command_errors("API documentation"):
        root = project_root(ctx)
        facts = extract(ctx, resolve_config(ctx))
        doc = collect_api_documentation(root, facts)
        target = write_output(resolve_output(root, output), render_api_documentation(doc, output_format.value))
        err_console.print(
            f"[green]API documentation written to[/green] {target} "
            f"[dim]({len(doc.routes)} endpoints)[/dim]"
        )


@app.command("docs:user-guide")
def docs_user_guide(
    ctx: typer.Context,
    output: Path = typer.Option(
        Path("docs") / "user-guide.md",
        "--output",
        "-o",
        help="Output file (relative to the project root)",
    ),
    detailed: bool = typer.Option(
        False,
        "--detailed",
        help="Add keyboard shortcuts and a glossary",
    ),
):
    """
    Generate an end-user guide titled with the project name.

    [bold cyan]Examples:[/bold cyan]

      php-insight docs:user-guide

      php-insight docs:user-guide --detailed
    """
    with command_errors("user guide generation"):
        root = project_root(ctx)
        content = build_user_guide(project_name(root, read_composer(root)), detailed=detailed)
        target = write_output(resolve_output(root, output), content)
        err_console.print(f"[green]User guide written to[/green] {target}")
