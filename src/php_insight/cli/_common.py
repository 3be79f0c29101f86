"""Shared CLI helpers."""

from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console

from ..api import run_suite
from ..config import AnalysisConfig, load_config
from ..exceptions import FileAccessError, PhpInsightError
from ..formatters import get_formatter
from ..logging_config import get_logger
from ..models import CodebaseFacts, Report
from ..recommendations import log_remediation_intents
from ..scanning import FactExtractor

console = Console()
# status lines go to stderr so json/markdown on stdout stays clean
err_console = Console(stderr=True)

logger = get_logger(__name__)


class ReportFormat(str, Enum):
    RICH = "rich"
    JSON = "json"
    MARKDOWN = "markdown"
    HTML = "html"


def project_root(ctx: typer.Context) -> Path:
    return (ctx.obj or {}).get("path", Path.cwd()).resolve()


def resolve_config(ctx: typer.Context, **overrides) -> AnalysisConfig:
    """Build configuration from the callback's options plus ``overrides``."""
    obj = ctx.obj or {}
    return load_config(
        config_file=obj.get("config"),
        project_root=project_root(ctx),
        verbose=obj.get("verbose", False),
        quiet=obj.get("quiet", False),
        **overrides,
    )


def extract(ctx: typer.Context, config: AnalysisConfig) -> CodebaseFacts:
    root = project_root(ctx)
    logger.info(f"Scanning {root}")
    return FactExtractor(config).extract(root)


def analyze_project(ctx: typer.Context, suite: str) -> tuple[AnalysisConfig, CodebaseFacts, Report]:
    """Scan the project once and run one aggregator suite over it."""
    config = resolve_config(ctx)
    facts = extract(ctx, config)
    report = run_suite(facts, suite, config)
    logger.info(
        f"{report.title}: {len(report.findings)} findings, "
        f"{len(report.recommendations)} recommendations"
    )
    return config, facts, report


def resolve_output(root: Path, output: Path) -> Path:
    """Relative output paths are taken from the project root."""
    output = Path(output).expanduser()
    return output if output.is_absolute() else root / output


def write_output(target: Path, content: str) -> Path:
    """Write ``content`` to ``target``, creating parent directories.

    Raises:
        FileAccessError: If the file cannot be written
    """
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise FileAccessError(target, f"cannot write output: {e}")
    logger.debug(f"Wrote {len(content)} characters to {target}")
    return target


def emit_report(
    report: Report,
    output_format: str,
    detailed: bool,
    config: AnalysisConfig,
    output: Optional[Path],
    root: Path,
) -> None:
    """Render to stdout, or to ``output`` when given."""
    formatter = get_formatter(output_format, detailed=detailed, config=config)
    if output is None:
        formatter.render(report)
        return
    target = write_output(resolve_output(root, output), formatter.format(report))
    err_console.print(f"[green]Report written to[/green] {target}")


def run_fix(report: Report) -> int:
    """Log remediation intents for high-priority recommendations.

    No source file is touched.
    """
    count = log_remediation_intents(report.recommendations)
    err_console.print(
        f"[yellow]Logged {count} remediation intents[/yellow] "
        "[dim](no files were changed; use -v to see them)[/dim]"
    )
    return count


@contextmanager
def command_errors(action: str) -> Iterator[None]:
    """Map exceptions escaping a command onto exit codes."""
    try:
        yield

    except typer.Exit:
        raise

    except PhpInsightError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        logger.info(f"{action} interrupted by user")
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception(f"Unexpected error during {action}")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)
