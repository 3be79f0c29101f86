"""Rich terminal formatter for PHP Insight."""

from io import StringIO
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..config import AnalysisConfig
from ..grading import grade_color
from ..models import CategoryResult, Priority, Report
from ..recommendations import sort_by_priority
from .base import BaseFormatter

_PRIORITY_STYLE = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "dim",
}


def _title(name: str) -> str:
    return name.replace("_", " ").title()


def _score(result: CategoryResult) -> str:
    if result.percentage is not None:
        return f"{result.percentage:.1f}%"
    if isinstance(result.score, float) and not result.score.is_integer():
        return f"{result.score:.2f}"
    return str(int(result.score))


class RichFormatter(BaseFormatter):
    """Grade table, optional per-category details, and top recommendations."""

    def __init__(
        self,
        detailed: bool = False,
        config: Optional[AnalysisConfig] = None,
        console: Optional[Console] = None,
    ):
        super().__init__(detailed, config)
        self.console = console or Console()

    def render(self, report: Report) -> None:
        self._print(report, self.console)

    def format(self, report: Report) -> str:
        buffer = Console(file=StringIO(), record=True, width=self.console.width)
        self._print(report, buffer)
        return buffer.export_text()

    # -- private helpers --

    def _print(self, report: Report, console: Console) -> None:
        console.print(
            Panel(
                f"[bold]{escape(report.title)}[/bold]\n[dim]{report.timestamp}[/dim]",
                title="[bold cyan]PHP Insight[/bold cyan]",
                expand=False,
            )
        )
        console.print()
        console.print(self._grade_table(report))
        console.print()

        for result in report.failed:
            console.print(f"[red]{_title(result.name)} failed:[/red] {escape(result.error or '')}")

        if self.detailed:
            self._print_details(report, console)

        self._print_recommendations(report, console)

    def _grade_table(self, report: Report) -> Table:
        table = Table(title="Summary", expand=False)
        table.add_column("Category", style="bold")
        table.add_column("Grade", justify="center", width=7)
        table.add_column("Score", justify="right")
        table.add_column("Issues", justify="right")

        for result in report.results:
            color = grade_color(result.grade)
            table.add_row(
                _title(result.name),
                f"[{color}]{result.grade}[/{color}]",
                _score(result) if result.ok else "-",
                str(result.issue_count) if result.ok else "[red]error[/red]",
            )
        return table

    def _print_details(self, report: Report, console: Console) -> None:
        limit = self.config.detail_limit
        for result in report.results:
            if not result.findings:
                continue
            color = grade_color(result.grade)
            console.print(
                f"[bold]{_title(result.name)}[/bold] [{color}]({result.grade})[/{color}]"
            )
            for finding in result.findings[:limit]:
                console.print(
                    f"  [yellow]{escape(finding.location)}[/yellow] {escape(finding.description)}"
                )
            remaining = len(result.findings) - limit
            if remaining > 0:
                console.print(f"  [dim]... and {remaining} more[/dim]")
            console.print()

    def _print_recommendations(self, report: Report, console: Console) -> None:
        if not report.recommendations:
            console.print("[green]No recommendations.[/green]")
            return

        limit = self.config.recommendation_limit
        ordered = sort_by_priority(report.recommendations)
        console.print("[bold cyan]Recommendations[/bold cyan]")
        for i, rec in enumerate(ordered[:limit], 1):
            style = _PRIORITY_STYLE[rec.priority]
            location = f" [dim]{escape(rec.location)}[/dim]" if rec.location else ""
            console.print(
                f"  {i}. [{style}]{rec.priority.value.upper()}[/{style}] "
                f"{escape(rec.action)}{location}"
            )
        remaining = len(ordered) - limit
        if remaining > 0:
            console.print(f"  [dim]... and {remaining} more[/dim]")
