"""Markdown formatter for PHP Insight."""

from ..models import CategoryResult, Priority, Report
from ..recommendations import sort_by_priority
from .base import BaseFormatter


def _title(name: str) -> str:
    return name.replace("_", " ").title()


class MarkdownFormatter(BaseFormatter):
    """Title, summary table and one section per category."""

    def format(self, report: Report) -> str:
        lines = [f"# {report.title}", "", f"Generated: {report.timestamp}", ""]
        lines.extend(self._summary(report))
        for result in report.results:
            lines.extend(self._section(result))
        lines.extend(self._recommendations(report))
        return "\n".join(lines).rstrip() + "\n"

    def _summary(self, report: Report) -> list[str]:
        lines = [
            "## Summary",
            "",
            "| Category | Grade | Score | Issues |",
            "|----------|-------|-------|--------|",
        ]
        for result in report.results:
            score = f"{result.percentage:.1f}%" if result.percentage is not None else result.score
            lines.append(
                f"| {_title(result.name)} | {result.grade} | {score} | {result.issue_count} |"
            )
        lines.append("")
        return lines

    def _section(self, result: CategoryResult) -> list[str]:
        lines = [f"## {_title(result.name)}", "", f"**Grade:** {result.grade}", ""]
        if result.error:
            lines.extend([f"**Error:** {result.error}", ""])
            return lines

        for key, value in result.details.items():
            if isinstance(value, (dict, list)):
                continue
            lines.append(f"- {_title(key)}: {value}")
        if result.details:
            lines.append("")

        findings = result.findings
        if not self.detailed:
            findings = findings[: self.config.detail_limit]
        for finding in findings:
            lines.append(f"- `{finding.location}` {finding.description}")
        remaining = len(result.findings) - len(findings)
        if remaining > 0:
            lines.append(f"- ... and {remaining} more")
        if result.findings:
            lines.append("")
        return lines

    def _recommendations(self, report: Report) -> list[str]:
        if not report.recommendations:
            return []
        lines = ["## Recommendations", ""]
        ordered = sort_by_priority(report.recommendations)
        if not self.detailed:
            ordered = ordered[: self.config.recommendation_limit]
        for priority in Priority:
            group = [rec for rec in ordered if rec.priority is priority]
            if not group:
                continue
            lines.extend([f"### {priority.value.title()} priority", ""])
            for rec in group:
                location = f" (`{rec.location}`)" if rec.location else ""
                lines.append(f"- **{rec.action}**{location}: {rec.description}")
                if rec.template:
                    lines.extend(["", "```php", rec.template, "```", ""])
            lines.append("")
        remaining = len(report.recommendations) - len(ordered)
        if remaining > 0:
            lines.extend([f"... and {remaining} more", ""])
        return lines
