"""Tests for the report formatters."""

import json

import pytest
from rich.console import Console

from php_insight.config import AnalysisConfig
from php_insight.formatters import (
    HtmlFormatter,
    JsonFormatter,
    MarkdownFormatter,
    RichFormatter,
    get_formatter,
    html_page,
    markdown_to_html,
)
from php_insight.models import Category, CategoryResult, Finding, Priority, Recommendation, ReportBuilder


def _finding(n):
    return Finding(
        category=Category.NAMING,
        kind="naming_violation",
        file="app/Thing.php",
        line=n,
        description=f"Method name do_{n} is not camelCase",
        subject=f"do_{n}",
        severity=Priority.LOW,
    )


@pytest.fixture
def report():
    builder = ReportBuilder("Code Quality Report", timestamp="2024-03-05T10:00:00")
    builder.add(
        CategoryResult(
            name="naming",
            category=Category.NAMING,
            grade="B",
            score=7.0,
            total=20,
            findings=tuple(_finding(n) for n in range(1, 8)),
        )
    )
    builder.add(
        CategoryResult(
            name="test_coverage",
            category=Category.TESTING,
            grade="F",
            score=25.0,
            total=4,
            percentage=25.0,
            details={"total_classes": 4, "untested_classes": ["A", "B", "C"]},
        )
    )
    builder.add(CategoryResult.failed("security", Category.SECURITY, "RuntimeError: boom"))
    builder.with_recommendations(
        [
            Recommendation(Priority.LOW, "Rename do_1", "naming", Category.NAMING, "naming",
                           file="app/Thing.php", line=1),
            Recommendation(Priority.HIGH, "Add documentation to class Post", "undocumented",
                           Category.DOCUMENTATION, "class_documentation", file="app/Models/Post.php",
                           line=7, template="/**\n * Post\n */"),
        ]
    )
    return builder.build()


class TestGetFormatter:
    @pytest.mark.parametrize(
        "name,cls",
        [("rich", RichFormatter), ("json", JsonFormatter), ("markdown", MarkdownFormatter), ("html", HtmlFormatter)],
    )
    def test_known_formatters(self, name, cls):
        assert isinstance(get_formatter(name), cls)

    def test_options_are_passed(self):
        config = AnalysisConfig(detail_limit=2)
        formatter = get_formatter("markdown", detailed=True, config=config)
        assert formatter.detailed
        assert formatter.config.detail_limit == 2

    def test_unknown_formatter(self):
        with pytest.raises(ValueError, match="Unknown formatter"):
            get_formatter("csv")


class TestJsonFormatter:
    def test_round_trips_report(self, report):
        data = json.loads(JsonFormatter().format(report))
        assert data["title"] == "Code Quality Report"
        assert [r["name"] for r in data["results"]] == ["naming", "test_coverage", "security"]
        assert data["results"][0]["category"] == "naming"
        assert data["results"][0]["findings"][0]["severity"] == "low"
        assert data["results"][2]["error"] == "RuntimeError: boom"
        assert data["recommendations"][1]["priority"] == "high"

    def test_is_repeatable(self, report):
        """Rendering never mutates the report."""
        formatter = JsonFormatter()
        assert formatter.format(report) == formatter.format(report)


class TestMarkdownFormatter:
    def test_summary_table(self, report):
        text = MarkdownFormatter().format(report)
        assert text.startswith("# Code Quality Report\n")
        assert "| Naming | B | 7.0 | 7 |" in text
        assert "| Test Coverage | F | 25.0% | 0 |" in text

    def test_findings_are_limited(self, report):
        text = MarkdownFormatter().format(report)
        assert "- `app/Thing.php:5` Method name do_5 is not camelCase" in text
        assert "do_6 is not" not in text
        assert "- ... and 2 more" in text

    def test_detailed_shows_everything(self, report):
        text = MarkdownFormatter(detailed=True).format(report)
        assert "do_7 is not camelCase" in text
        assert "... and" not in text

    def test_scalar_details_only(self, report):
        text = MarkdownFormatter().format(report)
        assert "- Total Classes: 4" in text
        assert "Untested Classes" not in text

    def test_failed_category(self, report):
        assert "**Error:** RuntimeError: boom" in MarkdownFormatter().format(report)

    def test_recommendations_grouped_by_priority(self, report):
        text = MarkdownFormatter().format(report)
        assert text.index("### High priority") < text.index("### Low priority")
        assert "```php\n/**\n * Post\n */\n```" in text


class TestHtml:
    def test_markdown_subset(self):
        fragment = markdown_to_html(
            "# Title\n\n- **bold** `code`\n- two\n\n| A | B |\n|---|---|\n| 1 | 2 |\n\n```php\n<?php\n```\ntext"
        )
        assert "<h1>Title</h1>" in fragment
        assert "<ul>\n<li><strong>bold</strong> <code>code</code></li>\n<li>two</li>\n</ul>" in fragment
        assert "<table><thead><tr><th>A</th><th>B</th></tr></thead>" in fragment
        assert "<td>1</td><td>2</td>" in fragment
        assert '<pre><code class="language-php">&lt;?php</code></pre>' in fragment
        assert "<p>text</p>" in fragment

    def test_text_is_escaped(self):
        assert markdown_to_html("a < b & c") == "<p>a &lt; b &amp; c</p>"

    def test_page(self):
        page = html_page("R & D", "# Hi")
        assert page.startswith("<!DOCTYPE html>")
        assert "<title>R &amp; D</title>" in page
        assert "<h1>Hi</h1>" in page

    def test_html_report(self, report):
        page = HtmlFormatter().format(report)
        assert "<h2>Summary</h2>" in page
        assert "<td>Naming</td>" in page


class TestRichFormatter:
    def _formatter(self, **kwargs):
        return RichFormatter(console=Console(width=120), **kwargs)

    def test_summary_and_recommendations(self, report):
        text = self._formatter().format(report)
        assert "Code Quality Report" in text
        assert "Summary" in text
        assert "Security failed: RuntimeError: boom" in text
        assert text.index("HIGH Add documentation to class Post") < text.index("LOW Rename do_1")

    def test_details_hidden_by_default(self, report):
        assert "do_1 is not camelCase" not in self._formatter().format(report)

    def test_detailed(self, report):
        text = self._formatter(detailed=True).format(report)
        assert "app/Thing.php:1 Method name do_1 is not camelCase" in text
        assert "... and 2 more" in text

    def test_recommendation_limit(self, report):
        config = AnalysisConfig(recommendation_limit=1)
        text = RichFormatter(config=config, console=Console(width=120)).format(report)
        assert "Rename do_1" not in text
        assert "... and 1 more" in text

    def test_render_prints_to_console(self, report, capsys):
        RichFormatter(console=Console(width=120, force_terminal=False)).render(report)
        assert "Code Quality Report" in capsys.readouterr().out
