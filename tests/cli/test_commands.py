"""Tests for the php-insight command line."""

import json

import pytest
from typer.testing import CliRunner

from php_insight import __version__
from php_insight.cli import app

runner = CliRunner()


@pytest.fixture
def invoke(laravel_app):
    """Run php-insight against the sample application."""

    def _invoke(*args):
        return runner.invoke(app, ["-C", str(laravel_app), *args])

    return _invoke


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_without_command(self, laravel_app):
        result = runner.invoke(app, ["-C", str(laravel_app)])
        assert result.exit_code == 0
        assert "code:quality" in result.output
        assert "docs:user-guide" in result.output

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ["-C", str(tmp_path / "nowhere"), "code:quality"])
        assert result.exit_code == 2

    def test_invalid_config_file(self, laravel_app, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("no_such_option = 1\n")
        result = runner.invoke(app, ["-C", str(laravel_app), "-c", str(bad), "code:quality"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_project_config_read_from_path(self, laravel_app):
        """-C points config discovery at the analyzed project."""
        (laravel_app / "php-insight.toml").write_text("no_such_option = 1\n")
        result = runner.invoke(app, ["-C", str(laravel_app), "code:quality"])
        assert result.exit_code == 1
        assert "no_such_option" in result.output

    def test_log_file_keeps_fix_intents(self, laravel_app, tmp_path):
        """The log file records INFO intents that stderr hides without -v."""
        log_file = tmp_path / "run.log"
        result = runner.invoke(
            app, ["-C", str(laravel_app), "--log-file", str(log_file), "code:quality", "--fix"]
        )
        assert result.exit_code == 0
        assert "Would apply missing_test: Create UserControllerTest" in log_file.read_text()


class TestCodeQuality:
    """code:quality and code:reduce-complexity."""

    def test_rich_report(self, invoke):
        result = invoke("code:quality")
        assert result.exit_code == 0
        assert "Code Quality Report" in result.output
        assert "Summary" in result.output

    def test_json_to_file(self, invoke, laravel_app):
        result = invoke("code:quality", "--format", "json", "--output", "reports/quality.json")
        assert result.exit_code == 0
        assert "Report written to" in result.output
        data = json.loads((laravel_app / "reports" / "quality.json").read_text())
        assert len(data["results"]) == 9
        assert data["results"][8]["name"] == "testing"

    def test_fix_changes_nothing(self, invoke, laravel_app, snapshot_tree):
        before = snapshot_tree(laravel_app)
        result = invoke("code:quality", "--fix")
        assert result.exit_code == 0
        assert "remediation intents" in result.output
        assert snapshot_tree(laravel_app) == before

    def test_unknown_format(self, invoke):
        assert invoke("code:quality", "--format", "csv").exit_code == 2

    def test_format_is_case_insensitive(self, invoke, laravel_app):
        result = invoke("code:quality", "--format", "JSON", "--output", "reports/quality.json")
        assert result.exit_code == 0
        assert json.loads((laravel_app / "reports" / "quality.json").read_text())["results"]

    def test_reduce_complexity(self, invoke):
        result = invoke("code:reduce-complexity", "--detailed")
        assert result.exit_code == 0
        assert "Complexity Reduction Report" in result.output

    def test_analyze_skips_fix(self, invoke):
        result = invoke("code:reduce-complexity", "--analyze", "--fix")
        assert result.exit_code == 0
        assert "remediation intents" not in result.output


class TestTestingAnalyze:
    def test_coverage_table(self, invoke):
        result = invoke("testing:analyze", "--coverage")
        assert result.exit_code == 0
        assert "TEST COVERAGE" in result.output
        assert "1/4 classes" in result.output
        assert "Untested: UserController, User, UserService" in result.output

    def test_generate_is_idempotent(self, invoke, laravel_app):
        first = invoke("testing:analyze", "--generate")
        assert first.exit_code == 0
        assert "Generated 2 test files" in first.output
        stub = laravel_app / "tests" / "Unit" / "UserServiceTest.php"
        assert stub.exists()
        content = stub.read_text()

        second = invoke("testing:analyze", "--generate")
        assert second.exit_code == 0
        assert "Generated 0 test files" in second.output
        assert stub.read_text() == content

    def test_markdown_to_stdout(self, invoke):
        result = invoke("testing:analyze", "--format", "markdown")
        assert result.exit_code == 0
        assert "# Testing Analysis Report" in result.output
        assert "| Test Coverage | F | 25.0% | 0 |" in result.output


class TestDocsCommands:
    """docs:* commands write their documents under the project root."""

    def test_enhance_code(self, invoke):
        result = invoke("docs:enhance-code", "--format", "markdown")
        assert result.exit_code == 0
        assert "# Documentation Enhancement Report" in result.output
        assert "| Class Documentation | F | 50.0% | 2 |" in result.output

    def test_architecture(self, invoke, laravel_app):
        result = invoke("docs:architecture", "--detailed")
        assert result.exit_code == 0
        text = (laravel_app / "docs" / "architecture.md").read_text()
        assert text.startswith("# Course Portal - Architecture Documentation")
        assert "### UserController" in text

    def test_generate_api_default_markdown(self, invoke, laravel_app):
        result = invoke("docs:generate-api")
        assert result.exit_code == 0
        assert "API documentation written to" in result.output
        assert "### GET /api/users" in (laravel_app / "docs" / "api.md").read_text()

    def test_generate_api_extension_follows_format(self, invoke, laravel_app):
        result = invoke("docs:generate-api", "--format", "json")
        assert result.exit_code == 0
        data = json.loads((laravel_app / "docs" / "api.json").read_text())
        assert len(data["routes"]) == 3

    def test_generate_api_unknown_format(self, invoke, laravel_app):
        assert invoke("docs:generate-api", "--format", "rich").exit_code == 2
        assert not (laravel_app / "docs").exists()

    def test_user_guide(self, invoke, laravel_app):
        result = invoke("docs:user-guide", "--output", "guide.md", "--detailed")
        assert result.exit_code == 0
        text = (laravel_app / "guide.md").read_text()
        assert text.startswith("# Course Portal - User Guide")
        assert "## Glossary" in text
