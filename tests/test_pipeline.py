"""End-to-end tests for the analysis pipeline."""

import pytest

from php_insight import analyze
from php_insight.api import run_suite
from php_insight.config import AnalysisConfig
from php_insight.models import CodebaseFacts, Priority
from php_insight.scanning import extract_facts


class TestAnalyze:
    """analyze() on the sample Laravel application."""

    def test_quality_report(self, laravel_app):
        report = analyze(laravel_app, config=AnalysisConfig())
        assert report.title == "Code Quality Report"
        assert [result.name for result in report.results] == [
            "complexity",
            "maintainability",
            "duplication",
            "documentation",
            "naming",
            "structure",
            "performance",
            "security",
            "testing",
        ]
        assert report.failed == []
        assert report["testing"].percentage == 25.0
        assert report["documentation"].percentage == 50.0

    def test_one_recommendation_per_finding(self, laravel_app):
        report = analyze(laravel_app, config=AnalysisConfig())
        assert len(report.recommendations) == len(report.findings)

    @pytest.mark.parametrize(
        "suite,first",
        [
            ("complexity", "complex_methods"),
            ("documentation", "class_documentation"),
            ("testing", "test_coverage"),
        ],
    )
    def test_other_suites(self, laravel_app, suite, first):
        report = analyze(laravel_app, suite=suite, config=AnalysisConfig())
        assert report.results[0].name == first

    def test_results_are_deterministic(self, laravel_app):
        first = analyze(laravel_app, config=AnalysisConfig(workers=4))
        second = analyze(laravel_app, config=AnalysisConfig())
        assert first.results == second.results
        assert first.recommendations == second.recommendations

    def test_project_is_not_modified(self, laravel_app, snapshot_tree):
        before = snapshot_tree(laravel_app)
        for suite in ("quality", "complexity", "documentation", "testing"):
            analyze(laravel_app, suite=suite, config=AnalysisConfig())
        assert snapshot_tree(laravel_app) == before

    def test_overrides_build_config(self, laravel_app, monkeypatch):
        monkeypatch.chdir(laravel_app)
        report = analyze(laravel_app, suite="complexity", large_class_lines=20)
        assert report["large_classes"].issue_count == 2

    def test_unknown_suite(self, laravel_app):
        with pytest.raises(ValueError, match="Unknown suite"):
            analyze(laravel_app, suite="security", config=AnalysisConfig())

    def test_empty_project(self, tmp_path):
        """Nothing to analyze is vacuously perfect."""
        report = analyze(tmp_path, config=AnalysisConfig())
        assert report["testing"].percentage == 100.0
        assert report["documentation"].percentage == 100.0
        assert report["complexity"].grade == "A+"
        assert report.recommendations == ()


class TestRunSuite:
    def test_reuses_extracted_facts(self, laravel_app):
        facts = extract_facts(laravel_app)
        testing = run_suite(facts, "testing")
        quality = run_suite(facts, "quality")
        assert testing["missing_tests"].issue_count == quality["testing"].issue_count == 3

    def test_high_priority_missing_tests(self, laravel_app):
        report = run_suite(extract_facts(laravel_app), "testing")
        high = [rec.subject for rec in report.recommendations
                if rec.kind == "missing_test" and rec.priority is Priority.HIGH]
        assert high == ["UserController", "UserService"]

    def test_empty_facts(self):
        report = run_suite(CodebaseFacts(root="."), "complexity")
        assert all(result.grade == "A+" for result in report.results)
