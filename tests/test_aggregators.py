"""Tests for the metric aggregators."""

import pytest

from php_insight.aggregators import (
    Aggregator,
    ComplexityAggregator,
    ComplexMethodsAggregator,
    DeepNestingAggregator,
    DocumentationAggregator,
    DuplicationAggregator,
    KindDocumentationAggregator,
    LargeClassesAggregator,
    LongParameterListsAggregator,
    MaintainabilityAggregator,
    MissingTestsAggregator,
    NamingAggregator,
    PerformanceAggregator,
    SecurityAggregator,
    StructureAggregator,
    TestCoverageAggregator,
    TestingAggregator,
    TestPatternsAggregator,
    TestPerformanceAggregator,
    TestQualityAggregator,
    get_suite,
    percentage,
)
from php_insight.config import AnalysisConfig
from php_insight.models import Category, CodebaseFacts, DuplicateGroup, Priority
from php_insight.scanning import extract_facts

CONFIG = AnalysisConfig()


def _branchy_class(branches: int) -> str:
    conditions = "\n".join(f"        if ($x == {n}) {{ $y = {n}; }}" for n in range(branches))
    return f"<?php\nclass Calc\n{{\n    public function run($x)\n    {{\n{conditions}\n    }}\n}}\n"


@pytest.fixture
def laravel_facts(laravel_app):
    return extract_facts(laravel_app)


class TestHelpers:
    def test_percentage_of_empty_whole(self):
        """Nothing to cover counts as fully covered."""
        assert percentage(0, 0) == 100.0

    def test_percentage_rounding(self):
        assert percentage(1, 3) == 33.33


class TestComplexity:
    """Average complexity and complex-method findings."""

    def test_complex_method(self, php_project):
        facts = extract_facts(php_project({"app/Calc.php": _branchy_class(11)}))
        result = ComplexityAggregator().run(facts, CONFIG)
        assert result.score == 12
        assert result.grade == "B"
        assert result.details["max_complexity"] == 12
        finding = result.findings[0]
        assert finding.kind == "complex_method"
        assert finding.subject == "Calc::run"
        assert finding.severity is Priority.HIGH

    def test_at_threshold_is_not_complex(self, php_project):
        facts = extract_facts(php_project({"app/Calc.php": _branchy_class(9)}))
        result = ComplexityAggregator().run(facts, CONFIG)
        assert result.score == 10
        assert result.grade == "A"
        assert result.findings == ()

    def test_no_methods(self):
        result = ComplexityAggregator().run(CodebaseFacts(root="."), CONFIG)
        assert result.score == 0.0
        assert result.grade == "A+"

    def test_reduction_suite_counts(self, php_project):
        facts = extract_facts(php_project({"app/Calc.php": _branchy_class(11)}))
        result = ComplexMethodsAggregator().run(facts, CONFIG)
        assert result.score == 1
        assert result.grade == "A"


class TestMaintainability:
    def test_average_class_lines(self, laravel_facts):
        result = MaintainabilityAggregator().run(laravel_facts, CONFIG)
        assert result.score == 17.25
        assert result.grade == "A+"
        assert result.findings == ()

    def test_large_classes(self, laravel_facts):
        config = AnalysisConfig(large_class_lines=20)
        result = MaintainabilityAggregator().run(laravel_facts, config)
        assert [f.subject for f in result.findings] == ["UserController", "User"]
        assert all(f.kind == "large_class" for f in result.findings)

    def test_large_class_reasons(self, laravel_facts):
        """Method count and line count are reported together."""
        config = AnalysisConfig(large_class_lines=20, large_class_methods=3)
        result = LargeClassesAggregator().run(laravel_facts, config)
        controller = result.findings[0]
        assert controller.description == "Class UserController has 4 methods and 27 lines"


class TestNestingAndParameters:
    def test_deep_nesting(self, php_project):
        source = """\
            <?php
            class Deep
            {
                public function run($a)
                {
                    if ($a) {
                        foreach ($a as $b) {
                            while ($b) {
                                if ($b) { $b--; }
                            }
                        }
                    }
                }
            }
            """
        facts = extract_facts(php_project({"app/Deep.php": source}))
        result = DeepNestingAggregator().run(facts, CONFIG)
        assert result.findings[0].payload["nesting"] == 5
        assert result.findings[0].subject == "Deep::run"

    def test_long_parameter_list(self, php_project):
        source = "<?php\nclass P { public function f($a, $b, $c, $d, $e, $f) {} }\n"
        facts = extract_facts(php_project({"app/P.php": source}))
        result = LongParameterListsAggregator().run(facts, CONFIG)
        assert result.findings[0].payload["parameters"] == ["a", "b", "c", "d", "e", "f"]


class TestDuplication:
    def test_groups_are_weighted(self):
        groups = tuple(
            DuplicateGroup(digest=str(n), occurrences=(("a.php", n), ("b.php", n)), preview="x")
            for n in range(1, 4)
        )
        result = DuplicationAggregator().run(CodebaseFacts(root=".", duplicates=groups), CONFIG)
        assert result.percentage == 1.5
        assert result.grade == "A"
        assert result.findings[0].payload["count"] == 2
        assert result.findings[0].location == "a.php:1"

    def test_no_duplicates(self):
        result = DuplicationAggregator().run(CodebaseFacts(root="."), CONFIG)
        assert result.grade == "A+"


class TestNaming:
    def test_violations(self, php_project):
        source = """\
            <?php
            class bad_name
            {
                public $Snake_prop;
                public $goodProp;
                public function __construct() {}
                public function Do_Thing() {}
                public function goodName() {}
            }
            """
        facts = extract_facts(php_project({"app/bad.php": source}))
        result = NamingAggregator().run(facts, CONFIG)
        assert [(f.payload["type"], f.subject) for f in result.findings] == [
            ("class", "bad_name"),
            ("method", "Do_Thing"),
            ("property", "Snake_prop"),
        ]
        # magic methods are not checked
        assert result.total == 5
        assert result.grade == "A"


class TestStructure:
    def test_laravel_classes(self, laravel_facts):
        result = StructureAggregator().run(laravel_facts, CONFIG)
        kinds = [(f.kind, f.subject) for f in result.findings]
        assert kinds.count(("missing_interface", "User")) == 1
        assert ("missing_traits", "User") not in kinds
        assert len(result.findings) == 7
        assert result.grade == "B"

    def test_too_many_dependencies(self, php_project):
        source = """\
            <?php
            class Busy implements Job
            {
                use Queueable;

                public function __construct(A $a, B $b, C $c, D $d, E $e, F $f) {}
            }
            """
        facts = extract_facts(php_project({"app/Busy.php": source}))
        result = StructureAggregator().run(facts, CONFIG)
        assert [f.kind for f in result.findings] == ["too_many_dependencies"]
        assert result.findings[0].payload["dependencies"] == ["A", "B", "C", "D", "E", "F"]


class TestRiskCatalogues:
    def test_security(self, php_project):
        facts = extract_facts(php_project({"app/Risky.php": "<?php\neval($code);\nDB::raw($input);\n"}))
        result = SecurityAggregator().run(facts, CONFIG)
        assert result.details == {"eval_usage": 1, "sql_injection": 1}
        assert all(f.severity is Priority.HIGH for f in result.findings)
        assert result.grade == "B"

    def test_performance(self, php_project):
        facts = extract_facts(php_project({"app/Slow.php": "<?php\n$c = file_get_contents($p);\n"}))
        result = PerformanceAggregator().run(facts, CONFIG)
        assert [f.kind for f in result.findings] == ["file_get_contents"]
        assert result.findings[0].line == 2
        assert result.grade == "A"


class TestDocumentation:
    """Per-kind doc-comment coverage on the sample application."""

    def test_overall_is_class_coverage(self, laravel_facts):
        result = DocumentationAggregator().run(laravel_facts, CONFIG)
        assert result.percentage == 50.0
        assert result.grade == "F"
        assert result.details["method_percentage"] == 12.5
        assert result.details["property_percentage"] == 0.0
        assert result.details["interface_percentage"] == 100.0

    def test_kind_aggregator(self, laravel_facts):
        result = KindDocumentationAggregator("method").run(laravel_facts, CONFIG)
        assert result.name == "method_documentation"
        assert result.total == 8
        assert result.details == {"documented": 1, "undocumented": 7}

    def test_undocumented_class_findings(self, laravel_facts):
        result = KindDocumentationAggregator("class").run(laravel_facts, CONFIG)
        assert [f.subject for f in result.findings] == ["Post", "UserService"]
        assert all(f.severity is Priority.HIGH for f in result.findings)

    def test_method_finding_payload(self, laravel_facts):
        result = KindDocumentationAggregator("method").run(laravel_facts, CONFIG)
        show = next(f for f in result.findings if f.subject == "UserController::show")
        assert show.payload["parameters"] == [("int", "id")]


class TestFailureIsolation:
    def test_exception_degrades_to_f(self):
        class Exploding(Aggregator):
            name = "exploding"
            category = Category.STRUCTURE

            def compute(self, facts, config):
                raise RuntimeError("boom")

        result = Exploding().run(CodebaseFacts(root="."), CONFIG)
        assert result.grade == "F"
        assert result.score == 0.0
        assert result.error == "RuntimeError: boom"
        assert not result.ok


class TestTestingAggregators:
    """Naming-convention coverage and test-suite health."""

    def test_coverage(self, laravel_facts):
        result = TestCoverageAggregator().run(laravel_facts, CONFIG)
        assert result.percentage == 25.0
        assert result.grade == "F"
        assert result.details["untested_classes"] == ["UserController", "User", "UserService"]
        assert result.details["coverage_by_type"] == {
            "Controller": {"total": 1, "tested": 0, "percentage": 0.0},
            "Class": {"total": 2, "tested": 1, "percentage": 50.0},
            "Service": {"total": 1, "tested": 0, "percentage": 0.0},
        }

    def test_quality_report_testing(self, laravel_facts):
        result = TestingAggregator().run(laravel_facts, CONFIG)
        assert result.details == {"total_classes": 4, "tested_classes": 1}
        assert len(result.findings) == 3

    def test_missing_tests(self, laravel_facts):
        result = MissingTestsAggregator().run(laravel_facts, CONFIG)
        assert [(f.subject, f.severity) for f in result.findings] == [
            ("UserController", Priority.HIGH),
            ("User", Priority.MEDIUM),
            ("UserService", Priority.HIGH),
        ]
        assert result.details["by_priority"] == {"high": 2, "medium": 1}
        payload = result.findings[0].payload
        assert payload["test_path"] == "tests/Unit/UserControllerTest.php"
        assert payload["methods"] == ["index", "show", "store"]

    def test_quality_issues(self, laravel_facts):
        result = TestQualityAggregator().run(laravel_facts, CONFIG)
        assert [(f.kind, f.file) for f in result.findings] == [
            ("poor_test_naming", "tests/Feature/UserApiTest.php"),
            ("no_test_isolation", "tests/Feature/UserApiTest.php"),
        ]
        assert result.findings[0].line == 9

    def test_patterns(self, laravel_facts):
        result = TestPatternsAggregator().run(laravel_facts, CONFIG)
        assert result.score == 40
        assert result.grade == "F"
        assert [f.subject for f in result.findings] == ["unit", "integration", "feature", "mocking"]
        assert result.details["unit"] == 1
        assert result.details["feature"] == 1

    def test_no_slow_tests_in_sample(self, laravel_facts):
        assert TestPerformanceAggregator().run(laravel_facts, CONFIG).findings == ()

    def test_slow_test_without_mocking(self, php_project):
        source = """\
            <?php
            class ImportTest extends TestCase
            {
                public function testImport()
                {
                    DB::table('rows')->count();
                    File::exists('/tmp/x');
                    Http::get('https://example.com');
                    $this->assertTrue(true);
                }
            }
            """
        facts = extract_facts(php_project({"tests/Unit/ImportTest.php": source}))
        result = TestPerformanceAggregator().run(facts, CONFIG)
        assert [f.kind for f in result.findings] == ["slow_test", "missing_mocking"]
        assert result.findings[0].payload["operations"] == ["database", "file_operations", "network"]


class TestSuites:
    def test_quality_suite_order(self):
        title, aggregators = get_suite("quality")
        assert title == "Code Quality Report"
        assert [a.name for a in aggregators] == [
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

    def test_fresh_instances(self):
        assert get_suite("testing")[1][0] is not get_suite("testing")[1][0]

    def test_unknown_suite(self):
        with pytest.raises(ValueError, match="Unknown suite"):
            get_suite("nope")
