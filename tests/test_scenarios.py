"""Small projects run through the whole pipeline, from files to report."""

from php_insight import analyze
from php_insight.config import AnalysisConfig
from php_insight.models import Priority
from php_insight.scanning import extract_facts

CONFIG = AnalysisConfig()

SHARED_BLOCK = """
        $total = $this->base;
        $total += $this->tax;
        $total -= $this->discount;
        $total *= $this->rate;
        $total /= $this->count;
"""


def _class_with_block(name: str, method: str, returns: str) -> str:
    return (
        "<?php\n"
        f"class {name}\n"
        "{\n"
        f"    public function {method}() {{"
        f"{SHARED_BLOCK}"
        f"        return {returns};\n"
        "    }\n"
        "}\n"
    )


class TestFooScenario:
    """One undocumented class with three simple methods and a matching test."""

    FILES = {
        "app/Foo.php": """
            <?php
            class Foo
            {
                public function a() { return 1; }
                public function b() { return 2; }
                public function c() { return 3; }
            }
            """,
        "tests/FooTest.php": """
            <?php
            class FooTest extends TestCase
            {
                public function testReturnsOne()
                {
                    $this->assertEquals(1, (new Foo())->a());
                }
            }
            """,
    }

    def test_grades(self, php_project):
        report = analyze(php_project(self.FILES), config=CONFIG)
        assert report["complexity"].grade == "A+"
        assert report["complexity"].details["average_complexity"] == 1
        assert report["documentation"].percentage == 0.0
        assert report["documentation"].grade == "F"
        assert report["testing"].percentage == 100.0
        assert report["testing"].grade == "A+"


class TestMethodDocumentation:
    def test_nine_of_ten_documented(self, php_project):
        methods = []
        for i in range(10):
            doc = "    /** Step. */\n" if i else ""
            methods.append(f"{doc}    public function step{i}() {{}}\n")
        source = "<?php\n/** Steps. */\nclass Steps\n{\n" + "".join(methods) + "}\n"

        report = analyze(php_project({"app/Steps.php": source}), suite="documentation", config=CONFIG)
        result = report["method_documentation"]
        assert result.total == 10
        assert result.percentage == 90.0
        assert result.grade == "A"


class TestDuplicateDetection:
    """Duplicate windows found on real files by the extractor."""

    def test_one_group_across_two_files(self, php_project):
        root = php_project(
            {
                "app/Invoice.php": _class_with_block("Invoice", "total", "$total"),
                "app/Quote.php": _class_with_block("Quote", "estimate", "round($total)"),
            }
        )
        facts = extract_facts(root, CONFIG)
        assert len(facts.duplicates) == 1
        group = facts.duplicates[0]
        assert group.occurrences == (("app/Invoice.php", 5), ("app/Quote.php", 5))
        assert group.preview == "$total = $this->base;"

        report = analyze(root, config=CONFIG)
        assert report["duplication"].details["duplicate_groups"] == 1
        assert report["duplication"].findings[0].payload["count"] == 2

    def test_no_shared_block(self, php_project):
        root = php_project({"app/Invoice.php": _class_with_block("Invoice", "total", "$total")})
        assert extract_facts(root, CONFIG).duplicates == ()


class TestMissingTestPriority:
    def test_controller_high_model_low(self, php_project):
        root = php_project(
            {
                "app/Http/Controllers/OrderController.php": "<?php\nclass OrderController {}\n",
                "app/Models/OrderModel.php": "<?php\nclass OrderModel {}\n",
            }
        )
        report = analyze(root, suite="testing", config=CONFIG)
        missing = [rec for rec in report.recommendations if rec.kind == "missing_test"]
        by_subject = {}
        for rec in missing:
            by_subject.setdefault(rec.subject, []).append(rec.priority)
        assert by_subject == {"OrderController": [Priority.HIGH], "OrderModel": [Priority.LOW]}
