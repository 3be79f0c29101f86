"""Tests for generators/test_stubs.py."""

import pytest

from php_insight.api import run_suite
from php_insight.exceptions import FileAccessError
from php_insight.generators import TestStubGenerator, render_test_class
from php_insight.models import Category, Priority, Recommendation
from php_insight.scanning import extract_facts


def _missing(subject, priority=Priority.HIGH):
    return Recommendation(priority, f"Create {subject}Test", "", Category.TESTING, "missing_test",
                          subject=subject)


class TestRenderTestClass:
    def test_class_skeleton(self):
        source = render_test_class("OrderService", "App\\Services", ["place", "cancel"])
        assert source.startswith("<?php\n\nnamespace Tests\\Unit;\n")
        assert "use App\\Services\\OrderService;\n" in source
        assert "class OrderServiceTest extends TestCase\n" in source
        assert "protected OrderService $orderService;" in source
        assert "$this->orderService = new OrderService();" in source
        assert "public function testPlace(): void" in source
        assert "public function testCancel(): void" in source
        assert source.endswith("}\n")

    def test_no_methods(self):
        source = render_test_class("Money")
        assert "use Money;" in source
        assert "function test" not in source


class TestStubGeneratorTests:
    """Stub creation for high-priority missing tests."""

    def test_generates_high_priority_only(self, laravel_app):
        facts = extract_facts(laravel_app)
        report = run_suite(facts, "testing")
        created = TestStubGenerator(laravel_app).generate(report.recommendations, facts)
        assert [p.relative_to(laravel_app).as_posix() for p in created] == [
            "tests/Unit/UserControllerTest.php",
            "tests/Unit/UserServiceTest.php",
        ]
        controller = created[0].read_text()
        assert "use App\\Http\\Controllers\\UserController;" in controller
        for method in ("testIndex", "testShow", "testStore"):
            assert f"public function {method}(): void" in controller
        assert not (laravel_app / "tests" / "Unit" / "UserTest.php").exists()

    def test_second_run_creates_nothing(self, laravel_app):
        facts = extract_facts(laravel_app)
        recs = run_suite(facts, "testing").recommendations
        generator = TestStubGenerator(laravel_app)
        first = generator.generate(recs, facts)
        before = [path.read_text() for path in first]
        assert generator.generate(recs, facts) == []
        assert [path.read_text() for path in first] == before

    def test_existing_file_is_not_overwritten(self, tmp_path):
        target = tmp_path / "tests" / "Unit" / "BillingServiceTest.php"
        target.parent.mkdir(parents=True)
        target.write_text("<?php // hand written\n")
        assert TestStubGenerator(tmp_path).generate([_missing("BillingService")]) == []
        assert target.read_text() == "<?php // hand written\n"

    def test_other_recommendations_ignored(self, tmp_path):
        recs = [
            _missing("Money", Priority.MEDIUM),
            Recommendation(Priority.HIGH, "Extract class from A", "", Category.MAINTAINABILITY,
                           "extract_class", subject="A"),
        ]
        assert TestStubGenerator(tmp_path).generate(recs) == []
        assert not (tmp_path / "tests").exists()

    def test_without_facts(self, tmp_path):
        created = TestStubGenerator(tmp_path).generate([_missing("BillingService")])
        assert "class BillingServiceTest" in created[0].read_text()

    def test_unwritable_target(self, tmp_path):
        (tmp_path / "tests").write_text("not a directory")
        with pytest.raises(FileAccessError):
            TestStubGenerator(tmp_path).generate([_missing("BillingService")])
