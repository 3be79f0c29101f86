"""Test coverage and test-suite health aggregators.

Coverage is measured purely by naming convention: class ``Foo`` counts as
tested when some file under the test roots declares a class named exactly
``FooTest``. No line or branch coverage is collected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..config import AnalysisConfig
from ..grading import PERCENTAGE, TEST_QUALITY
from ..models import Category, CategoryResult, CodebaseFacts, FileFacts, Finding, SourceUnit
from ..recommendations import class_type, missing_test_priority
from .base import Aggregator, percentage

_TEST_CLASS = re.compile(r"\bclass\s+(\w+Test)\b")
_TEST_METHOD = re.compile(r"\bpublic\s+function\s+test(\w+)\s*\(")
_ASSERTION = re.compile(r"\bassert\w*\s*\(", re.IGNORECASE)
_TEST_NAME = re.compile(r"^[A-Z][a-zA-Z0-9]*$")

SLOW_OPERATIONS = {
    "database": (re.compile(r"DB::"),),
    "file_operations": (re.compile(r"File::"), re.compile(r"\bfile_\w+\s*\(")),
    "network": (re.compile(r"Http::"), re.compile(r"\bcurl_?\w*\s*\(")),
}
_FOR_LOOP = re.compile(r"\bfor\s*\(")
_FOREACH_LOOP = re.compile(r"\bforeach\s*\(")

# Minimum counts before the test suite shape is considered healthy
PATTERN_EXPECTATIONS = (
    ("unit", 5, 20, "Fewer than 5 unit tests"),
    ("integration", 2, 15, "Fewer than 2 integration tests"),
    ("feature", 2, 15, "Fewer than 2 feature tests"),
    ("mocking", 3, 10, "Fewer than 3 test files use mocking"),
)


def tested_class_names(facts: CodebaseFacts) -> set[str]:
    """Names of classes that have a ``<Name>Test`` class in the test roots."""
    names = set()
    for test_file in facts.test_files:
        for match in _TEST_CLASS.finditer(test_file.text):
            names.add(match.group(1)[: -len("Test")])
    return names


@dataclass
class CoverageSummary:
    total: int = 0
    untested: list[SourceUnit] = field(default_factory=list)
    by_type: dict[str, dict] = field(default_factory=dict)

    @property
    def percentage(self) -> float:
        return percentage(self.total - len(self.untested), self.total)


def coverage_summary(facts: CodebaseFacts) -> CoverageSummary:
    tested = tested_class_names(facts)
    summary = CoverageSummary()
    for unit in facts.classes:
        summary.total += 1
        kind = class_type(unit.name)
        bucket = summary.by_type.setdefault(kind, {"total": 0, "tested": 0})
        bucket["total"] += 1
        if unit.name in tested:
            bucket["tested"] += 1
        else:
            summary.untested.append(unit)
    for bucket in summary.by_type.values():
        bucket["percentage"] = percentage(bucket["tested"], bucket["total"])
    return summary


def missing_test_finding(unit: SourceUnit) -> Finding:
    test_class = f"{unit.name}Test"
    return Finding(
        category=Category.TESTING,
        kind="missing_test",
        file=unit.file,
        line=unit.start_line,
        description=f"No {test_class} found for {unit.name}",
        subject=unit.name,
        severity=missing_test_priority(unit.name),
        payload={
            "class": unit.name,
            "namespace": unit.namespace,
            "class_type": class_type(unit.name),
            "test_class": test_class,
            "test_path": f"tests/Unit/{test_class}.php",
            "methods": [m.name for m in unit.testable_methods],
            "public_methods": [m.name for m in unit.public_methods],
        },
    )


class TestingAggregator(Aggregator):
    """Naming-convention test coverage for the overall quality report."""

    __test__ = False
    name = "testing"
    category = Category.TESTING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        summary = coverage_summary(facts)
        pct = summary.percentage
        return CategoryResult.graded(
            self.name,
            self.category,
            PERCENTAGE,
            score=pct,
            total=summary.total,
            findings=[missing_test_finding(unit) for unit in summary.untested],
            percentage=pct,
            details={
                "total_classes": summary.total,
                "tested_classes": summary.total - len(summary.untested),
            },
        )


class TestCoverageAggregator(Aggregator):
    """Coverage with a per-class-type breakdown; untested classes are
    reported by MissingTestsAggregator."""

    __test__ = False
    name = "test_coverage"
    category = Category.TESTING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        summary = coverage_summary(facts)
        pct = summary.percentage
        return CategoryResult.graded(
            self.name,
            self.category,
            PERCENTAGE,
            score=pct,
            total=summary.total,
            percentage=pct,
            details={
                "total_classes": summary.total,
                "tested_classes": summary.total - len(summary.untested),
                "untested_classes": [unit.name for unit in summary.untested],
                "coverage_by_type": summary.by_type,
            },
        )


class MissingTestsAggregator(Aggregator):
    name = "missing_tests"
    category = Category.TESTING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        summary = coverage_summary(facts)
        findings = [missing_test_finding(unit) for unit in summary.untested]
        priorities: dict[str, int] = {}
        for finding in findings:
            priorities[finding.severity.value] = priorities.get(finding.severity.value, 0) + 1
        return CategoryResult.graded(
            self.name,
            self.category,
            PERCENTAGE,
            score=summary.percentage,
            total=summary.total,
            findings=findings,
            percentage=summary.percentage,
            details={"by_priority": priorities},
        )


def _test_issue(test_file: FileFacts, kind: str, description: str, line: int = 0, **payload) -> Finding:
    return Finding(
        category=Category.TESTING,
        kind=kind,
        file=test_file.path,
        line=line,
        description=description,
        subject=test_file.path,
        payload=payload,
    )


def quality_issues(test_file: FileFacts) -> list[Finding]:
    """Structural problems of one test file."""
    text = test_file.text
    issues = []
    methods = list(_TEST_METHOD.finditer(text))
    if not methods:
        issues.append(_test_issue(test_file, "no_test_methods", "Test file has no test methods"))
    if not _ASSERTION.search(text):
        issues.append(_test_issue(test_file, "no_assertions", "Test file has no assertions"))
    for match in methods:
        if not _TEST_NAME.match(match.group(1)):
            name = f"test{match.group(1)}"
            issues.append(
                _test_issue(
                    test_file,
                    "poor_test_naming",
                    f"Test method {name} does not follow testDescriptiveName naming",
                    line=text.count("\n", 0, match.start()) + 1,
                    method=name,
                )
            )
    if "setUp(" not in text and "tearDown(" not in text:
        issues.append(
            _test_issue(test_file, "no_test_isolation", "Test file has no setUp() or tearDown()")
        )
    return issues


class TestQualityAggregator(Aggregator):
    __test__ = False
    name = "test_quality"
    category = Category.TESTING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = [issue for test_file in facts.test_files for issue in quality_issues(test_file)]
        return CategoryResult.graded(
            self.name,
            self.category,
            TEST_QUALITY,
            score=len(findings),
            total=len(facts.test_files),
            findings=findings,
        )


def classify_test_file(test_file: FileFacts) -> str:
    """Classify a test file as unit, integration, feature or other."""
    path = "/" + test_file.path
    names = " ".join(match.group(1) for match in _TEST_CLASS.finditer(test_file.text))
    for label, segment in (("unit", "/Unit/"), ("integration", "/Integration/"), ("feature", "/Feature/")):
        if segment in path or segment.strip("/") in names:
            return label
    return "other"


def count_test_patterns(facts: CodebaseFacts) -> dict[str, int]:
    counts = {
        "unit": 0,
        "integration": 0,
        "feature": 0,
        "mocking": 0,
        "data_providers": 0,
        "assertions": 0,
    }
    for test_file in facts.test_files:
        label = classify_test_file(test_file)
        if label in counts:
            counts[label] += 1
        text = test_file.text
        if "Mockery" in text or "mock(" in text:
            counts["mocking"] += 1
        counts["data_providers"] += text.count("@dataProvider") + text.count("#[DataProvider")
        counts["assertions"] += len(_ASSERTION.findall(text))
    return counts


class TestPatternsAggregator(Aggregator):
    """Shape of the test suite: unit/integration/feature mix and mocking."""

    __test__ = False
    name = "test_patterns"
    category = Category.TESTING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        counts = count_test_patterns(facts)
        score = 100
        findings = []
        for key, minimum, penalty, description in PATTERN_EXPECTATIONS:
            if counts[key] < minimum:
                score -= penalty
                findings.append(
                    Finding(
                        category=self.category,
                        kind="test_pattern_gap",
                        file="tests",
                        line=0,
                        description=description,
                        subject=key,
                        payload={"count": counts[key], "expected": minimum},
                    )
                )
        return CategoryResult.graded(
            self.name,
            self.category,
            PERCENTAGE,
            score=score,
            total=len(facts.test_files),
            findings=findings,
            percentage=float(score),
            details=counts,
        )


def slow_operations(text: str) -> list[str]:
    found = [
        label
        for label, patterns in SLOW_OPERATIONS.items()
        if any(pattern.search(text) for pattern in patterns)
    ]
    if _FOR_LOOP.search(text) and _FOREACH_LOOP.search(text):
        found.append("heavy_computation")
    return found


class TestPerformanceAggregator(Aggregator):
    __test__ = False
    name = "test_performance"
    category = Category.TESTING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        for test_file in facts.test_files:
            operations = slow_operations(test_file.text)
            if len(operations) > 2:
                findings.append(
                    _test_issue(
                        test_file,
                        "slow_test",
                        f"Test performs {len(operations)} kinds of slow operations",
                        operations=operations,
                    )
                )
            if operations and "Mockery" not in test_file.text:
                findings.append(
                    _test_issue(
                        test_file,
                        "missing_mocking",
                        f"Slow operations without mocking: {', '.join(operations)}",
                        operations=operations,
                    )
                )
        return CategoryResult.graded(
            self.name,
            self.category,
            TEST_QUALITY,
            score=len(findings),
            total=len(facts.test_files),
            findings=findings,
        )
