"""Metric aggregators and the ordered suites each command runs."""

from .base import Aggregator, average, percentage, run_aggregators
from .complexity import (
    CodeSmellsAggregator,
    ComplexityAggregator,
    ComplexMethodsAggregator,
    DeepNestingAggregator,
    LargeClassesAggregator,
    LongParameterListsAggregator,
    MaintainabilityAggregator,
)
from .documentation import DocumentationAggregator, KindDocumentationAggregator, documentation_coverage
from .quality import (
    DuplicationAggregator,
    NamingAggregator,
    PerformanceAggregator,
    SecurityAggregator,
    StructureAggregator,
)
from .testing import (
    MissingTestsAggregator,
    TestCoverageAggregator,
    TestingAggregator,
    TestPatternsAggregator,
    TestPerformanceAggregator,
    TestQualityAggregator,
    coverage_summary,
)


def quality_suite() -> list[Aggregator]:
    return [
        ComplexityAggregator(),
        MaintainabilityAggregator(),
        DuplicationAggregator(),
        DocumentationAggregator(),
        NamingAggregator(),
        StructureAggregator(),
        PerformanceAggregator(),
        SecurityAggregator(),
        TestingAggregator(),
    ]


def reduction_suite() -> list[Aggregator]:
    return [
        ComplexMethodsAggregator(),
        LargeClassesAggregator(),
        DeepNestingAggregator(),
        LongParameterListsAggregator(),
        CodeSmellsAggregator(),
    ]


def documentation_suite() -> list[Aggregator]:
    return [
        KindDocumentationAggregator(label)
        for label in ("class", "method", "property", "interface", "trait")
    ]


def testing_suite() -> list[Aggregator]:
    return [
        TestCoverageAggregator(),
        TestQualityAggregator(),
        MissingTestsAggregator(),
        TestPatternsAggregator(),
        TestPerformanceAggregator(),
    ]


# suite name -> (report title, factory)
SUITES = {
    "quality": ("Code Quality Report", quality_suite),
    "complexity": ("Complexity Reduction Report", reduction_suite),
    "documentation": ("Documentation Enhancement Report", documentation_suite),
    "testing": ("Testing Analysis Report", testing_suite),
}


def get_suite(name: str) -> tuple[str, list[Aggregator]]:
    """Report title and fresh aggregator instances for a suite.

    Raises:
        ValueError: If name is not recognized
    """
    entry = SUITES.get(name)
    if entry is None:
        raise ValueError(f"Unknown suite: {name!r}. Choose from: {', '.join(sorted(SUITES))}")
    title, factory = entry
    return title, factory()


__all__ = [
    "Aggregator",
    "average",
    "percentage",
    "run_aggregators",
    "documentation_coverage",
    "coverage_summary",
    "ComplexityAggregator",
    "MaintainabilityAggregator",
    "DuplicationAggregator",
    "DocumentationAggregator",
    "NamingAggregator",
    "StructureAggregator",
    "PerformanceAggregator",
    "SecurityAggregator",
    "TestingAggregator",
    "ComplexMethodsAggregator",
    "LargeClassesAggregator",
    "DeepNestingAggregator",
    "LongParameterListsAggregator",
    "CodeSmellsAggregator",
    "KindDocumentationAggregator",
    "TestCoverageAggregator",
    "TestQualityAggregator",
    "MissingTestsAggregator",
    "TestPatternsAggregator",
    "TestPerformanceAggregator",
    "SUITES",
    "get_suite",
    "quality_suite",
    "reduction_suite",
    "documentation_suite",
    "testing_suite",
]
