"""Complexity and size aggregators.

``complexity`` and ``maintainability`` feed the overall quality report; the
remaining aggregators make up the complexity-reduction report.
"""

from __future__ import annotations

from ..config import AnalysisConfig
from ..grading import (
    CODE_SMELLS,
    COMPLEX_METHODS,
    COMPLEXITY,
    DEEP_NESTING,
    LARGE_CLASSES,
    MAINTAINABILITY,
    PARAMETER_LISTS,
)
from ..models import Category, CategoryResult, CodebaseFacts, Finding, MemberFact, Priority, SourceUnit
from .base import Aggregator, average


def _implemented_methods(facts: CodebaseFacts) -> list[tuple[SourceUnit, MemberFact]]:
    """Every method with a body, across classes and traits."""
    return [
        (unit, method)
        for unit in facts.units
        for method in unit.methods
        if not method.is_abstract
    ]


def _complex_method(unit: SourceUnit, method: MemberFact) -> Finding:
    return Finding(
        category=Category.COMPLEXITY,
        kind="complex_method",
        file=unit.file,
        line=method.start_line,
        description=f"Method {unit.name}::{method.name} has cyclomatic complexity {method.complexity}",
        subject=f"{unit.name}::{method.name}",
        severity=Priority.HIGH,
        payload={"class": unit.name, "method": method.name, "complexity": method.complexity},
    )


def _large_class(unit: SourceUnit, reason: str) -> Finding:
    return Finding(
        category=Category.MAINTAINABILITY,
        kind="large_class",
        file=unit.file,
        line=unit.start_line,
        description=f"Class {unit.name} {reason}",
        subject=unit.name,
        severity=Priority.HIGH,
        payload={"class": unit.name, "lines": unit.line_count, "methods": len(unit.methods)},
    )


class ComplexityAggregator(Aggregator):
    """Average cyclomatic complexity of public and protected class methods."""

    name = "complexity"
    category = Category.COMPLEXITY

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        methods = [(unit, m) for unit in facts.classes for m in unit.public_methods]
        values = [m.complexity for _, m in methods]
        avg = average(values)
        findings = [
            _complex_method(unit, m)
            for unit, m in methods
            if m.complexity > config.complex_method_threshold
        ]
        return CategoryResult.graded(
            self.name,
            self.category,
            COMPLEXITY,
            score=avg,
            total=len(methods),
            findings=findings,
            details={
                "average_complexity": avg,
                "max_complexity": max(values, default=0),
                "methods_analyzed": len(methods),
                "high_complexity_methods": len(findings),
            },
        )


class MaintainabilityAggregator(Aggregator):
    """Average class length in lines."""

    name = "maintainability"
    category = Category.MAINTAINABILITY

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        classes = facts.classes
        avg = average([unit.line_count for unit in classes])
        findings = [
            _large_class(unit, f"has {unit.line_count} lines")
            for unit in classes
            if unit.line_count > config.large_class_lines
        ]
        return CategoryResult.graded(
            self.name,
            self.category,
            MAINTAINABILITY,
            score=avg,
            total=len(classes),
            findings=findings,
            details={"average_class_lines": avg, "large_classes": len(findings)},
        )


class ComplexMethodsAggregator(Aggregator):
    name = "complex_methods"
    category = Category.COMPLEXITY

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        methods = _implemented_methods(facts)
        findings = [
            _complex_method(unit, m)
            for unit, m in methods
            if m.complexity > config.complex_method_threshold
        ]
        return CategoryResult.graded(
            self.name,
            self.category,
            COMPLEX_METHODS,
            score=len(findings),
            total=len(methods),
            findings=findings,
            details={"threshold": config.complex_method_threshold},
        )


class LargeClassesAggregator(Aggregator):
    name = "large_classes"
    category = Category.MAINTAINABILITY

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        for unit in facts.classes:
            reasons = []
            if len(unit.methods) > config.large_class_methods:
                reasons.append(f"{len(unit.methods)} methods")
            if unit.line_count > config.large_class_lines:
                reasons.append(f"{unit.line_count} lines")
            if reasons:
                findings.append(_large_class(unit, "has " + " and ".join(reasons)))
        return CategoryResult.graded(
            self.name,
            self.category,
            LARGE_CLASSES,
            score=len(findings),
            total=len(facts.classes),
            findings=findings,
            details={
                "max_methods": config.large_class_methods,
                "max_lines": config.large_class_lines,
            },
        )


class DeepNestingAggregator(Aggregator):
    name = "deep_nesting"
    category = Category.COMPLEXITY

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        methods = _implemented_methods(facts)
        findings = [
            Finding(
                category=self.category,
                kind="deep_nesting",
                file=unit.file,
                line=m.start_line,
                description=f"Method {unit.name}::{m.name} nests {m.max_nesting} levels deep",
                subject=f"{unit.name}::{m.name}",
                payload={"class": unit.name, "method": m.name, "nesting": m.max_nesting},
            )
            for unit, m in methods
            if m.max_nesting > config.max_nesting
        ]
        return CategoryResult.graded(
            self.name,
            self.category,
            DEEP_NESTING,
            score=len(findings),
            total=len(methods),
            findings=findings,
            details={"max_nesting": config.max_nesting},
        )


class LongParameterListsAggregator(Aggregator):
    name = "long_parameter_lists"
    category = Category.STRUCTURE

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        methods = [(unit, m) for unit in facts.units for m in unit.methods]
        findings = [
            Finding(
                category=self.category,
                kind="long_parameter_list",
                file=unit.file,
                line=m.start_line,
                description=f"Method {unit.name}::{m.name} takes {m.parameter_count} parameters",
                subject=m.name,
                payload={
                    "class": unit.name,
                    "method": m.name,
                    "parameters": [p.name for p in m.parameters],
                },
            )
            for unit, m in methods
            if m.parameter_count > config.max_parameters
        ]
        return CategoryResult.graded(
            self.name,
            self.category,
            PARAMETER_LISTS,
            score=len(findings),
            total=len(methods),
            findings=findings,
            details={"max_parameters": config.max_parameters},
        )


class CodeSmellsAggregator(Aggregator):
    """Magic numbers, long lines and commented-out code."""

    name = "code_smells"
    category = Category.MAINTAINABILITY

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        counts: dict[str, int] = {"magic_number": 0, "long_line": 0, "commented_code": 0}
        for file_facts in facts.source_files:
            for smell in file_facts.smells:
                counts[smell.kind] = counts.get(smell.kind, 0) + 1
                findings.append(
                    Finding(
                        category=self.category,
                        kind=smell.kind,
                        file=file_facts.path,
                        line=smell.line,
                        description=smell.description,
                        subject=smell.snippet,
                        severity=Priority.LOW,
                    )
                )
        return CategoryResult.graded(
            self.name,
            self.category,
            CODE_SMELLS,
            score=len(findings),
            total=len(facts.source_files),
            findings=findings,
            details=counts,
        )
