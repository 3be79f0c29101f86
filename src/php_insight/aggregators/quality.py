"""Duplication, naming, structure, performance and security aggregators."""

from __future__ import annotations

import re

from ..config import AnalysisConfig
from ..grading import DUPLICATION, NAMING, PERFORMANCE, SECURITY, STRUCTURE
from ..models import Category, CategoryResult, CodebaseFacts, Finding, Priority, UnitKind
from .base import Aggregator

PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")

# Each duplicate group counts for half a percentage point
DUPLICATE_GROUP_WEIGHT = 0.5


class DuplicationAggregator(Aggregator):
    name = "duplication"
    category = Category.DUPLICATION

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        for group in facts.duplicates:
            file, line = group.occurrences[0]
            findings.append(
                Finding(
                    category=self.category,
                    kind="duplicate_block",
                    file=file,
                    line=line,
                    description=(
                        f"Duplicate {config.duplicate_window}-line block found "
                        f"{len(group.occurrences)} times"
                    ),
                    subject=group.preview,
                    payload={
                        "hash": group.digest,
                        "count": len(group.occurrences),
                        "occurrences": [{"file": f, "line": n} for f, n in group.occurrences],
                    },
                )
            )
        pct = min(100.0, len(facts.duplicates) * DUPLICATE_GROUP_WEIGHT)
        return CategoryResult.graded(
            self.name,
            self.category,
            DUPLICATION,
            score=pct,
            total=len(facts.duplicates),
            findings=findings,
            percentage=pct,
            details={"duplicate_groups": len(facts.duplicates)},
        )


class NamingAggregator(Aggregator):
    """PascalCase type names, camelCase methods and properties."""

    name = "naming"
    category = Category.NAMING

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        checked = 0

        def violation(file: str, line: int, what: str, name: str, convention: str) -> Finding:
            return Finding(
                category=self.category,
                kind="naming_violation",
                file=file,
                line=line,
                description=f"{what.capitalize()} name {name} is not {convention}",
                subject=name,
                severity=Priority.LOW,
                payload={"type": what, "convention": convention},
            )

        for unit in facts.units:
            checked += 1
            what = "class" if unit.is_class else unit.kind.value
            if not PASCAL_CASE.match(unit.name):
                findings.append(violation(unit.file, unit.start_line, what, unit.name, "PascalCase"))
            for method in unit.methods:
                # __construct, __get and friends are named by the language
                if method.is_magic:
                    continue
                checked += 1
                if not CAMEL_CASE.match(method.name):
                    findings.append(violation(unit.file, method.start_line, "method", method.name, "camelCase"))
            for prop in unit.properties:
                checked += 1
                if not CAMEL_CASE.match(prop.name):
                    findings.append(violation(unit.file, prop.start_line, "property", prop.name, "camelCase"))

        return CategoryResult.graded(
            self.name,
            self.category,
            NAMING,
            score=len(findings),
            total=checked,
            findings=findings,
        )


class StructureAggregator(Aggregator):
    """Missing interfaces, missing traits and over-injected constructors.

    The three conditions are independent: one class can produce all three.
    """

    name = "structure"
    category = Category.STRUCTURE

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        for unit in facts.classes:
            if unit.kind is UnitKind.CLASS and not unit.interfaces:
                findings.append(
                    Finding(
                        category=self.category,
                        kind="missing_interface",
                        file=unit.file,
                        line=unit.start_line,
                        description=f"Class {unit.name} does not implement any interfaces",
                        subject=unit.name,
                        severity=Priority.LOW,
                    )
                )
            if not unit.traits:
                findings.append(
                    Finding(
                        category=self.category,
                        kind="missing_traits",
                        file=unit.file,
                        line=unit.start_line,
                        description=f"Class {unit.name} does not use any traits",
                        subject=unit.name,
                        severity=Priority.LOW,
                    )
                )
            ctor = unit.constructor
            if ctor is not None and ctor.parameter_count > config.max_parameters:
                findings.append(
                    Finding(
                        category=self.category,
                        kind="too_many_dependencies",
                        file=unit.file,
                        line=ctor.start_line,
                        description=(
                            f"Class {unit.name} has too many constructor dependencies "
                            f"({ctor.parameter_count})"
                        ),
                        subject=unit.name,
                        payload={"dependencies": [p.type_hint or p.name for p in ctor.parameters]},
                    )
                )
        return CategoryResult.graded(
            self.name,
            self.category,
            STRUCTURE,
            score=len(findings),
            total=len(facts.classes),
            findings=findings,
        )


class _PatternAggregator(Aggregator):
    """Counts catalogue matches recorded by the extractor."""

    attribute = ""
    severity = Priority.MEDIUM
    scale = PERFORMANCE

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        findings = []
        by_kind: dict[str, int] = {}
        for file_facts in facts.source_files:
            for match in getattr(file_facts, self.attribute):
                by_kind[match.kind] = by_kind.get(match.kind, 0) + 1
                findings.append(
                    Finding(
                        category=self.category,
                        kind=match.kind,
                        file=file_facts.path,
                        line=match.line,
                        description=match.description,
                        subject=match.snippet,
                        severity=self.severity,
                        payload={"pattern": match.snippet},
                    )
                )
        return CategoryResult.graded(
            self.name,
            self.category,
            self.scale,
            score=len(findings),
            total=len(facts.source_files),
            findings=findings,
            details=by_kind,
        )


class PerformanceAggregator(_PatternAggregator):
    name = "performance"
    category = Category.PERFORMANCE
    attribute = "performance"
    scale = PERFORMANCE


class SecurityAggregator(_PatternAggregator):
    name = "security"
    category = Category.SECURITY
    attribute = "security"
    severity = Priority.HIGH
    scale = SECURITY
