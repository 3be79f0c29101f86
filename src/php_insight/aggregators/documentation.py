"""Doc-comment coverage aggregators."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AnalysisConfig
from ..grading import PERCENTAGE
from ..models import (
    Category,
    CategoryResult,
    CodebaseFacts,
    Finding,
    MemberFact,
    Priority,
    SourceUnit,
    UnitKind,
)
from .base import Aggregator, percentage


@dataclass
class Coverage:
    documented: int = 0
    findings: list[Finding] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.documented + len(self.findings)

    @property
    def percentage(self) -> float:
        return percentage(self.documented, self.total)


def _unit_finding(unit: SourceUnit, label: str) -> Finding:
    return Finding(
        category=Category.DOCUMENTATION,
        kind=f"undocumented_{label}",
        file=unit.file,
        line=unit.start_line,
        description=f"{label.capitalize()} {unit.name} has no doc-comment",
        subject=unit.name,
        severity=Priority.HIGH if label == "class" else Priority.MEDIUM,
        payload={"name": unit.name},
    )


def _member_finding(unit: SourceUnit, member: MemberFact) -> Finding:
    if member.is_method:
        payload = {
            "name": member.name,
            "class": unit.name,
            "parameters": [(p.type_hint, p.name) for p in member.parameters],
            "return_type": member.return_type,
        }
        subject = f"{unit.name}::{member.name}"
        severity = Priority.MEDIUM
    else:
        payload = {"name": member.name, "class": unit.name, "type": member.return_type}
        subject = f"{unit.name}::${member.name}"
        severity = Priority.LOW
    return Finding(
        category=Category.DOCUMENTATION,
        kind=f"undocumented_{member.kind}",
        file=unit.file,
        line=member.start_line,
        description=f"{member.kind.capitalize()} {subject} has no doc-comment",
        subject=subject,
        severity=severity,
        payload=payload,
    )


def documentation_coverage(facts: CodebaseFacts) -> dict[str, Coverage]:
    """Per-kind documented counts and undocumented findings.

    Methods are the public and protected ones, constructors excluded.
    """
    coverage = {label: Coverage() for label in ("class", "method", "property", "interface", "trait")}
    unit_labels = {
        UnitKind.CLASS: "class",
        UnitKind.ABSTRACT: "class",
        UnitKind.INTERFACE: "interface",
        UnitKind.TRAIT: "trait",
    }
    for unit in facts.units:
        bucket = coverage[unit_labels[unit.kind]]
        if unit.has_docblock:
            bucket.documented += 1
        else:
            bucket.findings.append(_unit_finding(unit, unit_labels[unit.kind]))

        for member in list(unit.public_methods) + list(unit.properties):
            bucket = coverage[member.kind]
            if member.has_docblock:
                bucket.documented += 1
            else:
                bucket.findings.append(_member_finding(unit, member))
    return coverage


class DocumentationAggregator(Aggregator):
    """Overall documentation grade, driven by class-level coverage."""

    name = "documentation"
    category = Category.DOCUMENTATION

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        coverage = documentation_coverage(facts)
        classes = coverage["class"]
        findings = [finding for bucket in coverage.values() for finding in bucket.findings]
        return CategoryResult.graded(
            self.name,
            self.category,
            PERCENTAGE,
            score=classes.percentage,
            total=classes.total,
            findings=findings,
            percentage=classes.percentage,
            details={
                f"{label}_percentage": bucket.percentage for label, bucket in coverage.items()
            },
        )


class KindDocumentationAggregator(Aggregator):
    """Documentation coverage of a single kind (class, method, ...)."""

    category = Category.DOCUMENTATION

    def __init__(self, label: str):
        self.label = label
        self.name = f"{label}_documentation"

    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        bucket = documentation_coverage(facts)[self.label]
        return CategoryResult.graded(
            self.name,
            self.category,
            PERCENTAGE,
            score=bucket.percentage,
            total=bucket.total,
            findings=bucket.findings,
            percentage=bucket.percentage,
            details={"documented": bucket.documented, "undocumented": len(bucket.findings)},
        )
