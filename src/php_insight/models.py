"""Data models for PHP Insight.

Facts (SourceUnit, MemberFact, FileFacts) are produced by the scanning layer,
results (Finding, CategoryResult, Recommendation, Report) by the aggregators.
Everything is frozen: a Report is assembled once through ReportBuilder and
never changed afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from .grading import GRADES, GradeScale, grade


class UnitKind(Enum):
    """Kind of a declared PHP type."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"
    ABSTRACT = "abstract"


class Category(Enum):
    """Metric category a finding or result belongs to."""

    COMPLEXITY = "complexity"
    MAINTAINABILITY = "maintainability"
    DUPLICATION = "duplication"
    DOCUMENTATION = "documentation"
    NAMING = "naming"
    STRUCTURE = "structure"
    PERFORMANCE = "performance"
    SECURITY = "security"
    TESTING = "testing"


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"high": 0, "medium": 1, "low": 2}[self.value]


# ---------------------------------------------------------------------------
# Facts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Parameter:
    name: str
    type_hint: str = ""
    has_default: bool = False


@dataclass(frozen=True)
class MemberFact:
    """One method or property belonging to a SourceUnit."""

    name: str
    kind: str  # "method" | "property"
    visibility: str  # "public" | "protected" | "private"
    start_line: int
    end_line: int
    has_docblock: bool = False
    parameters: tuple[Parameter, ...] = ()
    is_constructor: bool = False
    is_static: bool = False
    is_abstract: bool = False
    complexity: int = 1  # methods only
    max_nesting: int = 0  # methods only, body brace = 1
    return_type: str = ""
    doc_summary: str = ""

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    @property
    def is_method(self) -> bool:
        return self.kind == "method"

    @property
    def is_magic(self) -> bool:
        return self.name.startswith("__")

    @property
    def is_public_api(self) -> bool:
        """Public or protected, and not a constructor/destructor."""
        return (
            self.visibility in ("public", "protected")
            and self.name.lower() not in ("__construct", "__destruct")
        )


@dataclass(frozen=True)
class SourceUnit:
    """One discovered class, interface or trait."""

    name: str
    file: str  # path relative to the project root
    start_line: int
    end_line: int
    kind: UnitKind
    namespace: str = ""
    has_docblock: bool = False
    parent: Optional[str] = None
    interfaces: tuple[str, ...] = ()
    traits: tuple[str, ...] = ()
    methods: tuple[MemberFact, ...] = ()
    properties: tuple[MemberFact, ...] = ()
    doc_summary: str = ""

    @property
    def qualified_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}\\{self.name}"
        return self.name

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line

    @property
    def is_class(self) -> bool:
        """True for concrete and abstract classes."""
        return self.kind in (UnitKind.CLASS, UnitKind.ABSTRACT)

    @property
    def constructor(self) -> Optional[MemberFact]:
        for method in self.methods:
            if method.is_constructor:
                return method
        return None

    @property
    def constructor_parameter_count(self) -> int:
        ctor = self.constructor
        return ctor.parameter_count if ctor else 0

    @property
    def public_methods(self) -> tuple[MemberFact, ...]:
        """Public or protected methods other than the constructor/destructor."""
        return tuple(m for m in self.methods if m.is_public_api)

    @property
    def testable_methods(self) -> tuple[MemberFact, ...]:
        """Public, non-static, non-constructor methods."""
        return tuple(
            m
            for m in self.methods
            if m.visibility == "public" and not m.is_static and not m.is_constructor
        )


@dataclass(frozen=True)
class TextMatch:
    """A line-indexed hit of a textual heuristic."""

    kind: str  # "eval_usage", "long_line", "magic_number", ...
    line: int
    snippet: str
    description: str


@dataclass(frozen=True)
class FileFacts:
    """Everything extracted from one file."""

    path: str  # relative posix path
    text: str
    units: tuple[SourceUnit, ...] = ()
    parse_error: Optional[str] = None
    performance: tuple[TextMatch, ...] = ()
    security: tuple[TextMatch, ...] = ()
    smells: tuple[TextMatch, ...] = ()

    @property
    def lines(self) -> list[str]:
        from .scanning.lexer import split_lines

        return split_lines(self.text)


@dataclass(frozen=True)
class DuplicateGroup:
    """Two or more occurrences of one identical line window."""

    digest: str
    occurrences: tuple[tuple[str, int], ...]  # (file, 1-based start line)
    preview: str = ""


@dataclass(frozen=True)
class CodebaseFacts:
    """Output of one FactExtractor pass."""

    root: str
    source_files: tuple[FileFacts, ...] = ()
    test_files: tuple[FileFacts, ...] = ()
    duplicates: tuple[DuplicateGroup, ...] = ()

    @property
    def units(self) -> list[SourceUnit]:
        return [unit for facts in self.source_files for unit in facts.units]

    @property
    def classes(self) -> list[SourceUnit]:
        return [unit for unit in self.units if unit.is_class]

    @property
    def test_units(self) -> list[SourceUnit]:
        return [unit for facts in self.test_files for unit in facts.units]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding:
    """One detected issue instance."""

    category: Category
    kind: str  # "complex_method", "duplicate_block", "missing_test", ...
    file: str
    line: int
    description: str
    subject: str = ""  # class, Class::method or pattern the finding is about
    severity: Priority = Priority.MEDIUM
    payload: dict = field(default_factory=dict)

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file


@dataclass(frozen=True)
class CategoryResult:
    """Aggregate for one metric category."""

    name: str
    category: Category
    grade: str
    score: float
    total: int = 0
    findings: tuple[Finding, ...] = ()
    percentage: Optional[float] = None
    details: dict = field(default_factory=dict)
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.percentage is not None and not 0.0 <= self.percentage <= 100.0:
            raise ValueError(f"percentage must be between 0 and 100, got {self.percentage}")
        if self.grade not in GRADES:
            raise ValueError(f"Unknown grade: {self.grade!r}")

    @classmethod
    def graded(
        cls,
        name: str,
        category: Category,
        scale: GradeScale,
        score: float,
        total: int = 0,
        findings: Iterable[Finding] = (),
        percentage: Optional[float] = None,
        details: Optional[dict] = None,
    ) -> "CategoryResult":
        """Build a result whose grade is derived from ``score`` via ``scale``."""
        return cls(
            name=name,
            category=category,
            grade=grade(score, scale),
            score=score,
            total=total,
            findings=tuple(findings),
            percentage=percentage,
            details=details or {},
        )

    @classmethod
    def failed(cls, name: str, category: Category, error: str) -> "CategoryResult":
        return cls(name=name, category=category, grade="F", score=0.0, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def issue_count(self) -> int:
        return len(self.findings)


@dataclass(frozen=True)
class Recommendation:
    """A prioritized action derived from one Finding."""

    priority: Priority
    action: str
    description: str
    category: Category
    kind: str
    file: str = ""
    line: int = 0
    subject: str = ""
    template: Optional[str] = None  # doc-comment or code skeleton, if any

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file


@dataclass(frozen=True)
class Report:
    """The full output of one command invocation."""

    title: str
    timestamp: str
    results: tuple[CategoryResult, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()

    def __getitem__(self, name: str) -> CategoryResult:
        for result in self.results:
            if result.name == name:
                return result
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(result.name == name for result in self.results)

    def get(self, name: str) -> Optional[CategoryResult]:
        return self.categories.get(name)

    @property
    def categories(self) -> Mapping[str, CategoryResult]:
        return MappingProxyType({result.name: result for result in self.results})

    @property
    def findings(self) -> list[Finding]:
        return [finding for result in self.results for finding in result.findings]

    @property
    def failed(self) -> list[CategoryResult]:
        return [result for result in self.results if not result.ok]


class ReportBuilder:
    """Collects CategoryResults in order and produces an immutable Report."""

    def __init__(self, title: str, timestamp: Optional[str] = None):
        self.title = title
        self.timestamp = timestamp or datetime.now().isoformat(timespec="seconds")
        self._results: list[CategoryResult] = []
        self._recommendations: list[Recommendation] = []

    def add(self, result: CategoryResult) -> "ReportBuilder":
        if any(existing.name == result.name for existing in self._results):
            raise ValueError(f"Duplicate category result: {result.name}")
        self._results.append(result)
        return self

    def extend(self, results: Iterable[CategoryResult]) -> "ReportBuilder":
        for result in results:
            self.add(result)
        return self

    def with_recommendations(self, recommendations: Iterable[Recommendation]) -> "ReportBuilder":
        self._recommendations.extend(recommendations)
        return self

    @property
    def results(self) -> tuple[CategoryResult, ...]:
        return tuple(self._results)

    def build(self) -> Report:
        return Report(
            title=self.title,
            timestamp=self.timestamp,
            results=tuple(self._results),
            recommendations=tuple(self._recommendations),
        )
