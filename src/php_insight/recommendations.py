"""Turn findings into prioritized, human-readable action items.

Priority is a pure function of the finding's category, kind and subject.
Every finding yields exactly one recommendation; nothing is merged across
categories, so one location can carry several independent actions.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from .logging_config import get_logger
from .models import Category, CategoryResult, Finding, Priority, Recommendation

logger = get_logger(__name__)

QUALITY_ISSUE_ACTIONS = {
    "no_test_methods": "Add test methods to the class",
    "no_assertions": "Add assertions to test methods",
    "poor_test_naming": "Rename test methods to testDescriptiveName form",
    "no_test_isolation": "Add setUp() and tearDown() methods",
}

TEST_PERFORMANCE_ACTIONS = {
    "slow_test": "Optimize slow operations or add mocking",
    "missing_mocking": "Add proper mocking for slow operations",
}

_STRUCTURE_ACTIONS = {
    "missing_interface": "Extract an interface for {subject}",
    "missing_traits": "Consider sharing behaviour of {subject} through traits",
}


def class_type(class_name: str) -> str:
    """Coarse role of a class, derived from its name."""
    for marker in ("Controller", "Service", "Repository", "Model"):
        if marker in class_name:
            return marker
    return "Class"


def missing_test_priority(class_name: str) -> Priority:
    if "Controller" in class_name or "Service" in class_name:
        return Priority.HIGH
    if "Repository" in class_name:
        return Priority.MEDIUM
    if "Model" in class_name:
        return Priority.LOW
    return Priority.MEDIUM


def priority_for(finding: Finding) -> Priority:
    """Priority of the recommendation generated for ``finding``."""
    kind = finding.kind
    if kind == "missing_test":
        return missing_test_priority(finding.subject)
    if kind in QUALITY_ISSUE_ACTIONS or kind in TEST_PERFORMANCE_ACTIONS:
        return Priority.MEDIUM
    if finding.category is Category.PERFORMANCE:
        return Priority.MEDIUM
    if kind in ("complex_method", "large_class"):
        return Priority.HIGH
    if kind in ("deep_nesting", "long_parameter_list", "too_many_dependencies", "duplicate_block"):
        return Priority.MEDIUM
    if kind == "undocumented_class":
        return Priority.HIGH
    if kind in ("undocumented_method", "undocumented_interface", "undocumented_trait"):
        return Priority.MEDIUM
    if finding.category is Category.SECURITY:
        return Priority.HIGH
    return Priority.LOW


# ---------------------------------------------------------------------------
# Doc-comment templates
# ---------------------------------------------------------------------------


def class_doc_template(name: str) -> str:
    return "\n".join(
        [
            "/**",
            f" * {name}",
            " *",
            f" * Describe the responsibility of {name}.",
            " */",
        ]
    )


def method_doc_template(name: str, parameters: Iterable[tuple[str, str]] = (), return_type: str = "") -> str:
    lines = ["/**", f" * {name}", " *"]
    for type_hint, param in parameters:
        lines.append(f" * @param {type_hint or 'mixed'} ${param}")
    lines.append(f" * @return {return_type or 'mixed'}")
    lines.append(" */")
    return "\n".join(lines)


def property_doc_template(type_hint: str = "") -> str:
    return f"/** @var {type_hint or 'mixed'} */"


def _doc_template(finding: Finding) -> Optional[str]:
    payload = finding.payload
    name = payload.get("name", finding.subject)
    if finding.kind in ("undocumented_class", "undocumented_interface", "undocumented_trait"):
        return class_doc_template(name)
    if finding.kind == "undocumented_method":
        return method_doc_template(
            name,
            [tuple(param) for param in payload.get("parameters", [])],
            payload.get("return_type", ""),
        )
    if finding.kind == "undocumented_property":
        return property_doc_template(payload.get("type", ""))
    return None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def _recommend(finding: Finding, priority: Priority) -> Recommendation:
    kind = finding.kind
    subject = finding.subject
    template = None

    if kind == "missing_test":
        rec_kind = "missing_test"
        action = f"Create {subject}Test"
        description = f"{finding.payload.get('class_type', 'Class')} {subject} has no test class"
    elif kind in QUALITY_ISSUE_ACTIONS:
        rec_kind = "quality_issue"
        action = QUALITY_ISSUE_ACTIONS[kind]
        description = finding.description
    elif kind in TEST_PERFORMANCE_ACTIONS:
        rec_kind = "performance_issue"
        action = TEST_PERFORMANCE_ACTIONS[kind]
        description = finding.description
    elif finding.category is Category.PERFORMANCE:
        rec_kind = "performance_issue"
        action = finding.description
        description = f"{finding.kind} at {finding.location}"
    elif kind == "complex_method":
        rec_kind = "extract_method"
        action = f"Extract method from {subject}"
        description = finding.description
    elif kind == "duplicate_block":
        rec_kind = "extract_method"
        action = "Extract duplicated block into a shared method"
        description = finding.description
    elif kind == "large_class":
        rec_kind = "extract_class"
        action = f"Extract class from {subject}"
        description = finding.description
    elif kind == "deep_nesting":
        rec_kind = "reduce_nesting"
        action = f"Reduce nesting in {subject} with early returns"
        description = finding.description
    elif kind in ("long_parameter_list", "too_many_dependencies"):
        rec_kind = "parameter_object"
        action = f"Use parameter object for {subject}"
        description = finding.description
    elif kind.startswith("undocumented_"):
        documented = kind[len("undocumented_"):]
        rec_kind = f"{documented}_documentation"
        action = f"Add documentation to {documented} {subject}"
        description = finding.description
        template = _doc_template(finding)
    elif finding.category is Category.SECURITY:
        rec_kind = "security_fix"
        action = finding.description
        description = f"{finding.kind} at {finding.location}"
    elif kind in _STRUCTURE_ACTIONS:
        rec_kind = "structure"
        action = _STRUCTURE_ACTIONS[kind].format(subject=subject)
        description = finding.description
    else:
        rec_kind = finding.category.value
        action = finding.description
        description = finding.description

    return Recommendation(
        priority=priority,
        action=action,
        description=description,
        category=finding.category,
        kind=rec_kind,
        file=finding.file,
        line=finding.line,
        subject=subject,
        template=template,
    )


class RecommendationEngine:
    """Converts every finding of every result into one Recommendation."""

    def __init__(self, prioritize: Callable[[Finding], Priority] = priority_for):
        self.prioritize = prioritize

    def recommend(self, results: Iterable[CategoryResult]) -> list[Recommendation]:
        recommendations = []
        for result in results:
            for finding in result.findings:
                recommendations.append(_recommend(finding, self.prioritize(finding)))
        return recommendations


def sort_by_priority(recommendations: Iterable[Recommendation]) -> list[Recommendation]:
    """Stable sort: high first, original order preserved within a priority."""
    return sorted(recommendations, key=lambda rec: rec.priority.rank)


def log_remediation_intents(
    recommendations: Iterable[Recommendation], log: Optional[logging.Logger] = None
) -> int:
    """Log what a fix run would change, without touching any file.

    Only high-priority recommendations are considered.

    Returns:
        Number of intents logged
    """
    log = log or logger
    count = 0
    for rec in recommendations:
        if rec.priority is not Priority.HIGH:
            continue
        log.info(f"Would apply {rec.kind}: {rec.action} ({rec.location or 'project'})")
        count += 1
    return count
