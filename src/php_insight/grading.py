"""Letter grades from numeric scores.

Every category is graded by the same function: an ordered list of
(threshold, grade) bands is evaluated top-down and the first band the score
satisfies wins. Lower-is-better scales compare with ``<=``, higher-is-better
scales with ``>=``.

Example:
    >>> grade(10.0, COMPLEXITY)
    'A'
    >>> grade(10.01, COMPLEXITY)
    'B'
    >>> grade(90.0, PERCENTAGE)
    'A'
"""

from dataclasses import dataclass

GRADES = ("A+", "A", "B", "C", "D", "F")

GRADE_COLORS = {
    "A+": "green",
    "A": "cyan",
    "B": "yellow",
    "C": "magenta",
    "D": "red",
    "F": "red",
}


@dataclass(frozen=True)
class GradeScale:
    """Ordered (threshold, grade) bands plus the grade when no band matches."""

    bands: tuple[tuple[float, str], ...]
    fallback: str
    higher_is_better: bool = False

    def __post_init__(self) -> None:
        thresholds = [threshold for threshold, _ in self.bands]
        expected = sorted(thresholds, reverse=self.higher_is_better)
        if thresholds != expected:
            raise ValueError("Grade bands must be ordered from best to worst")
        for _, label in self.bands:
            if label not in GRADES:
                raise ValueError(f"Unknown grade: {label!r}")
        if self.fallback not in GRADES:
            raise ValueError(f"Unknown grade: {self.fallback!r}")


def grade(score: float, scale: GradeScale) -> str:
    """Map a score to a letter grade using ``scale``."""
    for threshold, label in scale.bands:
        if scale.higher_is_better:
            if score >= threshold:
                return label
        elif score <= threshold:
            return label
    return scale.fallback


def grade_color(label: str) -> str:
    return GRADE_COLORS.get(label, "white")


# Average cyclomatic complexity per method
COMPLEXITY = GradeScale(((5, "A+"), (10, "A"), (15, "B"), (20, "C")), "D")

# Average lines per class
MAINTAINABILITY = GradeScale(((100, "A+"), (200, "A"), (300, "B"), (500, "C")), "D")

# Duplicate groups x 0.5
DUPLICATION = GradeScale(((1, "A+"), (3, "A"), (5, "B"), (10, "C")), "D")

# Documentation and test coverage percentages
PERCENTAGE = GradeScale(
    ((95, "A+"), (90, "A"), (80, "B"), (70, "C"), (60, "D")), "F", higher_is_better=True
)

# Issue counts
NAMING = GradeScale(((0, "A+"), (5, "A"), (10, "B"), (20, "C")), "D")
STRUCTURE = GradeScale(((0, "A+"), (3, "A"), (7, "B"), (15, "C")), "D")
PERFORMANCE = GradeScale(((0, "A+"), (2, "A"), (5, "B"), (10, "C")), "D")
SECURITY = GradeScale(((0, "A+"), (1, "A"), (3, "B"), (7, "C")), "D")

# Complexity-reduction issue counts
COMPLEX_METHODS = GradeScale(((0, "A+"), (2, "A"), (5, "B"), (10, "C"), (20, "D")), "F")
LARGE_CLASSES = GradeScale(((0, "A+"), (1, "A"), (3, "B"), (7, "C"), (15, "D")), "F")
DEEP_NESTING = LARGE_CLASSES
PARAMETER_LISTS = COMPLEX_METHODS
CODE_SMELLS = GradeScale(((0, "A+"), (5, "A"), (15, "B"), (30, "C"), (60, "D")), "F")

# Test quality and test performance issue counts
TEST_QUALITY = COMPLEX_METHODS
