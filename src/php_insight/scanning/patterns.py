"""Line-oriented heuristics over PHP source text.

Each heuristic is a small named predicate so that it can be tested and tuned
on its own. None of them is an exact parse; they mirror the regular
expressions the analyzer has always used for these checks.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from ..models import TextMatch

# Cyclomatic complexity tokens (counted case-insensitively on masked text)
_BRANCH_TOKENS = re.compile(
    r"(?<![\w$>])(?:if|elseif|else|for|foreach|while|do|switch|case|catch)\b", re.IGNORECASE
)
_LOGICAL_TOKENS = re.compile(r"&&|\|\||(?<![\w$>])(?:and|or|xor)\b", re.IGNORECASE)

_MAGIC_NUMBER = r"(?<![\w.$])\d{{{digits},}}(?![\w.])"
_CONSTANT_DECLARATION = re.compile(r"\bconst\b|\bdefine\s*\(", re.IGNORECASE)
_COMMENT_LINE = re.compile(r"^\s*(?://|#(?!\[))\s*(?P<body>.*)$")
_CODE_ENDING = (";", "{", "}", ")")


@dataclass(frozen=True)
class RiskPattern:
    kind: str
    regex: re.Pattern
    description: str


PERFORMANCE_PATTERNS: tuple[RiskPattern, ...] = (
    RiskPattern(
        "array_merge_in_loop",
        re.compile(r"array_merge\s*\([^)]*\)"),
        "Avoid array_merge in loops",
    ),
    RiskPattern(
        "in_array_in_loop",
        re.compile(r"in_array\s*\([^)]*\)"),
        "Consider using array_flip for frequent lookups",
    ),
    RiskPattern(
        "array_search_in_loop",
        re.compile(r"array_search\s*\([^)]*\)"),
        "Consider using array_flip for frequent lookups",
    ),
    RiskPattern(
        "file_get_contents",
        re.compile(r"file_get_contents\s*\([^)]*\)"),
        "Consider caching file contents",
    ),
    RiskPattern(
        "database_query_in_loop",
        re.compile(r"DB::\w+\s*\([^)]*\)"),
        "Avoid database queries in loops",
    ),
)

SECURITY_PATTERNS: tuple[RiskPattern, ...] = (
    RiskPattern(
        "sql_injection",
        re.compile(r"DB::raw\s*\(\s*\$[^)]*\)"),
        "Potential SQL injection vulnerability",
    ),
    RiskPattern(
        "xss_vulnerability",
        re.compile(r"\becho\s+\$[^;]*"),
        "Potential XSS vulnerability",
    ),
    RiskPattern(
        "file_inclusion",
        re.compile(r"\b(?:include|require)(?:_once)?\s*\(?\s*\$[^;)]*\)?"),
        "Potential file inclusion vulnerability",
    ),
    RiskPattern("eval_usage", re.compile(r"\beval\s*\("), "Dangerous eval() usage"),
    RiskPattern("shell_exec", re.compile(r"\bshell_exec\s*\("), "Dangerous shell_exec() usage"),
)


def _line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def scan_patterns(text: str, patterns: Iterable[RiskPattern]) -> list[TextMatch]:
    """All matches of ``patterns`` in ``text``, ordered by catalogue then offset."""
    matches = []
    for pattern in patterns:
        for match in pattern.regex.finditer(text):
            matches.append(
                TextMatch(
                    kind=pattern.kind,
                    line=_line_of(text, match.start()),
                    snippet=match.group().strip()[:120],
                    description=pattern.description,
                )
            )
    return matches


def find_performance_issues(text: str) -> list[TextMatch]:
    return scan_patterns(text, PERFORMANCE_PATTERNS)


def find_security_issues(text: str) -> list[TextMatch]:
    return scan_patterns(text, SECURITY_PATTERNS)


def cyclomatic_complexity(body: str) -> int:
    """1 + branching keywords + logical operators in a masked method body."""
    return 1 + len(_BRANCH_TOKENS.findall(body)) + len(_LOGICAL_TOKENS.findall(body))


def block_nesting(body: str) -> int:
    """Deepest brace nesting in ``body``; the outermost block counts as 1."""
    depth = 0
    deepest = 0
    for ch in body:
        if ch == "{":
            depth += 1
            deepest = max(deepest, depth)
        elif ch == "}":
            depth -= 1
    return deepest


def find_long_lines(lines: Iterable[str], limit: int = 120) -> list[tuple[int, int]]:
    """(line number, length) of every line longer than ``limit``."""
    return [(number, len(line)) for number, line in enumerate(lines, 1) if len(line) > limit]


def find_magic_numbers(masked_lines: Iterable[str], digits: int = 3) -> list[tuple[int, str]]:
    """(line number, literal) of bare integers with at least ``digits`` digits.

    Expects lines with comments and strings already masked. Constant
    declarations are where such numbers belong, so they are skipped up to
    the semicolon ending them, including multi-line array constants.
    """
    pattern = re.compile(_MAGIC_NUMBER.format(digits=digits))
    found = []
    in_constant = False
    for number, line in enumerate(masked_lines, 1):
        if in_constant or _CONSTANT_DECLARATION.search(line):
            in_constant = ";" not in line
            continue
        for match in pattern.finditer(line):
            found.append((number, match.group()))
    return found


def is_commented_code(line: str) -> bool:
    """A single-line comment whose content looks like a PHP statement."""
    match = _COMMENT_LINE.match(line)
    if not match:
        return False
    body = match.group("body").rstrip()
    if not body or body.upper().startswith(("TODO", "FIXME")):
        return False
    return body.endswith(_CODE_ENDING)


def find_commented_code(lines: Iterable[str]) -> list[int]:
    return [number for number, line in enumerate(lines, 1) if is_commented_code(line)]


def window_digests(lines: list[str], window: int = 5) -> Iterator[tuple[int, str]]:
    """Yield (1-based start line, md5) for every ``window``-line slice.

    Slices made only of blank lines carry no content and are not hashed.
    """
    for start in range(0, len(lines) - window + 1):
        chunk = lines[start:start + window]
        if not any(line.strip() for line in chunk):
            continue
        digest = hashlib.md5("\n".join(chunk).encode("utf-8")).hexdigest()
        yield start + 1, digest
