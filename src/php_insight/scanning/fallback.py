"""Regex-based fallback parser for PHP source files.

Used when tree-sitter reports syntax errors in a file. It recovers classes,
interfaces and traits together with their methods and properties from a
comment- and string-masked copy of the text, relying on brace and
parenthesis matching. Results are approximate but sufficient for the
metadata the aggregators need.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from pathlib import Path
from typing import Optional

from ..exceptions import ParsingError
from ..models import MemberFact, Parameter, SourceUnit, UnitKind
from .lexer import DocComment, LineIndex, MaskedSource, mask_source, match_brace, match_paren, top_level_view
from .patterns import block_nesting, cyclomatic_complexity

_DECLARATION = re.compile(
    r"(?P<mods>(?:\b(?:abstract|final|readonly)\s+)*)"
    r"\b(?P<kind>class|interface|trait)\s+(?P<name>[A-Za-z_]\w*)"
)
_NAMESPACE = re.compile(r"\bnamespace\s+([A-Za-z_][\w\\]*)\s*[;{]")
_EXTENDS = re.compile(r"\bextends\s+([\w\\]+(?:\s*,\s*[\w\\]+)*)")
_IMPLEMENTS = re.compile(r"\bimplements\s+([\w\\]+(?:\s*,\s*[\w\\]+)*)")
_METHOD = re.compile(
    r"(?P<mods>(?:\b(?:public|protected|private|static|abstract|final)\s+)*)"
    r"\bfunction\s+&?\s*(?P<name>[A-Za-z_]\w*)\s*\("
)
_PROPERTY = re.compile(
    r"\b(?P<vis>public|protected|private|var)\s+"
    r"(?P<mods>(?:(?:static|readonly)\s+)*)"
    r"(?P<type>\??[\w\\|&]+\s+)?\$(?P<name>[A-Za-z_]\w*)"
)
_TERMINATOR = re.compile(r"[{;]")
_TRAIT_USE = re.compile(r"\buse\s+([\w\\]+(?:\s*,\s*[\w\\]+)*)\s*[;{]")
_BETWEEN_DOC_AND_DECL = re.compile(r"\s*(?:#\[.*?\]\s*)*", re.DOTALL)
_NOT_A_DECLARATION = ("::", "->", "new")
_RESERVED_NAMES = {"extends", "implements"}


def _split_names(raw: str) -> tuple[str, ...]:
    return tuple(part.strip().lstrip("\\") for part in raw.split(",") if part.strip())


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on ``sep`` outside of (), [] and {}."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_parameters(raw: str) -> tuple[Parameter, ...]:
    """Parse a (masked) PHP parameter list."""
    params = []
    for part in split_top_level(raw):
        name_match = re.search(r"\$([A-Za-z_]\w*)", part)
        if not name_match:
            continue
        type_part = part[: name_match.start()]
        type_part = re.sub(r"\b(?:public|protected|private|readonly)\b", "", type_part)
        type_part = type_part.replace("...", "").replace("&", "").strip()
        params.append(
            Parameter(
                name=name_match.group(1),
                type_hint=type_part.lstrip("\\"),
                has_default="=" in part[name_match.end():],
            )
        )
    return tuple(params)


class RegexFallbackParser:
    """Structural extraction for one PHP file, without a grammar."""

    def __init__(self, text: str, path: str = "<string>"):
        self.path = path
        self.source: MaskedSource = mask_source(text)
        self.masked = self.source.masked
        self.lines = LineIndex(text)
        self._doc_ends = [doc.end for doc in self.source.doc_comments]
        self._namespaces = [
            (m.start(), m.group(1)) for m in _NAMESPACE.finditer(self.masked)
        ]

    # -- helpers -------------------------------------------------------------

    def _error(self, reason: str, offset: int) -> ParsingError:
        return ParsingError(Path(self.path), reason, line=self.lines.line_at(offset))

    def _doc_before(self, offset: int) -> Optional[DocComment]:
        """Doc comment directly preceding ``offset`` (attributes allowed in between)."""
        idx = bisect_right(self._doc_ends, offset) - 1
        if idx < 0:
            return None
        doc = self.source.doc_comments[idx]
        gap = self.source.original[doc.end:offset]
        if _BETWEEN_DOC_AND_DECL.fullmatch(gap):
            return doc
        return None

    def _namespace_at(self, offset: int) -> str:
        current = ""
        for start, name in self._namespaces:
            if start > offset:
                break
            current = name
        return current

    def _is_declaration(self, match: re.Match) -> bool:
        if match.group("name") in _RESERVED_NAMES:
            return False
        before = self.masked[: match.start("kind")].rstrip()
        return not before.endswith(_NOT_A_DECLARATION)

    # -- parsing -------------------------------------------------------------

    def parse(self) -> list[SourceUnit]:
        units = []
        for match in _DECLARATION.finditer(self.masked):
            if not self._is_declaration(match):
                continue
            units.append(self._parse_unit(match))
        return units

    def _parse_unit(self, match: re.Match) -> SourceUnit:
        open_brace = self.masked.find("{", match.end())
        if open_brace == -1:
            raise self._error(f"no body for {match.group('name')}", match.start())
        close_brace = match_brace(self.masked, open_brace)
        if close_brace == -1:
            raise self._error(f"unbalanced braces in {match.group('name')}", open_brace)

        keyword = match.group("kind")
        if keyword == "interface":
            kind = UnitKind.INTERFACE
        elif keyword == "trait":
            kind = UnitKind.TRAIT
        elif "abstract" in match.group("mods"):
            kind = UnitKind.ABSTRACT
        else:
            kind = UnitKind.CLASS

        header = self.masked[match.end():open_brace]
        parent = None
        interfaces: tuple[str, ...] = ()
        extends = _EXTENDS.search(header)
        if extends:
            names = _split_names(extends.group(1))
            if kind is UnitKind.INTERFACE:
                interfaces = names
            else:
                parent = names[0]
        implements = _IMPLEMENTS.search(header)
        if implements:
            interfaces = interfaces + _split_names(implements.group(1))

        body_start = open_brace + 1
        view = top_level_view(self.masked, body_start, close_brace)
        methods, param_spans = self._parse_methods(view, body_start, kind)
        properties = self._parse_properties(view, body_start, param_spans)
        traits: tuple[str, ...] = ()
        for use in _TRAIT_USE.finditer(view):
            traits += _split_names(use.group(1))

        doc = self._doc_before(match.start())
        return SourceUnit(
            name=match.group("name"),
            file=self.path,
            start_line=self.lines.line_at(match.start()),
            end_line=self.lines.line_at(close_brace),
            kind=kind,
            namespace=self._namespace_at(match.start()),
            has_docblock=doc is not None,
            parent=parent,
            interfaces=interfaces,
            traits=traits,
            methods=tuple(methods),
            properties=tuple(properties),
            doc_summary=doc.summary if doc else "",
        )

    def _parse_methods(
        self, view: str, base: int, kind: UnitKind
    ) -> tuple[list[MemberFact], list[tuple[int, int]]]:
        methods = []
        param_spans = []
        for match in _METHOD.finditer(view):
            start = base + match.start()
            paren_open = base + match.end() - 1
            paren_close = match_paren(self.masked, paren_open)
            if paren_close == -1:
                raise self._error(f"unterminated parameter list of {match.group('name')}", paren_open)
            param_spans.append((paren_open, paren_close))

            terminator = _TERMINATOR.search(self.masked, paren_close + 1)
            if terminator is None:
                raise self._error(f"no body for method {match.group('name')}", paren_close)
            return_type = self.masked[paren_close + 1:terminator.start()].strip()
            return_type = return_type.lstrip(":").strip()

            complexity = 1
            nesting = 0
            end = terminator.start()
            if terminator.group() == "{":
                end = match_brace(self.masked, terminator.start())
                if end == -1:
                    raise self._error(f"unbalanced braces in method {match.group('name')}", terminator.start())
                body = self.masked[terminator.start():end + 1]
                complexity = cyclomatic_complexity(body)
                nesting = block_nesting(body)

            mods = match.group("mods").split()
            visibility = next((m for m in mods if m in ("public", "protected", "private")), "public")
            name = match.group("name")
            doc = self._doc_before(start)
            methods.append(
                MemberFact(
                    name=name,
                    kind="method",
                    visibility=visibility,
                    start_line=self.lines.line_at(start),
                    end_line=self.lines.line_at(end),
                    has_docblock=doc is not None,
                    parameters=parse_parameters(self.masked[paren_open + 1:paren_close]),
                    is_constructor=name.lower() == "__construct",
                    is_static="static" in mods,
                    is_abstract="abstract" in mods or kind is UnitKind.INTERFACE,
                    complexity=complexity,
                    max_nesting=nesting,
                    return_type=return_type,
                    doc_summary=doc.summary if doc else "",
                )
            )
        return methods, param_spans

    def _parse_properties(
        self, view: str, base: int, param_spans: list[tuple[int, int]]
    ) -> list[MemberFact]:
        properties = []
        for match in _PROPERTY.finditer(view):
            start = base + match.start()
            # promoted constructor parameters are documented with the constructor
            if any(open_ <= start <= close for open_, close in param_spans):
                continue
            doc = self._doc_before(start)
            line = self.lines.line_at(start)
            properties.append(
                MemberFact(
                    name=match.group("name"),
                    kind="property",
                    visibility="public" if match.group("vis") == "var" else match.group("vis"),
                    start_line=line,
                    end_line=line,
                    has_docblock=doc is not None,
                    is_static="static" in match.group("mods"),
                    return_type=(match.group("type") or "").strip(),
                    doc_summary=doc.summary if doc else "",
                )
            )
        return properties
