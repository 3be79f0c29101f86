"""Tree-sitter parser for PHP source files.

Builds SourceUnits from the tree-sitter-php grammar: class, interface and
trait declarations, their method and property declarations, formal
parameters and the doc comments that precede them.

Usage:
    parser = TreeSitterPhpParser(text, "app/Models/User.php")
    if not parser.has_errors:
        units = parser.parse()
"""

from __future__ import annotations

from typing import Optional

import tree_sitter_php
from tree_sitter import Language, Node, Parser

from ..models import MemberFact, Parameter, SourceUnit, UnitKind
from .lexer import DocComment
from .patterns import block_nesting, cyclomatic_complexity

PHP_LANGUAGE = Language(tree_sitter_php.language_php())

_UNIT_KINDS = {
    "class_declaration": UnitKind.CLASS,
    "interface_declaration": UnitKind.INTERFACE,
    "trait_declaration": UnitKind.TRAIT,
}

# Nodes whose text is blanked in the masked copy of the file
_MASKED_NODES = {
    "comment",
    "string",
    "encapsed_string",
    "heredoc",
    "nowdoc",
    "shell_command_expression",
    "text",
    "text_interpolation",
}

_NAME_NODES = ("name", "qualified_name")
_PARAMETER_NODES = ("simple_parameter", "variadic_parameter", "property_promotion_parameter")
_VISIBILITIES = ("public", "protected", "private")


class TreeSitterPhpParser:
    """Structural extraction for one PHP file from its syntax tree.

    The tree is parsed once on construction. ``masked`` is the file text with
    comments, strings and inline HTML blanked (line breaks kept), which is
    what complexity and nesting are counted on.
    """

    def __init__(self, text: str, path: str = "<string>"):
        self.path = path
        self.source = text.encode("utf-8")
        self.tree = Parser(PHP_LANGUAGE).parse(self.source)
        self._masked = self._mask()
        self.masked = self._masked.decode("utf-8", errors="replace")

    @property
    def has_errors(self) -> bool:
        return self.tree.root_node.has_error

    # -- helpers -------------------------------------------------------------

    def _text(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def _mask(self) -> bytes:
        masked = bytearray(self.source)
        stack = [self.tree.root_node]
        while stack:
            node = stack.pop()
            if node.type in _MASKED_NODES:
                for i in range(node.start_byte, node.end_byte):
                    if masked[i] != 0x0A:
                        masked[i] = 0x20
                continue
            stack.extend(node.children)
        return bytes(masked)

    def _doc_before(self, node: Node) -> Optional[DocComment]:
        prev = node.prev_sibling
        if prev is None or prev.type != "comment":
            return None
        text = self._text(prev)
        if not text.startswith("/**") or text.startswith("/**/"):
            return None
        return DocComment(start=prev.start_byte, end=prev.end_byte, text=text)

    @staticmethod
    def _start_line(node: Node) -> int:
        """Line of the first modifier or keyword, after any attributes."""
        first = next((c for c in node.children if c.type != "attribute_list"), node)
        return first.start_point[0] + 1

    def _modifiers(self, node: Node) -> set[str]:
        return {
            self._text(child).lower()
            for child in node.children
            if child.type.endswith("_modifier") and child.type != "reference_modifier"
        }

    def _names(self, clause: Optional[Node]) -> tuple[str, ...]:
        if clause is None:
            return ()
        return tuple(
            self._text(child).lstrip("\\") for child in clause.named_children if child.type in _NAME_NODES
        )

    @staticmethod
    def _child_of_type(node: Node, node_type: str) -> Optional[Node]:
        return next((c for c in node.children if c.type == node_type), None)

    def _variable_name(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        if node.type != "variable_name":
            node = next((c for c in node.named_children if c.type == "variable_name"), None)
            if node is None:
                return ""
        return self._text(node).lstrip("$")

    # -- parsing -------------------------------------------------------------

    def parse(self) -> list[SourceUnit]:
        units = []
        namespace = ""
        stack = [self.tree.root_node]
        while stack:
            node = stack.pop()
            if node.type in _MASKED_NODES:
                continue
            if node.type == "namespace_definition":
                name = node.child_by_field_name("name")
                namespace = self._text(name) if name is not None else ""
            elif node.type in _UNIT_KINDS:
                units.append(self._parse_unit(node, namespace))
                continue
            stack.extend(reversed(node.children))
        return units

    def _parse_unit(self, node: Node, namespace: str) -> SourceUnit:
        kind = _UNIT_KINDS[node.type]
        if kind is UnitKind.CLASS and "abstract" in self._modifiers(node):
            kind = UnitKind.ABSTRACT

        parent = None
        interfaces: tuple[str, ...] = ()
        extends = self._names(self._child_of_type(node, "base_clause"))
        if kind is UnitKind.INTERFACE:
            interfaces = extends
        elif extends:
            parent = extends[0]
        interfaces += self._names(self._child_of_type(node, "class_interface_clause"))

        methods = []
        properties = []
        traits: tuple[str, ...] = ()
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "method_declaration":
                methods.append(self._parse_method(member, kind))
            elif member.type == "property_declaration":
                properties.extend(self._parse_properties(member))
            elif member.type == "use_declaration":
                traits += self._names(member)

        doc = self._doc_before(node)
        return SourceUnit(
            name=self._text(node.child_by_field_name("name")),
            file=self.path,
            start_line=self._start_line(node),
            end_line=node.end_point[0] + 1,
            kind=kind,
            namespace=namespace,
            has_docblock=doc is not None,
            parent=parent,
            interfaces=interfaces,
            traits=traits,
            methods=tuple(methods),
            properties=tuple(properties),
            doc_summary=doc.summary if doc else "",
        )

    def _parse_method(self, node: Node, kind: UnitKind) -> MemberFact:
        mods = self._modifiers(node)
        name = self._text(node.child_by_field_name("name"))
        return_type = node.child_by_field_name("return_type")

        complexity = 1
        nesting = 0
        body = node.child_by_field_name("body")
        if body is not None:
            masked_body = self._masked[body.start_byte:body.end_byte].decode("utf-8", errors="replace")
            complexity = cyclomatic_complexity(masked_body)
            nesting = block_nesting(masked_body)

        doc = self._doc_before(node)
        return MemberFact(
            name=name,
            kind="method",
            visibility=next((m for m in _VISIBILITIES if m in mods), "public"),
            start_line=self._start_line(node),
            end_line=node.end_point[0] + 1,
            has_docblock=doc is not None,
            parameters=self._parse_parameters(node.child_by_field_name("parameters")),
            is_constructor=name.lower() == "__construct",
            is_static="static" in mods,
            is_abstract="abstract" in mods or kind is UnitKind.INTERFACE,
            complexity=complexity,
            max_nesting=nesting,
            return_type=self._text(return_type) if return_type is not None else "",
            doc_summary=doc.summary if doc else "",
        )

    def _parse_parameters(self, node: Optional[Node]) -> tuple[Parameter, ...]:
        if node is None:
            return ()
        params = []
        for child in node.named_children:
            if child.type not in _PARAMETER_NODES:
                continue
            type_node = child.child_by_field_name("type")
            params.append(
                Parameter(
                    name=self._variable_name(child.child_by_field_name("name")),
                    type_hint=self._text(type_node).lstrip("\\") if type_node is not None else "",
                    has_default=child.child_by_field_name("default_value") is not None,
                )
            )
        return tuple(params)

    def _parse_properties(self, node: Node) -> list[MemberFact]:
        mods = self._modifiers(node)
        type_node = node.child_by_field_name("type")
        doc = self._doc_before(node)
        line = self._start_line(node)
        properties = []
        for element in node.named_children:
            if element.type != "property_element":
                continue
            properties.append(
                MemberFact(
                    name=self._variable_name(element),
                    kind="property",
                    visibility=next((m for m in _VISIBILITIES if m in mods), "public"),
                    start_line=line,
                    end_line=line,
                    has_docblock=doc is not None,
                    is_static="static" in mods,
                    return_type=self._text(type_node) if type_node is not None else "",
                    doc_summary=doc.summary if doc else "",
                )
            )
        return properties
