"""Tests for scanning/fallback.py - the regex parser used on files with syntax errors."""

import pytest

from php_insight.exceptions import ParsingError
from php_insight.models import UnitKind
from php_insight.scanning.fallback import RegexFallbackParser, parse_parameters, split_top_level
from php_insight.scanning.php_parser import parse_php

SAMPLE = """<?php
namespace App;

/** Sample. */
class Sample extends Base implements Countable
{
    public function count(): int
    {
        if ($this->a && $this->b) {
            foreach ($this->items as $item) {
                $n++;
            }
        }
        return $n;
    }

    private static function make(array $xs = []) {}
}

interface Countable {}
"""


class TestRegexFallbackParser:
    def test_agrees_with_tree_on_clean_code(self):
        """Names, kinds, spans and complexity match the tree-sitter result."""
        regex_units = RegexFallbackParser(SAMPLE).parse()
        tree_units = parse_php(SAMPLE)
        assert [(u.name, u.kind, u.start_line, u.end_line) for u in regex_units] == [
            (u.name, u.kind, u.start_line, u.end_line) for u in tree_units
        ]
        assert [(m.name, m.complexity, m.max_nesting) for m in regex_units[0].methods] == [
            (m.name, m.complexity, m.max_nesting) for m in tree_units[0].methods
        ]

    def test_recovers_from_statement_errors(self):
        units = RegexFallbackParser("<?php\nabstract class A {\n    function f() { $x = ; }\n}\n").parse()
        assert units[0].kind is UnitKind.ABSTRACT
        assert units[0].methods[0].visibility == "public"

    def test_unbalanced_braces(self):
        with pytest.raises(ParsingError) as exc_info:
            RegexFallbackParser("<?php\nclass Broken {\n", "app/Broken.php").parse()
        assert exc_info.value.details["line"] == "2"


class TestParameterParsing:
    def test_split_top_level(self):
        assert split_top_level("a, f(b, c), [d, e]") == ["a", "f(b, c)", "[d, e]"]

    def test_parse_parameters(self):
        params = parse_parameters("int $a, array $b = [1, 2], &$c, \\App\\Foo $d")
        assert [(p.name, p.type_hint, p.has_default) for p in params] == [
            ("a", "int", False),
            ("b", "array", True),
            ("c", "", False),
            ("d", "App\\Foo", False),
        ]

    def test_empty(self):
        assert parse_parameters("") == ()
