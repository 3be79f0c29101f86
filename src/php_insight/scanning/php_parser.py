"""Structural parsing of PHP files.

Tries tree-sitter first and falls back to the regex parser:
    1. If the syntax tree is clean: use tree-sitter
    2. If tree-sitter reports syntax errors: use the regex fallback
    3. If the fallback cannot balance the file either: raise ParsingError
"""

from __future__ import annotations

from typing import Optional

from ..logging_config import get_logger
from ..models import SourceUnit
from .fallback import RegexFallbackParser
from .treesitter_parser import TreeSitterPhpParser

logger = get_logger(__name__)


class PhpParser:
    """Structural extraction for one PHP file.

    Attributes:
        used_fallback: True once parse() had to use the regex parser
    """

    def __init__(self, text: str, path: str = "<string>"):
        self.text = text
        self.path = path
        self._tree = TreeSitterPhpParser(text, path)
        self._fallback: Optional[RegexFallbackParser] = None
        self.used_fallback = False

    @property
    def masked(self) -> str:
        """File text with comments and strings blanked, from whichever parser ran."""
        if self._fallback is not None:
            return self._fallback.masked
        return self._tree.masked

    def parse(self) -> list[SourceUnit]:
        if not self._tree.has_errors:
            return self._tree.parse()

        logger.debug(f"{self.path}: tree-sitter reported syntax errors, using regex fallback")
        self.used_fallback = True
        self._fallback = RegexFallbackParser(self.text, self.path)
        return self._fallback.parse()


def parse_php(text: str, path: str = "<string>") -> list[SourceUnit]:
    """Return the classes, interfaces and traits declared in ``text``.

    Raises:
        ParsingError: If the file has syntax errors and its braces or a
            parameter list never close
    """
    return PhpParser(text, path).parse()
