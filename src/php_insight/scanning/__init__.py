"""Source discovery and fact extraction for PHP codebases."""

from .extractor import FactExtractor, extract_facts
from .php_parser import PhpParser, parse_php
from .walker import FileWalker

__all__ = [
    "FactExtractor",
    "FileWalker",
    "PhpParser",
    "extract_facts",
    "parse_php",
]
