"""Fact extraction: one pass over every source and test file.

Per-file extraction (structure plus textual heuristics) is independent and
may run on a thread pool. Duplicate-window hashing needs the whole file set,
so it runs once after all per-file results are joined, in walk order.
"""

from __future__ import annotations

from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from threading import Lock
from typing import Optional, Union

from ..config import AnalysisConfig
from ..exceptions import FileAccessError, ParsingError
from ..logging_config import get_logger
from ..models import CodebaseFacts, DuplicateGroup, FileFacts, TextMatch
from .lexer import split_lines
from .patterns import (
    find_commented_code,
    find_long_lines,
    find_magic_numbers,
    find_performance_issues,
    find_security_issues,
    window_digests,
)
from .php_parser import PhpParser
from .walker import FileWalker

logger = get_logger(__name__)

# Share of files parsed by the regex fallback above which a warning is logged
FALLBACK_WARNING_RATE = 0.2


class FactExtractor:
    """Turn a project tree into CodebaseFacts.

    Attributes:
        treesitter_count: Files whose structure came from tree-sitter
        fallback_count: Files that needed the regex fallback parser
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self._lock = Lock()
        self.treesitter_count = 0
        self.fallback_count = 0

    def extract(self, root: Union[str, Path]) -> CodebaseFacts:
        walker = FileWalker(
            root,
            exclude_patterns=self.config.exclude_patterns,
            max_file_size_bytes=self.config.max_file_size_bytes,
        )
        source_paths = walker.walk(self.config.source_globs)
        test_paths = walker.walk(self.config.test_globs)
        logger.debug(f"Found {len(source_paths)} source and {len(test_paths)} test files")

        source_files = self._extract_all(walker, source_paths, textual=True)
        test_files = self._extract_all(walker, test_paths, textual=False)

        parsed = self.treesitter_count + self.fallback_count
        if parsed and self.fallback_count / parsed > FALLBACK_WARNING_RATE:
            logger.warning(
                f"{self.fallback_count} of {parsed} files had syntax errors and were parsed by the regex fallback"
            )

        return CodebaseFacts(
            root=str(walker.root),
            source_files=tuple(source_files),
            test_files=tuple(test_files),
            duplicates=tuple(self.find_duplicates(source_files)),
        )

    def _extract_all(self, walker: FileWalker, paths: list[Path], textual: bool) -> list[FileFacts]:
        def _one(path: Path) -> Optional[FileFacts]:
            try:
                text = walker.read(path)
            except FileAccessError as e:
                logger.warning(f"Skipping unreadable file: {e}")
                return None
            return self.extract_file(text, walker.relative(path), textual=textual)

        if self.config.parallel and len(paths) > 1:
            # map() yields in submission order, so the join is deterministic
            with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                results = list(executor.map(_one, paths))
        else:
            results = [_one(path) for path in paths]

        return [facts for facts in results if facts is not None]

    def extract_file(self, text: str, rel_path: str, textual: bool = True) -> FileFacts:
        """Extract structural and textual facts from one file's contents."""
        parser = PhpParser(text, rel_path)
        units: tuple = ()
        parse_error = None
        try:
            units = tuple(parser.parse())
        except ParsingError as e:
            # structure is dropped for this file, textual scans still run
            logger.debug(f"Structural parse skipped: {e}")
            parse_error = e.reason

        with self._lock:
            if parser.used_fallback:
                self.fallback_count += 1
            else:
                self.treesitter_count += 1

        if not textual:
            return FileFacts(path=rel_path, text=text, units=units, parse_error=parse_error)

        return FileFacts(
            path=rel_path,
            text=text,
            units=units,
            parse_error=parse_error,
            performance=tuple(find_performance_issues(text)),
            security=tuple(find_security_issues(text)),
            smells=tuple(self._smells(text, parser.masked)),
        )

    def _smells(self, text: str, masked: str) -> list[TextMatch]:
        lines = split_lines(text)
        limit = self.config.long_line_limit
        smells = []
        for number, literal in find_magic_numbers(
            split_lines(masked), self.config.magic_number_digits
        ):
            smells.append(
                TextMatch(
                    "magic_number", number, literal, f"Magic number {literal} should be a named constant"
                )
            )
        for number, length in find_long_lines(lines, limit):
            smells.append(
                TextMatch(
                    "long_line",
                    number,
                    lines[number - 1].strip()[:80],
                    f"Line is {length} characters (limit {limit})",
                )
            )
        for number in find_commented_code(lines):
            smells.append(
                TextMatch(
                    "commented_code",
                    number,
                    lines[number - 1].strip()[:80],
                    "Commented-out code should be removed",
                )
            )
        return sorted(smells, key=lambda m: (m.line, m.kind))

    def find_duplicates(self, files: list[FileFacts]) -> list[DuplicateGroup]:
        """Group identical line windows across ``files`` (in the given order)."""
        occurrences: "OrderedDict[str, list[tuple[str, int]]]" = OrderedDict()
        previews: dict[str, str] = {}
        window = self.config.duplicate_window
        for facts in files:
            lines = facts.lines
            for start, digest in window_digests(lines, window):
                occurrences.setdefault(digest, []).append((facts.path, start))
                if digest not in previews:
                    previews[digest] = lines[start - 1].strip()

        return [
            DuplicateGroup(digest=digest, occurrences=tuple(locations), preview=previews[digest])
            for digest, locations in occurrences.items()
            if len(locations) > 1
        ]


def extract_facts(root: Union[str, Path], config: Optional[AnalysisConfig] = None) -> CodebaseFacts:
    return FactExtractor(config).extract(root)
