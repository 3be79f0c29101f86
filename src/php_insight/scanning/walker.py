"""Source file discovery."""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Iterable, Sequence, Union

from ..exceptions import FileAccessError
from ..logging_config import get_logger

logger = get_logger(__name__)


class FileWalker:
    """Enumerate files under a project root matching glob patterns.

    Results are sorted so that every run over the same tree sees files in the
    same order. A missing root simply yields no files.
    """

    def __init__(
        self,
        root: Union[str, Path],
        exclude_patterns: Sequence[str] = (),
        max_file_size_bytes: int = 0,
    ):
        self.root = Path(root)
        self.exclude_patterns = list(exclude_patterns)
        self.max_file_size_bytes = max_file_size_bytes

    def walk(self, globs: Iterable[str]) -> list[Path]:
        if not self.root.is_dir():
            logger.debug(f"Root {self.root} does not exist; nothing to scan")
            return []

        found: set[Path] = set()
        for pattern in globs:
            for path in self.root.glob(pattern):
                if path.is_file() and not self._should_skip(path):
                    found.add(path)
        return sorted(found, key=lambda p: p.relative_to(self.root).as_posix())

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def _should_skip(self, path: Path) -> bool:
        rel = self.relative(path)
        if any(fnmatch.fnmatch(rel, pattern) for pattern in self.exclude_patterns):
            return True
        if self.max_file_size_bytes:
            try:
                if path.stat().st_size > self.max_file_size_bytes:
                    logger.debug(f"Skipping {rel}: larger than size limit")
                    return True
            except OSError:
                return True
        return False

    @staticmethod
    def read(path: Path) -> str:
        """Read a file as UTF-8, replacing undecodable bytes.

        Raises:
            FileAccessError: If the file cannot be read
        """
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileAccessError(path, f"OS error: {e}")
