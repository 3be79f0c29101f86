"""Analysis-related exceptions: file access, parsing, aggregation."""

from pathlib import Path

from .base import PhpInsightError


class AnalysisError(PhpInsightError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a source file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when the structure of a PHP file cannot be recovered.

    The extractor treats this as a partial parse: the file is dropped from
    structural extraction but still takes part in the textual scans.
    """

    def __init__(self, filepath: Path, reason: str, line: int = 0):
        details = {"filepath": str(filepath), "reason": reason}
        if line:
            details["line"] = str(line)
        super().__init__(f"Failed to parse PHP file: {filepath}", details=details)
        self.filepath = filepath
        self.reason = reason
        self.line = line


class AggregationError(AnalysisError):
    """Raised when a metric aggregator cannot produce its category result."""

    def __init__(self, category: str, reason: str):
        super().__init__(
            f"Aggregation failed for {category}",
            details={"category": category, "reason": reason},
        )
        self.category = category
        self.reason = reason
