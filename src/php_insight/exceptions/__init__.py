"""Exception hierarchy for PHP Insight."""

from .analysis import (
    AggregationError,
    AnalysisError,
    FileAccessError,
    ParsingError,
)
from .base import PhpInsightError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)

__all__ = [
    "PhpInsightError",
    "AnalysisError",
    "FileAccessError",
    "ParsingError",
    "AggregationError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
]
