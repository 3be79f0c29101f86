"""Base formatter interface for PHP Insight report rendering."""

from abc import ABC, abstractmethod
from typing import Optional

from ..config import AnalysisConfig
from ..models import Report


class BaseFormatter(ABC):
    """Abstract base class for report formatters.

    Formatters only read the report; the same Report can be rendered any
    number of times in any format.
    """

    def __init__(self, detailed: bool = False, config: Optional[AnalysisConfig] = None):
        self.detailed = detailed
        self.config = config or AnalysisConfig()

    @abstractmethod
    def format(self, report: Report) -> str:
        """Return the formatted report."""

    def render(self, report: Report) -> None:
        """Print the formatted report to stdout."""
        print(self.format(report))
