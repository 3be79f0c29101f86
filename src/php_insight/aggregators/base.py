"""Aggregator interface and failure isolation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ..config import AnalysisConfig
from ..exceptions import AggregationError
from ..logging_config import get_logger
from ..models import Category, CategoryResult, CodebaseFacts

logger = get_logger(__name__)


def percentage(part: int, whole: int) -> float:
    """``part`` of ``whole`` as a percentage; an empty whole is vacuously 100%."""
    if whole == 0:
        return 100.0
    return round(part / whole * 100, 2)


def average(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


class Aggregator(ABC):
    """Reduces CodebaseFacts to one CategoryResult."""

    name: str = ""
    category: Category = Category.COMPLEXITY

    @abstractmethod
    def compute(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        """Build the category result. May raise; see ``run``."""

    def run(self, facts: CodebaseFacts, config: AnalysisConfig) -> CategoryResult:
        """Compute the result, degrading to grade F if anything goes wrong.

        One failing category must not take the rest of the report down, so
        every exception is recorded on the result instead of propagating.
        """
        try:
            return self.compute(facts, config)
        except Exception as e:
            error = AggregationError(self.name, f"{type(e).__name__}: {e}")
            logger.warning(str(error))
            logger.debug(f"{self.name} traceback", exc_info=True)
            return CategoryResult.failed(self.name, self.category, error.reason)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def run_aggregators(
    aggregators: Iterable[Aggregator], facts: CodebaseFacts, config: AnalysisConfig
) -> list[CategoryResult]:
    return [aggregator.run(facts, config) for aggregator in aggregators]
