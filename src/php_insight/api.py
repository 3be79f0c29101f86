"""Public API for PHP Insight.

Example:
    >>> from php_insight import analyze
    >>>
    >>> report = analyze("/path/to/laravel-app")
    >>> report["complexity"].grade
    'A'
    >>>
    >>> # Other suites and overrides
    >>> report = analyze("/path/to/laravel-app", suite="testing", workers=4)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .aggregators import get_suite, run_aggregators
from .config import AnalysisConfig, load_config
from .logging_config import get_logger
from .models import CodebaseFacts, Report, ReportBuilder
from .recommendations import RecommendationEngine
from .scanning import FactExtractor

logger = get_logger(__name__)


def run_suite(
    facts: CodebaseFacts,
    suite: str = "quality",
    config: Optional[AnalysisConfig] = None,
    engine: Optional[RecommendationEngine] = None,
) -> Report:
    """Aggregate, grade and recommend over already extracted facts.

    Raises:
        ValueError: If suite is not recognized
    """
    config = config or AnalysisConfig()
    engine = engine or RecommendationEngine()
    title, aggregators = get_suite(suite)

    results = run_aggregators(aggregators, facts, config)
    for result in results:
        if not result.ok:
            logger.debug(f"{result.name} degraded to F: {result.error}")

    builder = ReportBuilder(title).extend(results)
    builder.with_recommendations(engine.recommend(builder.results))
    return builder.build()


def analyze(
    path: Union[str, Path] = ".",
    suite: str = "quality",
    config: Optional[AnalysisConfig] = None,
    config_file: Optional[Path] = None,
    **overrides,
) -> Report:
    """Analyze a PHP project and return a report for one suite.

    This runs the whole pipeline once: walk the tree, extract facts,
    aggregate each category, grade it and derive recommendations. The
    project tree is only read.

    Args:
        path: Project root (default: current directory)
        suite: One of "quality", "complexity", "documentation", "testing"
        config: Ready-made configuration; config_file and overrides are
            ignored when given
        config_file: Optional explicit config file path
        **overrides: Configuration overrides (e.g., workers=4)

    Returns:
        Immutable Report

    Raises:
        PhpInsightError: If configuration is invalid
        ValueError: If suite is not recognized
    """
    if config is None:
        config = load_config(config_file=config_file, project_root=Path(path), **overrides)

    logger.info(f"Starting {suite} analysis of {path}")
    facts = FactExtractor(config).extract(path)
    report = run_suite(facts, suite, config)
    logger.info(
        f"Analysis complete: {len(report.findings)} findings, "
        f"{len(report.recommendations)} recommendations"
    )
    return report
