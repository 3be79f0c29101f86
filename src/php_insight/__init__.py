"""
PHP Insight - Static quality analysis for PHP and Laravel codebases

Walks a project once, extracts structural and textual facts, and turns them
into graded categories with prioritized recommendations.
"""

__version__ = "0.3.0"

from .api import analyze, run_suite
from .config import AnalysisConfig, load_config
from .models import CategoryResult, Finding, Recommendation, Report

__all__ = [
    "analyze",  # Main entry point
    "run_suite",
    "AnalysisConfig",
    "load_config",
    "Report",
    "CategoryResult",
    "Finding",
    "Recommendation",
]
