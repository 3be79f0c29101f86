"""Report formatters for PHP Insight."""

from typing import Optional

from ..config import AnalysisConfig
from .base import BaseFormatter
from .html_formatter import HtmlFormatter, html_page, markdown_to_html
from .json_formatter import JsonFormatter
from .markdown_formatter import MarkdownFormatter
from .rich_formatter import RichFormatter

FORMATTERS = {
    "rich": RichFormatter,
    "json": JsonFormatter,
    "markdown": MarkdownFormatter,
    "html": HtmlFormatter,
}


def get_formatter(
    name: str, detailed: bool = False, config: Optional[AnalysisConfig] = None
) -> BaseFormatter:
    """Get a formatter instance by name.

    Args:
        name: One of "rich", "json", "markdown", "html"
        detailed: Include per-finding detail where the format supports it
        config: Supplies detail and recommendation limits

    Returns:
        Formatter instance

    Raises:
        ValueError: If name is not recognized
    """
    cls = FORMATTERS.get(name)
    if cls is None:
        raise ValueError(f"Unknown formatter: {name!r}. Choose from: {', '.join(sorted(FORMATTERS))}")
    return cls(detailed=detailed, config=config)


__all__ = [
    "BaseFormatter",
    "RichFormatter",
    "JsonFormatter",
    "MarkdownFormatter",
    "HtmlFormatter",
    "FORMATTERS",
    "get_formatter",
    "html_page",
    "markdown_to_html",
]
