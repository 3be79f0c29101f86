"""JSON formatter for PHP Insight."""

import json
from dataclasses import asdict
from enum import Enum

from ..models import Report
from .base import BaseFormatter


def _encode(value):
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonFormatter(BaseFormatter):
    """Render the full report as JSON."""

    def format(self, report: Report) -> str:
        return json.dumps(asdict(report), indent=2, default=_encode)
