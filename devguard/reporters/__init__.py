"""Report rendering for devguard runs."""

from .base_reporter import BaseReporter
from .json_reporter import JSONReporter, parse_json_report
from .text_reporter import TextReporter

__all__ = [
    "BaseReporter",
    "JSONReporter",
    "TextReporter",
    "parse_json_report",
]
