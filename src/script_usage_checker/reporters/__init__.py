"""Reporters package."""

from script_usage_checker.reporters.csv_report import CSVReporter
from script_usage_checker.reporters.terminal import TerminalReporter
from script_usage_checker.reporters.json_formats import JSONReporter

__all__ = [
    "TerminalReporter",
    "CSVReporter",
    "JSONReporter",
]
