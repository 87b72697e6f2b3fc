"""
CLI Module

Output formatting utilities for the command-line interface.
"""

from .formatting import format_table, render_report, report_to_dict, format_report_json

__all__ = [
    "format_table",
    "render_report",
    "report_to_dict",
    "format_report_json",
]
