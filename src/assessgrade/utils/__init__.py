"""
Utils Module

Logging configuration, async utility functions, and input validation utilities.
"""

from .logging import setup_logging, get_logger, get_question_logger
from .async_helpers import AsyncThrottler, create_task_with_name, cancel_tasks

__all__ = [
    "setup_logging",
    "get_logger",
    "get_question_logger",
    "AsyncThrottler",
    "create_task_with_name",
    "cancel_tasks",
]
