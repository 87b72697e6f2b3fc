"""
Core Module

Foundational components used across the application including configuration
management and custom exceptions.
"""

from .config import get_config, set_config, reload_config, AppConfig
from .exceptions import (
    AssessGradeException,
    ConfigurationError,
    ValidationError,
    EvaluationError,
    JudgeError,
    JudgeUnavailableError,
    JudgeResponseError,
)

__all__ = [
    "get_config",
    "set_config",
    "reload_config",
    "AppConfig",
    "AssessGradeException",
    "ConfigurationError",
    "ValidationError",
    "EvaluationError",
    "JudgeError",
    "JudgeUnavailableError",
    "JudgeResponseError",
]
