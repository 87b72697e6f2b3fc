"""
Logging Configuration

Centralized logging setup with configurable levels, file rotation,
and structured logging for the grading engine.
"""

import json
import logging
import logging.handlers
import re
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..core.config import get_config

DEFAULT_MAX_BYTES = 10 * 1024 * 1024

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMG]?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {'B': 1, 'KB': 1024, 'MB': 1024 ** 2, 'GB': 1024 ** 3}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add extra fields if present
        if hasattr(record, 'question_id'):
            log_entry['question_id'] = record.question_id
        if hasattr(record, 'question_type'):
            log_entry['question_type'] = record.question_type

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class QuestionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds question context to log records."""

    def process(self, msg: str, kwargs: dict) -> tuple:
        """Add extra context to log record."""
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def setup_logging(config=None, enable_json: Optional[bool] = None) -> None:
    """
    Set up logging configuration for the application.

    Args:
        config: Optional configuration object (uses default if None)
        enable_json: Enable JSON formatted logging (defaults to config.logging.json)
    """
    if config is None:
        config = get_config()
    if enable_json is None:
        enable_json = config.logging.json

    # Ensure logs directory exists
    log_file = Path(config.logging.file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.logging.level.upper()))
    root_logger.handlers.clear()

    # Console handler - use console_level for reduced terminal output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, config.logging.console_level.upper()))

    # File handler with rotation - use main level for comprehensive file logging
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=_parse_size(config.logging.max_size),
        backupCount=config.logging.backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(getattr(logging, config.logging.level.upper()))

    if enable_json:
        json_formatter = JSONFormatter()
        console_handler.setFormatter(json_formatter)
        file_handler.setFormatter(json_formatter)
    else:
        console_handler.setFormatter(logging.Formatter(config.logging.format))
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s'
        ))

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    _configure_third_party_loggers()

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured - Console: {config.logging.console_level}, "
                f"File: {config.logging.level}, Path: {log_file}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def get_question_logger(question_id: str, question_type: Optional[str] = None,
                        name: str = 'assessgrade.grading') -> QuestionLoggerAdapter:
    """
    Get a logger adapter carrying question context.

    Args:
        question_id: Question identifier for context
        question_type: Optional question type for context
        name: Underlying logger name

    Returns:
        Logger adapter with question context
    """
    extra = {'question_id': question_id}
    if question_type:
        extra['question_type'] = question_type
    return QuestionLoggerAdapter(get_logger(name), extra)


def _parse_size(size_str: str) -> int:
    """Parse a size such as '10MB' or '512 kb' into bytes; 10MB if unreadable."""
    match = _SIZE_PATTERN.match(size_str or '')
    if not match:
        return DEFAULT_MAX_BYTES
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or 'B').upper()])


def _configure_third_party_loggers() -> None:
    """Reduce noise from third-party libraries."""
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


class PerformanceTimer:
    """Context manager that logs how long a block took."""

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self._started = 0.0
        self.duration = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"Started {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started

        if exc_type is None:
            self.logger.info(f"Completed {self.operation} in {self.duration:.3f}s")
        else:
            self.logger.error(f"Failed {self.operation} after {self.duration:.3f}s: {exc_val}")
