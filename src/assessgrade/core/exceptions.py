"""
Custom Exception Classes

Application-specific exception classes for better error handling
and debugging throughout the answer evaluation engine.
"""

from typing import Optional, Any, Dict


class AssessGradeException(Exception):
    """Base exception class for all assessgrade errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(AssessGradeException):
    """Raised when there's an issue with configuration setup or validation."""
    pass


class ValidationError(AssessGradeException):
    """Raised when question or verdict data fails validation."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 invalid_value: Optional[Any] = None, **kwargs):
        super().__init__(message, kwargs)
        self.field_name = field_name
        self.invalid_value = invalid_value


class EvaluationError(AssessGradeException):
    """Raised when an answer cannot be evaluated at all (e.g. unknown question)."""

    def __init__(self, message: str, question_id: Optional[str] = None,
                 answer: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.question_id = question_id
        self.answer = answer


class JudgeError(AssessGradeException):
    """Base class for semantic judge failures."""

    def __init__(self, message: str, model_name: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.model_name = model_name


class JudgeUnavailableError(JudgeError):
    """Raised when the judge cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response_body: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.response_body = response_body


class JudgeResponseError(JudgeError):
    """Raised when the judge answered but no verdict could be parsed from it."""

    def __init__(self, message: str, raw_output: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_output = raw_output
