"""
Judge Module

External semantic judge contract, the Gemini client, prompt formatting and
lenient response parsing.
"""

from .base import SemanticJudge, JudgeVerdict
from .gemini import GeminiJudge
from .prompt_formatter import JudgePromptFormatter, PromptConfig
from .response_parser import JudgeResponseParser

__all__ = [
    "SemanticJudge",
    "JudgeVerdict",
    "GeminiJudge",
    "JudgePromptFormatter",
    "PromptConfig",
    "JudgeResponseParser",
]
