"""
Semantic Judge Interface

Abstract base class for external semantic judges that decide whether a
free-text answer means the same as the accepted answers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence


@dataclass
class JudgeVerdict:
    """Normalized verdict returned by a semantic judge."""
    correct: bool
    feedback: str
    score: float
    model_id: Optional[str] = None
    latency_ms: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


class SemanticJudge(ABC):
    """Abstract base class for semantic judges."""

    def __init__(self, model_name: str):
        """
        Initialize the judge.

        Args:
            model_name: Identifier of the backing model
        """
        self.model_name = model_name
        self._total_requests = 0
        self._failed_requests = 0

    @abstractmethod
    async def evaluate(self, question: Any, answer: str,
                       accepted_answers: Optional[Sequence[str]] = None) -> JudgeVerdict:
        """
        Judge a candidate answer.

        Args:
            question: Question record (or its text)
            answer: Submitted answer
            accepted_answers: Known good answers, if any

        Returns:
            JudgeVerdict with correctness, feedback and a score in [0, 1]

        Raises:
            JudgeUnavailableError: If the judge cannot be reached
            JudgeResponseError: If no verdict can be parsed from the reply
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass

    def get_usage_stats(self) -> Dict[str, Any]:
        """Get request counters for this judge."""
        return {
            'model_name': self.model_name,
            'total_requests': self._total_requests,
            'failed_requests': self._failed_requests,
        }

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.model_name})"

    def __repr__(self) -> str:
        return self.__str__()
