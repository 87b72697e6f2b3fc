"""
Evaluation Types

Question and verdict records shared by the grading policies, the verdict
store and the metrics aggregator.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..core.exceptions import ValidationError

ANSWER_SEPARATOR = " | "


class QuestionType(str, Enum):
    """Supported question types."""
    MCQ = "mcq"
    ONE_LINER = "oneLiner"
    FILL_BLANK = "fillBlank"


class GradingMethod(str, Enum):
    """Which policy produced a verdict."""
    ANSWER_KEY = "answer_key"      # mcq key comparison
    KEYWORDS = "keywords"          # oneLiner keyword groups
    BLANKS = "blanks"              # fillBlank per-slot groups
    REFERENCE = "reference"        # deterministic ground-truth check
    JUDGE = "judge"                # external semantic judge
    UNGRADED = "ungraded"          # no ground truth configured


def clamp01(value: float) -> float:
    """Clamp a number into [0, 1]; NaN becomes 0."""
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, float(value)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Question:
    """An immutable generated question."""
    id: str
    type: QuestionType
    topic: str
    prompt: str
    marks: float = 1.0
    options: Tuple[str, ...] = ()
    answer_key: Optional[str] = None
    keywords: Any = None
    acceptable: Any = None
    accepted_answers: Tuple[str, ...] = ()
    case_sensitive: bool = False

    def slot_count(self, blank_marker: str = "___") -> int:
        """Number of expected answer positions."""
        if self.type == QuestionType.FILL_BLANK:
            return self.prompt.count(blank_marker) if blank_marker else 0
        return 1


@dataclass(frozen=True)
class Verdict:
    """Graded outcome of one submission; replaced, never mutated."""
    question_id: str
    answers: Tuple[str, ...]
    correct: bool
    score: float
    feedback: str = ""
    confirmed: bool = False
    method: GradingMethod = GradingMethod.UNGRADED
    split_attempted: bool = False
    details: Dict[str, Any] = field(default_factory=dict, compare=False)
    graded_at: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self):
        if isinstance(self.answers, str):
            object.__setattr__(self, 'answers', (self.answers,))
        elif not isinstance(self.answers, tuple):
            object.__setattr__(self, 'answers', tuple(self.answers))

        if not isinstance(self.score, (int, float)) or not 0.0 <= self.score <= 1.0:
            raise ValidationError(
                f"Verdict score must be within [0, 1], got {self.score!r}",
                field_name="score",
                invalid_value=self.score
            )

    @property
    def answer(self) -> str:
        """Submitted answer text, blanks joined for readability."""
        return ANSWER_SEPARATOR.join(self.answers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'question_id': self.question_id,
            'answer': self.answer,
            'answers': list(self.answers),
            'correct': self.correct,
            'score': self.score,
            'feedback': self.feedback,
            'confirmed': self.confirmed,
            'method': self.method.value,
            'split_attempted': self.split_attempted,
            'details': self.details,
            'graded_at': self.graded_at.isoformat(),
        }
