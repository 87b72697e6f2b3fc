"""
Answer Matching System

Lexical similarity scoring (Levenshtein edit distance) and the deterministic
reference matcher used when a question carries an explicit answer key.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Sequence

import Levenshtein

from .normalizer import normalize, strip_non_alnum
from ..utils.logging import get_logger

logger = get_logger(__name__)


class MatchType(str, Enum):
    """Types of reference matching strategies."""
    ALNUM = "alnum"              # equal after stripping all non-alphanumerics
    NORMALIZED = "normalized"    # equal after general normalization
    NUMERIC = "numeric"          # both parse as numbers within epsilon
    NONE = "none"


@dataclass
class MatchResult:
    """Result of reference matching."""
    is_match: bool
    confidence: float
    match_type: MatchType
    details: Dict[str, Any]
    normalized_answer: str
    normalized_expected: str


def levenshtein(a: str, b: str) -> int:
    """
    Classic edit distance with unit cost for substitution, insertion and deletion.

    >>> levenshtein("kitten", "sitting")
    3
    """
    return Levenshtein.distance(a or "", b or "")


def similarity(a: str, b: str) -> float:
    """Bounded closeness in [0, 1]: 1 - distance / max length."""
    a = a or ""
    b = b or ""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    distance = levenshtein(a, b)
    return max(0.0, 1.0 - distance / max(len(a), len(b)))


def best_similarity(answer: str, groups: Iterable[Sequence[str]],
                    case_sensitive: bool = False) -> float:
    """Maximum similarity between the normalized answer and any synonym of any group."""
    normalized = normalize(answer, case_sensitive)
    best = 0.0
    for group in groups or []:
        for synonym in group:
            best = max(best, similarity(normalized, synonym))
    return best


def parse_number(text: Optional[str]) -> Optional[float]:
    """Parse a finite number, or None when the text is not numeric."""
    if text is None:
        return None
    try:
        value = float(str(text).strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


class ReferenceMatcher:
    """Deterministic comparison against an explicit reference value."""

    def __init__(self, numeric_epsilon: float = 1e-6, case_sensitive: bool = False):
        """
        Initialize the reference matcher.

        Args:
            numeric_epsilon: Absolute tolerance for numeric equality
            case_sensitive: Keep casing in general normalization
        """
        self.numeric_epsilon = numeric_epsilon
        self.case_sensitive = case_sensitive

    def match(self, answer: Optional[str], reference: Optional[str]) -> MatchResult:
        """
        Match an answer against a reference value.

        Tries, in order: alnum-stripped equality (tolerates date and number
        formatting such as "23-July-2025" vs "23 July 2025"), general
        normalization equality, then numeric equality within epsilon.
        """
        norm_answer = normalize(answer, self.case_sensitive)
        norm_expected = normalize(reference, self.case_sensitive)

        if not answer or not answer.strip() or not reference or not reference.strip():
            return self._result(False, MatchType.NONE, norm_answer, norm_expected,
                                {'error': 'Empty answer or reference'})

        alnum_answer = strip_non_alnum(answer)
        alnum_expected = strip_non_alnum(reference)
        if alnum_answer and alnum_answer == alnum_expected:
            return self._result(True, MatchType.ALNUM, norm_answer, norm_expected,
                                {'alnum': alnum_answer})

        if norm_answer and norm_answer == norm_expected:
            return self._result(True, MatchType.NORMALIZED, norm_answer, norm_expected, {})

        number_answer = parse_number(answer)
        number_expected = parse_number(reference)
        if number_answer is not None and number_expected is not None:
            difference = abs(number_answer - number_expected)
            if difference <= self.numeric_epsilon:
                return self._result(True, MatchType.NUMERIC, norm_answer, norm_expected,
                                    {'difference': difference})

        return self._result(False, MatchType.NONE, norm_answer, norm_expected,
                            {'similarity': similarity(norm_answer, norm_expected)})

    @staticmethod
    def _result(is_match: bool, match_type: MatchType, norm_answer: str,
                norm_expected: str, details: Dict[str, Any]) -> MatchResult:
        return MatchResult(
            is_match=is_match,
            confidence=1.0 if is_match else details.get('similarity', 0.0),
            match_type=match_type,
            details=details,
            normalized_answer=norm_answer,
            normalized_expected=norm_expected
        )
