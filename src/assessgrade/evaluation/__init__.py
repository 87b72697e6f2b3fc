"""
Evaluation Module

Answer evaluation engine: normalization, synonym grouping, similarity
scoring, multi-blank reconciliation, grading policies, confirmation and
metrics.
"""

from .types import Question, QuestionType, Verdict, GradingMethod
from .normalizer import normalize
from .grouper import build_groups, keyword_groups, Grouped, Flat
from .matcher import levenshtein, similarity, best_similarity, ReferenceMatcher, MatchResult, MatchType
from .splitter import MultiBlankSplitter
from .grader import AnswerGrader
from .metrics import MetricsCalculator, AssessmentReport, TopicMetric, TypeAccuracy, EvidenceItem
from .confirmation import ConfirmationSweep, SweepResult
from .session import AssessmentSession

__all__ = [
    "Question",
    "QuestionType",
    "Verdict",
    "GradingMethod",
    "normalize",
    "build_groups",
    "keyword_groups",
    "Grouped",
    "Flat",
    "levenshtein",
    "similarity",
    "best_similarity",
    "ReferenceMatcher",
    "MatchResult",
    "MatchType",
    "MultiBlankSplitter",
    "AnswerGrader",
    "MetricsCalculator",
    "AssessmentReport",
    "TopicMetric",
    "TypeAccuracy",
    "EvidenceItem",
    "ConfirmationSweep",
    "SweepResult",
    "AssessmentSession",
]
