"""
Metrics Calculator

Rolls the current verdict set up into per-topic and per-type statistics,
the overall score and strength/weakness classifications. Everything here is
derived on demand from questions plus verdicts; nothing is stored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .types import Question, QuestionType, Verdict, round_half_up
from ..core.config import ReportingConfig, get_config
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EvidenceItem:
    """One graded answer shown under its topic."""
    question_text: str
    given_answer: str
    feedback: str
    score: float
    correct: bool


@dataclass
class TopicMetric:
    """Per-topic rollup."""
    topic: str
    total_questions: int = 0
    correct_count: int = 0
    percentage: int = 0
    evidence: List[EvidenceItem] = field(default_factory=list)


@dataclass
class TypeAccuracy:
    """Percentage of correct answers per question type."""
    mcq: int = 0
    one_liner: int = 0
    fill_blank: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            QuestionType.MCQ.value: self.mcq,
            QuestionType.ONE_LINER.value: self.one_liner,
            QuestionType.FILL_BLANK.value: self.fill_blank,
        }


@dataclass
class AssessmentReport:
    """Complete set of assessment metrics."""
    topics: List[TopicMetric]
    type_accuracy: TypeAccuracy
    overall_score: int
    strengths: List[str]
    weaknesses: List[str]
    answered_count: int
    total_questions: int
    weighted_score: float
    score_interval: Optional[Tuple[float, float]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class MetricsCalculator:
    """Calculates assessment metrics from questions and verdicts."""

    def __init__(self, config: Optional[ReportingConfig] = None):
        """
        Initialize metrics calculator.

        Args:
            config: Classification thresholds (application config if None)
        """
        self.config = config or get_config().reporting

    def calculate(self, questions: Sequence[Question],
                  verdicts: Mapping[str, Verdict]) -> AssessmentReport:
        """
        Calculate the full report for the current verdict snapshot.

        Args:
            questions: All questions of the assessment
            verdicts: Verdicts keyed by question id (unanswered ids absent)

        Returns:
            AssessmentReport
        """
        topics = self.topic_metrics(questions, verdicts)
        answered = [(q, verdicts[q.id]) for q in questions if q.id in verdicts]

        report = AssessmentReport(
            topics=topics,
            type_accuracy=self.type_accuracy(questions, verdicts),
            overall_score=self.overall_score(topics),
            strengths=self.strengths(topics),
            weaknesses=self.weaknesses(topics),
            answered_count=len(answered),
            total_questions=len(questions),
            weighted_score=self._weighted_score(answered),
            score_interval=self._score_interval([v.score for _, v in answered]),
            metadata={
                'confirmed_count': sum(1 for _, v in answered if v.confirmed),
            }
        )

        logger.debug(f"Report: {report.answered_count}/{report.total_questions} answered, "
                     f"overall {report.overall_score}%")
        return report

    def topic_metrics(self, questions: Sequence[Question],
                      verdicts: Mapping[str, Verdict]) -> List[TopicMetric]:
        """Per-topic metrics in order of first appearance; percentage from mean score."""
        by_topic: Dict[str, TopicMetric] = {}
        score_sums: Dict[str, float] = {}

        for question in questions:
            verdict = verdicts.get(question.id)
            if verdict is None:
                continue

            metric = by_topic.get(question.topic)
            if metric is None:
                metric = by_topic[question.topic] = TopicMetric(topic=question.topic)
                score_sums[question.topic] = 0.0

            metric.total_questions += 1
            if verdict.correct:
                metric.correct_count += 1
            score_sums[question.topic] += verdict.score
            metric.evidence.append(EvidenceItem(
                question_text=question.prompt,
                given_answer=verdict.answer,
                feedback=verdict.feedback or '',
                score=verdict.score,
                correct=verdict.correct
            ))

        for topic, metric in by_topic.items():
            mean_score = score_sums[topic] / metric.total_questions
            metric.percentage = round_half_up(100 * mean_score)

        return list(by_topic.values())

    @staticmethod
    def overall_score(topics: Sequence[TopicMetric]) -> int:
        """Mean of topic percentages, rounded half-up; 0 without topics."""
        if not topics:
            return 0
        return round_half_up(sum(t.percentage for t in topics) / len(topics))

    def strengths(self, topics: Sequence[TopicMetric]) -> List[str]:
        return [t.topic for t in topics if t.percentage >= self.config.strength_threshold]

    def weaknesses(self, topics: Sequence[TopicMetric]) -> List[str]:
        return [t.topic for t in topics if t.percentage < self.config.weakness_threshold]

    @staticmethod
    def type_accuracy(questions: Sequence[Question],
                      verdicts: Mapping[str, Verdict]) -> TypeAccuracy:
        """Percentage of correct verdicts per type; 0 for a type with no answers."""
        counts = {qtype: [0, 0] for qtype in QuestionType}
        for question in questions:
            verdict = verdicts.get(question.id)
            if verdict is None:
                continue
            counts[question.type][0] += 1
            if verdict.correct:
                counts[question.type][1] += 1

        def pct(qtype: QuestionType) -> int:
            total, correct = counts[qtype]
            return round_half_up(100 * correct / total) if total else 0

        return TypeAccuracy(
            mcq=pct(QuestionType.MCQ),
            one_liner=pct(QuestionType.ONE_LINER),
            fill_blank=pct(QuestionType.FILL_BLANK)
        )

    @staticmethod
    def _weighted_score(answered: Sequence[Tuple[Question, Verdict]]) -> float:
        """Marks-weighted mean score as a percentage."""
        total_marks = sum(q.marks for q, _ in answered)
        if total_marks <= 0:
            return 0.0
        weighted = sum(q.marks * v.score for q, v in answered)
        return round(100 * weighted / total_marks, 1)

    def _score_interval(self, scores: Sequence[float]) -> Optional[Tuple[float, float]]:
        """95% normal-approximation interval on the mean score, in percent."""
        if len(scores) <= self.config.min_interval_sample:
            return None

        values = np.asarray(scores, dtype=float)
        mean = float(values.mean())
        z_score = 1.96  # 95% confidence
        margin_of_error = z_score * float(values.std(ddof=1)) / np.sqrt(len(values))
        return (
            round(100 * max(0.0, mean - margin_of_error), 1),
            round(100 * min(1.0, mean + margin_of_error), 1)
        )
