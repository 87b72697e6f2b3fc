"""
Assessment Session

Submission entry point for one assessment: looks up the question, grades the
answer against the previous verdict (so reconciliation fires at most once),
records the result and produces the report on demand.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .confirmation import ConfirmationSweep, SweepResult
from .grader import AnswerGrader
from .metrics import AssessmentReport, MetricsCalculator
from .types import Question, Verdict
from ..core.config import AppConfig, get_config
from ..core.exceptions import EvaluationError, ValidationError
from ..judge.base import SemanticJudge
from ..storage.verdict_store import VerdictStore
from ..utils.logging import get_logger

logger = get_logger(__name__)


class AssessmentSession:
    """Questions, verdicts and grading for one candidate's assessment."""

    def __init__(self, questions: Sequence[Question], grader: Optional[AnswerGrader] = None,
                 judge: Optional[SemanticJudge] = None, config: Optional[AppConfig] = None):
        """
        Initialize the session.

        Args:
            questions: Questions in presentation order (ids must be unique)
            grader: Grader to use (built from config and judge if None)
            judge: Semantic judge for fallback and confirmation
            config: Application configuration
        """
        self.config = config or get_config()
        self.questions: List[Question] = list(questions)
        self._by_id: Dict[str, Question] = {}
        for question in self.questions:
            if question.id in self._by_id:
                raise ValidationError(f"Duplicate question id: {question.id}",
                                      field_name="id", invalid_value=question.id)
            self._by_id[question.id] = question

        self.grader = grader or AnswerGrader(self.config.grading, judge=judge,
                                             judge_timeout=self.config.judge.timeout_seconds)
        self.store = VerdictStore()
        self.metrics = MetricsCalculator(self.config.reporting)
        self._sweep: Optional[ConfirmationSweep] = None

    def question(self, question_id: str) -> Question:
        question = self._by_id.get(question_id)
        if question is None:
            raise EvaluationError(f"Unknown question id: {question_id}", question_id=question_id)
        return question

    def submit(self, question_id: str, answer: Any) -> Verdict:
        """Grade an answer locally and record the verdict."""
        question = self.question(question_id)
        verdict = self.grader.grade(question, answer, previous=self.store.get(question_id))
        return self.store.record(verdict)

    async def submit_async(self, question_id: str, answer: Any) -> Verdict:
        """Grade an answer, using the judge when no local ground truth exists."""
        question = self.question(question_id)
        verdict = await self.grader.grade_async(question, answer,
                                                previous=self.store.get(question_id))
        return self.store.record(verdict)

    def submit_all(self, answers: Mapping[str, Any]) -> List[Verdict]:
        """Submit a batch of answers in question order; unknown ids raise."""
        for question_id in answers:
            self.question(question_id)
        return [self.submit(q.id, answers[q.id]) for q in self.questions if q.id in answers]

    async def confirm_pending(self) -> SweepResult:
        """Run one confirmation sweep over the pending free-text verdicts."""
        self._sweep = ConfirmationSweep(self.grader, self._by_id, self.config.judge)
        try:
            return await self._sweep.run(self.store)
        finally:
            self._sweep = None

    async def cancel_confirmation(self) -> None:
        if self._sweep is not None:
            await self._sweep.cancel()

    def verdicts(self) -> Mapping[str, Verdict]:
        return self.store.snapshot()

    def report(self) -> AssessmentReport:
        """Metrics for the current verdict snapshot."""
        return self.metrics.calculate(self.questions, self.store.snapshot())
