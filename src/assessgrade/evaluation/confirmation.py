"""
Confirmation Sweep

Asynchronous, at-most-once judge pass over unconfirmed free-text verdicts.
Each pending verdict gets its own named task; results are written back only
if the verdict the task started from is still the stored one.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .grader import AnswerGrader
from .types import Question, QuestionType, Verdict
from ..core.config import JudgeConfig, get_config
from ..storage.verdict_store import VerdictStore
from ..utils.async_helpers import cancel_tasks, create_task_with_name
from ..utils.logging import PerformanceTimer, get_logger

logger = get_logger(__name__)

CONFIRMABLE_TYPES = (QuestionType.ONE_LINER, QuestionType.FILL_BLANK)


@dataclass
class SweepResult:
    """Outcome counts of one sweep."""
    confirmed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    superseded: List[str] = field(default_factory=list)
    cancelled: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def processed(self) -> int:
        return len(self.confirmed) + len(self.failed) + len(self.superseded) + len(self.cancelled)


class ConfirmationSweep:
    """Runs the judge once over every pending oneLiner/fillBlank verdict."""

    def __init__(self, grader: AnswerGrader,
                 questions: Union[Sequence[Question], Mapping[str, Question]],
                 config: Optional[JudgeConfig] = None):
        """
        Initialize the sweep.

        Args:
            grader: Grader holding the semantic judge
            questions: Questions of the assessment (list or id mapping)
            config: Judge settings (application config if None)
        """
        self.grader = grader
        if isinstance(questions, Mapping):
            self.questions: Dict[str, Question] = dict(questions)
        else:
            self.questions = {q.id: q for q in questions}
        self.config = config or get_config().judge
        self._tasks: List[asyncio.Task] = []

    def select(self, store: VerdictStore) -> List[Verdict]:
        """Pending verdicts eligible for confirmation."""
        return [
            verdict for verdict in store.pending()
            if verdict.question_id in self.questions
            and self.questions[verdict.question_id].type in CONFIRMABLE_TYPES
        ]

    async def run(self, store: VerdictStore) -> SweepResult:
        """
        Confirm all eligible verdicts concurrently.

        Returns:
            SweepResult listing question ids per outcome
        """
        result = SweepResult()
        if self.grader.judge is None:
            logger.warning("No semantic judge configured, skipping confirmation sweep")
            return result

        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent))
        claimed: List[Verdict] = []
        for verdict in self.select(store):
            if store.claim(verdict.question_id):
                claimed.append(verdict)

        if not claimed:
            return result

        with PerformanceTimer(f"confirmation sweep of {len(claimed)} verdict(s)", logger) as timer:
            self._tasks = [
                create_task_with_name(
                    self._confirm_one(store, verdict, semaphore),
                    f"confirm-{verdict.question_id}"
                )
                for verdict in claimed
            ]
            outcomes = await asyncio.gather(*self._tasks, return_exceptions=True)

        for verdict, outcome in zip(claimed, outcomes):
            question_id = verdict.question_id
            if isinstance(outcome, asyncio.CancelledError):
                result.cancelled.append(question_id)
            elif isinstance(outcome, BaseException):
                logger.error(f"Confirmation of {question_id} raised: {outcome}")
                result.failed.append(question_id)
            else:
                getattr(result, outcome).append(question_id)

        self._tasks = []
        result.duration_seconds = timer.duration
        logger.info(f"Sweep done: {len(result.confirmed)} confirmed, {len(result.failed)} failed, "
                    f"{len(result.superseded)} superseded, {len(result.cancelled)} cancelled")
        return result

    async def _confirm_one(self, store: VerdictStore, verdict: Verdict,
                           semaphore: asyncio.Semaphore) -> str:
        question = self.questions[verdict.question_id]
        try:
            async with semaphore:
                confirmed = await self.grader.confirm(question, verdict)
            if not await store.replace_if_current(verdict, confirmed):
                return 'superseded'
            return 'failed' if 'error' in confirmed.details else 'confirmed'
        finally:
            store.release(verdict.question_id)

    async def cancel(self) -> None:
        """Cancel outstanding judge calls; their verdicts stay unconfirmed."""
        if self._tasks:
            logger.info(f"Cancelling {sum(1 for t in self._tasks if not t.done())} confirmation task(s)")
        await cancel_tasks(self._tasks)
