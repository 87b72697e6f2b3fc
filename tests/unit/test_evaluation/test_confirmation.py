"""
Tests for Confirmation Sweep
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock, patch

from assessgrade.core.config import JudgeConfig
from assessgrade.core.exceptions import JudgeUnavailableError
from assessgrade.evaluation.confirmation import ConfirmationSweep
from assessgrade.evaluation.grader import AnswerGrader
from assessgrade.evaluation.types import GradingMethod, Question, QuestionType
from assessgrade.judge.gemini import GeminiJudge
from assessgrade.storage.verdict_store import VerdictStore


class TestConfirmationSweep:
    """Test cases for ConfirmationSweep."""

    @pytest.fixture
    def questions(self, sample_questions):
        return sample_questions

    @pytest.fixture
    def store(self):
        return VerdictStore()

    def _sweep(self, grader, questions):
        return ConfirmationSweep(grader, questions, JudgeConfig(max_concurrent=2))

    def _grade_all(self, grader, questions, store, answers):
        by_id = {q.id: q for q in questions}
        for question_id, answer in answers.items():
            store.record(grader.grade(by_id[question_id], answer))

    def test_select_skips_mcq(self, mock_judge, questions, store):
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store, {"q1": "B", "q2": "cache"})

        selected = self._sweep(grader, questions).select(store)

        assert [v.question_id for v in selected] == ["q2"]

    @pytest.mark.asyncio
    async def test_confirms_pending_verdicts(self, mock_judge, questions, store):
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store,
                        {"q1": "B", "q2": "cache", "q3": ["websockets", "bootstrap"]})

        result = await self._sweep(grader, questions).run(store)

        assert sorted(result.confirmed) == ["q2", "q3"]
        assert result.processed == 2
        assert store.get("q2").confirmed
        assert store.get("q2").method == GradingMethod.JUDGE
        assert not store.get("q1").confirmed
        assert mock_judge.evaluate.await_count == 2
        assert store.in_flight == set()

    @pytest.mark.asyncio
    async def test_failed_judge_is_not_retried(self, mock_judge, questions, store):
        mock_judge.evaluate = AsyncMock(side_effect=JudgeUnavailableError("down"))
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store, {"q2": "cache"})

        first = await self._sweep(grader, questions).run(store)
        second = await self._sweep(grader, questions).run(store)

        assert first.failed == ["q2"]
        assert second.processed == 0
        assert mock_judge.evaluate.await_count == 1
        verdict = store.get("q2")
        assert verdict.confirmed
        assert verdict.score == 0.0
        assert verdict.feedback == "Evaluation failed."

    @pytest.mark.asyncio
    async def test_unexpected_judge_exception_is_not_retried(self, mock_judge, questions, store):
        mock_judge.evaluate = AsyncMock(side_effect=ValueError("unexpected payload"))
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store, {"q2": "cache"})

        first = await self._sweep(grader, questions).run(store)
        second = await self._sweep(grader, questions).run(store)

        assert first.failed == ["q2"]
        assert second.processed == 0
        assert mock_judge.evaluate.await_count == 1
        verdict = store.get("q2")
        assert verdict.confirmed
        assert not verdict.correct
        assert verdict.score == 0.0
        assert verdict.details["error"] == "ValueError: unexpected payload"

    @pytest.mark.asyncio
    async def test_undecodable_judge_body_is_not_retried(self, questions, store):
        judge = GeminiJudge(api_key="test-key", config=JudgeConfig(requests_per_minute=0))
        response = Mock()
        response.status = 200
        response.text = AsyncMock(
            side_effect=UnicodeDecodeError('utf-8', b'\xff', 0, 1, 'invalid start byte')
        )
        session = MagicMock()
        session.post.return_value.__aenter__ = AsyncMock(return_value=response)
        session.post.return_value.__aexit__ = AsyncMock(return_value=None)

        grader = AnswerGrader(judge=judge)
        self._grade_all(grader, questions, store, {"q2": "cache"})

        with patch.object(judge, '_ensure_session', return_value=session):
            first = await self._sweep(grader, questions).run(store)
            second = await self._sweep(grader, questions).run(store)

        assert first.failed == ["q2"]
        assert second.processed == 0
        assert session.post.call_count == 1
        verdict = store.get("q2")
        assert verdict.confirmed
        assert not verdict.correct
        assert verdict.score == 0.0
        assert verdict.feedback == "Evaluation failed."

    @pytest.mark.asyncio
    async def test_superseded_verdict_not_overwritten(self, mock_judge, questions, store):
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store, {"q2": "cache"})
        question = next(q for q in questions if q.id == "q2")
        judge_verdict = mock_judge.evaluate.return_value

        async def resubmit(*args, **kwargs):
            store.record(grader.grade(question, "caching at the edge"))
            return judge_verdict

        mock_judge.evaluate = AsyncMock(side_effect=resubmit)
        result = await self._sweep(grader, questions).run(store)

        assert result.superseded == ["q2"]
        verdict = store.get("q2")
        assert not verdict.confirmed
        assert verdict.answers == ("caching at the edge",)

    @pytest.mark.asyncio
    async def test_cancel_leaves_verdicts_unconfirmed(self, mock_judge, questions, store):
        started = asyncio.Event()

        async def hang(*args, **kwargs):
            started.set()
            await asyncio.sleep(10)

        mock_judge.evaluate = AsyncMock(side_effect=hang)
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store, {"q2": "cache"})
        sweep = self._sweep(grader, questions)

        run_task = asyncio.create_task(sweep.run(store))
        await asyncio.wait_for(started.wait(), timeout=1)
        await sweep.cancel()
        result = await run_task

        assert result.cancelled == ["q2"]
        assert not store.get("q2").confirmed
        assert store.in_flight == set()

    @pytest.mark.asyncio
    async def test_without_judge_does_nothing(self, questions, store):
        grader = AnswerGrader()
        self._grade_all(grader, questions, store, {"q2": "cache"})

        result = await self._sweep(grader, questions).run(store)

        assert result.processed == 0
        assert not store.get("q2").confirmed

    @pytest.mark.asyncio
    async def test_claimed_verdicts_are_skipped(self, mock_judge, questions, store):
        grader = AnswerGrader(judge=mock_judge)
        self._grade_all(grader, questions, store, {"q2": "cache"})
        store.claim("q2")

        result = await self._sweep(grader, questions).run(store)

        assert result.processed == 0
        mock_judge.evaluate.assert_not_awaited()

    def test_questions_accept_mapping(self, mock_judge):
        question = Question(id="x", type=QuestionType.ONE_LINER, topic="T", prompt="p")
        sweep = ConfirmationSweep(AnswerGrader(judge=mock_judge), {"x": question})
        assert sweep.questions == {"x": question}
