"""
Answer Grading System

Dispatches a submitted answer to the scoring policy of its question type:
binary answer-key comparison for mcq, keyword-group closeness for one-liners,
per-blank matching for fill-in-the-blank, a deterministic reference check
when only an explicit answer key exists, and the external semantic judge as
fallback and confirmation pass.
"""

import asyncio
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .grouper import Groups, build_groups, flatten_groups, keyword_groups
from .matcher import ReferenceMatcher, best_similarity
from .normalizer import normalize, strip_whitespace
from .splitter import MultiBlankSplitter
from .types import (
    ANSWER_SEPARATOR, GradingMethod, Question, QuestionType, Verdict,
    clamp01, round_half_up
)
from ..core.config import GradingConfig, get_config
from ..core.exceptions import JudgeError
from ..judge.base import SemanticJudge
from ..utils.logging import get_logger, get_question_logger

logger = get_logger(__name__)

NO_GROUND_TRUTH_FEEDBACK = "No ground truth configured for this question."
NO_KEYWORDS_FEEDBACK = "No keywords configured for this question."
NO_BLANKS_FEEDBACK = "No blanks configured."
JUDGE_FAILED_FEEDBACK = "Evaluation failed."


def _coerce_answers(answer: Any) -> Tuple[str, ...]:
    if answer is None:
        return ("",)
    if isinstance(answer, str):
        return (answer,)
    values = tuple('' if value is None else str(value) for value in answer)
    return values or ("",)


class AnswerGrader:
    """Grades submissions per question type with an optional judge fallback."""

    def __init__(self, config: Optional[GradingConfig] = None,
                 judge: Optional[SemanticJudge] = None,
                 judge_timeout: Optional[float] = None):
        """
        Initialize the answer grader.

        Args:
            config: Grading thresholds and weights (application config if None)
            judge: Semantic judge for fallback and confirmation
            judge_timeout: Seconds allowed per judge call
        """
        app_config = get_config()
        self.config = config or app_config.grading
        self.judge = judge
        self.judge_timeout = judge_timeout if judge_timeout is not None else app_config.judge.timeout_seconds

        self.reference_matcher = ReferenceMatcher(numeric_epsilon=self.config.numeric_epsilon)
        self.splitter = MultiBlankSplitter()

        self.grading_stats = {
            'total_graded': 0,
            'correct_count': 0,
            'judge_calls': 0,
            'judge_failures': 0,
            'method_distribution': {},
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def grade(self, question: Question, answer: Any,
              previous: Optional[Verdict] = None) -> Verdict:
        """
        Grade one submission locally.

        Args:
            question: Question being answered
            answer: Submitted text, or a list of per-blank values
            previous: Prior verdict for this question, if any

        Returns:
            Unconfirmed Verdict
        """
        answers = _coerce_answers(answer)

        if question.type == QuestionType.MCQ:
            verdict = self._grade_mcq(question, answers)
        elif question.type == QuestionType.ONE_LINER:
            verdict = self._grade_one_liner(question, answers)
        elif question.type == QuestionType.FILL_BLANK:
            verdict = self._grade_fill_blank(question, answers, previous)
        else:
            verdict = self._ungraded(question, answers)

        self._update_stats(verdict)
        get_question_logger(question.id, question.type.value).debug(
            f"Graded via {verdict.method.value}: score={verdict.score:.3f}, correct={verdict.correct}"
        )
        return verdict

    async def grade_async(self, question: Question, answer: Any,
                          previous: Optional[Verdict] = None) -> Verdict:
        """
        Grade one submission, asking the judge when no local ground truth exists.

        The judge verdict is final (confirmed); a failed judge call yields a
        confirmed-failed verdict.
        """
        if self.judge is None or self.has_local_ground_truth(question):
            return self.grade(question, answer, previous)

        answers = _coerce_answers(answer)
        split_attempted = bool(previous and previous.split_attempted)
        verdict = await self._judge_verdict(question, answers, split_attempted)
        self._update_stats(verdict)
        return verdict

    async def confirm(self, question: Question, verdict: Verdict) -> Verdict:
        """
        Run the confirmation pass on an unconfirmed verdict.

        Returns the verdict unchanged when it is already confirmed or no
        judge is configured. Cancellation propagates and leaves the verdict
        unconfirmed.
        """
        if verdict.confirmed or self.judge is None:
            return verdict

        confirmed = await self._judge_verdict(
            question, verdict.answers, verdict.split_attempted,
            local_score=verdict.score
        )
        self._update_stats(confirmed)
        return confirmed

    def has_local_ground_truth(self, question: Question) -> bool:
        """Whether the question can be graded without the judge."""
        if question.type == QuestionType.MCQ:
            return bool(self._reference(question))
        if question.type == QuestionType.ONE_LINER:
            return bool(self._keyword_groups(question) or self._reference(question))
        if question.type == QuestionType.FILL_BLANK:
            slots = question.slot_count(self.config.blank_marker)
            if slots == 0:
                return True
            return any(self._blank_groups(question, slots)) or bool(self._reference(question))
        return False

    def accepted_answers_for(self, question: Question) -> List[str]:
        """Accepted answers forwarded to the judge: group synonyms, extras, reference."""
        if question.type == QuestionType.ONE_LINER:
            groups = self._keyword_groups(question)
        elif question.type == QuestionType.FILL_BLANK:
            groups = self._blank_groups(question, question.slot_count(self.config.blank_marker))
        else:
            groups = []

        accepted = flatten_groups(groups)
        for extra in list(question.accepted_answers) + [self._reference(question)]:
            if extra and extra not in accepted:
                accepted.append(extra)
        return accepted

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def _grade_mcq(self, question: Question, answers: Tuple[str, ...]) -> Verdict:
        """Binary comparison of the selected option against the key."""
        key = self._reference(question)
        if not key:
            return self._ungraded(question, answers)

        selected = answers[0].strip().lower()
        correct = selected == key.strip().lower()
        return Verdict(
            question_id=question.id,
            answers=answers,
            correct=correct,
            score=1.0 if correct else 0.0,
            feedback="Correct!" if correct else f"Expected: {key}",
            method=GradingMethod.ANSWER_KEY
        )

    def _grade_one_liner(self, question: Question, answers: Tuple[str, ...]) -> Verdict:
        """Keyword-group coverage blended with the best lexical similarity."""
        groups = self._keyword_groups(question)
        if not groups:
            if self._reference(question):
                return self._grade_reference(question, answers)
            return self._ungraded(question, answers, NO_KEYWORDS_FEEDBACK)

        text = ' '.join(a for a in answers if a).strip()
        normalized = normalize(text, question.case_sensitive)

        missing = [group for group in groups if not self._group_hit(normalized, group)]
        group_fraction = (len(groups) - len(missing)) / len(groups)
        best_sim = best_similarity(text, groups, question.case_sensitive)

        combined = clamp01(self.config.group_weight * group_fraction +
                           self.config.lexical_weight * best_sim)
        score = round(combined, 3)

        if combined == 1:
            feedback = "Great! Closeness: 100%"
        else:
            limit = self.config.max_feedback_synonyms
            feedback = f"Closeness: {round_half_up(combined * 100)}%. "
            if missing:
                terms = ', '.join('/'.join(group[:limit]) for group in missing)
                feedback += f"Missing required term(s): {terms}. "
            feedback += (
                f"(group match {round_half_up(group_fraction * 100)}%, "
                f"best lexical similarity {round_half_up(best_sim * 100)}%)"
            )

        return Verdict(
            question_id=question.id,
            answers=answers,
            correct=combined >= self.config.correct_threshold,
            score=score,
            feedback=feedback,
            method=GradingMethod.KEYWORDS,
            details={
                'group_match_fraction': group_fraction,
                'best_similarity': best_sim,
                'combined': combined,
                'matched_groups': len(groups) - len(missing),
                'total_groups': len(groups),
            }
        )

    def _grade_fill_blank(self, question: Question, answers: Tuple[str, ...],
                          previous: Optional[Verdict]) -> Verdict:
        """Per-blank matching with one-time single-input reconciliation."""
        slots = question.slot_count(self.config.blank_marker)
        already_split = bool(previous and previous.split_attempted)

        if slots == 0:
            return Verdict(
                question_id=question.id,
                answers=answers,
                correct=False,
                score=0.0,
                feedback=NO_BLANKS_FEEDBACK,
                method=GradingMethod.BLANKS,
                split_attempted=already_split
            )

        groups = self._blank_groups(question, slots)
        if not any(groups):
            if self._reference(question):
                verdict = self._grade_reference(question, answers)
            else:
                verdict = self._ungraded(question, answers)
            return self._with_split_flag(verdict, already_split)

        result = self.splitter.reconcile(answers, slots, split_attempted=already_split)
        values = result.answers

        matched = 0
        slot_details = []
        missing = []
        for index, (value, group) in enumerate(zip(values, groups)):
            ok = self._blank_matches(value, group, question.case_sensitive)
            slot_details.append({'ok': ok, 'given': value, 'expected': list(group)})
            if ok:
                matched += 1
            elif group:
                missing.append('/'.join(group[:self.config.max_feedback_synonyms]))
            else:
                missing.append(f"blank {index + 1}")

        score = matched / slots
        if score == 1:
            feedback = "Correct!"
        else:
            feedback = f"Matched {matched}/{slots}. Missing: {', '.join(missing)}"

        return Verdict(
            question_id=question.id,
            answers=tuple(values),
            correct=score >= self.config.correct_threshold,
            score=score,
            feedback=feedback,
            method=GradingMethod.BLANKS,
            split_attempted=already_split or result.split_performed,
            details={'matched': matched, 'total': slots, 'slots': slot_details}
        )

    def _grade_reference(self, question: Question, answers: Tuple[str, ...]) -> Verdict:
        """Deterministic check against the explicit answer key."""
        reference = self._reference(question)
        answer = ANSWER_SEPARATOR.join(a for a in answers if a)
        result = self.reference_matcher.match(answer, reference)
        return Verdict(
            question_id=question.id,
            answers=answers,
            correct=result.is_match,
            score=1.0 if result.is_match else 0.0,
            feedback="Correct!" if result.is_match else f'Expected similar to "{reference}"',
            method=GradingMethod.REFERENCE,
            details={'match_type': result.match_type.value, **result.details}
        )

    def _ungraded(self, question: Question, answers: Tuple[str, ...],
                  feedback: str = NO_GROUND_TRUTH_FEEDBACK) -> Verdict:
        """Valid zero-score outcome for questions without ground truth."""
        return Verdict(
            question_id=question.id,
            answers=answers,
            correct=False,
            score=0.0,
            feedback=feedback,
            method=GradingMethod.UNGRADED
        )

    # ------------------------------------------------------------------
    # Judge
    # ------------------------------------------------------------------

    async def _judge_verdict(self, question: Question, answers: Tuple[str, ...],
                             split_attempted: bool,
                             local_score: Optional[float] = None) -> Verdict:
        """Call the judge once; any transport, parse or timeout failure is final."""
        qlogger = get_question_logger(question.id, question.type.value)
        answer = ANSWER_SEPARATOR.join(answers)
        details: Dict[str, Any] = {}
        if local_score is not None:
            details['local_score'] = local_score

        self.grading_stats['judge_calls'] += 1
        try:
            result = await asyncio.wait_for(
                self.judge.evaluate(question, answer, self.accepted_answers_for(question)),
                timeout=self.judge_timeout
            )
        except (JudgeError, asyncio.TimeoutError) as e:
            self.grading_stats['judge_failures'] += 1
            qlogger.warning(f"Judge evaluation failed: {type(e).__name__}: {e}")
            return self._judge_failed(question, answers, split_attempted,
                                      {**details, 'error': str(e) or type(e).__name__})
        except Exception as e:
            self.grading_stats['judge_failures'] += 1
            qlogger.error(f"Judge raised unexpectedly: {type(e).__name__}: {e}")
            return self._judge_failed(question, answers, split_attempted,
                                      {**details, 'error': f"{type(e).__name__}: {e}"})

        details['judge_model'] = result.model_id
        return Verdict(
            question_id=question.id,
            answers=answers,
            correct=result.correct,
            score=clamp01(result.score),
            feedback=result.feedback,
            confirmed=True,
            method=GradingMethod.JUDGE,
            split_attempted=split_attempted,
            details=details
        )

    def _judge_failed(self, question: Question, answers: Tuple[str, ...],
                      split_attempted: bool, details: Dict[str, Any]) -> Verdict:
        return Verdict(
            question_id=question.id,
            answers=answers,
            correct=False,
            score=0.0,
            feedback=JUDGE_FAILED_FEEDBACK,
            confirmed=True,
            method=GradingMethod.JUDGE,
            split_attempted=split_attempted,
            details=details
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _reference(question: Question) -> Optional[str]:
        key = question.answer_key
        if key is None:
            return None
        key = str(key).strip()
        return key or None

    def _keyword_groups(self, question: Question) -> Groups:
        return keyword_groups(question.keywords, question.case_sensitive)

    def _blank_groups(self, question: Question, slots: int) -> Groups:
        return build_groups(question.acceptable, slots, question.case_sensitive)

    @staticmethod
    def _group_hit(normalized_answer: str, group: Sequence[str]) -> bool:
        return bool(normalized_answer) and any(s and s in normalized_answer for s in group)

    @staticmethod
    def _blank_matches(value: str, group: Sequence[str], case_sensitive: bool) -> bool:
        """Exact, then whitespace-insensitive, then containment either way."""
        answer = normalize(value, case_sensitive)
        if not answer or not group:
            return False

        answer_compact = strip_whitespace(answer)
        for accepted in group:
            if not accepted:
                continue
            if accepted == answer:
                return True
            if strip_whitespace(accepted) == answer_compact:
                return True
            if accepted in answer or answer in accepted:
                return True
        return False

    @staticmethod
    def _with_split_flag(verdict: Verdict, split_attempted: bool) -> Verdict:
        if not split_attempted or verdict.split_attempted:
            return verdict
        return replace(verdict, split_attempted=True)

    def _update_stats(self, verdict: Verdict) -> None:
        self.grading_stats['total_graded'] += 1
        if verdict.correct:
            self.grading_stats['correct_count'] += 1
        distribution = self.grading_stats['method_distribution']
        distribution[verdict.method.value] = distribution.get(verdict.method.value, 0) + 1

    def get_grading_statistics(self) -> Dict[str, Any]:
        """Get grading statistics."""
        stats = dict(self.grading_stats)
        total = stats['total_graded']
        stats['accuracy_rate'] = stats['correct_count'] / total if total else 0.0
        return stats
