"""
Tests for Verdict Store
"""

import pytest

from assessgrade.evaluation.types import Verdict
from assessgrade.storage.verdict_store import VerdictStore


def make_verdict(qid="q1", score=0.5, confirmed=False, answer="a"):
    return Verdict(question_id=qid, answers=(answer,), correct=score >= 0.8,
                   score=score, confirmed=confirmed)


class TestVerdictStore:
    """Test cases for VerdictStore."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = VerdictStore()

    def test_record_and_get(self):
        verdict = self.store.record(make_verdict())
        assert self.store.get("q1") is verdict
        assert "q1" in self.store
        assert len(self.store) == 1
        assert self.store.get("missing") is None

    def test_snapshot_is_stable_and_read_only(self):
        first = self.store.record(make_verdict(answer="first"))
        snapshot = self.store.snapshot()

        self.store.record(make_verdict(answer="second"))

        assert snapshot["q1"] is first
        assert self.store.get("q1").answers == ("second",)
        with pytest.raises(TypeError):
            snapshot["q2"] = make_verdict("q2")

    @pytest.mark.asyncio
    async def test_replace_if_current(self):
        current = self.store.record(make_verdict())
        replacement = make_verdict(score=1.0, confirmed=True)

        assert await self.store.replace_if_current(current, replacement)
        assert self.store.get("q1") is replacement

    @pytest.mark.asyncio
    async def test_replace_rejects_superseded(self):
        stale = self.store.record(make_verdict(answer="old"))
        newer = self.store.record(make_verdict(answer="new"))

        replaced = await self.store.replace_if_current(stale, make_verdict(confirmed=True))

        assert not replaced
        assert self.store.get("q1") is newer

    @pytest.mark.asyncio
    async def test_replace_uses_identity_not_equality(self):
        stale = self.store.record(make_verdict())
        self.store.record(make_verdict())

        assert not await self.store.replace_if_current(stale, make_verdict(confirmed=True))

    def test_pending_excludes_confirmed_and_in_flight(self):
        self.store.record(make_verdict("q1"))
        self.store.record(make_verdict("q2", confirmed=True))
        self.store.record(make_verdict("q3"))

        assert [v.question_id for v in self.store.pending()] == ["q1", "q3"]

        assert self.store.claim("q1")
        assert [v.question_id for v in self.store.pending()] == ["q3"]
        assert [v.question_id for v in self.store.pending(["q1", "q2"])] == []

    def test_claim_and_release(self):
        assert self.store.claim("q1")
        assert not self.store.claim("q1")
        assert self.store.in_flight == {"q1"}

        self.store.release("q1")
        self.store.release("q1")
        assert self.store.in_flight == set()

    def test_initial_verdicts_copied(self):
        initial = {"q1": make_verdict()}
        store = VerdictStore(initial)
        store.record(make_verdict("q2"))
        assert "q2" not in initial
