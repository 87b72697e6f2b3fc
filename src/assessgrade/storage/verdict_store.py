"""
Verdict Store

In-memory verdicts keyed by question id. Writes never mutate the shared
mapping: each one builds a new dict and swaps the reference, so a snapshot
handed to a reader stays internally consistent.
"""

import asyncio
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Set

from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..evaluation.types import Verdict

logger = get_logger(__name__)


class VerdictStore:
    """Copy-on-write verdict map."""

    def __init__(self, verdicts: Optional[Mapping[str, 'Verdict']] = None):
        self._verdicts: Dict[str, 'Verdict'] = dict(verdicts or {})
        self._lock = asyncio.Lock()
        self._in_flight: Set[str] = set()

    def snapshot(self) -> Mapping[str, 'Verdict']:
        """Read-only view of the current mapping."""
        return MappingProxyType(self._verdicts)

    def get(self, question_id: str) -> Optional['Verdict']:
        return self._verdicts.get(question_id)

    def record(self, verdict: 'Verdict') -> 'Verdict':
        """Store the verdict of a new submission, replacing any earlier one."""
        updated = dict(self._verdicts)
        updated[verdict.question_id] = verdict
        self._verdicts = updated
        return verdict

    async def replace_if_current(self, current: 'Verdict', replacement: 'Verdict') -> bool:
        """
        Swap ``current`` for ``replacement`` if it is still the stored verdict.

        Returns False when a newer submission superseded ``current`` while
        the caller was working on it.
        """
        async with self._lock:
            if self._verdicts.get(current.question_id) is not current:
                logger.debug(f"Verdict for {current.question_id} superseded, dropping stale result")
                return False
            updated = dict(self._verdicts)
            updated[current.question_id] = replacement
            self._verdicts = updated
            return True

    def pending(self, question_ids: Optional[Iterable[str]] = None) -> List['Verdict']:
        """Unconfirmed verdicts not currently being confirmed, in insertion order."""
        wanted = set(question_ids) if question_ids is not None else None
        return [
            verdict for question_id, verdict in self._verdicts.items()
            if not verdict.confirmed
            and question_id not in self._in_flight
            and (wanted is None or question_id in wanted)
        ]

    def claim(self, question_id: str) -> bool:
        """Mark a verdict as in flight; False if another sweep holds it."""
        if question_id in self._in_flight:
            return False
        self._in_flight.add(question_id)
        return True

    def release(self, question_id: str) -> None:
        self._in_flight.discard(question_id)

    @property
    def in_flight(self) -> Set[str]:
        return set(self._in_flight)

    def __len__(self) -> int:
        return len(self._verdicts)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._verdicts
