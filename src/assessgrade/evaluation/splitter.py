"""
Multi-Blank Splitter

Redistributes a single combined input ("websockets, tailwind css") across
the blanks of a fill-in-the-blank question. The same separator heuristic
is used by the grouper to split a single flat ground-truth string.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..utils.logging import get_logger

logger = get_logger(__name__)

# comma, semicolon, slash, or the word "and"
SEPARATOR_PATTERN = re.compile(r"\s*[,;/]\s*|\s+and\s+", re.IGNORECASE)


def split_on_separators(text: Optional[str]) -> List[str]:
    """Split on the shared separators, dropping empty fragments."""
    if not text:
        return []
    return [part.strip() for part in SEPARATOR_PATTERN.split(text) if part and part.strip()]


def fit_to_slots(values: Sequence[str], slots: int) -> List[str]:
    """Truncate or pad (with empty strings) to exactly ``slots`` entries."""
    fitted = list(values[:slots])
    fitted.extend([''] * (slots - len(fitted)))
    return fitted


@dataclass
class SplitResult:
    """Outcome of a reconciliation attempt."""
    answers: List[str]
    split_performed: bool


class MultiBlankSplitter:
    """Splits one combined value across several expected blanks."""

    def split(self, raw: str, slots: int) -> List[str]:
        """
        Split a combined value into exactly ``slots`` values.

        Extra fragments are dropped, missing ones are left empty.
        """
        return fit_to_slots(split_on_separators(raw), max(slots, 0))

    def reconcile(self, answers: Sequence[str], slots: int,
                  split_attempted: bool = False) -> SplitResult:
        """
        Apply single-input reconciliation.

        Fires only when there are several blanks, exactly one of them is
        non-empty, and no split was attempted for this question before.

        Args:
            answers: Per-blank values as entered
            slots: Number of blanks in the template
            split_attempted: Whether an earlier submission already split

        Returns:
            SplitResult with the values to grade
        """
        values = fit_to_slots([(a or '').strip() for a in answers], slots)
        filled = [v for v in values if v]

        if slots <= 1 or split_attempted or len(filled) != 1:
            return SplitResult(answers=values, split_performed=False)

        split_values = self.split(filled[0], slots)
        logger.debug(f"Split combined input into {len([v for v in split_values if v])}/{slots} blanks")
        return SplitResult(answers=split_values, split_performed=True)
