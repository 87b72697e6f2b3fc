"""
Text Normalizer

Canonicalizes raw answer and ground-truth strings before comparison.
All helpers are total: ``None`` is treated as the empty string.
"""

from typing import Optional


def normalize(text: Optional[str], case_sensitive: bool = False) -> str:
    """
    Normalize text for comparison.

    Lower-cases (unless ``case_sensitive``), drops every character that is
    neither a Unicode letter/digit nor whitespace, collapses whitespace runs
    and trims. Idempotent.

    Args:
        text: Raw string
        case_sensitive: Keep the original casing

    Returns:
        Normalized string
    """
    if not text:
        return ""

    if not case_sensitive:
        text = text.lower()

    kept = ''.join(ch for ch in text if ch.isalnum() or ch.isspace())
    return ' '.join(kept.split())


def strip_non_alnum(text: Optional[str]) -> str:
    """Lower-case and keep alphanumerics only ("23-July-2025" -> "23july2025")."""
    if not text:
        return ""
    return ''.join(ch for ch in text.lower() if ch.isalnum())


def strip_whitespace(text: Optional[str]) -> str:
    """Remove all whitespace ("tailwind css" -> "tailwindcss")."""
    if not text:
        return ""
    return ''.join(text.split())


def is_acronym_of(short: Optional[str], long: Optional[str]) -> bool:
    """
    Check whether ``short`` is an acronym of ``long``.

    The first character of every whitespace-separated word of ``long`` is
    lower-cased and concatenated, then compared with ``short`` stripped to
    lower-case alphanumerics. ``long`` needs at least two words.
    """
    short_key = strip_non_alnum(short)
    words = (long or "").split()
    if not short_key or len(words) < 2:
        return False
    letters = ''.join(word[0] for word in words).lower()
    return letters == short_key
