"""
Storage Module

In-memory, copy-on-write verdict storage.
"""

from .verdict_store import VerdictStore

__all__ = [
    "VerdictStore",
]
