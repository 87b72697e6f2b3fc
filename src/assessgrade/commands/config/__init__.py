"""
Config Commands Package

Configuration-related CLI commands:
- settings.py - Configuration display
"""

from .settings import show

__all__ = [
    'show',
]
