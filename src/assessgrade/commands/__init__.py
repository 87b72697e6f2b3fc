"""
Commands Module

Command-line interface commands for assessgrade.
"""

from .grade import grade
from .config import show as config_show

__all__ = ['grade', 'config_show']
