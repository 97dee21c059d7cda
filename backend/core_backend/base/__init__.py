"""
Core backend base components.

This package provides foundational classes that are shared by every app:
immutable domain records and the repository bundle contract.
"""

from .records import Record, new_id

__all__ = [
    'Record',
    'new_id',
]
