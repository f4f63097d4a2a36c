"""
Row source adapters.

The in-memory adapter has no third-party requirements; the PostgreSQL and
Spark adapters are imported from their own modules so that a run against
one backend does not need the other installed.
"""

from .base import Row, RowBatch, RowSourceAdapter
from .memory_source import InMemorySourceAdapter

__all__ = [
    "Row",
    "RowBatch",
    "RowSourceAdapter",
    "InMemorySourceAdapter",
]
