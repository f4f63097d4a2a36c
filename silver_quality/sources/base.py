"""
Row source adapter interface.

Adapters hand rules their input as RowBatch objects: lazily produced,
finite, single-use sequences of rows from one table.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from silver_quality.errors import BatchConsumedError

Row = dict[str, Any]


class RowBatch:
    """
    Ordered rows from one table, consumable exactly once.

    Wraps an iterable (list, generator, cursor) and refuses a second
    iteration, so a rule that needs several passes must materialize the
    rows itself.
    """

    def __init__(self, table: str, rows: Iterable[Row], columns: Sequence[str] | None = None):
        self.table = table
        self.columns = list(columns) if columns is not None else None
        self._rows = rows
        self._consumed = False

    def __iter__(self) -> Iterator[Row]:
        if self._consumed:
            raise BatchConsumedError(self.table)
        self._consumed = True
        return iter(self._rows)

    @property
    def consumed(self) -> bool:
        return self._consumed

    def __repr__(self) -> str:
        return f"RowBatch(table={self.table}, columns={self.columns}, consumed={self._consumed})"


class RowSourceAdapter(ABC):
    """
    Abstract base class for all row sources.

    Implementations raise SourceUnavailable when a table cannot be reached
    and SchemaMismatch when a requested column does not exist.
    """

    @abstractmethod
    def fetch(self, table_name: str, columns: Sequence[str] | None = None) -> RowBatch:
        """
        Read a table or view.

        Args:
            table_name: Table name, optionally schema-qualified
            columns: Columns to read (all columns when None)

        Returns:
            RowBatch over the table's rows

        Raises:
            SourceUnavailable: If the table cannot be reached
            SchemaMismatch: If a requested column does not exist
        """
        pass

    @abstractmethod
    def distinct_values(self, table_name: str, column: str) -> list[Any]:
        """Return the distinct values of a column, nulls included."""
        pass

    @abstractmethod
    def group_counts(
        self, table_name: str, key_columns: Sequence[str]
    ) -> list[tuple[tuple[Any, ...], int]]:
        """Return (key, row count) pairs grouped by the key columns."""
        pass

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def name(self) -> str:
        return self.__class__.__name__
