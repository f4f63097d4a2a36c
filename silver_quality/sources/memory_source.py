"""
In-memory row source backed by lists of dictionaries.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from silver_quality.errors import SchemaMismatch, SourceUnavailable

from .base import Row, RowBatch, RowSourceAdapter


def _sort_key(value: Any) -> tuple:
    # None first, then by type name so mixed types never compare directly
    if value is None:
        return (0, "", "")
    return (1, type(value).__name__, value)


class InMemorySourceAdapter(RowSourceAdapter):
    """
    Serves tables held in memory.

    Column sets come from the optional schemas mapping; otherwise they are
    the union of keys seen in the table's rows. An empty table with no
    declared schema accepts any column request.
    """

    def __init__(
        self,
        tables: Mapping[str, Sequence[Row]],
        schemas: Mapping[str, Sequence[str]] | None = None,
    ):
        self._tables = {name: list(rows) for name, rows in tables.items()}
        self._schemas = {name: list(cols) for name, cols in (schemas or {}).items()}

    def table_names(self) -> list[str]:
        return sorted(self._tables)

    def columns_of(self, table_name: str) -> list[str] | None:
        if table_name in self._schemas:
            return self._schemas[table_name]
        columns: dict[str, None] = {}
        for row in self._tables.get(table_name, []):
            for key in row:
                columns.setdefault(key, None)
        return list(columns) or None

    def _check(self, table_name: str, columns: Sequence[str] | None) -> None:
        if table_name not in self._tables:
            raise SourceUnavailable(table_name, "table not found")
        known = self.columns_of(table_name)
        if columns and known is not None:
            missing = set(columns) - set(known)
            if missing:
                raise SchemaMismatch(table_name, missing)

    def fetch(self, table_name: str, columns: Sequence[str] | None = None) -> RowBatch:
        self._check(table_name, columns)
        rows = self._tables[table_name]

        def generate():
            for row in rows:
                if columns:
                    yield {col: row.get(col) for col in columns}
                else:
                    yield dict(row)

        return RowBatch(table_name, generate(), columns or self.columns_of(table_name))

    def distinct_values(self, table_name: str, column: str) -> list[Any]:
        self._check(table_name, [column])
        seen: dict[Any, None] = {}
        for row in self._tables[table_name]:
            seen.setdefault(row.get(column), None)
        return sorted(seen, key=_sort_key)

    def group_counts(
        self, table_name: str, key_columns: Sequence[str]
    ) -> list[tuple[tuple[Any, ...], int]]:
        self._check(table_name, key_columns)
        counts: dict[tuple[Any, ...], int] = {}
        for row in self._tables[table_name]:
            key = tuple(row.get(col) for col in key_columns)
            counts[key] = counts.get(key, 0) + 1
        return sorted(counts.items(), key=lambda item: tuple(_sort_key(v) for v in item[0]))
