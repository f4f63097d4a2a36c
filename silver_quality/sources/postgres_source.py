"""
PostgreSQL row source backed by the warehouse connection pool.
"""

from collections.abc import Iterator, Sequence
from typing import Any

from psycopg import Error as PsycopgError
from psycopg import sql

from silver_quality.errors import SchemaMismatch, SourceUnavailable
from silver_quality.observability.logger import get_logger
from silver_quality.utils.validation import ValidationError, split_table_name
from silver_quality.warehouse.connection import DatabaseConnectionPool

from .base import RowBatch, RowSourceAdapter

logger = get_logger(__name__)

COLUMNS_QUERY = """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_schema = %s AND table_name = %s
    ORDER BY ordinal_position
"""


class PostgresSourceAdapter(RowSourceAdapter):
    """
    Reads silver-layer tables and views from PostgreSQL.

    Table existence and column names are checked against
    information_schema before any rows are streamed, so missing objects
    surface at fetch time.
    """

    def __init__(self, pool: DatabaseConnectionPool, default_schema: str = "public", batch_size: int = 1000):
        """
        Initialize PostgreSQL source.

        Args:
            pool: Open database connection pool
            default_schema: Schema used for unqualified table names
            batch_size: Rows fetched per server-side cursor round trip
        """
        self.pool = pool
        self.default_schema = default_schema
        self.batch_size = batch_size

    def _identifier(self, table_name: str) -> tuple[str, str, sql.Identifier]:
        try:
            parts = split_table_name(table_name)
        except ValidationError as e:
            raise SourceUnavailable(table_name, str(e)) from e

        if len(parts) == 1:
            schema, table = self.default_schema, parts[0]
        else:
            # database qualifier, if any, is ignored: one pool serves one database
            schema, table = parts[-2], parts[-1]
        return schema, table, sql.Identifier(schema, table)

    def _columns(self, table_name: str) -> list[str]:
        schema, table, _ = self._identifier(table_name)
        try:
            rows = self.pool.execute_query(COLUMNS_QUERY, (schema, table))
        except (PsycopgError, RuntimeError) as e:
            raise SourceUnavailable(table_name, str(e)) from e
        if not rows:
            raise SourceUnavailable(table_name, "table or view does not exist")
        return [row["column_name"] for row in rows]

    def _resolve_columns(self, table_name: str, columns: Sequence[str] | None) -> list[str]:
        known = self._columns(table_name)
        if not columns:
            return known
        missing = set(columns) - set(known)
        if missing:
            raise SchemaMismatch(table_name, missing)
        return list(columns)

    def _stream(self, table_name: str, query: sql.Composable) -> Iterator[dict[str, Any]]:
        try:
            yield from self.pool.stream_query(query, batch_size=self.batch_size)
        except PsycopgError as e:
            raise SourceUnavailable(table_name, str(e)) from e

    def fetch(self, table_name: str, columns: Sequence[str] | None = None) -> RowBatch:
        selected = self._resolve_columns(table_name, columns)
        _, _, identifier = self._identifier(table_name)
        query = sql.SQL("SELECT {fields} FROM {table}").format(
            fields=sql.SQL(", ").join(sql.Identifier(c) for c in selected),
            table=identifier,
        )
        logger.debug(f"Streaming {table_name}", extra={"table": table_name, "columns": selected})
        return RowBatch(table_name, self._stream(table_name, query), selected)

    def distinct_values(self, table_name: str, column: str) -> list[Any]:
        self._resolve_columns(table_name, [column])
        _, _, identifier = self._identifier(table_name)
        query = sql.SQL(
            "SELECT DISTINCT {col} AS value FROM {table} ORDER BY {col} NULLS FIRST"
        ).format(col=sql.Identifier(column), table=identifier)
        return [row["value"] for row in self._run(table_name, query)]

    def group_counts(
        self, table_name: str, key_columns: Sequence[str]
    ) -> list[tuple[tuple[Any, ...], int]]:
        self._resolve_columns(table_name, key_columns)
        _, _, identifier = self._identifier(table_name)
        keys = sql.SQL(", ").join(sql.Identifier(c) for c in key_columns)
        order = sql.SQL(", ").join(
            sql.SQL("{} NULLS FIRST").format(sql.Identifier(c)) for c in key_columns
        )
        query = sql.SQL(
            "SELECT {keys}, COUNT(*) AS _row_count FROM {table} GROUP BY {keys} ORDER BY {order}"
        ).format(keys=keys, table=identifier, order=order)
        return [
            (tuple(row[c] for c in key_columns), row["_row_count"])
            for row in self._run(table_name, query)
        ]

    def _run(self, table_name: str, query: sql.Composable) -> list[dict[str, Any]]:
        try:
            return self.pool.execute_query(query)
        except PsycopgError as e:
            raise SourceUnavailable(table_name, str(e)) from e

    def close(self) -> None:
        self.pool.close()
