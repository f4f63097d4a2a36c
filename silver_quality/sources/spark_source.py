"""
Spark row source reading catalog tables, views, and flat files.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col, count
from pyspark.errors import AnalysisException

from silver_quality.errors import SchemaMismatch, SourceUnavailable
from silver_quality.observability.logger import get_logger

from .base import RowBatch, RowSourceAdapter
from .readers import FileReader

logger = get_logger(__name__)


class SparkSourceAdapter(RowSourceAdapter):
    """
    Serves Spark tables and temporary views as row batches.

    Rows are streamed to the driver with toLocalIterator(), so a batch is
    read lazily one partition at a time.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize Spark source.

        Args:
            spark: Active Spark session
        """
        self.spark = spark
        self.file_reader = FileReader(spark)

    def register_directory(self, directory: str | Path) -> list[str]:
        """
        Register every CSV/JSON/Parquet file in a directory as a temp view.

        The view name is the file stem with dots replaced by underscores.
        Lookups fall back to that name, so "silver.crm_cust_info.csv" is
        served as table "silver.crm_cust_info".

        Args:
            directory: Directory containing data files

        Returns:
            Table names that were registered
        """
        path = Path(directory)
        if not path.is_dir():
            raise SourceUnavailable(str(directory), "directory not found")

        registered = []
        for file_path in sorted(path.iterdir()):
            file_format = self.file_reader.format_for(file_path)
            if file_format is None:
                continue
            table_name = file_path.stem
            view_name = self._view_name(table_name)
            df = self.file_reader.read(file_path, file_format=file_format)
            df.createOrReplaceTempView(view_name)
            registered.append(table_name)
            logger.info(
                f"Registered {file_format} file as view {view_name}",
                extra={"table": table_name, "path": str(file_path)},
            )
        return registered

    @staticmethod
    def _view_name(table_name: str) -> str:
        return table_name.replace(".", "_")

    def _load(self, table_name: str) -> DataFrame:
        names = [table_name]
        view_name = self._view_name(table_name)
        if view_name != table_name:
            names.append(view_name)

        last_error: AnalysisException | None = None
        for name in names:
            try:
                return self.spark.table(name)
            except AnalysisException as e:
                last_error = e
        raise SourceUnavailable(table_name, str(last_error).splitlines()[0])

    def _select(self, table_name: str, columns: Sequence[str] | None) -> DataFrame:
        df = self._load(table_name)
        if columns:
            missing = set(columns) - set(df.columns)
            if missing:
                raise SchemaMismatch(table_name, missing)
            df = df.select(*columns)
        return df

    def fetch(self, table_name: str, columns: Sequence[str] | None = None) -> RowBatch:
        df = self._select(table_name, columns)
        rows = (row.asDict() for row in df.toLocalIterator())
        return RowBatch(table_name, rows, df.columns)

    def distinct_values(self, table_name: str, column: str) -> list[Any]:
        df = self._select(table_name, [column])
        ordered = df.distinct().orderBy(col(column).asc_nulls_first())
        return [row[column] for row in ordered.collect()]

    def group_counts(
        self, table_name: str, key_columns: Sequence[str]
    ) -> list[tuple[tuple[Any, ...], int]]:
        df = self._select(table_name, key_columns)
        grouped = (
            df.groupBy(*key_columns)
            .agg(count("*").alias("_row_count"))
            .orderBy(*[col(c).asc_nulls_first() for c in key_columns])
        )
        return [
            (tuple(row[c] for c in key_columns), row["_row_count"])
            for row in grouped.collect()
        ]
