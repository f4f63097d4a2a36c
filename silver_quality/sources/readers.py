"""
Spark readers for flat-file extracts of silver tables (CSV, JSON, Parquet).
"""

from pathlib import Path

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

FORMAT_BY_SUFFIX = {".csv": "csv", ".json": "json", ".parquet": "parquet"}

# Padding must survive the read for whitespace checks to see it.
CSV_OPTIONS = {
    "header": "true",
    "mode": "PERMISSIVE",
    "ignoreLeadingWhiteSpace": "false",
    "ignoreTrailingWhiteSpace": "false",
    "nullValue": "",
}


class FileReader:
    """
    Reads an extract into a DataFrame, picking the format from the suffix
    unless one is given.

    CSV columns are typed by inference (or an explicit schema); empty
    cells become null.
    """

    def __init__(self, spark: SparkSession):
        self.spark = spark
        self._readers = {
            "csv": self._read_csv,
            "json": self._read_json,
            "parquet": self._read_parquet,
        }

    @staticmethod
    def format_for(path: str | Path) -> str | None:
        """Return the format name for a file suffix, or None if unsupported."""
        return FORMAT_BY_SUFFIX.get(Path(path).suffix.lower())

    def read(
        self,
        file_path: str | Path,
        file_format: str | None = None,
        schema: StructType | None = None,
        **options
    ) -> DataFrame:
        """
        Read one file.

        Args:
            file_path: Path to the extract
            file_format: csv, json or parquet (inferred from the suffix when None)
            schema: Explicit schema, skipping inference
            **options: Extra reader options, e.g. delimiter=";"

        Raises:
            ValueError: If the format is unsupported
        """
        file_format = (file_format or self.format_for(file_path) or "").lower()
        reader = self._readers.get(file_format)
        if reader is None:
            raise ValueError(f"Unsupported file format for {file_path}: {file_format or 'unknown'}")
        return reader(str(file_path), schema, options)

    def _read_csv(self, path: str, schema: StructType | None, options: dict) -> DataFrame:
        reader = self.spark.read.options(**{**CSV_OPTIONS, **options})
        if schema is not None:
            reader = reader.schema(schema)
        else:
            reader = reader.option("inferSchema", "true")
        return reader.csv(path)

    def _read_json(self, path: str, schema: StructType | None, options: dict) -> DataFrame:
        # extracts are JSON arrays or pretty-printed objects, not JSON lines
        reader = self.spark.read.option("multiLine", "true").options(**options)
        if schema is not None:
            reader = reader.schema(schema)
        return reader.json(path)

    def _read_parquet(self, path: str, schema: StructType | None, options: dict) -> DataFrame:
        return self.spark.read.options(**options).parquet(path)
