"""
Runtime settings read from the environment.

Values come from environment variables, optionally seeded from a .env
file. Command-line flags override them.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_RULES_PATH = "config/silver_rules.yaml"


class Settings(BaseModel):
    """
    Data-quality run settings.

    Attributes:
        rules_path: Rule catalog file (DQ_RULES_PATH)
        concurrency: Worker pool size (DQ_CONCURRENCY)
        timeout_seconds: Run-level timeout, unset for none (DQ_TIMEOUT_SECONDS)
        sample_limit: Violations kept per result, unset for all (DQ_SAMPLE_LIMIT)
        db_host, db_port, db_name, db_user, db_password: Warehouse connection (DB_*)
        db_schema: Schema for unqualified table names (DB_SCHEMA)
        log_level: LOG_LEVEL
        log_format: "json" or "text" (LOG_FORMAT)
    """

    rules_path: str = DEFAULT_RULES_PATH
    concurrency: int = Field(4, ge=1, le=256)
    timeout_seconds: float | None = Field(None, gt=0)
    sample_limit: int | None = Field(None, ge=0)

    db_host: str = "localhost"
    db_port: int = Field(5432, ge=1, le=65535)
    db_name: str = "datawarehouse"
    db_user: str = "dq_reader"
    db_password: str | None = None
    db_schema: str = "public"

    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("timeout_seconds", "sample_limit", "db_password", mode="before")
    @classmethod
    def blank_as_none(cls, v):
        """Treat empty environment values as unset."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level '{v}'")
        return level

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v):
        fmt = v.lower()
        if fmt not in ("json", "text"):
            raise ValueError(f"log format must be 'json' or 'text', got '{v}'")
        return fmt

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env_file: Optional .env file loaded first; existing environment
                variables take precedence over it

        Raises:
            FileNotFoundError: If env_file is given but missing
            pydantic.ValidationError: If a value is invalid
        """
        if env_file is not None:
            if not Path(env_file).exists():
                raise FileNotFoundError(f"Environment file not found: {env_file}")
            load_dotenv(env_file, override=False)

        mapping = {
            "rules_path": "DQ_RULES_PATH",
            "concurrency": "DQ_CONCURRENCY",
            "timeout_seconds": "DQ_TIMEOUT_SECONDS",
            "sample_limit": "DQ_SAMPLE_LIMIT",
            "db_host": "DB_HOST",
            "db_port": "DB_PORT",
            "db_name": "DB_NAME",
            "db_user": "DB_USER",
            "db_password": "DB_PASSWORD",
            "db_schema": "DB_SCHEMA",
            "log_level": "LOG_LEVEL",
            "log_format": "LOG_FORMAT",
        }
        values = {field: os.environ[var] for field, var in mapping.items() if var in os.environ}
        return cls.model_validate(values)
