"""
Input validation utilities for the data-quality engine.

Provides reusable validation for table names, column identifiers, rule ids
and numeric run options so that values reaching SQL or Spark are safe.
"""

import re


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


_IDENTIFIER_RE = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')
_RULE_ID_RE = re.compile(r'^[a-zA-Z0-9_\-\.]+$')


def sanitize_sql_identifier(identifier: str, field_name: str = "identifier") -> str:
    """
    Sanitize an SQL identifier (schema, table or column name).

    Args:
        identifier: The identifier to sanitize
        field_name: Name of the field (for error messages)

    Returns:
        The validated identifier (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> sanitize_sql_identifier("crm_cust_info")
        'crm_cust_info'
        >>> sanitize_sql_identifier("table; DROP TABLE users;")  # doctest: +SKIP
        ValidationError: identifier contains invalid characters
    """
    if not identifier or not isinstance(identifier, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    identifier = identifier.strip()

    # SQL identifiers: alphanumeric and underscores only, must start with letter or underscore
    if not _IDENTIFIER_RE.match(identifier):
        raise ValidationError(
            f"{field_name} contains invalid characters. "
            "SQL identifiers must start with a letter or underscore and contain only "
            "alphanumeric characters and underscores."
        )

    if len(identifier) > 63:  # PostgreSQL limit
        raise ValidationError(f"{field_name} exceeds PostgreSQL maximum length of 63 characters")

    return identifier


def split_table_name(table_name: str) -> tuple[str, ...]:
    """
    Split a possibly qualified table name into validated parts.

    Accepts "table", "schema.table" and "database.schema.table".

    Examples:
        >>> split_table_name("silver.crm_cust_info")
        ('silver', 'crm_cust_info')
    """
    if not table_name or not isinstance(table_name, str):
        raise ValidationError("table name must be a non-empty string")

    parts = table_name.strip().split(".")
    if len(parts) > 3:
        raise ValidationError(f"table name '{table_name}' has too many qualifiers")

    return tuple(sanitize_sql_identifier(part, "table name") for part in parts)


def validate_rule_id(rule_id: str) -> str:
    """
    Validate a rule id.

    Rule ids are non-empty strings of alphanumerics, dots, hyphens and
    underscores, at most 255 characters.
    """
    if not rule_id or not isinstance(rule_id, str):
        raise ValidationError("rule id must be a non-empty string")

    rule_id = rule_id.strip()
    if not _RULE_ID_RE.match(rule_id):
        raise ValidationError(
            f"rule id '{rule_id}' contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, and dots are allowed."
        )
    if len(rule_id) > 255:
        raise ValidationError("rule id exceeds maximum length of 255 characters")

    return rule_id


def validate_positive_int(value: int, field_name: str, max_value: int | None = None) -> int:
    """
    Validate a positive integer option such as concurrency or sample limit.

    Examples:
        >>> validate_positive_int(8, "concurrency")
        8
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    if max_value is not None and value > max_value:
        raise ValidationError(f"{field_name} cannot exceed {max_value}")
    return value


def validate_timeout(value: float | None, field_name: str = "timeout_seconds") -> float | None:
    """Validate an optional positive timeout in seconds."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(f"{field_name} must be a number")
    if value <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return float(value)
