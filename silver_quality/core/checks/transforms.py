"""
Value transforms applied before comparison.

Rules declare transforms as a list; each item is either a bare name
("trim") or a mapping with a "type" key and its arguments:

    transform:
      - type: strip_prefix
        prefix: NAS
      - type: remove
        char: "-"
"""

from collections.abc import Callable
from typing import Any

from silver_quality.errors import InvalidRuleDefinition

Transform = Callable[[Any], Any]


def _strip_prefix(prefix: str) -> Transform:
    def apply(value: Any) -> Any:
        if isinstance(value, str) and value.startswith(prefix):
            return value[len(prefix):]
        return value
    return apply


def _remove(char: str) -> Transform:
    def apply(value: Any) -> Any:
        if isinstance(value, str):
            return value.replace(char, "")
        return value
    return apply


def _string_method(method: str) -> Transform:
    def apply(value: Any) -> Any:
        if isinstance(value, str):
            return getattr(value, method)()
        return value
    return apply


def _parse_one(rule_id: str, entry: Any) -> Transform:
    if isinstance(entry, str):
        entry = {"type": entry}
    if not isinstance(entry, dict) or "type" not in entry:
        raise InvalidRuleDefinition(rule_id, f"transform {entry!r} must be a name or a mapping with 'type'")

    kind = str(entry["type"]).lower()
    if kind == "strip_prefix":
        prefix = entry.get("prefix")
        if not isinstance(prefix, str) or not prefix:
            raise InvalidRuleDefinition(rule_id, "strip_prefix transform requires a non-empty 'prefix'")
        return _strip_prefix(prefix)
    if kind == "remove":
        char = entry.get("char")
        if not isinstance(char, str) or not char:
            raise InvalidRuleDefinition(rule_id, "remove transform requires a non-empty 'char'")
        return _remove(char)
    if kind == "trim":
        return _string_method("strip")
    if kind in ("upper", "lower"):
        return _string_method(kind)
    raise InvalidRuleDefinition(rule_id, f"unknown transform type '{entry['type']}'")


def build_transforms(rule_id: str, specs: Any) -> list[Transform]:
    """
    Parse transform declarations.

    Raises:
        InvalidRuleDefinition: If a transform is unknown or misconfigured
    """
    if specs is None:
        return []
    if isinstance(specs, str | dict):
        specs = [specs]
    if not isinstance(specs, list):
        raise InvalidRuleDefinition(rule_id, "transform must be a list")
    return [_parse_one(rule_id, spec) for spec in specs]


def apply_transforms(transforms: list[Transform], value: Any) -> Any:
    for transform in transforms:
        value = transform(value)
    return value
