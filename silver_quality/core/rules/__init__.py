"""
Rule catalog loading and registration.
"""

from .registry import RuleRegistry
from .rule_config import RuleConfigBuilder, RuleConfigLoader, parse_rule

__all__ = [
    "RuleRegistry",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "parse_rule",
]
