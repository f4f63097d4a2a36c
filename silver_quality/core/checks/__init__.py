"""
Check implementations, one per rule kind.
"""

from silver_quality.core.models import Rule, RuleKind
from silver_quality.errors import InvalidRuleDefinition

from .allowed_values_check import AllowedValuesCheck
from .arithmetic_check import ArithmeticCheck
from .base_check import BaseCheck
from .cross_reference_check import CrossReferenceCheck
from .date_order_check import DateOrderCheck
from .integer_date_check import IntegerDateCheck
from .not_null_check import NotNullCheck
from .range_check import RangeCheck
from .unique_key_check import UniqueKeyCheck
from .whitespace_check import WhitespaceCheck

CHECK_REGISTRY: dict[RuleKind, type[BaseCheck]] = {
    RuleKind.UNIQUE_KEY: UniqueKeyCheck,
    RuleKind.NOT_NULL: NotNullCheck,
    RuleKind.NO_TRAILING_WHITESPACE: WhitespaceCheck,
    RuleKind.ALLOWED_VALUES: AllowedValuesCheck,
    RuleKind.DATE_ORDER: DateOrderCheck,
    RuleKind.CROSS_TABLE_REFERENCE: CrossReferenceCheck,
    RuleKind.ARITHMETIC_CONSISTENCY: ArithmeticCheck,
    RuleKind.RANGE: RangeCheck,
    RuleKind.INTEGER_DATE: IntegerDateCheck,
}


def build_check(rule: Rule) -> BaseCheck:
    """
    Instantiate the check for a rule.

    Raises:
        InvalidRuleDefinition: If the kind is unsupported or parameters are invalid
    """
    check_class = CHECK_REGISTRY.get(rule.kind)
    if check_class is None:
        raise InvalidRuleDefinition(rule.id, f"unsupported rule kind: {rule.kind}")
    return check_class(rule)


__all__ = [
    "BaseCheck",
    "UniqueKeyCheck",
    "NotNullCheck",
    "WhitespaceCheck",
    "AllowedValuesCheck",
    "DateOrderCheck",
    "CrossReferenceCheck",
    "ArithmeticCheck",
    "RangeCheck",
    "IntegerDateCheck",
    "CHECK_REGISTRY",
    "build_check",
]
