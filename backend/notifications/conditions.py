"""
Condition evaluation for notification rules.

All conditions on a rule are AND-ed together. There is no OR or grouping.
"""

import math
from typing import Any, Iterable

from models.notification import ConditionOperator, RuleCondition
from notifications.templates import MISSING, get_nested_value, stringify


class UnknownOperatorError(ValueError):
    """A condition uses an operator the evaluator does not implement."""

    def __init__(self, operator: str, field: str):
        super().__init__(f"Unknown condition operator '{operator}' on field '{field}'")
        self.operator = operator
        self.field = field


def _to_number(value: Any) -> float:
    """
    Numeric cast for comparisons.

    An explicit null counts as 0. Missing fields and non-numeric values
    become NaN, so every comparison against them is false.
    """
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _strict_equals(left: Any, right: Any) -> bool:
    # True == 1 in Python; a boolean only equals another boolean here
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return bool(left == right)


def evaluate_condition(
    condition: RuleCondition, data: dict[str, Any], strict: bool = False
) -> bool:
    """
    Evaluate a single condition against entity data.

    Args:
        condition: Predicate from the rule
        data: Entity data from the trigger event
        strict: Raise UnknownOperatorError instead of passing unknown operators

    Returns:
        True if the condition holds
    """
    field_value = get_nested_value(data, condition.field)
    is_null = field_value is None or field_value is MISSING

    try:
        operator = ConditionOperator(condition.operator)
    except ValueError:
        if strict:
            raise UnknownOperatorError(condition.operator, condition.field)
        print(
            f"  ⚠️  Unknown operator '{condition.operator}' on field "
            f"'{condition.field}', treating condition as met"
        )
        return True

    actual = None if field_value is MISSING else field_value
    if operator is ConditionOperator.EQUALS:
        return _strict_equals(actual, condition.value)
    if operator is ConditionOperator.NOT_EQUALS:
        return not _strict_equals(actual, condition.value)
    if operator is ConditionOperator.GREATER_THAN:
        return _to_number(field_value) > _to_number(condition.value)
    if operator is ConditionOperator.LESS_THAN:
        return _to_number(field_value) < _to_number(condition.value)
    if operator is ConditionOperator.CONTAINS:
        return stringify(condition.value) in stringify(field_value)
    if operator is ConditionOperator.NOT_CONTAINS:
        return stringify(condition.value) not in stringify(field_value)
    if operator is ConditionOperator.IS_NULL:
        return is_null
    return not is_null


def evaluate_conditions(
    conditions: Iterable[RuleCondition], data: dict[str, Any], strict: bool = False
) -> bool:
    """True when every condition holds. An empty list always passes."""
    return all(evaluate_condition(c, data, strict=strict) for c in conditions)
