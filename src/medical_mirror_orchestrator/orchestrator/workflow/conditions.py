from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from .errors import UnknownOperator
from .interpolation import stringify

_MISSING = object()


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    CONTAINS = "contains"
    EXISTS = "exists"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numeric_operands(actual: Any, expected: Any) -> tuple[Any, Any]:
    """Coerce a string operand to float when the other operand is a number.

    Context values supplied on the command line are always strings, so
    ``"5" > 3`` has to compare numerically. Raises ``ValueError`` when the
    string is not numeric.
    """
    if _is_number(actual) and isinstance(expected, str):
        return actual, float(expected)
    if isinstance(actual, str) and _is_number(expected):
        return float(actual), expected
    return actual, expected


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def _apply(actual: Any, expected: Any) -> bool:
        if actual is _MISSING:
            return False
        try:
            return bool(compare(*_numeric_operands(actual, expected)))
        except (TypeError, ValueError):
            # e.g. None > 3, "abc" < 1
            return False

    return _apply


def _contains(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return False
    return stringify(expected) in stringify(actual)


def _exists(actual: Any, _expected: Any) -> bool:
    return actual is not _MISSING and actual is not None


def _equals(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return False
    # Booleans never equal numbers: True != 1, False != 0.
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _not_equals(actual: Any, expected: Any) -> bool:
    return not _equals(actual, expected)


_OPERATORS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS: _equals,
    ConditionOperator.NOT_EQUALS: _not_equals,
    ConditionOperator.GREATER_THAN: _ordered(lambda a, b: a > b),
    ConditionOperator.LESS_THAN: _ordered(lambda a, b: a < b),
    ConditionOperator.CONTAINS: _contains,
    ConditionOperator.EXISTS: _exists,
}


def parse_operator(raw: object) -> ConditionOperator:
    try:
        return ConditionOperator(raw)
    except ValueError:
        raise UnknownOperator(raw) from None


def evaluate_condition(condition: Mapping[str, Any], context: Mapping[str, Any]) -> dict[str, bool]:
    """Evaluate `{field, operator, value}` against the context.

    `field` is a plain context key. Returns `{"pass": bool}`; an unrecognised
    operator raises `UnknownOperator`.
    """

    operator = parse_operator(condition.get("operator"))
    field = condition.get("field")
    actual = context[field] if isinstance(field, str) and field in context else _MISSING
    return {"pass": _OPERATORS[operator](actual, condition.get("value"))}
