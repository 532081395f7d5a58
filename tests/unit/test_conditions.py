"""Unit tests for condition evaluation."""

from __future__ import annotations

import pytest

from medical_mirror_orchestrator.orchestrator.workflow.conditions import (
    ConditionOperator,
    evaluate_condition,
    parse_operator,
)
from medical_mirror_orchestrator.orchestrator.workflow.errors import (
    UnknownOperator,
    WorkflowConfigurationError,
)


def _check(operator: str, value: object, context: dict[str, object], field: str = "n") -> bool:
    return evaluate_condition({"field": field, "operator": operator, "value": value}, context)["pass"]


def test_ordered_comparisons() -> None:
    context = {"n": 5}

    assert evaluate_condition({"field": "n", "operator": "greaterThan", "value": 3}, context) == {
        "pass": True
    }
    assert evaluate_condition({"field": "n", "operator": "lessThan", "value": 3}, context) == {
        "pass": False
    }


@pytest.mark.parametrize(
    ("operator", "value", "expected"),
    [
        ("equals", 5, True),
        ("equals", "5", False),
        ("notEquals", 4, True),
        ("notEquals", 5, False),
    ],
)
def test_equality(operator: str, value: object, expected: bool) -> None:
    assert _check(operator, value, {"n": 5}) is expected


def test_contains_coerces_field_to_string() -> None:
    assert _check("contains", "err", {"msg": "network error"}, field="msg") is True
    assert _check("contains", "23", {"n": 1234}) is True
    assert _check("contains", "zz", {"msg": "fine"}, field="msg") is False


def test_exists_requires_present_and_non_null() -> None:
    assert _check("exists", None, {"n": 0}) is True
    assert _check("exists", None, {"n": None}) is False
    assert _check("exists", None, {}) is False


def test_missing_field_fails_every_comparison_but_not_equals() -> None:
    for operator in ("equals", "greaterThan", "lessThan", "contains"):
        assert _check(operator, 1, {}) is False
    assert _check("notEquals", 1, {}) is True


def test_incomparable_values_do_not_raise() -> None:
    assert _check("greaterThan", 3, {"n": None}) is False
    assert _check("lessThan", 1, {"n": "abc"}) is False


def test_numeric_strings_compare_as_numbers() -> None:
    assert _check("greaterThan", 3, {"n": "5"}) is True
    assert _check("lessThan", 10, {"n": "5"}) is True
    assert _check("greaterThan", "3", {"n": 5}) is True
    assert _check("lessThan", "2.5", {"n": 5}) is False
    assert _check("greaterThan", 1, {"n": "abc"}) is False


def test_strings_compare_lexically_with_each_other() -> None:
    assert _check("greaterThan", "10", {"n": "9"}) is True


@pytest.mark.parametrize(
    ("context", "operator", "value", "expected"),
    [
        ({"flag": True}, "equals", 1, False),
        ({"count": 0}, "equals", False, False),
        ({"count": 1}, "notEquals", True, True),
        ({"flag": False}, "notEquals", 0, True),
        ({"flag": True}, "equals", True, True),
    ],
)
def test_booleans_never_equal_numbers(
    context: dict[str, object], operator: str, value: object, expected: bool
) -> None:
    field = next(iter(context))
    assert _check(operator, value, context, field=field) is expected


def test_field_is_a_plain_key_lookup() -> None:
    assert _check("equals", 1, {"a.b": 1, "a": {"b": 2}}, field="a.b") is True


def test_unknown_operator_raises_configuration_error() -> None:
    with pytest.raises(UnknownOperator) as excinfo:
        evaluate_condition({"field": "n", "operator": "between", "value": 1}, {"n": 5})

    assert isinstance(excinfo.value, WorkflowConfigurationError)
    assert "between" in str(excinfo.value)


def test_parse_operator_accepts_wire_names() -> None:
    assert parse_operator("notEquals") is ConditionOperator.NOT_EQUALS
    with pytest.raises(UnknownOperator):
        parse_operator(None)
