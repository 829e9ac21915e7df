"""Unit tests for operator / value-shape resolution and operator-change conversion."""

import pytest

from policytree.models.operators import (
    DURATION_OPERATORS,
    NO_VALUE_OPERATORS,
    ConditionOperator,
    FieldType,
    InputType,
    ValueShape,
)
from policytree.services.resolver import (
    allowed_operators,
    convert_value_on_operator_change,
    default_value_for,
    matches_input_shape,
    operator_label,
    operators_for,
    resolve_input_shape,
    value_shape_for,
)

OP = ConditionOperator


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------


def test_operators_for_uses_type_defaults(fields):
    options = operators_for("price", fields)
    assert [o.value for o in options] == [
        OP.EQ, OP.NEQ, OP.GT, OP.GTE, OP.LT, OP.LTE, OP.BETWEEN, OP.IS_NULL, OP.IS_NOT_NULL,
    ]
    assert options[0].label == "Equals"


def test_operators_for_explicit_subset(fields):
    assert [o.value for o in operators_for("amount", fields)] == [OP.GT, OP.LT]


def test_operators_for_unknown_field(fields):
    assert operators_for("nope", fields) == []


def test_operator_label_unknown_falls_back_to_identifier():
    assert operator_label("FOO_BAR") == "FOO_BAR"
    assert operator_label("BETWEEN") == "Between"
    assert operator_label(OP.HAS_ANY) == "Has any of"


def test_value_shape_is_total():
    for op in ConditionOperator:
        assert isinstance(value_shape_for(op), ValueShape)
    assert value_shape_for("NOT_AN_OPERATOR") == ValueShape.SCALAR
    assert value_shape_for("IN") == ValueShape.LIST
    assert value_shape_for(OP.BETWEEN) == ValueShape.RANGE
    assert value_shape_for(OP.WITHIN_NEXT) == ValueShape.DURATION
    assert value_shape_for(OP.IS_TRUE) == ValueShape.NONE


# -----------------------------------------------------------------------------
# Defaults and input shapes
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "field_type,operator,expected",
    [
        (FieldType.NUMERIC, OP.EQ, 0),
        (FieldType.NUMERIC, OP.BETWEEN, {"min": 0, "max": 100}),
        (FieldType.NUMERIC, OP.IN, []),
        (FieldType.DATE, OP.WITHIN_LAST, {"amount": 30, "unit": "DAYS"}),
        (FieldType.DATE, OP.EQ, None),
        (FieldType.DATE, OP.BETWEEN, {"from": None, "to": None}),
        (FieldType.TIME, OP.BETWEEN, {"from": "09:00", "to": "18:00"}),
        (FieldType.RELATION, OP.HAS_ANY, []),
        (FieldType.STRING, OP.CONTAINS, ""),
        (FieldType.BOOLEAN, OP.IS_TRUE, None),
        (FieldType.ENUM, OP.EQ, None),
        (FieldType.CURRENCY, OP.EQ, None),
        (FieldType.DURATION, OP.GT, {"amount": 1, "unit": "DAYS"}),
        (FieldType.LOCATION, OP.EQ, {"countryId": None, "cityId": None, "stateId": None, "districtId": None}),
        ("numeric", "BETWEEN", {"min": 0, "max": 100}),
    ],
)
def test_default_value_for(field_type, operator, expected):
    assert default_value_for(field_type, operator) == expected


@pytest.mark.parametrize(
    "field_type,operator,expected",
    [
        (FieldType.NUMERIC, OP.EQ, InputType.NUMBER),
        (FieldType.NUMERIC, OP.BETWEEN, InputType.RANGE),
        (FieldType.DATE, OP.BETWEEN, InputType.DATE_RANGE),
        (FieldType.DATE, OP.EQ, InputType.DATE),
        (FieldType.DATE, OP.WITHIN_LAST, InputType.DURATION),
        (FieldType.NUMERIC, OP.WITHIN_LAST, InputType.DURATION),
        (FieldType.TIME, OP.BETWEEN, InputType.TIME_RANGE),
        (FieldType.ENUM, OP.EQ, InputType.SELECT),
        (FieldType.ENUM, OP.IN, InputType.MULTI_SELECT),
        (FieldType.RELATION, OP.HAS_ALL, InputType.MULTI_SELECT),
        (FieldType.BOOLEAN, OP.IS_FALSE, InputType.NONE),
        (FieldType.STRING, OP.STARTS_WITH, InputType.TEXT),
        (FieldType.LOCATION, OP.NEQ, InputType.LOCATION),
        (FieldType.CURRENCY, OP.EQ, InputType.CURRENCY),
        (FieldType.DURATION, OP.EQ, InputType.DURATION),
        ("not-a-type", "EQ", InputType.TEXT),
    ],
)
def test_resolve_input_shape(field_type, operator, expected):
    assert resolve_input_shape(field_type, operator) == expected


def test_defaults_match_their_input_shape(fields):
    """Every (field, allowed operator) default already has the shape its input demands."""
    for definition in fields.values():
        for op in allowed_operators(definition):
            value = default_value_for(definition.type, op)
            shape = resolve_input_shape(definition.type, op)
            assert matches_input_shape(shape, value), (definition.key, op, shape, value)


def test_no_value_operators_never_carry_values(fields):
    for op in NO_VALUE_OPERATORS:
        assert default_value_for(FieldType.NUMERIC, op) is None
        assert convert_value_on_operator_change("price", op, 42, fields) is None
        assert resolve_input_shape(FieldType.STRING, op) == InputType.NONE


def test_matches_input_shape_rejects_wrong_shapes():
    assert not matches_input_shape(InputType.NUMBER, "5")
    assert not matches_input_shape(InputType.NUMBER, True)
    assert not matches_input_shape(InputType.RANGE, {"min": 1})
    assert not matches_input_shape(InputType.DURATION, 30)
    assert not matches_input_shape(InputType.TIME_RANGE, {"from": "9am", "to": "18:00"})
    assert not matches_input_shape(InputType.NONE, 0)
    assert not matches_input_shape("bogus", None)
    assert matches_input_shape(InputType.MULTI_SELECT, ["a"])


# -----------------------------------------------------------------------------
# Operator change
# -----------------------------------------------------------------------------


def test_scalar_to_range_builds_range_from_value(fields):
    assert convert_value_on_operator_change("price", OP.BETWEEN, 0, fields) == {"min": 0, "max": 100}
    assert convert_value_on_operator_change("price", OP.BETWEEN, 25, fields) == {"min": 25, "max": 125}
    assert convert_value_on_operator_change("price", OP.BETWEEN, "abc", fields) == {"min": 0, "max": 100}


def test_range_is_kept_for_range_operator(fields):
    value = {"min": 3, "max": 9}
    assert convert_value_on_operator_change("price", OP.BETWEEN, value, fields) == value


def test_date_to_duration_uses_default_duration(fields):
    assert convert_value_on_operator_change("createdAt", OP.WITHIN_LAST, "2024-01-01T00:00:00Z", fields) == {
        "amount": 30,
        "unit": "DAYS",
    }


def test_duration_is_kept_for_duration_operator(fields):
    value = {"amount": 7, "unit": "WEEKS"}
    assert convert_value_on_operator_change("createdAt", OP.WITHIN_NEXT, value, fields) == value


def test_list_to_scalar_takes_first_element(fields):
    assert convert_value_on_operator_change("tags", OP.EQ, ["a", "b"], fields) == "a"


def test_empty_list_to_scalar_uses_default(fields):
    assert convert_value_on_operator_change("price", OP.EQ, [], fields) == 0


def test_scalar_to_list_wraps(fields):
    assert convert_value_on_operator_change("tags", OP.HAS_ANY, "a", fields) == ["a"]
    assert convert_value_on_operator_change("price", OP.IN, 5, fields) == [5]
    assert convert_value_on_operator_change("price", OP.IN, None, fields) == []
    assert convert_value_on_operator_change("name", OP.IN, "", fields) == []


def test_list_round_trip_keeps_elements(fields):
    values = ["x", "y"]
    assert convert_value_on_operator_change("status", OP.NOT_IN, values, fields) == values


@pytest.mark.parametrize(
    "field_key,value",
    [
        ("price", 42),
        ("price", 0),
        ("name", "gold"),
        ("status", "ACTIVE"),
        ("currency", "EUR"),
        ("createdAt", "2024-03-01T00:00:00Z"),
        ("country", {"countryId": "TR", "cityId": "34", "stateId": None, "districtId": None}),
    ],
)
def test_scalar_survives_list_and_back(fields, field_key, value):
    as_list = convert_value_on_operator_change(field_key, OP.IN, value, fields)
    assert as_list == [value]
    assert convert_value_on_operator_change(field_key, OP.EQ, as_list, fields) == value


def test_composite_values_unwrap_to_scalar(fields):
    assert convert_value_on_operator_change("price", OP.GT, {"min": 3, "max": 9}, fields) == 3
    assert convert_value_on_operator_change("price", OP.EQ, {"amount": 2, "unit": "DAYS"}, fields) == 2
    assert convert_value_on_operator_change("createdAt", OP.EQ, {"from": "2024-01-01", "to": "2024-02-01"}, fields) == (
        "2024-01-01"
    )


def test_duration_field_keeps_duration_under_scalar_operator(fields):
    value = {"amount": 2, "unit": "HOURS"}
    assert convert_value_on_operator_change("leadTime", OP.GT, value, fields) == value


def test_time_range_conversion(fields):
    window = {"from": "10:00", "to": "12:00"}
    assert convert_value_on_operator_change("openHours", OP.BETWEEN, window, fields) == window
    assert convert_value_on_operator_change("openHours", OP.BETWEEN, "10:00", fields) == {"from": "09:00", "to": "18:00"}


def test_date_range_conversion(fields):
    window = {"from": "2024-01-01T00:00:00Z", "to": "2024-02-01T00:00:00Z"}
    assert convert_value_on_operator_change("createdAt", OP.BETWEEN, window, fields) == window
    assert convert_value_on_operator_change("createdAt", OP.BETWEEN, "2024-01-01", fields) == {"from": None, "to": None}


def test_unknown_field_or_operator_returns_none(fields):
    assert convert_value_on_operator_change("nope", OP.EQ, 5, fields) is None
    assert convert_value_on_operator_change("price", "NOT_AN_OPERATOR", 5, fields) is None


def test_conversion_is_idempotent(fields):
    seeds = [
        None,
        0,
        5,
        "x",
        True,
        [],
        ["a", "b"],
        {"min": 1, "max": 2},
        {"amount": 3, "unit": "DAYS"},
        {"from": "09:00", "to": "10:00"},
        {"from": None, "to": None},
    ]
    for key in fields:
        for op in ConditionOperator:
            for seed in seeds:
                once = convert_value_on_operator_change(key, op, seed, fields)
                twice = convert_value_on_operator_change(key, op, once, fields)
                assert twice == once, (key, op, seed)


def test_duration_operators_resolve_to_duration_input_for_all_types():
    for field_type in FieldType:
        for op in DURATION_OPERATORS:
            assert resolve_input_shape(field_type, op) == InputType.DURATION
            assert matches_input_shape(InputType.DURATION, default_value_for(field_type, op))
