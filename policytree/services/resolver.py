"""
Operator / value-shape resolution.

Maps a field type and an operator onto:
- the operator's label,
- the default value for a new condition,
- the input shape the value must take,
- the converted value when an author switches operators.

Every operator belongs to exactly one value-shape class (none, scalar, range,
duration, list); the class, not the operator itself, drives defaults and
conversions. None of these functions raise: unknown fields, types or
operators degrade to the most conservative value. `None` stands for both
"absent" and "null".
"""

import logging
from enum import Enum
from typing import Any, Mapping, Optional, TypeVar, Union

from policytree.models.fields import FieldDefinition, OperatorOption
from policytree.models.operators import (
    OPERATOR_LABELS,
    OPERATORS_BY_FIELD_TYPE,
    VALUE_SHAPE_BY_OPERATOR,
    ConditionOperator,
    FieldType,
    InputType,
    TimeUnit,
    ValueShape,
)
from policytree.models.values import (
    is_date_range_value,
    is_duration_value,
    is_location_value,
    is_number,
    is_range_value,
    is_time_range_value,
    is_time_string,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

FieldCatalog = Mapping[str, FieldDefinition]


def _coerce(enum_cls: type[E], raw: Any) -> Optional[E]:
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        return None


# -----------------------------------------------------------------------------
# Operators
# -----------------------------------------------------------------------------


def operator_label(operator: Union[ConditionOperator, str]) -> str:
    """Human label; unknown operators fall back to their raw identifier."""
    op = _coerce(ConditionOperator, operator)
    if op is None:
        return str(operator)
    return OPERATOR_LABELS.get(op, op.value)


def allowed_operators(definition: FieldDefinition) -> list[ConditionOperator]:
    if definition.operators:
        return list(definition.operators)
    return list(OPERATORS_BY_FIELD_TYPE.get(definition.type, []))


def operators_for(field_key: str, fields: FieldCatalog) -> list[OperatorOption]:
    """Operators a field accepts, each with its label. Unknown field -> []."""
    definition = fields.get(field_key)
    if definition is None:
        return []
    return [OperatorOption(value=op, label=operator_label(op)) for op in allowed_operators(definition)]


def value_shape_for(operator: Union[ConditionOperator, str]) -> ValueShape:
    """Value-shape class of an operator. Unknown operators are treated as scalar."""
    op = _coerce(ConditionOperator, operator)
    if op is None:
        return ValueShape.SCALAR
    return VALUE_SHAPE_BY_OPERATOR[op]


# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------


def _default_duration() -> dict[str, Any]:
    return {"amount": 30, "unit": TimeUnit.DAYS.value}


def _default_range(field_type: Optional[FieldType]) -> dict[str, Any]:
    if field_type == FieldType.DATE:
        return {"from": None, "to": None}
    if field_type == FieldType.TIME:
        return {"from": "09:00", "to": "18:00"}
    return {"min": 0, "max": 100}


def _default_scalar(field_type: Optional[FieldType]) -> Any:
    if field_type == FieldType.NUMERIC:
        return 0
    if field_type == FieldType.RELATION:
        return []
    if field_type == FieldType.LOCATION:
        return {"countryId": None, "cityId": None, "stateId": None, "districtId": None}
    if field_type == FieldType.STRING:
        return ""
    if field_type == FieldType.TIME:
        return "12:00"
    if field_type == FieldType.DURATION:
        return {"amount": 1, "unit": TimeUnit.DAYS.value}
    # date, enum, currency, boolean (absent) and unknown types
    return None


def default_value_for(field_type: Union[FieldType, str], operator: Union[ConditionOperator, str]) -> Any:
    """Default value for a brand-new condition on (field type, operator)."""
    ftype = _coerce(FieldType, field_type)
    shape = value_shape_for(operator)
    if shape == ValueShape.NONE:
        return None
    if shape == ValueShape.DURATION:
        return _default_duration()
    if shape == ValueShape.RANGE:
        return _default_range(ftype)
    if shape == ValueShape.LIST:
        return []
    return _default_scalar(ftype)


# -----------------------------------------------------------------------------
# Input shape
# -----------------------------------------------------------------------------

_INPUT_BY_FIELD_TYPE: dict[FieldType, InputType] = {
    FieldType.NUMERIC: InputType.NUMBER,
    FieldType.DATE: InputType.DATE,
    FieldType.BOOLEAN: InputType.NONE,
    FieldType.ENUM: InputType.SELECT,
    FieldType.RELATION: InputType.MULTI_SELECT,
    FieldType.LOCATION: InputType.LOCATION,
    FieldType.STRING: InputType.TEXT,
    FieldType.TIME: InputType.TIME,
    FieldType.CURRENCY: InputType.CURRENCY,
    FieldType.DURATION: InputType.DURATION,
}


def resolve_input_shape(field_type: Union[FieldType, str], operator: Union[ConditionOperator, str]) -> InputType:
    """Input shape the value of a (field type, operator) condition must take."""
    ftype = _coerce(FieldType, field_type)
    shape = value_shape_for(operator)
    if shape == ValueShape.NONE:
        return InputType.NONE
    if shape == ValueShape.DURATION:
        return InputType.DURATION
    if shape == ValueShape.RANGE:
        if ftype == FieldType.DATE:
            return InputType.DATE_RANGE
        if ftype == FieldType.TIME:
            return InputType.TIME_RANGE
        return InputType.RANGE
    if shape == ValueShape.LIST:
        return InputType.MULTI_SELECT
    if ftype is None:
        return InputType.TEXT
    return _INPUT_BY_FIELD_TYPE.get(ftype, InputType.TEXT)


def _is_optional_str(value: Any) -> bool:
    return value is None or isinstance(value, str)


def matches_input_shape(input_type: Union[InputType, str], value: Any) -> bool:
    """
    Structural check that `value` has the shape `input_type` demands.
    Nullable scalars (date, select, currency, time) accept None as "not filled in yet".
    """
    itype = _coerce(InputType, input_type)
    if itype is None:
        return False
    if itype == InputType.NONE:
        return value is None
    if itype == InputType.NUMBER:
        return is_number(value)
    if itype == InputType.RANGE:
        return is_range_value(value) and is_number(value["min"]) and is_number(value["max"])
    if itype == InputType.DATE_RANGE:
        return is_date_range_value(value) and _is_optional_str(value["from"]) and _is_optional_str(value["to"])
    if itype == InputType.TIME_RANGE:
        return is_time_range_value(value)
    if itype == InputType.DURATION:
        return is_duration_value(value) and is_number(value["amount"])
    if itype == InputType.TIME:
        return value is None or is_time_string(value)
    if itype == InputType.TEXT:
        return isinstance(value, str)
    if itype == InputType.MULTI_SELECT:
        return isinstance(value, list)
    if itype == InputType.LOCATION:
        return is_location_value(value)
    # date, select, currency
    return _is_optional_str(value)


# -----------------------------------------------------------------------------
# Operator change
# -----------------------------------------------------------------------------


def _unwrap_scalar(field_type: Optional[FieldType], value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    if is_range_value(value):
        return value["min"]
    if is_duration_value(value):
        # duration-typed fields take the whole duration under scalar operators
        return value if field_type == FieldType.DURATION else value["amount"]
    if is_date_range_value(value):
        return value["from"]
    return value


def convert_value_on_operator_change(
    field_key: str,
    new_operator: Union[ConditionOperator, str],
    current_value: Any,
    fields: FieldCatalog,
) -> Any:
    """
    Carry `current_value` over to the shape `new_operator` demands, losing as
    little as possible. Unknown field or operator -> None.
    """
    definition = fields.get(field_key)
    operator = _coerce(ConditionOperator, new_operator)
    if definition is None or operator is None:
        logger.debug("Operator change on unknown field/operator: %s %s", field_key, new_operator)
        return None
    ftype = definition.type
    shape = value_shape_for(operator)

    if shape == ValueShape.NONE:
        return None

    if shape == ValueShape.DURATION:
        return current_value if is_duration_value(current_value) else _default_duration()

    if shape == ValueShape.RANGE:
        if ftype == FieldType.DATE:
            # a scalar date cannot be widened into a range; only a range survives
            if is_date_range_value(current_value) and not is_time_range_value(current_value):
                return current_value
            return _default_range(ftype)
        if ftype == FieldType.TIME:
            return current_value if is_time_range_value(current_value) else _default_range(ftype)
        if is_range_value(current_value):
            return current_value
        base = current_value if is_number(current_value) else 0
        return {"min": base, "max": base + 100}

    if shape == ValueShape.LIST:
        if isinstance(current_value, list):
            return current_value
        if current_value is not None and current_value != "":
            return [current_value]
        return []

    unwrapped = _unwrap_scalar(ftype, current_value)
    if unwrapped is None:
        return default_value_for(ftype, operator)
    return unwrapped
