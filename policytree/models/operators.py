"""
Enumerations shared by every decision tree domain.

Operators, field types, value-shape classes and the input component types
the authoring UI renders for a condition value.
"""

from enum import Enum


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class ConditionOperator(str, Enum):
    """Comparison / test applied by a condition."""

    # Comparison
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    # Array
    IN = "IN"
    NOT_IN = "NOT_IN"
    # Range
    BETWEEN = "BETWEEN"
    # String
    CONTAINS = "CONTAINS"
    NOT_CONTAINS = "NOT_CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    IS_EMPTY = "IS_EMPTY"
    IS_NOT_EMPTY = "IS_NOT_EMPTY"
    # Relation
    HAS_ANY = "HAS_ANY"
    HAS_ALL = "HAS_ALL"
    HAS_NONE = "HAS_NONE"
    EXISTS = "EXISTS"
    NOT_EXISTS = "NOT_EXISTS"
    # Null / boolean
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"
    IS_TRUE = "IS_TRUE"
    IS_FALSE = "IS_FALSE"
    # Date
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    ON_DATE = "ON_DATE"
    WITHIN_LAST = "WITHIN_LAST"
    WITHIN_NEXT = "WITHIN_NEXT"
    NOT_WITHIN_LAST = "NOT_WITHIN_LAST"
    NOT_WITHIN_NEXT = "NOT_WITHIN_NEXT"


class FieldType(str, Enum):
    """Semantic type of a field a condition can test."""

    NUMERIC = "numeric"
    STRING = "string"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DURATION = "duration"
    CURRENCY = "currency"
    ENUM = "enum"
    RELATION = "relation"
    LOCATION = "location"


class TimeUnit(str, Enum):
    MINUTES = "MINUTES"
    HOURS = "HOURS"
    DAYS = "DAYS"
    WEEKS = "WEEKS"
    MONTHS = "MONTHS"
    YEARS = "YEARS"


class LogicalOperator(str, Enum):
    """Combinator for the conditions of a condition group."""

    AND = "AND"
    OR = "OR"


class EdgeType(str, Enum):
    """Logical branch of the source node an edge follows."""

    DEFAULT = "default"
    YES = "yes"
    NO = "no"


class SourceHandle(str, Enum):
    """Connector on the source node an edge leaves from."""

    DEFAULT = "default"
    YES = "yes"
    NO = "no"
    OUTPUT = "output"


class ValueShape(str, Enum):
    """Value-shape class of an operator; drives defaults and conversions."""

    NONE = "none"
    SCALAR = "scalar"
    RANGE = "range"
    DURATION = "duration"
    LIST = "list"


class InputType(str, Enum):
    """Input shape a condition value must take for a (field type, operator) pair."""

    NONE = "none"
    NUMBER = "number"
    RANGE = "range"
    DATE = "date"
    DATE_RANGE = "dateRange"
    DURATION = "duration"
    TIME = "time"
    TIME_RANGE = "timeRange"
    TEXT = "text"
    SELECT = "select"
    MULTI_SELECT = "multiSelect"
    LOCATION = "location"
    CURRENCY = "currency"


# -----------------------------------------------------------------------------
# Operator tables
# -----------------------------------------------------------------------------

_OP = ConditionOperator

OPERATORS_BY_FIELD_TYPE: dict[FieldType, list[ConditionOperator]] = {
    FieldType.NUMERIC: [_OP.EQ, _OP.NEQ, _OP.GT, _OP.GTE, _OP.LT, _OP.LTE, _OP.BETWEEN, _OP.IS_NULL, _OP.IS_NOT_NULL],
    FieldType.DATE: [
        _OP.EQ,
        _OP.NEQ,
        _OP.GT,
        _OP.GTE,
        _OP.LT,
        _OP.LTE,
        _OP.BETWEEN,
        _OP.WITHIN_LAST,
        _OP.WITHIN_NEXT,
        _OP.NOT_WITHIN_LAST,
        _OP.IS_NULL,
        _OP.IS_NOT_NULL,
    ],
    FieldType.BOOLEAN: [_OP.IS_TRUE, _OP.IS_FALSE],
    FieldType.ENUM: [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN],
    FieldType.RELATION: [_OP.HAS_ANY, _OP.HAS_ALL, _OP.HAS_NONE, _OP.EXISTS, _OP.NOT_EXISTS],
    FieldType.LOCATION: [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN, _OP.IS_NULL, _OP.IS_NOT_NULL],
    FieldType.STRING: [
        _OP.EQ,
        _OP.NEQ,
        _OP.CONTAINS,
        _OP.NOT_CONTAINS,
        _OP.STARTS_WITH,
        _OP.ENDS_WITH,
        _OP.IS_EMPTY,
        _OP.IS_NOT_EMPTY,
    ],
    FieldType.TIME: [_OP.BETWEEN],
    FieldType.CURRENCY: [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN],
    FieldType.DURATION: [_OP.EQ, _OP.GT, _OP.LT, _OP.BETWEEN],
}

OPERATOR_LABELS: dict[ConditionOperator, str] = {
    _OP.EQ: "Equals",
    _OP.NEQ: "Does not equal",
    _OP.GT: "Greater than",
    _OP.GTE: "Greater than or equal",
    _OP.LT: "Less than",
    _OP.LTE: "Less than or equal",
    _OP.BETWEEN: "Between",
    _OP.IN: "Is one of",
    _OP.NOT_IN: "Is not one of",
    _OP.CONTAINS: "Contains",
    _OP.NOT_CONTAINS: "Does not contain",
    _OP.STARTS_WITH: "Starts with",
    _OP.ENDS_WITH: "Ends with",
    _OP.IS_NULL: "Is empty",
    _OP.IS_NOT_NULL: "Is not empty",
    _OP.IS_TRUE: "Yes",
    _OP.IS_FALSE: "No",
    _OP.IS_EMPTY: "Is blank",
    _OP.IS_NOT_EMPTY: "Is filled",
    _OP.EXISTS: "Exists",
    _OP.NOT_EXISTS: "Does not exist",
    _OP.HAS_ANY: "Has any of",
    _OP.HAS_ALL: "Has all of",
    _OP.HAS_NONE: "Has none of",
    _OP.WITHIN_LAST: "Within the last",
    _OP.WITHIN_NEXT: "Within the next",
    _OP.NOT_WITHIN_LAST: "Not within the last",
    _OP.NOT_WITHIN_NEXT: "Not within the next",
    _OP.AFTER: "After",
    _OP.BEFORE: "Before",
    _OP.ON_DATE: "On date",
}

NO_VALUE_OPERATORS = frozenset(
    {_OP.IS_NULL, _OP.IS_NOT_NULL, _OP.IS_TRUE, _OP.IS_FALSE, _OP.EXISTS, _OP.NOT_EXISTS, _OP.IS_EMPTY, _OP.IS_NOT_EMPTY}
)
DURATION_OPERATORS = frozenset({_OP.WITHIN_LAST, _OP.WITHIN_NEXT, _OP.NOT_WITHIN_LAST, _OP.NOT_WITHIN_NEXT})
RANGE_OPERATORS = frozenset({_OP.BETWEEN})
MULTI_VALUE_OPERATORS = frozenset({_OP.IN, _OP.NOT_IN, _OP.HAS_ANY, _OP.HAS_ALL, _OP.HAS_NONE})

VALUE_SHAPE_BY_OPERATOR: dict[ConditionOperator, ValueShape] = {
    op: (
        ValueShape.NONE
        if op in NO_VALUE_OPERATORS
        else ValueShape.DURATION
        if op in DURATION_OPERATORS
        else ValueShape.RANGE
        if op in RANGE_OPERATORS
        else ValueShape.LIST
        if op in MULTI_VALUE_OPERATORS
        else ValueShape.SCALAR
    )
    for op in ConditionOperator
}
