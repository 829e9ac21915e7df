"""
Order fulfillment routing domain.

Picks the stock locations, split policy, dropship or backorder behaviour for
an order. Unlike payment rules, fulfillment trees must be fully wired: every
condition has both branches, the start node leads somewhere and every result
is reachable.
"""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from policytree.models.decision_tree import TreeModel
from policytree.models.fields import (
    EnumFieldMeta,
    FieldDefinition,
    LocationFieldMeta,
    RelationFieldMeta,
    SelectOption,
    TimeRangeMeta,
    field_catalog,
)
from policytree.models.operators import ConditionOperator, FieldType
from policytree.models.values import NonEmptyStr, NumericValue, RangeValue, StringList, TimeRangeValue
from policytree.services.registry import DomainConfig
from policytree.services.validation import (
    ConditionBranchesRule,
    ResultHasIncomingEdgeRule,
    StartHasOutgoingEdgeRule,
)

FULFILLMENT_DOMAIN = "fulfillment"


class FulfillmentConditionField(str, Enum):
    CUSTOMER_GROUP = "CUSTOMER_GROUP"
    ORDER_TOTAL = "ORDER_TOTAL"
    ORDER_ITEM_COUNT = "ORDER_ITEM_COUNT"
    ORDER_WEIGHT = "ORDER_WEIGHT"
    ORDER_CURRENCY = "ORDER_CURRENCY"
    PRODUCT_TAG = "PRODUCT_TAG"
    PRODUCT_CATEGORY = "PRODUCT_CATEGORY"
    PRODUCT_BRAND = "PRODUCT_BRAND"
    SHIPPING_METHOD = "SHIPPING_METHOD"
    DESTINATION_COUNTRY = "DESTINATION_COUNTRY"
    DESTINATION_STATE = "DESTINATION_STATE"
    DESTINATION_CITY = "DESTINATION_CITY"
    DAY_OF_WEEK = "DAY_OF_WEEK"
    TIME_OF_DAY = "TIME_OF_DAY"
    IS_HOLIDAY = "IS_HOLIDAY"


class Currency(str, Enum):
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class DayOfWeek(str, Enum):
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"


class FulfillmentActionType(str, Enum):
    USE_LOCATION = "USE_LOCATION"
    EXCLUDE_LOCATION = "EXCLUDE_LOCATION"
    PREFER_LOCATION = "PREFER_LOCATION"
    ALLOW_SPLIT = "ALLOW_SPLIT"
    DENY_SPLIT = "DENY_SPLIT"
    USE_DROPSHIP = "USE_DROPSHIP"
    BACKORDER = "BACKORDER"
    REJECT = "REJECT"
    FLAG_FOR_REVIEW = "FLAG_FOR_REVIEW"


# -----------------------------------------------------------------------------
# Field catalog
# -----------------------------------------------------------------------------

_F = FulfillmentConditionField
_OP = ConditionOperator

_NUMERIC_OPS = [_OP.EQ, _OP.NEQ, _OP.GT, _OP.GTE, _OP.LT, _OP.LTE, _OP.BETWEEN, _OP.IN, _OP.NOT_IN]
_LOCATION_OPS = [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN, _OP.IS_NULL, _OP.IS_NOT_NULL]
_PRODUCT_OPS = [_OP.HAS_ANY, _OP.HAS_ALL, _OP.HAS_NONE, _OP.EXISTS, _OP.NOT_EXISTS]


def _numeric(field: FulfillmentConditionField, label: str, description: str) -> FieldDefinition:
    return FieldDefinition(
        key=field.value, label=label, description=description, type=FieldType.NUMERIC, operators=_NUMERIC_OPS
    )


def _destination(field: FulfillmentConditionField, label: str, location_type: str) -> FieldDefinition:
    return FieldDefinition(
        key=field.value,
        label=label,
        description=f"Delivery {location_type}",
        type=FieldType.LOCATION,
        operators=_LOCATION_OPS,
        metadata=LocationFieldMeta(
            location_type=location_type,
            depends_on=[] if field == _F.DESTINATION_COUNTRY else [_F.DESTINATION_COUNTRY.value],
        ),
    )


def _product(field: FulfillmentConditionField, label: str, endpoint: str, query_key: str) -> FieldDefinition:
    return FieldDefinition(
        key=field.value,
        label=label,
        description=f"{label}s of the ordered products",
        type=FieldType.RELATION,
        operators=_PRODUCT_OPS,
        metadata=RelationFieldMeta(endpoint=endpoint, query_key=query_key),
    )


FULFILLMENT_FIELDS = field_catalog(
    _numeric(_F.ORDER_TOTAL, "Order total", "Total order amount"),
    _numeric(_F.ORDER_ITEM_COUNT, "Item count", "Total number of items in the order"),
    _numeric(_F.ORDER_WEIGHT, "Order weight", "Total order weight (kg)"),
    FieldDefinition(
        key=_F.ORDER_CURRENCY.value,
        label="Currency",
        description="Order currency",
        type=FieldType.CURRENCY,
        operators=[_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN],
        metadata=EnumFieldMeta(
            enum_type="Currency",
            options=[SelectOption(value=c.value, label=c.value) for c in Currency],
        ),
    ),
    _destination(_F.DESTINATION_COUNTRY, "Destination country", "country"),
    _destination(_F.DESTINATION_STATE, "Destination state", "state"),
    _destination(_F.DESTINATION_CITY, "Destination city", "city"),
    _product(_F.PRODUCT_TAG, "Product tag", "/admin/products/tags", "select-tags"),
    _product(_F.PRODUCT_CATEGORY, "Product category", "/admin/products/categories", "select-categories"),
    _product(_F.PRODUCT_BRAND, "Product brand", "/admin/products/brands", "select-brands"),
    FieldDefinition(
        key=_F.CUSTOMER_GROUP.value,
        label="Customer group",
        description="Customer group of the buyer",
        type=FieldType.RELATION,
        operators=[_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN, _OP.IS_NULL, _OP.IS_NOT_NULL],
        metadata=RelationFieldMeta(
            endpoint="/admin/users/customer-groups",
            multiple=False,
            label_field="name",
            value_field="id",
        ),
    ),
    FieldDefinition(
        key=_F.SHIPPING_METHOD.value,
        label="Shipping method",
        description="Shipping method chosen at checkout",
        type=FieldType.RELATION,
        operators=[_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN],
        metadata=RelationFieldMeta(endpoint="/api/shipping-methods", multiple=False),
    ),
    FieldDefinition(
        key=_F.DAY_OF_WEEK.value,
        label="Day of week",
        description="Day the order was placed",
        type=FieldType.ENUM,
        operators=[_OP.IN, _OP.NOT_IN],
        metadata=EnumFieldMeta(
            enum_type="DayOfWeek",
            options=[SelectOption(value=d.value, label=d.value.capitalize()) for d in DayOfWeek],
        ),
    ),
    FieldDefinition(
        key=_F.TIME_OF_DAY.value,
        label="Time of day",
        description="Time window the order was placed in",
        type=FieldType.TIME,
        operators=[_OP.BETWEEN],
        metadata=TimeRangeMeta(),
    ),
    FieldDefinition(
        key=_F.IS_HOLIDAY.value,
        label="Holiday",
        description="Whether the order was placed on a holiday",
        type=FieldType.BOOLEAN,
        operators=[_OP.IS_TRUE, _OP.IS_FALSE],
    ),
)


# -----------------------------------------------------------------------------
# Conditions
# -----------------------------------------------------------------------------


class _FulfillmentCondition(BaseModel):
    model_config = {"extra": "forbid"}


NumericFieldKey = Literal["ORDER_TOTAL", "ORDER_ITEM_COUNT", "ORDER_WEIGHT"]
LocationFieldKey = Literal["DESTINATION_COUNTRY", "DESTINATION_STATE", "DESTINATION_CITY"]
ProductFieldKey = Literal["PRODUCT_TAG", "PRODUCT_CATEGORY", "PRODUCT_BRAND"]


class NumericCondition(_FulfillmentCondition):
    field: NumericFieldKey
    operator: Literal["EQ", "NEQ", "GT", "GTE", "LT", "LTE"]
    value: NumericValue


class NumericRangeCondition(_FulfillmentCondition):
    field: NumericFieldKey
    operator: Literal["BETWEEN"]
    value: RangeValue


class NumericListCondition(_FulfillmentCondition):
    field: NumericFieldKey
    operator: Literal["IN", "NOT_IN"]
    value: list[NumericValue] = Field(..., min_length=1)


class CurrencyCondition(_FulfillmentCondition):
    field: Literal["ORDER_CURRENCY"]
    operator: Literal["EQ", "NEQ"]
    value: Currency


class CurrencyListCondition(_FulfillmentCondition):
    field: Literal["ORDER_CURRENCY"]
    operator: Literal["IN", "NOT_IN"]
    value: list[Currency] = Field(..., min_length=1)


class LocationCondition(_FulfillmentCondition):
    field: LocationFieldKey
    operator: Literal["EQ", "NEQ"]
    value: NonEmptyStr


class LocationListCondition(_FulfillmentCondition):
    field: LocationFieldKey
    operator: Literal["IN", "NOT_IN"]
    value: StringList


class LocationPresenceCondition(_FulfillmentCondition):
    field: LocationFieldKey
    operator: Literal["IS_NULL", "IS_NOT_NULL"]
    value: None = None


class ProductRelationCondition(_FulfillmentCondition):
    field: ProductFieldKey
    operator: Literal["HAS_ANY", "HAS_ALL", "HAS_NONE"]
    value: StringList


class ProductExistsCondition(_FulfillmentCondition):
    field: ProductFieldKey
    operator: Literal["EXISTS", "NOT_EXISTS"]
    value: None = None


class CustomerGroupCondition(_FulfillmentCondition):
    field: Literal["CUSTOMER_GROUP"]
    operator: Literal["EQ", "NEQ"]
    value: NonEmptyStr


class CustomerGroupListCondition(_FulfillmentCondition):
    field: Literal["CUSTOMER_GROUP"]
    operator: Literal["IN", "NOT_IN"]
    value: StringList


class CustomerGroupPresenceCondition(_FulfillmentCondition):
    field: Literal["CUSTOMER_GROUP"]
    operator: Literal["IS_NULL", "IS_NOT_NULL"]
    value: None = None


class DayOfWeekCondition(_FulfillmentCondition):
    field: Literal["DAY_OF_WEEK"]
    operator: Literal["IN", "NOT_IN"]
    value: list[DayOfWeek] = Field(..., min_length=1)


class TimeOfDayCondition(_FulfillmentCondition):
    field: Literal["TIME_OF_DAY"]
    operator: Literal["BETWEEN"]
    value: TimeRangeValue


class HolidayCondition(_FulfillmentCondition):
    field: Literal["IS_HOLIDAY"]
    operator: Literal["IS_TRUE", "IS_FALSE"]
    value: None = None


class ShippingMethodCondition(_FulfillmentCondition):
    field: Literal["SHIPPING_METHOD"]
    operator: Literal["EQ", "NEQ"]
    value: NonEmptyStr


class ShippingMethodListCondition(_FulfillmentCondition):
    field: Literal["SHIPPING_METHOD"]
    operator: Literal["IN", "NOT_IN"]
    value: StringList


FulfillmentCondition = Union[
    NumericCondition,
    NumericRangeCondition,
    NumericListCondition,
    CurrencyCondition,
    CurrencyListCondition,
    LocationCondition,
    LocationListCondition,
    LocationPresenceCondition,
    ProductRelationCondition,
    ProductExistsCondition,
    CustomerGroupCondition,
    CustomerGroupListCondition,
    CustomerGroupPresenceCondition,
    DayOfWeekCondition,
    TimeOfDayCondition,
    HolidayCondition,
    ShippingMethodCondition,
    ShippingMethodListCondition,
]


# -----------------------------------------------------------------------------
# Actions
# -----------------------------------------------------------------------------


class UseLocationAction(TreeModel):
    type: Literal["USE_LOCATION"] = "USE_LOCATION"
    location_ids: StringList
    priority: Literal["sequential", "parallel", "random"] = "sequential"


class ExcludeLocationAction(TreeModel):
    type: Literal["EXCLUDE_LOCATION"] = "EXCLUDE_LOCATION"
    location_ids: StringList


class PreferLocationAction(TreeModel):
    type: Literal["PREFER_LOCATION"] = "PREFER_LOCATION"
    location_id: NonEmptyStr
    fallback_allowed: bool = True


class AllowSplitAction(TreeModel):
    type: Literal["ALLOW_SPLIT"] = "ALLOW_SPLIT"
    max_split_count: Optional[int] = Field(None, ge=2, le=10)
    split_strategy: Literal["minimize_shipments", "fastest_delivery"] = "minimize_shipments"


class DenySplitAction(TreeModel):
    type: Literal["DENY_SPLIT"] = "DENY_SPLIT"


class UseDropshipAction(TreeModel):
    type: Literal["USE_DROPSHIP"] = "USE_DROPSHIP"
    supplier_id: NonEmptyStr
    only_if_out_of_stock: bool = True
    max_lead_days: Optional[int] = Field(None, gt=0)


class BackorderAction(TreeModel):
    type: Literal["BACKORDER"] = "BACKORDER"
    max_wait_days: Optional[int] = Field(None, gt=0)
    notify_customer: bool = True
    estimated_date: Optional[str] = Field(None, description="ISO-8601 date-time")


class RejectAction(TreeModel):
    type: Literal["REJECT"] = "REJECT"
    reason: Optional[str] = Field(None, max_length=500)
    refund_automatically: bool = True


class FlagForReviewAction(TreeModel):
    type: Literal["FLAG_FOR_REVIEW"] = "FLAG_FOR_REVIEW"
    reason: Optional[str] = Field(None, max_length=500)
    assign_to: Optional[str] = None
    priority: Literal["low", "medium", "high", "urgent"] = "medium"


FulfillmentAction = Annotated[
    Union[
        UseLocationAction,
        ExcludeLocationAction,
        PreferLocationAction,
        AllowSplitAction,
        DenySplitAction,
        UseDropshipAction,
        BackorderAction,
        RejectAction,
        FlagForReviewAction,
    ],
    Field(discriminator="type"),
]


def find_conflicting_actions(action_types: list[str]) -> Optional[str]:
    """Reason the action combination is contradictory, or None when it is consistent."""
    types = set(action_types)
    if FulfillmentActionType.REJECT.value in types and len(action_types) > 1:
        return "REJECT cannot be combined with other actions"
    if {FulfillmentActionType.ALLOW_SPLIT.value, FulfillmentActionType.DENY_SPLIT.value} <= types:
        return "ALLOW_SPLIT and DENY_SPLIT cannot be used together"
    return None


class FulfillmentResultData(TreeModel):
    """Actions applied when a path ends here."""

    label: str = Field(..., min_length=1, description="Result name")
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern=r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
    actions: list[FulfillmentAction] = Field(..., min_length=1, description="At least one action")
    is_terminal: bool = True

    @field_validator("actions")
    @classmethod
    def _check_conflicts(cls, actions: list) -> list:
        reason = find_conflicting_actions([a.type for a in actions])
        if reason:
            raise ValueError(f"Conflicting actions: {reason}")
        return actions


fulfillment_domain = DomainConfig(
    name=FULFILLMENT_DOMAIN,
    fields=FULFILLMENT_FIELDS,
    condition_model=FulfillmentCondition,
    result_model=FulfillmentResultData,
    min_result_nodes=1,
    tree_rules=(ConditionBranchesRule(), StartHasOutgoingEdgeRule(), ResultHasIncomingEdgeRule()),
    start_label="Fulfillment Strategy",
    description="Order fulfillment routing across stock locations",
)
