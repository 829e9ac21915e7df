"""
Customer segment domain.

Smart customer groups: a tree over order history, account dates, verification
flags, account enums, tags and address decides which segment a customer
falls into. The only built-in domain with date fields, so its conditions carry
ISO datetimes, date ranges and relative durations.
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from policytree.models.decision_tree import TreeModel
from policytree.models.fields import (
    EnumFieldMeta,
    FieldDefinition,
    LocationFieldMeta,
    RelationFieldMeta,
    SelectOption,
    field_catalog,
)
from policytree.models.operators import ConditionOperator, FieldType
from policytree.models.values import (
    DateRangeValue,
    DurationValue,
    LocationValue,
    NonEmptyStr,
    NumericValue,
    RangeValue,
    StringList,
)
from policytree.services.registry import DomainConfig

CUSTOMER_SEGMENT_DOMAIN = "customerSegment"


class CustomerSegmentField(str, Enum):
    ORDER_COUNT = "ORDER_COUNT"
    TOTAL_SPENT = "TOTAL_SPENT"
    AVERAGE_ORDER_VALUE = "AVERAGE_ORDER_VALUE"
    LAST_ORDER_DATE = "LAST_ORDER_DATE"
    FIRST_ORDER_DATE = "FIRST_ORDER_DATE"
    CREATED_AT = "CREATED_AT"
    EMAIL_VERIFIED_AT = "EMAIL_VERIFIED_AT"
    PHONE_VERIFIED_AT = "PHONE_VERIFIED_AT"
    IS_EMAIL_VERIFIED = "IS_EMAIL_VERIFIED"
    IS_PHONE_VERIFIED = "IS_PHONE_VERIFIED"
    HAS_ORDERS = "HAS_ORDERS"
    HAS_ADDRESS = "HAS_ADDRESS"
    ACCOUNT_STATUS = "ACCOUNT_STATUS"
    REGISTRATION_SOURCE = "REGISTRATION_SOURCE"
    SUBSCRIPTION_STATUS = "SUBSCRIPTION_STATUS"
    CUSTOMER_TAGS = "CUSTOMER_TAGS"
    CUSTOMER_GROUPS = "CUSTOMER_GROUPS"
    PRICE_LIST = "PRICE_LIST"
    COUNTRY = "COUNTRY"
    STATE = "STATE"
    CITY = "CITY"
    DISTRICT = "DISTRICT"


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PASSIVE = "PASSIVE"
    BANNED = "BANNED"
    PENDING_APPROVAL = "PENDING_APPROVAL"


class RegistrationSource(str, Enum):
    WEB_REGISTER = "WEB_REGISTER"
    ADMIN_PANEL = "ADMIN_PANEL"
    IMPORT_EXCEL = "IMPORT_EXCEL"
    API = "API"
    CHECKOUT_GUEST = "CHECKOUT_GUEST"
    PROVIDER_OAUTH = "PROVIDER_OAUTH"


class SubscriptionStatus(str, Enum):
    SUBSCRIBED = "SUBSCRIBED"
    UNSUBSCRIBED = "UNSUBSCRIBED"
    PENDING = "PENDING"


_ACCOUNT_STATUS_LABELS = {
    AccountStatus.ACTIVE: "Active",
    AccountStatus.PASSIVE: "Passive",
    AccountStatus.BANNED: "Banned",
    AccountStatus.PENDING_APPROVAL: "Pending approval",
}

_REGISTRATION_SOURCE_LABELS = {
    RegistrationSource.WEB_REGISTER: "Web sign-up",
    RegistrationSource.ADMIN_PANEL: "Admin panel",
    RegistrationSource.IMPORT_EXCEL: "Import",
    RegistrationSource.API: "API",
    RegistrationSource.CHECKOUT_GUEST: "Checkout",
    RegistrationSource.PROVIDER_OAUTH: "Provider OAuth",
}

_SUBSCRIPTION_STATUS_LABELS = {
    SubscriptionStatus.SUBSCRIBED: "Subscribed",
    SubscriptionStatus.UNSUBSCRIBED: "Unsubscribed",
    SubscriptionStatus.PENDING: "Pending",
}


def _label(labels: dict, enum_cls: type[Enum], raw: Union[Enum, str]) -> str:
    try:
        return labels[enum_cls(raw)]
    except ValueError:
        return str(raw)


def account_status_label(status: Union[AccountStatus, str]) -> str:
    return _label(_ACCOUNT_STATUS_LABELS, AccountStatus, status)


def registration_source_label(source: Union[RegistrationSource, str]) -> str:
    return _label(_REGISTRATION_SOURCE_LABELS, RegistrationSource, source)


def subscription_status_label(status: Union[SubscriptionStatus, str]) -> str:
    return _label(_SUBSCRIPTION_STATUS_LABELS, SubscriptionStatus, status)


# -----------------------------------------------------------------------------
# Field catalog
# -----------------------------------------------------------------------------

_F = CustomerSegmentField
_OP = ConditionOperator

_NUMERIC_OPS = [_OP.EQ, _OP.NEQ, _OP.GT, _OP.GTE, _OP.LT, _OP.LTE, _OP.BETWEEN, _OP.IS_NULL, _OP.IS_NOT_NULL]
_DATE_OPS = [
    _OP.BEFORE,
    _OP.AFTER,
    _OP.ON_DATE,
    _OP.BETWEEN,
    _OP.WITHIN_LAST,
    _OP.NOT_WITHIN_LAST,
    _OP.IS_NULL,
    _OP.IS_NOT_NULL,
]
_ENUM_OPS = [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN]
_TAG_OPS = [_OP.HAS_ANY, _OP.HAS_ALL, _OP.HAS_NONE, _OP.EXISTS, _OP.NOT_EXISTS]
_LOCATION_OPS = [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN, _OP.IS_NULL, _OP.IS_NOT_NULL]


def _numeric(field: CustomerSegmentField, label: str, description: str) -> FieldDefinition:
    return FieldDefinition(
        key=field.value, label=label, description=description, type=FieldType.NUMERIC, operators=_NUMERIC_OPS
    )


def _date(field: CustomerSegmentField, label: str, description: str) -> FieldDefinition:
    return FieldDefinition(
        key=field.value, label=label, description=description, type=FieldType.DATE, operators=_DATE_OPS
    )


def _flag(field: CustomerSegmentField, label: str, description: str, nullable: bool) -> FieldDefinition:
    operators = [_OP.IS_TRUE, _OP.IS_FALSE]
    if nullable:
        operators += [_OP.IS_NULL, _OP.IS_NOT_NULL]
    return FieldDefinition(
        key=field.value, label=label, description=description, type=FieldType.BOOLEAN, operators=operators
    )


def _enum(field: CustomerSegmentField, label: str, description: str, enum_cls, label_of) -> FieldDefinition:
    return FieldDefinition(
        key=field.value,
        label=label,
        description=description,
        type=FieldType.ENUM,
        operators=_ENUM_OPS,
        metadata=EnumFieldMeta(
            enum_type=enum_cls.__name__,
            options=[SelectOption(value=m.value, label=label_of(m)) for m in enum_cls],
        ),
    )


def _location(field: CustomerSegmentField, label: str, location_type: str, depends_on=()) -> FieldDefinition:
    return FieldDefinition(
        key=field.value,
        label=label,
        description=f"{label} of the customer address",
        type=FieldType.LOCATION,
        operators=_LOCATION_OPS,
        metadata=LocationFieldMeta(location_type=location_type, depends_on=[f.value for f in depends_on]),
    )


CUSTOMER_SEGMENT_FIELDS = field_catalog(
    _numeric(_F.ORDER_COUNT, "Order count", "Total number of orders"),
    _numeric(_F.TOTAL_SPENT, "Total spent", "Total amount spent"),
    _numeric(_F.AVERAGE_ORDER_VALUE, "Average order value", "Average amount per order"),
    _date(_F.LAST_ORDER_DATE, "Last order date", "When the latest order was placed"),
    _date(_F.FIRST_ORDER_DATE, "First order date", "When the first order was placed"),
    _date(_F.CREATED_AT, "Registered at", "Customer registration date"),
    _date(_F.EMAIL_VERIFIED_AT, "Email verified at", "Email verification date"),
    _date(_F.PHONE_VERIFIED_AT, "Phone verified at", "Phone verification date"),
    _flag(_F.IS_EMAIL_VERIFIED, "Email verified", "Whether the email address is verified", nullable=True),
    _flag(_F.IS_PHONE_VERIFIED, "Phone verified", "Whether the phone number is verified", nullable=True),
    _flag(_F.HAS_ORDERS, "Has orders", "Whether the customer has at least one order", nullable=False),
    _flag(_F.HAS_ADDRESS, "Has address", "Whether the customer has a saved address", nullable=False),
    _enum(_F.ACCOUNT_STATUS, "Account status", "Customer account status", AccountStatus, account_status_label),
    _enum(
        _F.REGISTRATION_SOURCE,
        "Registration source",
        "Where the customer signed up",
        RegistrationSource,
        registration_source_label,
    ),
    _enum(
        _F.SUBSCRIPTION_STATUS,
        "Subscription status",
        "Newsletter subscription status",
        SubscriptionStatus,
        subscription_status_label,
    ),
    FieldDefinition(
        key=_F.CUSTOMER_TAGS.value,
        label="Customer tags",
        description="Tags assigned to the customer",
        type=FieldType.RELATION,
        operators=_TAG_OPS,
        metadata=RelationFieldMeta(endpoint="/admin/products/tags/get-all-tags-id-and-name", query_key="select-tags"),
    ),
    FieldDefinition(
        key=_F.CUSTOMER_GROUPS.value,
        label="Customer groups",
        description="Groups the customer belongs to",
        type=FieldType.RELATION,
        operators=_TAG_OPS,
        metadata=RelationFieldMeta(endpoint="/admin/users/customer-groups", query_key="customer-groups"),
    ),
    FieldDefinition(
        key=_F.PRICE_LIST.value,
        label="Price list",
        description="Price list assigned to the customer",
        type=FieldType.RELATION,
        operators=[_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN, _OP.IS_NULL, _OP.IS_NOT_NULL],
        metadata=RelationFieldMeta(endpoint="/api/price-lists", query_key="price-lists", multiple=False),
    ),
    _location(_F.COUNTRY, "Country", "country"),
    _location(_F.STATE, "State", "state", depends_on=(_F.COUNTRY,)),
    _location(_F.CITY, "City", "city", depends_on=(_F.COUNTRY,)),
    _location(_F.DISTRICT, "District", "district", depends_on=(_F.COUNTRY, _F.CITY)),
)


# -----------------------------------------------------------------------------
# Conditions
# -----------------------------------------------------------------------------


class _SegmentCondition(BaseModel):
    model_config = {"extra": "forbid"}


NumericFieldKey = Literal["ORDER_COUNT", "TOTAL_SPENT", "AVERAGE_ORDER_VALUE"]
DateFieldKey = Literal["LAST_ORDER_DATE", "FIRST_ORDER_DATE", "CREATED_AT", "EMAIL_VERIFIED_AT", "PHONE_VERIFIED_AT"]
BooleanFieldKey = Literal["IS_EMAIL_VERIFIED", "IS_PHONE_VERIFIED", "HAS_ORDERS", "HAS_ADDRESS"]
TagFieldKey = Literal["CUSTOMER_TAGS", "CUSTOMER_GROUPS"]
LocationFieldKey = Literal["COUNTRY", "STATE", "CITY", "DISTRICT"]
NullOperator = Literal["IS_NULL", "IS_NOT_NULL"]
EqualityOperator = Literal["EQ", "NEQ"]
ListOperator = Literal["IN", "NOT_IN"]


class NumericCondition(_SegmentCondition):
    field: NumericFieldKey
    operator: Literal["EQ", "NEQ", "GT", "GTE", "LT", "LTE"]
    value: NumericValue


class NumericRangeCondition(_SegmentCondition):
    field: NumericFieldKey
    operator: Literal["BETWEEN"]
    value: RangeValue


class NumericListCondition(_SegmentCondition):
    field: NumericFieldKey
    operator: ListOperator
    value: list[NumericValue] = Field(..., min_length=1)


class NumericNullCondition(_SegmentCondition):
    field: NumericFieldKey
    operator: NullOperator
    value: None = None


class DateCondition(_SegmentCondition):
    field: DateFieldKey
    operator: Literal["BEFORE", "AFTER", "ON_DATE"]
    value: datetime


class DateWithinCondition(_SegmentCondition):
    field: DateFieldKey
    operator: Literal["WITHIN_LAST", "NOT_WITHIN_LAST", "WITHIN_NEXT"]
    value: DurationValue


class DateRangeCondition(_SegmentCondition):
    field: DateFieldKey
    operator: Literal["BETWEEN"]
    value: DateRangeValue


class DateNullCondition(_SegmentCondition):
    field: DateFieldKey
    operator: NullOperator
    value: None = None


class BooleanCondition(_SegmentCondition):
    field: BooleanFieldKey
    operator: Literal["IS_TRUE", "IS_FALSE", "IS_NULL", "IS_NOT_NULL"]
    value: None = None


class AccountStatusCondition(_SegmentCondition):
    field: Literal["ACCOUNT_STATUS"]
    operator: EqualityOperator
    value: AccountStatus


class AccountStatusListCondition(_SegmentCondition):
    field: Literal["ACCOUNT_STATUS"]
    operator: ListOperator
    value: list[AccountStatus] = Field(..., min_length=1)


class RegistrationSourceCondition(_SegmentCondition):
    field: Literal["REGISTRATION_SOURCE"]
    operator: EqualityOperator
    value: RegistrationSource


class RegistrationSourceListCondition(_SegmentCondition):
    field: Literal["REGISTRATION_SOURCE"]
    operator: ListOperator
    value: list[RegistrationSource] = Field(..., min_length=1)


class SubscriptionStatusCondition(_SegmentCondition):
    field: Literal["SUBSCRIPTION_STATUS"]
    operator: EqualityOperator
    value: SubscriptionStatus


class SubscriptionStatusListCondition(_SegmentCondition):
    field: Literal["SUBSCRIPTION_STATUS"]
    operator: ListOperator
    value: list[SubscriptionStatus] = Field(..., min_length=1)


class TagCondition(_SegmentCondition):
    field: TagFieldKey
    operator: Literal["HAS_ANY", "HAS_ALL", "HAS_NONE"]
    value: StringList


class TagExistsCondition(_SegmentCondition):
    field: TagFieldKey
    operator: Literal["EXISTS", "NOT_EXISTS"]
    value: None = None


class PriceListCondition(_SegmentCondition):
    field: Literal["PRICE_LIST"]
    operator: EqualityOperator
    value: NonEmptyStr


class PriceListListCondition(_SegmentCondition):
    field: Literal["PRICE_LIST"]
    operator: ListOperator
    value: StringList


class PriceListNullCondition(_SegmentCondition):
    field: Literal["PRICE_LIST"]
    operator: NullOperator
    value: None = None


class LocationCondition(_SegmentCondition):
    """Equality against a location id or a composite location pick."""

    field: LocationFieldKey
    operator: EqualityOperator
    value: Union[NonEmptyStr, LocationValue]


class LocationListCondition(_SegmentCondition):
    field: LocationFieldKey
    operator: ListOperator
    value: StringList


class LocationTextCondition(_SegmentCondition):
    field: LocationFieldKey
    operator: Literal["CONTAINS", "NOT_CONTAINS", "STARTS_WITH", "ENDS_WITH"]
    value: NonEmptyStr


class LocationEmptyCondition(_SegmentCondition):
    field: LocationFieldKey
    operator: Literal["IS_EMPTY", "IS_NOT_EMPTY", "IS_NULL", "IS_NOT_NULL"]
    value: None = None


CustomerSegmentCondition = Union[
    NumericCondition,
    NumericRangeCondition,
    NumericListCondition,
    NumericNullCondition,
    DateCondition,
    DateWithinCondition,
    DateRangeCondition,
    DateNullCondition,
    BooleanCondition,
    AccountStatusCondition,
    AccountStatusListCondition,
    RegistrationSourceCondition,
    RegistrationSourceListCondition,
    SubscriptionStatusCondition,
    SubscriptionStatusListCondition,
    TagCondition,
    TagExistsCondition,
    PriceListCondition,
    PriceListListCondition,
    PriceListNullCondition,
    LocationCondition,
    LocationListCondition,
    LocationTextCondition,
    LocationEmptyCondition,
]


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------


class CustomerSegmentResultData(TreeModel):
    """The segment a customer lands in."""

    label: str = Field(..., min_length=1, description="Segment name")
    color: Optional[str] = None
    description: Optional[str] = None


customer_segment_domain = DomainConfig(
    name=CUSTOMER_SEGMENT_DOMAIN,
    fields=CUSTOMER_SEGMENT_FIELDS,
    condition_model=CustomerSegmentCondition,
    result_model=CustomerSegmentResultData,
    min_result_nodes=1,
    start_label="Customer Segment",
    description="Smart customer group membership",
)
