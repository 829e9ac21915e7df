"""
Payment routing domain.

Decides which payment providers, payment types and installment options a
checkout offers, based on cart, customer and shipping address attributes.
"""

from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from policytree.models.decision_tree import (
    DecisionTree,
    NodeType,
    Position,
    ResultNode,
    TreeModel,
    create_default_tree,
    create_node_id,
)
from policytree.models.fields import (
    EnumFieldMeta,
    FieldDefinition,
    LocationFieldMeta,
    RelationFieldMeta,
    SelectOption,
    field_catalog,
)
from policytree.models.operators import ConditionOperator, FieldType
from policytree.models.values import NonEmptyStr, NumericValue, RangeValue, StringList
from policytree.services.registry import DomainConfig

PAYMENT_RULE_DOMAIN = "paymentRule"


class PaymentRuleConditionField(str, Enum):
    CART_TOTAL = "CART_TOTAL"
    CART_ITEM_COUNT = "CART_ITEM_COUNT"
    IS_FIRST_ORDER = "IS_FIRST_ORDER"
    CUSTOMER_TYPE = "CUSTOMER_TYPE"
    CUSTOMER_GROUP = "CUSTOMER_GROUP"
    CUSTOMER_GROUP_SMART = "CUSTOMER_GROUP_SMART"
    SHIPPING_COUNTRY = "SHIPPING_COUNTRY"
    SHIPPING_STATE = "SHIPPING_STATE"
    SHIPPING_CITY = "SHIPPING_CITY"
    SHIPPING_DISTRICT = "SHIPPING_DISTRICT"


class StoreType(str, Enum):
    B2C = "B2C"
    B2B = "B2B"


class PaymentProvider(str, Enum):
    IYZICO = "IYZICO"
    PAYTR = "PAYTR"
    STRIPE = "STRIPE"
    PAYPAL = "PAYPAL"
    BANK_TRANSFER = "BANK_TRANSFER"


class PaymentType(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY"
    WALLET = "WALLET"


_STORE_TYPE_LABELS = {
    StoreType.B2C: "B2C (End customer)",
    StoreType.B2B: "B2B (Dealer)",
}


def store_type_label(store_type: Union[StoreType, str]) -> str:
    try:
        return _STORE_TYPE_LABELS[StoreType(store_type)]
    except ValueError:
        return str(store_type)


# -----------------------------------------------------------------------------
# Field catalog
# -----------------------------------------------------------------------------

_F = PaymentRuleConditionField
_OP = ConditionOperator

NUMERIC_FIELDS = (_F.CART_TOTAL, _F.CART_ITEM_COUNT)
BOOLEAN_FIELDS = (_F.IS_FIRST_ORDER,)
ENUM_FIELDS = (_F.CUSTOMER_TYPE,)
RELATION_FIELDS = (_F.CUSTOMER_GROUP, _F.CUSTOMER_GROUP_SMART)
LOCATION_FIELDS = (_F.SHIPPING_COUNTRY, _F.SHIPPING_STATE, _F.SHIPPING_CITY, _F.SHIPPING_DISTRICT)

_NUMERIC_OPS = [_OP.EQ, _OP.GT, _OP.GTE, _OP.LT, _OP.LTE, _OP.BETWEEN]
_RELATION_OPS = [_OP.HAS_ANY, _OP.HAS_ALL, _OP.HAS_NONE, _OP.EXISTS, _OP.NOT_EXISTS]
_LOCATION_OPS = [_OP.EQ, _OP.NEQ, _OP.IN, _OP.NOT_IN]

PAYMENT_RULE_FIELDS = field_catalog(
    FieldDefinition(
        key=_F.CART_TOTAL.value,
        label="Cart total",
        description="Total cart amount",
        type=FieldType.NUMERIC,
        operators=_NUMERIC_OPS,
    ),
    FieldDefinition(
        key=_F.CART_ITEM_COUNT.value,
        label="Item count",
        description="Total number of items in the cart",
        type=FieldType.NUMERIC,
        operators=_NUMERIC_OPS,
    ),
    FieldDefinition(
        key=_F.IS_FIRST_ORDER.value,
        label="First order?",
        description="Whether this is the customer's first order",
        type=FieldType.BOOLEAN,
        operators=[_OP.IS_TRUE, _OP.IS_FALSE],
    ),
    FieldDefinition(
        key=_F.CUSTOMER_TYPE.value,
        label="Customer type",
        description="B2B or B2C customer",
        type=FieldType.ENUM,
        operators=[_OP.EQ, _OP.NEQ],
        metadata=EnumFieldMeta(
            enum_type="StoreType",
            options=[SelectOption(value=t.value, label=store_type_label(t)) for t in StoreType],
        ),
    ),
    FieldDefinition(
        key=_F.CUSTOMER_GROUP.value,
        label="Customer group",
        description="Manually curated customer group",
        type=FieldType.RELATION,
        operators=_RELATION_OPS,
        metadata=RelationFieldMeta(endpoint="/admin/users/customer-groups", query_key="customer-groups"),
    ),
    FieldDefinition(
        key=_F.CUSTOMER_GROUP_SMART.value,
        label="Smart customer group",
        description="Condition-based dynamic customer group",
        type=FieldType.RELATION,
        operators=_RELATION_OPS,
        metadata=RelationFieldMeta(
            endpoint="/admin/users/customer-groups?type=SMART",
            query_key="customer-groups-smart",
        ),
    ),
    FieldDefinition(
        key=_F.SHIPPING_COUNTRY.value,
        label="Shipping country",
        description="Country of the shipping address",
        type=FieldType.LOCATION,
        operators=_LOCATION_OPS,
        metadata=LocationFieldMeta(location_type="country"),
    ),
    FieldDefinition(
        key=_F.SHIPPING_STATE.value,
        label="Shipping state",
        description="State of the shipping address",
        type=FieldType.LOCATION,
        operators=_LOCATION_OPS,
        metadata=LocationFieldMeta(location_type="state", depends_on=[_F.SHIPPING_COUNTRY.value]),
    ),
    FieldDefinition(
        key=_F.SHIPPING_CITY.value,
        label="Shipping city",
        description="City of the shipping address",
        type=FieldType.LOCATION,
        operators=_LOCATION_OPS,
        metadata=LocationFieldMeta(location_type="city", depends_on=[_F.SHIPPING_COUNTRY.value]),
    ),
    FieldDefinition(
        key=_F.SHIPPING_DISTRICT.value,
        label="Shipping district",
        description="District of the shipping address",
        type=FieldType.LOCATION,
        operators=_LOCATION_OPS,
        metadata=LocationFieldMeta(
            location_type="district",
            depends_on=[_F.SHIPPING_COUNTRY.value, _F.SHIPPING_CITY.value],
        ),
    ),
)


def get_payment_rule_field_type(field: Union[PaymentRuleConditionField, str]) -> FieldType:
    """Field type of a payment rule field; unknown keys are treated as strings."""
    key = field.value if isinstance(field, PaymentRuleConditionField) else str(field)
    definition = PAYMENT_RULE_FIELDS.get(key)
    return definition.type if definition is not None else FieldType.STRING


# -----------------------------------------------------------------------------
# Conditions
# -----------------------------------------------------------------------------


class _PaymentCondition(BaseModel):
    model_config = {"extra": "forbid"}


NumericFieldKey = Literal["CART_TOTAL", "CART_ITEM_COUNT"]
RelationFieldKey = Literal["CUSTOMER_GROUP", "CUSTOMER_GROUP_SMART"]
LocationFieldKey = Literal["SHIPPING_COUNTRY", "SHIPPING_STATE", "SHIPPING_CITY", "SHIPPING_DISTRICT"]


class NumericCondition(_PaymentCondition):
    field: NumericFieldKey
    operator: Literal["EQ", "GT", "GTE", "LT", "LTE"]
    value: NumericValue


class NumericRangeCondition(_PaymentCondition):
    field: NumericFieldKey
    operator: Literal["BETWEEN"]
    value: RangeValue


class FirstOrderCondition(_PaymentCondition):
    field: Literal["IS_FIRST_ORDER"]
    operator: Literal["IS_TRUE", "IS_FALSE"]
    value: None = None


class CustomerTypeCondition(_PaymentCondition):
    field: Literal["CUSTOMER_TYPE"]
    operator: Literal["EQ", "NEQ"]
    value: StoreType


class CustomerGroupCondition(_PaymentCondition):
    field: RelationFieldKey
    operator: Literal["HAS_ANY", "HAS_ALL", "HAS_NONE"]
    value: StringList


class CustomerGroupExistsCondition(_PaymentCondition):
    field: RelationFieldKey
    operator: Literal["EXISTS", "NOT_EXISTS"]
    value: None = None


class LocationCondition(_PaymentCondition):
    field: LocationFieldKey
    operator: Literal["EQ", "NEQ"]
    value: NonEmptyStr


class LocationListCondition(_PaymentCondition):
    field: LocationFieldKey
    operator: Literal["IN", "NOT_IN"]
    value: StringList


PaymentRuleCondition = Union[
    NumericCondition,
    NumericRangeCondition,
    FirstOrderCondition,
    CustomerTypeCondition,
    CustomerGroupCondition,
    CustomerGroupExistsCondition,
    LocationCondition,
    LocationListCondition,
]


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------


class InstallmentOptions(TreeModel):
    enabled: bool = False
    max_installment: Optional[int] = Field(None, ge=1, le=12, description="Highest installment count offered")


class PaymentRuleResultData(TreeModel):
    """What the checkout offers when a path ends here."""

    label: str = Field(..., min_length=1, description="Result name")
    providers: list[PaymentProvider] = Field(..., min_length=1, description="At least one provider")
    payment_types: Optional[list[PaymentType]] = None
    installment_options: Optional[InstallmentOptions] = None


def create_payment_rule_result_node(
    label: str,
    providers: list[PaymentProvider],
    position: Optional[Position] = None,
) -> ResultNode[PaymentRuleResultData]:
    return ResultNode[PaymentRuleResultData](
        id=create_node_id(NodeType.RESULT),
        position=position or Position(),
        data=PaymentRuleResultData(label=label, providers=providers),
    )


def create_default_payment_rule_tree() -> DecisionTree:
    return create_default_tree("Payment Rule")


payment_rule_domain = DomainConfig(
    name=PAYMENT_RULE_DOMAIN,
    fields=PAYMENT_RULE_FIELDS,
    condition_model=PaymentRuleCondition,
    result_model=PaymentRuleResultData,
    min_result_nodes=1,
    start_label="Payment Rule",
    description="Payment provider routing at checkout",
)
