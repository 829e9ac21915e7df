"""Tests for the payment routing domain."""

import pytest

from policytree.domains.payment_rule import (
    PAYMENT_RULE_FIELDS,
    PaymentProvider,
    PaymentRuleConditionField,
    StoreType,
    create_default_payment_rule_tree,
    create_payment_rule_result_node,
    get_payment_rule_field_type,
    payment_rule_domain,
    store_type_label,
)
from policytree.models.decision_tree import Position
from policytree.models.operators import ConditionOperator, FieldType
from policytree.services.resolver import operators_for
from tree_builders import condition_node, edge, result_node, start_node, tree


def codes(errors):
    return [e.code for e in errors]


def test_catalog_covers_every_field():
    assert set(PAYMENT_RULE_FIELDS) == {f.value for f in PaymentRuleConditionField}


def test_field_types():
    assert get_payment_rule_field_type(PaymentRuleConditionField.CART_TOTAL) == FieldType.NUMERIC
    assert get_payment_rule_field_type("IS_FIRST_ORDER") == FieldType.BOOLEAN
    assert get_payment_rule_field_type("CUSTOMER_TYPE") == FieldType.ENUM
    assert get_payment_rule_field_type("CUSTOMER_GROUP_SMART") == FieldType.RELATION
    assert get_payment_rule_field_type("SHIPPING_DISTRICT") == FieldType.LOCATION
    assert get_payment_rule_field_type("SOMETHING_ELSE") == FieldType.STRING


def test_numeric_fields_restrict_operators():
    ops = [o.value for o in operators_for("CART_TOTAL", PAYMENT_RULE_FIELDS)]
    assert ops == [
        ConditionOperator.EQ,
        ConditionOperator.GT,
        ConditionOperator.GTE,
        ConditionOperator.LT,
        ConditionOperator.LTE,
        ConditionOperator.BETWEEN,
    ]


def test_store_type_label():
    assert store_type_label(StoreType.B2B) == "B2B (Dealer)"
    assert store_type_label("B2C").startswith("B2C")
    assert store_type_label("OTHER") == "OTHER"


@pytest.mark.parametrize(
    "condition",
    [
        {"field": "CART_TOTAL", "operator": "GTE", "value": 100},
        {"field": "CART_ITEM_COUNT", "operator": "BETWEEN", "value": {"min": 1, "max": 5}},
        {"field": "IS_FIRST_ORDER", "operator": "IS_TRUE"},
        {"field": "CUSTOMER_TYPE", "operator": "EQ", "value": "B2B"},
        {"field": "CUSTOMER_GROUP", "operator": "HAS_ANY", "value": ["grp-1"]},
        {"field": "CUSTOMER_GROUP_SMART", "operator": "NOT_EXISTS"},
        {"field": "SHIPPING_CITY", "operator": "NEQ", "value": "city-34"},
        {"field": "SHIPPING_COUNTRY", "operator": "IN", "value": ["TR", "DE"]},
    ],
)
def test_valid_conditions(condition):
    assert payment_rule_domain.validate_condition(condition) == []


@pytest.mark.parametrize(
    "condition",
    [
        {"field": "CART_TOTAL", "operator": "CONTAINS", "value": 100},
        {"field": "CART_TOTAL", "operator": "GT", "value": "100"},
        {"field": "CART_TOTAL", "operator": "BETWEEN", "value": {"min": 5, "max": 1}},
        {"field": "IS_FIRST_ORDER", "operator": "IS_TRUE", "value": True},
        {"field": "CUSTOMER_TYPE", "operator": "EQ", "value": "B2X"},
        {"field": "CUSTOMER_GROUP", "operator": "HAS_ALL", "value": []},
        {"field": "SHIPPING_STATE", "operator": "EQ", "value": ""},
        {"field": "UNKNOWN", "operator": "EQ", "value": 1},
    ],
)
def test_invalid_conditions(condition):
    errors = payment_rule_domain.validate_condition(condition)
    assert errors
    assert set(codes(errors)) == {"invalid_condition"}


def test_empty_condition_seeds_first_operator():
    condition = payment_rule_domain.create_empty_condition("CART_TOTAL")
    assert condition.operator == ConditionOperator.EQ
    assert condition.value == 0
    assert payment_rule_domain.validate_condition(condition) == []


def test_result_node_helper():
    node = create_payment_rule_result_node("Cards", [PaymentProvider.IYZICO], Position(x=10, y=20))
    assert node.id.startswith("result-")
    payload = node.to_payload()
    assert payload["type"] == "result"
    assert payload["data"] == {"label": "Cards", "providers": ["IYZICO"]}


def test_default_tree_is_labelled_and_needs_a_result():
    default = create_default_payment_rule_tree()
    assert default.nodes[0].data.label == "Payment Rule"
    assert codes(payment_rule_domain.tree_validator.validate(default)) == ["min_result_nodes"]


def payment_tree(result_data):
    return tree(
        start_node(),
        condition_node("c1", {"field": "CART_TOTAL", "operator": "GT", "value": 500}),
        result_node("r1", result_data),
        result_node("r2", {"label": "Transfer", "providers": ["BANK_TRANSFER"]}),
        edges=(edge("start", "c1"), edge("c1", "r1", "yes"), edge("c1", "r2", "no")),
    )


def test_valid_payment_tree():
    data = payment_tree(
        {
            "label": "Installments",
            "providers": ["IYZICO", "PAYTR"],
            "paymentTypes": ["CREDIT_CARD"],
            "installmentOptions": {"enabled": True, "maxInstallment": 6},
        }
    )
    assert payment_rule_domain.tree_validator.validate(data) == []


@pytest.mark.parametrize(
    "result_data",
    [
        {"label": "", "providers": ["IYZICO"]},
        {"label": "No providers", "providers": []},
        {"label": "Bad provider", "providers": ["CASH"]},
        {"label": "Too many", "providers": ["STRIPE"], "installmentOptions": {"enabled": True, "maxInstallment": 13}},
    ],
)
def test_invalid_result_data(result_data):
    errors = payment_rule_domain.tree_validator.validate(payment_tree(result_data))
    assert errors
    assert set(codes(errors)) == {"invalid_shape"}


def test_invalid_condition_inside_tree_is_a_shape_error():
    data = payment_tree({"label": "Cards", "providers": ["STRIPE"]})
    data["nodes"][1]["data"]["condition"] = {"field": "CART_TOTAL", "operator": "HAS_ANY", "value": ["x"]}
    assert set(codes(payment_rule_domain.tree_validator.validate(data))) == {"invalid_shape"}


def test_condition_branches_are_not_enforced_for_payment_rules():
    data = payment_tree({"label": "Cards", "providers": ["STRIPE"]})
    data["edges"] = [e for e in data["edges"] if e["target"] != "r2"]
    data["nodes"] = [n for n in data["nodes"] if n["id"] != "r2"]
    assert payment_rule_domain.tree_validator.validate(data) == []
