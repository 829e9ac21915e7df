"""Tests for the order fulfillment domain and its wiring rules."""

import pytest

from policytree.domains.fulfillment import (
    FULFILLMENT_FIELDS,
    FulfillmentConditionField,
    find_conflicting_actions,
    fulfillment_domain,
)
from policytree.models.operators import ConditionOperator, InputType
from policytree.services.resolver import resolve_input_shape
from tree_builders import condition_node, edge, result_node, start_node, tree

SHIP_FROM_MAIN = {"label": "Main warehouse", "actions": [{"type": "USE_LOCATION", "locationIds": ["loc-main"]}]}
BACKORDER = {"label": "Backorder", "actions": [{"type": "BACKORDER", "maxWaitDays": 7}]}


def codes(errors):
    return [e.code for e in errors]


def fulfillment_tree(yes_data=SHIP_FROM_MAIN, no_data=BACKORDER):
    return tree(
        start_node(),
        condition_node("c1", {"field": "ORDER_WEIGHT", "operator": "LTE", "value": 30}),
        result_node("r1", yes_data),
        result_node("r2", no_data),
        edges=(edge("start", "c1"), edge("c1", "r1", "yes"), edge("c1", "r2", "no")),
    )


def test_catalog_covers_every_field():
    assert set(FULFILLMENT_FIELDS) == {f.value for f in FulfillmentConditionField}


def test_time_of_day_uses_time_range_input():
    definition = FULFILLMENT_FIELDS["TIME_OF_DAY"]
    assert definition.operators == [ConditionOperator.BETWEEN]
    assert resolve_input_shape(definition.type, ConditionOperator.BETWEEN) == InputType.TIME_RANGE


@pytest.mark.parametrize(
    "condition",
    [
        {"field": "ORDER_TOTAL", "operator": "NEQ", "value": 0},
        {"field": "ORDER_ITEM_COUNT", "operator": "IN", "value": [1, 2, 3]},
        {"field": "ORDER_WEIGHT", "operator": "BETWEEN", "value": {"min": 0, "max": 2.5}},
        {"field": "ORDER_CURRENCY", "operator": "NOT_IN", "value": ["USD", "EUR"]},
        {"field": "DESTINATION_STATE", "operator": "IS_NOT_NULL"},
        {"field": "PRODUCT_BRAND", "operator": "HAS_NONE", "value": ["brand-1"]},
        {"field": "CUSTOMER_GROUP", "operator": "EQ", "value": "wholesale"},
        {"field": "SHIPPING_METHOD", "operator": "IN", "value": ["express"]},
        {"field": "DAY_OF_WEEK", "operator": "IN", "value": ["SATURDAY", "SUNDAY"]},
        {"field": "TIME_OF_DAY", "operator": "BETWEEN", "value": {"from": "09:00", "to": "17:30"}},
        {"field": "IS_HOLIDAY", "operator": "IS_FALSE"},
    ],
)
def test_valid_conditions(condition):
    assert fulfillment_domain.validate_condition(condition) == []


@pytest.mark.parametrize(
    "condition",
    [
        {"field": "ORDER_TOTAL", "operator": "IN", "value": []},
        {"field": "ORDER_TOTAL", "operator": "IN", "value": ["ten"]},
        {"field": "ORDER_CURRENCY", "operator": "EQ", "value": "JPY"},
        {"field": "DAY_OF_WEEK", "operator": "EQ", "value": "MONDAY"},
        {"field": "TIME_OF_DAY", "operator": "BETWEEN", "value": {"from": "18:00", "to": "09:00"}},
        {"field": "TIME_OF_DAY", "operator": "BETWEEN", "value": {"from": "9:00", "to": "17:00"}},
        {"field": "TIME_OF_DAY", "operator": "BETWEEN", "value": {"from": "24:00", "to": "24:30"}},
        {"field": "PRODUCT_TAG", "operator": "EXISTS", "value": ["tag"]},
    ],
)
def test_invalid_conditions(condition):
    assert codes(fulfillment_domain.validate_condition(condition))


@pytest.mark.parametrize(
    "actions,conflict",
    [
        (["USE_LOCATION", "ALLOW_SPLIT"], False),
        (["REJECT"], False),
        (["REJECT", "FLAG_FOR_REVIEW"], True),
        (["ALLOW_SPLIT", "DENY_SPLIT"], True),
    ],
)
def test_find_conflicting_actions(actions, conflict):
    assert (find_conflicting_actions(actions) is not None) is conflict


def test_valid_fulfillment_tree():
    assert fulfillment_domain.tree_validator.validate(fulfillment_tree()) == []


def test_conflicting_actions_are_rejected():
    rejected = {
        "label": "Reject",
        "actions": [{"type": "REJECT", "reason": "Blocked"}, {"type": "USE_LOCATION", "locationIds": ["loc-1"]}],
    }
    errors = fulfillment_domain.tree_validator.validate(fulfillment_tree(no_data=rejected))
    assert codes(errors) == ["invalid_shape"]
    assert "Conflicting actions" in errors[0].message


@pytest.mark.parametrize(
    "data",
    [
        {"label": "No actions", "actions": []},
        {"label": "Bad split", "actions": [{"type": "ALLOW_SPLIT", "maxSplitCount": 1}]},
        {"label": "Bad color", "color": "red", "actions": [{"type": "DENY_SPLIT"}]},
        {"label": "Unknown action", "actions": [{"type": "TELEPORT"}]},
        {"label": "No locations", "actions": [{"type": "EXCLUDE_LOCATION", "locationIds": []}]},
    ],
)
def test_invalid_result_data(data):
    assert set(codes(fulfillment_domain.tree_validator.validate(fulfillment_tree(no_data=data)))) == {"invalid_shape"}


def test_condition_without_no_branch_is_rejected():
    data = fulfillment_tree()
    data["edges"] = [e for e in data["edges"] if e["target"] != "r2"]
    data["nodes"] = [n for n in data["nodes"] if n["id"] != "r2"]
    errors = fulfillment_domain.tree_validator.validate(data)
    assert codes(errors) == ["missing_branch"]
    assert errors[0].node_id == "c1"


def test_start_must_lead_somewhere_and_results_must_be_reached():
    data = tree(start_node(), result_node("r1", SHIP_FROM_MAIN))
    assert codes(fulfillment_domain.tree_validator.validate(data)) == [
        "orphan_node",
        "start_without_edge",
        "result_without_edge",
    ]


def test_action_defaults_fill_in():
    parsed = fulfillment_domain.tree_validator.parse(fulfillment_tree())
    result = next(n for n in parsed.nodes if n.id == "r1")
    action = result.data.actions[0]
    assert action.priority == "sequential"
    assert result.data.is_terminal is True
    assert result.to_payload()["data"]["isTerminal"] is True
