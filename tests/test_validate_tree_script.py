"""Tests for scripts/validate_tree.py."""

import json

from scripts.validate_tree import main
from tree_builders import condition_node, edge, result_node, start_node, tree


def write_tree(tmp_path, data) -> str:
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def payment_tree():
    return tree(
        start_node(),
        condition_node("c1", {"field": "CART_TOTAL", "operator": "GT", "value": 100}),
        result_node("r1", {"label": "Cards", "providers": ["IYZICO"]}),
        edges=(edge("start", "c1"), edge("c1", "r1", "yes")),
    )


def test_valid_tree_exits_zero(tmp_path, capsys):
    assert main([write_tree(tmp_path, payment_tree()), "--domain", "paymentRule"]) == 0
    assert "OK" in capsys.readouterr().out


def test_invalid_tree_exits_one(tmp_path, capsys):
    # fulfillment requires a "no" branch and action-based results
    assert main([write_tree(tmp_path, payment_tree()), "--domain", "fulfillment"]) == 1
    assert "INVALID" in capsys.readouterr().out


def test_fail_fast_prints_single_error(tmp_path, capsys):
    data = {"nodes": [start_node("s1"), start_node("s2")], "edges": []}
    assert main([write_tree(tmp_path, data), "--domain", "paymentRule", "--fail-fast"]) == 1
    out = capsys.readouterr().out
    assert "(1 error(s))" in out
    assert "start_node_count" in out


def test_unknown_domain_exits_two(tmp_path, capsys):
    assert main([write_tree(tmp_path, payment_tree()), "--domain", "nope"]) == 2
    assert "paymentRule" in capsys.readouterr().err


def test_unreadable_file_exits_two(tmp_path):
    assert main([str(tmp_path / "missing.json"), "--domain", "paymentRule"]) == 2
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    assert main([str(bad), "--domain", "paymentRule"]) == 2


def test_write_schema(tmp_path):
    out = tmp_path / "schema.json"
    assert main(["--domain", "fulfillment", "--write-schema", str(out)]) == 0
    assert json.loads(out.read_text(encoding="utf-8"))["title"] == "fulfillment decision tree"
