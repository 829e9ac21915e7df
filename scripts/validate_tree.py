#!/usr/bin/env python3
"""
Validate a decision tree JSON file against a registered domain.

Usage (from project root):
  python scripts/validate_tree.py path/to/tree.json --domain fulfillment
  python scripts/validate_tree.py path/to/tree.json --domain paymentRule --fail-fast
  python scripts/validate_tree.py --domain paymentRule --write-schema schemas/payment_rule.json

Exit codes: 0 valid, 1 invalid, 2 unknown domain or unreadable file.
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from policytree.domains import register_builtin_domains  # noqa: E402
from policytree.models.decision_tree import write_tree_schema_to_file  # noqa: E402
from policytree.services.registry import DomainNotFoundError, DomainRegistry  # noqa: E402
from policytree.services.validation import build_tree_schema  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate a decision tree JSON file.")
    parser.add_argument("tree", nargs="?", type=Path, help="Path to the tree JSON file")
    parser.add_argument("--domain", required=True, help="Domain name (e.g. paymentRule, fulfillment)")
    parser.add_argument("--fail-fast", action="store_true", help="Stop at the first violation")
    parser.add_argument("--write-schema", type=Path, help="Write the domain's tree JSON schema to this path")
    return parser


def main(argv: Optional[list[str]] = None, registry: Optional[DomainRegistry] = None) -> int:
    args = build_parser().parse_args(argv)
    registry = registry if registry is not None else register_builtin_domains(DomainRegistry())
    try:
        config = registry.require_domain(args.domain)
    except DomainNotFoundError as e:
        print(f"{e}. Known domains: {', '.join(registry.list_domains())}", file=sys.stderr)
        return 2

    if args.write_schema:
        path = write_tree_schema_to_file(args.write_schema, config.node_model, title=f"{config.name} decision tree")
        print(f"Wrote schema: {path}")
        if args.tree is None:
            return 0
    if args.tree is None:
        print("A tree file is required unless --write-schema is given", file=sys.stderr)
        return 2

    try:
        data = json.loads(args.tree.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"Cannot read tree file {args.tree}: {e}", file=sys.stderr)
        return 2

    if args.fail_fast:
        validator = build_tree_schema(
            config.node_model,
            min_result_nodes=config.min_result_nodes,
            custom_validations=config.tree_rules,
            fail_fast=True,
        )
    else:
        validator = config.tree_validator
    errors = validator.validate(data)
    if not errors:
        print(f"OK: {args.tree} is a valid {config.name} tree")
        return 0
    print(f"INVALID: {args.tree} ({len(errors)} error(s))")
    for err in errors:
        where = f" [{err.node_id or err.edge_id}]" if (err.node_id or err.edge_id) else ""
        print(f"  - {err.code}{where}: {err.message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
