"""
Decision tree routes: default tree, JSON schema and structural validation.
"""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, Query

from policytree.models.decision_tree import get_tree_json_schema
from policytree.routes.domains import require_domain
from policytree.services.registry import DomainRegistry, get_registry
from policytree.services.validation import ValidationReport, build_tree_schema
from policytree.utils.logging import log_validation_result

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/domains/{name}/trees/default")
def default_tree(name: str, registry: DomainRegistry = Depends(get_registry)):
    """Starting tree for a new policy in this domain: a lone start node."""
    return require_domain(name, registry).default_tree().to_payload()


@router.get("/domains/{name}/trees/schema")
def tree_schema(name: str, registry: DomainRegistry = Depends(get_registry)):
    """JSON schema of a tree in this domain (camelCase keys, versioned)."""
    config = require_domain(name, registry)
    return get_tree_json_schema(config.node_model, title=f"{config.name} decision tree")


@router.post("/domains/{name}/trees/validate", response_model=ValidationReport)
def validate_domain_tree(name: str, tree: dict[str, Any], registry: DomainRegistry = Depends(get_registry)):
    """Shape and structural validation with the domain's condition/result models and rules."""
    config = require_domain(name, registry)
    start = time.perf_counter()
    errors = config.tree_validator.validate(tree)
    log_validation_result(logger, config.name, errors, duration_sec=time.perf_counter() - start)
    return ValidationReport.from_errors(errors)


@router.post("/trees/validate", response_model=ValidationReport)
def validate_tree(
    tree: dict[str, Any],
    min_result_nodes: int = Query(1, ge=0, description="Minimum number of result nodes"),
):
    """Generic structural validation: untyped conditions and result data, built-in rules only."""
    start = time.perf_counter()
    errors = build_tree_schema(min_result_nodes=min_result_nodes).validate(tree)
    log_validation_result(logger, None, errors, duration_sec=time.perf_counter() - start)
    return ValidationReport.from_errors(errors)
