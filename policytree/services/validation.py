"""
Structural validation of decision trees.

`build_tree_schema` composes a validator from a node model (the domain's
discriminated node union) and an ordered list of rules. Built-in rules run
first, in this order:

1. exactly one start node
2. at least `min_result_nodes` result nodes
3. every edge references existing nodes
4. every non-start node has an incoming edge

then domain rules in registration order. All violations are collected by
default; `fail_fast` stops at the first. Validation never repairs a tree.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from policytree.models.decision_tree import (
    DecisionTree,
    GenericNode,
    is_condition_node,
    is_result_node,
    is_start_node,
    node_id,
)
from policytree.models.operators import EdgeType

logger = logging.getLogger(__name__)

FAIL_FAST_DEFAULT = os.getenv("POLICYTREE_VALIDATION_FAIL_FAST", "0").lower() in ("1", "true", "yes")


# -----------------------------------------------------------------------------
# ValidationError
# -----------------------------------------------------------------------------


class ValidationError(BaseModel):
    """A single validation issue."""

    code: str = Field(..., description="Error code (e.g. orphan_node, dangling_edge)")
    message: str = Field(..., description="Human-readable message")
    node_id: Optional[str] = Field(None, description="Relevant node ID if applicable")
    edge_id: Optional[str] = Field(None, description="Relevant edge ID if applicable")
    path: Optional[list[str]] = Field(None, description="Location of the issue in the payload or graph")


class TreeValidationFailed(ValueError):
    """Raised by `TreeValidator.parse` when a tree is invalid."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors) or "Invalid decision tree")


def errors_from_pydantic(exc: PydanticValidationError, code: str = "invalid_shape") -> list[ValidationError]:
    """Flatten a pydantic error into ValidationErrors keyed by location."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        where = ".".join(loc)
        errors.append(
            ValidationError(
                code=code,
                message=f"{where}: {err.get('msg')}" if where else str(err.get("msg")),
                path=loc or None,
            )
        )
    return errors


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------


class TreeRule(ABC):
    """A structural rule over a whole tree."""

    code: str = "custom_rule"
    message: str = ""

    @abstractmethod
    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:  # pragma: no cover
        raise NotImplementedError

    def violation(self, message: Optional[str] = None, **kwargs: Any) -> ValidationError:
        return ValidationError(code=self.code, message=message or self.message, **kwargs)


class StartNodeRule(TreeRule):
    code = "start_node_count"
    message = "Exactly one start node is required"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        starts = [n for n in tree.nodes if is_start_node(n)]
        if len(starts) == 1:
            return []
        return [self.violation(f"{self.message} (found {len(starts)})")]


class MinResultNodesRule(TreeRule):
    code = "min_result_nodes"

    def __init__(self, min_result_nodes: int = 1):
        self.min_result_nodes = min_result_nodes
        self.message = f"At least {min_result_nodes} result node(s) required"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        count = sum(1 for n in tree.nodes if is_result_node(n))
        if count >= self.min_result_nodes:
            return []
        return [self.violation(f"{self.message} (found {count})")]


class EdgeReferenceRule(TreeRule):
    code = "dangling_edge"
    message = "Edge references a node that does not exist"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        ids = tree.node_ids()
        errors = []
        for edge in tree.edges:
            for end in (edge.source, edge.target):
                if end not in ids:
                    errors.append(
                        self.violation(
                            f"Edge '{edge.id}' references missing node '{end}'",
                            edge_id=edge.id,
                            node_id=end,
                        )
                    )
        return errors


class OrphanNodeRule(TreeRule):
    code = "orphan_node"
    message = "Every node except the start node must have an incoming edge"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        targets = {e.target for e in tree.edges}
        return [
            self.violation(f"Node '{node_id(n)}' is not connected (no incoming edge)", node_id=node_id(n))
            for n in tree.nodes
            if not is_start_node(n) and node_id(n) not in targets
        ]


class ConditionBranchesRule(TreeRule):
    """Every condition node needs both a yes and a no outgoing edge."""

    code = "missing_branch"
    message = "Every condition node must have both a 'yes' and a 'no' branch"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        errors = []
        for node in tree.nodes:
            if not is_condition_node(node):
                continue
            branches = {e.branch for e in tree.outgoing(node_id(node))}
            missing = [b.value for b in (EdgeType.YES, EdgeType.NO) if b not in branches]
            if missing:
                errors.append(
                    self.violation(
                        f"Condition node '{node_id(node)}' is missing branch(es): {', '.join(missing)}",
                        node_id=node_id(node),
                    )
                )
        return errors


class StartHasOutgoingEdgeRule(TreeRule):
    code = "start_without_edge"
    message = "The start node must have at least one outgoing edge"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        starts = [n for n in tree.nodes if is_start_node(n)]
        if not starts:
            return [self.violation()]
        return [self.violation(node_id=node_id(s)) for s in starts if not tree.outgoing(node_id(s))]


class ResultHasIncomingEdgeRule(TreeRule):
    code = "result_without_edge"
    message = "Every result node must have at least one incoming edge"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        return [
            self.violation(f"Result node '{node_id(n)}' has no incoming edge", node_id=node_id(n))
            for n in tree.nodes
            if is_result_node(n) and not tree.incoming(node_id(n))
        ]


class AcyclicRule(TreeRule):
    """No cycle reachable from the start node."""

    code = "cycle"
    message = "Cycle detected"

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        children: dict[str, list[str]] = {}
        for e in tree.edges:
            children.setdefault(e.source, []).append(e.target)
        errors: list[ValidationError] = []
        done: set[str] = set()
        for start in (n for n in tree.nodes if is_start_node(n)):
            # iterative DFS; `on_path` holds the current path
            stack: list[tuple[str, int]] = [(node_id(start), 0)]
            path: list[str] = [node_id(start)]
            on_path = {node_id(start)}
            while stack:
                nid, idx = stack[-1]
                kids = children.get(nid, [])
                if idx >= len(kids):
                    stack.pop()
                    path.pop()
                    on_path.discard(nid)
                    done.add(nid)
                    continue
                stack[-1] = (nid, idx + 1)
                child = kids[idx]
                if child in on_path:
                    errors.append(
                        self.violation(f"Cycle detected at node '{child}'", node_id=child, path=path + [child])
                    )
                elif child not in done:
                    stack.append((child, 0))
                    path.append(child)
                    on_path.add(child)
        return errors


class PredicateRule(TreeRule):
    """Adapter for a plain `validate(tree) -> bool` callable and its message."""

    def __init__(self, validate: Callable[[DecisionTree], bool], message: str, code: str = "custom_rule"):
        self.validate = validate
        self.message = message
        self.code = code

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        return [] if self.validate(tree) else [self.violation()]


RuleLike = Union[TreeRule, Mapping[str, Any], tuple]


def as_rule(rule: RuleLike) -> TreeRule:
    """Accept a TreeRule, a {validate, message[, code]} mapping or a (validate, message) pair."""
    if isinstance(rule, TreeRule):
        return rule
    if isinstance(rule, Mapping):
        return PredicateRule(rule["validate"], rule["message"], rule.get("code", "custom_rule"))
    if isinstance(rule, tuple) and len(rule) == 2:
        return PredicateRule(rule[0], rule[1])
    raise TypeError(f"Unsupported tree rule: {rule!r}")


# -----------------------------------------------------------------------------
# Validator
# -----------------------------------------------------------------------------


class TreeSchemaOptions(BaseModel):
    """Options for `build_tree_schema`."""

    min_result_nodes: int = Field(default=1, ge=0, description="Minimum number of result nodes")
    fail_fast: bool = Field(default=FAIL_FAST_DEFAULT, description="Report only the first violation")


class TreeValidator:
    """Validates raw tree payloads: node/edge shape first, then structural rules."""

    def __init__(self, node_model: Any, rules: list[TreeRule], options: TreeSchemaOptions):
        self.node_model = node_model
        self.rules = rules
        self.options = options
        self._adapter = TypeAdapter(DecisionTree[node_model])

    def check(self, tree: DecisionTree) -> list[ValidationError]:
        """Apply the structural rules to an already-shaped tree."""
        errors: list[ValidationError] = []
        for rule in self.rules:
            found = rule.evaluate(tree)
            if found and self.options.fail_fast:
                return found[:1]
            errors.extend(found)
        return errors

    def _parse(self, data: Any) -> tuple[Optional[DecisionTree], list[ValidationError]]:
        try:
            tree = self._adapter.validate_python(data)
        except PydanticValidationError as e:
            errors = errors_from_pydantic(e)
            return None, errors[:1] if self.options.fail_fast else errors
        return tree, self.check(tree)

    def validate(self, data: Any) -> list[ValidationError]:
        """All violations for `data` (empty when valid)."""
        if isinstance(data, DecisionTree):
            data = data.to_payload()
        _, errors = self._parse(data)
        return errors

    def is_valid(self, data: Any) -> bool:
        return not self.validate(data)

    def parse(self, data: Any) -> DecisionTree:
        """Typed tree for `data`; raises TreeValidationFailed when invalid."""
        if isinstance(data, DecisionTree):
            data = data.to_payload()
        tree, errors = self._parse(data)
        if errors:
            raise TreeValidationFailed(errors)
        return tree


def build_tree_schema(
    node_model: Any = None,
    *,
    min_result_nodes: int = 1,
    custom_validations: Iterable[RuleLike] = (),
    fail_fast: Optional[bool] = None,
) -> TreeValidator:
    """
    Compose a tree validator.

    node_model: discriminated node union (see `build_node_model`); defaults to
        the generic engine node with untyped conditions and result data.
    custom_validations: domain rules applied after the built-in ones, in order.
    """
    options = TreeSchemaOptions(
        min_result_nodes=min_result_nodes,
        fail_fast=FAIL_FAST_DEFAULT if fail_fast is None else fail_fast,
    )
    rules: list[TreeRule] = [
        StartNodeRule(),
        MinResultNodesRule(options.min_result_nodes),
        EdgeReferenceRule(),
        OrphanNodeRule(),
    ]
    rules.extend(as_rule(rule) for rule in custom_validations)
    return TreeValidator(node_model if node_model is not None else GenericNode, rules, options)


class ValidationReport(BaseModel):
    """Outcome of a validation request."""

    valid: bool
    errors: list[ValidationError] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[ValidationError]) -> "ValidationReport":
        return cls(valid=not errors, errors=errors)
