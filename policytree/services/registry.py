"""
Domain registry: named field catalogs with their condition shapes.

A domain (payment routing, fulfillment, ...) supplies its field catalog, the
model every condition must satisfy, its result payload model and any extra
tree rules. Registries are plain objects so callers and tests can hold their
own; `default_registry` backs the application.
"""

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from policytree.models.decision_tree import (
    Condition,
    DecisionTree,
    build_node_model,
    create_default_tree,
    is_condition_group_node,
    is_condition_node,
)
from policytree.models.fields import FieldDefinition, FieldOption
from policytree.models.operators import ValueShape
from policytree.services.resolver import (
    allowed_operators,
    default_value_for,
    matches_input_shape,
    resolve_input_shape,
    value_shape_for,
)
from policytree.services.validation import (
    RuleLike,
    TreeRule,
    TreeValidator,
    ValidationError,
    build_tree_schema,
    errors_from_pydantic,
)
from policytree.utils.logging import log_domain_registered

logger = logging.getLogger(__name__)

FieldCatalog = Mapping[str, FieldDefinition]


class DomainNotFoundError(KeyError):
    """Lookup of a domain name that was never registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Domain '{self.name}' is not registered"


# -----------------------------------------------------------------------------
# Condition helpers
# -----------------------------------------------------------------------------


def empty_condition_for(field_key: str, fields: FieldCatalog) -> Condition:
    """
    Seed condition for a field: its first allowed operator and that operator's
    default value. No-value operators produce a condition without `value`.
    """
    definition = fields.get(field_key)
    if definition is None:
        raise ValueError(f"Unknown field: {field_key}")
    operator = allowed_operators(definition)[0]
    if value_shape_for(operator) == ValueShape.NONE:
        return Condition(field=field_key, operator=operator)
    return Condition(field=field_key, operator=operator, value=default_value_for(definition.type, operator))


def field_options_for(fields: FieldCatalog) -> list[FieldOption]:
    return [FieldOption(value=key, label=d.label, description=d.description) for key, d in fields.items()]


def check_condition(condition: Any, fields: FieldCatalog) -> list[ValidationError]:
    """
    Structural condition check against a field catalog: known field, allowed
    operator, and a value shaped as `resolve_input_shape` demands.
    """
    try:
        cond = condition if isinstance(condition, Condition) else Condition.model_validate(condition)
    except PydanticValidationError as e:
        return errors_from_pydantic(e, code="invalid_condition")

    definition = fields.get(cond.field)
    if definition is None:
        return [ValidationError(code="unknown_field", message=f"Unknown field '{cond.field}'")]
    if cond.operator not in allowed_operators(definition):
        return [
            ValidationError(
                code="operator_not_allowed",
                message=f"Operator '{cond.operator.value}' is not allowed for field '{cond.field}'",
            )
        ]
    input_type = resolve_input_shape(definition.type, cond.operator)
    if value_shape_for(cond.operator) == ValueShape.NONE:
        if cond.value is not None:
            return [
                ValidationError(
                    code="unexpected_value",
                    message=f"Operator '{cond.operator.value}' takes no value",
                )
            ]
        return []
    if not matches_input_shape(input_type, cond.value):
        return [
            ValidationError(
                code="value_shape",
                message=f"Value for '{cond.field}' {cond.operator.value} must be a {input_type.value} value",
            )
        ]
    return []


class CatalogConditionRule(TreeRule):
    """Every node and group condition passes `check_condition` against the catalog."""

    code = "invalid_condition"

    def __init__(self, fields: FieldCatalog):
        self.fields = fields

    def evaluate(self, tree: DecisionTree) -> list[ValidationError]:
        errors: list[ValidationError] = []
        for node in tree.nodes:
            if is_condition_node(node):
                conditions = [node.data.condition]
            elif is_condition_group_node(node):
                conditions = node.data.conditions
            else:
                continue
            for condition in conditions:
                found = check_condition(condition, self.fields)
                errors.extend(e.model_copy(update={"node_id": node.id}) for e in found)
        return errors


# -----------------------------------------------------------------------------
# DomainConfig
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class DomainConfig:
    """
    A named business domain plugged into the engine.

    condition_model: type every condition must satisfy; None means the
        engine's structural `check_condition` against `fields`.
    result_model: type of result node payloads.
    tree_rules: extra structural rules, applied after the built-in ones. Without
        a condition_model, tree conditions are checked against `fields` first.
    """

    name: str
    fields: dict[str, FieldDefinition]
    condition_model: Any = None
    result_model: Any = dict[str, Any]
    min_result_nodes: int = 1
    tree_rules: tuple[RuleLike, ...] = ()
    empty_condition_factory: Optional[Callable[[str], Any]] = None
    start_label: str = "Start"
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @cached_property
    def _condition_adapter(self) -> Optional[TypeAdapter]:
        return TypeAdapter(self.condition_model) if self.condition_model is not None else None

    def validate_condition(self, condition: Any) -> list[ValidationError]:
        """Condition-shape validation; empty list when valid."""
        if self._condition_adapter is None:
            return check_condition(condition, self.fields)
        if isinstance(condition, Condition):
            condition = condition.model_dump(mode="json", by_alias=True, exclude_unset=True)
        try:
            self._condition_adapter.validate_python(condition)
        except PydanticValidationError as e:
            return errors_from_pydantic(e, code="invalid_condition")
        return []

    def create_empty_condition(self, field_key: str) -> Any:
        if self.empty_condition_factory is not None:
            return self.empty_condition_factory(field_key)
        return empty_condition_for(field_key, self.fields)

    @cached_property
    def node_model(self) -> Any:
        return build_node_model(self.condition_model or Condition, self.result_model)

    def _tree_rules(self) -> list[RuleLike]:
        if self.condition_model is None:
            return [CatalogConditionRule(self.fields), *self.tree_rules]
        return list(self.tree_rules)

    @cached_property
    def tree_validator(self) -> TreeValidator:
        return build_tree_schema(
            self.node_model,
            min_result_nodes=self.min_result_nodes,
            custom_validations=self._tree_rules(),
        )

    def default_tree(self) -> DecisionTree:
        return create_default_tree(self.start_label)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------


class DomainRegistry:
    """Name -> DomainConfig. Populate at startup; reads are safe afterwards."""

    def __init__(self, domains: Iterable[DomainConfig] = ()):
        self._domains: dict[str, DomainConfig] = {}
        for config in domains:
            self.register_domain(config)

    def register_domain(self, config: DomainConfig) -> None:
        """Insert or replace (last write wins) the domain named `config.name`."""
        if config.name in self._domains:
            logger.info("Replacing registered domain '%s'", config.name)
        self._domains[config.name] = config
        log_domain_registered(logger, config.name, len(config.fields))

    def get_domain(self, name: str) -> Optional[DomainConfig]:
        return self._domains.get(name)

    def require_domain(self, name: str) -> DomainConfig:
        config = self._domains.get(name)
        if config is None:
            raise DomainNotFoundError(name)
        return config

    def list_domains(self) -> list[str]:
        return list(self._domains.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._domains

    def __len__(self) -> int:
        return len(self._domains)


default_registry = DomainRegistry()


def register_domain(config: DomainConfig) -> None:
    default_registry.register_domain(config)


def get_domain(name: str) -> Optional[DomainConfig]:
    return default_registry.get_domain(name)


def list_domains() -> list[str]:
    return default_registry.list_domains()


def get_registry() -> DomainRegistry:
    """Dependency: the application registry (override in tests for isolation)."""
    return default_registry
