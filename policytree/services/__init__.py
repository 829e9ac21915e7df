"""PolicyTree services (operator resolution, domain registry, tree validation)."""

from policytree.services.resolver import (
    convert_value_on_operator_change,
    default_value_for,
    operator_label,
    operators_for,
    resolve_input_shape,
    value_shape_for,
)
from policytree.services.registry import (
    DomainConfig,
    DomainNotFoundError,
    DomainRegistry,
    check_condition,
    default_registry,
    empty_condition_for,
    field_options_for,
    get_domain,
    list_domains,
    register_domain,
)
from policytree.services.validation import (
    TreeRule,
    TreeValidationFailed,
    TreeValidator,
    ValidationError,
    ValidationReport,
    build_tree_schema,
)

__all__ = [
    "convert_value_on_operator_change",
    "default_value_for",
    "operator_label",
    "operators_for",
    "resolve_input_shape",
    "value_shape_for",
    "DomainConfig",
    "DomainNotFoundError",
    "DomainRegistry",
    "check_condition",
    "default_registry",
    "empty_condition_for",
    "field_options_for",
    "get_domain",
    "list_domains",
    "register_domain",
    "TreeRule",
    "TreeValidationFailed",
    "TreeValidator",
    "ValidationError",
    "ValidationReport",
    "build_tree_schema",
]
