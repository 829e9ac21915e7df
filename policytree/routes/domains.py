"""
Domain catalog and condition authoring routes.

Everything here is computed from the registered domain configs; nothing is stored.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from policytree.models.decision_tree import Condition
from policytree.models.fields import FieldDefinition, FieldOption, OperatorOption
from policytree.models.operators import ConditionOperator, InputType
from policytree.services.registry import (
    DomainConfig,
    DomainNotFoundError,
    DomainRegistry,
    field_options_for,
    get_registry,
)
from policytree.services.resolver import (
    convert_value_on_operator_change,
    operators_for,
    resolve_input_shape,
)
from policytree.services.validation import ValidationReport

router = APIRouter()


class DomainSummary(BaseModel):
    name: str
    description: str = ""
    field_count: int
    min_result_nodes: int


class OperatorChangeRequest(BaseModel):
    field: str = Field(..., description="Field key the condition tests")
    operator: ConditionOperator = Field(..., description="Newly selected operator")
    value: Optional[Any] = Field(None, description="Value held before the operator change")


class OperatorChangeResponse(BaseModel):
    field: str
    operator: ConditionOperator
    value: Optional[Any] = None
    input_type: InputType


def require_domain(name: str, registry: DomainRegistry) -> DomainConfig:
    try:
        return registry.require_domain(name)
    except DomainNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def require_field(config: DomainConfig, field: str) -> FieldDefinition:
    definition = config.fields.get(field)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Field '{field}' not found in domain '{config.name}'")
    return definition


@router.get("", response_model=list[DomainSummary])
def list_domains(registry: DomainRegistry = Depends(get_registry)):
    """List registered domains."""
    summaries = []
    for name in registry.list_domains():
        config = registry.require_domain(name)
        summaries.append(
            DomainSummary(
                name=name,
                description=config.description,
                field_count=len(config.fields),
                min_result_nodes=config.min_result_nodes,
            )
        )
    return summaries


@router.get("/{name}/fields", response_model=list[FieldOption])
def list_fields(name: str, registry: DomainRegistry = Depends(get_registry)):
    """Field picker options for a domain."""
    return field_options_for(require_domain(name, registry).fields)


@router.get("/{name}/fields/{field}", response_model=FieldDefinition)
def get_field(name: str, field: str, registry: DomainRegistry = Depends(get_registry)):
    """Full field definition, including UI metadata."""
    return require_field(require_domain(name, registry), field)


@router.get("/{name}/fields/{field}/operators", response_model=list[OperatorOption])
def list_operators(name: str, field: str, registry: DomainRegistry = Depends(get_registry)):
    """Operators the field accepts, with labels."""
    config = require_domain(name, registry)
    require_field(config, field)
    return operators_for(field, config.fields)


@router.get("/{name}/fields/{field}/empty-condition")
def empty_condition(name: str, field: str, registry: DomainRegistry = Depends(get_registry)):
    """Seed condition for a freshly selected field."""
    config = require_domain(name, registry)
    require_field(config, field)
    condition = config.create_empty_condition(field)
    if isinstance(condition, Condition):
        return condition.model_dump(mode="json", exclude_unset=True)
    return condition


@router.post("/{name}/conditions/operator-change", response_model=OperatorChangeResponse)
def change_operator(name: str, body: OperatorChangeRequest, registry: DomainRegistry = Depends(get_registry)):
    """Carry a condition value over to the shape a newly selected operator needs."""
    config = require_domain(name, registry)
    definition = require_field(config, body.field)
    value = convert_value_on_operator_change(body.field, body.operator, body.value, config.fields)
    return OperatorChangeResponse(
        field=body.field,
        operator=body.operator,
        value=value,
        input_type=resolve_input_shape(definition.type, body.operator),
    )


@router.post("/{name}/conditions/validate", response_model=ValidationReport)
def validate_condition(name: str, condition: dict[str, Any], registry: DomainRegistry = Depends(get_registry)):
    """Validate one condition against the domain's condition shape."""
    config = require_domain(name, registry)
    return ValidationReport.from_errors(config.validate_condition(condition))
