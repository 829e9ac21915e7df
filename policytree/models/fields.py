"""
Field catalog models: what a domain exposes for conditions to test.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from policytree.models.operators import ConditionOperator, FieldType


# -----------------------------------------------------------------------------
# Field metadata (domain-specific hints for the authoring UI)
# -----------------------------------------------------------------------------
# Metadata models forbid unknown keys so that any other dict is kept as given.


class SelectOption(BaseModel):
    value: str
    label: str


class EnumFieldMeta(BaseModel):
    enum_type: str = Field(..., description="Name of the enumeration the values come from")
    options: Optional[list[SelectOption]] = Field(None, description="Static option list")
    fetch_endpoint: Optional[str] = Field(None, description="Endpoint serving the options when not static")

    model_config = {"extra": "forbid"}


class RelationFieldMeta(BaseModel):
    endpoint: str = Field(..., description="Endpoint listing the related records")
    query_key: str = Field("", description="Client cache key for the lookup")
    multiple: bool = Field(True, description="Whether several records may be picked")
    label_field: Optional[str] = None
    value_field: Optional[str] = None

    model_config = {"extra": "forbid"}


class LocationFieldMeta(BaseModel):
    location_type: str = Field(..., description="country, state, city or district")
    depends_on: list[str] = Field(default_factory=list, description="Field keys this location is scoped by")

    model_config = {"extra": "forbid"}


class CurrencyFieldMeta(BaseModel):
    allowed_currencies: Optional[list[str]] = None

    model_config = {"extra": "forbid"}


class TimeRangeMeta(BaseModel):
    time_range: bool = True

    model_config = {"extra": "forbid"}


FieldMetadata = Union[EnumFieldMeta, RelationFieldMeta, LocationFieldMeta, CurrencyFieldMeta, TimeRangeMeta, dict[str, Any]]


# -----------------------------------------------------------------------------
# FieldDefinition
# -----------------------------------------------------------------------------


class FieldDefinition(BaseModel):
    """
    A named, typed attribute a condition can test.

    `operators` overrides the type's default operator set when given.
    Definitions are immutable; a domain redefining a key replaces it wholesale.
    """

    key: str = Field(..., description="Unique key within the domain")
    label: str = Field(..., description="Display label")
    description: str = Field("", description="Longer help text")
    type: FieldType = Field(..., description="Semantic field type")
    operators: Optional[list[ConditionOperator]] = Field(
        None,
        min_length=1,
        description="Explicit operator subset; defaults to the type's operator set",
    )
    metadata: Optional[FieldMetadata] = Field(None, description="Domain-specific UI metadata")

    model_config = {"frozen": True}


def field_catalog(*definitions: FieldDefinition) -> dict[str, FieldDefinition]:
    """Key a sequence of definitions by field key (later keys replace earlier ones)."""
    return {definition.key: definition for definition in definitions}


# -----------------------------------------------------------------------------
# Presentation views
# -----------------------------------------------------------------------------


class OperatorOption(BaseModel):
    value: ConditionOperator
    label: str


class FieldOption(BaseModel):
    value: str
    label: str
    description: str = ""
