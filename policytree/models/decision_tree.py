"""
Decision tree graph model: typed nodes, branch-tagged edges and the tree.

Nodes are a tagged union on `type` (start, condition, conditionGroup, result).
Condition and result payloads are generic so each domain can plug in its own
condition model and result data model; `build_node_model` assembles the
discriminated union for a domain. Wire format is camelCase JSON.
"""

import json
import uuid
from pathlib import Path
from enum import Enum
from typing import Annotated, Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from policytree.models.operators import ConditionOperator, EdgeType, LogicalOperator, SourceHandle

ConditionT = TypeVar("ConditionT")
ResultT = TypeVar("ResultT")
NodeT = TypeVar("NodeT")


class TreeModel(BaseModel):
    """Base for wire models: snake_case attributes, camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Plain JSON-ready dict for persistence (camelCase, unset optionals omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class NodeType(str, Enum):
    """Kind of node in the decision tree."""

    START = "start"
    CONDITION = "condition"
    CONDITION_GROUP = "conditionGroup"
    RESULT = "result"


# -----------------------------------------------------------------------------
# Conditions
# -----------------------------------------------------------------------------


class Condition(TreeModel):
    """Generic condition: field, operator and a value shaped by both."""

    field: str = Field(..., description="Field key from the domain catalog")
    operator: ConditionOperator = Field(..., description="Comparison operator")
    value: Optional[Any] = Field(None, description="Operand; absent for no-value operators")


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------


class Position(TreeModel):
    """Layout hint from the visual editor; the engine never reads it."""

    x: float = 0
    y: float = 0


class StartNodeData(TreeModel):
    label: str = Field(..., min_length=1, description="Start node title")


class ConditionNodeData(TreeModel, Generic[ConditionT]):
    condition: ConditionT
    label: Optional[str] = None


class ConditionGroupData(TreeModel, Generic[ConditionT]):
    operator: LogicalOperator = Field(..., description="AND / OR over the conditions")
    conditions: list[ConditionT] = Field(..., min_length=1, description="At least one condition")
    label: Optional[str] = None


class StartNode(TreeModel):
    id: str
    type: Literal["start"] = "start"
    position: Position = Field(default_factory=Position)
    data: StartNodeData


class ConditionNode(TreeModel, Generic[ConditionT]):
    id: str
    type: Literal["condition"] = "condition"
    position: Position = Field(default_factory=Position)
    data: ConditionNodeData[ConditionT]


class ConditionGroupNode(TreeModel, Generic[ConditionT]):
    id: str
    type: Literal["conditionGroup"] = "conditionGroup"
    position: Position = Field(default_factory=Position)
    data: ConditionGroupData[ConditionT]


class ResultNode(TreeModel, Generic[ResultT]):
    id: str
    type: Literal["result"] = "result"
    position: Position = Field(default_factory=Position)
    data: ResultT


def build_node_model(condition_model: Any = Condition, result_model: Any = dict[str, Any]) -> Any:
    """
    Discriminated node union for a domain.

    condition_model: type every condition (node or group member) must satisfy.
    result_model: type of a result node's `data` payload.
    """
    return Annotated[
        Union[
            StartNode,
            ConditionNode[condition_model],
            ConditionGroupNode[condition_model],
            ResultNode[result_model],
        ],
        Field(discriminator="type"),
    ]


GenericNode = build_node_model()


# -----------------------------------------------------------------------------
# Edges
# -----------------------------------------------------------------------------


class EdgeData(TreeModel):
    type: Optional[EdgeType] = None


class Edge(TreeModel):
    """Directed transition; `source_handle` / `data.type` name the branch followed."""

    id: str
    source: str = Field(..., description="Source node ID")
    target: str = Field(..., description="Target node ID")
    source_handle: Optional[SourceHandle] = Field(None, description="Connector on the source node")
    data: Optional[EdgeData] = None

    @property
    def branch(self) -> EdgeType:
        """Logical branch, read from `data.type` first, then the handle."""
        if self.data is not None and self.data.type is not None:
            return self.data.type
        if self.source_handle in (SourceHandle.YES, SourceHandle.NO):
            return EdgeType(self.source_handle.value)
        return EdgeType.DEFAULT


# -----------------------------------------------------------------------------
# DecisionTree
# -----------------------------------------------------------------------------


class DecisionTree(TreeModel, Generic[NodeT]):
    """A graph of nodes and edges; validated by `build_tree_schema`."""

    nodes: list[NodeT] = Field(default_factory=list, description="All nodes in the tree")
    edges: list[Edge] = Field(default_factory=list, description="Edges between nodes")

    def node_ids(self) -> set[str]:
        return {node_id(n) for n in self.nodes}

    def outgoing(self, source_id: str) -> list[Edge]:
        return [e for e in self.edges if e.source == source_id]

    def incoming(self, target_id: str) -> list[Edge]:
        return [e for e in self.edges if e.target == target_id]


# -----------------------------------------------------------------------------
# Constructors
# -----------------------------------------------------------------------------


def create_node_id(node_type: Union[NodeType, str]) -> str:
    """Collision-free node ID, prefixed by node type for readability."""
    prefix = node_type.value if isinstance(node_type, NodeType) else str(node_type)
    return f"{prefix}-{uuid.uuid4().hex}"


def create_edge(source: str, target: str, edge_type: EdgeType = EdgeType.DEFAULT) -> Edge:
    """Edge from source to target on the given branch."""
    edge_type = EdgeType(edge_type)
    return Edge(
        id=f"edge-{source}-{target}-{uuid.uuid4().hex[:12]}",
        source=source,
        target=target,
        source_handle=None if edge_type == EdgeType.DEFAULT else SourceHandle(edge_type.value),
        data=EdgeData(type=edge_type),
    )


def create_default_tree(start_label: str = "Start") -> DecisionTree:
    """Seed tree for a new policy: a lone start node."""
    return DecisionTree(
        nodes=[StartNode(id="start", position=Position(x=250, y=50), data=StartNodeData(label=start_label))],
        edges=[],
    )


# -----------------------------------------------------------------------------
# Node predicates (models or raw dicts)
# -----------------------------------------------------------------------------


def node_type(node: Any) -> Optional[str]:
    raw = node.get("type") if isinstance(node, dict) else getattr(node, "type", None)
    return raw.value if isinstance(raw, Enum) else raw


def node_id(node: Any) -> Optional[str]:
    return node.get("id") if isinstance(node, dict) else getattr(node, "id", None)


def is_start_node(node: Any) -> bool:
    return node_type(node) == NodeType.START.value


def is_condition_node(node: Any) -> bool:
    return node_type(node) == NodeType.CONDITION.value


def is_condition_group_node(node: Any) -> bool:
    return node_type(node) == NodeType.CONDITION_GROUP.value


def is_result_node(node: Any) -> bool:
    return node_type(node) == NodeType.RESULT.value


# -----------------------------------------------------------------------------
# JSON Schema (versioned, for authoring clients)
# -----------------------------------------------------------------------------

SCHEMA_VERSION = "1.0.0"


def get_tree_json_schema(node_model: Any = GenericNode, title: str = "Decision Tree") -> dict[str, Any]:
    """
    Return the JSON schema of a decision tree whose nodes follow `node_model`.
    Keys are camelCase as on the wire.
    """
    tree_schema = DecisionTree[node_model].model_json_schema(by_alias=True)
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "title": title,
        "version": SCHEMA_VERSION,
        **{k: v for k, v in tree_schema.items() if k not in ("$schema", "title")},
    }


def write_tree_schema_to_file(path: Union[str, Path], node_model: Any = GenericNode, title: str = "Decision Tree") -> Path:
    """Write the tree JSON schema to `path` for versioning."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(get_tree_json_schema(node_model, title), indent=2), encoding="utf-8")
    return path
