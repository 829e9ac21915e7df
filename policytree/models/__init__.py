"""
PolicyTree core data models.

Operators and field types, field catalogs, condition value shapes and the
decision tree graph (nodes, edges, tree) shared by every domain.
"""

from policytree.models.decision_tree import (
    Condition,
    ConditionGroupNode,
    ConditionNode,
    DecisionTree,
    Edge,
    EdgeData,
    GenericNode,
    NodeType,
    Position,
    ResultNode,
    StartNode,
    build_node_model,
    create_default_tree,
    create_edge,
    create_node_id,
    get_tree_json_schema,
    is_condition_group_node,
    is_condition_node,
    is_result_node,
    is_start_node,
    write_tree_schema_to_file,
)
from policytree.models.fields import FieldDefinition, FieldOption, OperatorOption, field_catalog
from policytree.models.operators import (
    ConditionOperator,
    EdgeType,
    FieldType,
    InputType,
    LogicalOperator,
    SourceHandle,
    TimeUnit,
    ValueShape,
)

__all__ = [
    "Condition",
    "ConditionGroupNode",
    "ConditionNode",
    "DecisionTree",
    "Edge",
    "EdgeData",
    "GenericNode",
    "NodeType",
    "Position",
    "ResultNode",
    "StartNode",
    "build_node_model",
    "create_default_tree",
    "create_edge",
    "create_node_id",
    "get_tree_json_schema",
    "is_condition_group_node",
    "is_condition_node",
    "is_result_node",
    "is_start_node",
    "write_tree_schema_to_file",
    "FieldDefinition",
    "FieldOption",
    "OperatorOption",
    "field_catalog",
    "ConditionOperator",
    "EdgeType",
    "FieldType",
    "InputType",
    "LogicalOperator",
    "SourceHandle",
    "TimeUnit",
    "ValueShape",
]
