# -*- coding: utf-8 -*-
"""
Core data structures for the graph store migrator.

Single source of truth for the records flowing through the pipeline: property
values as a closed tagged variant, source nodes and relationships, schema
introspection rows, parsed schema rules and the run summary.

Examples:
    from src.utils.dataclasses import SourceNode, ScalarValue, ListValue, ValueKind

    node = SourceNode(
        node_id=42,
        labels=("Person",),
        properties={
            "name": ScalarValue("Ada"),
            "scores": ListValue(ValueKind.INTEGER, (3, 5, 8)),
        }
    )
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class ValueKind(Enum):
    """Element kinds an array property can hold in the destination store."""
    STRING = "string"
    INTEGER = "long"
    FLOAT = "double"
    BOOLEAN = "boolean"


# ============================================================================
# PROPERTY VALUES
# ============================================================================

@dataclass(frozen=True)
class ScalarValue:
    """Non-list property value, written to the store unchanged."""
    value: Any


@dataclass(frozen=True)
class ListValue:
    """
    List property value.

    element_kind is decided by the first element only and is None for an
    empty list. Homogeneity is guaranteed by the source, not checked here.
    """
    element_kind: Optional[ValueKind]
    values: Tuple[Any, ...] = ()

    def __len__(self) -> int:
        return len(self.values)


PropertyValue = Union[ScalarValue, ListValue]


# ============================================================================
# SOURCE GRAPH
# ============================================================================

@dataclass(frozen=True)
class SourceNode:
    """Node read from the live database. node_id is reused verbatim."""
    node_id: int
    labels: Tuple[str, ...]
    properties: Dict[str, PropertyValue] = field(default_factory=dict)


@dataclass(frozen=True)
class SourceRelationship:
    """
    Relationship read from the live database.

    rel_id is informational only; the store assigns its own relationship ids
    and needs the endpoint node ids instead.
    """
    rel_id: int
    start_node_id: int
    end_node_id: int
    rel_type: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)


# ============================================================================
# SCHEMA
# ============================================================================

@dataclass(frozen=True)
class IndexRecord:
    """Row of db.indexes()."""
    description: str
    index_type: str


@dataclass(frozen=True)
class ConstraintRecord:
    """Row of db.constraints()."""
    description: str


@dataclass(frozen=True)
class SchemaRule:
    """Label + property pair parsed from a schema description."""
    label: str
    property_key: str


# ============================================================================
# RUN SUMMARY
# ============================================================================

@dataclass
class MigrationSummary:
    """Counts reported at the end of a migration run."""
    nodes: int = 0
    relationships: int = 0
    indexes: int = 0
    constraints: int = 0
    skipped_indexes: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "nodes": self.nodes,
            "relationships": self.relationships,
            "indexes": self.indexes,
            "constraints": self.constraints,
            "skipped_indexes": self.skipped_indexes,
        }
