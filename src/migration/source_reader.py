# -*- coding: utf-8 -*-
"""
Source side of the migration: the live Neo4j database.

Neo4jSource owns the driver connection. The read_* functions run one fixed query on
an open session and lazily turn each driver record into a model object, classifying
property values on the way in. Results are pulled one record at a time, so a stage
never holds the whole graph in memory.

Example:
    source = Neo4jSource(uri, user, password)
    try:
        with source.session() as session:
            for node in read_nodes(session):
                ...
    finally:
        source.close()
"""
# Standard library
import warnings
from typing import Iterator, Optional

# Third-party
from neo4j import GraphDatabase

# Local
from src.migration.property_coercer import classify_properties
from src.utils.config import (
    CONSTRAINTS_QUERY,
    INDEXES_QUERY,
    NODES_QUERY,
    RELATIONSHIPS_QUERY,
)
from src.utils.dataclasses import (
    ConstraintRecord,
    IndexRecord,
    SourceNode,
    SourceRelationship,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)


def legacy_id(entity) -> int:
    """
    Integer id of a driver node or relationship.

    The neo4j 5 driver deprecates .id in favour of the string element_id, but the
    store reuses source ids as its own integer node ids. The DeprecationWarning
    .id raises is suppressed.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        return entity.id


class Neo4jSource:
    """Driver connection to the live database being migrated."""

    def __init__(self, uri: str, user: str, password: str, database: Optional[str] = None):
        """
        Initialize Neo4j connection.

        Args:
            uri: Neo4j connection URI (e.g., bolt://localhost:7687)
            user: Username (typically 'neo4j')
            password: Database password
            database: Database name (None for the server default)
        """
        self.driver = GraphDatabase.driver(uri, auth=(user, password))
        self.database = database
        logger.info(f"Connected to Neo4j at {uri}")

    def session(self):
        """Open a session, on the configured database when one is set."""
        if self.database:
            return self.driver.session(database=self.database)
        return self.driver.session()

    def close(self):
        """Close Neo4j driver connection."""
        self.driver.close()
        logger.info("Neo4j connection closed")


def node_from_record(record) -> SourceNode:
    """Build a SourceNode from a record whose first column is a node."""
    node = record[0]
    return SourceNode(
        node_id=legacy_id(node),
        labels=tuple(sorted(node.labels)),
        properties=classify_properties(dict(node.items())),
    )


def relationship_from_record(record) -> SourceRelationship:
    """Build a SourceRelationship from a record whose first column is a relationship."""
    rel = record[0]
    return SourceRelationship(
        rel_id=legacy_id(rel),
        start_node_id=legacy_id(rel.start_node),
        end_node_id=legacy_id(rel.end_node),
        rel_type=rel.type,
        properties=classify_properties(dict(rel.items())),
    )


def read_nodes(session) -> Iterator[SourceNode]:
    """Stream every node of the source graph."""
    for record in session.run(NODES_QUERY):
        yield node_from_record(record)


def read_relationships(session) -> Iterator[SourceRelationship]:
    """Stream every relationship of the source graph."""
    for record in session.run(RELATIONSHIPS_QUERY):
        yield relationship_from_record(record)


def read_indexes(session) -> Iterator[IndexRecord]:
    """Stream db.indexes() rows."""
    for record in session.run(INDEXES_QUERY):
        yield IndexRecord(description=record["description"], index_type=record["type"])


def read_constraints(session) -> Iterator[ConstraintRecord]:
    """Stream db.constraints() rows."""
    for record in session.run(CONSTRAINTS_QUERY):
        yield ConstraintRecord(description=record["description"])
