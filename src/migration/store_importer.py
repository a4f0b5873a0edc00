# -*- coding: utf-8 -*-
"""
The four import stages of a migration.

StoreImporter writes everything it reads from a source session into one batch
inserter: nodes, then relationships, then deferred indexes, then deferred
uniqueness constraints. Each stage drains its query result completely before
returning, and the caller runs them in that order:

- nodes keep their source ids, so relationships can point at them by id;
- relationships need both endpoints to exist already;
- schema rules are deferred and populated from the data when the store shuts down.

Any error is raised straight through. There is no skip-and-continue mode, a
half-written store is discarded by the caller.

Example:
    importer = StoreImporter(inserter)
    with source.session() as session:
        importer.import_nodes(session)
        importer.import_relationships(session)
        importer.import_indexes(session)
        importer.import_constraints(session)
"""
# Standard library
from contextlib import closing
from typing import Iterable

# Third-party
from tqdm import tqdm

# Local
from src.migration.batch_inserter import BatchInserter
from src.migration.property_coercer import coerce_properties
from src.migration.schema_parser import parse_constraint_description, parse_index_description
from src.migration.source_reader import (
    read_constraints,
    read_indexes,
    read_nodes,
    read_relationships,
)
from src.utils.config import (
    INDEX_TYPE_LABEL_PROPERTY,
    INDEX_TYPE_UNIQUE_PROPERTY,
    PROGRESS_BAR_MININTERVAL,
    PROGRESS_LOG_INTERVAL,
)
from src.utils.dataclasses import MigrationSummary
from src.utils.logger import get_logger

logger = get_logger(__name__)


class StoreImporter:
    """
    Copies a source graph into a batch inserter, one stage per method.

    Counts are accumulated on self.summary.
    """

    def __init__(self, inserter: BatchInserter, progress_log_interval: int = PROGRESS_LOG_INTERVAL,
                 show_progress: bool = True):
        """
        Args:
            inserter: Open destination store
            progress_log_interval: Log a progress line every N records
            show_progress: Display tqdm progress bars for the data stages
        """
        self.inserter = inserter
        self.progress_log_interval = progress_log_interval
        self.show_progress = show_progress
        self.summary = MigrationSummary()

    def _progress(self, records: Iterable, desc: str, unit: str):
        """Wrap a record stream with a progress bar and periodic log lines."""
        count = 0
        with tqdm(desc=desc, unit=unit, disable=not self.show_progress,
                  mininterval=PROGRESS_BAR_MININTERVAL) as pbar:
            for record in records:
                yield record
                count += 1
                pbar.update(1)
                if count % self.progress_log_interval == 0:
                    logger.info(f"{desc}: {count:,} {unit}s so far")

    # =========================================================================
    # DATA
    # =========================================================================

    def import_nodes(self, session) -> int:
        """
        Import every node with its source id, labels and coerced properties.

        Returns:
            Number of nodes imported
        """
        logger.info("Importing nodes...")
        count = 0
        with closing(self._progress(read_nodes(session), "Nodes", "node")) as nodes:
            for node in nodes:
                self.inserter.create_node(
                    node.node_id,
                    coerce_properties(node.properties),
                    node.labels
                )
                count += 1

        self.summary.nodes += count
        logger.info(f"Nodes: imported {count:,}")
        return count

    def import_relationships(self, session) -> int:
        """
        Import every relationship between already-imported nodes.

        Must run after import_nodes() has returned.

        Returns:
            Number of relationships imported
        """
        logger.info("Importing relationships...")
        count = 0
        progress = self._progress(read_relationships(session), "Relationships", "relationship")
        with closing(progress) as relationships:
            for rel in relationships:
                self.inserter.create_relationship(
                    rel.start_node_id,
                    rel.end_node_id,
                    rel.rel_type,
                    coerce_properties(rel.properties)
                )
                count += 1

        self.summary.relationships += count
        logger.info(f"Relationships: imported {count:,}")
        return count

    # =========================================================================
    # SCHEMA
    # =========================================================================

    def import_indexes(self, session) -> int:
        """
        Declare a deferred index for every label-property index of the source.

        Uniqueness-backing indexes are skipped, import_constraints() creates them
        along with their constraint. Other index types are ignored.

        Returns:
            Number of indexes declared
        """
        logger.info("Creating indexes...")
        count = 0
        for index in read_indexes(session):
            if index.index_type == INDEX_TYPE_UNIQUE_PROPERTY:
                self.summary.skipped_indexes += 1
                logger.debug(f"Skipping uniqueness-backing index `{index.description}`")
                continue

            if index.index_type != INDEX_TYPE_LABEL_PROPERTY:
                self.summary.skipped_indexes += 1
                logger.debug(f"Ignoring index of type {index.index_type}: `{index.description}`")
                continue

            rule = parse_index_description(index.description)
            self.inserter.create_deferred_schema_index(rule.label, rule.property_key)
            count += 1

        self.summary.indexes += count
        logger.info(f"Indexes: created {count} (skipped {self.summary.skipped_indexes})")
        return count

    def import_constraints(self, session) -> int:
        """
        Declare a deferred uniqueness constraint for every source constraint.

        Returns:
            Number of constraints declared
        """
        logger.info("Creating constraints...")
        count = 0
        for constraint in read_constraints(session):
            rule = parse_constraint_description(constraint.description)
            self.inserter.create_deferred_constraint(rule.label, rule.property_key)
            count += 1

        self.summary.constraints += count
        logger.info(f"Constraints: created {count}")
        return count
