# -*- coding: utf-8 -*-
"""
Migration orchestrator: live Neo4j database to offline batch-inserted store.

MigrationProcessor holds one source session and one destination store for the whole
run and drives the four stages in their required order: nodes, relationships,
indexes, constraints. The store is shut down exactly once on every exit path; when
a stage raises, it is closed in failed state and the error propagates. There are no
retries and no partial runs, a failed store is meant to be deleted and the
migration started again.

Examples:
    # Run from the command line (credentials fall back to NEO4J_* env vars)
    # python -m src.migration.migration_processor \\
    #     --uri bolt://localhost:7687 \\
    #     --user neo4j \\
    #     --password secret \\
    #     --store-dir import

    # Python API
    from pathlib import Path
    from src.migration.migration_processor import MigrationProcessor

    processor = MigrationProcessor(store_dir=Path('import'))
    summary = processor.run_migration(
        uri="bolt://localhost:7687",
        user="neo4j",
        password="secret"
    )
    print(summary.as_dict())
"""
# Standard library
import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

# Local
from src.migration.batch_inserter import BatchInserter, FileBatchInserter
from src.migration.source_reader import Neo4jSource
from src.migration.store_importer import StoreImporter
from src.utils.config import (
    DEBUG_MODE,
    NEO4J_DATABASE,
    NEO4J_PASSWORD,
    NEO4J_URI,
    NEO4J_USER,
    PROGRESS_LOG_INTERVAL,
    STORE_PATH,
)
from src.utils.dataclasses import MigrationSummary
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


class MigrationProcessor:
    """
    Runs one complete migration into a fresh store.

    Handles:
    - Opening the destination store and the source session
    - Running the four import stages in dependency order
    - Shutting the store down exactly once, in failed state on error
    """

    def __init__(self, store_dir: Path,
                 inserter_factory: Callable[[Path], BatchInserter] = FileBatchInserter,
                 show_progress: bool = True,
                 progress_log_interval: int = PROGRESS_LOG_INTERVAL):
        """
        Initialize migration processor.

        Args:
            store_dir: Directory for the new store (must not hold a store yet)
            inserter_factory: Builds the batch inserter for store_dir
            show_progress: Display progress bars for the data stages
            progress_log_interval: Log a progress line every N records
        """
        self.store_dir = store_dir
        self.inserter_factory = inserter_factory
        self.show_progress = show_progress
        self.progress_log_interval = progress_log_interval

    def migrate(self, source) -> MigrationSummary:
        """
        Copy the source graph into the store.

        Args:
            source: Object whose session() opens a session context on the live database

        Returns:
            Counts of everything written
        """
        with self.inserter_factory(self.store_dir) as inserter:
            importer = StoreImporter(
                inserter,
                progress_log_interval=self.progress_log_interval,
                show_progress=self.show_progress
            )
            with source.session() as session:
                importer.import_nodes(session)
                importer.import_relationships(session)
                importer.import_indexes(session)
                importer.import_constraints(session)

        logger.info(f"Migration complete: {importer.summary.as_dict()}")
        return importer.summary

    def run_migration(self, uri: str, user: str, password: str,
                      database: Optional[str] = None) -> MigrationSummary:
        """
        Connect to the live database and run the migration.

        Args:
            uri: Neo4j connection URI
            user: Neo4j username
            password: Neo4j password
            database: Database name (None for the server default)
        """
        source = Neo4jSource(uri, user, password, database=database)
        try:
            return self.migrate(source)
        finally:
            source.close()


def main():
    """Main entry point for a migration run."""
    parser = argparse.ArgumentParser(
        description='Migrate a live Neo4j database into a new offline store'
    )
    parser.add_argument(
        '--uri',
        default=NEO4J_URI,
        help='Neo4j URI (default: NEO4J_URI env var or bolt://localhost:7687)'
    )
    parser.add_argument(
        '--user',
        default=NEO4J_USER,
        help='Neo4j username (default: NEO4J_USER env var or "neo4j")'
    )
    parser.add_argument(
        '--password',
        default=NEO4J_PASSWORD,
        help='Neo4j password (default: NEO4J_PASSWORD env var)'
    )
    parser.add_argument(
        '--database',
        default=NEO4J_DATABASE,
        help='Source database name (default: NEO4J_DATABASE env var or server default)'
    )
    parser.add_argument(
        '--store-dir',
        type=Path,
        default=STORE_PATH,
        help='Directory for the new store (default: STORE_PATH env var or ./import)'
    )
    parser.add_argument(
        '--log-file',
        help='Also append log output to this file'
    )
    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log at DEBUG level'
    )

    args = parser.parse_args()

    if not args.password:
        parser.error("--password required (or set NEO4J_PASSWORD env var)")

    setup_logging(
        level=logging.DEBUG if (args.verbose or DEBUG_MODE) else logging.INFO,
        log_file=args.log_file
    )

    processor = MigrationProcessor(
        store_dir=args.store_dir,
        show_progress=not args.no_progress
    )

    try:
        processor.run_migration(
            uri=args.uri,
            user=args.user,
            password=args.password,
            database=args.database
        )
    except Exception:
        logger.exception(f"Migration failed, store at {args.store_dir} is unusable")
        sys.exit(1)


if __name__ == '__main__':
    main()
