# -*- coding: utf-8 -*-
"""
Migration orchestrator test suite.

Checks stage ordering, the exactly-once store shutdown on success and failure, and
one end-to-end run into a real store directory.

Run: pytest tests/migration/test_migration_processor.py -v
"""
# Standard library
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

# Project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Third-party
import pytest

# Local
from src.migration.batch_inserter import MANIFEST_FILE, NODES_FILE, SCHEMA_DIR
from src.migration.migration_processor import MigrationProcessor, main
from src.utils.exceptions import StructuralInconsistencyError, UnparseableSchemaDescriptionError
from tests.fakes import FakeNode, FakeRelationship, FakeSession, FakeSource, RecordingInserter


@pytest.fixture
def recorder():
    """Factory handing out a single RecordingInserter."""
    inserter = RecordingInserter()
    factory = MagicMock(return_value=inserter)
    factory.inserter = inserter
    return factory


# ============================================================================
# ORCHESTRATION
# ============================================================================

class TestMigrationProcessor:
    """Stage order and store lifetime."""

    def test_stage_order(self, tmp_path, recorder, small_graph_session):
        processor = MigrationProcessor(tmp_path, inserter_factory=recorder, show_progress=False)
        processor.migrate(FakeSource(small_graph_session))

        names = [call[0] for call in recorder.inserter.calls]
        assert names == [
            "create_node",
            "create_node",
            "create_relationship",
            "create_deferred_schema_index",
            "create_deferred_constraint",
        ]
        recorder.assert_called_once_with(tmp_path)

    def test_no_relationship_before_last_node(self, tmp_path, recorder):
        nodes = [FakeNode(i, ["N"]) for i in range(50)]
        rels = [FakeRelationship(i, nodes[i], nodes[i + 1], "NEXT") for i in range(49)]
        session = FakeSession(nodes=nodes, relationships=rels)

        processor = MigrationProcessor(tmp_path, inserter_factory=recorder, show_progress=False)
        processor.migrate(FakeSource(session))

        names = [call[0] for call in recorder.inserter.calls]
        last_node = max(i for i, name in enumerate(names) if name == "create_node")
        first_rel = min(i for i, name in enumerate(names) if name == "create_relationship")
        assert last_node < first_rel

    def test_shutdown_once_on_success(self, tmp_path, recorder, small_graph_session):
        source = FakeSource(small_graph_session)
        summary = MigrationProcessor(tmp_path, inserter_factory=recorder, show_progress=False).migrate(source)

        assert recorder.inserter.shutdowns == [False]
        assert source.sessions_opened == source.sessions_closed == 1
        assert summary.nodes == 2
        assert summary.constraints == 1

    def test_shutdown_once_on_failure(self, tmp_path, recorder):
        session = FakeSession(
            nodes=[FakeNode(1)],
            constraints=[{"description": "CONSTRAINT ON ( n:A ) ASSERT n.b IS NODE KEY"}],
        )
        source = FakeSource(session)

        with pytest.raises(UnparseableSchemaDescriptionError):
            MigrationProcessor(tmp_path, inserter_factory=recorder, show_progress=False).migrate(source)

        assert recorder.inserter.shutdowns == [True]
        assert source.sessions_closed == 1

    def test_run_migration_closes_driver(self, tmp_path, recorder, small_graph_session):
        with patch("src.migration.migration_processor.Neo4jSource") as source_cls:
            source = source_cls.return_value
            source.session.return_value.__enter__.return_value = small_graph_session

            processor = MigrationProcessor(tmp_path, inserter_factory=recorder, show_progress=False)
            summary = processor.run_migration("bolt://example:7687", "neo4j", "pw", database="graph")

        source_cls.assert_called_once_with("bolt://example:7687", "neo4j", "pw", database="graph")
        source.close.assert_called_once()
        assert summary.relationships == 1


# ============================================================================
# END TO END
# ============================================================================

class TestEndToEnd:
    """Fake source into a real FileBatchInserter store."""

    def test_full_migration(self, tmp_path, small_graph_session):
        store_dir = tmp_path / "import"
        processor = MigrationProcessor(store_dir, show_progress=False)
        summary = processor.migrate(FakeSource(small_graph_session))

        assert summary.as_dict()["nodes"] == 2

        with open(store_dir / MANIFEST_FILE, 'r', encoding='utf-8') as f:
            manifest = json.load(f)
        assert manifest["status"] == "complete"
        assert manifest["relationships"] == 1
        assert manifest["indexes"] == [{"label": "Person", "property": "name"}]
        assert manifest["constraints"] == [{"label": "Person", "property": "email"}]

        with open(store_dir / NODES_FILE, 'r', encoding='utf-8') as f:
            nodes = [json.loads(line) for line in f]
        assert nodes[1]["properties"]["scores"] == {"type": "long[]", "values": [1, 2, 3]}
        assert (store_dir / SCHEMA_DIR / "index-0.json").exists()

    def test_dangling_relationship_fails_store(self, tmp_path):
        a, ghost = FakeNode(1), FakeNode(2)
        session = FakeSession(nodes=[a], relationships=[FakeRelationship(0, a, ghost, "HAUNTS")])
        store_dir = tmp_path / "import"

        with pytest.raises(StructuralInconsistencyError):
            MigrationProcessor(store_dir, show_progress=False).migrate(FakeSource(session))

        with open(store_dir / MANIFEST_FILE, 'r', encoding='utf-8') as f:
            assert json.load(f)["status"] == "failed"


# ============================================================================
# CLI
# ============================================================================

class TestMain:
    """argparse entry point."""

    def test_failure_exits_nonzero(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", [
            "graph-store-migrate", "--password", "pw", "--store-dir", str(tmp_path), "--no-progress",
        ])
        with patch("src.migration.migration_processor.setup_logging"), \
                patch.object(MigrationProcessor, "run_migration", side_effect=StructuralInconsistencyError("x")):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1

    def test_success(self, tmp_path, monkeypatch):
        monkeypatch.setattr(sys, "argv", [
            "graph-store-migrate", "--password", "pw", "--store-dir", str(tmp_path), "--uri", "bolt://h:1",
        ])
        with patch("src.migration.migration_processor.setup_logging"), \
                patch.object(MigrationProcessor, "run_migration") as run:
            main()

        run.assert_called_once()
        assert run.call_args.kwargs["uri"] == "bolt://h:1"
        assert run.call_args.kwargs["password"] == "pw"
