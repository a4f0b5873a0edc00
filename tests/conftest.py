# -*- coding: utf-8 -*-
"""
Shared fixtures for the migration test suites.
"""
# Standard library
import sys
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Third-party
import pytest

# Local
from tests.fakes import FakeNode, FakeRelationship, FakeSession, RecordingInserter


@pytest.fixture
def recording_inserter():
    return RecordingInserter()


@pytest.fixture
def small_graph_session():
    """Two people who know each other, with one index and one constraint."""
    alice = FakeNode(1, ["Person"], {"name": "Alice", "tags": ["a", "b"]})
    bob = FakeNode(2, ["Person", "Admin"], {"name": "Bob", "scores": [1, 2, 3]})
    knows = FakeRelationship(10, alice, bob, "KNOWS", {"since": 2019, "weights": [0.5, 1.5]})

    return FakeSession(
        nodes=[alice, bob],
        relationships=[knows],
        indexes=[
            {"description": "INDEX ON :Person(name)", "type": "node_label_property"},
            {"description": "INDEX ON :Person(email)", "type": "node_unique_property"},
        ],
        constraints=[
            {"description": "CONSTRAINT ON ( person:Person ) ASSERT person.email IS UNIQUE"},
        ],
    )
