# src/utils/config.py

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Source database (live Neo4j, read over bolt)
NEO4J_URI = os.getenv("NEO4J_URI", "bolt://localhost:7687")
NEO4J_USER = os.getenv("NEO4J_USER", "neo4j")
NEO4J_PASSWORD = os.getenv("NEO4J_PASSWORD")
NEO4J_DATABASE = os.getenv("NEO4J_DATABASE")  # None = server default

# Destination store (offline file set written by the batch inserter)
STORE_PATH = Path(os.getenv("STORE_PATH", "./import"))

# Source introspection queries
NODES_QUERY = "MATCH (n) RETURN n"
RELATIONSHIPS_QUERY = "MATCH ()-[r]->() RETURN r"
INDEXES_QUERY = "CALL db.indexes()"
CONSTRAINTS_QUERY = "CALL db.constraints()"

# Index type tags reported by db.indexes()
INDEX_TYPE_LABEL_PROPERTY = "node_label_property"
INDEX_TYPE_UNIQUE_PROPERTY = "node_unique_property"

# Progress reporting
PROGRESS_LOG_INTERVAL = int(os.getenv("PROGRESS_LOG_INTERVAL", "200000"))
PROGRESS_BAR_MININTERVAL = 1.0  # seconds between tqdm refreshes

# Debug
DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"
