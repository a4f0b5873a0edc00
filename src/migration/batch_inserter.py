# -*- coding: utf-8 -*-
"""
Destination side of the migration: the offline batch-inserted store.

BatchInserter is the capability the import stages write through. It is
non-transactional: records are appended as they arrive and schema objects are only
declared, not populated, until shutdown() finalizes the store once.

FileBatchInserter writes the store as a directory of line-delimited JSON files:

    <store_dir>/
        nodes.jsonl            one node per line, id reused from the source
        relationships.jsonl    one relationship per line, ids assigned here
        schema/index-<n>.json  populated deferred indexes and constraints
        store.json             manifest: status, counts, schema rules

Typed arrays are stored with their element type so readers do not have to guess:
{"type": "long[]", "values": [1, 2, 3]}.

Example:
    with FileBatchInserter(Path("import")) as inserter:
        inserter.create_node(0, {"name": "Ada"}, ("Person",))
        inserter.create_deferred_schema_index("Person", "name")
"""
# Standard library
import json
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

# Third-party
import numpy as np

# Local
from src.utils.dataclasses import SchemaRule
from src.utils.exceptions import StructuralInconsistencyError
from src.utils.logger import get_logger

logger = get_logger(__name__)

NODES_FILE = "nodes.jsonl"
RELATIONSHIPS_FILE = "relationships.jsonl"
SCHEMA_DIR = "schema"
MANIFEST_FILE = "store.json"

ARRAY_TYPE_NAMES = {
    np.dtype(np.int64): "long[]",
    np.dtype(np.int32): "int[]",
    np.dtype(np.float64): "double[]",
    np.dtype(np.bool_): "boolean[]",
}


class BatchInserter(ABC):
    """
    Bulk-load capability of the destination store.

    Used as a context manager, the store is shut down exactly once on leaving the
    block, in failed state when the block raised.
    """

    @abstractmethod
    def create_node(self, node_id: int, properties: Mapping[str, Any], labels: Sequence[str]) -> None:
        """Create a node with a caller-chosen id."""

    @abstractmethod
    def create_relationship(self, start_node_id: int, end_node_id: int, rel_type: str,
                            properties: Mapping[str, Any]) -> int:
        """Create a relationship between two existing nodes, returning its new id."""

    @abstractmethod
    def create_deferred_schema_index(self, label: str, property_key: str) -> None:
        """Declare a label-property index, populated at shutdown."""

    @abstractmethod
    def create_deferred_constraint(self, label: str, property_key: str) -> None:
        """Declare a uniqueness constraint (and its backing index), populated at shutdown."""

    @abstractmethod
    def shutdown(self, failed: bool = False) -> None:
        """Flush and close the store. Must be called exactly once."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown(failed=exc_type is not None)
        return False


def array_type_name(array: np.ndarray) -> str:
    """Store type name for a typed array, e.g. 'long[]'."""
    if array.dtype.kind in ("U", "O"):
        return "string[]"
    try:
        return ARRAY_TYPE_NAMES[array.dtype]
    except KeyError:
        raise TypeError(f"No store array type for dtype {array.dtype}") from None


def encode_property(value: Any) -> Any:
    """Encode a coerced property value as JSON-compatible data."""
    if isinstance(value, np.ndarray):
        return {"type": array_type_name(value), "values": value.tolist()}
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return {"type": "byte[]", "values": list(value)}
    # Temporal and spatial values keep their textual form
    return {"type": type(value).__name__, "value": str(value)}


def encode_properties(properties: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: encode_property(value) for key, value in properties.items()}


class FileBatchInserter(BatchInserter):
    """Batch inserter writing a fresh store directory of JSONL files."""

    def __init__(self, store_dir: Path):
        """
        Create the store files.

        Args:
            store_dir: Target directory. It may exist but must not hold a store.

        Raises:
            FileExistsError: store_dir already contains store files
        """
        self.store_dir = Path(store_dir)
        for name in (NODES_FILE, RELATIONSHIPS_FILE, MANIFEST_FILE):
            if (self.store_dir / name).exists():
                raise FileExistsError(f"Store already exists at {self.store_dir} ({name})")

        self.store_dir.mkdir(parents=True, exist_ok=True)
        self._nodes_out = open(self.store_dir / NODES_FILE, 'w', encoding='utf-8')
        self._rels_out = open(self.store_dir / RELATIONSHIPS_FILE, 'w', encoding='utf-8')

        self._node_ids = set()
        self._next_rel_id = 0
        self._indexes: List[SchemaRule] = []
        self._constraints: List[SchemaRule] = []
        self._shut_down = False

        logger.info(f"Opened batch inserter at {self.store_dir}")

    @property
    def node_count(self) -> int:
        return len(self._node_ids)

    @property
    def relationship_count(self) -> int:
        return self._next_rel_id

    def _check_open(self):
        if self._shut_down:
            raise RuntimeError(f"Batch inserter at {self.store_dir} is already shut down")

    def create_node(self, node_id: int, properties: Mapping[str, Any], labels: Sequence[str]) -> None:
        self._check_open()
        if node_id in self._node_ids:
            raise StructuralInconsistencyError(f"Node {node_id} already exists in the store")

        line = {
            "id": node_id,
            "labels": list(labels),
            "properties": encode_properties(properties),
        }
        self._nodes_out.write(json.dumps(line, ensure_ascii=False) + "\n")
        self._node_ids.add(node_id)

    def create_relationship(self, start_node_id: int, end_node_id: int, rel_type: str,
                            properties: Mapping[str, Any]) -> int:
        self._check_open()
        for endpoint in (start_node_id, end_node_id):
            if endpoint not in self._node_ids:
                raise StructuralInconsistencyError(
                    f"Relationship ({start_node_id})-[:{rel_type}]->({end_node_id}) "
                    f"references node {endpoint}, which does not exist in the store"
                )

        rel_id = self._next_rel_id
        line = {
            "id": rel_id,
            "type": rel_type,
            "start": start_node_id,
            "end": end_node_id,
            "properties": encode_properties(properties),
        }
        self._rels_out.write(json.dumps(line, ensure_ascii=False) + "\n")
        self._next_rel_id += 1
        return rel_id

    def _declare(self, rule: SchemaRule, kind: str):
        if rule in self._indexes or rule in self._constraints:
            raise StructuralInconsistencyError(
                f"Schema rule on :{rule.label}({rule.property_key}) is already defined"
            )
        logger.debug(f"Declared deferred {kind} on :{rule.label}({rule.property_key})")

    def create_deferred_schema_index(self, label: str, property_key: str) -> None:
        self._check_open()
        rule = SchemaRule(label, property_key)
        self._declare(rule, "index")
        self._indexes.append(rule)

    def create_deferred_constraint(self, label: str, property_key: str) -> None:
        self._check_open()
        rule = SchemaRule(label, property_key)
        self._declare(rule, "constraint")
        self._constraints.append(rule)

    def shutdown(self, failed: bool = False) -> None:
        """
        Finalize the store.

        Closes the data files, then for a successful run populates every deferred
        index and checks every uniqueness constraint. The manifest is written on
        all paths and records whether the store is usable.

        Args:
            failed: The migration aborted; skip population and mark the store failed

        Raises:
            RuntimeError: shutdown() was already called
            StructuralInconsistencyError: a uniqueness constraint is violated
        """
        self._check_open()
        self._shut_down = True
        self._nodes_out.close()
        self._rels_out.close()

        status = "failed"
        try:
            if failed:
                logger.warning(f"Shutting down store at {self.store_dir} after a failed migration")
            else:
                self._populate_schema()
                status = "complete"
        finally:
            self._write_manifest(status)
            logger.info(
                f"Store shut down ({status}): {self.node_count} nodes, "
                f"{self.relationship_count} relationships"
            )

    def _populate_schema(self):
        """Build every deferred index in one scan over the node file."""
        rules = [(rule, False) for rule in self._indexes] + [(rule, True) for rule in self._constraints]
        if not rules:
            return

        logger.info(f"Populating {len(rules)} deferred schema rules...")
        entries = [defaultdict(list) for _ in rules]

        with open(self.store_dir / NODES_FILE, 'r', encoding='utf-8') as f:
            for line in f:
                node = json.loads(line)
                labels = node["labels"]
                properties = node["properties"]
                for (rule, unique), index in zip(rules, entries):
                    if rule.label in labels and rule.property_key in properties:
                        key = json.dumps(properties[rule.property_key], sort_keys=True)
                        index[key].append(node["id"])

        schema_dir = self.store_dir / SCHEMA_DIR
        schema_dir.mkdir(exist_ok=True)
        for n, ((rule, unique), index) in enumerate(zip(rules, entries)):
            if unique:
                for key, node_ids in index.items():
                    if len(node_ids) > 1:
                        raise StructuralInconsistencyError(
                            f"Uniqueness constraint on :{rule.label}({rule.property_key}) "
                            f"violated by nodes {node_ids} (value {key})"
                        )
            out = {
                "label": rule.label,
                "property": rule.property_key,
                "unique": unique,
                "entries": [
                    {"value": json.loads(key), "nodes": node_ids}
                    for key, node_ids in index.items()
                ],
            }
            with open(schema_dir / f"index-{n}.json", 'w', encoding='utf-8') as f:
                json.dump(out, f, ensure_ascii=False, indent=2)

    def _write_manifest(self, status: str):
        manifest = {
            "status": status,
            "finalized_at": datetime.now(timezone.utc).isoformat(),
            "nodes": self.node_count,
            "relationships": self.relationship_count,
            "indexes": [{"label": r.label, "property": r.property_key} for r in self._indexes],
            "constraints": [{"label": r.label, "property": r.property_key} for r in self._constraints],
        }
        with open(self.store_dir / MANIFEST_FILE, 'w', encoding='utf-8') as f:
            json.dump(manifest, f, indent=2)
