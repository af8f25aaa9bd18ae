"""
Mind Map Store (HDF5)
Handles saving and loading named mind maps to a single .h5 file.

Layout of the file:
    /mindmaps/<id>          one group per saved map
        attrs: topic, created_at (ISO 8601, UTC), version, node_count
        attrs["nodes_json"] or dataset "nodes_blob" (large trees)
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Dict, List, Optional

import h5py
import numpy as np

from mindcanvas.model.errors import RecordNotFound
from mindcanvas.model.graph import MindMapGraph

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("mindcanvas")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

ROOT_GROUP = "mindmaps"
# HDF5 attributes are limited to 64 KB
ATTRIBUTE_LIMIT = 60000


@dataclass
class MindMapRecord:
    id: str
    topic: str
    nodes: List[Dict[str, Any]] = field(default_factory=list)
    created_at: str = ""

    def to_graph(self) -> MindMapGraph:
        """A fresh graph; nothing about a previous layout is assumed."""
        return MindMapGraph.from_dict({"topic": self.topic, "nodes": self.nodes})


@dataclass
class MindMapSummary:
    id: str
    topic: str
    created_at: str
    node_count: int

    @property
    def created(self) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(self.created_at)
        except ValueError:
            return None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _attr_str(attrs: h5py.AttributeManager, key: str, default: str = "") -> str:
    # HDF5 often saves as numpy types / bytes, convert to native python
    val = attrs.get(key, default)
    if isinstance(val, bytes):
        return val.decode("utf-8")
    if hasattr(val, "item"):
        val = val.item()
    return str(val)


def _count_nodes(nodes: List[Dict[str, Any]]) -> int:
    return sum(1 + len(n.get("children") or []) for n in nodes)


class MindMapStore:
    """Persistence bridge: save(topic, nodes) -> id, load(id) -> record."""

    def __init__(self, filepath: str) -> None:
        self.filepath = str(filepath)

    # ---- helpers ----

    def _exists(self) -> bool:
        return os.path.exists(self.filepath)

    def _check_file(self) -> None:
        if self._exists() and not h5py.is_hdf5(self.filepath):
            msg = f"File '{self.filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

    def __contains__(self, map_id: object) -> bool:
        if not self._exists():
            return False
        self._check_file()
        with h5py.File(self.filepath, "r") as f:
            return ROOT_GROUP in f and str(map_id) in f[ROOT_GROUP]

    # ---- public API ----

    def save(self, topic: str, nodes: List[Dict[str, Any]], map_id: Optional[str] = None) -> str:
        """
        Store a mind map. A new id is generated unless `map_id` is given, in
        which case the existing entry is overwritten (keeping its creation time).

        Returns:
            The id of the stored map.
        """
        self._check_file()
        parent_dir = os.path.dirname(os.path.abspath(self.filepath))
        os.makedirs(parent_dir, exist_ok=True)

        logger.info(f"Saving mind map '{topic}' to: {self.filepath}")
        try:
            with h5py.File(self.filepath, "a") as f:
                root = f.require_group(ROOT_GROUP)

                created_at = _now_iso()
                if map_id is not None and map_id in root:
                    created_at = _attr_str(root[map_id].attrs, "created_at", created_at)
                    del root[map_id]
                if map_id is None:
                    map_id = uuid.uuid4().hex
                    while map_id in root:
                        map_id = uuid.uuid4().hex

                grp = root.create_group(map_id)
                grp.attrs["topic"] = topic
                grp.attrs["created_at"] = created_at
                grp.attrs["version"] = APP_VERSION
                grp.attrs["node_count"] = _count_nodes(nodes)

                nodes_json = json.dumps(nodes, ensure_ascii=False)
                encoded = nodes_json.encode("utf-8")
                # Use dataset if data exceeds HDF5 attribute size limit
                if len(encoded) > ATTRIBUTE_LIMIT:
                    logger.info(f"Node tree is large ({len(encoded)} bytes), using dataset")
                    grp.create_dataset("nodes_blob", data=np.frombuffer(encoded, dtype=np.uint8),
                                       compression="gzip")
                else:
                    grp.attrs["nodes_json"] = nodes_json

            logger.info(f"Mind map saved with id: {map_id}")
            return map_id

        except Exception as e:
            logger.exception(f"Failed to save mind map: {e}")
            raise e

    def save_graph(self, graph: MindMapGraph, map_id: Optional[str] = None) -> str:
        return self.save(graph.topic, graph.nodes_to_list(), map_id=map_id)

    def load(self, map_id: str) -> MindMapRecord:
        logger.info(f"Loading mind map {map_id} from: {self.filepath}")
        if not self._exists():
            raise RecordNotFound(f"No mind map with id '{map_id}' (store is empty).")
        self._check_file()

        try:
            with h5py.File(self.filepath, "r") as f:
                if ROOT_GROUP not in f or map_id not in f[ROOT_GROUP]:
                    raise RecordNotFound(f"No mind map with id '{map_id}'.")
                grp = f[ROOT_GROUP][map_id]

                if "nodes_blob" in grp:
                    # Large data stored as dataset
                    nodes_json = grp["nodes_blob"][:].tobytes().decode("utf-8")
                else:
                    nodes_json = _attr_str(grp.attrs, "nodes_json", "[]")

                record = MindMapRecord(
                    id=map_id,
                    topic=_attr_str(grp.attrs, "topic"),
                    nodes=json.loads(nodes_json),
                    created_at=_attr_str(grp.attrs, "created_at"),
                )
        except RecordNotFound:
            logger.warning(f"Mind map {map_id} not found.")
            raise
        except Exception as e:
            logger.exception(f"Failed to load mind map: {e}")
            raise e

        logger.info(f"Mind map '{record.topic}' loaded.")
        return record

    def load_graph(self, map_id: str) -> MindMapGraph:
        return self.load(map_id).to_graph()

    def list_maps(self) -> List[MindMapSummary]:
        """All stored maps, newest first."""
        if not self._exists():
            return []
        self._check_file()

        summaries: List[MindMapSummary] = []
        with h5py.File(self.filepath, "r") as f:
            if ROOT_GROUP not in f:
                return []
            for map_id, grp in f[ROOT_GROUP].items():
                count = grp.attrs.get("node_count", 0)
                summaries.append(MindMapSummary(
                    id=map_id,
                    topic=_attr_str(grp.attrs, "topic"),
                    created_at=_attr_str(grp.attrs, "created_at"),
                    node_count=int(count.item() if hasattr(count, "item") else count),
                ))
        summaries.sort(key=lambda s: s.created_at, reverse=True)
        return summaries

    def delete(self, map_id: str) -> None:
        if map_id not in self:
            raise RecordNotFound(f"No mind map with id '{map_id}'.")
        with h5py.File(self.filepath, "a") as f:
            del f[ROOT_GROUP][map_id]
        logger.info(f"Deleted mind map {map_id}.")
