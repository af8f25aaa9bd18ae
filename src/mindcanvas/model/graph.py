"""
Mind Map Graph (Data Model)
===========================
This module defines the node tree of a mind map.

Why is this file needed?
------------------------
1. Structure: It owns the three-tier hierarchy (topic -> main branches ->
   leaf branches) and enforces that nothing is ever nested deeper.
2. Identity: Nodes live in an id-indexed map. Leaves point at their parent
   through `parent_id`, main branches list their leaves in `child_ids`.
   There are no object back-references.
3. Persistence: `to_dict()` / `from_dict()` define the wire shape used by the
   store and by the navigation hand-off.

Classes:
    NodeLevel: Tier of a node.
    Node: A single labeled vertex.
    MindMapGraph: The tree container and its mutators.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from mindcanvas.model.errors import InputError, StructuralError
from mindcanvas.model.geometry_primitives import Point
from mindcanvas.model.palette import PaletteColor

logger = logging.getLogger(__name__)

# Selection/edit id of the implicit central topic
ROOT_ID = "root"

DEFAULT_TOPIC = "My Mind Map"
MAIN_PLACEHOLDER = "New Topic"
CHILD_PLACEHOLDER = "New Subtopic"

# (main branch name, [leaf names...])
Outline = Sequence[Tuple[str, Sequence[str]]]


class NodeLevel(IntEnum):
    ROOT = 0
    MAIN = 1
    LEAF = 2


@dataclass
class Node:
    id: str
    text: str
    level: NodeLevel
    color: PaletteColor = PaletteColor.BLUE
    parent_id: Optional[str] = None
    child_ids: List[str] = field(default_factory=list)
    position: Optional[Point] = None  # written by the layout step


def _new_id(level: NodeLevel) -> str:
    prefix = "node" if level == NodeLevel.MAIN else "child"
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _require_text(text: Optional[str], what: str) -> str:
    if text is None or not str(text).strip():
        raise InputError(f"{what} must not be empty.")
    return str(text).strip()


class MindMapGraph:
    """
    The node tree of one mind map.

    The topic is the implicit root: it is not stored in `nodes` and is
    addressed by `ROOT_ID` where an id is needed.
    """

    def __init__(self, topic: str = DEFAULT_TOPIC) -> None:
        self.topic: str = _require_text(topic, "Topic")
        self.nodes: Dict[str, Node] = {}
        self.main_ids: List[str] = []
        self.root_position: Optional[Point] = None
        self.revision: int = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[Node]:
        """Depth-first: each main branch followed by its leaves."""
        for main in self.main_nodes():
            yield main
            yield from self.children_of(main.id)

    def get(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def main_nodes(self) -> List[Node]:
        return [self.nodes[i] for i in self.main_ids]

    def children_of(self, node_id: str) -> List[Node]:
        node = self.nodes.get(node_id)
        if node is None:
            return []
        return [self.nodes[i] for i in node.child_ids]

    def parent_of(self, node_id: str) -> Optional[Node]:
        node = self.nodes.get(node_id)
        if node is None or node.parent_id is None:
            return None
        return self.nodes.get(node.parent_id)

    @property
    def main_count(self) -> int:
        return len(self.main_ids)

    @property
    def leaf_count(self) -> int:
        return sum(len(self.nodes[i].child_ids) for i in self.main_ids)

    @property
    def total_count(self) -> int:
        return self.main_count + self.leaf_count

    def is_empty(self) -> bool:
        return not self.main_ids

    def structure(self) -> Tuple[Any, ...]:
        """Id-free, comparable description of the tree (topic, texts, colors)."""
        return (
            self.topic,
            tuple(
                (main.text, main.color.value, tuple(c.text for c in self.children_of(main.id)))
                for main in self.main_nodes()
            ),
        )

    def to_outline(self) -> List[Tuple[str, List[str]]]:
        return [(m.text, [c.text for c in self.children_of(m.id)]) for m in self.main_nodes()]

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def add_main_node(self, text: str, color: Optional[PaletteColor] = None) -> Node:
        """Append a level-1 node without children."""
        text = _require_text(text, "Node text")
        if color is None:
            color = PaletteColor.round_robin(len(self.main_ids))
        node = Node(id=self._unique_id(NodeLevel.MAIN), text=text, level=NodeLevel.MAIN,
                    color=PaletteColor.resolve(color))
        self.nodes[node.id] = node
        self.main_ids.append(node.id)
        self._structure_changed()
        logger.debug(f"Added main node '{text}' ({node.id}).")
        return node

    def add_child_node(self, parent_id: str, text: str) -> Node:
        """Append a level-2 node to an existing level-1 parent."""
        parent = self.nodes.get(parent_id)
        if parent is None:
            raise StructuralError(f"Parent node '{parent_id}' does not exist.")
        if parent.level != NodeLevel.MAIN:
            raise StructuralError(
                f"Node '{parent_id}' is not a main branch; subtopics cannot be nested deeper."
            )
        text = _require_text(text, "Node text")
        node = Node(id=self._unique_id(NodeLevel.LEAF), text=text, level=NodeLevel.LEAF,
                    color=parent.color, parent_id=parent.id)
        self.nodes[node.id] = node
        parent.child_ids.append(node.id)
        self._structure_changed()
        logger.debug(f"Added subtopic '{text}' under '{parent.text}'.")
        return node

    def remove_node(self, node_id: str) -> List[str]:
        """
        Remove a node (a main branch takes its leaves with it).

        Returns:
            The ids that were removed; empty if `node_id` was unknown.
        """
        node = self.nodes.get(node_id)
        if node is None:
            return []

        if node.level == NodeLevel.MAIN:
            removed = [node.id, *node.child_ids]
            for child_id in node.child_ids:
                self.nodes.pop(child_id, None)
            self.main_ids.remove(node.id)
        else:
            removed = [node.id]
            parent = self.nodes.get(node.parent_id) if node.parent_id else None
            if parent is not None and node.id in parent.child_ids:
                parent.child_ids.remove(node.id)

        del self.nodes[node.id]
        self._structure_changed()
        logger.debug(f"Removed {len(removed)} node(s) starting at '{node_id}'.")
        return removed

    def rename_node(self, node_id: str, text: str) -> None:
        """Change a label in place. Unknown ids are ignored."""
        if node_id == ROOT_ID:
            self.rename_topic(text)
            return
        node = self.nodes.get(node_id)
        if node is None:
            return
        node.text = _require_text(text, "Node text")

    def rename_topic(self, text: str) -> None:
        self.topic = _require_text(text, "Topic")

    def recolor(self, node_id: str, color: PaletteColor) -> None:
        """
        Recolor a whole branch. For a leaf the owning main branch is recolored,
        so a branch always shares one color.
        """
        node = self.nodes.get(node_id)
        if node is None:
            return
        branch = node if node.level == NodeLevel.MAIN else self.parent_of(node_id)
        color = PaletteColor.resolve(color)
        if branch is None:
            node.color = color
            return
        branch.color = color
        for child in self.children_of(branch.id):
            child.color = color

    def invalidate_positions(self) -> None:
        self.root_position = None
        for node in self.nodes.values():
            node.position = None

    def _structure_changed(self) -> None:
        self.revision += 1
        self.invalidate_positions()

    def _unique_id(self, level: NodeLevel) -> str:
        node_id = _new_id(level)
        while node_id in self.nodes or node_id == ROOT_ID:
            node_id = _new_id(level)
        return node_id

    # ------------------------------------------------------------------
    # Construction / serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_outline(cls, topic: str, outline: Outline) -> MindMapGraph:
        """
        Build a graph from topic expansion output: one main branch per entry,
        colors assigned round-robin.
        """
        if not outline:
            raise InputError("A mind map needs at least one main branch.")
        graph = cls(topic)
        for main_text, leaves in outline:
            main = graph.add_main_node(str(main_text).strip() or MAIN_PLACEHOLDER)
            for leaf_text in leaves or []:
                graph.add_child_node(main.id, str(leaf_text).strip() or CHILD_PLACEHOLDER)
        logger.info(f"Built mind map '{graph.topic}' with {graph.main_count} branches "
                    f"and {graph.leaf_count} subtopics.")
        return graph

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "nodes": [self._node_to_dict(m) for m in self.main_nodes()],
        }

    def nodes_to_list(self) -> List[Dict[str, Any]]:
        return self.to_dict()["nodes"]

    def _node_to_dict(self, node: Node) -> Dict[str, Any]:
        return {
            "id": node.id,
            "text": node.text,
            "level": int(node.level),
            "color": node.color.value,
            "children": [self._node_to_dict(c) for c in self.children_of(node.id)],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MindMapGraph:
        """
        Rebuild a graph from its wire shape. Stored coordinates are ignored,
        missing or duplicate ids are regenerated and anything nested below
        level 2 is dropped.
        """
        topic = str(data.get("topic") or "").strip() or DEFAULT_TOPIC
        graph = cls(topic)
        for raw_main in data.get("nodes") or []:
            main = graph._restore_node(raw_main, NodeLevel.MAIN, None)
            for raw_child in raw_main.get("children") or []:
                graph._restore_node(raw_child, NodeLevel.LEAF, main)
                if raw_child.get("children"):
                    logger.warning(f"Dropping nodes nested below '{raw_child.get('text')}'.")
        graph.revision = 0
        graph.invalidate_positions()
        return graph

    def _restore_node(self, raw: Dict[str, Any], level: NodeLevel, parent: Optional[Node]) -> Node:
        node_id = str(raw.get("id") or "")
        if not node_id or node_id in self.nodes or node_id == ROOT_ID:
            node_id = self._unique_id(level)
        placeholder = MAIN_PLACEHOLDER if level == NodeLevel.MAIN else CHILD_PLACEHOLDER
        text = str(raw.get("text") or "").strip() or placeholder

        if parent is None:
            color = PaletteColor.resolve(raw.get("color", PaletteColor.round_robin(len(self.main_ids))))
        else:
            color = parent.color

        node = Node(id=node_id, text=text, level=level, color=color,
                    parent_id=parent.id if parent else None)
        self.nodes[node_id] = node
        if parent is None:
            self.main_ids.append(node_id)
        else:
            parent.child_ids.append(node_id)
        return node

    def copy(self) -> MindMapGraph:
        """Deep copy with the same ids."""
        return MindMapGraph.from_dict(self.to_dict())
