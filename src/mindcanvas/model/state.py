"""
Mind Map State (Data Model)
===========================
This module defines the central state of the interactive mind-map view.

Why is this file needed?
------------------------
1. State Management: It holds the graph, the viewport, the selection and the
   surface size in one place. There is exactly one owner of this object.
2. Layout Cache: It remembers the last layout run and knows when it is
   stale (tree revision or surface size changed).
3. Decoupling: The view reads from this object; the interaction controller
   writes to it.

Classes:
    MindMapState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional, Tuple

from mindcanvas.model.geometry_primitives import Point
from mindcanvas.model.graph import MindMapGraph, Node, ROOT_ID, DEFAULT_TOPIC
from mindcanvas.model.layout import LayoutResult, layout, apply_layout, base_radius_for
from mindcanvas.model.viewport import Viewport

logger = logging.getLogger(__name__)

DEFAULT_SURFACE_SIZE: Tuple[int, int] = (800, 600)


@dataclass
class MindMapState:
    """
    Singleton-like class that holds the entire state of the open mind map.
    Pass this instance to the controller and the views.
    """
    graph: MindMapGraph = field(default_factory=MindMapGraph)
    viewport: Viewport = field(default_factory=Viewport)
    selected_id: Optional[str] = None

    surface_width: int = DEFAULT_SURFACE_SIZE[0]
    surface_height: int = DEFAULT_SURFACE_SIZE[1]

    map_id: Optional[str] = None  # id in the store once saved
    created_at: Optional[str] = None

    _layout: Optional[LayoutResult] = field(default=None, repr=False)
    _layout_key: Optional[Tuple[int, int, int, int]] = field(default=None, repr=False)

    # ---- geometry derived from the surface ----

    def layout_center(self) -> Point:
        return Point(self.surface_width / 2.0, self.surface_height / 2.0)

    def base_radius(self) -> float:
        return base_radius_for(self.surface_width, self.surface_height)

    def resize(self, width: int, height: int) -> None:
        """A resize changes the base radius, so it counts as a structural change."""
        width, height = max(1, int(width)), max(1, int(height))
        if (width, height) == (self.surface_width, self.surface_height):
            return
        self.surface_width, self.surface_height = width, height
        self.invalidate_layout()

    # ---- layout ----

    def _current_key(self) -> Tuple[int, int, int, int]:
        return id(self.graph), self.graph.revision, self.surface_width, self.surface_height

    def invalidate_layout(self) -> None:
        self._layout = None
        self._layout_key = None
        self.graph.invalidate_positions()

    def relayout(self) -> LayoutResult:
        """Run the layout engine for the whole tree and cache the result."""
        result = layout(self.graph, self.layout_center(), self.base_radius())
        apply_layout(self.graph, result)
        self._layout = result
        self._layout_key = self._current_key()
        return result

    def ensure_layout(self) -> LayoutResult:
        if self._layout is None or self._layout_key != self._current_key():
            return self.relayout()
        return self._layout

    # ---- selection ----

    def selected_node(self) -> Optional[Node]:
        if self.selected_id is None or self.selected_id == ROOT_ID:
            return None
        return self.graph.get(self.selected_id)

    def is_root_selected(self) -> bool:
        return self.selected_id == ROOT_ID

    def prune_selection(self) -> None:
        """Drop a selection that points at a node which no longer exists."""
        if self.selected_id not in (None, ROOT_ID) and self.selected_id not in self.graph:
            self.selected_id = None

    # ---- lifecycle ----

    def open_graph(self, graph: MindMapGraph, map_id: Optional[str] = None,
                   created_at: Optional[str] = None) -> None:
        """Replace the current map. Nothing about a previous layout is kept."""
        self.graph = graph
        self.map_id = map_id
        self.created_at = created_at
        self.selected_id = None
        self.viewport.reset()
        self.invalidate_layout()
        logger.info(f"Opened mind map '{graph.topic}' ({graph.total_count} nodes).")

    def reset(self, topic: str = DEFAULT_TOPIC) -> None:
        """Clear all data for a new mind map"""
        self.open_graph(MindMapGraph(topic))
        logger.info("Mind map state has been reset.")
