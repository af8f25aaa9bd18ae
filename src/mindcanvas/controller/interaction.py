"""
Interaction Controller
======================
Turns pointer and toolbar input into mutations of the MindMapState.

Why is this file needed?
------------------------
1. State Machine: It tracks whether the user is idle, panning the canvas or
   editing a label, and routes input accordingly.
2. Consistency: Every structural change re-runs the layout before the view
   is told to repaint, so the canvas never draws stale positions.
3. Decoupling: Widgets call plain methods with screen coordinates and listen
   to Qt signals. No widget code lives here.

Classes:
    InteractionMode: The states of the machine.
    InteractionController: The controller itself.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from PySide6.QtCore import QObject, Signal

from mindcanvas.controller.agents import request_for_node
from mindcanvas.model.errors import MindMapError, InputError, StructuralError
from mindcanvas.model.geometry_primitives import Point
from mindcanvas.model.graph import (
    MindMapGraph, NodeLevel, ROOT_ID, MAIN_PLACEHOLDER, CHILD_PLACEHOLDER
)
from mindcanvas.model.layout import hit_test
from mindcanvas.model.palette import PaletteColor
from mindcanvas.model.state import MindMapState

logger = logging.getLogger(__name__)

# Press/release closer than this (screen px) is a click, not a drag
CLICK_SLOP: float = 3.0
WHEEL_ZOOM_FACTOR: float = 1.1


class InteractionMode(Enum):
    IDLE = "idle"
    PANNING = "panning"
    EDITING_LABEL = "editing_label"


class InteractionController(QObject):
    """Single-threaded owner of all mutations of the mind map state."""
    changed = Signal()                 # repaint needed
    graph_changed = Signal()           # tree content or structure changed
    selection_changed = Signal(object)  # selected id or None
    zoom_changed = Signal(float)
    edit_started = Signal(str)         # id being edited (ROOT_ID for the topic)
    edit_finished = Signal()
    agent_requested = Signal(object)   # AgentSpawnRequest
    message = Signal(str)              # user-facing notice

    def __init__(self, state: MindMapState, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.state = state
        self._mode = InteractionMode.IDLE
        self._editing_id: Optional[str] = None
        self._edit_text: str = ""
        self._press_point: Optional[Point] = None
        self._last_point: Optional[Point] = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    @property
    def editing_id(self) -> Optional[str]:
        return self._editing_id

    @property
    def selected_id(self) -> Optional[str]:
        return self.state.selected_id

    @property
    def can_add_subtopic(self) -> bool:
        node = self.state.selected_node()
        return node is not None and node.level == NodeLevel.MAIN

    @property
    def can_delete(self) -> bool:
        return self.state.selected_node() is not None

    @property
    def can_create_agent(self) -> bool:
        return self.can_add_subtopic

    # ------------------------------------------------------------------
    # Pointer input (screen coordinates)
    # ------------------------------------------------------------------

    def hit(self, x: float, y: float) -> Optional[str]:
        """Node id under a screen point (ROOT_ID for the topic)."""
        model_pt = self.state.viewport.to_model(Point(x, y))
        return hit_test(self.state.graph, self.state.ensure_layout(), model_pt)

    def pointer_down(self, x: float, y: float) -> None:
        if self._mode == InteractionMode.EDITING_LABEL:
            # Blur commits whatever was typed
            self.commit_edit()

        hit_id = self.hit(x, y)
        if hit_id is not None:
            # Clicking the selected node again deselects it
            new_sel = None if self.state.selected_id == hit_id else hit_id
            self._set_selection(new_sel)
            return

        self._mode = InteractionMode.PANNING
        self._press_point = Point(x, y)
        self._last_point = Point(x, y)

    def pointer_move(self, x: float, y: float) -> None:
        if self._mode != InteractionMode.PANNING or self._last_point is None:
            return
        self.state.viewport.pan_by_screen(x - self._last_point.x, y - self._last_point.y)
        self._last_point = Point(x, y)
        self.changed.emit()

    def pointer_up(self, x: float, y: float) -> None:
        if self._mode != InteractionMode.PANNING:
            return
        if self._press_point is not None and self._press_point.distance_to(Point(x, y)) < CLICK_SLOP:
            # A click on empty space
            self._set_selection(None)
        self._mode = InteractionMode.IDLE
        self._press_point = None
        self._last_point = None

    def double_click(self, x: float, y: float) -> None:
        hit_id = self.hit(x, y)
        if hit_id is None:
            return
        if self.state.selected_id != hit_id:
            self._set_selection(hit_id)
        self.begin_edit()

    def wheel(self, x: float, y: float, steps: float) -> None:
        """Zoom around the cursor; positive steps zoom in."""
        if steps == 0:
            return
        factor = WHEEL_ZOOM_FACTOR ** steps
        vp = self.state.viewport
        old = vp.zoom
        vp.zoom_at(Point(x, y), old * factor)
        if vp.zoom != old:
            self._view_changed()

    # ------------------------------------------------------------------
    # Label editing
    # ------------------------------------------------------------------

    def begin_edit(self) -> bool:
        sel = self.state.selected_id
        if sel is None or (sel != ROOT_ID and sel not in self.state.graph):
            return False
        self._mode = InteractionMode.EDITING_LABEL
        self._editing_id = sel
        self._edit_text = self.editing_text()
        self.edit_started.emit(sel)
        return True

    def editing_text(self) -> str:
        if self._editing_id == ROOT_ID:
            return self.state.graph.topic
        node = self.state.graph.get(self._editing_id) if self._editing_id else None
        return node.text if node else ""

    def update_edit_text(self, text: str) -> None:
        """Track the text typed so far while a label is being edited."""
        if self._mode == InteractionMode.EDITING_LABEL:
            self._edit_text = text

    def commit_edit(self, text: Optional[str] = None) -> bool:
        """Rename the edited node to `text`, or to the tracked text when omitted."""
        if self._mode != InteractionMode.EDITING_LABEL or self._editing_id is None:
            return False
        node_id = self._editing_id
        if text is None:
            text = self._edit_text
        self._end_edit()
        try:
            self.state.graph.rename_node(node_id, text)
        except MindMapError as e:
            self._report(e)
            self.changed.emit()
            return False
        self.graph_changed.emit()
        self.changed.emit()
        return True

    def cancel_edit(self) -> None:
        if self._mode == InteractionMode.EDITING_LABEL:
            self._end_edit()
            self.changed.emit()

    def _end_edit(self) -> None:
        self._mode = InteractionMode.IDLE
        self._editing_id = None
        self._edit_text = ""
        self.edit_finished.emit()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_main_node(self, text: str = MAIN_PLACEHOLDER) -> Optional[str]:
        try:
            node = self.state.graph.add_main_node(text or MAIN_PLACEHOLDER)
        except MindMapError as e:
            self._report(e)
            return None
        self._structure_changed()
        self._set_selection(node.id)
        self.begin_edit()
        self.message.emit("New main topic added to mind map")
        return node.id

    def add_subtopic(self, text: str = CHILD_PLACEHOLDER) -> Optional[str]:
        if not self.can_add_subtopic:
            self._report(StructuralError("Select a main topic to add a subtopic"))
            return None
        try:
            node = self.state.graph.add_child_node(self.state.selected_id, text or CHILD_PLACEHOLDER)
        except MindMapError as e:
            self._report(e)
            return None
        self._structure_changed()
        self._set_selection(node.id)
        self.begin_edit()
        self.message.emit("New subtopic added to selected node")
        return node.id

    def delete_selected(self) -> bool:
        if self.state.is_root_selected():
            self._report(StructuralError("The central topic cannot be deleted"))
            return False
        node = self.state.selected_node()
        if node is None:
            return False
        if self._mode == InteractionMode.EDITING_LABEL:
            self._end_edit()
        self.state.graph.remove_node(node.id)
        self._set_selection(None)
        self._structure_changed()
        self.message.emit("Selected node has been removed")
        return True

    def rename_selected(self, text: str) -> bool:
        sel = self.state.selected_id
        if sel is None:
            return False
        try:
            self.state.graph.rename_node(sel, text)
        except InputError as e:
            # Live edits pass through empty intermediate values
            logger.debug(f"Ignoring rename: {e}")
            return False
        self.graph_changed.emit()
        self.changed.emit()
        return True

    def rename_topic(self, text: str) -> bool:
        try:
            self.state.graph.rename_topic(text)
        except MindMapError as e:
            self._report(e)
            return False
        self.graph_changed.emit()
        self.changed.emit()
        return True

    def recolor_selected(self, color: PaletteColor) -> bool:
        node = self.state.selected_node()
        if node is None:
            return False
        self.state.graph.recolor(node.id, color)
        self.graph_changed.emit()
        self.changed.emit()
        return True

    def create_agent_from_selected(self) -> bool:
        if not self.can_create_agent:
            self._report(StructuralError("An AI expert can only be created from a main topic"))
            return False
        request = request_for_node(self.state.graph, self.state.selected_id)
        if request is None:
            return False
        logger.info(f"Agent requested: {request.persona_name}")
        self.agent_requested.emit(request)
        return True

    # ---- viewport ----

    def zoom_in(self) -> None:
        self.state.viewport.zoom_in()
        self._view_changed()

    def zoom_out(self) -> None:
        self.state.viewport.zoom_out()
        self._view_changed()

    def reset_zoom(self) -> None:
        self.state.viewport.reset_zoom()
        self._view_changed()

    def reset_pan(self) -> None:
        self.state.viewport.reset_pan()
        self.changed.emit()

    def resize(self, width: int, height: int) -> None:
        self.state.resize(width, height)
        self.state.ensure_layout()
        self.changed.emit()

    # ---- lifecycle ----

    def open_graph(self, graph: MindMapGraph, map_id: Optional[str] = None,
                   created_at: Optional[str] = None) -> None:
        if self._mode == InteractionMode.EDITING_LABEL:
            self._end_edit()
        self._mode = InteractionMode.IDLE
        self.state.open_graph(graph, map_id=map_id, created_at=created_at)
        self.state.relayout()
        self.selection_changed.emit(None)
        self.zoom_changed.emit(self.state.viewport.zoom)
        self.graph_changed.emit()
        self.changed.emit()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_selection(self, node_id: Optional[str]) -> None:
        if node_id == self.state.selected_id:
            return
        self.state.selected_id = node_id
        self.selection_changed.emit(node_id)
        self.changed.emit()

    def _structure_changed(self) -> None:
        self.state.prune_selection()
        self.state.relayout()
        self.graph_changed.emit()
        self.changed.emit()

    def _view_changed(self) -> None:
        self.zoom_changed.emit(self.state.viewport.zoom)
        self.changed.emit()

    def _report(self, error: MindMapError) -> None:
        logger.warning(f"Action rejected: {error}")
        self.message.emit(str(error))
