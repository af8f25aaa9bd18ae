"""
Render Pipeline (Frame Composition)
===================================
Turns `{graph, layout, viewport, selection}` into an ordered list of draw
commands in screen space. This module is pure: it never touches a paint
device, so a frame can be inspected without a running Qt application.
`mindcanvas.view.qt_painter` executes frames with QPainter.

Draw order (back to front):
    1. all connectors (root -> main, main -> leaf)
    2. the root cloud
    3. all main-branch clouds
    4. all leaf clouds
Each cloud carries its own label.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from mindcanvas.model.geometry_primitives import Circle, Point, QuadraticCurve, arrowhead
from mindcanvas.model.graph import MindMapGraph, NodeLevel, ROOT_ID
from mindcanvas.model.layout import LayoutResult, node_radius
from mindcanvas.model.palette import PaletteColor
from mindcanvas.model.viewport import Viewport

logger = logging.getLogger(__name__)

# text, font size (px), bold -> width (px)
TextMeasure = Callable[[str, float, bool], float]

# ---- style ----

PALETTE_FILL: Dict[PaletteColor, str] = {
    PaletteColor.BLUE: "#3b82f6",
    PaletteColor.GREEN: "#10b981",
    PaletteColor.PURPLE: "#8b5cf6",
    PaletteColor.ORANGE: "#f59e0b",
    PaletteColor.PINK: "#ec4899",
    PaletteColor.YELLOW: "#eab308",
    PaletteColor.RED: "#ef4444",
    PaletteColor.INDIGO: "#6366f1",
}

BACKGROUND = "#f5f7ff"
ROOT_FILL = "#3b82f6"
ROOT_STROKE = "#1e40af"
NODE_STROKE = "#e2e8f0"
SELECTED_FILL = "#fbbf24"
SELECTED_STROKE = "#f59e0b"
LABEL_COLOR = "#ffffff"
MAIN_CONNECTOR_COLOR = "#94a3b8"
LEAF_CONNECTOR_COLOR = "#cbd5e1"

CONNECTOR_WIDTH = 2.0
CONNECTOR_BEND = 0.1
ARROW_LENGTH = 8.0

# (dx, dy, r) of the five cloud circles, in units of the node radius
CLOUD_LOBES: Tuple[Tuple[float, float, float], ...] = (
    (-0.3, -0.2, 0.4),
    (0.3, -0.2, 0.4),
    (-0.2, 0.1, 0.3),
    (0.2, 0.1, 0.3),
    (0.0, 0.0, 0.5),  # body
)

STROKE_WIDTH: Dict[NodeLevel, float] = {NodeLevel.ROOT: 3.0, NodeLevel.MAIN: 2.0, NodeLevel.LEAF: 2.0}
FONT_SIZE: Dict[NodeLevel, float] = {NodeLevel.ROOT: 16.0, NodeLevel.MAIN: 14.0, NodeLevel.LEAF: 12.0}
LINE_HEIGHT: Dict[NodeLevel, float] = {NodeLevel.ROOT: 18.0, NodeLevel.MAIN: 16.0, NodeLevel.LEAF: 14.0}
LABEL_WIDTH_FACTOR = 1.5  # wrap width = factor * node radius


def fill_for(color: object) -> str:
    """Concrete fill for a palette key; unknown keys use the default entry."""
    resolved = PaletteColor.resolve(color)
    return PALETTE_FILL.get(resolved, PALETTE_FILL[PaletteColor.default()])


def approx_text_width(text: str, font_size: float, bold: bool = False) -> float:
    """Font-free estimate used when no real font metrics are available."""
    return len(text) * font_size * (0.6 if bold else 0.55)


# ---- commands ----

@dataclass(frozen=True)
class LabelBlock:
    lines: Tuple[str, ...]
    center: Point        # centre of the whole block
    first_line: Point    # centre of the first line
    line_height: float
    font_size: float
    bold: bool = False
    color: str = LABEL_COLOR


@dataclass(frozen=True)
class ConnectorCommand:
    parent_id: str
    child_id: str
    curve: QuadraticCurve
    arrow: Tuple[Point, Point, Point]
    color: str
    width: float


@dataclass(frozen=True)
class NodeCommand:
    node_id: str
    level: NodeLevel
    center: Point
    radius: float
    lobes: Tuple[Circle, ...]
    fill: str
    stroke: str
    stroke_width: float
    selected: bool
    label: LabelBlock


DrawCommand = Union[ConnectorCommand, NodeCommand]


@dataclass
class Frame:
    commands: List[DrawCommand] = field(default_factory=list)
    background: str = BACKGROUND

    @property
    def connectors(self) -> List[ConnectorCommand]:
        return [c for c in self.commands if isinstance(c, ConnectorCommand)]

    @property
    def nodes(self) -> List[NodeCommand]:
        return [c for c in self.commands if isinstance(c, NodeCommand)]

    def node(self, node_id: str) -> Optional[NodeCommand]:
        for cmd in self.nodes:
            if cmd.node_id == node_id:
                return cmd
        return None


# ---- geometry helpers ----

def cloud_lobes(center: Point, radius: float) -> Tuple[Circle, ...]:
    """The five overlapping circles forming a cloud of nominal `radius`."""
    return tuple(
        Circle(Point(center.x + dx * radius, center.y + dy * radius), r * radius)
        for dx, dy, r in CLOUD_LOBES
    )


def wrap_text(text: str, max_width: float, font_size: float, bold: bool = False,
              measure: TextMeasure = approx_text_width) -> List[str]:
    """
    Greedy word wrap. A word wider than `max_width` keeps a line of its own.
    """
    words = text.split()
    if not words:
        return []
    if len(words) == 1:
        return [words[0]]

    lines: List[str] = []
    line = ""
    for word in words:
        candidate = f"{line} {word}" if line else word
        if line and measure(candidate, font_size, bold) > max_width:
            lines.append(line)
            line = word
        else:
            line = candidate
    lines.append(line)
    return lines


def label_block(text: str, level: NodeLevel, center: Point, zoom: float,
                measure: TextMeasure = approx_text_width) -> LabelBlock:
    """
    Wrapped, vertically centred label. Wrapping happens in model units so
    line breaks do not change with zoom.
    """
    font = FONT_SIZE[level]
    bold = level == NodeLevel.ROOT
    lines = wrap_text(text, LABEL_WIDTH_FACTOR * node_radius(level), font, bold, measure)
    line_height = LINE_HEIGHT[level] * zoom
    offset = (len(lines) - 1) * line_height / 2.0 if lines else 0.0
    return LabelBlock(
        lines=tuple(lines),
        center=center,
        first_line=Point(center.x, center.y - offset),
        line_height=line_height,
        font_size=font * zoom,
        bold=bold,
    )


def connector(parent_id: str, child_id: str, start: Point, end: Point, color: str,
              zoom: float) -> ConnectorCommand:
    curve = QuadraticCurve.bowed(start, end, CONNECTOR_BEND)
    return ConnectorCommand(
        parent_id=parent_id,
        child_id=child_id,
        curve=curve,
        arrow=arrowhead(end, curve.end_angle(), ARROW_LENGTH * zoom),
        color=color,
        width=CONNECTOR_WIDTH * zoom,
    )


# ---- composition ----

def compose_frame(
    graph: MindMapGraph,
    result: LayoutResult,
    viewport: Viewport,
    selected_id: Optional[str] = None,
    measure: TextMeasure = approx_text_width,
) -> Frame:
    """
    Build the draw commands for one frame.

    Never raises for a structurally valid graph: nodes without a position
    are skipped and unknown colors fall back to the default palette entry.
    """
    frame = Frame()
    zoom = viewport.zoom
    to_screen = viewport.to_screen

    root_screen = to_screen(result.root)
    mains = [m for m in graph.main_nodes() if result.position_of(m.id) is not None]

    # 1. connectors
    for main in mains:
        main_screen = to_screen(result.positions[main.id])
        frame.commands.append(
            connector(ROOT_ID, main.id, root_screen, main_screen, MAIN_CONNECTOR_COLOR, zoom)
        )
    for main in mains:
        main_screen = to_screen(result.positions[main.id])
        for child in graph.children_of(main.id):
            pos = result.position_of(child.id)
            if pos is None:
                continue
            frame.commands.append(
                connector(main.id, child.id, main_screen, to_screen(pos), LEAF_CONNECTOR_COLOR, zoom)
            )

    # 2. root
    frame.commands.append(
        _node_command(ROOT_ID, NodeLevel.ROOT, graph.topic, root_screen, zoom,
                      ROOT_FILL, ROOT_STROKE, selected_id == ROOT_ID, measure)
    )

    # 3./4. main branches, then leaves
    for level in (NodeLevel.MAIN, NodeLevel.LEAF):
        for node in graph:
            if node.level != level:
                continue
            pos = result.position_of(node.id)
            if pos is None:
                logger.debug(f"Node {node.id} has no position, skipped.")
                continue
            frame.commands.append(
                _node_command(node.id, level, node.text, to_screen(pos), zoom,
                              fill_for(node.color), NODE_STROKE, selected_id == node.id, measure)
            )

    return frame


def _node_command(node_id: str, level: NodeLevel, text: str, center: Point, zoom: float,
                  fill: str, stroke: str, selected: bool, measure: TextMeasure) -> NodeCommand:
    radius = node_radius(level) * zoom
    return NodeCommand(
        node_id=node_id,
        level=level,
        center=center,
        radius=radius,
        lobes=cloud_lobes(center, radius),
        fill=SELECTED_FILL if selected else fill,
        stroke=SELECTED_STROKE if selected else stroke,
        stroke_width=STROKE_WIDTH[level] * zoom,
        selected=selected,
        label=label_block(text, level, center, zoom, measure),
    )
