"""
Radial Layout Engine
====================
Assigns model-space coordinates to every node of a mind map.

The layout is a pure, total function of the current tree shape: it is
re-run from scratch after every structural change (the number of main
branches changes the angular spacing of all of them), never patched
incrementally.

Placement:
    - The root sits exactly on `center`.
    - Main branch i of n sits on a circle of `base_radius` at
      theta_i = i * 2*pi/n - pi/2 (index 0 due north, clockwise on screen).
    - Leaf j of m fans out around its parent's outward direction on a circle
      of CHILD_RADIUS: theta + (j - (m - 1)/2) * FAN_STEP.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, TYPE_CHECKING

import numpy as np

from mindcanvas.model.geometry_primitives import Point
from mindcanvas.model.graph import NodeLevel, ROOT_ID

if TYPE_CHECKING:
    import numpy.typing as npt
    from mindcanvas.model.graph import MindMapGraph

logger = logging.getLogger(__name__)

NODE_RADIUS: Dict[NodeLevel, float] = {
    NodeLevel.ROOT: 80.0,
    NodeLevel.MAIN: 50.0,
    NodeLevel.LEAF: 35.0,
}

CHILD_RADIUS: float = 120.0
FAN_STEP: float = 0.4  # rad between neighbouring leaves
MIN_BASE_RADIUS: float = 200.0
BASE_RADIUS_FRACTION: float = 0.3
START_ANGLE: float = -np.pi / 2


@dataclass
class LayoutResult:
    """Positions produced by one layout run."""
    root: Point
    positions: Dict[str, Point] = field(default_factory=dict)
    angles: Dict[str, float] = field(default_factory=dict)

    def position_of(self, node_id: str) -> Point | None:
        return self.positions.get(node_id)


def main_angles(n: int) -> npt.NDArray[np.float64]:
    """Angles of n evenly spaced main branches, index 0 at -pi/2."""
    if n <= 0:
        return np.empty(0, dtype=np.float64)
    return np.arange(n, dtype=np.float64) * (2.0 * np.pi / n) + START_ANGLE


def fan_angles(theta: float, m: int, step: float = FAN_STEP) -> npt.NDArray[np.float64]:
    """Angles of m leaves centred symmetrically on the parent direction `theta`."""
    if m <= 0:
        return np.empty(0, dtype=np.float64)
    offsets = np.arange(m, dtype=np.float64) - (m - 1) / 2.0
    return theta + offsets * step


def polar_points(
    center: Point,
    radius: float,
    angles: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """(N, 2) array of points on a circle around `center`."""
    return np.column_stack((
        center.x + radius * np.cos(angles),
        center.y + radius * np.sin(angles),
    ))


def base_radius_for(width: float, height: float) -> float:
    """Main-branch radius derived from the drawing surface size."""
    if width <= 0 or height <= 0:
        return MIN_BASE_RADIUS
    return max(MIN_BASE_RADIUS, BASE_RADIUS_FRACTION * min(width, height))


def layout(
    graph: MindMapGraph,
    center: Point,
    base_radius: float,
    child_radius: float = CHILD_RADIUS,
    fan_step: float = FAN_STEP,
) -> LayoutResult:
    """
    Compute positions for every node of `graph`.

    Args:
        graph: The tree to lay out. It is not modified.
        center: Model-space position of the root.
        base_radius: Distance of the main branches from the root.
        child_radius: Distance of leaves from their main branch.
        fan_step: Angular step between neighbouring leaves.

    Returns:
        LayoutResult with the root position and a position per node id.
    """
    result = LayoutResult(root=center)
    mains = graph.main_nodes()
    if not mains:
        return result

    thetas = main_angles(len(mains))
    main_xy = polar_points(center, base_radius, thetas)

    for main, theta, xy in zip(mains, thetas, main_xy):
        parent_pt = Point.from_array(xy)
        result.positions[main.id] = parent_pt
        result.angles[main.id] = float(theta)

        children = graph.children_of(main.id)
        if not children:
            continue
        child_thetas = fan_angles(float(theta), len(children), fan_step)
        child_xy = polar_points(parent_pt, child_radius, child_thetas)
        for child, child_theta, cxy in zip(children, child_thetas, child_xy):
            result.positions[child.id] = Point.from_array(cxy)
            result.angles[child.id] = float(child_theta)

    logger.debug(f"Layout computed for {len(result.positions)} nodes (base radius {base_radius:.1f}).")
    return result


def apply_layout(graph: MindMapGraph, result: LayoutResult) -> None:
    """Write the computed positions onto the graph's nodes."""
    graph.root_position = result.root
    for node in graph.nodes.values():
        node.position = result.positions.get(node.id)


def node_radius(level: int) -> float:
    """Nominal (model-space) radius of a node shape, also its hit radius."""
    return NODE_RADIUS.get(NodeLevel(level), NODE_RADIUS[NodeLevel.LEAF])


def hit_test(graph: MindMapGraph, result: LayoutResult, point: Point) -> str | None:
    """
    Id of the node under a model-space point, ROOT_ID for the topic.

    Order is root, then main branches, then leaves; the first node whose
    nominal radius strictly contains the point wins.
    """
    if result.root.distance_to(point) < node_radius(NodeLevel.ROOT):
        return ROOT_ID

    for level in (NodeLevel.MAIN, NodeLevel.LEAF):
        for node in graph:
            if node.level != level:
                continue
            pos = result.positions.get(node.id)
            if pos is not None and pos.distance_to(point) < node_radius(level):
                return node.id
    return None
