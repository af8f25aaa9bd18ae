import math

import numpy as np
import pytest

from mindcanvas.model.geometry_primitives import Point
from mindcanvas.model.graph import ROOT_ID, MindMapGraph, NodeLevel
from mindcanvas.model.layout import (
    CHILD_RADIUS, FAN_STEP, NODE_RADIUS, apply_layout, base_radius_for, fan_angles, hit_test,
    layout, main_angles
)

CENTER = Point(400.0, 300.0)


def test_base_radius_is_clamped():
    assert base_radius_for(800, 600) == 200.0
    assert base_radius_for(2000, 1000) == pytest.approx(300.0)
    assert base_radius_for(0, 0) == 200.0


def test_three_main_branches_at_minus_90_30_150_degrees(travel_graph):
    result = layout(travel_graph, CENTER, 200.0)
    degrees = [math.degrees(result.angles[m.id]) for m in travel_graph.main_nodes()]
    assert degrees == pytest.approx([-90.0, 30.0, 150.0])

    first = result.positions[travel_graph.main_ids[0]]
    assert first.is_close(Point(400.0, 100.0), tol=1e-9)


def test_main_branches_sit_on_the_base_circle(travel_graph):
    result = layout(travel_graph, CENTER, 250.0)
    for main in travel_graph.main_nodes():
        assert result.positions[main.id].distance_to(CENTER) == pytest.approx(250.0)


def test_leaves_fan_symmetrically_around_the_parent_direction(travel_graph):
    result = layout(travel_graph, CENTER, 200.0)
    for main in travel_graph.main_nodes():
        theta = result.angles[main.id]
        parent_pt = result.positions[main.id]
        child_angles = [result.angles[c] for c in main.child_ids]
        assert child_angles == pytest.approx([theta - FAN_STEP / 2, theta + FAN_STEP / 2])
        for child_id in main.child_ids:
            assert result.positions[child_id].distance_to(parent_pt) == pytest.approx(CHILD_RADIUS)


def test_single_leaf_points_straight_out():
    graph = MindMapGraph.from_outline("T", [("A", ["only"])])
    result = layout(graph, CENTER, 200.0)
    main = graph.main_nodes()[0]
    assert result.angles[main.child_ids[0]] == pytest.approx(result.angles[main.id])


def test_fan_angles_odd_count_is_centred():
    angles = fan_angles(1.0, 3, 0.4)
    np.testing.assert_allclose(angles, [0.6, 1.0, 1.4])


def test_main_angles_empty():
    assert main_angles(0).size == 0


def test_layout_is_deterministic(travel_graph):
    a = layout(travel_graph, CENTER, 200.0)
    b = layout(travel_graph, CENTER, 200.0)
    assert a.positions == b.positions


def test_empty_graph_only_places_the_root():
    result = layout(MindMapGraph("Alone"), CENTER, 200.0)
    assert result.root == CENTER
    assert result.positions == {}


def test_apply_layout_writes_positions(travel_graph):
    result = layout(travel_graph, CENTER, 200.0)
    apply_layout(travel_graph, result)
    assert travel_graph.root_position == CENTER
    assert all(n.position == result.positions[n.id] for n in travel_graph)


def test_hit_test_finds_each_node_at_its_center(travel_graph):
    result = layout(travel_graph, CENTER, 200.0)
    assert hit_test(travel_graph, result, CENTER) == ROOT_ID
    for node in travel_graph:
        assert hit_test(travel_graph, result, result.positions[node.id]) == node.id


def test_hit_test_rim_is_outside(travel_graph):
    result = layout(travel_graph, CENTER, 200.0)
    main = travel_graph.main_nodes()[0]
    pos = result.positions[main.id]
    # Straight up from the topmost branch, away from every other node
    on_rim = Point(pos.x, pos.y - NODE_RADIUS[NodeLevel.MAIN])
    assert hit_test(travel_graph, result, on_rim) is None
    inside = Point(pos.x, pos.y - NODE_RADIUS[NodeLevel.MAIN] + 1.0)
    assert hit_test(travel_graph, result, inside) == main.id


def test_hit_test_root_wins_over_overlapping_branch():
    graph = MindMapGraph.from_outline("T", [("A", [])])
    # A tiny base radius makes the branch overlap the root
    result = layout(graph, CENTER, 10.0)
    assert hit_test(graph, result, result.positions[graph.main_ids[0]]) == ROOT_ID


def test_hit_test_empty_space(travel_graph):
    result = layout(travel_graph, CENTER, 200.0)
    assert hit_test(travel_graph, result, Point(-1000.0, -1000.0)) is None
