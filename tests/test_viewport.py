import numpy as np
import pytest

from mindcanvas.model.geometry_primitives import Point, Vector
from mindcanvas.model.layout import layout, hit_test
from mindcanvas.model.viewport import MAX_ZOOM, MIN_ZOOM, Viewport


def test_zoom_is_clamped_on_construction():
    assert Viewport(zoom=5.0).zoom == MAX_ZOOM
    assert Viewport(zoom=0.01).zoom == MIN_ZOOM


def test_zoom_steps_stay_on_grid_and_in_range():
    vp = Viewport()
    for _ in range(20):
        vp.zoom_in()
    assert vp.zoom == MAX_ZOOM
    for _ in range(30):
        vp.zoom_out()
    assert vp.zoom == MIN_ZOOM
    vp.zoom_in()
    assert vp.zoom == pytest.approx(0.6)


def test_zoom_2_and_pan_50_maps_origin_to_100():
    vp = Viewport(zoom=2.0, pan=Vector(50.0, 50.0))
    assert vp.to_screen(Point(0.0, 0.0)) == Point(100.0, 100.0)
    assert vp.to_model(Point(100.0, 100.0)) == Point(0.0, 0.0)


@pytest.mark.parametrize("zoom", [0.5, 0.7, 1.0, 1.3, 2.0])
@pytest.mark.parametrize("pan", [Vector(0.0, 0.0), Vector(-37.5, 12.25), Vector(300.0, -80.0)])
def test_screen_model_round_trip(zoom, pan):
    vp = Viewport(zoom=zoom, pan=pan)
    p = Point(123.4, -56.7)
    assert vp.to_model(vp.to_screen(p)).is_close(p, tol=1e-9)


def test_array_mapping_matches_point_mapping():
    vp = Viewport(zoom=1.5, pan=Vector(10.0, -20.0))
    pts = np.array([[0.0, 0.0], [10.0, 5.0], [-3.0, 7.5]])
    screen = vp.to_screen_array(pts)
    for (x, y), (sx, sy) in zip(pts, screen):
        expected = vp.to_screen(Point(x, y))
        assert (sx, sy) == pytest.approx(expected.as_tuple())
    np.testing.assert_allclose(vp.to_model_array(screen), pts)


def test_zoom_at_keeps_anchor_fixed():
    vp = Viewport(zoom=1.0, pan=Vector(20.0, 10.0))
    anchor = Point(250.0, 130.0)
    model_before = vp.to_model(anchor)
    vp.zoom_at(anchor, 1.7)
    assert vp.zoom == pytest.approx(1.7)
    assert vp.to_model(anchor).is_close(model_before, tol=1e-9)


def test_pan_by_screen_moves_content_with_the_pointer():
    vp = Viewport(zoom=2.0)
    p = Point(10.0, 10.0)
    before = vp.to_screen(p)
    vp.pan_by_screen(30.0, -8.0)
    after = vp.to_screen(p)
    assert after.x - before.x == pytest.approx(30.0)
    assert after.y - before.y == pytest.approx(-8.0)


def test_reset():
    vp = Viewport(zoom=1.8, pan=Vector(5.0, 5.0))
    vp.reset()
    assert vp.zoom == 1.0
    assert vp.pan == Vector(0.0, 0.0)


@pytest.mark.parametrize("zoom", [0.5, 1.0, 1.5, 2.0])
def test_hit_at_every_zoom(travel_graph, zoom):
    vp = Viewport(zoom=zoom, pan=Vector(-40.0, 25.0))
    result = layout(travel_graph, Point(400.0, 300.0), 200.0)
    for node in travel_graph:
        screen = vp.to_screen(result.positions[node.id])
        assert hit_test(travel_graph, result, vp.to_model(screen)) == node.id
