import pytest

from mindcanvas.controller.agents import AgentSpawnRequest
from mindcanvas.controller.interaction import InteractionController, InteractionMode
from mindcanvas.model.geometry_primitives import Point, Vector
from mindcanvas.model.graph import CHILD_PLACEHOLDER, MAIN_PLACEHOLDER, ROOT_ID, MindMapGraph
from mindcanvas.model.palette import PaletteColor

EMPTY_SPOT = (40.0, 560.0)


def _screen_of(controller, node_id):
    state = controller.state
    result = state.ensure_layout()
    model = result.root if node_id == ROOT_ID else result.positions[node_id]
    return state.viewport.to_screen(model).as_tuple()


def _record(signal):
    received = []
    signal.connect(lambda *args: received.append(args))
    return received


def _click(controller, x, y):
    controller.pointer_down(x, y)
    controller.pointer_up(x, y)


def test_click_selects_and_second_click_deselects(controller):
    main_id = controller.state.graph.main_ids[0]
    changes = _record(controller.selection_changed)

    _click(controller, *_screen_of(controller, main_id))
    assert controller.selected_id == main_id

    _click(controller, *_screen_of(controller, main_id))
    assert controller.selected_id is None
    assert changes == [(main_id,), (None,)]


def test_click_root_selects_root(controller):
    _click(controller, *_screen_of(controller, ROOT_ID))
    assert controller.selected_id == ROOT_ID
    assert controller.state.is_root_selected()


def test_click_on_empty_space_clears_selection(controller):
    controller.state.selected_id = controller.state.graph.main_ids[0]
    _click(controller, *EMPTY_SPOT)
    assert controller.selected_id is None
    assert controller.mode == InteractionMode.IDLE


def test_drag_on_empty_space_pans_and_keeps_selection(controller):
    main_id = controller.state.graph.main_ids[1]
    controller.state.selected_id = main_id
    x, y = EMPTY_SPOT

    controller.pointer_down(x, y)
    assert controller.mode == InteractionMode.PANNING
    controller.pointer_move(x + 20, y - 10)
    controller.pointer_move(x + 30, y - 15)
    controller.pointer_up(x + 30, y - 15)

    assert controller.state.viewport.pan == Vector(30.0, -15.0)
    assert controller.selected_id == main_id
    assert controller.mode == InteractionMode.IDLE


def test_move_without_press_does_nothing(controller):
    controller.pointer_move(10, 10)
    assert controller.state.viewport.pan == Vector(0.0, 0.0)


def test_hit_after_zoom_and_pan(controller):
    vp = controller.state.viewport
    vp.set_zoom(2.0)
    vp.pan = Vector(50.0, 50.0)
    assert vp.to_screen(Point(0.0, 0.0)) == Point(100.0, 100.0)
    for node in controller.state.graph:
        assert controller.hit(*_screen_of(controller, node.id)) == node.id


def test_wheel_zooms_around_the_cursor(controller):
    zooms = _record(controller.zoom_changed)
    anchor = Point(300.0, 200.0)
    model_before = controller.state.viewport.to_model(anchor)

    controller.wheel(anchor.x, anchor.y, 1.0)

    assert controller.state.viewport.zoom == pytest.approx(1.1)
    assert controller.state.viewport.to_model(anchor).is_close(model_before, tol=1e-9)
    assert zooms == [(pytest.approx(1.1),)]


def test_wheel_at_limit_emits_nothing(controller):
    controller.state.viewport.set_zoom(2.0)
    zooms = _record(controller.zoom_changed)
    controller.wheel(10.0, 10.0, 3.0)
    assert zooms == []


def test_toolbar_zoom_is_clamped(controller):
    for _ in range(15):
        controller.zoom_in()
    assert controller.state.viewport.zoom == 2.0
    controller.reset_zoom()
    assert controller.state.viewport.zoom == 1.0


def test_double_click_edits_and_commit_renames(controller):
    main_id = controller.state.graph.main_ids[0]
    started = _record(controller.edit_started)

    controller.double_click(*_screen_of(controller, main_id))
    assert controller.mode == InteractionMode.EDITING_LABEL
    assert controller.editing_id == main_id
    assert controller.editing_text() == "Destinations"
    assert started == [(main_id,)]

    assert controller.commit_edit("Places")
    assert controller.state.graph.get(main_id).text == "Places"
    assert controller.mode == InteractionMode.IDLE


def test_commit_empty_label_keeps_old_text(controller):
    main_id = controller.state.graph.main_ids[0]
    messages = _record(controller.message)
    controller.state.selected_id = main_id
    controller.begin_edit()

    assert not controller.commit_edit("   ")
    assert controller.state.graph.get(main_id).text == "Destinations"
    assert len(messages) == 1


def test_cancel_edit_changes_nothing(controller):
    controller.state.selected_id = ROOT_ID
    controller.begin_edit()
    assert controller.editing_text() == "Travel"
    controller.cancel_edit()
    assert controller.mode == InteractionMode.IDLE
    assert controller.state.graph.topic == "Travel"


def test_pointer_down_commits_the_typed_text(controller):
    main_id = controller.state.graph.main_ids[0]
    controller.state.selected_id = main_id
    controller.begin_edit()
    controller.update_edit_text("Places")
    controller.pointer_down(*EMPTY_SPOT)

    assert controller.editing_id is None
    assert controller.mode == InteractionMode.PANNING
    assert controller.state.graph.get(main_id).text == "Places"


def test_pointer_down_without_typing_keeps_the_label(controller):
    main_id = controller.state.graph.main_ids[0]
    controller.state.selected_id = main_id
    controller.begin_edit()
    controller.pointer_down(*EMPTY_SPOT)
    assert controller.state.graph.get(main_id).text == "Destinations"


def test_commit_uses_the_tracked_text_and_returns_to_idle(controller):
    main_id = controller.state.graph.main_ids[0]
    controller.state.selected_id = main_id
    controller.begin_edit()
    controller.update_edit_text("Places")

    assert controller.commit_edit()
    assert controller.mode == InteractionMode.IDLE
    assert controller.editing_id is None
    assert controller.selected_id == main_id
    assert controller.state.graph.get(main_id).text == "Places"


def test_typed_text_is_ignored_outside_editing(controller):
    controller.update_edit_text("Stray")
    controller.state.selected_id = ROOT_ID
    controller.begin_edit()
    assert controller.commit_edit()
    assert controller.state.graph.topic == "Travel"


def test_add_main_node_selects_and_edits(controller):
    graph_changes = _record(controller.graph_changed)
    node_id = controller.add_main_node()

    node = controller.state.graph.get(node_id)
    assert node.text == MAIN_PLACEHOLDER
    assert node.color == PaletteColor.ORANGE
    assert controller.selected_id == node_id
    assert controller.editing_id == node_id
    assert graph_changes
    # Laid out immediately
    assert node.position is not None


def test_add_subtopic_requires_a_main_selection(controller):
    messages = _record(controller.message)
    assert controller.add_subtopic() is None
    assert messages == [("Select a main topic to add a subtopic",)]

    leaf_id = controller.state.graph.main_nodes()[0].child_ids[0]
    controller.state.selected_id = leaf_id
    assert not controller.can_add_subtopic
    assert controller.add_subtopic() is None


def test_add_subtopic_under_selected_main(controller):
    main = controller.state.graph.main_nodes()[2]
    controller.state.selected_id = main.id
    child_id = controller.add_subtopic()

    assert child_id in main.child_ids
    assert controller.state.graph.get(child_id).text == CHILD_PLACEHOLDER
    assert controller.selected_id == child_id
    assert controller.mode == InteractionMode.EDITING_LABEL


def test_delete_selected_main_removes_branch(controller):
    main = controller.state.graph.main_nodes()[0]
    controller.state.selected_id = main.id
    assert controller.can_delete
    assert controller.delete_selected()
    assert main.id not in controller.state.graph
    assert controller.state.graph.main_count == 2
    assert controller.selected_id is None


def test_root_cannot_be_deleted(controller):
    controller.state.selected_id = ROOT_ID
    messages = _record(controller.message)
    before = controller.state.graph.structure()
    assert not controller.can_delete
    assert not controller.delete_selected()
    assert controller.state.graph.structure() == before
    assert len(messages) == 1


def test_rename_selected_ignores_empty_intermediate_text(controller):
    main_id = controller.state.graph.main_ids[0]
    controller.state.selected_id = main_id
    assert not controller.rename_selected("")
    assert controller.rename_selected("Where")
    assert controller.state.graph.get(main_id).text == "Where"


def test_recolor_selected(controller):
    main = controller.state.graph.main_nodes()[0]
    controller.state.selected_id = main.id
    assert controller.recolor_selected(PaletteColor.INDIGO)
    assert main.color == PaletteColor.INDIGO


def test_create_agent_from_main_topic(controller):
    main = controller.state.graph.main_nodes()[1]
    requests = _record(controller.agent_requested)
    controller.state.selected_id = main.id

    assert controller.create_agent_from_selected()
    (request,), = requests
    assert isinstance(request, AgentSpawnRequest)
    assert request.node_text == "Budget"
    assert request.child_texts == ("Flights", "Hotels")


@pytest.mark.parametrize("which", ["root", "leaf", "none"])
def test_create_agent_needs_a_main_topic(controller, which):
    graph = controller.state.graph
    controller.state.selected_id = {
        "root": ROOT_ID,
        "leaf": graph.main_nodes()[0].child_ids[0],
        "none": None,
    }[which]
    requests = _record(controller.agent_requested)
    assert not controller.create_agent_from_selected()
    assert requests == []


def test_resize_relayouts(controller):
    main_id = controller.state.graph.main_ids[0]
    controller.resize(1000, 1000)
    result = controller.state.ensure_layout()
    assert result.root == Point(500.0, 500.0)
    assert result.positions[main_id].distance_to(result.root) == pytest.approx(300.0)


def test_open_graph_resets_view_and_selection(controller):
    controller.state.selected_id = ROOT_ID
    controller.state.viewport.set_zoom(1.5)
    graph = MindMapGraph.from_outline("Other", [("X", ["Y"])])

    controller.open_graph(graph, map_id="abc")

    assert controller.state.graph is graph
    assert controller.state.map_id == "abc"
    assert controller.selected_id is None
    assert controller.state.viewport.zoom == 1.0
    assert graph.main_nodes()[0].position is not None


def test_controller_needs_no_widgets(qapp, travel_state):
    # The controller is usable on its own, e.g. from scripts
    controller = InteractionController(travel_state)
    assert controller.mode == InteractionMode.IDLE


def test_graph_changed_fires_for_content_edits(controller):
    graph_changes = _record(controller.graph_changed)
    main_id = controller.state.graph.main_ids[0]
    controller.state.selected_id = main_id

    assert controller.rename_selected("Places")
    assert controller.recolor_selected(PaletteColor.PINK)
    assert len(graph_changes) == 2
