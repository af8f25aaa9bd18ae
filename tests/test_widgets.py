import pytest
from PySide6.QtCore import QCoreApplication, QPoint, QSettings, Qt
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QMessageBox

from mindcanvas.controller.interaction import InteractionController, InteractionMode
from mindcanvas.model.graph import MindMapGraph, ROOT_ID
from mindcanvas.model.io import MindMapStore
from mindcanvas.view.dialogs.open_dialog import OpenMindMapDialog
from mindcanvas.view.main_window import MainWindow
from mindcanvas.view.panels.node_panel import NodePanel
from mindcanvas.view.widgets.canvas import MindMapCanvas


@pytest.fixture
def settings_dir(tmp_path, qapp):
    QCoreApplication.setOrganizationName("mindcanvas-tests")
    QCoreApplication.setApplicationName("mindcanvas-tests")
    QSettings.setDefaultFormat(QSettings.Format.IniFormat)
    QSettings.setPath(QSettings.Format.IniFormat, QSettings.Scope.UserScope, str(tmp_path / "settings"))
    return tmp_path


@pytest.fixture
def canvas(controller):
    widget = MindMapCanvas(controller)
    widget.resize(800, 600)
    widget.show()
    QTest.qWaitForWindowExposed(widget)
    yield widget
    widget.close()


@pytest.fixture
def window(settings_dir, controller, monkeypatch):
    sink_calls = []
    store = MindMapStore(str(settings_dir / "store.h5"))
    win = MainWindow(controller.state, controller, store, agent_sink=sink_calls.append)
    win.sink_calls = sink_calls
    # Never block on modal prompts
    monkeypatch.setattr(QMessageBox, "question", lambda *a, **k: QMessageBox.StandardButton.Discard)
    monkeypatch.setattr(QMessageBox, "critical", lambda *a, **k: QMessageBox.StandardButton.Ok)
    yield win
    win.is_modified = False
    win.close()


def _screen_point(controller, node_id) -> QPoint:
    state = controller.state
    result = state.ensure_layout()
    model = result.root if node_id == ROOT_ID else result.positions[node_id]
    p = state.viewport.to_screen(model)
    return QPoint(round(p.x), round(p.y))


# ---- canvas ----

def test_canvas_resize_feeds_the_layout(canvas, controller):
    assert controller.state.surface_width == canvas.width()
    assert controller.state.surface_height == canvas.height()


def test_canvas_click_selects(canvas, controller):
    main_id = controller.state.graph.main_ids[0]
    QTest.mouseClick(canvas, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier,
                     _screen_point(controller, main_id))
    assert controller.selected_id == main_id


def test_canvas_double_click_opens_inline_editor(canvas, controller):
    main_id = controller.state.graph.main_ids[0]
    pos = _screen_point(controller, main_id)
    controller.state.selected_id = main_id
    QTest.mouseDClick(canvas, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, pos)

    assert controller.mode == InteractionMode.EDITING_LABEL
    editor = canvas.editor()
    assert editor.isVisible()
    assert editor.text() == "Destinations"

    editor.setText("Places")
    QTest.keyClick(editor, Qt.Key.Key_Return)
    assert controller.state.graph.get(main_id).text == "Places"
    assert not editor.isVisible()
    assert controller.mode == InteractionMode.IDLE


def test_enter_commits_a_new_main_topic_once(canvas, controller):
    edits = []
    controller.edit_started.connect(edits.append)
    node_id = controller.add_main_node()
    editor = canvas.editor()
    assert editor.isVisible()

    QTest.keyClicks(editor, "Food")
    QTest.keyClick(editor, Qt.Key.Key_Enter)

    assert controller.mode == InteractionMode.IDLE
    assert controller.state.graph.get(node_id).text == "Food"
    assert not editor.isVisible()
    assert edits == [node_id]


def test_click_elsewhere_commits_the_typed_label(canvas, controller):
    main_id = controller.state.graph.main_ids[1]
    controller.state.selected_id = main_id
    controller.begin_edit()
    editor = canvas.editor()
    editor.selectAll()
    QTest.keyClicks(editor, "Money")

    QTest.mouseClick(canvas, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, QPoint(40, 560))

    assert controller.mode == InteractionMode.IDLE
    assert controller.state.graph.get(main_id).text == "Money"
    assert not editor.isVisible()


def test_canvas_escape_cancels_edit(canvas, controller):
    controller.state.selected_id = ROOT_ID
    controller.begin_edit()
    editor = canvas.editor()
    editor.setText("Something else")
    QTest.keyClick(editor, Qt.Key.Key_Escape)
    assert controller.mode == InteractionMode.IDLE
    assert controller.state.graph.topic == "Travel"


def test_canvas_delete_key(canvas, controller):
    main_id = controller.state.graph.main_ids[2]
    controller.state.selected_id = main_id
    canvas.setFocus()
    QTest.keyClick(canvas, Qt.Key.Key_Delete)
    assert main_id not in controller.state.graph


def test_canvas_paints(canvas, controller):
    image = canvas.grab().toImage()
    assert image.width() >= 800


# ---- panel ----

def test_panel_tracks_selection_and_stats(controller):
    panel = NodePanel(controller)
    assert panel.lbl_total_count.text() == "9"
    assert not panel.btn_add_sub.isEnabled()

    main = controller.state.graph.main_nodes()[1]
    controller._set_selection(main.id)
    assert panel.txt_node.text() == "Budget"
    assert panel.btn_add_sub.isEnabled()
    assert panel.btn_agent.isEnabled()
    assert panel.lst_children.count() == 2

    panel.btn_add_sub.click()
    assert panel.lbl_leaf_count.text() == "7"


def test_panel_live_rename(controller):
    panel = NodePanel(controller)
    main = controller.state.graph.main_nodes()[0]
    controller._set_selection(main.id)
    panel.txt_node.selectAll()
    QTest.keyClicks(panel.txt_node, "Spots")
    assert main.text == "Spots"


# ---- dialog ----

def test_open_dialog_lists_summaries(qapp, tmp_path, travel_graph):
    store = MindMapStore(str(tmp_path / "s.h5"))
    map_id = store.save_graph(travel_graph)
    dialog = OpenMindMapDialog(store.list_maps())
    assert dialog.table.rowCount() == 1
    assert dialog.table.item(0, 0).text() == "Travel"
    assert dialog.table.item(0, 2).text() == "9"
    assert dialog.selected_id() == map_id


def test_open_dialog_empty(qapp):
    dialog = OpenMindMapDialog([])
    assert dialog.selected_id() is None


# ---- main window ----

def test_window_title_tracks_modification(window, controller):
    assert window.windowTitle() == "MindCanvas - [Travel]"
    controller.add_main_node()
    assert window.windowTitle() == "MindCanvas - [Travel*]"


def test_window_save_and_reopen(window, controller):
    assert window.on_file_save()
    map_id = controller.state.map_id
    assert map_id in window.store
    assert not window.is_modified

    window.open_interactive(MindMapGraph("Scratch"))
    assert window.open_stored(map_id)
    assert controller.state.graph.topic == "Travel"
    assert controller.state.graph.total_count == 9
    assert window.txt_topic.text() == "Travel"


def test_window_topic_field_renames_root(window, controller):
    window.txt_topic.setText("Holidays")
    window.on_topic_edited()
    assert controller.state.graph.topic == "Holidays"
    assert "Holidays" in window.windowTitle()

    window.txt_topic.setText("")
    window.on_topic_edited()
    assert controller.state.graph.topic == "Holidays"
    assert window.txt_topic.text() == "Holidays"


def test_window_zoom_label(window, controller):
    window.act_zoom_in.trigger()
    assert window.lbl_zoom.text() == "110%"
    window.act_reset_view.trigger()
    assert window.lbl_zoom.text() == "100%"


def test_window_fullscreen_toggle(window):
    assert window.act_fullscreen.isCheckable()
    assert window.act_fullscreen.shortcut().toString() == "F11"

    window.act_fullscreen.trigger()
    assert window.isFullScreen()

    window.act_fullscreen.trigger()
    assert not window.isFullScreen()


def test_window_forwards_agent_requests(window, controller):
    controller.state.selected_id = controller.state.graph.main_ids[0]
    controller.create_agent_from_selected()
    assert len(window.sink_calls) == 1
    assert window.sink_calls[0].persona_name == "Destinations Expert"


def test_window_new_discards_and_resets(window, controller):
    controller.add_main_node()
    window.on_file_new()
    assert controller.state.graph.is_empty()
    assert not window.is_modified


def test_window_open_stored_unknown_id_reports(window, controller):
    assert not window.open_stored("missing")
    assert controller.state.graph.topic == "Travel"
