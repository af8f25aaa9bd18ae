"""
Main Application Window
=======================
The primary GUI container that holds the Menu Bar, Toolbar, the Node Panel
and the Mind Map Canvas.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects global actions (like File -> Save) to the store and
   the interaction controller.
3. Navigation: `open_interactive` is the explicit entry point the rest of the
   application uses to show a graph in interactive mode.
"""
import logging
import os
from typing import Optional

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QSplitter, QToolBar, QLabel, QLineEdit,
    QFileDialog, QMessageBox
)
from PySide6.QtCore import Qt, QSettings, Slot
from PySide6.QtGui import QAction, QKeySequence

from mindcanvas.controller.agents import AgentSink, AgentSpawnRequest
from mindcanvas.controller.interaction import InteractionController
from mindcanvas.controller.workers import ExpansionWorker, TopicGenerator
from mindcanvas.model.graph import MindMapGraph
from mindcanvas.model.io import MindMapStore
from mindcanvas.model.state import MindMapState
from mindcanvas.view.dialogs.open_dialog import OpenMindMapDialog
from mindcanvas.view.panels.node_panel import NodePanel
from mindcanvas.view.qt_painter import render_image
from mindcanvas.view.widgets.canvas import MindMapCanvas

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "MindCanvas"


class MainWindow(QMainWindow):
    def __init__(
        self,
        state: MindMapState,
        controller: InteractionController,
        store: MindMapStore,
        agent_sink: Optional[AgentSink] = None,
    ) -> None:
        super().__init__()
        self.state: MindMapState = state
        self.controller: InteractionController = controller
        self.store: MindMapStore = store
        self.agent_sink: Optional[AgentSink] = agent_sink
        self.is_modified: bool = False
        self._worker: Optional[ExpansionWorker] = None

        self.update_window_title()
        self.resize(1280, 800)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QHBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        main_layout.addWidget(splitter)

        # --- LEFT SIDE: Node Panel ---
        self.node_panel = NodePanel(self.controller)
        splitter.addWidget(self.node_panel)

        # --- RIGHT SIDE: Canvas ---
        self.canvas = MindMapCanvas(self.controller)
        splitter.addWidget(self.canvas)

        # Set initial proportions (1 part sidebar : 4 parts canvas)
        splitter.setSizes([280, 1000])
        splitter.setStretchFactor(1, 1)

        # --- ACTIONS, MENUS, TOOLBAR ---
        self._create_actions()
        self._create_menus()
        self._create_toolbar()

        # --- SIGNAL CONNECTIONS ---
        self.controller.graph_changed.connect(self.on_graph_changed)
        self.controller.zoom_changed.connect(self.on_zoom_changed)
        self.controller.message.connect(self.show_message)
        self.controller.agent_requested.connect(self.on_agent_requested)

        self._restore_settings()
        self.on_zoom_changed(self.state.viewport.zoom)
        self.statusBar().showMessage("Ready")

    def _create_actions(self) -> None:
        # File Actions
        self.act_new = QAction("New", self)
        self.act_new.setShortcut(QKeySequence.StandardKey.New)
        self.act_new.triggered.connect(self.on_file_new)

        self.act_open = QAction("Open...", self)
        self.act_open.setShortcut("Ctrl+O")
        self.act_open.triggered.connect(self.on_file_open)

        self.act_save = QAction("Save", self)
        self.act_save.setShortcut("Ctrl+S")
        self.act_save.triggered.connect(self.on_file_save)

        self.act_export = QAction("Export PNG...", self)
        self.act_export.setShortcut("Ctrl+E")
        self.act_export.triggered.connect(self.on_export_png)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        # View Actions
        self.act_zoom_out = QAction("−", self)
        self.act_zoom_out.setToolTip("Zoom out")
        self.act_zoom_out.setShortcut("Ctrl+-")
        self.act_zoom_out.triggered.connect(self.controller.zoom_out)

        self.act_zoom_in = QAction("+", self)
        self.act_zoom_in.setToolTip("Zoom in")
        self.act_zoom_in.setShortcut("Ctrl+=")
        self.act_zoom_in.triggered.connect(self.controller.zoom_in)

        self.act_reset_view = QAction("Reset View", self)
        self.act_reset_view.setShortcut("Ctrl+0")
        self.act_reset_view.triggered.connect(self.controller.reset_zoom)

        self.act_center = QAction("Center", self)
        self.act_center.triggered.connect(self.controller.reset_pan)

        self.act_fullscreen = QAction("Full Screen", self)
        self.act_fullscreen.setCheckable(True)
        self.act_fullscreen.setShortcut(QKeySequence(Qt.Key.Key_F11))
        self.act_fullscreen.toggled.connect(self.on_toggle_fullscreen)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_new)
        file_menu.addSeparator()
        file_menu.addAction(self.act_open)
        file_menu.addAction(self.act_save)
        file_menu.addSeparator()
        file_menu.addAction(self.act_export)
        file_menu.addSeparator()
        file_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self.act_zoom_in)
        view_menu.addAction(self.act_zoom_out)
        view_menu.addAction(self.act_reset_view)
        view_menu.addAction(self.act_center)
        view_menu.addSeparator()
        view_menu.addAction(self.act_fullscreen)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Mind Map")
        toolbar.setObjectName("mindmap_toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        # Editable topic (renames the central node)
        toolbar.addWidget(QLabel(" Topic: "))
        self.txt_topic = QLineEdit(self.state.graph.topic)
        self.txt_topic.setMinimumWidth(220)
        self.txt_topic.editingFinished.connect(self.on_topic_edited)
        toolbar.addWidget(self.txt_topic)
        toolbar.addSeparator()

        toolbar.addAction(self.act_zoom_out)
        self.lbl_zoom = QLabel("100%")
        self.lbl_zoom.setMinimumWidth(48)
        self.lbl_zoom.setAlignment(Qt.AlignmentFlag.AlignCenter)
        toolbar.addWidget(self.lbl_zoom)
        toolbar.addAction(self.act_zoom_in)
        toolbar.addSeparator()
        toolbar.addAction(self.act_reset_view)
        toolbar.addAction(self.act_center)
        toolbar.addAction(self.act_fullscreen)
        toolbar.addSeparator()
        toolbar.addAction(self.act_save)

    # --- HELPER METHODS ---
    def update_window_title(self) -> None:
        """Updates the window title based on topic and dirty state."""
        title = f"{VISIBLE_APP_NAME} - [{self.state.graph.topic}"
        if self.is_modified:
            title += "*"
        title += "]"
        self.setWindowTitle(title)

    def set_modified(self, modified: bool) -> None:
        """Sets the dirty flag and updates title if changed."""
        if self.is_modified != modified:
            self.is_modified = modified
            self.update_window_title()

    @Slot(str)
    def show_message(self, text: str) -> None:
        self.statusBar().showMessage(text, 4000)

    # --- NAVIGATION ---

    def open_interactive(self, graph: MindMapGraph, map_id: Optional[str] = None,
                         created_at: Optional[str] = None) -> None:
        """Show `graph` in interactive mode, replacing the current map."""
        logger.info(f"Opening '{graph.topic}' ({graph.total_count} nodes) in interactive mode.")
        self.controller.open_graph(graph, map_id=map_id, created_at=created_at)
        self.txt_topic.setText(graph.topic)
        # A freshly generated graph is not in the store yet
        self.is_modified = map_id is None
        self.update_window_title()

    def start_expansion(self, generator: TopicGenerator, topic: str) -> None:
        """Run a topic generator in the background and open its graph."""
        if self._worker is not None and self._worker.isRunning():
            self.show_message("A mind map is already being generated")
            return
        self._worker = ExpansionWorker(generator, topic)
        self._worker.progress_updated.connect(self.show_message)
        self._worker.graph_ready.connect(self.open_interactive)
        self._worker.error_occurred.connect(self.on_expansion_failed)
        self._worker.start()

    @Slot(str)
    def on_expansion_failed(self, error: str) -> None:
        QMessageBox.critical(self, "Error", f"Could not generate the mind map:\n{error}")

    # --- CONTROLLER SLOTS ---

    @Slot()
    def on_graph_changed(self) -> None:
        """Slot called when mind map content changes."""
        if self.txt_topic.text() != self.state.graph.topic:
            self.txt_topic.setText(self.state.graph.topic)
        self.set_modified(True)
        self.update_window_title()

    @Slot(float)
    def on_zoom_changed(self, zoom: float) -> None:
        self.lbl_zoom.setText(f"{round(zoom * 100)}%")

    @Slot(bool)
    def on_toggle_fullscreen(self, checked: bool) -> None:
        if checked:
            self.showFullScreen()
        else:
            self.showNormal()

    @Slot()
    def on_topic_edited(self) -> None:
        text = self.txt_topic.text()
        if text == self.state.graph.topic:
            return
        if not self.controller.rename_topic(text):
            # Rejected (empty); show the current topic again
            self.txt_topic.setText(self.state.graph.topic)

    @Slot(object)
    def on_agent_requested(self, request: AgentSpawnRequest) -> None:
        if self.agent_sink is None:
            logger.info(f"No agent sink configured; '{request.persona_name}' not forwarded.")
            self.show_message(f"{request.persona_name}: no agent service configured")
            return
        self.agent_sink(request)
        self.show_message(f"{request.persona_name} created. {request.summary()}")

    # --- FILE SLOTS ---

    def on_file_new(self) -> None:
        if not self._confirm_discard():
            return
        self.open_interactive(MindMapGraph())
        self.set_modified(False)

    def on_file_open(self) -> None:
        if not self._confirm_discard():
            return
        try:
            summaries = self.store.list_maps()
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Could not read the mind map store:\n{e}")
            return

        dialog = OpenMindMapDialog(summaries, self)
        if dialog.exec() != OpenMindMapDialog.DialogCode.Accepted:
            return
        map_id = dialog.selected_id()
        if map_id:
            self.open_stored(map_id)

    def open_stored(self, map_id: str) -> bool:
        try:
            record = self.store.load(map_id)
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Could not open the mind map:\n{e}")
            return False
        self.open_interactive(record.to_graph(), map_id=record.id, created_at=record.created_at)
        self.show_message(f"Opened '{record.topic}'")
        return True

    def on_file_save(self) -> bool:
        try:
            map_id = self.store.save_graph(self.state.graph, map_id=self.state.map_id)
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Could not save the mind map:\n{e}")
            return False
        self.state.map_id = map_id
        # Removes asterisk
        self.set_modified(False)
        self.show_message("Mind map saved")
        return True

    def on_export_png(self) -> None:
        default_name = f"{self.state.graph.topic}.png"
        fname, _ = QFileDialog.getSaveFileName(self, "Export PNG", default_name, "PNG Images (*.png)")
        if not fname:
            return
        # Ensure extension
        if not fname.lower().endswith(".png"):
            fname += ".png"

        image = render_image(self.state, self.canvas.width(), self.canvas.height())
        if not image.save(fname, "PNG"):
            QMessageBox.critical(self, "Error", f"Could not write the image:\n{fname}")
            return
        logger.info(f"Exported PNG to {fname}")
        self.show_message(f"Exported {os.path.basename(fname)}")

    def _confirm_discard(self) -> bool:
        """Ask to save unsaved changes. False means the user cancelled."""
        if not self.is_modified:
            return True
        reply = QMessageBox.question(
            self,
            "Save changes?",
            "The mind map has been modified. Do you want to save your changes?",
            QMessageBox.StandardButton.Save | QMessageBox.StandardButton.Discard
            | QMessageBox.StandardButton.Cancel
        )
        if reply == QMessageBox.StandardButton.Save:
            return self.on_file_save()
        return reply == QMessageBox.StandardButton.Discard

    # --- SETTINGS ---

    def _restore_settings(self) -> None:
        settings = QSettings()
        geometry = settings.value("window/geometry")
        if geometry is not None:
            self.restoreGeometry(geometry)

    def _save_settings(self) -> None:
        settings = QSettings()
        settings.setValue("window/geometry", self.saveGeometry())
        settings.setValue("store/path", self.store.filepath)

    def closeEvent(self, event, /) -> None:
        """Handle window close event to prompt for saving if modified."""
        if not self._confirm_discard():
            event.ignore()  # Don't close window
            return

        if self._worker is not None and self._worker.isRunning():
            self._worker.wait(2000)

        self._save_settings()
        event.accept()
