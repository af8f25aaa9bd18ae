"""
Mind Map Canvas
Raster drawing surface of the interactive mind map. Paints frames composed
from the shared state and forwards pointer/keyboard input to the controller.
"""
from __future__ import annotations

import logging

from PySide6.QtCore import QEvent, Qt, QRectF, Slot
from PySide6.QtGui import QPainter, QKeyEvent, QMouseEvent, QWheelEvent, QPaintEvent, QResizeEvent
from PySide6.QtWidgets import QWidget, QLineEdit

from mindcanvas.controller.interaction import InteractionController, InteractionMode
from mindcanvas.model.graph import NodeLevel, ROOT_ID
from mindcanvas.model.layout import node_radius
from mindcanvas.view.qt_painter import QtFrameRenderer, qt_text_measure
from mindcanvas.view.render import compose_frame

logger = logging.getLogger(__name__)


class MindMapCanvas(QWidget):
    """QPainter canvas with pan (drag), wheel zoom, selection and inline label editing."""

    def __init__(self, controller: InteractionController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.state = controller.state
        self._renderer = QtFrameRenderer()
        self._measure = qt_text_measure()

        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(False)
        self.setMinimumSize(320, 240)
        self.setCursor(Qt.CursorShape.OpenHandCursor)

        # Inline editor, shown while the controller is in EDITING_LABEL
        self._editor = QLineEdit(self)
        self._editor.hide()
        self._editor.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._editor.textEdited.connect(self.controller.update_edit_text)
        # Return and Escape are taken by eventFilter; this covers focus loss
        self._editor.editingFinished.connect(self._commit_editor)
        self._editor.installEventFilter(self)

        self.controller.changed.connect(self.update)
        self.controller.edit_started.connect(self._show_editor)
        self.controller.edit_finished.connect(self._hide_editor)

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event: QPaintEvent) -> None:
        result = self.state.ensure_layout()
        frame = compose_frame(
            self.state.graph, result, self.state.viewport, self.state.selected_id, self._measure
        )
        painter = QPainter(self)
        try:
            self._renderer.paint(painter, frame, QRectF(self.rect()))
        finally:
            painter.end()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self.controller.resize(self.width(), self.height())
        if self.controller.mode == InteractionMode.EDITING_LABEL:
            self._place_editor()

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        if self._editor.isVisible():
            self._commit_editor()
        self.setFocus()
        pos = event.position()
        self.controller.pointer_down(pos.x(), pos.y())
        if self.controller.mode == InteractionMode.PANNING:
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        pos = event.position()
        self.controller.pointer_move(pos.x(), pos.y())
        if self._editor.isVisible():
            self._place_editor()
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        pos = event.position()
        self.controller.pointer_up(pos.x(), pos.y())
        self.setCursor(Qt.CursorShape.OpenHandCursor)
        event.accept()

    def mouseDoubleClickEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self.controller.double_click(pos.x(), pos.y())
            event.accept()
            return
        super().mouseDoubleClickEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        steps = event.angleDelta().y() / 120.0
        pos = event.position()
        self.controller.wheel(pos.x(), pos.y(), steps)
        if self._editor.isVisible():
            self._place_editor()
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        key = event.key()
        if key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.controller.delete_selected()
        elif key in (Qt.Key.Key_F2, Qt.Key.Key_Return, Qt.Key.Key_Enter):
            self.controller.begin_edit()
        elif key in (Qt.Key.Key_Plus, Qt.Key.Key_Equal):
            self.controller.zoom_in()
        elif key == Qt.Key.Key_Minus:
            self.controller.zoom_out()
        else:
            super().keyPressEvent(event)

    def eventFilter(self, watched, event) -> bool:
        if watched is self._editor and event.type() == QEvent.Type.KeyPress:
            # Stop both keys here; the canvas maps Return to begin_edit
            if event.key() == Qt.Key.Key_Escape:
                self.controller.cancel_edit()
                return True
            if event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
                self._commit_editor()
                return True
        return super().eventFilter(watched, event)

    # ------------------------------------------------------------------
    # Inline editor
    # ------------------------------------------------------------------

    @Slot(str)
    def _show_editor(self, node_id: str) -> None:
        self._editor.blockSignals(True)
        self._editor.setText(self.controller.editing_text())
        self._editor.blockSignals(False)
        self._place_editor()
        self._editor.show()
        self._editor.setFocus()
        self._editor.selectAll()

    @Slot()
    def _hide_editor(self) -> None:
        if self._editor.isVisible():
            self._editor.blockSignals(True)
            self._editor.hide()
            self._editor.blockSignals(False)
            self.setFocus()

    @Slot()
    def _commit_editor(self) -> None:
        if self.controller.mode != InteractionMode.EDITING_LABEL:
            return
        self.controller.commit_edit(self._editor.text())

    def _place_editor(self) -> None:
        node_id = self.controller.editing_id
        if node_id is None:
            return
        result = self.state.ensure_layout()
        if node_id == ROOT_ID:
            model_pt, level = result.root, NodeLevel.ROOT
        else:
            model_pt = result.position_of(node_id)
            node = self.state.graph.get(node_id)
            if model_pt is None or node is None:
                return
            level = node.level
        center = self.state.viewport.to_screen(model_pt)
        width = max(120, int(3 * node_radius(level) * self.state.viewport.zoom))
        height = self._editor.sizeHint().height()
        self._editor.setGeometry(int(center.x - width / 2), int(center.y - height / 2), width, height)

    def editor(self) -> QLineEdit:
        return self._editor
