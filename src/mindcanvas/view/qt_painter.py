"""
QPainter backend of the render pipeline.
Executes a `Frame` on any QPaintDevice (the canvas widget or a QImage).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QBrush, QColor, QFont, QFontMetricsF, QImage, QPainter, QPainterPath, QPen, QPolygonF
)

from mindcanvas.model.state import MindMapState
from mindcanvas.view.render import (
    ConnectorCommand, Frame, LabelBlock, NodeCommand, TextMeasure, compose_frame
)

FONT_FAMILY = "Arial"


@lru_cache(maxsize=64)
def make_font(pixel_size: int, bold: bool) -> QFont:
    font = QFont(FONT_FAMILY)
    font.setPixelSize(max(1, pixel_size))
    font.setBold(bold)
    return font


def qt_text_measure() -> TextMeasure:
    """Text measure backed by real font metrics (needs a QGuiApplication)."""
    def measure(text: str, font_size: float, bold: bool) -> float:
        return QFontMetricsF(make_font(round(font_size), bold)).horizontalAdvance(text)
    return measure


def _qp(p) -> QPointF:
    return QPointF(p.x, p.y)


class QtFrameRenderer:
    """Draws frames with QPainter. Holds no drawing state between calls."""

    def paint(self, painter: QPainter, frame: Frame, rect: Optional[QRectF] = None) -> None:
        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
        if rect is not None:
            painter.fillRect(rect, QColor(frame.background))

        for cmd in frame.commands:
            if isinstance(cmd, ConnectorCommand):
                self._draw_connector(painter, cmd)
            elif isinstance(cmd, NodeCommand):
                self._draw_node(painter, cmd)
        painter.restore()

    # ---- primitives ----

    @staticmethod
    def _draw_connector(painter: QPainter, cmd: ConnectorCommand) -> None:
        color = QColor(cmd.color)
        path = QPainterPath(_qp(cmd.curve.start))
        path.quadTo(_qp(cmd.curve.control), _qp(cmd.curve.end))

        painter.setPen(QPen(color, cmd.width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(path)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(color))
        painter.drawPolygon(QPolygonF([_qp(p) for p in cmd.arrow]))

    def _draw_node(self, painter: QPainter, cmd: NodeCommand) -> None:
        path = QPainterPath()
        path.setFillRule(Qt.FillRule.WindingFill)
        for lobe in cmd.lobes:
            path.addEllipse(_qp(lobe.center), lobe.radius, lobe.radius)
        # Union of the circles: one outline instead of five overlapping rings
        outline = path.simplified()

        painter.setPen(QPen(QColor(cmd.stroke), cmd.stroke_width))
        painter.setBrush(QBrush(QColor(cmd.fill)))
        painter.drawPath(outline)

        self._draw_label(painter, cmd.label)

    @staticmethod
    def _draw_label(painter: QPainter, label: LabelBlock) -> None:
        if not label.lines:
            return
        font = make_font(round(label.font_size), label.bold)
        metrics = QFontMetricsF(font)
        painter.setFont(font)
        painter.setPen(QColor(label.color))

        for i, line in enumerate(label.lines):
            cy = label.first_line.y + i * label.line_height
            width = metrics.horizontalAdvance(line) + 4.0
            height = max(label.line_height, metrics.height())
            box = QRectF(label.first_line.x - width / 2.0, cy - height / 2.0, width, height)
            painter.drawText(box, Qt.AlignmentFlag.AlignCenter, line)


def render_image(state: MindMapState, width: Optional[int] = None, height: Optional[int] = None) -> QImage:
    """Render the current state into a new QImage (used for PNG export)."""
    w = int(width or state.surface_width)
    h = int(height or state.surface_height)
    result = state.ensure_layout()
    frame = compose_frame(state.graph, result, state.viewport, state.selected_id, qt_text_measure())

    image = QImage(w, h, QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(QColor(frame.background))
    painter = QPainter(image)
    try:
        QtFrameRenderer().paint(painter, frame)
    finally:
        painter.end()
    return image
