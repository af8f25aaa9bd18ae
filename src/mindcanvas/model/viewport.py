"""
Viewport Transform
==================
Zoom and pan state plus the model <-> screen mapping.

    to_screen(p) = (p + pan) * zoom
    to_model(s)  = s / zoom - pan

`to_model` is the exact algebraic inverse of `to_screen`. Pan is an
offset in model units and is never clamped; zoom is clamped to
[MIN_ZOOM, MAX_ZOOM].
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from mindcanvas.model.geometry_primitives import Point, Vector

if TYPE_CHECKING:
    import numpy.typing as npt

MIN_ZOOM: float = 0.5
MAX_ZOOM: float = 2.0
ZOOM_STEP: float = 0.1


def clamp_zoom(z: float) -> float:
    return float(min(MAX_ZOOM, max(MIN_ZOOM, z)))


@dataclass
class Viewport:
    zoom: float = 1.0
    pan: Vector = field(default_factory=lambda: Vector(0.0, 0.0))

    def __post_init__(self) -> None:
        self.zoom = clamp_zoom(self.zoom)

    # ---- mapping ----

    def to_screen(self, p: Point) -> Point:
        return Point((p.x + self.pan.x) * self.zoom, (p.y + self.pan.y) * self.zoom)

    def to_model(self, s: Point) -> Point:
        return Point(s.x / self.zoom - self.pan.x, s.y / self.zoom - self.pan.y)

    def to_screen_array(self, pts: npt.ArrayLike) -> npt.NDArray[np.float64]:
        arr = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
        return (arr + self.pan.to_array()) * self.zoom

    def to_model_array(self, pts: npt.ArrayLike) -> npt.NDArray[np.float64]:
        arr = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
        return arr / self.zoom - self.pan.to_array()

    # ---- zoom ----

    def set_zoom(self, z: float) -> float:
        self.zoom = clamp_zoom(z)
        return self.zoom

    def zoom_in(self) -> float:
        # round() keeps repeated steps on the 0.1 grid
        return self.set_zoom(round(self.zoom + ZOOM_STEP, 6))

    def zoom_out(self) -> float:
        return self.set_zoom(round(self.zoom - ZOOM_STEP, 6))

    def zoom_at(self, screen_point: Point, z: float) -> float:
        """Zoom while keeping the model point under `screen_point` fixed."""
        anchor = self.to_model(screen_point)
        new_zoom = clamp_zoom(z)
        self.zoom = new_zoom
        self.pan = Vector(screen_point.x / new_zoom - anchor.x, screen_point.y / new_zoom - anchor.y)
        return self.zoom

    def reset_zoom(self) -> None:
        self.zoom = 1.0

    # ---- pan ----

    def pan_by(self, delta: Vector) -> None:
        """Accumulate a model-space pan delta."""
        self.pan = self.pan + delta

    def pan_by_screen(self, dx: float, dy: float) -> None:
        """Pan so content follows a pointer that moved (dx, dy) screen pixels."""
        self.pan_by(Vector(dx / self.zoom, dy / self.zoom))

    def reset_pan(self) -> None:
        self.pan = Vector(0.0, 0.0)

    def reset(self) -> None:
        self.reset_zoom()
        self.reset_pan()
