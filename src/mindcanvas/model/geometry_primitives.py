"""
Geometric Primitives for layout, hit-testing and rendering.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Union, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    A vector in the 2D plane representing direction and magnitude.
    """
    x: float
    y: float

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def angle(self) -> float:
        """Direction in radians, measured like atan2 (screen y grows downwards)."""
        return math.atan2(self.y, self.x)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0)
        return self / mag

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y

    def perpendicular(self) -> Vector:
        """The vector rotated by -90 degrees: (dy, -dx)."""
        return Vector(self.y, -self.x)

    def rotate(self, angle_rad: float) -> Vector:
        cos_a = math.cos(angle_rad)
        sin_a = math.sin(angle_rad)
        return Vector(
            self.x * cos_a - self.y * sin_a,
            self.x * sin_a + self.y * cos_a,
        )

    @staticmethod
    def from_polar(radius: float, angle_rad: float) -> Vector:
        return Vector(radius * math.cos(angle_rad), radius * math.sin(angle_rad))

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])


@dataclass(frozen=True)
class Point:
    """A point in the 2D plane (model or screen space, depending on context)."""
    x: float
    y: float

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Union[Vector, Point]) -> Union[Vector, Point]:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y)
        # Point - Vector = Point (Inverse translation)
        if isinstance(other, Vector):
            return Point(self.x - other.x, self.y - other.y)
        raise TypeError("Can only subtract a Vector or Point from a Point.")

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: Point) -> Point:
        return Point((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)

    def is_close(self, other: Point, tol: float = 1e-9) -> bool:
        return math.isclose(self.x, other.x, abs_tol=tol) and math.isclose(self.y, other.y, abs_tol=tol)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])

    @staticmethod
    def from_array(a: npt.ArrayLike) -> Point:
        arr = np.asarray(a, dtype=np.float64).reshape(2)
        return Point(float(arr[0]), float(arr[1]))

    def as_tuple(self) -> tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True)
class Circle:
    """A circle; used for cloud lobes and hit areas."""
    center: Point
    radius: float

    def contains(self, point: Point) -> bool:
        """Strict containment: points on the rim are outside."""
        return self.center.distance_to(point) < self.radius

    def scaled(self, factor: float) -> Circle:
        return Circle(self.center, self.radius * factor)


@dataclass(frozen=True)
class QuadraticCurve:
    """A quadratic Bézier curve from `start` to `end` bent towards `control`."""
    start: Point
    control: Point
    end: Point

    @staticmethod
    def bowed(start: Point, end: Point, bend: float = 0.1) -> QuadraticCurve:
        """
        Curve whose control point sits on the perpendicular of the chord:
        control = midpoint + perpendicular(end - start) * bend.
        """
        chord = end - start
        control = start.midpoint(end) + chord.perpendicular() * bend
        return QuadraticCurve(start=start, control=control, end=end)

    def point_at(self, t: float) -> Point:
        u = 1.0 - t
        return Point(
            u * u * self.start.x + 2 * u * t * self.control.x + t * t * self.end.x,
            u * u * self.start.y + 2 * u * t * self.control.y + t * t * self.end.y,
        )

    def end_angle(self) -> float:
        """Direction of travel at the end point, the arrowhead orientation."""
        tangent = self.end - self.control
        if tangent.magnitude == 0.0:
            tangent = self.end - self.start
        return tangent.angle

    def discretize(self, n_points: int = 24) -> npt.NDArray[np.float64]:
        """Sample the curve into an (N, 2) polyline, endpoints included."""
        t = np.linspace(0.0, 1.0, max(2, n_points))[:, None]
        p0, p1, p2 = self.start.to_array(), self.control.to_array(), self.end.to_array()
        return (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2


def arrowhead(tip: Point, angle: float, length: float, spread: float = math.pi / 6) -> tuple[Point, Point, Point]:
    """
    Triangle for a filled arrowhead pointing along `angle` with its tip at `tip`.

    Returns:
        (tip, left wing, right wing)
    """
    left = tip - Vector.from_polar(length, angle - spread)
    right = tip - Vector.from_polar(length, angle + spread)
    return tip, left, right
