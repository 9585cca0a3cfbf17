"""Geometry primitives exchanged with the vision collaborator."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

BoundingBox = Tuple[float, float, float, float]  # (x, y, width, height)


class Point(NamedTuple):
    x: float
    y: float


def as_point(value: Any) -> Point:
    """Coerce an (x, y) pair, mapping or object with x/y attributes to a Point."""
    if isinstance(value, Point):
        return value
    if isinstance(value, dict):
        return Point(float(value["x"]), float(value["y"]))
    if hasattr(value, "x") and hasattr(value, "y"):
        return Point(float(value.x), float(value.y))
    x, y = value
    return Point(float(x), float(y))


def angle_from_vertical(dx: float, dy: float) -> float:
    """
    Angle of a direction vector relative to image vertical, in degrees.

    atan2 gives the angle from horizontal; subtracting 90 turns it into the
    angle from vertical, then the result is folded into [-90, 90] so the
    direction of travel along the edge does not matter.
    Positive = clockwise (top leaning right in image coordinates).
    """
    angle = math.degrees(math.atan2(dy, dx)) - 90.0
    if angle > 90.0:
        angle -= 180.0
    if angle < -90.0:
        angle += 180.0
    return angle


@dataclass(frozen=True)
class LineSegment:
    """A straight segment reported by the line detector."""

    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @property
    def angle_from_vertical(self) -> float:
        return angle_from_vertical(self.x2 - self.x1, self.y2 - self.y1)


@dataclass
class Quadrilateral:
    """
    A polygon with at least four vertices reported by the contour detector.

    Attributes:
        corners: Vertex coordinates, in contour order
        bbox: Axis-aligned bounding box (x, y, width, height); derived from
            the corners when not supplied
        area: Polygon area in pixels²; shoelace area of the corners when not
            supplied
    """

    corners: List[Point]
    bbox: Optional[BoundingBox] = None
    area: Optional[float] = None

    def __post_init__(self) -> None:
        self.corners = [as_point(c) for c in self.corners]
        if self.bbox is None:
            self.bbox = bounding_box(self.corners)
        if self.area is None:
            self.area = polygon_area(self.corners)

    @property
    def aspect_ratio(self) -> float:
        _, _, width, height = self.bbox
        if height <= 0:
            return float("inf")
        return width / height


def bounding_box(points: Sequence[Point]) -> BoundingBox:
    if not points:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def polygon_area(points: Sequence[Point]) -> float:
    if len(points) < 3:
        return 0.0
    total = 0.0
    for i, p in enumerate(points):
        q = points[(i + 1) % len(points)]
        total += p.x * q.y - q.x * p.y
    return abs(total) / 2.0


__all__ = [
    "BoundingBox",
    "LineSegment",
    "Point",
    "Quadrilateral",
    "angle_from_vertical",
    "as_point",
    "bounding_box",
    "polygon_area",
]
