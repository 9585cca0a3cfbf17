"""
Picture frame tilt from detected corner points.

The tilt of a frame is read from its two vertical edges. Viewed straight on,
the left and right edges are parallel and both show the frame's rotation, so
their angles are averaged. Viewed at an angle, perspective makes the edges
converge; the edge closer to vertical is then the more trustworthy one and
the other is discarded.

Angles are in degrees from image vertical: 0° = perfectly vertical,
positive = clockwise.

Usage:
    estimator = ObjectTiltEstimator()
    tilt = estimator.estimate_tilt([(100, 50), (300, 52), (298, 400), (98, 398)])
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from framelevel.core.vision.geometry import Point, angle_from_vertical, as_point
from framelevel.utils.config_sections import TiltEstimatorConfig, load_tilt_estimator_config

log = logging.getLogger(__name__)


def sort_corners(corners: Sequence[Point]) -> Dict[str, Point]:
    """
    Label four corners as top_left / top_right / bottom_left / bottom_right.

    Corners are classified by quadrant around their centroid. Rotated or
    skewed shapes can put two corners in the same quadrant; in that case
    the corners are sorted by y, split into a top and a bottom pair, and
    each pair is ordered by x.
    """
    center_x = sum(c.x for c in corners) / len(corners)
    center_y = sum(c.y for c in corners) / len(corners)

    labelled: Dict[str, Optional[Point]] = {
        "top_left": None,
        "top_right": None,
        "bottom_left": None,
        "bottom_right": None,
    }
    for corner in corners:
        if corner.x < center_x and corner.y < center_y:
            labelled["top_left"] = corner
        elif corner.x >= center_x and corner.y < center_y:
            labelled["top_right"] = corner
        elif corner.x < center_x and corner.y >= center_y:
            labelled["bottom_left"] = corner
        else:
            labelled["bottom_right"] = corner

    if all(labelled.values()):
        return labelled

    by_y = sorted(corners, key=lambda c: c.y)
    top = sorted(by_y[:2], key=lambda c: c.x)
    bottom = sorted(by_y[2:4], key=lambda c: c.x)
    return {
        "top_left": top[0],
        "top_right": top[1],
        "bottom_left": bottom[0],
        "bottom_right": bottom[1],
    }


def edge_angle(top: Point, bottom: Point) -> float:
    """Angle of the edge running from `top` to `bottom`, from vertical."""
    return angle_from_vertical(bottom.x - top.x, bottom.y - top.y)


class ObjectTiltEstimator:
    """Estimate a quadrilateral's rotation from true vertical."""

    def __init__(self, config: Optional[TiltEstimatorConfig] = None) -> None:
        self.config = config or load_tilt_estimator_config()

    def estimate_tilt(self, corners: Sequence) -> float:
        """
        Signed tilt in degrees of the quadrilateral described by `corners`.

        Only the first four corners are used. Fewer than four corners yields
        0.0 (no measurable tilt). Corners do not say which side is up, so
        only rotations within ±45° are recovered.
        """
        if corners is None or len(corners) < 4:
            return 0.0

        points = [as_point(c) for c in list(corners)[:4]]
        labelled = sort_corners(points)

        left = edge_angle(labelled["top_left"], labelled["bottom_left"])
        right = edge_angle(labelled["top_right"], labelled["bottom_right"])

        if abs(left - right) > self.config.parallel_tolerance:
            # Perspective skew: trust the edge closer to vertical
            log.debug(
                "[ObjectTiltEstimator] Edges diverge (left=%.2f, right=%.2f), using the more vertical one",
                left,
                right,
            )
            return left if abs(left) < abs(right) else right

        return (left + right) / 2.0


__all__ = ["ObjectTiltEstimator", "edge_angle", "sort_corners"]
