"""
Camera roll estimation from environmental vertical lines.

Walls, door frames and window edges are vertical in the real world, so the
angle at which they appear in the image is a measure of how far the camera
is rolled. Each frame the long near-vertical segments are weighted by their
length (longer lines are more likely architectural), averaged, and blended
into the running estimate.

When no qualifying lines are found the previous estimate fades toward zero
instead of snapping to it, so briefly losing sight of the verticals does not
make the compensation jump.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from framelevel.core.vision.geometry import LineSegment
from framelevel.utils.config_sections import (
    VerticalEstimatorConfig,
    load_vertical_estimator_config,
)

log = logging.getLogger(__name__)


class EnvironmentalVerticalEstimator:
    """Track camera tilt (degrees) from per-frame line segments."""

    def __init__(self, config: Optional[VerticalEstimatorConfig] = None) -> None:
        self.config = config or load_vertical_estimator_config()
        self.camera_tilt = 0.0
        self.last_camera_tilt: Optional[float] = None  # None until first evidence
        self.verticals: List[LineSegment] = []

    def update(self, segments: Sequence[LineSegment], frame_height: float) -> float:
        """
        Consume one frame's line segments and return the camera tilt.

        Args:
            segments: Line segments detected in the frame
            frame_height: Frame height in pixels (scales length thresholds)

        Returns:
            Camera tilt in degrees (positive = clockwise)
        """
        candidates = self._qualifying(segments or [], frame_height)

        if not candidates:
            self.verticals = []
            if self.last_camera_tilt is not None:
                self.camera_tilt = self.last_camera_tilt * self.config.decay
                self.last_camera_tilt = self.camera_tilt
            return self.camera_tilt

        candidates.sort(key=lambda s: s.length, reverse=True)
        top = candidates[: self.config.top_candidates]
        self.verticals = top

        weights = [s.length / frame_height for s in top]
        measured = sum(s.angle_from_vertical * w for s, w in zip(top, weights)) / sum(weights)

        if self.last_camera_tilt is not None:
            previous_weight = self.config.previous_weight
            measured = self.last_camera_tilt * previous_weight + measured * (1.0 - previous_weight)

        self.camera_tilt = measured
        self.last_camera_tilt = measured

        log.debug(
            "[VerticalEstimator] %d verticals (%d used), camera tilt=%.2f",
            len(candidates),
            len(top),
            self.camera_tilt,
        )
        return self.camera_tilt

    def _qualifying(self, segments: Sequence[LineSegment], frame_height: float) -> List[LineSegment]:
        if not frame_height or frame_height <= 0:
            return []
        min_length = frame_height * self.config.min_length_ratio
        return [
            s
            for s in segments
            if abs(s.angle_from_vertical) < self.config.max_angle and s.length > min_length
        ]

    def get_camera_tilt(self) -> float:
        return self.camera_tilt

    def reset(self) -> None:
        self.camera_tilt = 0.0
        self.last_camera_tilt = None
        self.verticals = []


__all__ = ["EnvironmentalVerticalEstimator"]
