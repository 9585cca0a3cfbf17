"""
OpenCV implementation of the vision collaborator.

Extracts the two primitives the tilt pipeline consumes from a BGR frame:

- Quadrilaterals: Canny edges -> dilation -> external contours ->
  polygon approximation, keeping polygons with at least four vertices and a
  sensitivity-scaled minimum area
- Line segments: Canny edges -> probabilistic Hough transform, keeping
  segments at least 30% of the frame height long

Sensitivity (1-10) lowers the Canny thresholds and the minimum contour area
as it increases, so higher sensitivity finds fainter and smaller frames.

Usage:
    vision = OpenCVFrameVision()
    quads = vision.find_quadrilaterals(frame)
    segments = vision.find_line_segments(frame)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from framelevel.core.vision.geometry import LineSegment, Point, Quadrilateral
from framelevel.utils.config_sections import DetectionConfig, load_detection_config

log = logging.getLogger(__name__)


class OpenCVFrameVision:
    """Contour and line primitives from OpenCV."""

    def __init__(self, config: Optional[DetectionConfig] = None) -> None:
        self.config = config or load_detection_config()
        self.sensitivity = max(1, min(10, int(self.config.sensitivity)))
        self.min_contour_area = float(self.config.min_contour_area)
        self.dilate_kernel = np.ones((3, 3), dtype=np.uint8)

    def set_sensitivity(self, level: int) -> None:
        self.sensitivity = max(1, min(10, int(level)))

    def set_min_contour_area(self, area: float) -> None:
        self.min_contour_area = float(area)

    def frame_size(self, frame: np.ndarray) -> Tuple[int, int]:
        """(width, height) of the frame in pixels."""
        if frame is None or getattr(frame, "ndim", 0) < 2:
            return (0, 0)
        height, width = frame.shape[:2]
        return (int(width), int(height))

    def _blurred_gray(self, frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 2:
            gray = frame
        elif frame.shape[2] == 4:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGRA2GRAY)
        else:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        return cv2.GaussianBlur(gray, (5, 5), 0)

    def find_quadrilaterals(self, frame: np.ndarray) -> List[Quadrilateral]:
        """Polygons with at least four vertices large enough to be picture frames."""
        blurred = self._blurred_gray(frame)

        threshold1 = 50 - self.sensitivity * 3
        threshold2 = 150 - self.sensitivity * 5
        edges = cv2.Canny(blurred, threshold1, threshold2)
        dilated = cv2.dilate(edges, self.dilate_kernel)

        contours, _ = cv2.findContours(dilated, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        min_area = self.min_contour_area / (self.sensitivity / 5.0)
        quads: List[Quadrilateral] = []
        for contour in contours:
            area = cv2.contourArea(contour)
            if area < min_area:
                continue

            perimeter = cv2.arcLength(contour, True)
            approx = cv2.approxPolyDP(contour, 0.02 * perimeter, True)
            if len(approx) < 4:
                continue

            vertices = approx.reshape(-1, 2)[: self.config.max_polygon_vertices]
            corners = [Point(float(x), float(y)) for x, y in vertices]
            x, y, w, h = cv2.boundingRect(approx)
            quads.append(Quadrilateral(corners=corners, bbox=(x, y, w, h), area=float(area)))

        log.debug("[OpenCVFrameVision] %d contours, %d quadrilaterals", len(contours), len(quads))
        return quads

    def find_line_segments(self, frame: np.ndarray) -> List[LineSegment]:
        """Long straight segments from the probabilistic Hough transform."""
        blurred = self._blurred_gray(frame)
        edges = cv2.Canny(blurred, 50, 150)

        rows = frame.shape[0]
        lines = cv2.HoughLinesP(
            edges,
            1,
            np.pi / 180,
            self.config.hough_threshold,
            minLineLength=rows * self.config.hough_min_length_ratio,
            maxLineGap=self.config.hough_max_line_gap,
        )
        if lines is None:
            return []

        return [
            LineSegment(float(x1), float(y1), float(x2), float(y2))
            for x1, y1, x2, y2 in lines.reshape(-1, 4)
        ]


__all__ = ["OpenCVFrameVision"]
