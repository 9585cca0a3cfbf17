"""
Detected picture frame data structure.

This module defines the DetectedObject dataclass, a per-frame snapshot of one
detected picture frame: where it is, its raw and compensated tilt, and the
temporally stabilized tilt shown to the user.

Usage:
    obj = DetectedObject(
        bbox=(100, 150, 200, 300),
        raw_tilt=3.1,
        compensated_tilt=1.4,
        stabilized_tilt=1.2,
        area=58000.0,
        corners=[Point(100, 150), ...],
        identity=(2, 3),
    )
    obj.alignment_status  # "perfect"
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from framelevel.core.vision.geometry import BoundingBox, Point
from framelevel.utils.config_sections import load_detection_config


def classify_alignment(
    tilt: float,
    perfect_threshold: Optional[float] = None,
    slight_threshold: Optional[float] = None,
) -> str:
    """
    Bucket a tilt into "perfect", "slight" or "tilted".

    Thresholds default to the PERFECT/SLIGHT_TILT_THRESHOLD values in Config.
    """
    if perfect_threshold is None or slight_threshold is None:
        config = load_detection_config()
        if perfect_threshold is None:
            perfect_threshold = config.perfect_threshold
        if slight_threshold is None:
            slight_threshold = config.slight_threshold

    magnitude = abs(tilt)
    if magnitude <= perfect_threshold:
        return "perfect"
    if magnitude <= slight_threshold:
        return "slight"
    return "tilted"


@dataclass
class DetectedObject:
    """
    A detected picture frame with its tilt at every pipeline stage.

    Attributes:
        bbox: Bounding box (x, y, width, height) in pixels
        raw_tilt: Tilt measured from the corners, degrees
        compensated_tilt: raw_tilt minus the fused camera/device compensation
        stabilized_tilt: Recency-weighted average of compensated tilts
        area: Polygon area in pixels²
        corners: Corner points as reported by the vision collaborator
        identity: Position bucket used to associate detections across frames
        alignment_status: "perfect" (<= 2°), "slight" (<= 5°) or "tilted"
    """
    bbox: BoundingBox
    raw_tilt: float
    compensated_tilt: float
    stabilized_tilt: float
    area: float
    corners: List[Point] = field(default_factory=list)
    identity: Tuple[int, int] = (0, 0)
    alignment_status: str = ""

    def __post_init__(self) -> None:
        if not self.alignment_status:
            self.alignment_status = classify_alignment(self.stabilized_tilt)

    @property
    def tilt(self) -> float:
        """Final displayed tilt."""
        return self.stabilized_tilt
