"""Per-frame tilt pipeline: vision -> tilt -> fusion -> stabilization."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional

from framelevel.core.fusion.fusion_engine import FusionEngine
from framelevel.core.vision.detected_object import DetectedObject, classify_alignment
from framelevel.core.vision.geometry import Quadrilateral
from framelevel.core.vision.object_tilt_estimator import ObjectTiltEstimator
from framelevel.core.vision.tilt_stabilizer import TiltStabilizer
from framelevel.core.vision.vertical_estimator import EnvironmentalVerticalEstimator
from framelevel.utils.config_sections import DetectionConfig, load_detection_config

log = logging.getLogger(__name__)


class FrameDetector:
    """
    Detect picture frames in a video frame and measure how level they are.

    One `detect_frames` pass per video frame:
    1. Line segments -> environmental vertical estimator -> camera tilt
    2. Device tilt from the sensor manager (when fusion is enabled and ready)
    3. Fusion engine -> compensation angle
    4. For each quadrilateral: raw tilt -> compensated tilt -> stabilized tilt

    The vision collaborator must provide `find_quadrilaterals(frame)`,
    `find_line_segments(frame)` and `frame_size(frame)`; it may provide
    `set_sensitivity(level)`.
    """

    def __init__(
        self,
        vision,
        *,
        tilt_estimator: Optional[ObjectTiltEstimator] = None,
        vertical_estimator: Optional[EnvironmentalVerticalEstimator] = None,
        fusion_engine: Optional[FusionEngine] = None,
        stabilizer: Optional[TiltStabilizer] = None,
        config: Optional[DetectionConfig] = None,
    ) -> None:
        self.vision = vision
        self.tilt_estimator = tilt_estimator or ObjectTiltEstimator()
        self.vertical_estimator = vertical_estimator or EnvironmentalVerticalEstimator()
        self.fusion_engine = fusion_engine or FusionEngine()
        self.stabilizer = stabilizer or TiltStabilizer()
        self.config = config or load_detection_config()

        self.sensitivity = max(1, min(10, int(self.config.sensitivity)))
        self.sensor_manager = None
        self.use_sensor_fusion = False

        self.camera_tilt = 0.0
        self.device_tilt = 0.0
        self.fused_tilt = 0.0
        self.last_detected_frames: List[DetectedObject] = []
        self.last_timings: Dict[str, float] = {}
        self.frames_processed = 0

        # Non-blocking: a pass that finds this held returns the last result
        self._pass_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Sensor fusion
    # ------------------------------------------------------------------

    def enable_sensor_fusion(self, sensor_manager) -> None:
        self.sensor_manager = sensor_manager
        self.use_sensor_fusion = True
        log.info("[FrameDetector] Sensor fusion enabled")

    def disable_sensor_fusion(self) -> None:
        self.use_sensor_fusion = False
        self.sensor_manager = None
        log.info("[FrameDetector] Sensor fusion disabled")

    def is_sensor_fusion_active(self) -> bool:
        return bool(
            self.use_sensor_fusion
            and self.sensor_manager is not None
            and self.sensor_manager.is_active_and_ready()
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def detect_frames(self, frame: Any) -> List[DetectedObject]:
        """
        Run one pipeline pass and return the detected picture frames.

        Returns the previous result unchanged when a pass is already running,
        when the frame is missing or empty, or when a collaborator fails.
        """
        if not self._pass_lock.acquire(blocking=False):
            log.debug("[FrameDetector] Pass already running, skipping frame")
            return self.last_detected_frames

        try:
            if frame is None:
                log.debug("[FrameDetector] No frame, keeping previous detections")
                return self.last_detected_frames

            width, height = self.vision.frame_size(frame)
            if not width or not height:
                log.debug("[FrameDetector] Empty frame (%sx%s), keeping previous detections", width, height)
                return self.last_detected_frames

            detected = self._run_pass(frame, height)
            self.last_detected_frames = detected
            self.frames_processed += 1
            return detected
        except Exception:
            log.exception("[FrameDetector] Frame pass failed, keeping previous detections")
            return self.last_detected_frames
        finally:
            self._pass_lock.release()

    def _run_pass(self, frame: Any, frame_height: float) -> List[DetectedObject]:
        timings: Dict[str, float] = {}

        start = time.perf_counter()
        segments = self.vision.find_line_segments(frame)
        self.camera_tilt = self.vertical_estimator.update(segments, frame_height)
        timings["verticals"] = time.perf_counter() - start

        sensor_active = self.is_sensor_fusion_active()
        self.device_tilt = self.sensor_manager.get_device_tilt() if sensor_active else 0.0
        self.fused_tilt = self.fusion_engine.fuse(self.device_tilt, self.camera_tilt, sensor_active)

        start = time.perf_counter()
        quads = self.vision.find_quadrilaterals(frame)
        timings["quadrilaterals"] = time.perf_counter() - start

        start = time.perf_counter()
        detected = []
        for quad in quads:
            obj = self._measure(quad)
            if obj is not None:
                detected.append(obj)
        timings["tilt"] = time.perf_counter() - start

        self.last_timings = timings
        return detected

    def _measure(self, quad: Quadrilateral) -> Optional[DetectedObject]:
        if len(quad.corners) < 4:
            return None

        aspect = quad.aspect_ratio
        if not (self.config.min_aspect_ratio < aspect < self.config.max_aspect_ratio):
            return None

        raw_tilt = self.tilt_estimator.estimate_tilt(quad.corners)
        compensated = self.fusion_engine.compensate(raw_tilt, self.fused_tilt)
        identity = self.stabilizer.identity_for(quad.bbox)
        stabilized = self.stabilizer.stabilize(identity, compensated)

        return DetectedObject(
            bbox=quad.bbox,
            raw_tilt=raw_tilt,
            compensated_tilt=compensated,
            stabilized_tilt=stabilized,
            area=quad.area,
            corners=list(quad.corners),
            identity=identity,
            alignment_status=classify_alignment(
                stabilized, self.config.perfect_threshold, self.config.slight_threshold
            ),
        )

    # ------------------------------------------------------------------
    # Read-outs and dials
    # ------------------------------------------------------------------

    def get_camera_tilt(self) -> float:
        return self.camera_tilt

    def get_device_tilt(self) -> float:
        return self.device_tilt

    def get_fused_tilt(self) -> float:
        return self.fused_tilt

    def get_status_text(self) -> str:
        return self.fusion_engine.describe(self.is_sensor_fusion_active())

    def set_sensitivity(self, level: int) -> None:
        """Detection sensitivity (1-10), forwarded to the vision collaborator."""
        self.sensitivity = max(1, min(10, int(level)))
        if hasattr(self.vision, "set_sensitivity"):
            self.vision.set_sensitivity(self.sensitivity)

    def set_smoothing_level(self, level: float) -> None:
        """Frame stabilization dial (1 = most stable, 10 = most responsive)."""
        self.stabilizer.configure(level)

    def reset(self) -> None:
        self.vertical_estimator.reset()
        self.stabilizer.reset()
        self.camera_tilt = 0.0
        self.device_tilt = 0.0
        self.fused_tilt = 0.0
        self.last_detected_frames = []


__all__ = ["FrameDetector"]
