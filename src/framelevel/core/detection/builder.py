"""
Builder for the tilt pipeline.

Creates every component with its configuration section and wires them
together. Tests replace individual builders through monkeypatch.
"""

import logging
from typing import Optional

from framelevel.core.detection.frame_detector import FrameDetector
from framelevel.core.fusion.fusion_engine import FusionEngine
from framelevel.core.imu.orientation_smoother import OrientationSmoother
from framelevel.core.imu.sensor_manager import SensorManager, SensorUnavailableError
from framelevel.core.vision.frame_vision import OpenCVFrameVision
from framelevel.core.vision.object_tilt_estimator import ObjectTiltEstimator
from framelevel.core.vision.tilt_stabilizer import TiltStabilizer
from framelevel.core.vision.vertical_estimator import EnvironmentalVerticalEstimator

log = logging.getLogger(__name__)


class Builder:
    """Builds all system dependencies (components read their Config sections)."""

    def build_vision(self):
        log.debug("  Creating OpenCVFrameVision...")
        return OpenCVFrameVision()

    def build_sensor_manager(self, is_supported: bool = True) -> SensorManager:
        log.debug("  Creating SensorManager...")
        return SensorManager(OrientationSmoother(), is_supported=is_supported)

    def build_frame_detector(self, vision) -> FrameDetector:
        log.debug("  Creating FrameDetector...")
        return FrameDetector(
            vision,
            tilt_estimator=ObjectTiltEstimator(),
            vertical_estimator=EnvironmentalVerticalEstimator(),
            fusion_engine=FusionEngine(),
            stabilizer=TiltStabilizer(),
        )


def build_tilt_system(
    *,
    enable_sensors: bool = True,
    vision=None,
    builder: Optional[Builder] = None,
):
    """
    Build a frame detector and its sensor manager.

    Returns:
        (FrameDetector, SensorManager) - fusion is enabled on the detector
        only when the sensor manager started successfully
    """
    builder = builder or Builder()
    vision = vision or builder.build_vision()
    detector = builder.build_frame_detector(vision)
    sensor_manager = builder.build_sensor_manager(is_supported=enable_sensors)

    started = False
    if enable_sensors:
        try:
            started = sensor_manager.start()
        except SensorUnavailableError as exc:
            log.warning("Sensor start failed, continuing camera-only: %s", exc)

    if started:
        detector.enable_sensor_fusion(sensor_manager)
        log.info("Tilt system ready (camera + sensors)")
    else:
        log.info("Tilt system ready (camera-only)")

    return detector, sensor_manager


__all__ = ["Builder", "build_tilt_system"]
