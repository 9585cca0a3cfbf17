"""
Device + camera tilt fusion.

Orientation sensors are trusted more for the absolute device orientation;
environmental verticals give a scene-relative reference. When sensors are
active the compensation angle is a fixed weighted blend of both, otherwise
the camera estimate is used alone.
"""

from __future__ import annotations

import logging
from typing import Optional

from framelevel.utils.config_sections import FusionConfig, load_fusion_config

log = logging.getLogger(__name__)


class FusionEngine:
    """Combine device tilt and camera tilt into one compensation angle."""

    def __init__(self, config: Optional[FusionConfig] = None) -> None:
        self.config = config or load_fusion_config()
        if self.config.device_weight < 0 or self.config.camera_weight < 0:
            raise ValueError("Fusion weights must be non-negative")
        if self.config.device_weight + self.config.camera_weight <= 0:
            raise ValueError("Fusion weights must sum to a positive value")

        self.device_tilt = 0.0
        self.camera_tilt = 0.0
        self.fused_tilt = 0.0

    def fuse(self, device_tilt: float, camera_tilt: float, sensor_active: bool) -> float:
        """
        Compensation angle in degrees.

        Args:
            device_tilt: Smoothed device tilt from the orientation sensors
            camera_tilt: Camera tilt from environmental verticals
            sensor_active: Whether the sensors are active and ready

        Returns:
            device_weight*device + camera_weight*camera when sensor_active,
            otherwise camera_tilt alone
        """
        self.camera_tilt = camera_tilt
        if sensor_active:
            self.device_tilt = device_tilt
            self.fused_tilt = (
                self.config.device_weight * device_tilt + self.config.camera_weight * camera_tilt
            )
        else:
            self.device_tilt = 0.0
            self.fused_tilt = camera_tilt
        log.debug(
            "[FusionEngine] device=%.2f camera=%.2f fused=%.2f (sensors %s)",
            self.device_tilt,
            self.camera_tilt,
            self.fused_tilt,
            "on" if sensor_active else "off",
        )
        return self.fused_tilt

    @staticmethod
    def compensate(raw_tilt: float, compensation: float) -> float:
        return raw_tilt - compensation

    def describe(self, sensor_active: bool) -> str:
        """Short status line for overlays and logs."""
        if sensor_active:
            return (
                f"Device: {self.device_tilt:.1f}° | Camera: {self.camera_tilt:.1f}° | "
                f"Combined: {self.fused_tilt:.1f}°"
            )
        return f"Camera Tilt: {self.camera_tilt:.1f}° (auto-compensating)"


__all__ = ["FusionEngine"]
