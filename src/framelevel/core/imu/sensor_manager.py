"""
Device orientation sensor manager.

Owns an OrientationSmoother and mirrors the lifecycle of a platform
orientation source: support detection, permission, start/stop, and the
per-sample callback. The frame pipeline only reads `get_device_tilt()` and
`is_active_and_ready()`; samples arrive on whatever thread the platform
source delivers them on.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from framelevel.core.imu.orientation_smoother import (
    OrientationSample,
    OrientationSmoother,
    parse_sample,
)

log = logging.getLogger(__name__)


class SensorUnavailableError(RuntimeError):
    """Raised when orientation sensors are missing or access was denied."""


class SensorManager:
    """Lifecycle wrapper around an orientation sample source."""

    def __init__(
        self,
        smoother: Optional[OrientationSmoother] = None,
        *,
        is_supported: bool = True,
        permission_request: Optional[Callable[[], bool]] = None,
    ) -> None:
        """
        Args:
            smoother: Filter for incoming samples (a default one is built if None)
            is_supported: Whether the platform exposes orientation sensors
            permission_request: Optional callable asking the platform for
                sensor access; returns True when granted. Platforms without
                a permission model leave this as None.
        """
        self.smoother = smoother or OrientationSmoother()
        self.is_supported = is_supported
        self._permission_request = permission_request
        self.is_permission_granted = is_supported and permission_request is None
        self.is_active = False
        self.last_raw: Optional[OrientationSample] = None

        if not is_supported:
            log.info("[SensorManager] Orientation sensors not supported - camera-only mode")

    def request_permission(self) -> bool:
        if not self.is_supported:
            raise SensorUnavailableError("Device orientation sensors not supported")

        if self._permission_request is None:
            self.is_permission_granted = True
            return True

        try:
            granted = bool(self._permission_request())
        except Exception as exc:
            raise SensorUnavailableError(f"Failed to get sensor permission: {exc}") from exc

        self.is_permission_granted = granted
        if not granted:
            raise SensorUnavailableError("Device orientation permission denied")

        log.info("[SensorManager] Orientation permission granted")
        return True

    def start(self) -> bool:
        """Begin accepting samples. Returns False when sensors are unavailable."""
        if not self.is_supported:
            log.warning("[SensorManager] Sensors not supported - skipping sensor start")
            return False

        if not self.is_permission_granted:
            self.request_permission()

        self.is_active = True
        log.info("[SensorManager] Started")
        return True

    def stop(self) -> None:
        if self.is_active:
            self.is_active = False
            log.info("[SensorManager] Stopped")

    def handle_orientation(self, event: Any) -> None:
        """
        Sample callback for the platform source.

        Never raises: an event without usable axes is dropped so the source
        keeps delivering.
        """
        if not self.is_active:
            return

        values = parse_sample(event)
        if values is None:
            log.debug("[SensorManager] Dropping orientation event %r", event)
            return

        self.last_raw = OrientationSample(*values)
        self.smoother.ingest(self.last_raw)

    def is_active_and_ready(self) -> bool:
        return self.is_active and self.is_permission_granted

    def get_device_tilt(self) -> float:
        """Smoothed device tilt, or 0 when sensors are not delivering."""
        if not self.is_active_and_ready():
            return 0.0
        return self.smoother.get_tilt()

    def set_smoothing_level(self, level: float) -> None:
        """Orientation smoothing dial (1 = most stable, 10 = most responsive)."""
        self.smoother.configure(level)

    def reset(self) -> None:
        self.smoother.reset()
        self.last_raw = None


__all__ = ["SensorManager", "SensorUnavailableError"]
