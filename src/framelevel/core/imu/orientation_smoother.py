"""
Device orientation smoothing for tilt compensation.

This module turns the raw (pitch, roll) samples reported by the device's
orientation sensor into a single stable device-tilt scalar. Samples from a
hand-held phone are dominated by hand shake, so three filters run in series
on every sample:

1. Rolling average over a bounded FIFO buffer (~10 samples)
2. Exponential moving average of the rolling average
3. Deadband: the externally visible value only moves when the EMA drifts
   further than the deadband size from it

Smoothing Level (1-10):
- 1: EMA factor 0.05, 20-sample buffer, 1.2° deadband (most stable)
- 10: EMA factor 0.40, 5-sample buffer, 0.2° deadband (most responsive)

Usage:
    smoother = OrientationSmoother()
    smoother.ingest(OrientationSample(pitch=3.0, roll=-1.5))
    device_tilt = smoother.get_tilt()
"""

from __future__ import annotations

import logging
import math
import numbers
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from framelevel.utils.config_sections import (
    OrientationSmootherConfig,
    level_to_value,
    load_orientation_smoother_config,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrientationSample:
    """One orientation reading in degrees (pitch = front/back, roll = left/right)."""

    pitch: float
    roll: float


def parse_sample(sample: Any) -> Optional[Tuple[float, float]]:
    """
    Extract (pitch, roll) from a sample, or None when axes are missing.

    Accepts OrientationSample, mappings with pitch/roll (or the browser
    deviceorientation beta/gamma keys) and objects with pitch/roll attributes.
    """
    if sample is None:
        return None

    if isinstance(sample, dict):
        pitch = sample.get("pitch", sample.get("beta"))
        roll = sample.get("roll", sample.get("gamma"))
    else:
        pitch = getattr(sample, "pitch", None)
        roll = getattr(sample, "roll", None)

    if not _is_finite_number(pitch) or not _is_finite_number(roll):
        return None
    return float(pitch), float(roll)


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


class OrientationSmoother:
    """Rolling average -> EMA -> deadband filter over (pitch, roll) samples."""

    def __init__(self, config: Optional[OrientationSmootherConfig] = None) -> None:
        self.config = config or load_orientation_smoother_config()

        self.smoothing_factor = self.config.smoothing_factor
        self.buffer_size = max(1, int(self.config.buffer_size))
        self.deadband_size = self.config.deadband

        self._lock = threading.Lock()
        self.buffer: deque = deque(maxlen=self.buffer_size)
        self.ema: Tuple[float, float] = (0.0, 0.0)
        self.stable: Tuple[float, float] = (0.0, 0.0)
        self._ema_initialized = False

    def ingest(self, sample: Any) -> None:
        """Run one sample through all filter stages. Invalid samples are ignored."""
        values = parse_sample(sample)
        if values is None:
            log.debug("[OrientationSmoother] Ignoring sample without pitch/roll: %r", sample)
            return

        with self._lock:
            # Stage 1: bounded FIFO
            self.buffer.append(values)

            # Stage 2: rolling average
            count = len(self.buffer)
            avg_pitch = sum(p for p, _ in self.buffer) / count
            avg_roll = sum(r for _, r in self.buffer) / count

            # Stage 3: EMA, seeded by the first average
            if not self._ema_initialized:
                self.ema = (avg_pitch, avg_roll)
                self._ema_initialized = True
            else:
                alpha = self.smoothing_factor
                ema_pitch, ema_roll = self.ema
                self.ema = (
                    alpha * avg_pitch + (1.0 - alpha) * ema_pitch,
                    alpha * avg_roll + (1.0 - alpha) * ema_roll,
                )

            # Stage 4: deadband per axis
            self.stable = self._apply_deadband(self.ema, self.stable)

    def _apply_deadband(
        self, ema: Tuple[float, float], stable: Tuple[float, float]
    ) -> Tuple[float, float]:
        return tuple(
            new if abs(new - old) > self.deadband_size else old
            for new, old in zip(ema, stable)
        )

    def get_tilt(self) -> float:
        """
        Device roll as seen by the camera, in degrees.

        When the device is within the upright range on the pitch axis the roll
        axis is returned directly; further from upright, roll is scaled by
        |cos(pitch)|. This is a heuristic projection, not a 3-D rotation.
        """
        with self._lock:
            pitch, roll = self.stable

        if abs(pitch) < self.config.upright_pitch:
            return roll
        return roll * abs(math.cos(math.radians(pitch)))

    def get_stable_orientation(self) -> OrientationSample:
        with self._lock:
            return OrientationSample(*self.stable)

    def get_smoothed_orientation(self) -> OrientationSample:
        with self._lock:
            return OrientationSample(*self.ema)

    def reset(self) -> None:
        """Clear the buffer, EMA and stable value."""
        with self._lock:
            self.buffer.clear()
            self.ema = (0.0, 0.0)
            self.stable = (0.0, 0.0)
            self._ema_initialized = False

    def configure(self, level: float) -> None:
        """Set factor, buffer size and deadband together from a 1-10 level."""
        factor = level_to_value(level, self.config.factor_range)
        buffer_size = max(1, int(round(level_to_value(level, self.config.buffer_range))))
        deadband = level_to_value(level, self.config.deadband_range)

        with self._lock:
            self.smoothing_factor = factor
            self.deadband_size = deadband
            if buffer_size != self.buffer_size:
                self.buffer_size = buffer_size
                self.buffer = deque(self.buffer, maxlen=buffer_size)

        log.info(
            "[OrientationSmoother] Smoothing level %s: factor=%.3f, buffer=%d, deadband=%.2f",
            level,
            factor,
            buffer_size,
            deadband,
        )

    def set_smoothing_factor(self, factor: float) -> None:
        with self._lock:
            self.smoothing_factor = max(0.01, min(1.0, factor))

    def set_deadband_size(self, size: float) -> None:
        with self._lock:
            self.deadband_size = max(0.0, size)


__all__ = ["OrientationSample", "OrientationSmoother", "parse_sample"]
