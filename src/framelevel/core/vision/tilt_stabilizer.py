"""
Per-frame temporal stabilization of tilt measurements.

Picture frames on a wall don't move, so their measured tilt can be smoothed
heavily across video frames. Detections carry no tracking ID; instead each
one is keyed by a coarse position bucket of its bounding box origin, and a
bounded history of compensated tilts is kept per bucket.

Features:
- Recency-weighted average (i-th oldest of N weighted (i+1)/N)
- Bounded history per identity (FIFO, `window` entries)
- Eviction keeps the identities with the longest histories when too many
  transient detections accumulate

Usage:
    stabilizer = TiltStabilizer()
    identity = identity_for(bbox)
    tilt = stabilizer.stabilize(identity, compensated_tilt)
"""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import Deque, Dict, Hashable, Optional, Tuple

from framelevel.core.vision.geometry import BoundingBox
from framelevel.utils.config_sections import (
    StabilizerConfig,
    level_to_value,
    load_stabilizer_config,
)

log = logging.getLogger(__name__)

Identity = Tuple[int, int]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def identity_for(bbox: BoundingBox, bucket_size: float = 50) -> Identity:
    """Quantize a bounding box origin into a position bucket."""
    x, y = bbox[0], bbox[1]
    return (_round_half_up(x / bucket_size), _round_half_up(y / bucket_size))


class TiltStabilizer:
    """Bounded per-identity tilt histories with a recency-weighted average."""

    def __init__(self, config: Optional[StabilizerConfig] = None) -> None:
        self.config = config or load_stabilizer_config()
        self.window = max(1, int(self.config.window))
        self.histories: Dict[Hashable, Deque[float]] = {}

    def identity_for(self, bbox: BoundingBox) -> Identity:
        return identity_for(bbox, self.config.bucket_size)

    def stabilize(self, identity: Hashable, compensated_tilt: float) -> float:
        """Record a measurement for `identity` and return its stabilized tilt."""
        history = self.histories.get(identity)
        if history is None:
            history = deque(maxlen=self.window)
            self.histories[identity] = history
        history.append(compensated_tilt)

        # Weights (i+1)/N for the i-th oldest; the 1/N cancels in the ratio
        weighted_sum = 0.0
        total_weight = 0
        for i, value in enumerate(history):
            weighted_sum += value * (i + 1)
            total_weight += i + 1
        stabilized = weighted_sum / total_weight

        if len(self.histories) > self.config.max_tracked:
            self._evict()

        return stabilized

    def _evict(self) -> None:
        # sorted() is stable: ties keep first-seen order
        ranked = sorted(self.histories.items(), key=lambda item: len(item[1]), reverse=True)
        before = len(self.histories)
        self.histories = dict(ranked[: self.config.retain])
        log.debug("[TiltStabilizer] Evicted %d identities", before - len(self.histories))

    def history(self, identity: Hashable) -> Tuple[float, ...]:
        return tuple(self.histories.get(identity, ()))

    def reset(self) -> None:
        self.histories.clear()

    def configure(self, level: float) -> None:
        """Set the history window from a 1-10 level (1 = 20 entries, 10 = 3)."""
        window = max(1, int(round(level_to_value(level, self.config.window_range))))
        if window != self.window:
            self.window = window
            self.histories = {
                identity: deque(values, maxlen=window) for identity, values in self.histories.items()
            }
        log.info("[TiltStabilizer] Smoothing level %s: stability window=%d measurements", level, window)


__all__ = ["Identity", "TiltStabilizer", "identity_for"]
