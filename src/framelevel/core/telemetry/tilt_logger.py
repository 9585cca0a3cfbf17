"""
Session logger for tilt-pipeline debugging.

This module provides a singleton logger that routes each pipeline stage's
logs into its own file inside a session directory.

Features:
- Singleton pattern (one instance per session)
- Separate log files for sensors, vision, fusion and frame detection
- DEBUG level logging to files
- WARNING level console output for critical messages

Log Files:
- sensor.log: Orientation smoothing and sensor lifecycle
- vision.log: Vertical estimation, tilt estimation, stabilization, OpenCV
- fusion.log: Device/camera compensation
- detection.log: Per-frame pipeline passes

Usage:
    from framelevel.core.telemetry.tilt_logger import get_tilt_logger

    tilt_logger = get_tilt_logger(session_dir=Path("logs/session_2026-01-15_10-30-00"))
    tilt_logger.detection.info("Pipeline started")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

# channel -> (logger name, file name)
CHANNELS = {
    "sensor": ("framelevel.core.imu", "sensor.log"),
    "vision": ("framelevel.core.vision", "vision.log"),
    "fusion": ("framelevel.core.fusion", "fusion.log"),
    "detection": ("framelevel.core.detection", "detection.log"),
}


class TiltLogger:
    """Singleton logger for tilt-pipeline debugging."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Optional[Path] = None):
        if self._initialized:
            return

        if session_dir is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_dir = Path.cwd() / "logs" / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._previous_levels = {}

        for channel, (logger_name, filename) in CHANNELS.items():
            self._setup_logger(channel, logger_name, filename)

        self._initialized = True

    def _setup_logger(self, channel: str, logger_name: str, filename: str):
        """Setup one channel logger with file and console handlers."""
        logger = logging.getLogger(logger_name)
        self._previous_levels[channel] = logger.level
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        logger.handlers.clear()

        fh = logging.FileHandler(self.log_dir / filename, mode='w')
        fh.setLevel(logging.DEBUG)

        ch = logging.StreamHandler()
        ch.setLevel(logging.WARNING)

        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s',
            datefmt='%H:%M:%S'
        )
        fh.setFormatter(formatter)
        ch.setFormatter(formatter)

        logger.addHandler(fh)
        logger.addHandler(ch)

        setattr(self, channel, logger)

    def close(self):
        """Close all handlers and release the singleton."""
        for channel in CHANNELS:
            logger = getattr(self, channel, None)
            if logger:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)
                logger.propagate = True
                logger.setLevel(self._previous_levels.get(channel, logging.NOTSET))
        TiltLogger._instance = None
        TiltLogger._initialized = False


# Global instance
_tilt_logger = None


def get_tilt_logger(session_dir: Optional[Path] = None) -> TiltLogger:
    """Get or create the session tilt logger."""
    global _tilt_logger
    if _tilt_logger is None:
        _tilt_logger = TiltLogger(session_dir=session_dir)
    return _tilt_logger


def close_tilt_logger() -> None:
    global _tilt_logger
    if _tilt_logger is not None:
        _tilt_logger.close()
        _tilt_logger = None
