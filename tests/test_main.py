"""Tests for the command-line capture loop."""

from __future__ import annotations

import logging
import signal

import numpy as np
import pytest

from framelevel import main as main_module
from framelevel.core.telemetry.tilt_logger import CHANNELS
from framelevel.core.vision.detected_object import DetectedObject


class FakeCapture:
    def __init__(self, frames, opened=True):
        self.frames = list(frames)
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        self.released = True


@pytest.fixture(autouse=True)
def restore_sigint():
    previous = signal.getsignal(signal.SIGINT)
    yield
    signal.signal(signal.SIGINT, previous)


def test_format_detections() -> None:
    obj = DetectedObject(
        bbox=(0, 0, 100, 100),
        raw_tilt=3.0,
        compensated_tilt=3.0,
        stabilized_tilt=3.04,
        area=10000.0,
        identity=(1, 2),
    )

    assert main_module.format_detections([]) == "no frames"
    assert main_module.format_detections([obj]) == "(1, 2): +3.0° (slight)"


def test_parse_args_defaults() -> None:
    args = main_module.parse_args([])

    assert args.source == "0"
    assert args.smoothing is None
    assert args.max_frames == 0


def test_main_processes_until_max_frames(monkeypatch: pytest.MonkeyPatch) -> None:
    frames = [np.zeros((120, 160, 3), dtype=np.uint8) for _ in range(5)]
    capture = FakeCapture(frames)
    monkeypatch.setattr(main_module, "open_capture", lambda source: capture)
    monkeypatch.setattr(main_module.Config, "MIN_PROCESS_INTERVAL", 0.0)

    assert main_module.main(["--max-frames", "2", "--smoothing", "10"]) == 0
    assert len(capture.frames) == 3
    assert capture.released


def test_main_stops_at_end_of_stream(monkeypatch: pytest.MonkeyPatch) -> None:
    capture = FakeCapture([np.zeros((120, 160, 3), dtype=np.uint8)])
    monkeypatch.setattr(main_module, "open_capture", lambda source: capture)

    assert main_module.main(["--source", "clip.mp4"]) == 0
    assert capture.frames == []
    assert capture.released


def test_main_reports_unopened_source(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    capture = FakeCapture([], opened=False)
    monkeypatch.setattr(main_module, "open_capture", lambda source: capture)

    assert main_module.main(["--log-dir", str(tmp_path / "session")]) == 1

    # Session log files are closed even though no frame was read
    assert capture.released
    assert logging.getLogger(CHANNELS["detection"][0]).handlers == []
    assert (tmp_path / "session" / "detection.log").exists()
