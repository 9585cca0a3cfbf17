#!/usr/bin/env python3
"""
Picture frame levelling from a live camera or a video file.

Reads frames with OpenCV, runs the tilt pipeline at most once per
MIN_PROCESS_INTERVAL and prints the stabilized tilt of every detected frame.

Usage:
    framelevel                      # default webcam
    framelevel --source clip.mp4    # video file
    framelevel --sensitivity 7 --smoothing 3 --log-dir logs/session
"""

import argparse
import logging
import time
from pathlib import Path

import cv2

from framelevel.core.detection.builder import build_tilt_system
from framelevel.core.telemetry.tilt_logger import close_tilt_logger, get_tilt_logger
from framelevel.utils.config import Config
from framelevel.utils.ctrl_handler import CtrlCHandler

log = logging.getLogger("framelevel")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Measure how level picture frames are")
    parser.add_argument("--source", default="0", help="Camera index or video file path")
    parser.add_argument("--sensitivity", type=int, default=Config.DETECTION_SENSITIVITY,
                        help="Detection sensitivity 1-10")
    parser.add_argument("--smoothing", type=int, default=None,
                        help="Frame stabilization level 1-10 (1 = most stable)")
    parser.add_argument("--max-frames", type=int, default=0, help="Stop after N frames (0 = no limit)")
    parser.add_argument("--log-dir", type=Path, default=None,
                        help="Write per-stage debug logs into this session directory")
    return parser.parse_args(argv)


def open_capture(source: str) -> cv2.VideoCapture:
    capture = cv2.VideoCapture(int(source)) if source.isdigit() else cv2.VideoCapture(source)
    if source.isdigit():
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, Config.CAPTURE_WIDTH)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, Config.CAPTURE_HEIGHT)
    return capture


def format_detections(detections) -> str:
    if not detections:
        return "no frames"
    return ", ".join(
        f"{obj.identity}: {obj.stabilized_tilt:+.1f}° ({obj.alignment_status})" for obj in detections
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    if args.log_dir is not None:
        get_tilt_logger(session_dir=args.log_dir)

    # No orientation source on a desktop capture: camera-only compensation
    detector, sensor_manager = build_tilt_system(enable_sensors=False)
    detector.set_sensitivity(args.sensitivity)
    if args.smoothing is not None:
        detector.set_smoothing_level(args.smoothing)

    capture = open_capture(args.source)
    if not capture.isOpened():
        log.error("Could not open video source %s", args.source)
        capture.release()
        sensor_manager.stop()
        close_tilt_logger()
        return 1

    ctrl_handler = CtrlCHandler()
    last_process_time = 0.0
    frames = 0

    try:
        while not ctrl_handler.should_stop:
            ok, frame = capture.read()
            if not ok:
                log.info("End of stream")
                break

            now = time.monotonic()
            if now - last_process_time < Config.MIN_PROCESS_INTERVAL:
                continue
            last_process_time = now

            detections = detector.detect_frames(frame)
            frames += 1
            log.info("%s | %s", detector.get_status_text(), format_detections(detections))

            if args.max_frames and frames >= args.max_frames:
                break
    finally:
        capture.release()
        ctrl_handler.restore()
        sensor_manager.stop()
        close_tilt_logger()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
