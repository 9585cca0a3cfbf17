"""
Centralized configuration for the framelevel tilt-estimation system.

This module provides all configuration constants for:
- Orientation smoothing (rolling buffer, EMA, deadband)
- Environmental vertical detection (camera roll from wall/door edges)
- Object tilt estimation (edge parallelism tolerance)
- Sensor fusion weights (device vs camera)
- Temporal stabilization (per-frame history windows and eviction)
- Frame detection (sensitivity, contour area, aspect ratio)

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation.

Usage:
    from framelevel.utils.config import Config

    window = Config.STABILIZER_WINDOW
    if Config.FUSION_DEVICE_WEIGHT > 0.5:
        # Sensors dominate the compensation
"""


class Config:
    """System configuration constants for framelevel."""

    # ==========================================================================
    # ORIENTATION SMOOTHER: Device orientation samples -> stable device tilt
    # ==========================================================================

    ORIENTATION_BUFFER_SIZE = 10        # Rolling average window (samples)
    ORIENTATION_SMOOTHING_FACTOR = 0.15 # EMA factor, lower = smoother
    ORIENTATION_DEADBAND = 0.5          # Degrees of change needed to update
    ORIENTATION_UPRIGHT_PITCH = 45.0    # |pitch| below this uses roll directly

    # Smoothing level dial (1 = most stable, 10 = most responsive)
    ORIENTATION_FACTOR_RANGE = (0.05, 0.4)
    ORIENTATION_BUFFER_RANGE = (20, 5)
    ORIENTATION_DEADBAND_RANGE = (1.2, 0.2)

    # ==========================================================================
    # ENVIRONMENTAL VERTICALS: Camera roll from architectural lines
    # ==========================================================================

    VERTICAL_MAX_ANGLE = 30.0           # Degrees from vertical to qualify
    VERTICAL_MIN_LENGTH_RATIO = 0.2     # Fraction of frame height
    VERTICAL_TOP_CANDIDATES = 5         # Longest lines used per frame
    VERTICAL_DECAY = 0.9                # Per-frame decay without evidence
    VERTICAL_PREVIOUS_WEIGHT = 0.7      # EMA weight of previous estimate

    # Hough transform parameters (OpenCV vision)
    HOUGH_THRESHOLD = 100
    HOUGH_MIN_LENGTH_RATIO = 0.3        # Fraction of frame height
    HOUGH_MAX_LINE_GAP = 20

    # ==========================================================================
    # OBJECT TILT: Picture frame corners -> tilt
    # ==========================================================================

    TILT_PARALLEL_TOLERANCE = 5.0       # Max edge disagreement to average

    # ==========================================================================
    # SENSOR FUSION: Code-level weights, not exposed in the UI
    # ==========================================================================

    FUSION_DEVICE_WEIGHT = 0.7
    FUSION_CAMERA_WEIGHT = 0.3

    # ==========================================================================
    # TEMPORAL STABILIZER: Per-frame tilt history
    # ==========================================================================

    STABILIZER_WINDOW = 10              # Measurements averaged per frame
    STABILIZER_WINDOW_RANGE = (20, 3)   # Smoothing level dial 1..10
    STABILIZER_MAX_TRACKED = 50         # Eviction triggers above this
    STABILIZER_RETAIN = 20              # Identities kept after eviction
    IDENTITY_BUCKET_SIZE = 50           # Pixels per identity bucket

    # ==========================================================================
    # FRAME DETECTION
    # ==========================================================================

    DETECTION_SENSITIVITY = 5           # 1-10 scale
    MIN_CONTOUR_AREA = 5000             # Pixels at sensitivity 5
    MAX_POLYGON_VERTICES = 10
    MIN_ASPECT_RATIO = 0.3
    MAX_ASPECT_RATIO = 3.0

    # Alignment status thresholds (degrees)
    PERFECT_TILT_THRESHOLD = 2.0
    SLIGHT_TILT_THRESHOLD = 5.0

    # ==========================================================================
    # ACQUISITION: CLI runner
    # ==========================================================================

    MIN_PROCESS_INTERVAL = 0.033        # Seconds between passes (~30 FPS max)
    CAPTURE_WIDTH = 1280
    CAPTURE_HEIGHT = 720
