"""Tests for camera tilt estimation from environmental verticals."""

from __future__ import annotations

import math

import pytest

from framelevel.core.vision.geometry import LineSegment
from framelevel.core.vision.vertical_estimator import EnvironmentalVerticalEstimator
from framelevel.utils.config_sections import VerticalEstimatorConfig

FRAME_HEIGHT = 480.0


def leaning_segment(angle_deg: float, length: float, x: float = 320.0) -> LineSegment:
    """Segment from top to bottom leaning `angle_deg` clockwise from vertical."""
    theta = math.radians(angle_deg)
    dx = -math.sin(theta) * length
    dy = math.cos(theta) * length
    return LineSegment(x, 20.0, x + dx, 20.0 + dy)


@pytest.fixture()
def estimator() -> EnvironmentalVerticalEstimator:
    return EnvironmentalVerticalEstimator(VerticalEstimatorConfig())


def test_segment_angle_helper() -> None:
    assert leaning_segment(4.0, 300).angle_from_vertical == pytest.approx(4.0)
    assert leaning_segment(-7.0, 300).angle_from_vertical == pytest.approx(-7.0)


def test_first_measurement_is_taken_directly(estimator: EnvironmentalVerticalEstimator) -> None:
    tilt = estimator.update([leaning_segment(3.0, 300)], FRAME_HEIGHT)

    assert tilt == pytest.approx(3.0)
    assert estimator.get_camera_tilt() == pytest.approx(3.0)


def test_subsequent_measurements_are_blended(estimator: EnvironmentalVerticalEstimator) -> None:
    estimator.update([leaning_segment(3.0, 300)], FRAME_HEIGHT)
    tilt = estimator.update([leaning_segment(-2.0, 300)], FRAME_HEIGHT)

    assert tilt == pytest.approx(0.7 * 3.0 + 0.3 * -2.0)


def test_segment_direction_does_not_matter(estimator: EnvironmentalVerticalEstimator) -> None:
    segment = leaning_segment(5.0, 300)
    reversed_segment = LineSegment(segment.x2, segment.y2, segment.x1, segment.y1)

    assert estimator.update([reversed_segment], FRAME_HEIGHT) == pytest.approx(5.0)


def test_filters_short_and_non_vertical_segments(estimator: EnvironmentalVerticalEstimator) -> None:
    segments = [
        leaning_segment(10.0, 50),   # too short (< 20% of 480)
        leaning_segment(45.0, 400),  # too far from vertical
        LineSegment(0, 100, 400, 100),  # horizontal
    ]

    assert estimator.update(segments, FRAME_HEIGHT) == 0.0
    assert estimator.verticals == []


def test_weighted_by_length_and_limited_to_top_five(estimator: EnvironmentalVerticalEstimator) -> None:
    segments = [leaning_segment(2.0, 400), leaning_segment(8.0, 200)]
    segments += [leaning_segment(-20.0, 100 + i) for i in range(5)]  # shorter, dropped after top 5

    tilt = estimator.update(segments, FRAME_HEIGHT)

    top = sorted(segments, key=lambda s: s.length, reverse=True)[:5]
    expected = sum(s.angle_from_vertical * s.length for s in top) / sum(s.length for s in top)
    assert tilt == pytest.approx(expected)
    assert len(estimator.verticals) == 5
    assert estimator.verticals[0].length == pytest.approx(400)


def test_no_evidence_decays_monotonically_toward_zero(estimator: EnvironmentalVerticalEstimator) -> None:
    estimator.update([leaning_segment(6.0, 300)], FRAME_HEIGHT)

    previous = estimator.get_camera_tilt()
    for _ in range(60):
        tilt = estimator.update([], FRAME_HEIGHT)
        assert 0.0 <= tilt < previous
        previous = tilt

    assert previous == pytest.approx(6.0 * 0.9 ** 60)


def test_negative_tilt_decay_never_crosses_zero(estimator: EnvironmentalVerticalEstimator) -> None:
    estimator.update([leaning_segment(-4.0, 300)], FRAME_HEIGHT)

    for _ in range(30):
        tilt = estimator.update([], FRAME_HEIGHT)
        assert tilt <= 0.0


def test_no_evidence_without_history_stays_zero(estimator: EnvironmentalVerticalEstimator) -> None:
    assert estimator.update([], FRAME_HEIGHT) == 0.0
    assert estimator.update(None, FRAME_HEIGHT) == 0.0


def test_invalid_frame_height_counts_as_no_evidence(estimator: EnvironmentalVerticalEstimator) -> None:
    estimator.update([leaning_segment(5.0, 300)], FRAME_HEIGHT)

    assert estimator.update([leaning_segment(5.0, 300)], 0) == pytest.approx(4.5)


def test_reset(estimator: EnvironmentalVerticalEstimator) -> None:
    estimator.update([leaning_segment(5.0, 300)], FRAME_HEIGHT)
    estimator.reset()

    assert estimator.get_camera_tilt() == 0.0
    assert estimator.update([leaning_segment(-1.0, 300)], FRAME_HEIGHT) == pytest.approx(-1.0)
