"""Tests for the OrientationSmoother rolling average / EMA / deadband stages."""

from __future__ import annotations

import math

import pytest

from framelevel.core.imu.orientation_smoother import (
    OrientationSample,
    OrientationSmoother,
    parse_sample,
)
from framelevel.utils.config_sections import OrientationSmootherConfig


@pytest.fixture()
def smoother() -> OrientationSmoother:
    return OrientationSmoother(OrientationSmootherConfig())


def test_first_sample_initializes_ema_without_blending(smoother: OrientationSmoother) -> None:
    smoother.ingest(OrientationSample(pitch=4.0, roll=8.0))

    assert smoother.ema == pytest.approx((4.0, 8.0))
    assert smoother.stable == pytest.approx((4.0, 8.0))
    assert smoother.get_tilt() == pytest.approx(8.0)


def test_constant_samples_converge(smoother: OrientationSmoother) -> None:
    for _ in range(50):
        smoother.ingest({"pitch": 10.0, "roll": -3.0})

    assert smoother.get_tilt() == pytest.approx(-3.0)


def test_alternating_noise_stays_within_deadband(smoother: OrientationSmoother) -> None:
    midpoint = 6.0
    readings = []
    for i in range(200):
        noise = 0.1 if i % 2 == 0 else -0.1
        smoother.ingest(OrientationSample(pitch=0.0, roll=midpoint + noise))
        readings.append(smoother.get_tilt())

    # After the first reading the visible value never moves again
    assert len(set(readings[1:])) == 1
    assert abs(readings[-1] - midpoint) <= smoother.deadband_size


def test_rolling_buffer_is_bounded(smoother: OrientationSmoother) -> None:
    for i in range(25):
        smoother.ingest(OrientationSample(pitch=0.0, roll=float(i)))

    assert len(smoother.buffer) == 10
    assert smoother.buffer[0] == (0.0, 15.0)
    assert smoother.buffer[-1] == (0.0, 24.0)


def test_ema_blends_rolling_average(smoother: OrientationSmoother) -> None:
    smoother.ingest(OrientationSample(0.0, 0.0))
    smoother.ingest(OrientationSample(0.0, 10.0))

    # Rolling average is 5.0; EMA = 0.15 * 5 + 0.85 * 0
    assert smoother.ema[1] == pytest.approx(0.75)
    # 0.75 exceeds the 0.5 deadband so the stable value follows
    assert smoother.stable[1] == pytest.approx(0.75)


def test_deadband_holds_small_changes(smoother: OrientationSmoother) -> None:
    smoother.ingest(OrientationSample(0.0, 0.0))
    smoother.ingest(OrientationSample(0.0, 4.0))

    # EMA moves to 0.3, inside the deadband
    assert smoother.ema[1] == pytest.approx(0.3)
    assert smoother.stable[1] == 0.0


@pytest.mark.parametrize("sample", [None, {}, {"pitch": 1.0}, {"pitch": None, "roll": 2.0},
                                    {"pitch": "a", "roll": 1.0}, {"pitch": float("nan"), "roll": 1.0}])
def test_invalid_samples_are_ignored(smoother: OrientationSmoother, sample) -> None:
    smoother.ingest(sample)

    assert len(smoother.buffer) == 0
    assert smoother.get_tilt() == 0.0


def test_browser_style_keys_are_accepted() -> None:
    assert parse_sample({"beta": 12.0, "gamma": -4.0}) == (12.0, -4.0)


def test_tilt_scaled_when_device_far_from_upright(smoother: OrientationSmoother) -> None:
    smoother.ingest(OrientationSample(pitch=60.0, roll=10.0))

    assert smoother.get_tilt() == pytest.approx(10.0 * abs(math.cos(math.radians(60.0))))


def test_reset_clears_state(smoother: OrientationSmoother) -> None:
    smoother.ingest(OrientationSample(5.0, 5.0))
    smoother.reset()

    assert len(smoother.buffer) == 0
    assert smoother.ema == (0.0, 0.0)
    assert smoother.stable == (0.0, 0.0)

    # Next sample seeds the EMA again
    smoother.ingest(OrientationSample(0.0, 2.0))
    assert smoother.ema == pytest.approx((0.0, 2.0))


@pytest.mark.parametrize(
    "level, factor, buffer_size, deadband",
    [
        (1, 0.05, 20, 1.2),
        (10, 0.4, 5, 0.2),
        (0, 0.05, 20, 1.2),
        (15, 0.4, 5, 0.2),
        (4, 0.1666667, 15, 0.8666667),
    ],
)
def test_configure_maps_level(smoother: OrientationSmoother, level, factor, buffer_size, deadband) -> None:
    smoother.configure(level)

    assert smoother.smoothing_factor == pytest.approx(factor, abs=1e-6)
    assert smoother.buffer_size == buffer_size
    assert smoother.buffer.maxlen == buffer_size
    assert smoother.deadband_size == pytest.approx(deadband, abs=1e-6)


def test_configure_keeps_most_recent_samples(smoother: OrientationSmoother) -> None:
    for i in range(10):
        smoother.ingest(OrientationSample(0.0, float(i)))

    smoother.configure(10)

    assert list(smoother.buffer) == [(0.0, float(i)) for i in range(5, 10)]


def test_stable_and_smoothed_readouts_differ_inside_deadband(smoother: OrientationSmoother) -> None:
    smoother.ingest(OrientationSample(pitch=4.0, roll=8.0))
    smoother.ingest(OrientationSample(pitch=4.0, roll=8.2))

    # rolling average roll 8.1 -> EMA 0.15*8.1 + 0.85*8.0
    smoothed = smoother.get_smoothed_orientation()
    assert smoothed.pitch == pytest.approx(4.0)
    assert smoothed.roll == pytest.approx(8.015)
    assert smoother.get_stable_orientation() == OrientationSample(pitch=4.0, roll=8.0)


@pytest.mark.parametrize("factor, expected", [(0.0, 0.01), (-2.0, 0.01), (0.3, 0.3), (5.0, 1.0)])
def test_set_smoothing_factor_is_clamped(smoother: OrientationSmoother, factor, expected) -> None:
    smoother.set_smoothing_factor(factor)
    assert smoother.smoothing_factor == pytest.approx(expected)


def test_full_smoothing_factor_follows_rolling_average(smoother: OrientationSmoother) -> None:
    smoother.set_smoothing_factor(1.0)
    smoother.ingest(OrientationSample(0.0, 0.0))
    smoother.ingest(OrientationSample(0.0, 10.0))

    assert smoother.get_smoothed_orientation().roll == pytest.approx(5.0)


def test_set_deadband_size(smoother: OrientationSmoother) -> None:
    smoother.set_deadband_size(-1.0)
    assert smoother.deadband_size == 0.0

    # Without a deadband every EMA change reaches the stable value
    smoother.ingest(OrientationSample(0.0, 0.0))
    smoother.ingest(OrientationSample(0.0, 0.2))
    assert smoother.get_stable_orientation().roll == pytest.approx(smoother.ema[1])
    assert smoother.get_stable_orientation().roll > 0.0
