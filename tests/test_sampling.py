from datetime import datetime, timezone

import numpy as np
import pytest

from caffeinepk.types import ConfigurationError, SamplePoint
from caffeinepk.dosing import dose_event, from_explicit_schedule
from caffeinepk.helpers import MS_PER_HOUR, MS_PER_MINUTE, datetime_from_ms, ms_from_datetime
from caffeinepk.solvers import level_at_time
from caffeinepk.simulate import (
    sample_times, sample_arrays, sample_curve, with_hypothetical,
    peak_after_dose, max_level_in_sleep_window, single_dose_curve, centered_window,
)
from caffeinepk.metrics import (
    cmax, cmax_tmax, peak_in_window, sleep_impact_status, limit_status, sleep_status,
)


T0 = 1_700_000_000_000
STEP_15 = 15 * MS_PER_MINUTE


def test_sampler_bounds():
    """First sample is start; nothing lands more than one step past end."""
    doses = [dose_event(100, T0)]
    start, end = T0 - MS_PER_HOUR, T0 + 10 * MS_PER_HOUR + 7 * MS_PER_MINUTE
    curve = sample_curve(doses, start, end, 5.5, STEP_15)

    assert curve[0].time_ms == start
    assert all(p.time_ms <= end + STEP_15 for p in curve)
    times = [p.time_ms for p in curve]
    assert all(b > a for a, b in zip(times, times[1:]))
    assert all(isinstance(p, SamplePoint) for p in curve)


def test_sampler_includes_aligned_end():
    t = sample_times(T0, T0 + 2 * MS_PER_HOUR, STEP_15)
    assert len(t) == 9
    assert t[0] == T0 and t[-1] == T0 + 2 * MS_PER_HOUR


def test_sampler_is_restartable():
    doses = [dose_event(100, T0)]
    first = sample_curve(doses, T0, T0 + 6 * MS_PER_HOUR, 5.5, STEP_15)
    second = sample_curve(doses, T0, T0 + 6 * MS_PER_HOUR, 5.5, STEP_15)
    assert first == second


def test_sampler_caps_point_count():
    """A week at 1 ms resolution would be ~6e8 points; the step widens instead."""
    start, end = T0, T0 + 7 * 24 * MS_PER_HOUR
    t = sample_times(start, end, 1)
    assert len(t) <= 5000
    assert t[0] == start
    assert t[-1] <= end

    t_small = sample_times(start, end, MS_PER_HOUR, max_points=10)
    assert len(t_small) <= 10
    assert t_small[0] == start


def test_sampler_arguments():
    with pytest.raises(ConfigurationError):
        sample_times(T0, T0 + MS_PER_HOUR, 0)
    with pytest.raises(ValueError):
        sample_times(T0 + MS_PER_HOUR, T0, STEP_15)
    assert list(sample_times(T0, T0, STEP_15)) == [T0]


def test_sample_arrays_agree_with_evaluator():
    doses = from_explicit_schedule([(T0, 80), (T0 + 3 * MS_PER_HOUR, 40)])
    t, level = sample_arrays(doses, T0, T0 + 8 * MS_PER_HOUR, 5.5, STEP_15)
    assert len(t) == len(level)
    for ti, li in zip(t[::5], level[::5]):
        assert np.isclose(li, level_at_time(doses, int(ti), 5.5))


def test_peak_in_window_single_dose_is_at_intake():
    doses = [dose_event(100, T0)]
    peak = peak_in_window(doses, T0 - 2 * MS_PER_HOUR, T0 + 6 * MS_PER_HOUR, 5.0, STEP_15)
    assert peak.time_ms == T0
    assert np.isclose(peak.level_mg, 100.0)


def test_peak_ties_resolve_to_earliest():
    """With no doses every sample is 0, so the earliest sample wins."""
    peak = peak_in_window([], T0, T0 + 4 * MS_PER_HOUR, 5.0, STEP_15)
    assert peak.time_ms == T0
    assert peak.level_mg == 0.0

    t = np.array([0, 1, 2, 3])
    level = np.array([1.0, 3.0, 3.0, 2.0])
    assert cmax_tmax(t, level) == (3.0, 1)
    assert cmax(level) == 3.0


def test_what_if_does_not_mutate_history():
    doses = [dose_event(100, T0)]
    snapshot = list(doses)
    what_if = with_hypothetical(doses, 50, T0 + MS_PER_HOUR)

    assert doses == snapshot
    assert len(what_if) == 2
    assert what_if[-1].amount_mg == 50.0
    assert what_if[-1].occurred_at_ms == T0 + MS_PER_HOUR


def test_max_level_in_sleep_window_adds_candidate():
    doses = [dose_event(100, T0)]
    sleep_at = T0 + 12 * MS_PER_HOUR

    committed = max_level_in_sleep_window(doses, 0, T0, sleep_at, 5.0, 6.0)
    assert np.isclose(committed, level_at_time(doses, sleep_at, 5.0))

    with_candidate = max_level_in_sleep_window(doses, 60, T0 + 4 * MS_PER_HOUR, sleep_at, 5.0, 6.0)
    expected = level_at_time(with_hypothetical(doses, 60, T0 + 4 * MS_PER_HOUR), sleep_at, 5.0)
    # All doses precede the window, so the window maximum is at bedtime
    assert np.isclose(with_candidate, expected)
    assert with_candidate > committed


def test_max_level_in_sleep_window_sees_dose_inside_window():
    sleep_at = T0
    level = max_level_in_sleep_window([], 40, T0 + 2 * MS_PER_HOUR, sleep_at, 5.0, 6.0)
    assert np.isclose(level, 40.0)


def test_peak_after_dose_includes_history():
    doses = [dose_event(100, T0)]
    at = T0 + 5 * MS_PER_HOUR
    peak = peak_after_dose(doses, 30, at, 5.0)
    assert np.isclose(peak, 50.0 + 30.0)


def test_single_dose_curve():
    dose = dose_event(100, T0)
    curve = single_dose_curve(dose, 5.0, step_ms=30 * MS_PER_MINUTE)
    assert curve[0].time_ms == T0 and np.isclose(curve[0].level_mg, 100.0)
    assert curve[-1].time_ms == T0 + 12 * MS_PER_HOUR
    assert np.isclose(curve[-1].level_mg, 100.0 * 0.5 ** (12 / 5))


def test_centered_window():
    assert centered_window(T0, 12) == (T0 - 6 * MS_PER_HOUR, T0 + 6 * MS_PER_HOUR)


def test_sleep_impact_status():
    assert sleep_impact_status(10.0) == "safe"
    assert sleep_impact_status(29.9) == "safe"
    assert sleep_impact_status(30.0) == "warning"
    assert sleep_impact_status(40.0) == "warning"
    assert sleep_impact_status(40.1) == "danger"


def test_limit_status():
    assert limit_status(100.0, 200.0) == "safe"
    assert limit_status(180.0, 200.0) == "warning"
    assert limit_status(200.0, 200.0) == "warning"
    assert limit_status(201.0, 200.0) == "danger"


def test_sleep_status():
    assert sleep_status(30.0, 30.0) == "safe"
    assert sleep_status(41.0, 30.0) == "warning"
    assert sleep_status(43.0, 30.0) == "danger"


def test_datetime_boundary_conversion():
    dt = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    ms = ms_from_datetime(dt)
    assert ms % MS_PER_MINUTE == 0
    assert datetime_from_ms(ms) == dt
    with pytest.raises(ValueError):
        ms_from_datetime(datetime(2024, 3, 1, 8, 30))
