# src/caffeinepk/metrics.py
from typing import Sequence, Tuple

import numpy as np

from . import config
from .types import DoseEvent, PeakSample, Status
from .simulate import sample_arrays
from .helpers import minutes_to_ms


def cmax(level: np.ndarray) -> float:
    """Highest sampled level (mg)."""
    return float(np.max(level))


def cmax_tmax(t: np.ndarray, level: np.ndarray) -> Tuple[float, int]:
    """Return peak level (mg) and the earliest instant (ms) it occurs at."""
    idx = int(np.argmax(level))  # first occurrence on ties
    return float(level[idx]), int(t[idx])


def peak_in_window(doses: Sequence[DoseEvent], start_ms: int, end_ms: int, half_life_h: float,
                   step_ms: int = minutes_to_ms(config.SIMULATION_STEP_MINUTES)) -> PeakSample:
    """
    Sample [start_ms, end_ms] and return the maximum level and its time.
    Ties resolve to the earliest timestamp reaching the maximum.
    """
    t, level = sample_arrays(doses, start_ms, end_ms, half_life_h, step_ms)
    peak_mg, peak_ms = cmax_tmax(t, level)
    return PeakSample(time_ms=peak_ms, level_mg=peak_mg)


# --------------------------
# Status classifiers
# --------------------------
def sleep_impact_status(max_level_in_window_mg: float,
                        threshold_mg: float = config.SLEEP_THRESHOLD_MG,
                        warning_mg: float = config.SLEEP_WARNING_MG) -> Status:
    """
    Classify the peak level inside the sleep window.
    < 30 mg safe, 30..40 mg warning, > 40 mg danger (defaults).
    """
    if max_level_in_window_mg > warning_mg:
        return "danger"
    if max_level_in_window_mg >= threshold_mg:
        return "warning"
    return "safe"


def limit_status(peak_mg: float, optimal_daily_mg: float,
                 warning_percent: float = config.LIMIT_WARNING_PERCENT) -> Status:
    """How close a peak is to the daily budget: > 100 % danger, >= 90 % warning."""
    if optimal_daily_mg <= 0:
        raise ValueError(f"optimal_daily_mg must be > 0 (got {optimal_daily_mg}).")
    percentage = peak_mg / optimal_daily_mg * 100
    if percentage > 100:
        return "danger"
    if percentage >= warning_percent:
        return "warning"
    return "safe"


def sleep_status(current_mg: float, sleep_threshold_mg: float,
                 warning_factor: float = config.SLEEP_STATUS_WARNING_FACTOR) -> Status:
    """Level now vs. the sleep threshold: at/below safe, up to 1.4x warning, above danger."""
    if current_mg <= sleep_threshold_mg:
        return "safe"
    if current_mg <= sleep_threshold_mg * warning_factor:
        return "warning"
    return "danger"
