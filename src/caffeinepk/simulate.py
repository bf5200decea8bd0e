# src/caffeinepk/simulate.py
import logging
import math
from typing import Sequence

import numpy as np

from . import config
from .types import DoseEvent, SamplePoint
from .solvers import level_curve
from .helpers import MS_PER_HOUR, hours_to_ms, minutes_to_ms
from .dosing import _validate_non_negative, _validate_positive

logger = logging.getLogger(__name__)

HYPOTHETICAL_DOSE_ID = "hypothetical"


def sample_times(start_ms: int, end_ms: int, step_ms: int,
                 max_points: int = config.MAX_CURVE_POINTS) -> np.ndarray:
    """
    Sample instants start, start+step, ... up to and including end (when aligned).

    If that would be more than max_points samples the step is widened so the count
    fits; start stays the first sample and nothing lands past end.
    """
    _validate_positive("step_ms", step_ms)
    if max_points < 2:
        raise ValueError(f"max_points must be >= 2 (got {max_points}).")
    if end_ms < start_ms:
        raise ValueError(f"end_ms must be >= start_ms (got {end_ms} < {start_ms}).")

    span = int(end_ms) - int(start_ms)
    step = int(step_ms)
    if span // step + 1 > max_points:
        widened = math.ceil(span / (max_points - 1))
        logger.debug("Widening sample step from %d ms to %d ms to stay under %d points",
                      step, widened, max_points)
        step = widened
    return int(start_ms) + step * np.arange(span // step + 1, dtype=np.int64)


def sample_arrays(doses: Sequence[DoseEvent], start_ms: int, end_ms: int, half_life_h: float,
                  step_ms: int = minutes_to_ms(config.PLOT_STEP_MINUTES),
                  max_points: int = config.MAX_CURVE_POINTS):
    """
    Sample the total level over [start_ms, end_ms].

    Returns:
      t     : array of sample instants (epoch ms, int64)
      level : array of levels (mg)
    """
    t = sample_times(start_ms, end_ms, step_ms, max_points)
    return t, level_curve(doses, t, half_life_h)


def sample_curve(doses: Sequence[DoseEvent], start_ms: int, end_ms: int, half_life_h: float,
                 step_ms: int = minutes_to_ms(config.PLOT_STEP_MINUTES),
                 max_points: int = config.MAX_CURVE_POINTS) -> list[SamplePoint]:
    """Same as sample_arrays, as a list of SamplePoint (strictly increasing in time)."""
    t, level = sample_arrays(doses, start_ms, end_ms, half_life_h, step_ms, max_points)
    return [SamplePoint(time_ms=int(ti), level_mg=float(li)) for ti, li in zip(t, level)]


def with_hypothetical(doses: Sequence[DoseEvent], candidate_mg: float,
                      candidate_at_ms: int) -> tuple[DoseEvent, ...]:
    """
    The committed history plus one not-yet-taken dose.
    The input sequence is left untouched; a new tuple is returned.
    """
    _validate_non_negative("candidate_mg", candidate_mg)
    synthetic = DoseEvent(id=HYPOTHETICAL_DOSE_ID, amount_mg=float(candidate_mg),
                          occurred_at_ms=int(candidate_at_ms))
    return tuple(doses) + (synthetic,)


def peak_after_dose(doses: Sequence[DoseEvent], candidate_mg: float, candidate_at_ms: int,
                    half_life_h: float, lookahead_hours: float = config.PEAK_LOOKAHEAD_HOURS,
                    step_ms: int = minutes_to_ms(config.SIMULATION_STEP_MINUTES)) -> float:
    """Highest level over [candidate_at, candidate_at + lookahead] if the candidate dose were taken."""
    _validate_positive("lookahead_hours", lookahead_hours)
    what_if = with_hypothetical(doses, candidate_mg, candidate_at_ms)
    _, level = sample_arrays(what_if, candidate_at_ms, candidate_at_ms + hours_to_ms(lookahead_hours),
                             half_life_h, step_ms)
    return float(np.max(level))


def max_level_in_sleep_window(doses: Sequence[DoseEvent], candidate_dose_mg: float,
                              candidate_dose_at_ms: int, sleep_at_ms: int, half_life_h: float,
                              sleep_window_hours: float = config.SLEEP_WINDOW_HOURS,
                              step_ms: int = minutes_to_ms(config.SIMULATION_STEP_MINUTES)) -> float:
    """
    Highest level across [sleep_at, sleep_at + sleep_window_hours] if the candidate
    dose were taken at candidate_dose_at_ms. Pass candidate_dose_mg=0 for the
    committed history alone.
    """
    _validate_positive("sleep_window_hours", sleep_window_hours)
    what_if = with_hypothetical(doses, candidate_dose_mg, candidate_dose_at_ms)
    _, level = sample_arrays(what_if, sleep_at_ms, sleep_at_ms + hours_to_ms(sleep_window_hours),
                             half_life_h, step_ms)
    return float(np.max(level))


def single_dose_curve(dose: DoseEvent, half_life_h: float,
                      step_ms: int = minutes_to_ms(config.PLOT_STEP_MINUTES),
                      horizon_hours: float = 12.0) -> list[SamplePoint]:
    """Decay curve of one logged dose on its own, from intake to +horizon_hours."""
    _validate_positive("horizon_hours", horizon_hours)
    return sample_curve([dose], dose.occurred_at_ms,
                        dose.occurred_at_ms + hours_to_ms(horizon_hours), half_life_h, step_ms)


def centered_window(center_ms: int, view_window_hours: float) -> tuple[int, int]:
    """(start_ms, end_ms) of a view_window_hours wide chart viewport centred on center_ms."""
    _validate_positive("view_window_hours", view_window_hours)
    half = int(round(view_window_hours / 2 * MS_PER_HOUR))
    return int(center_ms) - half, int(center_ms) + half
