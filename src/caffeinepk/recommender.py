# src/caffeinepk/recommender.py
"""
Next-dose recommender.

Given "now", a ScheduleProfile and the dose history, decide whether another dose
fits today and, if so, how much and when. The safety constraints are defined by
simulation (peak over the next 24 h, peak across the sleep window), so the
decision is a forward grid search rather than a closed-form solve:

  1. normalize the wake/sleep cycle and derive the cutoff (sleep - sleep window)
  2. earliest candidate = last in-cycle dose + min gap, or wake + grace period
  3. hard stop when past the cutoff or the remaining budget is below min dose
  4. target = remaining budget spread over 3 h slots, clamped to [min, max] dose
  5. step the dose down from the target; for each, scan candidate times and take
     the first one that passes both the peak cap and the sleep threshold

The cycle is always [sleep - 24 h, sleep): the last-dose lookup and today's
consumption both use it.
"""
import logging
import math
from typing import Optional, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from . import config
from .types import (ConfigurationError, DecayProfile, DoseEvent, Recommendation,
                    RecommendationStatus, ScheduleProfile)
from .models.one_compartment import decay_fraction
from .solvers import level_curve
from .simulate import sample_times
from .helpers import MS_PER_DAY, MS_PER_HOUR, hours_between, hours_to_ms, minutes_to_ms
from .dosing import (_validate_positive, consumed_between, last_dose_before, round_to_increment,
                     validate_schedule_profile)

logger = logging.getLogger(__name__)


def normalize_cycle(wake_at_ms: int, sleep_at_ms: int,
                    now_ms: Optional[int] = None) -> tuple[int, int]:
    """
    Put wake and sleep into one waking period with sleep strictly after wake.

    A sleep instant earlier than the wake instant means bedtime is past midnight.
    If now is still before that bedtime the caller is up after midnight, so the
    waking period started the previous day and wake moves back. Otherwise (or
    without a now) bedtime moves to its next occurrence.
    """
    wake, sleep = int(wake_at_ms), int(sleep_at_ms)
    if sleep < wake:
        if now_ms is not None and now_ms < sleep:
            wake -= MS_PER_DAY
        else:
            sleep += MS_PER_DAY
    if sleep <= wake:
        raise ConfigurationError(f"sleep_at_ms must be after wake_at_ms (got wake={wake}, sleep={sleep}).")
    if sleep - wake > MS_PER_DAY:
        raise ConfigurationError(
            f"wake-to-sleep span must be at most 24 h (got {hours_between(wake, sleep):.2f} h).")
    return wake, sleep


def recommend_next_dose(now_ms: int, profile: ScheduleProfile, doses: Sequence[DoseEvent],
                        decay: DecayProfile = DecayProfile(),
                        consumed_today_mg: Optional[float] = None,
                        step_ms: int = minutes_to_ms(config.SIMULATION_STEP_MINUTES),
                        *,
                        lookahead_hours: float = config.PEAK_LOOKAHEAD_HOURS,
                        dose_decrement_mg: float = config.DOSE_DECREMENT_MG,
                        slot_hours: float = config.DOSE_SLOT_HOURS,
                        wake_grace_minutes: float = config.WAKE_GRACE_MINUTES) -> Recommendation:
    """
    Decide the next dose for today.

    Parameters
    ----------
    now_ms : int
        Current instant (epoch ms).
    profile : ScheduleProfile
        Budget, wake/sleep instants, dose bounds and safety caps.
    doses : Sequence[DoseEvent]
        Snapshot of the committed history; never modified.
    decay : DecayProfile
        Elimination half-life used for every simulation in this call.
    consumed_today_mg : float, optional
        Amount already taken today. Defaults to the sum of doses in the current cycle.
    step_ms : int
        Grid resolution for candidate times and for the safety simulations.

    Returns
    -------
    Recommendation
        RECOMMENDED with dose, time and window end (= cutoff), or NO_MORE_DOSES_TODAY.
    """
    validate_schedule_profile(profile)
    _validate_positive("step_ms", step_ms)
    _validate_positive("lookahead_hours", lookahead_hours)
    _validate_positive("dose_decrement_mg", dose_decrement_mg)
    _validate_positive("slot_hours", slot_hours)

    # 1) Normalize the cycle and find the cutoff
    wake_ms, sleep_ms = normalize_cycle(profile.wake_at_ms, profile.sleep_at_ms, now_ms)
    cutoff_ms = sleep_ms - hours_to_ms(profile.sleep_window_hours)
    cycle_start_ms = sleep_ms - MS_PER_DAY

    # 2) Earliest candidate
    last = last_dose_before(doses, sleep_ms, start_ms=cycle_start_ms)
    if last is not None:
        earliest_ms = max(now_ms, last.occurred_at_ms + profile.min_gap_between_doses_ms)
    else:
        earliest_ms = max(now_ms, wake_ms + minutes_to_ms(wake_grace_minutes))

    # 3) Hard stops
    if consumed_today_mg is None:
        consumed_today_mg = consumed_between(doses, cycle_start_ms, sleep_ms)
    remaining_mg = profile.optimal_daily_mg - consumed_today_mg
    logger.debug("Cycle wake=%d sleep=%d cutoff=%d earliest=%d remaining=%.1f mg",
                 wake_ms, sleep_ms, cutoff_ms, earliest_ms, remaining_mg)
    if earliest_ms > cutoff_ms:
        logger.debug("No dose: earliest candidate is past the cutoff")
        return _no_more(cutoff_ms)
    if remaining_mg < profile.min_dose_mg:
        logger.debug("No dose: %.1f mg left is below the %.1f mg minimum", remaining_mg, profile.min_dose_mg)
        return _no_more(cutoff_ms)

    # 4) Target dose: remaining budget over the slots left before cutoff
    anchor_ms = last.occurred_at_ms if last is not None else max(now_ms, wake_ms)
    slots = max(1, math.floor(hours_between(anchor_ms, cutoff_ms) / slot_hours))
    target_mg = min(max(remaining_mg / slots, profile.min_dose_mg), profile.max_dose_mg)
    logger.debug("Target %.1f mg (%d slots)", target_mg, slots)

    # 5) Search dose x time
    found = _search(doses, earliest_ms, cutoff_ms, sleep_ms, target_mg, profile, decay.half_life_h,
                    step_ms, lookahead_hours, dose_decrement_mg)
    if found is None:
        logger.debug("No dose: no admissible (dose, time) pair on the grid")
        return _no_more(cutoff_ms)

    dose_mg, dose_at_ms = found
    amount = round_to_increment(dose_mg, profile.dose_round_mg)
    amount = min(max(amount, profile.min_dose_mg), profile.max_dose_mg)
    logger.debug("Recommend %.1f mg at %d", amount, dose_at_ms)
    return Recommendation(
        status=RecommendationStatus.RECOMMENDED,
        dose_amount_mg=amount,
        dose_at_ms=dose_at_ms,
        window_end_ms=cutoff_ms,
        cutoff_ms=cutoff_ms,
    )


def _no_more(cutoff_ms: int) -> Recommendation:
    return Recommendation(status=RecommendationStatus.NO_MORE_DOSES_TODAY, cutoff_ms=cutoff_ms)


def _search(doses: Sequence[DoseEvent], earliest_ms: int, cutoff_ms: int, sleep_ms: int,
            target_mg: float, profile: ScheduleProfile, half_life_h: float, step_ms: int,
            lookahead_hours: float, dose_decrement_mg: float) -> Optional[tuple[float, int]]:
    """
    First admissible (dose, time) on the grid, or None.

    Equivalent to re-simulating history + candidate for every (dose, t) pair: the
    history curve is sampled once over every instant any candidate's look-ahead
    touches, and the candidate's own contribution is dose * a fixed decay kernel,
    because each look-ahead window is sampled on the same step from t.
    """
    step = int(step_ms)
    candidates = earliest_ms + step * np.arange((cutoff_ms - earliest_ms) // step + 1, dtype=np.int64)
    n_lookahead = hours_to_ms(lookahead_hours) // step + 1

    # Peak check: history over [earliest, last candidate + look-ahead]
    grid = earliest_ms + step * np.arange(len(candidates) + n_lookahead - 1, dtype=np.int64)
    history = level_curve(doses, grid, half_life_h)
    history_windows = sliding_window_view(history, n_lookahead)   # (n_candidates, n_lookahead)
    offsets = step * np.arange(n_lookahead, dtype=np.int64)
    peak_kernel = decay_fraction(offsets.astype(float) / MS_PER_HOUR, half_life_h)

    # Sleep check: history over the sleep window, plus each candidate's decay into it
    sleep_grid = sample_times(sleep_ms, sleep_ms + hours_to_ms(profile.sleep_window_hours), step)
    sleep_history = level_curve(doses, sleep_grid, half_life_h)
    sleep_kernel = decay_fraction(
        (sleep_grid.astype(float)[None, :] - candidates.astype(float)[:, None]) / MS_PER_HOUR,
        half_life_h)                                                 # (n_candidates, n_sleep)

    dose_mg = target_mg
    while dose_mg >= profile.min_dose_mg:
        peaks = np.max(history_windows + dose_mg * peak_kernel, axis=1)
        sleep_peaks = np.max(sleep_history + dose_mg * sleep_kernel, axis=1)
        admissible = (peaks <= profile.peak_safety_cap_mg) & (sleep_peaks < profile.sleep_threshold_mg)
        if admissible.any():
            idx = int(np.argmax(admissible))
            return float(dose_mg), int(candidates[idx])
        dose_mg -= dose_decrement_mg
    return None
