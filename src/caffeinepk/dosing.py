# src/caffeinepk/dosing.py
from __future__ import annotations

import math
import uuid
from typing import Iterable, Optional, Sequence, Tuple

from . import config
from .helpers import minutes_to_ms
from .types import ConfigurationError, DoseEvent, ScheduleProfile


def dose_event(amount_mg: float, occurred_at_ms: int, id: Optional[str] = None) -> DoseEvent:
    """
    Create one logged intake.
    Example: 95 mg (a mug of filter coffee) at 08:15 -> dose_event(95, ms_of_0815)
    id defaults to a random hex uuid.
    """
    _validate_positive("amount_mg", amount_mg)
    return DoseEvent(id=id or uuid.uuid4().hex, amount_mg=float(amount_mg),
                     occurred_at_ms=int(occurred_at_ms))


def from_explicit_schedule(entries: Sequence[Tuple[int, float]]) -> tuple[DoseEvent, ...]:
    """
    Build a dose history from manual (occurred_at_ms, amount_mg) entries.
    Example: entries=[(t0, 80), (t0 + 3 * MS_PER_HOUR, 40)]
    """
    doses = [dose_event(amount_mg, occurred_at_ms) for occurred_at_ms, amount_mg in entries]
    doses.sort(key=lambda d: d.occurred_at_ms)
    return tuple(doses)


def doses_between(doses: Iterable[DoseEvent], start_ms: int, end_ms: int) -> list[DoseEvent]:
    """Doses with start_ms <= occurred_at_ms < end_ms, oldest first."""
    picked = [d for d in doses if start_ms <= d.occurred_at_ms < end_ms]
    picked.sort(key=lambda d: d.occurred_at_ms)
    return picked


def consumed_between(doses: Iterable[DoseEvent], start_ms: int, end_ms: int) -> float:
    """Total mg logged in [start_ms, end_ms)."""
    return float(sum(d.amount_mg for d in doses_between(doses, start_ms, end_ms)))


def last_dose_before(doses: Iterable[DoseEvent], end_ms: int,
                     start_ms: Optional[int] = None) -> Optional[DoseEvent]:
    """Most recent dose strictly before end_ms (and at or after start_ms, if given)."""
    last: Optional[DoseEvent] = None
    for d in doses:
        if d.occurred_at_ms >= end_ms:
            continue
        if start_ms is not None and d.occurred_at_ms < start_ms:
            continue
        if last is None or d.occurred_at_ms > last.occurred_at_ms:
            last = d
    return last


def round_to_increment(value: float, increment: float) -> float:
    _validate_positive("increment", increment)
    # Halves round up, not to even
    return float(math.floor(value / increment + 0.5)) * increment


def build_schedule_profile(optimal_daily_mg: float, wake_at_ms: int, sleep_at_ms: int, *,
                           min_dose_mg: float = config.MIN_DOSE_MG,
                           max_dose_mg: float = config.MAX_DOSE_MG,
                           min_gap_minutes: float = config.MIN_GAP_MINUTES,
                           peak_safety_fraction: float = config.PEAK_SAFETY_FRACTION,
                           sleep_threshold_mg: float = config.SLEEP_THRESHOLD_MG,
                           sleep_window_hours: float = config.SLEEP_WINDOW_HOURS,
                           dose_round_mg: float = 1.0) -> ScheduleProfile:
    """
    Assemble a ScheduleProfile from a daily budget and wake/sleep instants.

    The peak safety cap is derived as peak_safety_fraction * optimal_daily_mg
    (0.6 by default, so a 200 mg budget never lets the level exceed 120 mg).
    wake/sleep are passed through as given; the recommender normalizes
    a cycle that crosses midnight.
    """
    _validate_positive("peak_safety_fraction", peak_safety_fraction)
    profile = ScheduleProfile(
        optimal_daily_mg=float(optimal_daily_mg),
        wake_at_ms=int(wake_at_ms),
        sleep_at_ms=int(sleep_at_ms),
        min_dose_mg=float(min_dose_mg),
        max_dose_mg=float(max_dose_mg),
        min_gap_between_doses_ms=minutes_to_ms(min_gap_minutes),
        peak_safety_cap_mg=float(peak_safety_fraction) * float(optimal_daily_mg),
        sleep_threshold_mg=float(sleep_threshold_mg),
        sleep_window_hours=float(sleep_window_hours),
        dose_round_mg=float(dose_round_mg),
    )
    validate_schedule_profile(profile)
    return profile


def validate_schedule_profile(profile: ScheduleProfile) -> None:
    """Reject a profile the recommender cannot run with. Nothing is clamped."""
    _validate_positive("optimal_daily_mg", profile.optimal_daily_mg)
    _validate_positive("min_dose_mg", profile.min_dose_mg)
    _validate_positive("max_dose_mg", profile.max_dose_mg)
    if profile.max_dose_mg < profile.min_dose_mg:
        raise ConfigurationError(
            f"max_dose_mg must be >= min_dose_mg (got {profile.max_dose_mg} < {profile.min_dose_mg}).")
    _validate_non_negative("min_gap_between_doses_ms", profile.min_gap_between_doses_ms)
    _validate_positive("peak_safety_cap_mg", profile.peak_safety_cap_mg)
    _validate_positive("sleep_threshold_mg", profile.sleep_threshold_mg)
    _validate_positive("sleep_window_hours", profile.sleep_window_hours)
    _validate_positive("dose_round_mg", profile.dose_round_mg)


# --------------------------
# Small input validators
# --------------------------
def _validate_positive(name: str, x: float) -> None:
    if not (x > 0) or math.isinf(x):
        raise ConfigurationError(f"{name} must be > 0 (got {x}).")

def _validate_non_negative(name: str, x: float) -> None:
    if not (x >= 0):
        raise ConfigurationError(f"{name} must be >= 0 (got {x}).")

def _validate_choice(name: str, x: str, choices) -> None:
    if x not in choices:
        raise ConfigurationError(f"{name} must be one of {sorted(choices)} (got {x!r}).")
