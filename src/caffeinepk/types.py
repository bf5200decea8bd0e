# src/caffeinepk/types.py
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional

from . import config

# Instants are integer MILLISECONDS since the epoch; durations are HOURS unless suffixed _ms.
Status = Literal["safe", "warning", "danger"]


class ConfigurationError(ValueError):
    """Raised when profile or model parameters are invalid (caller bug, never clamped)."""


@dataclass(frozen=True)
class DoseEvent:
    """
    A single logged caffeine intake.

    id             : opaque unique identifier, owned by whoever logged the dose
    amount_mg      : caffeine in the dose, milligrams
    occurred_at_ms : when it was taken (epoch milliseconds)
    """
    id: str
    amount_mg: float
    occurred_at_ms: int


@dataclass(frozen=True)
class DecayProfile:
    """Elimination parameters shared by every computation in a call."""
    half_life_h: float = config.HALF_LIFE_HOURS

    def __post_init__(self):
        if not (self.half_life_h > 0):
            raise ConfigurationError(f"half_life_h must be > 0 (got {self.half_life_h}).")


@dataclass(frozen=True)
class SamplePoint:
    time_ms: int
    level_mg: float


@dataclass(frozen=True)
class PeakSample:
    time_ms: int
    level_mg: float


@dataclass(frozen=True)
class ScheduleProfile:
    """
    Constraint set for the dose recommender.

    optimal_daily_mg         : soft daily budget
    wake_at_ms / sleep_at_ms : wake and bed instants for the current cycle
    min_dose_mg / max_dose_mg: bounds on a recommended dose
    min_gap_between_doses_ms : spacing required after the last dose
    peak_safety_cap_mg       : max level allowed in the 24 h after a new dose
    sleep_threshold_mg       : level regarded as "undisrupted" during sleep
    sleep_window_hours       : length of the window after bedtime kept under threshold;
                               also how long before bedtime dosing stops
    dose_round_mg            : increment a recommended dose is rounded to
    """
    optimal_daily_mg: float
    wake_at_ms: int
    sleep_at_ms: int
    min_dose_mg: float
    max_dose_mg: float
    min_gap_between_doses_ms: int
    peak_safety_cap_mg: float
    sleep_threshold_mg: float
    sleep_window_hours: float
    dose_round_mg: float = 1.0


class RecommendationStatus(str, Enum):
    RECOMMENDED = "RECOMMENDED"
    NO_MORE_DOSES_TODAY = "NO_MORE_DOSES_TODAY"


@dataclass(frozen=True)
class Recommendation:
    """
    Outcome of one recommender decision.

    dose_amount_mg, dose_at_ms and window_end_ms are only set for RECOMMENDED;
    [dose_at_ms, window_end_ms] is the range a UI can show as the best time.
    cutoff_ms is the last instant a dose could have been recommended today.
    """
    status: RecommendationStatus
    dose_amount_mg: Optional[float] = None
    dose_at_ms: Optional[int] = None
    window_end_ms: Optional[int] = None
    cutoff_ms: Optional[int] = None

    @property
    def recommended(self) -> bool:
        return self.status is RecommendationStatus.RECOMMENDED
