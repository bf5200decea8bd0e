# src/caffeinepk/solvers.py
import math
from typing import Iterable, Sequence

import numpy as np

from .types import DoseEvent
from .models.one_compartment import decay_fraction, remaining_after
from .helpers import MS_PER_HOUR, hours_between
from .dosing import _validate_positive


def level_at_time(doses: Iterable[DoseEvent], at_ms: int, half_life_h: float) -> float:
    """
    Total caffeine (mg) in the body at at_ms.

    Linear superposition: every dose decays independently and the contributions add.
    Doses after at_ms contribute 0 through the negative-elapsed guard in remaining_after.
    """
    _validate_positive("half_life_h", half_life_h)
    total = 0.0
    for d in doses:
        total += remaining_after(d.amount_mg, hours_between(d.occurred_at_ms, at_ms), half_life_h)
    return float(total)


def level_curve(doses: Iterable[DoseEvent], times_ms, half_life_h: float) -> np.ndarray:
    """
    Vectorised level_at_time over an array of instants.

    Returns
    -------
    np.ndarray
        Level (mg) at each entry of times_ms, same length.
    """
    _validate_positive("half_life_h", half_life_h)
    t = np.asarray(times_ms, dtype=float)
    levels = np.zeros_like(t)
    for d in doses:
        levels += d.amount_mg * decay_fraction((t - d.occurred_at_ms) / MS_PER_HOUR, half_life_h)
    return levels


def hours_needed_to_decay(current_mg: float, target_mg: float, half_life_h: float) -> float:
    """
    Hours for a level of current_mg to fall to target_mg with no further intake.
      t = t_half * log2(current / target)
    A target of 0 mg is never reached, so targets <= 0 are treated as 1 mg.
    """
    _validate_positive("half_life_h", half_life_h)
    if current_mg <= target_mg:
        return 0.0
    if target_mg <= 0:
        target_mg = 1.0
    return half_life_h * math.log2(current_mg / target_mg)


def time_until_below(doses: Sequence[DoseEvent], from_ms: int, target_mg: float,
                     half_life_h: float) -> int:
    """
    Earliest instant >= from_ms at which the total level is <= target_mg.

    Between two dose times the summed curve is a single exponential (all doses share
    one half-life), so each segment is solved in closed form. A later dose resets the
    search at its own timestamp. Past the last dose the target is always reached.
    """
    _validate_positive("target_mg", target_mg)
    _validate_positive("half_life_h", half_life_h)

    # Segment boundaries: every dose time after from_ms
    upcoming = sorted({d.occurred_at_ms for d in doses if d.occurred_at_ms > from_ms})
    seg_start = int(from_ms)
    for seg_end in upcoming + [None]:
        level = level_at_time(doses, seg_start, half_life_h)
        if level <= target_mg:
            return seg_start
        reached = seg_start + math.ceil(hours_needed_to_decay(level, target_mg, half_life_h) * MS_PER_HOUR)
        if seg_end is None or reached < seg_end:
            return reached
        seg_start = seg_end
    raise AssertionError("unreachable: the final segment always returns")
