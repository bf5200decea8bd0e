# src/caffeinepk/models/one_compartment.py
import numpy as np

from ..dosing import _validate_positive


def decay_fraction(elapsed_h, half_life_h: float):
    """
    Fraction of a dose still present after elapsed_h hours.
    One compartment, instantaneous absorption, first-order elimination:
      f(t) = 0.5 ** (t / t_half)   for t >= 0
      f(t) = 0                     for t < 0  (dose not taken yet)

    elapsed_h may be a scalar or a numpy array; the result has the same shape.
    """
    _validate_positive("half_life_h", half_life_h)
    elapsed = np.asarray(elapsed_h, dtype=float)
    # clip before the power so negative times never overflow
    frac = np.where(elapsed >= 0.0, np.power(0.5, np.maximum(elapsed, 0.0) / half_life_h), 0.0)
    if frac.ndim == 0:
        return float(frac)
    return frac


def remaining_after(dose_mg: float, elapsed_h, half_life_h: float):
    """
    Caffeine (mg) left from a dose of dose_mg after elapsed_h hours.

    Parameters:
      dose_mg     : amount taken (mg, >= 0)
      elapsed_h   : hours since the dose; negative means the dose is in the future
      half_life_h : elimination half-life (h, > 0)
    """
    if dose_mg < 0:
        raise ValueError(f"dose_mg must be >= 0 (got {dose_mg}).")
    return dose_mg * decay_fraction(elapsed_h, half_life_h)
