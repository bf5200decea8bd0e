# src/caffeinepk/budget.py
"""
Daily caffeine budget from a user's answers (weight, age, conditions, habits).

Two numbers come out: an "optimal" budget that the recommender spreads across
the day, and a "safe" ceiling shown for reference. Adjustments are applied in a
fixed order, so e.g. pregnancy halves whatever weight/age already produced.
"""
from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

from . import config
from .dosing import _validate_choice, _validate_positive, round_to_increment

AgeRange = Literal["under_18", "18_to_60", "over_60"]
Sensitivity = Literal["low", "medium", "high"]
AlcoholIntake = Literal["rare", "sometimes", "daily"]
Medication = Literal["anxiety_panic", "adhd_medication", "insomnia_medication", "acid_reflux", "none"]

DEFAULT_OPTIMAL_MG = config.OPTIMAL_DAILY_MG
DEFAULT_SAFE_MG = 400.0
OPTIMAL_FLOOR_MG = 50.0
OPTIMAL_CEILING_MG = 200.0

AGE_RANGES = {"under_18", "18_to_60", "over_60"}
SENSITIVITY_MULTIPLIERS = {"low": 1.1, "medium": 1.0, "high": 0.5}
ALCOHOL_MULTIPLIERS = {"rare": 1.0, "sometimes": 0.9, "daily": 0.85}
MEDICATION_MULTIPLIERS = {
    "anxiety_panic": 0.6,
    "adhd_medication": 0.6,
    "insomnia_medication": 0.6,
    "acid_reflux": 0.75,
    "none": 1.0,
}


@dataclass(frozen=True)
class BudgetInputs:
    weight_kg: Optional[float] = None
    age_range: Optional[AgeRange] = None
    sensitivity: Optional[Sensitivity] = None
    alcohol_intake: Optional[AlcoholIntake] = None
    medications: Sequence[Medication] = field(default_factory=tuple)
    is_pregnant: bool = False
    has_heart_condition: bool = False


@dataclass(frozen=True)
class DailyBudget:
    optimal_mg: float
    safe_mg: float


def daily_budget(inputs: BudgetInputs) -> DailyBudget:
    optimal = DEFAULT_OPTIMAL_MG
    safe = DEFAULT_SAFE_MG

    if inputs.weight_kg is not None:
        _validate_positive("weight_kg", inputs.weight_kg)
        optimal = min(inputs.weight_kg * 3, 200.0)
        safe = min(inputs.weight_kg * 6, 400.0)

    if inputs.age_range is not None:
        _validate_choice("age_range", inputs.age_range, AGE_RANGES)
        if inputs.age_range == "over_60":
            optimal *= 0.8
        elif inputs.age_range == "under_18":
            optimal = 80.0
            safe = 100.0

    if inputs.is_pregnant:
        optimal = min(optimal, 200.0)
        safe = min(safe, 200.0)
        optimal *= 0.5

    if inputs.has_heart_condition:
        optimal = min(optimal, 100.0)
        safe = min(safe, 200.0)

    if inputs.sensitivity is not None:
        _validate_choice("sensitivity", inputs.sensitivity, SENSITIVITY_MULTIPLIERS)
        optimal *= SENSITIVITY_MULTIPLIERS[inputs.sensitivity]

    if inputs.alcohol_intake is not None:
        _validate_choice("alcohol_intake", inputs.alcohol_intake, ALCOHOL_MULTIPLIERS)
        optimal *= ALCOHOL_MULTIPLIERS[inputs.alcohol_intake]

    for med in inputs.medications:
        _validate_choice("medications", med, MEDICATION_MULTIPLIERS)
    # Only the most restrictive medication counts; "none" switches the adjustment off
    if inputs.medications and "none" not in inputs.medications:
        optimal *= min(MEDICATION_MULTIPLIERS[m] for m in inputs.medications)

    optimal = min(max(round_to_increment(optimal, 1.0), OPTIMAL_FLOOR_MG), OPTIMAL_CEILING_MG)
    return DailyBudget(optimal_mg=optimal, safe_mg=round_to_increment(safe, 1.0))
