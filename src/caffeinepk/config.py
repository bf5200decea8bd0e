"""
caffeinepk configuration.
Model and scheduling defaults, overridable via environment variables.
Every function that reads these also takes the value as a keyword argument.
"""

import os

# --- Elimination ---
# Adult caffeine half-life is roughly 5-6 h (CYP1A2, non-smoker)
HALF_LIFE_HOURS: float = float(os.getenv("CAFFEINEPK_HALF_LIFE_HOURS", "5.5"))

# --- Daily budget ---
OPTIMAL_DAILY_MG: float = float(os.getenv("CAFFEINEPK_OPTIMAL_DAILY_MG", "200"))

# --- Dose bounds and spacing ---
MIN_DOSE_MG: float = float(os.getenv("CAFFEINEPK_MIN_DOSE_MG", "25"))
MAX_DOSE_MG: float = float(os.getenv("CAFFEINEPK_MAX_DOSE_MG", "75"))
MIN_GAP_MINUTES: int = int(os.getenv("CAFFEINEPK_MIN_GAP_MINUTES", "90"))
DOSE_DECREMENT_MG: float = 5.0     # search steps the dose down by this much
DOSE_SLOT_HOURS: float = 3.0       # remaining budget is spread over 3 h slots
WAKE_GRACE_MINUTES: int = 60       # no first dose within an hour of waking

# --- Sampling ---
SIMULATION_STEP_MINUTES: int = int(os.getenv("CAFFEINEPK_SIMULATION_STEP_MINUTES", "15"))
PLOT_STEP_MINUTES: int = int(os.getenv("CAFFEINEPK_PLOT_STEP_MINUTES", "5"))
MAX_CURVE_POINTS: int = 5000       # sampler widens its step beyond this

# --- Safety caps ---
PEAK_SAFETY_FRACTION: float = float(os.getenv("CAFFEINEPK_PEAK_SAFETY_FRACTION", "0.6"))
PEAK_LOOKAHEAD_HOURS: float = 24.0
SLEEP_THRESHOLD_MG: float = float(os.getenv("CAFFEINEPK_SLEEP_THRESHOLD_MG", "30"))
SLEEP_WARNING_MG: float = float(os.getenv("CAFFEINEPK_SLEEP_WARNING_MG", "40"))
SLEEP_WINDOW_HOURS: float = float(os.getenv("CAFFEINEPK_SLEEP_WINDOW_HOURS", "6"))
SLEEP_STATUS_WARNING_FACTOR: float = 1.4   # "might be disrupted" up to 1.4x threshold

# --- Budget limit status ---
LIMIT_WARNING_PERCENT: float = 90.0
