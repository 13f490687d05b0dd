"""
Time & Window Classifier

Usage:
    from strokecode.core.timing import elapsed_hours, classify_window

    hours = elapsed_hours(onset, utcnow())
    window = classify_window(hours)
"""
from .window import (
    Clock,
    TreatmentWindow,
    WindowGuidance,
    WINDOW_GUIDANCE,
    GENERAL_BP_LIMIT,
    THROMBOLYSIS_BP_LIMIT,
    utcnow,
    ensure_aware,
    elapsed_hours,
    classify_window,
    in_window_dependent_range,
    within_thrombolysis_window,
    blood_pressure_limits,
    pressure_exceeds,
    to_24_hour,
    resolve_clock_time,
    normalize_onset,
)

__all__ = [
    "Clock",
    "TreatmentWindow",
    "WindowGuidance",
    "WINDOW_GUIDANCE",
    "GENERAL_BP_LIMIT",
    "THROMBOLYSIS_BP_LIMIT",
    "utcnow",
    "ensure_aware",
    "elapsed_hours",
    "classify_window",
    "in_window_dependent_range",
    "within_thrombolysis_window",
    "blood_pressure_limits",
    "pressure_exceeds",
    "to_24_hour",
    "resolve_clock_time",
    "normalize_onset",
]
