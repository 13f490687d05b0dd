"""
Stage-Completion Gates

Gates are total functions returning a :class:`GateResult`. A failed gate is
a value listing the specific missing fields, never an exception, and never
stops the clinician from continuing to edit.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Tuple

from strokecode.core.timing import (
    blood_pressure_limits,
    elapsed_hours,
    pressure_exceeds,
    within_thrombolysis_window,
)
from .state import ImagingAndTreatment, ImagingResult, Notification, NotificationLevel, OnsetAssessment

# ── Stage 1 field names ───────────────────────────────────────────────────────
ONSET_TIME             = "onset_time"
SEVERITY_SCORE         = "severity_score"
BLOOD_PRESSURE         = "blood_pressure"
GLUCOSE                = "glucose"
WEIGHT                 = "weight"
BLOOD_PRESSURE_CONTROL = "blood_pressure_control"

# ── Stage 2 field names ───────────────────────────────────────────────────────
ONSET_ASSESSMENT     = "onset_assessment"
IMAGING_RESULT       = "imaging_result"
MINUTES_TO_IMAGING   = "minutes_to_imaging"
TREATMENT_DECISION   = "treatment_decision"
TREATMENT_AGENT      = "treatment_agent"
MINUTES_TO_TREATMENT = "minutes_to_treatment"

FIELD_LABELS: Dict[str, str] = {
    ONSET_TIME:             "LKW time",
    SEVERITY_SCORE:         "NIHSS",
    BLOOD_PRESSURE:         "BP",
    GLUCOSE:                "Glucose",
    WEIGHT:                 "Weight",
    BLOOD_PRESSURE_CONTROL: "BP control (pressure above limit)",
    ONSET_ASSESSMENT:       "Onset and vitals (stage 1)",
    IMAGING_RESULT:         "CT result",
    MINUTES_TO_IMAGING:     "Door-to-CT minutes",
    TREATMENT_DECISION:     "Treatment decision",
    TREATMENT_AGENT:        "Thrombolytic not permitted with this CT result",
    MINUTES_TO_TREATMENT:   "Door-to-needle minutes",
}

# ── Glucose warnings (mg/dL) ──────────────────────────────────────────────────
GLUCOSE_LOW = 50
GLUCOSE_HIGH = 400


@dataclass(frozen=True)
class GateResult:
    missing_fields: Tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.missing_fields

    def labels(self) -> List[str]:
        return [FIELD_LABELS.get(f, f) for f in self.missing_fields]

    def to_dict(self) -> Dict:
        return {
            "passed": self.passed,
            "missing_fields": list(self.missing_fields),
            "labels": self.labels(),
        }


def _positive(value) -> bool:
    return value is not None and value > 0


def pressure_above_limit(onset: OnsetAssessment, now: datetime) -> bool:
    """
    True when the entered pressure exceeds the applicable ceiling.

    Unknown onset is never inside the thrombolysis window, so the general
    ceiling (220/120) applies to it.
    """
    if not (_positive(onset.systolic) and _positive(onset.diastolic)):
        return False
    hours = elapsed_hours(onset.onset, now)
    limits = blood_pressure_limits(hours, onset.onset_unknown)
    return pressure_exceeds(onset.systolic, onset.diastolic, limits)


def check_onset_gate(onset: OnsetAssessment, now: datetime) -> GateResult:
    missing = []
    if not onset.onset_unknown:
        if onset.onset is None or elapsed_hours(onset.onset, now) <= 0:
            missing.append(ONSET_TIME)
    if not _positive(onset.severity):
        missing.append(SEVERITY_SCORE)
    if not (_positive(onset.systolic) and _positive(onset.diastolic)):
        missing.append(BLOOD_PRESSURE)
    if not _positive(onset.glucose):
        missing.append(GLUCOSE)
    if not _positive(onset.weight):
        missing.append(WEIGHT)
    if pressure_above_limit(onset, now) and not onset.bp_treating:
        missing.append(BLOOD_PRESSURE_CONTROL)
    return GateResult(tuple(missing))


def check_imaging_gate(imaging: ImagingAndTreatment, onset_completed: bool = True) -> GateResult:
    """Stage 2 fields; stage 1 must have passed first."""
    missing = [] if onset_completed else [ONSET_ASSESSMENT]
    if imaging.result is None:
        missing.append(IMAGING_RESULT)
    if imaging.minutes_to_imaging is None:
        missing.append(MINUTES_TO_IMAGING)
    if imaging.result == ImagingResult.NO_BLEED and imaging.agent is None:
        missing.append(TREATMENT_DECISION)
    if imaging.agent_given and imaging.result != ImagingResult.NO_BLEED:
        missing.append(TREATMENT_AGENT)
    if imaging.agent_given and imaging.minutes_to_treatment is None:
        missing.append(MINUTES_TO_TREATMENT)
    return GateResult(tuple(missing))


def vitals_warnings(onset: OnsetAssessment, now: datetime) -> List[Notification]:
    """Non-blocking warnings shown beside the vitals."""
    warnings = []
    if onset.glucose is not None and 0 < onset.glucose < GLUCOSE_LOW:
        warnings.append(Notification(NotificationLevel.WARNING, "Glucose low: treat first, then reassess"))
    if onset.glucose is not None and onset.glucose > GLUCOSE_HIGH:
        warnings.append(Notification(NotificationLevel.WARNING, "Glucose high"))
    if pressure_above_limit(onset, now):
        hours = elapsed_hours(onset.onset, now)
        sbp, dbp = blood_pressure_limits(hours, onset.onset_unknown)
        warnings.append(Notification(
            NotificationLevel.WARNING,
            f"BP {onset.systolic}/{onset.diastolic} above {sbp}/{dbp}: lower before treatment",
        ))
    return warnings


def disabling_symptoms_offered(onset: OnsetAssessment, now: datetime) -> bool:
    """Low-severity patients inside the thrombolysis window get the disabling-symptom checklist."""
    if onset.onset_unknown or onset.onset is None or onset.severity is None:
        return False
    return within_thrombolysis_window(elapsed_hours(onset.onset, now)) and 1 <= onset.severity <= 5
