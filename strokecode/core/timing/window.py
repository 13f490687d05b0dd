"""
Time & Window Classifier

Pure functions that turn a last-known-well (onset) timestamp and the current
time into elapsed hours and a treatment-window band.

Elapsed hours are never cached: callers pass ``now`` on every read so that a
live display re-derives the value from the clock each tick.

Band boundaries (hours since onset, lower band wins on the boundary):
  WITHIN_STANDARD   (-inf, 4.5]
  EXTENDED          (4.5, 9]
  LATE_EVT          (9, 24]
  OUTSIDE           (24, +inf)
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

Clock = Callable[[], datetime]

# ── Window boundaries (hours since onset) ─────────────────────────────────────
STANDARD_WINDOW_HOURS = 4.5
EXTENDED_WINDOW_HOURS = 9.0
LATE_EVT_WINDOW_HOURS = 24.0

# Window-dependent (3-4.5 h) exclusions apply only inside this half-open range
WINDOW_DEPENDENT_LOWER_HOURS = 3.0
WINDOW_DEPENDENT_UPPER_HOURS = STANDARD_WINDOW_HOURS

# ── Blood pressure limits (systolic, diastolic mmHg) ──────────────────────────
THROMBOLYSIS_BP_LIMIT: Tuple[int, int] = (185, 110)
GENERAL_BP_LIMIT: Tuple[int, int] = (220, 120)

_SECONDS_PER_HOUR = 3600.0


class TreatmentWindow(str, Enum):
    """
    Elapsed-time band that determines which therapies are considered.

    WITHIN_STANDARD – standard thrombolysis window
    EXTENDED        – extended window (perfusion / wake-up imaging selection)
    LATE_EVT        – late thrombectomy window
    OUTSIDE         – beyond every acute reperfusion window
    """
    WITHIN_STANDARD = "withinStandard"
    EXTENDED        = "extended"
    LATE_EVT        = "lateEvt"
    OUTSIDE         = "outside"


@dataclass(frozen=True)
class WindowGuidance:
    """Short title and message shown next to a window badge."""
    title: str
    message: str


WINDOW_GUIDANCE: Dict[TreatmentWindow, WindowGuidance] = {
    TreatmentWindow.WITHIN_STANDARD: WindowGuidance(
        title="Within 4.5h",
        message="Within 4.5h window. Complete eligibility assessment to proceed with thrombolysis.",
    ),
    TreatmentWindow.EXTENDED: WindowGuidance(
        title="Extended window (4.5-9h)",
        message="Consider advanced imaging (perfusion or DWI-FLAIR mismatch) to select reperfusion therapy.",
    ),
    TreatmentWindow.LATE_EVT: WindowGuidance(
        title="Late window (9-24h)",
        message="Consider CT perfusion. If mismatch present, patient may be a thrombectomy candidate.",
    ),
    TreatmentWindow.OUTSIDE: WindowGuidance(
        title="Outside treatment window",
        message=">24h from LKW. Thrombolysis not indicated. Focus on supportive care and secondary prevention.",
    ),
}


def utcnow() -> datetime:
    """Timezone-aware current time in UTC. Default clock for every component."""
    return datetime.now(timezone.utc)


def ensure_aware(ts: datetime) -> datetime:
    """Treat naive datetimes as UTC so arithmetic never mixes naive and aware values."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def elapsed_hours(onset: Optional[datetime], now: datetime) -> float:
    """
    Hours from ``onset`` to ``now``, floored at 0.

    Returns 0 when onset is unknown (None).
    """
    if onset is None:
        return 0.0
    delta = ensure_aware(now) - ensure_aware(onset)
    return max(0.0, delta.total_seconds() / _SECONDS_PER_HOUR)


def classify_window(hours: float) -> TreatmentWindow:
    """Map elapsed hours to exactly one treatment window (boundaries go to the lower band)."""
    if hours <= STANDARD_WINDOW_HOURS:
        return TreatmentWindow.WITHIN_STANDARD
    if hours <= EXTENDED_WINDOW_HOURS:
        return TreatmentWindow.EXTENDED
    if hours <= LATE_EVT_WINDOW_HOURS:
        return TreatmentWindow.LATE_EVT
    return TreatmentWindow.OUTSIDE


def in_window_dependent_range(hours: Optional[float]) -> bool:
    """True only for 3.0 < hours <= 4.5, the range where the 3-4.5h exclusions apply."""
    if hours is None:
        return False
    return WINDOW_DEPENDENT_LOWER_HOURS < hours <= WINDOW_DEPENDENT_UPPER_HOURS


def within_thrombolysis_window(hours: float) -> bool:
    """Known onset with 0 < hours <= 4.5."""
    return 0 < hours <= STANDARD_WINDOW_HOURS


def blood_pressure_limits(hours: float, onset_unknown: bool) -> Tuple[int, int]:
    """
    Pressure ceiling for the current situation.

    Inside the thrombolysis window with a known onset the pre-lytic limit
    (185/110) applies; otherwise the general acute-stroke ceiling (220/120).
    """
    if not onset_unknown and within_thrombolysis_window(hours):
        return THROMBOLYSIS_BP_LIMIT
    return GENERAL_BP_LIMIT


def pressure_exceeds(systolic: int, diastolic: int, limits: Tuple[int, int]) -> bool:
    return systolic > limits[0] or diastolic > limits[1]


def to_24_hour(hour: int, period: str) -> int:
    """Convert a 12-hour clock reading ("AM"/"PM") to 0-23."""
    hour = int(hour) % 12
    if period.upper() == "PM":
        hour += 12
    return hour


def resolve_clock_time(hour: int, minute: int, now: datetime) -> datetime:
    """
    Build a timestamp for a wall-clock reading taken today.

    A reading that lands after ``now`` means the event happened yesterday,
    so it is rolled back one day.
    """
    now = ensure_aware(now)
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate > now:
        candidate -= timedelta(days=1)
    return candidate


def normalize_onset(onset: Optional[datetime], now: datetime) -> Optional[datetime]:
    """Apply the one-day clock-skew rollback to an onset timestamp that lies in the future."""
    if onset is None:
        return None
    onset = ensure_aware(onset)
    now = ensure_aware(now)
    if onset > now:
        onset -= timedelta(days=1)
    return onset
