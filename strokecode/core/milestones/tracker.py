"""
Milestone Tracker

Registry of named quality-of-care timestamps measured against one anchor
("door time", hospital arrival).

Rules:
  - ``record`` is an idempotent upsert; recording twice overwrites.
  - ``minutes_from_anchor`` is None when the anchor or the milestone is
    unset, otherwise the rounded minute difference. Negative values are
    reported as-is and surfaced as data-quality warnings, never clamped.
  - Targets drive a pass/fail badge for display only; they never gate the
    workflow.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from strokecode.core.timing import Clock, ensure_aware, utcnow
from strokecode.utils import get_logger, UnknownMilestoneError

logger = get_logger(__name__)


class Milestone(str, Enum):
    """Tracked clinical events, in timeline order."""
    CODE_ACTIVATION    = "code_activation"
    DATA_CAPTURED      = "data_captured"
    NEURO_EVALUATION   = "neuro_evaluation"
    IMAGING_ORDERED    = "imaging_ordered"
    FIRST_IMAGE        = "first_image"
    IMAGE_INTERPRETED  = "image_interpreted"
    AGENT_ADMINISTERED = "agent_administered"
    VESSEL_ACCESS      = "vessel_access"
    DEVICE_DEPLOYMENT  = "device_deployment"
    REPERFUSION        = "reperfusion"


MILESTONE_LABELS: Dict[Milestone, str] = {
    Milestone.CODE_ACTIVATION:    "Code activation",
    Milestone.DATA_CAPTURED:      "Door to data",
    Milestone.NEURO_EVALUATION:   "Neurologist evaluation",
    Milestone.IMAGING_ORDERED:    "CT ordered",
    Milestone.FIRST_IMAGE:        "CT first image",
    Milestone.IMAGE_INTERPRETED:  "CT interpreted",
    Milestone.AGENT_ADMINISTERED: "Thrombolytic bolus (needle)",
    Milestone.VESSEL_ACCESS:      "Groin puncture",
    Milestone.DEVICE_DEPLOYMENT:  "First device deployment",
    Milestone.REPERFUSION:        "First reperfusion",
}

PROCEDURAL_MILESTONES: Tuple[Milestone, ...] = (
    Milestone.VESSEL_ACCESS,
    Milestone.DEVICE_DEPLOYMENT,
    Milestone.REPERFUSION,
)

# Arrive within 3.5 h and treat within 4.5 h of onset
ARRIVE_BY_MINUTES = 210
TREAT_BY_MINUTES = 270


class Badge(str, Enum):
    PASS      = "pass"
    FAIL      = "fail"
    PENDING   = "pending"     # target exists, milestone not yet recorded
    NO_TARGET = "no_target"


@dataclass(frozen=True)
class MilestoneTarget:
    """
    Presentation-only threshold ("<= N minutes from door").

    ``tiers`` are stricter optional goals reported alongside the pass badge,
    most demanding first.
    """
    max_minutes: int
    tiers: Tuple[Tuple[str, int], ...] = ()

    def passes(self, minutes: int) -> bool:
        return minutes <= self.max_minutes

    def tier(self, minutes: int) -> Optional[str]:
        for label, limit in self.tiers:
            if minutes <= limit:
                return label
        return None

    def describe(self) -> str:
        return f"target <={self.max_minutes}"


MILESTONE_TARGETS: Dict[Milestone, MilestoneTarget] = {
    Milestone.FIRST_IMAGE:        MilestoneTarget(25),
    Milestone.IMAGE_INTERPRETED:  MilestoneTarget(45),
    Milestone.AGENT_ADMINISTERED: MilestoneTarget(60, tiers=(("best <=30", 30), ("optimal <=45", 45))),
}


@dataclass(frozen=True)
class DataQualityWarning:
    """A milestone captured before the anchor. Data is kept as entered."""
    milestone: Milestone
    minutes_from_anchor: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "milestone": self.milestone.value,
            "minutes_from_anchor": self.minutes_from_anchor,
            "message": self.message,
        }


@dataclass(frozen=True)
class MilestoneReading:
    """Projection of one milestone for display."""
    milestone: Milestone
    timestamp: Optional[datetime]
    minutes_from_anchor: Optional[int]
    badge: Badge
    out_of_order: bool = False
    tier: Optional[str] = None

    @property
    def label(self) -> str:
        return MILESTONE_LABELS[self.milestone]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "milestone": self.milestone.value,
            "label": self.label,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "minutes_from_anchor": self.minutes_from_anchor,
            "badge": self.badge.value,
            "out_of_order": self.out_of_order,
            "tier": self.tier,
        }


def round_minutes(seconds: float) -> int:
    """Nearest whole minute, halves rounded up."""
    return int(math.floor(seconds / 60.0 + 0.5))


def minutes_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    if start is None or end is None:
        return None
    return round_minutes((ensure_aware(end) - ensure_aware(start)).total_seconds())


def parse_milestone(name: Any) -> Milestone:
    """Accept a Milestone or its string value."""
    try:
        return Milestone(name)
    except ValueError:
        raise UnknownMilestoneError(str(name))


@dataclass
class MilestoneTracker:
    """Anchor plus one nullable timestamp per milestone."""
    anchor: Optional[datetime] = None
    timestamps: Dict[Milestone, Optional[datetime]] = field(
        default_factory=lambda: {m: None for m in Milestone}
    )

    @classmethod
    def start(cls, clock: Clock = utcnow) -> "MilestoneTracker":
        """New tracker anchored at the current time."""
        return cls(anchor=clock())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_anchor(self, anchor: Optional[datetime]) -> None:
        self.anchor = ensure_aware(anchor) if anchor is not None else None
        for warning in self.data_quality_warnings():
            logger.warning(f"MilestoneTracker: {warning.message}")

    def record(self, name: Any, timestamp: datetime) -> MilestoneReading:
        """Upsert a milestone timestamp and return its reading."""
        milestone = parse_milestone(name)
        self.timestamps[milestone] = ensure_aware(timestamp)
        reading = self.reading(milestone)
        if reading.out_of_order:
            logger.warning(
                f"MilestoneTracker: {milestone.value} recorded "
                f"{reading.minutes_from_anchor} min relative to anchor (before door time)"
            )
        else:
            logger.debug(f"MilestoneTracker: {milestone.value} recorded at +{reading.minutes_from_anchor} min")
        return reading

    def clear(self, name: Any) -> None:
        self.timestamps[parse_milestone(name)] = None

    def clear_all(self) -> None:
        self.timestamps = {m: None for m in Milestone}

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def get(self, name: Any) -> Optional[datetime]:
        return self.timestamps.get(parse_milestone(name))

    def minutes_from_anchor(self, name: Any) -> Optional[int]:
        return minutes_between(self.anchor, self.get(name))

    def badge(self, name: Any) -> Badge:
        milestone = parse_milestone(name)
        target = MILESTONE_TARGETS.get(milestone)
        if target is None:
            return Badge.NO_TARGET
        minutes = self.minutes_from_anchor(milestone)
        if minutes is None:
            return Badge.PENDING
        return Badge.PASS if target.passes(minutes) else Badge.FAIL

    def reading(self, name: Any) -> MilestoneReading:
        milestone = parse_milestone(name)
        minutes = self.minutes_from_anchor(milestone)
        target = MILESTONE_TARGETS.get(milestone)
        return MilestoneReading(
            milestone=milestone,
            timestamp=self.get(milestone),
            minutes_from_anchor=minutes,
            badge=self.badge(milestone),
            out_of_order=minutes is not None and minutes < 0,
            tier=target.tier(minutes) if target and minutes is not None else None,
        )

    def readings(self) -> List[MilestoneReading]:
        return [self.reading(m) for m in Milestone]

    def recorded(self) -> List[MilestoneReading]:
        return [r for r in self.readings() if r.timestamp is not None]

    def data_quality_warnings(self) -> List[DataQualityWarning]:
        warnings = []
        for reading in self.readings():
            if reading.out_of_order:
                warnings.append(DataQualityWarning(
                    milestone=reading.milestone,
                    minutes_from_anchor=reading.minutes_from_anchor,
                    message=(
                        f"{reading.label} is {abs(reading.minutes_from_anchor)} min before "
                        f"door time; check the recorded time"
                    ),
                ))
        return warnings

    def has_procedural_times(self) -> bool:
        return any(self.get(m) is not None for m in PROCEDURAL_MILESTONES)

    def lkw_to_needle_minutes(self, onset: Optional[datetime]) -> Optional[int]:
        return minutes_between(onset, self.get(Milestone.AGENT_ADMINISTERED))

    def arrive_by_treat_by(self, onset: Optional[datetime]) -> Optional[bool]:
        """Arrived within 3.5 h and treated within 4.5 h of onset; None without both times."""
        needle = self.lkw_to_needle_minutes(onset)
        arrival = minutes_between(onset, self.anchor)
        if needle is None or arrival is None:
            return None
        return arrival <= ARRIVE_BY_MINUTES and needle <= TREAT_BY_MINUTES

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "anchor": self.anchor.isoformat() if self.anchor else None,
            "milestones": {
                m.value: (ts.isoformat() if ts else None) for m, ts in self.timestamps.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MilestoneTracker":
        anchor = data.get("anchor")
        tracker = cls(anchor=datetime.fromisoformat(anchor) if anchor else None)
        for name, value in (data.get("milestones") or {}).items():
            if value:
                tracker.timestamps[parse_milestone(name)] = datetime.fromisoformat(value)
        return tracker
