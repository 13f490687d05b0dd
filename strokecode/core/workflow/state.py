"""
Workflow State - Entities

In-memory entity store for one encounter. Every entity has a ``to_dict`` /
``from_dict`` pair; timestamps travel as ISO-8601 strings.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from strokecode.core.dosing import WeightUnit, to_kg
from strokecode.core.eligibility import EligibilityAssessment
from strokecode.core.milestones import MilestoneTracker


class WorkflowStage(str, Enum):
    """Linear stages; the session never ends on its own."""
    COLLECTING_ONSET   = "collectingOnset"
    COLLECTING_IMAGING = "collectingImaging"
    SUMMARIZING        = "summarizing"

    @property
    def index(self) -> int:
        return STAGE_ORDER.index(self)


STAGE_ORDER: Tuple[WorkflowStage, ...] = (
    WorkflowStage.COLLECTING_ONSET,
    WorkflowStage.COLLECTING_IMAGING,
    WorkflowStage.SUMMARIZING,
)


class ImagingResult(str, Enum):
    NO_BLEED   = "no_bleed"
    HEMORRHAGE = "hemorrhage"
    OTHER      = "other"


class TreatmentAgent(str, Enum):
    NONE         = "none"
    ALTEPLASE    = "alteplase"
    TENECTEPLASE = "tenecteplase"


class LvoFinding(str, Enum):
    YES     = "yes"
    NO      = "no"
    PENDING = "pending"


IMAGING_RESULT_LABELS: Dict[ImagingResult, str] = {
    ImagingResult.NO_BLEED:   "No hemorrhage",
    ImagingResult.HEMORRHAGE: "Hemorrhage",
    ImagingResult.OTHER:      "Other finding",
}

AGENT_LABELS: Dict[TreatmentAgent, str] = {
    TreatmentAgent.NONE:         "None",
    TreatmentAgent.ALTEPLASE:    "Alteplase",
    TreatmentAgent.TENECTEPLASE: "Tenecteplase",
}

DISABLING_SYMPTOMS: Dict[str, str] = {
    "aphasia":        "Aphasia",
    "hemianopia":     "Hemianopia",
    "truncal_ataxia": "Truncal ataxia (walk the patient)",
    "dysphagia":      "Dysphagia",
    "hand_weakness":  "Hand weakness affecting livelihood",
}

SEVERITY_MIN = 0
SEVERITY_MAX = 42


def clamp_severity(score: Optional[int]) -> Optional[int]:
    if score is None:
        return None
    return max(SEVERITY_MIN, min(SEVERITY_MAX, int(score)))


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class OnsetAssessment:
    """
    Stage 1 data: onset, severity and vitals.

    ``symptom_discovery`` is derived: it follows ``onset`` while
    ``discovery_same_as_onset`` is set and only reads
    ``discovery_override`` otherwise.
    """
    onset_unknown: bool = False
    onset: Optional[datetime] = None
    discovery_same_as_onset: bool = True
    discovery_override: Optional[datetime] = None
    severity: Optional[int] = None
    systolic: Optional[int] = None
    diastolic: Optional[int] = None
    glucose: Optional[int] = None
    weight: Optional[float] = None
    weight_unit: WeightUnit = WeightUnit.KG
    bp_treating: bool = False
    low_glucose_reviewed: bool = False
    disabling_symptoms: Tuple[str, ...] = ()

    def __post_init__(self):
        self.severity = clamp_severity(self.severity)
        self.weight_unit = WeightUnit(self.weight_unit)
        self.disabling_symptoms = tuple(s for s in self.disabling_symptoms if s in DISABLING_SYMPTOMS)
        if self.onset_unknown:
            self.onset = None

    @property
    def symptom_discovery(self) -> Optional[datetime]:
        if self.discovery_same_as_onset:
            return self.onset
        return self.discovery_override

    @property
    def weight_kg(self) -> float:
        return to_kg(self.weight or 0, self.weight_unit)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "onset_unknown": self.onset_unknown,
            "onset": _iso(self.onset),
            "discovery_same_as_onset": self.discovery_same_as_onset,
            "discovery_override": _iso(self.discovery_override),
            "severity": self.severity,
            "systolic": self.systolic,
            "diastolic": self.diastolic,
            "glucose": self.glucose,
            "weight": self.weight,
            "weight_unit": self.weight_unit.value,
            "bp_treating": self.bp_treating,
            "low_glucose_reviewed": self.low_glucose_reviewed,
            "disabling_symptoms": list(self.disabling_symptoms),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OnsetAssessment":
        return cls(
            onset_unknown=bool(data.get("onset_unknown", False)),
            onset=_parse(data.get("onset")),
            discovery_same_as_onset=bool(data.get("discovery_same_as_onset", True)),
            discovery_override=_parse(data.get("discovery_override")),
            severity=data.get("severity"),
            systolic=data.get("systolic"),
            diastolic=data.get("diastolic"),
            glucose=data.get("glucose"),
            weight=data.get("weight"),
            weight_unit=WeightUnit(data.get("weight_unit", WeightUnit.KG.value)),
            bp_treating=bool(data.get("bp_treating", False)),
            low_glucose_reviewed=bool(data.get("low_glucose_reviewed", False)),
            disabling_symptoms=tuple(data.get("disabling_symptoms", [])),
        )


@dataclass
class ImagingAndTreatment:
    """Stage 2 data. ``agent`` None means no treatment decision yet."""
    result: Optional[ImagingResult] = None
    agent: Optional[TreatmentAgent] = None
    cta_ordered: bool = False
    lvo: Optional[LvoFinding] = None
    minutes_to_imaging: Optional[int] = None
    minutes_to_treatment: Optional[int] = None

    def __post_init__(self):
        self.result = ImagingResult(self.result) if self.result is not None else None
        self.agent = TreatmentAgent(self.agent) if self.agent is not None else None
        self.lvo = LvoFinding(self.lvo) if self.lvo is not None else None

    @property
    def agent_given(self) -> bool:
        return self.agent not in (None, TreatmentAgent.NONE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.value if self.result else None,
            "agent": self.agent.value if self.agent else None,
            "cta_ordered": self.cta_ordered,
            "lvo": self.lvo.value if self.lvo else None,
            "minutes_to_imaging": self.minutes_to_imaging,
            "minutes_to_treatment": self.minutes_to_treatment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImagingAndTreatment":
        return cls(
            result=data.get("result"),
            agent=data.get("agent"),
            cta_ordered=bool(data.get("cta_ordered", False)),
            lvo=data.get("lvo"),
            minutes_to_imaging=data.get("minutes_to_imaging"),
            minutes_to_treatment=data.get("minutes_to_treatment"),
        )


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO    = "info"
    WARNING = "warning"
    ERROR   = "error"


@dataclass(frozen=True)
class Notification:
    """Transient, non-blocking message for the clinician."""
    level: NotificationLevel
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level.value, "message": self.message}


@dataclass
class WorkflowState:
    """Union of every entity the encounter owns."""
    stage: WorkflowStage = WorkflowStage.COLLECTING_ONSET
    furthest_stage: WorkflowStage = WorkflowStage.COLLECTING_ONSET
    onset: Optional[OnsetAssessment] = None
    imaging: Optional[ImagingAndTreatment] = None
    eligibility: Optional[EligibilityAssessment] = None
    milestones: MilestoneTracker = field(default_factory=MilestoneTracker)
    orders: Optional[List[str]] = None
    recommendation: str = ""
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage.value,
            "furthest_stage": self.furthest_stage.value,
            "onset": self.onset.to_dict() if self.onset else None,
            "imaging": self.imaging.to_dict() if self.imaging else None,
            "eligibility": self.eligibility.to_dict() if self.eligibility else None,
            "milestones": self.milestones.to_dict(),
            "orders": list(self.orders) if self.orders is not None else None,
            "recommendation": self.recommendation,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowState":
        orders = data.get("orders")
        return cls(
            stage=WorkflowStage(data.get("stage", WorkflowStage.COLLECTING_ONSET.value)),
            furthest_stage=WorkflowStage(data.get("furthest_stage", WorkflowStage.COLLECTING_ONSET.value)),
            onset=OnsetAssessment.from_dict(data["onset"]) if data.get("onset") else None,
            imaging=ImagingAndTreatment.from_dict(data["imaging"]) if data.get("imaging") else None,
            eligibility=(
                EligibilityAssessment.from_dict(data["eligibility"]) if data.get("eligibility") else None
            ),
            milestones=MilestoneTracker.from_dict(data.get("milestones") or {}),
            orders=list(orders) if orders is not None else None,
            recommendation=data.get("recommendation", ""),
            notes=data.get("notes", ""),
        )
