"""
API request/response schemas for the stroke code HTTP host.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from strokecode.core.dosing import WeightUnit
from strokecode.core.workflow import (
    ImagingAndTreatment,
    ImagingResult,
    LvoFinding,
    OnsetAssessment,
    TreatmentAgent,
    WorkflowStage,
)


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float


class EncounterCreateRequest(BaseModel):
    encounter_id: Optional[str] = Field(None, description="Client-chosen id; generated when omitted")
    door_time: Optional[datetime] = Field(None, description="Hospital arrival; defaults to now")


class ClockReading(BaseModel):
    """Wall-clock time as read off a watch; resolved to the most recent past occurrence."""
    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(..., ge=0, le=59)
    period: Optional[str] = Field(None, description="AM/PM for 12-hour readings")


class OnsetRequest(BaseModel):
    onset_unknown: bool = False
    onset: Optional[datetime] = None
    onset_clock: Optional[ClockReading] = None
    discovery_same_as_onset: bool = True
    discovery_override: Optional[datetime] = None
    severity: Optional[int] = Field(None, description="NIHSS from the external calculator, clamped to 0-42")
    systolic: Optional[int] = None
    diastolic: Optional[int] = None
    glucose: Optional[int] = None
    weight: Optional[float] = None
    weight_unit: WeightUnit = WeightUnit.KG
    bp_treating: bool = False
    low_glucose_reviewed: bool = False
    disabling_symptoms: List[str] = Field(default_factory=list)

    def to_assessment(self, onset: Optional[datetime]) -> OnsetAssessment:
        return OnsetAssessment(
            onset_unknown=self.onset_unknown,
            onset=onset,
            discovery_same_as_onset=self.discovery_same_as_onset,
            discovery_override=self.discovery_override,
            severity=self.severity,
            systolic=self.systolic,
            diastolic=self.diastolic,
            glucose=self.glucose,
            weight=self.weight,
            weight_unit=self.weight_unit,
            bp_treating=self.bp_treating,
            low_glucose_reviewed=self.low_glucose_reviewed,
            disabling_symptoms=tuple(self.disabling_symptoms),
        )


class ImagingRequest(BaseModel):
    result: Optional[ImagingResult] = None
    agent: Optional[TreatmentAgent] = Field(None, description="None = treatment not yet decided")
    cta_ordered: bool = False
    lvo: Optional[LvoFinding] = None
    minutes_to_imaging: Optional[int] = None
    minutes_to_treatment: Optional[int] = None

    def to_entity(self) -> ImagingAndTreatment:
        return ImagingAndTreatment(**self.model_dump())


class EligibilityRequest(BaseModel):
    absolute: List[str] = Field(default_factory=list)
    relative: List[str] = Field(default_factory=list)
    window_dependent: List[str] = Field(default_factory=list)
    inclusion: List[str] = Field(default_factory=list)
    notes: str = ""


class MilestoneRequest(BaseModel):
    timestamp: Optional[datetime] = Field(None, description="Absolute time; defaults to now")
    minutes_from_door: Optional[int] = Field(None, description="Alternative to timestamp")


class AnchorRequest(BaseModel):
    door_time: Optional[datetime] = None


class OrdersRequest(BaseModel):
    order_ids: List[str]


class RecommendationRequest(BaseModel):
    text: str = ""
    notes: Optional[str] = None


class PathwayResultRequest(BaseModel):
    status: str
    reason: str
    criteria_name: Optional[str] = None


class NavigateRequest(BaseModel):
    stage: WorkflowStage


class GateResponse(BaseModel):
    passed: bool
    missing_fields: List[str]
    labels: List[str]
    stage: str
    warnings: List[Dict[str, str]] = Field(default_factory=list)


class EncounterResponse(BaseModel):
    encounter_id: str
    stage: str
    furthest_stage: str
    elapsed_hours: float
    window: Optional[str] = None
    window_guidance: Optional[Dict[str, str]] = None
    dosing: Optional[Dict[str, Any]] = None
    disabling_symptoms_offered: bool = False
    warnings: List[Dict[str, str]] = Field(default_factory=list)
    data_quality: List[Dict[str, Any]] = Field(default_factory=list)
    milestones: List[Dict[str, Any]] = Field(default_factory=list)
    state: Dict[str, Any]


class ElapsedResponse(BaseModel):
    encounter_id: str
    elapsed_hours: float
    window: Optional[str] = None
    guidance: Optional[str] = None


class EligibilityResponse(BaseModel):
    encounter_id: str
    status: str
    title: str
    message: str
    window_dependent_active: bool
    assessment: Dict[str, Any]
    emr_text: str


class NoteResponse(BaseModel):
    encounter_id: str
    note: str
    generated_at: str
