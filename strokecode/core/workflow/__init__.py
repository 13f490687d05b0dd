"""
Workflow State Machine

Usage:
    from strokecode.core.workflow import WorkflowState, OnsetAssessment, reducer

    transition = reducer.complete_onset(state, onset, now)
    if not transition.gate.passed:
        print(transition.gate.missing_fields)

The injected service that persists and notifies lives in
``strokecode.services.workflow_service``.
"""
from . import reducer
from .state import (
    AGENT_LABELS,
    DISABLING_SYMPTOMS,
    IMAGING_RESULT_LABELS,
    STAGE_ORDER,
    ImagingAndTreatment,
    ImagingResult,
    LvoFinding,
    Notification,
    NotificationLevel,
    OnsetAssessment,
    TreatmentAgent,
    WorkflowStage,
    WorkflowState,
    clamp_severity,
)
from .gates import (
    GateResult,
    check_imaging_gate,
    check_onset_gate,
    disabling_symptoms_offered,
    pressure_above_limit,
    vitals_warnings,
)
from .reducer import Transition, initial_state
from .ticker import SharedTicker

__all__ = [
    "reducer",
    "AGENT_LABELS",
    "DISABLING_SYMPTOMS",
    "IMAGING_RESULT_LABELS",
    "STAGE_ORDER",
    "ImagingAndTreatment",
    "ImagingResult",
    "LvoFinding",
    "Notification",
    "NotificationLevel",
    "OnsetAssessment",
    "TreatmentAgent",
    "WorkflowStage",
    "WorkflowState",
    "clamp_severity",
    "GateResult",
    "check_imaging_gate",
    "check_onset_gate",
    "disabling_symptoms_offered",
    "pressure_above_limit",
    "vitals_warnings",
    "Transition",
    "initial_state",
    "SharedTicker",
]
