"""
API schemas
"""
from .api import (
    AnchorRequest,
    ClockReading,
    ElapsedResponse,
    EligibilityRequest,
    EligibilityResponse,
    EncounterCreateRequest,
    EncounterResponse,
    GateResponse,
    HealthResponse,
    ImagingRequest,
    MilestoneRequest,
    NavigateRequest,
    NoteResponse,
    OnsetRequest,
    OrdersRequest,
    PathwayResultRequest,
    RecommendationRequest,
)

__all__ = [
    "AnchorRequest",
    "ClockReading",
    "ElapsedResponse",
    "EligibilityRequest",
    "EligibilityResponse",
    "EncounterCreateRequest",
    "EncounterResponse",
    "GateResponse",
    "HealthResponse",
    "ImagingRequest",
    "MilestoneRequest",
    "NavigateRequest",
    "NoteResponse",
    "OnsetRequest",
    "OrdersRequest",
    "PathwayResultRequest",
    "RecommendationRequest",
]
