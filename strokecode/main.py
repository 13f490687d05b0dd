"""
Stroke Code Engine - FastAPI Application

HTTP host for one-encounter-at-a-time stroke code sessions:
- Stage 1/2 completion with gate feedback
- Thrombolysis eligibility save
- Door-time milestones
- Orders, recommendation and handoff note (text and PDF)
- Dosing lookup
"""
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional
import uuid

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import FileResponse

from strokecode import __version__, config
from strokecode.core.dosing import WeightUnit, dosing_for
from strokecode.core.eligibility import DEFAULT_CATALOG, FindingCategory, FindingSelection, STATUS_DISPLAY
from strokecode.core.orders import ORDERS, default_orders
from strokecode.core.reports import HandoffPdfRenderer
from strokecode.core.timing import resolve_clock_time, to_24_hour, utcnow
from strokecode.models import (
    AnchorRequest,
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
from strokecode.services import SessionStore, WorkflowService, build_port
from strokecode.utils import (
    get_logger,
    setup_logging,
    StrokeCodeError,
    UnknownFindingError,
    UnknownMilestoneError,
    WorkflowNavigationError,
)

setup_logging(config.LOG_LEVEL, config.LOG_FILE or None)
logger = get_logger(__name__)

START_TIME = utcnow()

# ---- Session backend singleton ----
_kv_port = build_port()
_clock = utcnow


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Stroke code API ready (session backend: {config.SESSION_BACKEND})")
    yield
    close = getattr(_kv_port, "close", None)
    if close is not None:
        close()
    logger.info("Stroke code API shut down.")


app = FastAPI(
    title="Stroke Code Engine API",
    description="Acute stroke code workflow: treatment windows, eligibility, milestones and handoff notes",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ---- Helpers ----

def _store(encounter_id: str) -> SessionStore:
    return SessionStore.for_encounter(_kv_port, encounter_id, clock=_clock)


def _load(encounter_id: str) -> WorkflowService:
    """Restore the encounter's service; 404 when no live snapshot exists."""
    store = _store(encounter_id)
    if store.load() is None:
        raise HTTPException(status_code=404, detail=f"Encounter {encounter_id} not found or expired")
    return WorkflowService.restore(store, clock=_clock)


def _http_error(e: StrokeCodeError) -> HTTPException:
    if isinstance(e, (UnknownFindingError, UnknownMilestoneError)):
        status = 400
    elif isinstance(e, WorkflowNavigationError):
        status = 409
    else:
        status = 500
    return HTTPException(status_code=status, detail=e.to_dict())


def _encounter_response(encounter_id: str, service: WorkflowService) -> EncounterResponse:
    state = service.state
    window = service.current_window()
    guidance = service.window_guidance()
    dosing = service.dosing()
    return EncounterResponse(
        encounter_id=encounter_id,
        stage=state.stage.value,
        furthest_stage=state.furthest_stage.value,
        elapsed_hours=round(service.current_elapsed_hours(), 2),
        window=window.value if window else None,
        window_guidance={"title": guidance.title, "message": guidance.message} if guidance else None,
        dosing=dosing.to_dict() if dosing else None,
        disabling_symptoms_offered=service.disabling_symptoms_offered(),
        warnings=[w.to_dict() for w in service.vitals_warnings()],
        data_quality=[w.to_dict() for w in state.milestones.data_quality_warnings()],
        milestones=[r.to_dict() for r in state.milestones.readings()],
        state=state.to_dict(),
    )


# ---- Health ----

def _health() -> HealthResponse:
    now = utcnow()
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=now.isoformat(),
        uptime_seconds=(now - START_TIME).total_seconds(),
    )


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return _health()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return _health()


# ---- Encounters ----

@app.post("/api/v1/encounters", response_model=EncounterResponse, status_code=201, tags=["Encounters"])
async def create_encounter(request: EncounterCreateRequest):
    """Start a fresh encounter anchored at the door time (default: now)."""
    encounter_id = request.encounter_id or uuid.uuid4().hex[:12]
    service = WorkflowService(store=_store(encounter_id), clock=_clock)
    service.set_anchor(request.door_time or _clock())
    logger.info(f"Encounter {encounter_id} started")
    return _encounter_response(encounter_id, service)


@app.get("/api/v1/encounters/{encounter_id}", response_model=EncounterResponse, tags=["Encounters"])
async def get_encounter(encounter_id: str):
    return _encounter_response(encounter_id, _load(encounter_id))


@app.delete("/api/v1/encounters/{encounter_id}", tags=["Encounters"])
async def reset_encounter(encounter_id: str):
    """Clear every entity and the session record."""
    service = WorkflowService(store=_store(encounter_id), clock=_clock)
    service.reset()
    return {"encounter_id": encounter_id, "reset": True}


@app.get("/api/v1/encounters/{encounter_id}/elapsed", response_model=ElapsedResponse, tags=["Encounters"])
async def get_elapsed(encounter_id: str):
    """Live elapsed hours since LKW, re-derived from the clock on every call."""
    service = _load(encounter_id)
    window = service.current_window()
    guidance = service.window_guidance()
    return ElapsedResponse(
        encounter_id=encounter_id,
        elapsed_hours=round(service.current_elapsed_hours(), 2),
        window=window.value if window else None,
        guidance=guidance.message if guidance else None,
    )


@app.post("/api/v1/encounters/{encounter_id}/navigate", response_model=EncounterResponse, tags=["Encounters"])
async def navigate(encounter_id: str, request: NavigateRequest):
    service = _load(encounter_id)
    try:
        service.navigate_to(request.stage)
    except StrokeCodeError as e:
        raise _http_error(e)
    return _encounter_response(encounter_id, service)


# ---- Stages ----

@app.post("/api/v1/encounters/{encounter_id}/onset", response_model=GateResponse, tags=["Stages"])
async def complete_onset(encounter_id: str, request: OnsetRequest):
    """
    Complete stage 1 (onset and vitals).

    A rejected gate is a 200 with ``passed`` false and the missing fields.
    """
    service = _load(encounter_id)
    onset = request.onset
    if onset is None and request.onset_clock is not None:
        clock = request.onset_clock
        hour = to_24_hour(clock.hour, clock.period) if clock.period else clock.hour
        onset = resolve_clock_time(hour, clock.minute, _clock())
    assessment = request.to_assessment(onset)
    gate = service.complete_onset(assessment)
    return GateResponse(
        **gate.to_dict(),
        stage=service.state.stage.value,
        warnings=[w.to_dict() for w in service.vitals_warnings(assessment)],
    )


@app.post("/api/v1/encounters/{encounter_id}/imaging", response_model=GateResponse, tags=["Stages"])
async def complete_imaging(encounter_id: str, request: ImagingRequest):
    service = _load(encounter_id)
    gate = service.complete_imaging(request.to_entity())
    return GateResponse(**gate.to_dict(), stage=service.state.stage.value)


# ---- Eligibility ----

@app.post("/api/v1/encounters/{encounter_id}/eligibility", response_model=EligibilityResponse, tags=["Eligibility"])
async def save_eligibility(encounter_id: str, request: EligibilityRequest):
    """Apply the submitted toggles to a fresh evaluator and save the frozen assessment."""
    service = _load(encounter_id)
    evaluator = service.open_evaluator()
    evaluator.selection = FindingSelection()
    try:
        for category, ids in (
            (FindingCategory.ABSOLUTE, request.absolute),
            (FindingCategory.RELATIVE, request.relative),
            (FindingCategory.WINDOW_DEPENDENT, request.window_dependent),
        ):
            for finding_id in ids:
                evaluator.toggle(category, finding_id, True)
        for criterion_id in request.inclusion:
            evaluator.set_inclusion(criterion_id, True)
    except StrokeCodeError as e:
        raise _http_error(e)
    evaluator.notes = request.notes

    assessment = service.save_eligibility(evaluator)
    display = STATUS_DISPLAY[assessment.status]
    return EligibilityResponse(
        encounter_id=encounter_id,
        status=assessment.status.value,
        title=display.title,
        message=display.message,
        window_dependent_active=assessment.window_dependent_active,
        assessment=assessment.to_dict(),
        emr_text=evaluator.to_emr_text(),
    )


# ---- Milestones ----

@app.post("/api/v1/encounters/{encounter_id}/milestones/{name}", tags=["Milestones"])
async def record_milestone(encounter_id: str, name: str, request: MilestoneRequest):
    service = _load(encounter_id)
    timestamp = request.timestamp
    anchor = service.state.milestones.anchor
    if timestamp is None and request.minutes_from_door is not None and anchor is not None:
        timestamp = anchor + timedelta(minutes=request.minutes_from_door)
    try:
        reading = service.record_milestone(name, timestamp)
    except StrokeCodeError as e:
        raise _http_error(e)
    return reading.to_dict()


@app.delete("/api/v1/encounters/{encounter_id}/milestones/{name}", tags=["Milestones"])
async def clear_milestone(encounter_id: str, name: str):
    service = _load(encounter_id)
    try:
        service.clear_milestone(name)
    except StrokeCodeError as e:
        raise _http_error(e)
    return {"encounter_id": encounter_id, "cleared": name}


@app.delete("/api/v1/encounters/{encounter_id}/milestones", tags=["Milestones"])
async def clear_all_milestones(encounter_id: str):
    service = _load(encounter_id)
    service.clear_all_milestones()
    return {"encounter_id": encounter_id, "cleared": "all"}


@app.put("/api/v1/encounters/{encounter_id}/anchor", response_model=EncounterResponse, tags=["Milestones"])
async def set_anchor(encounter_id: str, request: AnchorRequest):
    service = _load(encounter_id)
    service.set_anchor(request.door_time)
    return _encounter_response(encounter_id, service)


# ---- Summary ----

@app.put("/api/v1/encounters/{encounter_id}/orders", tags=["Summary"])
async def set_orders(encounter_id: str, request: OrdersRequest):
    service = _load(encounter_id)
    return {"encounter_id": encounter_id, "orders": service.set_orders(request.order_ids)}


@app.put("/api/v1/encounters/{encounter_id}/recommendation", tags=["Summary"])
async def set_recommendation(encounter_id: str, request: RecommendationRequest):
    service = _load(encounter_id)
    service.set_recommendation(request.text)
    if request.notes is not None:
        service.set_notes(request.notes)
    return {"encounter_id": encounter_id, "recommendation": service.state.recommendation}


@app.post("/api/v1/encounters/{encounter_id}/pathway-result", tags=["Summary"])
async def record_pathway_result(encounter_id: str, request: PathwayResultRequest):
    """Store an external thrombectomy pathway outcome as the recommendation."""
    service = _load(encounter_id)
    text = service.record_pathway_result(request.status, request.reason, request.criteria_name)
    return {"encounter_id": encounter_id, "recommendation": text}


@app.get("/api/v1/encounters/{encounter_id}/note", response_model=NoteResponse, tags=["Summary"])
async def get_note(encounter_id: str):
    service = _load(encounter_id)
    now = _clock()
    return NoteResponse(encounter_id=encounter_id, note=service.render_note(now), generated_at=now.isoformat())


@app.get("/api/v1/encounters/{encounter_id}/note/pdf", tags=["Summary"])
async def download_note_pdf(encounter_id: str):
    service = _load(encounter_id)
    now = _clock()
    try:
        renderer = HandoffPdfRenderer(config.REPORT_OUTPUT_DIR)
        path = renderer.render(
            service.render_note(now),
            note_id=f"{encounter_id}-{now.strftime('%Y%m%d%H%M%S')}",
            generated_at=now,
        )
    except Exception as e:
        logger.error(f"Handoff PDF failed: {e}")
        raise HTTPException(status_code=500, detail=f"PDF generation failed: {str(e)}")
    return FileResponse(path=path, media_type="application/pdf", filename=f"{encounter_id}.pdf")


# ---- Reference ----

@app.get("/api/v1/dosing", tags=["Reference"])
async def dosing_lookup(
    weight: float = Query(..., description="Body weight"),
    unit: WeightUnit = Query(WeightUnit.KG),
):
    return dosing_for(weight, unit).to_dict()


@app.get("/api/v1/reference/contraindications", tags=["Reference"])
async def list_contraindications():
    return {
        "inclusion": [{"id": c.criterion_id, "label": c.label} for c in DEFAULT_CATALOG.inclusion],
        **{
            category.value: [
                {"id": fid, "label": DEFAULT_CATALOG.label(category, fid)}
                for fid in DEFAULT_CATALOG.ids(category)
            ]
            for category in FindingCategory
        },
    }


@app.get("/api/v1/reference/orders", tags=["Reference"])
async def list_orders(agent: Optional[str] = Query(None)):
    return {
        "orders": [order.to_dict() for order in ORDERS],
        "defaults": default_orders(agent),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("strokecode.main:app", host="0.0.0.0", port=8000, reload=False)
