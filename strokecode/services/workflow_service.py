"""
Workflow Service

The single object views consume: it owns the encounter state, applies
reducer transitions, writes a session snapshot after every mutation, then
notifies subscribers. Side-effect failures (storage, clipboard, print)
become Notifications and never escape.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from strokecode import config
from strokecode.core.dosing import DosingSummary, dosing_for
from strokecode.core.eligibility import (
    ContraindicationCatalog,
    ContraindicationEvaluator,
    DEFAULT_CATALOG,
    EligibilityAssessment,
)
from strokecode.core.milestones import MilestoneReading
from strokecode.core.reports import HandoffPdfRenderer, render_handoff_note
from strokecode.core.timing import (
    Clock,
    TreatmentWindow,
    WINDOW_GUIDANCE,
    WindowGuidance,
    classify_window,
    elapsed_hours,
    utcnow,
)
from strokecode.core.workflow import (
    GateResult,
    ImagingAndTreatment,
    Notification,
    NotificationLevel,
    OnsetAssessment,
    SharedTicker,
    Transition,
    WorkflowStage,
    WorkflowState,
    disabling_symptoms_offered,
    initial_state,
    reducer,
    vitals_warnings,
)
from strokecode.utils import get_logger, StrokeCodeError
from .session_store import SessionStore

logger = get_logger(__name__)

StateListener = Callable[[WorkflowState], None]
StageListener = Callable[[WorkflowStage, Dict[str, Any]], None]


class ClipboardPort(Protocol):
    def write_text(self, text: str) -> None: ...


class PrintPort(Protocol):
    def print_text(self, text: str) -> Any: ...


def format_pathway_result(status: str, reason: str, criteria_name: Optional[str] = None) -> str:
    """Thrombectomy pathway outcome as stored in the recommendation field."""
    if criteria_name:
        return f"{status} ({criteria_name}): {reason}"
    return f"{status}: {reason}"


class WorkflowService:
    def __init__(
        self,
        store: Optional[SessionStore] = None,
        clock: Clock = utcnow,
        catalog: ContraindicationCatalog = DEFAULT_CATALOG,
        ticker: Optional[SharedTicker] = None,
        state: Optional[WorkflowState] = None,
    ):
        self.store = store
        self.catalog = catalog
        self._clock = clock
        self.state = state or initial_state(clock())
        self.ticker = ticker or SharedTicker(config.TICK_INTERVAL_SECONDS)
        self._listeners: List[StateListener] = []
        self._stage_listeners: List[StageListener] = []

    @classmethod
    def restore(cls, store: SessionStore, clock: Clock = utcnow, **kwargs) -> "WorkflowService":
        """Service resumed from the session snapshot, or fresh when none is usable."""
        state = None
        data = store.load()
        if data is not None:
            try:
                state = WorkflowState.from_dict(data)
            except (ValueError, KeyError, TypeError, AttributeError, StrokeCodeError) as e:
                logger.warning(f"Discarding unreadable session state {store.key}: {e}")
        return cls(store=store, clock=clock, state=state, **kwargs)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def on_stage_complete(self, listener: StageListener) -> Callable[[], None]:
        self._stage_listeners.append(listener)
        return lambda: self._stage_listeners.remove(listener) if listener in self._stage_listeners else None

    def watch_elapsed(self, callback: Callable[[float], None]) -> Callable[[], None]:
        """Live elapsed-hours feed on the shared tick."""
        return self.ticker.subscribe(lambda: callback(self.current_elapsed_hours()))

    def close(self) -> None:
        self.ticker.close()

    # ------------------------------------------------------------------
    # Stage transitions
    # ------------------------------------------------------------------

    def complete_onset(self, onset: OnsetAssessment) -> GateResult:
        return self._apply(reducer.complete_onset(self.state, onset, self._clock()))

    def complete_imaging(self, imaging: ImagingAndTreatment) -> GateResult:
        return self._apply(reducer.complete_imaging(self.state, imaging, self._clock()))

    def navigate_to(self, stage: WorkflowStage) -> WorkflowStage:
        self._apply(reducer.navigate(self.state, stage))
        return self.state.stage

    # ------------------------------------------------------------------
    # Milestones
    # ------------------------------------------------------------------

    def record_milestone(self, name, timestamp: Optional[datetime] = None) -> MilestoneReading:
        self._apply(reducer.record_milestone(self.state, name, timestamp or self._clock()))
        return self.state.milestones.reading(name)

    def clear_milestone(self, name) -> None:
        self._apply(reducer.clear_milestone(self.state, name))

    def clear_all_milestones(self) -> None:
        self._apply(reducer.clear_all_milestones(self.state))

    def set_anchor(self, anchor: Optional[datetime]) -> None:
        self._apply(reducer.set_anchor(self.state, anchor))

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------

    def open_evaluator(self) -> ContraindicationEvaluator:
        """Evaluator for the current onset, re-opened from the saved assessment if any."""
        onset = self.state.onset.onset if self.state.onset else None
        if self.state.eligibility is not None:
            evaluator = ContraindicationEvaluator.from_assessment(
                self.state.eligibility, catalog=self.catalog, clock=self._clock
            )
            evaluator.onset = onset
            return evaluator
        return ContraindicationEvaluator(onset=onset, catalog=self.catalog, clock=self._clock)

    def save_eligibility(self, evaluator: ContraindicationEvaluator) -> EligibilityAssessment:
        assessment = evaluator.save()
        self._apply(reducer.save_eligibility(self.state, assessment))
        return assessment

    # ------------------------------------------------------------------
    # Summary inputs
    # ------------------------------------------------------------------

    def set_orders(self, order_ids: Iterable[str]) -> List[str]:
        self._apply(reducer.set_orders(self.state, order_ids))
        return list(self.state.orders)

    def set_recommendation(self, text: str) -> None:
        self._apply(reducer.set_recommendation(self.state, text))

    def set_notes(self, text: str) -> None:
        self._apply(reducer.set_notes(self.state, text))

    def record_pathway_result(self, status: str, reason: str, criteria_name: Optional[str] = None) -> str:
        text = format_pathway_result(status, reason, criteria_name)
        self.set_recommendation(text)
        return text

    # ------------------------------------------------------------------
    # Live derived values
    # ------------------------------------------------------------------

    def current_elapsed_hours(self) -> float:
        onset = self.state.onset
        if onset is None or onset.onset_unknown:
            return 0.0
        return elapsed_hours(onset.onset, self._clock())

    def current_window(self) -> Optional[TreatmentWindow]:
        """None while onset is unknown or not captured."""
        onset = self.state.onset
        if onset is None or onset.onset is None:
            return None
        return classify_window(self.current_elapsed_hours())

    def window_guidance(self) -> Optional[WindowGuidance]:
        window = self.current_window()
        return WINDOW_GUIDANCE[window] if window else None

    def dosing(self) -> Optional[DosingSummary]:
        onset = self.state.onset
        if onset is None or not onset.weight:
            return None
        return dosing_for(onset.weight, onset.weight_unit)

    def vitals_warnings(self, onset: Optional[OnsetAssessment] = None) -> List[Notification]:
        onset = onset or self.state.onset
        return vitals_warnings(onset, self._clock()) if onset else []

    def disabling_symptoms_offered(self, onset: Optional[OnsetAssessment] = None) -> bool:
        onset = onset or self.state.onset
        return disabling_symptoms_offered(onset, self._clock()) if onset else False

    # ------------------------------------------------------------------
    # Note
    # ------------------------------------------------------------------

    def render_note(self, now: Optional[datetime] = None) -> str:
        state = self.state
        return render_handoff_note(
            onset=state.onset,
            imaging=state.imaging,
            milestones=state.milestones,
            orders=state.orders,
            notes=state.notes,
            recommendation=state.recommendation,
            eligibility=state.eligibility,
            now=now or self._clock(),
        )

    def copy_note(self, clipboard: ClipboardPort) -> Notification:
        try:
            clipboard.write_text(self.render_note())
        except Exception as e:
            logger.warning(f"Clipboard write failed: {e}")
            return Notification(NotificationLevel.ERROR, "Copy failed. Select the note text and copy manually.")
        return Notification(NotificationLevel.SUCCESS, "Note copied to clipboard")

    def print_note(self, printer: Optional[PrintPort] = None) -> Notification:
        try:
            printer = printer or HandoffPdfRenderer()
            printer.print_text(self.render_note())
        except Exception as e:
            logger.warning(f"Print failed: {e}")
            return Notification(NotificationLevel.ERROR, "Print failed. Copy the note instead.")
        return Notification(NotificationLevel.SUCCESS, "Note sent to print")

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Clear every entity and the session record; the anchor restarts at now."""
        self.state = initial_state(self._clock())
        if self.store is not None:
            self.store.clear()
        logger.info("Encounter reset")
        self._notify()

    # ------------------------------------------------------------------

    def _apply(self, transition: Transition) -> GateResult:
        if transition.state is self.state:
            return transition.gate
        self.state = transition.state
        self._persist()
        self._notify()
        if transition.completed is not None:
            self._notify_stage(transition.completed)
        return transition.gate

    def _persist(self) -> None:
        if self.store is not None:
            self.store.save(self.state.to_dict())

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception as e:
                logger.warning(f"State listener failed: {e}")

    def _notify_stage(self, stage: WorkflowStage) -> None:
        if stage == WorkflowStage.COLLECTING_ONSET:
            data = self.state.onset.to_dict()
        else:
            data = self.state.imaging.to_dict()
        for listener in list(self._stage_listeners):
            try:
                listener(stage, data)
            except Exception as e:
                logger.warning(f"Stage listener failed: {e}")
