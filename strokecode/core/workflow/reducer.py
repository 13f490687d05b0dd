"""
Workflow Reducer

Pure transitions over :class:`WorkflowState`. Each function takes the
current state and ``now`` and returns a :class:`Transition` holding a new
state; the input state is never mutated.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from strokecode.core.eligibility import EligibilityAssessment
from strokecode.core.milestones import Milestone, MilestoneTracker
from strokecode.core.orders import default_orders
from strokecode.core.timing import normalize_onset
from strokecode.utils import get_logger, WorkflowNavigationError
from .gates import GateResult, check_imaging_gate, check_onset_gate
from .state import (
    ImagingAndTreatment,
    OnsetAssessment,
    STAGE_ORDER,
    WorkflowStage,
    WorkflowState,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Transition:
    state: WorkflowState
    gate: GateResult = GateResult()
    completed: Optional[WorkflowStage] = None


def initial_state(now: datetime) -> WorkflowState:
    """Fresh encounter anchored at ``now``."""
    return WorkflowState(milestones=MilestoneTracker(anchor=now))


def _advance(state: WorkflowState, completed: WorkflowStage) -> None:
    following = STAGE_ORDER[completed.index + 1]
    state.stage = following
    if following.index > state.furthest_stage.index:
        state.furthest_stage = following


def complete_onset(state: WorkflowState, onset: OnsetAssessment, now: datetime) -> Transition:
    """
    CollectingOnset -> CollectingImaging.

    The onset is clock-skew corrected before the gate runs. On success it is
    stored and the ``data_captured`` milestone is stamped unless already
    recorded.
    """
    onset = copy.deepcopy(onset)
    onset.onset = normalize_onset(onset.onset, now)
    gate = check_onset_gate(onset, now)
    if not gate.passed:
        logger.info(f"Onset gate rejected: missing {', '.join(gate.missing_fields)}")
        return Transition(state, gate)

    new = copy.deepcopy(state)
    new.onset = onset
    if new.milestones.get(Milestone.DATA_CAPTURED) is None:
        new.milestones.record(Milestone.DATA_CAPTURED, now)
    _advance(new, WorkflowStage.COLLECTING_ONSET)
    logger.info(f"Stage complete: {WorkflowStage.COLLECTING_ONSET.value} -> {new.stage.value}")
    return Transition(new, gate, WorkflowStage.COLLECTING_ONSET)


def complete_imaging(state: WorkflowState, imaging: ImagingAndTreatment, now: datetime) -> Transition:
    """
    CollectingImaging -> Summarizing.

    Rejected until stage 1 has been completed. Entered minute values are
    back-computed into absolute milestone timestamps relative to the
    anchor. Orders default on first completion.
    """
    onset_completed = (
        state.onset is not None
        and state.furthest_stage.index >= WorkflowStage.COLLECTING_IMAGING.index
    )
    gate = check_imaging_gate(imaging, onset_completed)
    if not gate.passed:
        logger.info(f"Imaging gate rejected: missing {', '.join(gate.missing_fields)}")
        return Transition(state, gate)

    new = copy.deepcopy(state)
    new.imaging = copy.deepcopy(imaging)
    anchor = new.milestones.anchor
    if anchor is not None:
        new.milestones.record(
            Milestone.FIRST_IMAGE, anchor + timedelta(minutes=imaging.minutes_to_imaging)
        )
        if imaging.agent_given:
            new.milestones.record(
                Milestone.AGENT_ADMINISTERED, anchor + timedelta(minutes=imaging.minutes_to_treatment)
            )
    if new.orders is None:
        new.orders = default_orders(imaging.agent.value if imaging.agent else None)
    _advance(new, WorkflowStage.COLLECTING_IMAGING)
    logger.info(f"Stage complete: {WorkflowStage.COLLECTING_IMAGING.value} -> {new.stage.value}")
    return Transition(new, gate, WorkflowStage.COLLECTING_IMAGING)


def navigate(state: WorkflowState, stage: WorkflowStage) -> Transition:
    """Manual navigation to any stage already reached. Saved data is kept."""
    stage = WorkflowStage(stage)
    if stage.index > state.furthest_stage.index:
        raise WorkflowNavigationError(
            f"Stage '{stage.value}' has not been reached yet", stage=stage.value
        )
    new = copy.deepcopy(state)
    new.stage = stage
    return Transition(new)


def record_milestone(state: WorkflowState, name, timestamp: datetime) -> Transition:
    new = copy.deepcopy(state)
    new.milestones.record(name, timestamp)
    return Transition(new)


def clear_milestone(state: WorkflowState, name) -> Transition:
    new = copy.deepcopy(state)
    new.milestones.clear(name)
    return Transition(new)


def clear_all_milestones(state: WorkflowState) -> Transition:
    new = copy.deepcopy(state)
    new.milestones.clear_all()
    return Transition(new)


def set_anchor(state: WorkflowState, anchor: Optional[datetime]) -> Transition:
    new = copy.deepcopy(state)
    new.milestones.set_anchor(anchor)
    return Transition(new)


def save_eligibility(state: WorkflowState, assessment: EligibilityAssessment) -> Transition:
    new = copy.deepcopy(state)
    new.eligibility = assessment
    return Transition(new)


def set_orders(state: WorkflowState, order_ids: Iterable[str]) -> Transition:
    new = copy.deepcopy(state)
    new.orders = list(dict.fromkeys(order_ids))
    return Transition(new)


def set_recommendation(state: WorkflowState, text: str) -> Transition:
    new = copy.deepcopy(state)
    new.recommendation = text
    return Transition(new)


def set_notes(state: WorkflowState, text: str) -> Transition:
    new = copy.deepcopy(state)
    new.notes = text
    return Transition(new)
