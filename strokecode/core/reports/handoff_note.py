"""
Handoff Note Generator

Deterministic plain-text stroke code summary for copy-to-EMR and print.

Total over partial input: every line of every section is always emitted,
with PLACEHOLDER standing in for anything not yet known, so reviewers see
the same structure on every note.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from strokecode.core.dosing import alteplase_dose, tenecteplase_dose
from strokecode.core.eligibility import EligibilityAssessment, STATUS_DISPLAY
from strokecode.core.milestones import (
    MILESTONE_TARGETS,
    Badge,
    Milestone,
    MilestoneTracker,
    minutes_between,
)
from strokecode.core.orders import group_orders
from strokecode.core.workflow.state import (
    AGENT_LABELS,
    DISABLING_SYMPTOMS,
    IMAGING_RESULT_LABELS,
    ImagingAndTreatment,
    LvoFinding,
    OnsetAssessment,
    TreatmentAgent,
)

PLACEHOLDER = "—"

NOTE_TITLE = "STROKE CODE SUMMARY"

SECTION_HEADINGS = (
    "1. LAST KNOWN WELL (LKW):",
    "2. HOSPITAL ARRIVAL (DOOR TIME):",
    "3. EVALUATION:",
    "4. BRAIN IMAGING:",
    "5. TREATMENT:",
    "6. THROMBECTOMY (if applicable):",
    "7. ORDERS PLACED:",
    "8. RECOMMENDATION / NEXT STEPS:",
    "9. DATA QUALITY:",
)

LVO_LABELS = {
    LvoFinding.YES: "Yes",
    LvoFinding.NO: "No",
    LvoFinding.PENDING: "Pending",
}


def format_timestamp(ts: Optional[datetime]) -> str:
    if ts is None:
        return PLACEHOLDER
    return ts.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def _value(value, suffix: str = "") -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value}{suffix}"


def _milestone_line(label: str, milestones: Optional[MilestoneTracker], milestone: Milestone) -> str:
    """'<label>: <time> (<n> min from door[, PASS|FAIL target <=N])'."""
    if milestones is None or milestones.get(milestone) is None:
        return f"- {label}: {PLACEHOLDER}"
    reading = milestones.reading(milestone)
    text = format_timestamp(reading.timestamp)
    if reading.minutes_from_anchor is not None:
        detail = f"{reading.minutes_from_anchor} min from door"
        target = MILESTONE_TARGETS.get(milestone)
        if target is not None and reading.badge in (Badge.PASS, Badge.FAIL):
            detail += f", {reading.badge.value.upper()} {target.describe()}"
            if reading.tier:
                detail += f", {reading.tier}"
        text += f" ({detail})"
    return f"- {label}: {text}"


def _onset_section(onset: Optional[OnsetAssessment]) -> List[str]:
    if onset is None:
        lkw = PLACEHOLDER
    elif onset.onset_unknown:
        lkw = "Unknown (wake-up/unwitnessed)"
    else:
        lkw = format_timestamp(onset.onset)
    lines = [
        f"- LKW: {lkw}",
        f"- Symptom discovery: {format_timestamp(onset.symptom_discovery if onset else None)}",
        f"- NIHSS: {_value(onset.severity if onset else None)}",
    ]
    if onset and onset.systolic and onset.diastolic:
        lines.append(f"- BP: {onset.systolic}/{onset.diastolic} mmHg" + (" (treating)" if onset.bp_treating else ""))
    else:
        lines.append(f"- BP: {PLACEHOLDER}")
    lines.append(f"- Glucose: {_value(onset.glucose if onset else None, ' mg/dL')}")
    if onset and onset.weight:
        lines.append(f"- Weight: {onset.weight} {onset.weight_unit.value} ({onset.weight_kg} kg)")
    else:
        lines.append(f"- Weight: {PLACEHOLDER}")
    if onset and onset.disabling_symptoms:
        labels = ", ".join(DISABLING_SYMPTOMS[s] for s in onset.disabling_symptoms)
        lines.append(f"- Disabling symptoms: {labels}")
    if onset and onset.low_glucose_reviewed:
        lines.append("- Low glucose (<50) guidance reviewed: treat with dextrose, recheck, reassess for thrombolysis.")
    return lines


def _evaluation_section(
    milestones: Optional[MilestoneTracker],
    eligibility: Optional[EligibilityAssessment],
) -> List[str]:
    lines = [
        _milestone_line("Code activation", milestones, Milestone.CODE_ACTIVATION),
        _milestone_line("Door to data", milestones, Milestone.DATA_CAPTURED),
        _milestone_line("Neurologist evaluation", milestones, Milestone.NEURO_EVALUATION),
    ]
    if eligibility is None:
        lines.append(f"- Thrombolysis eligibility: {PLACEHOLDER}")
    else:
        hours = f"{eligibility.elapsed_hours:.1f} h from LKW" if eligibility.elapsed_hours is not None else "LKW unknown"
        lines.append(
            f"- Thrombolysis eligibility: {STATUS_DISPLAY[eligibility.status].title} "
            f"(assessed {format_timestamp(eligibility.saved_at)}, {hours})"
        )
    return lines


def _imaging_section(
    imaging: Optional[ImagingAndTreatment],
    milestones: Optional[MilestoneTracker],
) -> List[str]:
    result = IMAGING_RESULT_LABELS[imaging.result] if imaging and imaging.result else PLACEHOLDER
    if imaging is None:
        cta = PLACEHOLDER
    else:
        cta = "Ordered" if imaging.cta_ordered else "Not ordered"
    lvo = LVO_LABELS[imaging.lvo] if imaging and imaging.lvo else PLACEHOLDER
    return [
        _milestone_line("CT ordered", milestones, Milestone.IMAGING_ORDERED),
        _milestone_line("CT first image", milestones, Milestone.FIRST_IMAGE),
        _milestone_line("CT interpreted", milestones, Milestone.IMAGE_INTERPRETED),
        f"- CT result: {result}",
        f"- CTA: {cta}",
        f"- LVO: {lvo}",
    ]


def _agent_label(imaging: Optional[ImagingAndTreatment], onset: Optional[OnsetAssessment]) -> str:
    if imaging is None or imaging.agent is None:
        return PLACEHOLDER
    label = AGENT_LABELS[imaging.agent]
    weight_kg = onset.weight_kg if onset else 0
    if imaging.agent == TreatmentAgent.ALTEPLASE and weight_kg > 0:
        dose = alteplase_dose(weight_kg)
        return f"{label} {dose.total} mg (bolus {dose.bolus} mg, infusion {dose.infusion} mg over 60 min)"
    if imaging.agent == TreatmentAgent.TENECTEPLASE and weight_kg > 0:
        return f"{label} {tenecteplase_dose(weight_kg)} mg IV bolus"
    return label


def _treatment_section(
    onset: Optional[OnsetAssessment],
    imaging: Optional[ImagingAndTreatment],
    milestones: Optional[MilestoneTracker],
) -> List[str]:
    lkw = onset.onset if onset else None
    lkw_to_needle = milestones.lkw_to_needle_minutes(lkw) if milestones else None
    met = milestones.arrive_by_treat_by(lkw) if milestones else None
    return [
        f"- Agent: {_agent_label(imaging, onset)}",
        _milestone_line("Door-to-needle", milestones, Milestone.AGENT_ADMINISTERED),
        f"- LKW-to-needle: {_value(lkw_to_needle, ' min (standard window <=270)')}",
        f"- Arrive by 3.5h, treat by 4.5h: {PLACEHOLDER if met is None else ('Met' if met else 'Not met')}",
    ]


def _procedural_section(milestones: Optional[MilestoneTracker]) -> List[str]:
    if milestones is None or not milestones.has_procedural_times():
        return ["- Not applicable / not recorded"]
    return [
        _milestone_line("Groin puncture", milestones, Milestone.VESSEL_ACCESS),
        _milestone_line("First device deployment", milestones, Milestone.DEVICE_DEPLOYMENT),
        _milestone_line("First reperfusion", milestones, Milestone.REPERFUSION),
    ]


def _orders_section(orders: Optional[Iterable[str]]) -> List[str]:
    if orders is None:
        return [f"- {PLACEHOLDER}"]
    grouped = group_orders(orders)
    if not grouped:
        return ["- None selected"]
    lines = []
    for title, labels in grouped.items():
        lines.append(f"- {title}:")
        lines.extend(f"  - {label}" for label in labels)
    return lines


def _quality_section(milestones: Optional[MilestoneTracker]) -> List[str]:
    warnings = milestones.data_quality_warnings() if milestones else []
    if not warnings:
        return ["- No out-of-order times"]
    return [f"- WARNING: {w.message}" for w in warnings]


def render_handoff_note(
    onset: Optional[OnsetAssessment] = None,
    imaging: Optional[ImagingAndTreatment] = None,
    milestones: Optional[MilestoneTracker] = None,
    orders: Optional[Iterable[str]] = None,
    notes: str = "",
    recommendation: str = "",
    eligibility: Optional[EligibilityAssessment] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Render the handoff note.

    Args:
        onset: Stage 1 data, if captured
        imaging: Stage 2 data, if captured
        milestones: Milestone tracker holding the door-time anchor
        orders: Selected order ids (None = not yet chosen, [] = none selected)
        notes: Free-text clinical notes
        recommendation: Free-text recommendation / next steps
        eligibility: Saved eligibility assessment
        now: Reference time for the total code duration

    Returns:
        The note as plain text
    """
    anchor = milestones.anchor if milestones else None
    sections = [
        _onset_section(onset),
        [f"- Door time: {format_timestamp(anchor)}"],
        _evaluation_section(milestones, eligibility),
        _imaging_section(imaging, milestones),
        _treatment_section(onset, imaging, milestones),
        _procedural_section(milestones),
        _orders_section(orders),
        [f"- {recommendation.strip() or PLACEHOLDER}", f"- Notes: {notes.strip() or PLACEHOLDER}"],
        _quality_section(milestones),
    ]

    lines = [NOTE_TITLE, "=" * 50, ""]
    for heading, body in zip(SECTION_HEADINGS, sections):
        lines.append(heading)
        lines.extend(body)
        lines.append("")

    total = minutes_between(anchor, now)
    lines.append(f"Total code duration: {_value(total, ' minutes from door')}")
    return "\n".join(lines) + "\n"
