"""
Unit Tests for the Handoff Note Generator
"""
import pytest
from datetime import timedelta

from strokecode.core.milestones import Milestone, MilestoneTracker
from strokecode.core.reports import PLACEHOLDER, SECTION_HEADINGS, render_handoff_note
from strokecode.core.workflow import (
    ImagingAndTreatment,
    ImagingResult,
    LvoFinding,
    OnsetAssessment,
    TreatmentAgent,
)


def _line(note: str, prefix: str) -> str:
    return next(line for line in note.splitlines() if line.startswith(prefix))


class TestStructure:

    def test_empty_input_keeps_every_section(self):
        note = render_handoff_note()
        positions = [note.index(heading) for heading in SECTION_HEADINGS]
        assert positions == sorted(positions)
        assert _line(note, "- LKW:") == f"- LKW: {PLACEHOLDER}"
        assert _line(note, "- Door time:") == f"- Door time: {PLACEHOLDER}"
        assert _line(note, "- CT first image:") == f"- CT first image: {PLACEHOLDER}"
        assert _line(note, "- Agent:") == f"- Agent: {PLACEHOLDER}"
        assert note.rstrip().endswith(f"Total code duration: {PLACEHOLDER}")

    def test_deterministic(self, now):
        tracker = MilestoneTracker(anchor=now)
        first = render_handoff_note(milestones=tracker, now=now)
        second = render_handoff_note(milestones=tracker, now=now)
        assert first == second

    def test_unknown_onset(self, now):
        note = render_handoff_note(onset=OnsetAssessment(onset_unknown=True), now=now)
        assert "- LKW: Unknown (wake-up/unwitnessed)" in note


class TestScenarioD:

    def test_minutes_and_badges_printed(self, now):
        tracker = MilestoneTracker(anchor=now)
        tracker.record(Milestone.IMAGING_ORDERED, now + timedelta(minutes=10))
        tracker.record(Milestone.FIRST_IMAGE, now + timedelta(minutes=22))
        tracker.record(Milestone.IMAGE_INTERPRETED, now + timedelta(minutes=50))

        note = render_handoff_note(milestones=tracker, now=now + timedelta(minutes=61))

        assert "(10 min from door)" in _line(note, "- CT ordered:")
        assert "22 min from door, PASS target <=25" in _line(note, "- CT first image:")
        assert "50 min from door, FAIL target <=45" in _line(note, "- CT interpreted:")
        assert "Total code duration: 61 minutes from door" in note


class TestTreatment:

    @pytest.fixture
    def treated(self, scenario_a_onset, now):
        tracker = MilestoneTracker(anchor=now)
        tracker.record(Milestone.AGENT_ADMINISTERED, now + timedelta(minutes=28))
        imaging = ImagingAndTreatment(
            result=ImagingResult.NO_BLEED,
            agent=TreatmentAgent.ALTEPLASE,
            cta_ordered=True,
            lvo=LvoFinding.PENDING,
            minutes_to_imaging=15,
            minutes_to_treatment=28,
        )
        return render_handoff_note(
            onset=scenario_a_onset,
            imaging=imaging,
            milestones=tracker,
            orders=["neuro_icu", "custom_order"],
            recommendation="Admit to neuro ICU",
            now=now + timedelta(minutes=40),
        )

    def test_alteplase_dose_in_note(self, treated):
        assert "Alteplase 63.0 mg (bolus 6.3 mg, infusion 56.7 mg" in treated

    def test_needle_metrics(self, treated):
        assert "28 min from door, PASS target <=60, best <=30" in _line(treated, "- Door-to-needle:")
        assert _line(treated, "- LKW-to-needle:").startswith("- LKW-to-needle: 208 min")
        assert _line(treated, "- Arrive by 3.5h") == "- Arrive by 3.5h, treat by 4.5h: Met"

    def test_imaging_fields(self, treated):
        assert "- CT result: No hemorrhage" in treated
        assert "- CTA: Ordered" in treated
        assert "- LVO: Pending" in treated

    def test_orders_and_recommendation(self, treated):
        assert "- Post-thrombolysis monitoring:\n  - Admit to Neuro ICU or dedicated stroke unit\n" in treated
        assert "- Other:\n  - custom_order\n" in treated
        assert "- Admit to neuro ICU\n" in treated

    def test_no_procedural_times(self, treated):
        assert "- Not applicable / not recorded" in treated

    def test_empty_orders_list(self, now):
        note = render_handoff_note(orders=[], now=now)
        assert "- None selected" in note


class TestProceduralAndQuality:

    def test_procedural_times_listed_when_present(self, now):
        tracker = MilestoneTracker(anchor=now)
        tracker.record(Milestone.VESSEL_ACCESS, now + timedelta(minutes=70))
        note = render_handoff_note(milestones=tracker, now=now)
        assert "(70 min from door)" in _line(note, "- Groin puncture:")
        assert _line(note, "- First reperfusion:") == f"- First reperfusion: {PLACEHOLDER}"

    def test_out_of_order_flagged(self, now):
        tracker = MilestoneTracker(anchor=now)
        tracker.record(Milestone.NEURO_EVALUATION, now - timedelta(minutes=4))
        note = render_handoff_note(milestones=tracker, now=now)
        assert "(-4 min from door)" in note
        assert "WARNING: Neurologist evaluation is 4 min before door time" in note
