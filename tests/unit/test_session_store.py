"""
Unit Tests for the Session Store and key/value ports
"""
import json
import pytest
from datetime import timedelta

from strokecode.core.milestones import Milestone
from strokecode.core.workflow import (
    ImagingAndTreatment,
    ImagingResult,
    TreatmentAgent,
    WorkflowStage,
    WorkflowState,
    reducer,
    initial_state,
)
from strokecode.core.eligibility import ContraindicationEvaluator, FindingCategory
from strokecode.services import DiskCacheKeyValueStore, InMemoryKeyValueStore, SessionStore, WorkflowService


class FailingPort(InMemoryKeyValueStore):
    def set(self, key, value):
        raise OSError("quota exceeded")


@pytest.fixture
def populated_state(scenario_a_onset, clock) -> WorkflowState:
    now = clock()
    state = reducer.complete_onset(initial_state(now - timedelta(minutes=5)), scenario_a_onset, now).state
    imaging = ImagingAndTreatment(
        result=ImagingResult.NO_BLEED,
        agent=TreatmentAgent.TENECTEPLASE,
        cta_ordered=True,
        minutes_to_imaging=21,
        minutes_to_treatment=37,
    )
    state = reducer.complete_imaging(state, imaging, now).state
    evaluator = ContraindicationEvaluator(onset=scenario_a_onset.onset, clock=clock)
    evaluator.toggle(FindingCategory.WINDOW_DEPENDENT, "age_80", True)
    state = reducer.save_eligibility(state, evaluator.save()).state
    state = reducer.record_milestone(state, Milestone.REPERFUSION, now + timedelta(minutes=95, seconds=12)).state
    state = reducer.set_recommendation(state, "Admit to stroke unit").state
    return state


class TestRoundTrip:

    def test_full_state_round_trip(self, session_store, populated_state):
        assert session_store.save(populated_state.to_dict())
        restored = WorkflowState.from_dict(session_store.load())

        assert restored.onset == populated_state.onset
        assert restored.imaging == populated_state.imaging
        assert restored.eligibility == populated_state.eligibility
        assert restored.milestones == populated_state.milestones
        assert restored.orders == populated_state.orders
        assert restored.recommendation == populated_state.recommendation
        assert restored.stage == populated_state.stage

    def test_timestamps_survive_to_the_second(self, session_store, populated_state):
        session_store.save(populated_state.to_dict())
        restored = WorkflowState.from_dict(session_store.load())
        original = populated_state.milestones.get(Milestone.REPERFUSION)
        assert restored.milestones.get(Milestone.REPERFUSION) == original

    def test_snapshot_is_json_text(self, session_store, memory_port, populated_state):
        session_store.save(populated_state.to_dict())
        raw = json.loads(memory_port.get(session_store.key))
        assert raw["written_at"].startswith("2026-03-14T12:00:00")
        assert raw["state"]["imaging"]["agent"] == "tenecteplase"


class TestExpiryAndCorruption:

    def test_missing_snapshot_is_absent(self, session_store):
        assert session_store.load() is None

    def test_expired_snapshot_is_absent(self, session_store, clock, populated_state):
        session_store.save(populated_state.to_dict())
        clock.advance(seconds=7200)
        assert session_store.load() is not None
        clock.advance(seconds=1)
        assert session_store.load() is None

    @pytest.mark.parametrize("raw", [
        "not json",
        "{}",
        '{"version": 1, "written_at": "yesterday", "state": {}}',
        '{"version": 2, "written_at": "2026-03-14T12:00:00+00:00", "state": {}}',
        "[]",
    ])
    def test_corrupt_snapshot_is_absent(self, session_store, memory_port, raw):
        memory_port.set(session_store.key, raw)
        assert session_store.load() is None

    @pytest.mark.parametrize("state", [
        {"milestones": "garbage"},
        {"milestones": {"milestones": "x"}},
        {"onset": "x"},
        {"imaging": ["x"]},
        {"eligibility": {"status": "maybe"}},
        {"stage": "lunch"},
    ])
    def test_wrong_shape_state_restores_fresh(self, session_store, clock, state):
        session_store.save(state)
        service = WorkflowService.restore(session_store, clock=clock)
        assert service.state.stage == WorkflowStage.COLLECTING_ONSET
        assert service.state.onset is None
        assert service.state.milestones.anchor == clock()

    def test_write_failure_is_swallowed(self, clock):
        store = SessionStore(FailingPort(), "k", clock=clock)
        assert store.save({"stage": "collectingOnset"}) is False

    def test_clear_removes_record(self, session_store, memory_port):
        session_store.save({"stage": "collectingOnset"})
        session_store.clear()
        assert memory_port.get(session_store.key) is None

    def test_encounter_keys_are_isolated(self, memory_port, clock):
        a = SessionStore.for_encounter(memory_port, "a", clock=clock)
        b = SessionStore.for_encounter(memory_port, "b", clock=clock)
        a.save({"recommendation": "a"})
        assert b.load() is None
        assert a.key.endswith(":a")


class TestDiskCachePort:

    def test_get_set_remove(self, tmp_path):
        port = DiskCacheKeyValueStore(str(tmp_path / "cache"))
        try:
            port.set("key", "value")
            assert port.get("key") == "value"
            port.remove("key")
            assert port.get("key") is None
        finally:
            port.close()

    def test_session_store_over_disk(self, tmp_path, clock, populated_state):
        port = DiskCacheKeyValueStore(str(tmp_path / "cache"))
        try:
            store = SessionStore(port, "encounter", clock=clock)
            store.save(populated_state.to_dict())
            assert WorkflowState.from_dict(store.load()).imaging == populated_state.imaging
        finally:
            port.close()
