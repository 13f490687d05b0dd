"""
Pytest Configuration and Fixtures

Shared fixtures for stroke code engine tests.
"""
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from strokecode.core.dosing import WeightUnit
from strokecode.core.workflow import OnsetAssessment, SharedTicker
from strokecode.services import InMemoryKeyValueStore, SessionStore, WorkflowService


NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock, injectable wherever a ``Clock`` is accepted."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_port() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def session_store(memory_port, clock) -> SessionStore:
    return SessionStore(memory_port, "strokecode:encounter:test", ttl_seconds=7200, clock=clock)


@pytest.fixture
def service(session_store, clock) -> WorkflowService:
    """Fresh encounter anchored at NOW (door time)."""
    svc = WorkflowService(store=session_store, clock=clock, ticker=SharedTicker(0.01))
    yield svc
    svc.close()


@pytest.fixture
def output_dir(tmp_path) -> Path:
    path = tmp_path / "reports"
    path.mkdir()
    return path


@pytest.fixture
def scenario_a_onset(now) -> OnsetAssessment:
    """Onset 3 h ago, NIHSS 8, 150/90, glucose 110, 70 kg."""
    return OnsetAssessment(
        onset=now - timedelta(hours=3),
        severity=8,
        systolic=150,
        diastolic=90,
        glucose=110,
        weight=70,
        weight_unit=WeightUnit.KG,
    )
