"""
Integration Tests for the FastAPI host

Drives full encounters through the HTTP surface using async httpx over ASGI.
"""
import pytest
import httpx
from datetime import timedelta

from strokecode import main
from strokecode.services import InMemoryKeyValueStore, SessionStore


@pytest.fixture
def api_clock(clock, monkeypatch):
    monkeypatch.setattr(main, "_clock", clock)
    monkeypatch.setattr(main, "_kv_port", InMemoryKeyValueStore())
    return clock


@pytest.fixture
async def async_client(api_clock):
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=main.app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
async def encounter(async_client):
    response = await async_client.post("/api/v1/encounters", json={"encounter_id": "enc-1"})
    assert response.status_code == 201
    return "enc-1"


def _scenario_a(now):
    return {
        "onset": (now - timedelta(hours=3)).isoformat(),
        "severity": 8,
        "systolic": 150,
        "diastolic": 90,
        "glucose": 110,
        "weight": 70,
        "weight_unit": "kg",
    }


@pytest.mark.asyncio
class TestHealthEndpoints:

    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
class TestEncounterLifecycle:

    async def test_create_and_read(self, async_client, encounter):
        response = await async_client.get(f"/api/v1/encounters/{encounter}")
        assert response.status_code == 200
        data = response.json()
        assert data["stage"] == "collectingOnset"
        assert data["window"] is None
        assert data["state"]["milestones"]["anchor"].startswith("2026-03-14T12:00:00")

    async def test_unknown_encounter_404(self, async_client):
        response = await async_client.get("/api/v1/encounters/missing")
        assert response.status_code == 404

    async def test_expired_encounter_404(self, async_client, encounter, api_clock):
        api_clock.advance(hours=2, seconds=1)
        response = await async_client.get(f"/api/v1/encounters/{encounter}")
        assert response.status_code == 404

    async def test_unreadable_state_starts_fresh(self, async_client, api_clock):
        SessionStore.for_encounter(main._kv_port, "bad", clock=api_clock).save({"milestones": "garbage"})
        response = await async_client.get("/api/v1/encounters/bad")
        assert response.status_code == 200
        assert response.json()["stage"] == "collectingOnset"

    async def test_reset(self, async_client, encounter):
        response = await async_client.delete(f"/api/v1/encounters/{encounter}")
        assert response.status_code == 200
        response = await async_client.get(f"/api/v1/encounters/{encounter}")
        assert response.status_code == 404


@pytest.mark.asyncio
class TestStages:

    async def test_scenario_a_onset_passes(self, async_client, encounter, api_clock):
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/onset", json=_scenario_a(api_clock())
        )
        assert response.status_code == 200
        assert response.json()["passed"] is True
        assert response.json()["stage"] == "collectingImaging"

        data = (await async_client.get(f"/api/v1/encounters/{encounter}")).json()
        assert data["window"] == "withinStandard"
        assert data["elapsed_hours"] == 3.0
        assert data["dosing"]["alteplase"] == {"total": 63.0, "bolus": 6.3, "infusion": 56.7}
        assert data["dosing"]["tenecteplase_mg"] == 20.0

    async def test_rejected_gate_lists_missing_fields(self, async_client, encounter):
        response = await async_client.post(f"/api/v1/encounters/{encounter}/onset", json={"severity": 4})
        data = response.json()
        assert response.status_code == 200
        assert data["passed"] is False
        assert "onset_time" in data["missing_fields"]
        assert "severity_score" not in data["missing_fields"]
        assert data["stage"] == "collectingOnset"

    async def test_scenario_b_unknown_onset_pressure(self, async_client, encounter):
        body = {
            "onset_unknown": True, "severity": 12, "systolic": 230, "diastolic": 125,
            "glucose": 140, "weight": 80,
        }
        response = await async_client.post(f"/api/v1/encounters/{encounter}/onset", json=body)
        assert response.json()["missing_fields"] == ["blood_pressure_control"]

        body["bp_treating"] = True
        response = await async_client.post(f"/api/v1/encounters/{encounter}/onset", json=body)
        assert response.json()["passed"] is True

    async def test_onset_from_wall_clock(self, async_client, encounter):
        body = _scenario_a(main._clock())
        del body["onset"]
        body["onset_clock"] = {"hour": 9, "minute": 0, "period": "AM"}
        response = await async_client.post(f"/api/v1/encounters/{encounter}/onset", json=body)
        assert response.json()["passed"] is True
        data = (await async_client.get(f"/api/v1/encounters/{encounter}")).json()
        assert data["state"]["onset"]["onset"].startswith("2026-03-14T09:00:00")

    async def test_scenario_c_hemorrhage_with_agent_rejected(self, async_client, encounter, api_clock):
        await async_client.post(f"/api/v1/encounters/{encounter}/onset", json=_scenario_a(api_clock()))
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/imaging",
            json={"result": "hemorrhage", "agent": "alteplase", "minutes_to_imaging": 15, "minutes_to_treatment": 30},
        )
        data = response.json()
        assert data["passed"] is False
        assert "treatment_agent" in data["missing_fields"]
        assert data["stage"] == "collectingImaging"

    async def test_imaging_before_onset_rejected(self, async_client, encounter):
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/imaging",
            json={"result": "other", "minutes_to_imaging": 20},
        )
        data = response.json()
        assert response.status_code == 200
        assert data["passed"] is False
        assert data["missing_fields"] == ["onset_assessment"]
        assert data["stage"] == "collectingOnset"

        state = (await async_client.get(f"/api/v1/encounters/{encounter}")).json()
        assert state["stage"] == "collectingOnset"
        assert state["state"]["imaging"] is None

    async def test_navigation(self, async_client, encounter, api_clock):
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/navigate", json={"stage": "summarizing"}
        )
        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "WORKFLOW_NAVIGATION_ERROR"

        await async_client.post(f"/api/v1/encounters/{encounter}/onset", json=_scenario_a(api_clock()))
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/navigate", json={"stage": "collectingOnset"}
        )
        assert response.status_code == 200
        assert response.json()["furthest_stage"] == "collectingImaging"


@pytest.mark.asyncio
class TestEligibilityAndMilestones:

    async def test_save_eligibility(self, async_client, encounter, api_clock):
        await async_client.post(f"/api/v1/encounters/{encounter}/onset", json=_scenario_a(api_clock()))
        api_clock.advance(minutes=30)
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/eligibility",
            json={"window_dependent": ["age_80"], "notes": "Family at bedside"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "absoluteContraindication"
        assert data["window_dependent_active"] is True
        assert data["assessment"]["elapsed_hours"] == pytest.approx(3.5)
        assert "Family at bedside" in data["emr_text"]

    async def test_unknown_finding_400(self, async_client, encounter):
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/eligibility", json={"absolute": ["nope"]}
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "UNKNOWN_FINDING"

    async def test_scenario_d_milestones(self, async_client, encounter):
        base = f"/api/v1/encounters/{encounter}/milestones"
        await async_client.post(f"{base}/imaging_ordered", json={"minutes_from_door": 10})
        first = (await async_client.post(f"{base}/first_image", json={"minutes_from_door": 22})).json()
        read = (await async_client.post(f"{base}/image_interpreted", json={"minutes_from_door": 50})).json()
        assert first["badge"] == "pass"
        assert read["badge"] == "fail"

        note = (await async_client.get(f"/api/v1/encounters/{encounter}/note")).json()["note"]
        assert "22 min from door, PASS target <=25" in note
        assert "50 min from door, FAIL target <=45" in note

    async def test_out_of_order_milestone_flagged(self, async_client, encounter):
        base = f"/api/v1/encounters/{encounter}/milestones"
        reading = (await async_client.post(f"{base}/code_activation", json={"minutes_from_door": -5})).json()
        assert reading["minutes_from_anchor"] == -5
        assert reading["out_of_order"] is True
        data = (await async_client.get(f"/api/v1/encounters/{encounter}")).json()
        assert data["data_quality"][0]["milestone"] == "code_activation"

    async def test_unknown_milestone_400(self, async_client, encounter):
        response = await async_client.post(
            f"/api/v1/encounters/{encounter}/milestones/lunch", json={}
        )
        assert response.status_code == 400

    async def test_clear_milestone(self, async_client, encounter):
        base = f"/api/v1/encounters/{encounter}/milestones"
        await async_client.post(f"{base}/first_image", json={"minutes_from_door": 22})
        response = await async_client.delete(f"{base}/first_image")
        assert response.status_code == 200
        data = (await async_client.get(f"/api/v1/encounters/{encounter}")).json()
        assert data["state"]["milestones"]["milestones"]["first_image"] is None


@pytest.mark.asyncio
class TestSummary:

    async def _complete(self, client, encounter, now):
        await client.post(f"/api/v1/encounters/{encounter}/onset", json=_scenario_a(now))
        await client.post(
            f"/api/v1/encounters/{encounter}/imaging",
            json={
                "result": "no_bleed", "agent": "tenecteplase", "cta_ordered": True, "lvo": "yes",
                "minutes_to_imaging": 20, "minutes_to_treatment": 35,
            },
        )

    async def test_full_encounter_note(self, async_client, encounter, api_clock):
        await self._complete(async_client, encounter, api_clock())
        await async_client.put(f"/api/v1/encounters/{encounter}/orders", json={"order_ids": ["cbc", "statin"]})
        await async_client.post(
            f"/api/v1/encounters/{encounter}/pathway-result",
            json={"status": "Eligible", "criteria_name": "DAWN", "reason": "Clinical-core mismatch"},
        )
        api_clock.advance(minutes=45)

        note = (await async_client.get(f"/api/v1/encounters/{encounter}/note")).json()["note"]
        assert "Tenecteplase 20.0 mg IV bolus" in note
        assert "- CBC with Platelets" in note
        assert "Eligible (DAWN): Clinical-core mismatch" in note
        assert "Total code duration: 45 minutes from door" in note

    async def test_default_orders_after_imaging(self, async_client, encounter, api_clock):
        await self._complete(async_client, encounter, api_clock())
        data = (await async_client.get(f"/api/v1/encounters/{encounter}")).json()
        assert data["stage"] == "summarizing"
        assert "neuro_icu" in data["state"]["orders"]

    async def test_note_pdf(self, async_client, encounter, output_dir, monkeypatch):
        monkeypatch.setattr("strokecode.config.REPORT_OUTPUT_DIR", str(output_dir))
        response = await async_client.get(f"/api/v1/encounters/{encounter}/note/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")


@pytest.mark.asyncio
class TestReference:

    async def test_dosing_lookup(self, async_client):
        response = await async_client.get("/api/v1/dosing", params={"weight": 154, "unit": "lb"})
        data = response.json()
        assert data["weight_kg"] == 69.8
        assert data["tenecteplase_mg"] == 17.5

    async def test_contraindication_catalog(self, async_client):
        data = (await async_client.get("/api/v1/reference/contraindications")).json()
        assert len(data["relative"]) == 7
        assert len(data["window_dependent"]) == 5
        assert any(item["id"] == "platelets" for item in data["absolute"])

    async def test_orders_reference(self, async_client):
        data = (await async_client.get("/api/v1/reference/orders")).json()
        assert "neuro_icu" not in data["defaults"]
