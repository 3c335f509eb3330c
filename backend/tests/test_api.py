"""HTTP-level tests for the program catalog and user program routers."""

import pytest
from fastapi.testclient import TestClient

from hyrox_coach.main import app
from hyrox_coach.routers.user_program import get_orchestrator

HEADERS = {"X-User-Id": "athlete-1"}


@pytest.fixture
def client(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def enrolled(client):
    response = client.post(
        "/api/user-program",
        json={"program_id": "personalized-8-week", "start_date": "2026-03-02"},
        headers=HEADERS,
    )
    assert response.status_code == 201
    return response.json()


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestProgramCatalog:

    def test_list_templates(self, client):
        response = client.get("/api/programs/templates")
        assert response.status_code == 200
        ids = {t["id"] for t in response.json()}
        assert ids == {"personalized-8-week", "personalized-12-week"}
        assert "schedule" not in response.json()[0]

    def test_get_template(self, client):
        response = client.get("/api/programs/templates/personalized-12-week")
        assert response.status_code == 200
        assert len(response.json()["schedule"]) == 12

    def test_unknown_template(self, client):
        assert client.get("/api/programs/templates/nope").status_code == 404

    @pytest.mark.parametrize("weeks, template_id", [
        (6, "personalized-8-week"),
        (10, "personalized-8-week"),
        (16, "personalized-12-week"),
    ])
    def test_select_template(self, client, weeks, template_id):
        response = client.get("/api/programs/templates/select", params={"weeks_until_race": weeks})
        assert response.status_code == 200
        assert response.json()["id"] == template_id

    def test_select_rejects_negative_weeks(self, client):
        response = client.get("/api/programs/templates/select", params={"weeks_until_race": -1})
        assert response.status_code == 422

    def test_validate_reports_all_errors(self, client):
        response = client.post("/api/programs/validate", json={"fitness_level": "pro"})
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is False
        assert len(body["errors"]) == 2

    def test_validate_ok(self, client):
        response = client.post(
            "/api/programs/validate",
            json={"fitness_level": "advanced", "days_per_week": 5},
        )
        assert response.json() == {"valid": True, "errors": []}

    def test_preview(self, client):
        response = client.post(
            "/api/programs/preview",
            json={"fitness_level": "intermediate", "days_per_week": 4},
        )
        assert response.status_code == 200
        assert response.json()["total_workouts"] > 0

    def test_preview_invalid(self, client):
        response = client.post("/api/programs/preview", json={"days_per_week": 2})
        assert response.status_code == 400
        assert response.json()["detail"]["errors"]


class TestUserProgram:

    def test_requires_user_header(self, client):
        assert client.get("/api/user-program").status_code == 401

    def test_no_program_is_null(self, client):
        response = client.get("/api/user-program", headers=HEADERS)
        assert response.status_code == 200
        assert response.json() is None

    def test_invalid_start(self, client):
        response = client.post(
            "/api/user-program",
            json={"personalization": {"fitness_level": "pro", "days_per_week": 3}},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"]

    def test_unknown_template_start(self, client):
        response = client.post("/api/user-program", json={"program_id": "nope"}, headers=HEADERS)
        assert response.status_code == 404

    def test_start(self, client, enrolled):
        assert enrolled["program_id"] == "personalized-8-week"
        assert enrolled["intensity_modifier"] == 1.0
        assert enrolled["program_data"]["weeks"] == 8
        assert enrolled["completed_workouts"] == []

        response = client.get("/api/user-program", headers=HEADERS)
        assert response.json()["id"] == enrolled["id"]

    def test_complete_workout(self, client, enrolled):
        response = client.post(
            "/api/user-program/complete-workout",
            json={"week": 1, "day_of_week": 1, "rpe": 7, "performance_data": {"feeling": "good"}},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["completion_status"] == "full"
        assert response.json()["rpe"] == 7

        program = client.get("/api/user-program", headers=HEADERS).json()
        assert len(program["completed_workouts"]) == 1

    def test_complete_workout_invalid(self, client, enrolled):
        response = client.post(
            "/api/user-program/complete-workout",
            json={"week": 1, "day_of_week": 1, "rpe": 11},
            headers=HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == ["RPE must be an integer between 1 and 10"]

    def test_derived_views(self, client, enrolled):
        missed = client.get("/api/user-program/missed-workouts", headers=HEADERS)
        assert missed.status_code == 200
        assert missed.json()["total_missed"] == 5

        analysis = client.get("/api/user-program/analysis", headers=HEADERS)
        assert analysis.status_code == 200
        assert analysis.json()["program_progress"]["current_week"] == 2

        today = client.get("/api/user-program/today", headers=HEADERS)
        assert today.status_code == 200
        assert today.json()["workout"]["type"] == "strength"

    def test_makeup(self, client, enrolled):
        response = client.post(
            "/api/user-program/makeup",
            json={"week": 1, "day_of_week": 6},
            headers=HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["params"]["is_makeup"] is True

    def test_makeup_not_missed(self, client, enrolled):
        response = client.post(
            "/api/user-program/makeup",
            json={"week": 3, "day_of_week": 1},
            headers=HEADERS,
        )
        assert response.status_code == 404

    def test_quit(self, client, enrolled):
        response = client.delete("/api/user-program", headers=HEADERS)
        assert response.status_code == 200
        assert response.json() == {"success": True}

        assert client.get("/api/user-program", headers=HEADERS).json() is None
        assert client.get("/api/user-program/missed-workouts", headers=HEADERS).status_code == 404
        assert client.delete("/api/user-program", headers=HEADERS).status_code == 404
