"""
HTTP tests for the sprint, analytics and availability routes.

Each test gets its own SQLite file; ``get_db`` is overridden so the routes
never touch the configured database.
"""

import csv
import io

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from velocity_tracker.database import get_db
from velocity_tracker.main import app
from velocity_tracker.services.csv_service import generate_csv_template
from velocity_tracker.services.sprint_service import SprintService, SprintServiceError

SAMPLE_SPRINTS = [
    {
        "name": "Sprint 1", "start_date": "2024-01-01", "end_date": "2024-01-14",
        "planned_points": 32, "completed_points": 28, "team_availability": 90,
    },
    {
        "name": "Sprint 2", "start_date": "2024-01-15", "end_date": "2024-01-28",
        "planned_points": 30, "completed_points": 30, "team_availability": 100,
    },
    {
        "name": "Sprint 3", "start_date": "2024-01-29", "end_date": "2024-02-11",
        "planned_points": 35, "completed_points": 26, "team_availability": 85,
    },
]


@pytest.fixture
def client(sync_engine_with_tables):
    session_factory = async_sessionmaker(
        sync_engine_with_tables, class_=AsyncSession, expire_on_commit=False
    )

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client):
    for payload in SAMPLE_SPRINTS:
        response = client.post("/api/v1/sprints", json=payload)
        assert response.status_code == 201
    return client


class TestHealth:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "timestamp" in body


class TestSprintRoutes:
    def test_create_returns_derived_fields(self, client):
        response = client.post("/api/v1/sprints", json=SAMPLE_SPRINTS[0])

        assert response.status_code == 201
        body = response.json()
        assert body["id"] > 0
        assert body["completion_ratio"] == pytest.approx(87.5)
        assert body["velocity"] == 28
        assert body["notes"] == ""

    def test_derived_fields_in_input_are_ignored(self, client):
        payload = dict(SAMPLE_SPRINTS[0], completion_ratio=10, velocity=3)

        body = client.post("/api/v1/sprints", json=payload).json()

        assert body["velocity"] == 28

    @pytest.mark.parametrize(
        "change",
        [
            {"team_availability": 120},
            {"planned_points": -1},
            {"name": ""},
            {"start_date": "not-a-date"},
        ],
    )
    def test_rejects_invalid_input(self, client, change):
        response = client.post("/api/v1/sprints", json=dict(SAMPLE_SPRINTS[0], **change))

        assert response.status_code == 422

    def test_list_get_update_delete(self, seeded_client):
        sprints = seeded_client.get("/api/v1/sprints").json()
        assert [sprint["name"] for sprint in sprints] == ["Sprint 1", "Sprint 2", "Sprint 3"]

        sprint_id = sprints[0]["id"]
        assert seeded_client.get(f"/api/v1/sprints/{sprint_id}").json()["name"] == "Sprint 1"

        updated = seeded_client.put(
            f"/api/v1/sprints/{sprint_id}",
            json=dict(SAMPLE_SPRINTS[0], completed_points=16),
        )
        assert updated.status_code == 200
        assert updated.json()["completion_ratio"] == pytest.approx(50.0)

        assert seeded_client.delete(f"/api/v1/sprints/{sprint_id}").status_code == 204
        assert seeded_client.get(f"/api/v1/sprints/{sprint_id}").status_code == 404

    def test_missing_sprint(self, client):
        assert client.get("/api/v1/sprints/999").status_code == 404
        assert client.put("/api/v1/sprints/999", json=SAMPLE_SPRINTS[0]).status_code == 404
        assert client.delete("/api/v1/sprints/999").status_code == 404

    def test_failed_delete_is_a_server_error(self, seeded_client, monkeypatch):
        sprint_id = seeded_client.get("/api/v1/sprints").json()[0]["id"]

        async def failing_delete(self, sprint_id):
            raise SprintServiceError("Sprint deletion failed: database is locked", sprint_id)

        monkeypatch.setattr(SprintService, "delete_sprint", failing_delete)
        response = seeded_client.delete(f"/api/v1/sprints/{sprint_id}")

        assert response.status_code == 500
        assert "database is locked" in response.json()["detail"]

    def test_bulk_replace(self, seeded_client):
        first = seeded_client.get("/api/v1/sprints").json()[0]

        response = seeded_client.put(
            "/api/v1/sprints",
            json=[dict(SAMPLE_SPRINTS[0], id=first["id"], name="Kept")],
        )

        assert response.status_code == 200
        assert [sprint["name"] for sprint in response.json()] == ["Kept"]

    def test_bulk_replace_rejects_duplicate_ids(self, seeded_client):
        first = seeded_client.get("/api/v1/sprints").json()[0]
        item = dict(SAMPLE_SPRINTS[0], id=first["id"])

        response = seeded_client.put("/api/v1/sprints", json=[item, item])

        assert response.status_code == 400
        assert len(seeded_client.get("/api/v1/sprints").json()) == 3


class TestCsvRoutes:
    def test_template_download(self, client):
        response = client.get("/api/v1/sprints/template")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "sprint_template.csv" in response.headers["content-disposition"]
        assert response.text == generate_csv_template()

    def test_export(self, seeded_client):
        response = seeded_client.get("/api/v1/sprints/export")

        rows = list(csv.reader(io.StringIO(response.text)))
        assert response.status_code == 200
        assert len(rows) == 4
        assert rows[1][:6] == ["Sprint 1", "2024-01-01", "2024-01-14", "32", "28", "90"]

    def test_import(self, client):
        files = {"file": ("sprints.csv", generate_csv_template().encode(), "text/csv")}

        response = client.post("/api/v1/sprints/import", files=files)

        assert response.status_code == 201
        body = response.json()
        assert body["imported"] == 1
        assert body["sprints"][0]["completed_points"] == 28
        assert len(client.get("/api/v1/sprints").json()) == 1

    def test_import_rejects_wrong_file_type(self, client):
        files = {"file": ("sprints.txt", b"hello", "text/plain")}

        response = client.post("/api/v1/sprints/import", files=files)

        assert response.status_code == 400
        assert "Invalid file type" in response.json()["detail"]

    def test_import_reports_parse_errors(self, client):
        files = {"file": ("sprints.csv", b"name,startDate\nSprint 1,2024-01-01", "text/csv")}

        response = client.post("/api/v1/sprints/import", files=files)

        assert response.status_code == 400
        assert "Missing required columns" in response.json()["detail"]

    def test_import_rejects_non_utf8(self, client):
        files = {"file": ("sprints.csv", b"\xff\xfe\x00bad", "text/csv")}

        response = client.post("/api/v1/sprints/import", files=files)

        assert response.status_code == 400


class TestAnalyticsRoutes:
    def test_forecast(self, seeded_client):
        response = seeded_client.get("/api/v1/analytics/forecast")

        assert response.status_code == 200
        body = response.json()
        assert body["forecast"] == {
            "recommended_planning": 28,
            "confidence_level": 88,
            "based_on_sprints": 3,
        }
        assert body["planning_options"] == {"conservative": 22, "recommended": 28, "aggressive": 34}

    def test_forecast_with_reduced_availability(self, seeded_client):
        body = seeded_client.get(
            "/api/v1/analytics/forecast", params={"next_availability": 90}
        ).json()

        assert body["forecast"]["recommended_planning"] == 25

    @pytest.mark.parametrize(
        "params",
        [{"next_availability": 150}, {"next_availability": -1}, {"window": 0}],
    )
    def test_rejects_out_of_range_parameters(self, client, params):
        assert client.get("/api/v1/analytics/forecast", params=params).status_code == 422

    def test_metrics(self, seeded_client):
        body = seeded_client.get("/api/v1/analytics/metrics").json()

        assert body == {
            "average_velocity": 28,
            "average_completion_ratio": 87,
            "team_availability_consistency": 94,
            "predicted_velocity": 28,
            "total_sprints": 3,
        }

    def test_trends(self, seeded_client):
        body = seeded_client.get("/api/v1/analytics/trends").json()

        assert body["sprints_analyzed"] == 3
        assert body["velocity"]["slope"] == pytest.approx(-1.0)

    def test_recommendations(self, seeded_client):
        body = seeded_client.get("/api/v1/analytics/recommendations").json()

        assert [item["title"] for item in body] == ["Declining Completion Rate", "More Data Needed"]
        assert body[0]["kind"] == "warning"

    def test_dashboard_on_empty_store(self, client):
        response = client.get("/api/v1/analytics/dashboard")

        assert response.status_code == 200
        body = response.json()
        assert body["metrics"]["total_sprints"] == 0
        assert body["forecast"]["forecast"]["confidence_level"] == 0
        assert body["recommendations"][0]["title"] == "Insufficient Trend Data"


class TestAvailabilityRoutes:
    def test_team_availability(self, client):
        response = client.post("/api/v1/availability/team", json={"members": [
            {"name": "Ana", "total_sprint_days": 10, "days_available": 10},
            {"name": "Bo", "total_sprint_days": 10, "days_available": 8},
        ]})

        assert response.status_code == 200
        body = response.json()
        assert body["overall_availability"] == 90
        assert body["members"][1]["availability_percentage"] == 80

    def test_empty_team(self, client):
        body = client.post("/api/v1/availability/team", json={"members": []}).json()

        assert body["overall_availability"] == 100
