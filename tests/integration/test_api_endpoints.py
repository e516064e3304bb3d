from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from jobtracker.api.app import create_app
from jobtracker.core.runtime import get_tracker


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())


def _seed(client: TestClient) -> dict[str, str]:
    company_id = client.post("/api/companies", json={"name": "Acme", "industry": "Software"}).json()["id"]
    job_id = client.post("/api/jobs", json={"company_id": company_id, "title": "Engineer"}).json()["id"]
    user_id = client.post(
        "/api/users", json={"email": "a@x.com", "password_hash": "hash", "name": "Ada"}
    ).json()["id"]
    return {"company": company_id, "job": job_id, "user": user_id}


def test_health_reports_row_counts(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["row_counts"]["applications"] == 0


def test_create_and_read_entities(client: TestClient) -> None:
    ids = _seed(client)

    user = client.get(f"/api/users/{ids['user']}")
    assert user.status_code == 200
    assert user.json()["email"] == "a@x.com"
    assert "password_hash" not in user.json()

    job = client.get(f"/api/jobs/{ids['job']}").json()
    assert (job["employment_type"], job["work_type"]) == ("full_time", "remote")

    assert client.get("/api/users/email/a@x.com/exists").json() == {"exists": True}
    assert client.get("/api/companies/name/Acme/exists").json() == {"exists": True}
    assert client.get("/api/companies/name/Globex/exists").json() == {"exists": False}
    assert client.get(f"/api/jobs/{ids['job']}/exists").json() == {"exists": True}

    listed = client.get("/api/jobs", params={"company_id": ids["company"]}).json()
    assert [row["id"] for row in listed] == [ids["job"]]


def test_application_lifecycle_over_http(client: TestClient) -> None:
    ids = _seed(client)

    created = client.post("/api/applications", json={"user_id": ids["user"], "job_id": ids["job"], "status": "Applied"})
    assert created.status_code == 201
    application_id = created.json()["id"]

    exists = client.get(f"/api/applications/user/{ids['user']}/job/{ids['job']}/exists").json()
    assert exists == {"exists": True}

    detail = client.put(f"/api/applications/{application_id}/status", json={"status": "interview"})
    assert detail.status_code == 200
    assert detail.json()["status"] == "interview"
    assert detail.json()["company_name"] == "Acme"

    timeline = client.get(f"/api/activities/application/{application_id}").json()
    assert [row["event_type"] for row in timeline] == ["created", "status_change"]
    assert (timeline[1]["old_status"], timeline[1]["new_status"]) == ("applied", "interview")

    feed = client.get("/api/activities", params={"application_id": application_id}).json()
    assert [row["id"] for row in feed] == [row["id"] for row in reversed(timeline)]

    assert client.put(f"/api/applications/{application_id}/notes", json={"text": "Call Friday"}).status_code == 204
    assert client.put(f"/api/applications/{application_id}/source", json={"text": "LinkedIn"}).status_code == 204
    detail = client.get(f"/api/applications/{application_id}").json()
    assert (detail["notes"], detail["source"]) == ("Call Friday", "LinkedIn")

    activity_id = timeline[0]["id"]
    assert client.put(f"/api/activities/{activity_id}/details", json={"text": "Referral"}).status_code == 204
    assert client.get(f"/api/activities/{activity_id}").json()["details"] == "Referral"

    assert client.delete(f"/api/applications/{application_id}").status_code == 204
    assert client.get(f"/api/activities/application/{application_id}").json() == []
    assert client.get(f"/api/applications/{application_id}/exists").json() == {"exists": False}


def test_error_kinds_map_to_status_codes(client: TestClient) -> None:
    ids = _seed(client)

    missing_email = client.post("/api/users", json={"password_hash": "h", "name": "No Email"})
    assert missing_email.status_code == 400
    assert missing_email.json()["code"] == "BAD_REQUEST"
    assert missing_email.json()["field"] == "email"

    bad_status = client.post(
        "/api/applications", json={"user_id": ids["user"], "job_id": ids["job"], "status": "hired"}
    )
    assert bad_status.status_code == 400
    assert bad_status.json()["field"] == "status"

    missing_status = client.post("/api/applications", json={"user_id": "missing", "job_id": ids["job"]})
    assert missing_status.status_code == 400
    assert missing_status.json()["field"] == "status"

    unknown_user = client.post(
        "/api/applications", json={"user_id": "missing", "job_id": ids["job"], "status": "applied"}
    )
    assert unknown_user.status_code == 404
    assert unknown_user.json()["code"] == "NOT_FOUND"

    assert client.get("/api/users/missing").status_code == 404
    assert client.put("/api/applications/missing/status", json={"status": "offer"}).status_code == 404

    duplicate = client.post("/api/companies", json={"name": "Acme"})
    assert duplicate.status_code == 409
    assert duplicate.json() == {"error": "Company name already exists", "code": "CONFLICT", "field": "name"}

    blocked = client.delete(f"/api/companies/{ids['company']}")
    assert blocked.status_code == 409
    assert client.get(f"/api/companies/{ids['company']}").status_code == 200


def test_bad_pagination_is_rejected(client: TestClient) -> None:
    assert client.get("/api/users", params={"limit": 0}).status_code == 400
    assert client.get("/api/activities", params={"offset": -1}).status_code == 400
    response = client.get("/api/jobs", params={"limit": "many"})
    assert response.status_code == 400
    assert response.json()["field"] == "limit"


def test_storage_failure_returns_opaque_500(client: TestClient, monkeypatch) -> None:
    ids = _seed(client)

    def fail(*args, **kwargs):
        raise OperationalError("INSERT INTO activities", {}, Exception("database is locked"))

    monkeypatch.setattr(get_tracker().repo, "_append_activity", fail)

    response = client.post(
        "/api/applications", json={"user_id": ids["user"], "job_id": ids["job"], "status": "applied"}
    )
    assert response.status_code == 500
    assert response.json() == {"error": "An unexpected error occurred", "code": "INTERNAL_ERROR", "field": None}
    assert client.get("/health").json()["row_counts"]["applications"] == 0


def test_update_routes_use_smart_save(client: TestClient) -> None:
    ids = _seed(client)

    updated = client.put(
        f"/api/users/{ids['user']}", json={"email": "ada@x.com", "password_hash": "h2", "name": "Ada L."}
    )
    assert updated.status_code == 200
    assert updated.json()["email"] == "ada@x.com"

    job = client.put(
        f"/api/jobs/{ids['job']}",
        json={"company_id": ids["company"], "title": "Staff Engineer", "work_type": "Hybrid"},
    )
    assert job.json()["work_type"] == "hybrid"

    assert client.put("/api/companies/missing", json={"name": "Nowhere"}).status_code == 404


def test_framework_errors_use_tracker_error_body(client: TestClient) -> None:
    missing = client.get("/api/nowhere")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Not Found", "code": "NOT_FOUND", "field": None}

    wrong_method = client.patch("/api/users")
    assert wrong_method.status_code == 405
    assert wrong_method.json()["code"] == "METHOD_NOT_ALLOWED"
    assert "field" in wrong_method.json()


def test_company_name_with_slash_is_found(client: TestClient) -> None:
    client.post("/api/companies", json={"name": "R&D/Labs"})
    assert client.get("/api/companies/name/R%26D%2FLabs/exists").json() == {"exists": True}
