"""HTTP client for a running tracker API.

Used by the ``jobtracker smoke`` command to verify a deployed server end to
end. Any object with a requests-compatible ``request`` method can stand in
for the session, which lets tests drive the FastAPI app in-process.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from jobtracker.config import get_settings

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    return quote(value, safe="")


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(f"{status_code} {code}: {message}")
        self.status_code = status_code
        self.code = code
        self.message = message


@dataclass(slots=True)
class ApiResponse:
    status_code: int
    data: Any = None


class TrackerClient:
    def __init__(self, base_url: str | None = None, *, session: Any = None, timeout: float | None = None):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.api_timeout_sec

    def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> ApiResponse:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=json,
                params=query or None,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ApiError(0, "UNREACHABLE", f"{method} {path} failed: {exc}") from exc

        data = response.json() if response.content else None
        if response.status_code >= 400:
            body = data if isinstance(data, dict) else {}
            raise ApiError(response.status_code, body.get("code", "HTTP_ERROR"), body.get("error", str(data)))
        logger.debug("%s %s -> %s", method, path, response.status_code)
        return ApiResponse(status_code=response.status_code, data=data)

    def health(self) -> dict[str, Any]:
        return self.request("GET", "/health").data

    # users

    def create_user(self, *, email: str, password_hash: str, name: str) -> str:
        payload = {"email": email, "password_hash": password_hash, "name": name}
        return self.request("POST", "/api/users", json=payload).data["id"]

    def get_user(self, user_id: str) -> dict[str, Any]:
        return self.request("GET", f"/api/users/{_segment(user_id)}").data

    def list_users(self, limit: int = 10, offset: int = 0) -> list[dict[str, Any]]:
        return self.request("GET", "/api/users", params={"limit": limit, "offset": offset}).data

    def update_user(self, user_id: str, *, email: str, password_hash: str, name: str) -> dict[str, Any]:
        payload = {"email": email, "password_hash": password_hash, "name": name}
        return self.request("PUT", f"/api/users/{_segment(user_id)}", json=payload).data

    def delete_user(self, user_id: str) -> None:
        self.request("DELETE", f"/api/users/{_segment(user_id)}")

    def email_exists(self, email: str) -> bool:
        return self.request("GET", f"/api/users/email/{_segment(email)}/exists").data["exists"]

    # companies

    def create_company(self, *, name: str, **fields: Any) -> str:
        return self.request("POST", "/api/companies", json={"name": name, **fields}).data["id"]

    def get_company(self, company_id: str) -> dict[str, Any]:
        return self.request("GET", f"/api/companies/{_segment(company_id)}").data

    def list_companies(self, limit: int = 10, offset: int = 0) -> list[dict[str, Any]]:
        return self.request("GET", "/api/companies", params={"limit": limit, "offset": offset}).data

    def update_company(self, company_id: str, *, name: str, **fields: Any) -> dict[str, Any]:
        return self.request("PUT", f"/api/companies/{_segment(company_id)}", json={"name": name, **fields}).data

    def delete_company(self, company_id: str) -> None:
        self.request("DELETE", f"/api/companies/{_segment(company_id)}")

    def company_name_exists(self, name: str) -> bool:
        return self.request("GET", f"/api/companies/name/{_segment(name)}/exists").data["exists"]

    # jobs

    def create_job(self, *, company_id: str, title: str, **fields: Any) -> str:
        payload = {"company_id": company_id, "title": title, **fields}
        return self.request("POST", "/api/jobs", json=payload).data["id"]

    def get_job(self, job_id: str) -> dict[str, Any]:
        return self.request("GET", f"/api/jobs/{_segment(job_id)}").data

    def list_jobs(self, limit: int = 10, offset: int = 0, company_id: str | None = None) -> list[dict[str, Any]]:
        params = {"limit": limit, "offset": offset, "company_id": company_id}
        return self.request("GET", "/api/jobs", params=params).data

    def update_job(self, job_id: str, *, company_id: str, title: str, **fields: Any) -> dict[str, Any]:
        payload = {"company_id": company_id, "title": title, **fields}
        return self.request("PUT", f"/api/jobs/{_segment(job_id)}", json=payload).data

    def delete_job(self, job_id: str) -> None:
        self.request("DELETE", f"/api/jobs/{_segment(job_id)}")

    def job_exists(self, job_id: str) -> bool:
        return self.request("GET", f"/api/jobs/{_segment(job_id)}/exists").data["exists"]

    # applications

    def create_application(
        self,
        *,
        user_id: str,
        job_id: str,
        status: str = "applied",
        source: str | None = None,
        notes: str | None = None,
    ) -> str:
        payload = {"user_id": user_id, "job_id": job_id, "status": status, "source": source, "notes": notes}
        return self.request("POST", "/api/applications", json=payload).data["id"]

    def get_application(self, application_id: str) -> dict[str, Any]:
        return self.request("GET", f"/api/applications/{_segment(application_id)}").data

    def list_applications(
        self,
        limit: int = 10,
        offset: int = 0,
        *,
        user_id: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"limit": limit, "offset": offset, "user_id": user_id, "status": status}
        return self.request("GET", "/api/applications", params=params).data

    def update_application_status(self, application_id: str, status: str) -> dict[str, Any]:
        path = f"/api/applications/{_segment(application_id)}/status"
        return self.request("PUT", path, json={"status": status}).data

    def update_application_notes(self, application_id: str, notes: str | None) -> None:
        self.request("PUT", f"/api/applications/{_segment(application_id)}/notes", json={"text": notes})

    def update_application_source(self, application_id: str, source: str | None) -> None:
        self.request("PUT", f"/api/applications/{_segment(application_id)}/source", json={"text": source})

    def delete_application(self, application_id: str) -> None:
        self.request("DELETE", f"/api/applications/{_segment(application_id)}")

    def application_exists(self, application_id: str) -> bool:
        return self.request("GET", f"/api/applications/{_segment(application_id)}/exists").data["exists"]

    def user_job_application_exists(self, user_id: str, job_id: str) -> bool:
        path = f"/api/applications/user/{_segment(user_id)}/job/{_segment(job_id)}/exists"
        return self.request("GET", path).data["exists"]

    # activities

    def list_activity_for_application(self, application_id: str) -> list[dict[str, Any]]:
        return self.request("GET", f"/api/activities/application/{_segment(application_id)}").data

    def list_activities(
        self,
        limit: int = 10,
        offset: int = 0,
        application_id: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"limit": limit, "offset": offset, "application_id": application_id}
        return self.request("GET", "/api/activities", params=params).data

    def get_activity(self, activity_id: str) -> dict[str, Any]:
        return self.request("GET", f"/api/activities/{_segment(activity_id)}").data

    def update_activity_details(self, activity_id: str, details: str | None) -> None:
        self.request("PUT", f"/api/activities/{_segment(activity_id)}/details", json={"text": details})


class SmokeFailure(Exception):
    pass


def _expect(condition: bool, message: str) -> None:
    if not condition:
        raise SmokeFailure(message)


def run_smoke_scenario(client: TrackerClient, echo: Callable[[str], None] = print) -> dict[str, str]:
    """Walk one application through its lifecycle and clean up afterwards.

    Names carry a timestamp suffix so repeated runs against the same server
    do not collide on the unique email and company-name constraints.
    """
    suffix = str(int(time.time() * 1000))

    company_id = client.create_company(name=f"Acme {suffix}", industry="Software")
    echo(f"created company {company_id}")
    job_id = client.create_job(company_id=company_id, title="Engineer")
    echo(f"created job {job_id}")
    user_id = client.create_user(email=f"a{suffix}@x.com", password_hash="hash", name="Smoke Test")
    echo(f"created user {user_id}")

    application_id = client.create_application(user_id=user_id, job_id=job_id, status="applied")
    timeline = client.list_activity_for_application(application_id)
    _expect(len(timeline) == 1 and timeline[0]["event_type"] == "created", "expected one 'created' activity")
    echo(f"created application {application_id} with 1 activity")

    try:
        client.create_application(user_id=user_id, job_id=job_id, status="applied")
    except ApiError as exc:
        _expect(exc.status_code == 409, f"duplicate application returned {exc.status_code}")
        echo("duplicate application rejected with 409")
    else:
        raise SmokeFailure("duplicate application was accepted")

    client.update_application_status(application_id, "interview")
    timeline = client.list_activity_for_application(application_id)
    _expect(len(timeline) == 2, "expected two activities after status change")
    last = timeline[-1]
    _expect(
        (last["event_type"], last["old_status"], last["new_status"]) == ("status_change", "applied", "interview"),
        "status_change activity does not match applied->interview",
    )
    echo("status applied->interview logged")

    try:
        client.delete_job(job_id)
    except ApiError as exc:
        _expect(exc.status_code == 409, f"blocked job delete returned {exc.status_code}")
        echo("job delete blocked while application exists")
    else:
        raise SmokeFailure("job with applications was deleted")

    client.delete_application(application_id)
    _expect(client.list_activity_for_application(application_id) == [], "activities survived application delete")
    echo("application deleted, activities cascaded")

    client.delete_job(job_id)
    client.delete_company(company_id)
    client.delete_user(user_id)
    echo("job, company and user deleted")

    return {"company_id": company_id, "job_id": job_id, "user_id": user_id, "application_id": application_id}
