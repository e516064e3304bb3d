from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import typer
import uvicorn

from jobtracker.api.app import create_app
from jobtracker.api.schemas import ActivityResponse, CompanyResponse, JobResponse, UserResponse
from jobtracker.cli.console import ConsoleBrowser
from jobtracker.client import ApiError, SmokeFailure, TrackerClient, run_smoke_scenario
from jobtracker.config import get_settings
from jobtracker.core.runtime import Tracker, get_tracker
from jobtracker.db.init import init_database
from jobtracker.errors import TrackerError
from jobtracker.logging_config import configure_logging
from jobtracker.types import ApplicationDraft, CompanyDraft, JobDraft, UserDraft

app = typer.Typer(help="Job Tracker CLI")
users_app = typer.Typer(help="Manage users")
companies_app = typer.Typer(help="Manage companies")
jobs_app = typer.Typer(help="Manage job postings")
applications_app = typer.Typer(help="Track applications")
activities_app = typer.Typer(help="Browse the application activity log")

app.add_typer(users_app, name="users")
app.add_typer(companies_app, name="companies")
app.add_typer(jobs_app, name="jobs")
app.add_typer(applications_app, name="applications")
app.add_typer(activities_app, name="activities")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _tracker() -> Tracker:
    configure_logging()
    ensure_initialized()
    return get_tracker()


def _echo(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


def _run(action: Callable[[Tracker], Any]) -> None:
    tracker = _tracker()
    try:
        result = action(tracker)
    except TrackerError as exc:
        _echo({"error": exc.message, "code": exc.kind.value, "field": exc.field})
        raise typer.Exit(code=1) from exc
    if result is not None:
        _echo(result)


@app.command("init")
def init_cmd() -> None:
    """Create the database schema."""
    configure_logging()
    result = init_database()
    _echo({"ok": True, **result})


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    uvicorn.run(create_app(), host=host or settings.app_host, port=port or settings.app_port)


@app.command("console")
def console() -> None:
    """Interactive browser over applications and their activity timeline."""
    ConsoleBrowser(_tracker()).run()


@app.command("smoke")
def smoke(base_url: str | None = typer.Option(None, "--base-url")) -> None:
    """Run the application lifecycle scenario against a running API server."""
    configure_logging()
    client = TrackerClient(base_url)
    try:
        ids = run_smoke_scenario(client, echo=typer.echo)
    except (ApiError, SmokeFailure) as exc:
        typer.echo(f"smoke failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _echo({"ok": True, **ids})


# users


@users_app.command("create")
def users_create(
    email: str = typer.Option(..., "--email"),
    password_hash: str = typer.Option(..., "--password-hash"),
    name: str = typer.Option(..., "--name"),
) -> None:
    _run(lambda t: {"id": t.users.save_user(UserDraft(email=email, password_hash=password_hash, name=name))})


@users_app.command("update")
def users_update(
    user_id: str = typer.Option(..., "--id"),
    email: str = typer.Option(..., "--email"),
    password_hash: str = typer.Option(..., "--password-hash"),
    name: str = typer.Option(..., "--name"),
) -> None:
    draft = UserDraft(id=user_id, email=email, password_hash=password_hash, name=name)
    _run(lambda t: {"id": t.users.save_user(draft)})


@users_app.command("list")
def users_list(limit: int = typer.Option(10, "--limit"), offset: int = typer.Option(0, "--offset")) -> None:
    _run(
        lambda t: [
            UserResponse.model_validate(row).model_dump(mode="json") for row in t.users.list_users(limit, offset)
        ]
    )


@users_app.command("get")
def users_get(user_id: str = typer.Option(..., "--id")) -> None:
    def action(t: Tracker) -> dict[str, Any]:
        user = t.users.get_user(user_id)
        if user is None:
            return {"found": False}
        return UserResponse.model_validate(user).model_dump(mode="json")

    _run(action)


@users_app.command("delete")
def users_delete(user_id: str = typer.Option(..., "--id")) -> None:
    _run(lambda t: t.users.delete_user(user_id) or {"deleted": user_id})


# companies


@companies_app.command("create")
def companies_create(
    name: str = typer.Option(..., "--name"),
    industry: str | None = typer.Option(None, "--industry"),
    city: str | None = typer.Option(None, "--city"),
    state: str | None = typer.Option(None, "--state"),
    url: str | None = typer.Option(None, "--url"),
) -> None:
    draft = CompanyDraft(name=name, industry=industry, location_city=city, location_state=state, company_url=url)
    _run(lambda t: {"id": t.companies.save_company(draft)})


@companies_app.command("update")
def companies_update(
    company_id: str = typer.Option(..., "--id"),
    name: str = typer.Option(..., "--name"),
    industry: str | None = typer.Option(None, "--industry"),
    city: str | None = typer.Option(None, "--city"),
    state: str | None = typer.Option(None, "--state"),
    url: str | None = typer.Option(None, "--url"),
) -> None:
    draft = CompanyDraft(
        id=company_id,
        name=name,
        industry=industry,
        location_city=city,
        location_state=state,
        company_url=url,
    )
    _run(lambda t: {"id": t.companies.save_company(draft)})


@companies_app.command("list")
def companies_list(limit: int = typer.Option(10, "--limit"), offset: int = typer.Option(0, "--offset")) -> None:
    _run(
        lambda t: [
            CompanyResponse.model_validate(row).model_dump(mode="json")
            for row in t.companies.list_companies(limit, offset)
        ]
    )


@companies_app.command("get")
def companies_get(company_id: str = typer.Option(..., "--id")) -> None:
    def action(t: Tracker) -> dict[str, Any]:
        company = t.companies.get_company(company_id)
        if company is None:
            return {"found": False}
        return CompanyResponse.model_validate(company).model_dump(mode="json")

    _run(action)


@companies_app.command("delete")
def companies_delete(company_id: str = typer.Option(..., "--id")) -> None:
    _run(lambda t: t.companies.delete_company(company_id) or {"deleted": company_id})


# jobs


@jobs_app.command("create")
def jobs_create(
    company_id: str = typer.Option(..., "--company-id"),
    title: str = typer.Option(..., "--title"),
    employment_type: str | None = typer.Option(None, "--employment-type"),
    work_type: str | None = typer.Option(None, "--work-type"),
    url: str | None = typer.Option(None, "--url"),
    salary_min: int | None = typer.Option(None, "--salary-min"),
    salary_max: int | None = typer.Option(None, "--salary-max"),
) -> None:
    draft = JobDraft(
        company_id=company_id,
        title=title,
        employment_type=employment_type,
        work_type=work_type,
        job_url=url,
        salary_min=salary_min,
        salary_max=salary_max,
    )
    _run(lambda t: {"id": t.jobs.save_job(draft)})


@jobs_app.command("update")
def jobs_update(
    job_id: str = typer.Option(..., "--id"),
    company_id: str = typer.Option(..., "--company-id"),
    title: str = typer.Option(..., "--title"),
    employment_type: str | None = typer.Option(None, "--employment-type"),
    work_type: str | None = typer.Option(None, "--work-type"),
    url: str | None = typer.Option(None, "--url"),
    salary_min: int | None = typer.Option(None, "--salary-min"),
    salary_max: int | None = typer.Option(None, "--salary-max"),
) -> None:
    draft = JobDraft(
        id=job_id,
        company_id=company_id,
        title=title,
        employment_type=employment_type,
        work_type=work_type,
        job_url=url,
        salary_min=salary_min,
        salary_max=salary_max,
    )
    _run(lambda t: {"id": t.jobs.save_job(draft)})


@jobs_app.command("list")
def jobs_list(
    limit: int = typer.Option(10, "--limit"),
    offset: int = typer.Option(0, "--offset"),
    company_id: str | None = typer.Option(None, "--company-id"),
) -> None:
    _run(
        lambda t: [
            JobResponse.model_validate(row).model_dump(mode="json")
            for row in t.jobs.list_jobs(limit, offset, company_id=company_id)
        ]
    )


@jobs_app.command("get")
def jobs_get(job_id: str = typer.Option(..., "--id")) -> None:
    def action(t: Tracker) -> dict[str, Any]:
        job = t.jobs.get_job(job_id)
        if job is None:
            return {"found": False}
        return JobResponse.model_validate(job).model_dump(mode="json")

    _run(action)


@jobs_app.command("delete")
def jobs_delete(job_id: str = typer.Option(..., "--id")) -> None:
    _run(lambda t: t.jobs.delete_job(job_id) or {"deleted": job_id})


# applications


@applications_app.command("create")
def applications_create(
    user_id: str = typer.Option(..., "--user-id"),
    job_id: str = typer.Option(..., "--job-id"),
    status: str = typer.Option("applied", "--status"),
    source: str | None = typer.Option(None, "--source"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    draft = ApplicationDraft(user_id=user_id, job_id=job_id, status=status, source=source, notes=notes)
    _run(lambda t: {"id": t.applications.save_application(draft)})


@applications_app.command("list")
def applications_list(
    limit: int = typer.Option(10, "--limit"),
    offset: int = typer.Option(0, "--offset"),
    user_id: str | None = typer.Option(None, "--user-id"),
    status: str | None = typer.Option(None, "--status"),
) -> None:
    _run(
        lambda t: [
            row.model_dump(mode="json")
            for row in t.applications.list_applications(limit, offset, user_id=user_id, status=status)
        ]
    )


@applications_app.command("get")
def applications_get(application_id: str = typer.Option(..., "--id")) -> None:
    def action(t: Tracker) -> dict[str, Any]:
        detail = t.applications.get_application(application_id)
        if detail is None:
            return {"found": False}
        return detail.model_dump(mode="json")

    _run(action)


@applications_app.command("status")
def applications_status(
    application_id: str = typer.Option(..., "--id"),
    status: str = typer.Option(..., "--status"),
) -> None:
    _run(lambda t: t.applications.update_application_status(application_id, status).model_dump(mode="json"))


@applications_app.command("notes")
def applications_notes(
    application_id: str = typer.Option(..., "--id"),
    text: str | None = typer.Option(None, "--text"),
) -> None:
    _run(lambda t: t.applications.update_application_notes(application_id, text) or {"updated": application_id})


@applications_app.command("source")
def applications_source(
    application_id: str = typer.Option(..., "--id"),
    text: str | None = typer.Option(None, "--text"),
) -> None:
    _run(lambda t: t.applications.update_application_source(application_id, text) or {"updated": application_id})


@applications_app.command("delete")
def applications_delete(application_id: str = typer.Option(..., "--id")) -> None:
    _run(lambda t: t.applications.delete_application(application_id) or {"deleted": application_id})


# activities


@activities_app.command("timeline")
def activities_timeline(application_id: str = typer.Option(..., "--application-id")) -> None:
    _run(
        lambda t: [
            ActivityResponse.model_validate(row).model_dump(mode="json")
            for row in t.activities.list_for_application(application_id)
        ]
    )


@activities_app.command("list")
def activities_list(
    limit: int = typer.Option(10, "--limit"),
    offset: int = typer.Option(0, "--offset"),
    application_id: str | None = typer.Option(None, "--application-id"),
) -> None:
    _run(
        lambda t: [
            ActivityResponse.model_validate(row).model_dump(mode="json")
            for row in t.activities.list_activities(limit, offset, application_id)
        ]
    )


@activities_app.command("details")
def activities_details(
    activity_id: str = typer.Option(..., "--id"),
    text: str | None = typer.Option(None, "--text"),
) -> None:
    _run(
        lambda t: ActivityResponse.model_validate(t.activities.update_details(activity_id, text)).model_dump(
            mode="json"
        )
    )
