from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from jobtracker.api.deps import get_tracker_dep
from jobtracker.api.schemas import (
    ActivityResponse,
    ApplicationCreateRequest,
    CompanyRequest,
    CompanyResponse,
    ExistsResponse,
    IdResponse,
    JobRequest,
    JobResponse,
    StatusUpdateRequest,
    TextUpdateRequest,
    UserRequest,
    UserResponse,
)
from jobtracker.config import get_settings
from jobtracker.core.runtime import Tracker
from jobtracker.errors import NotFoundError
from jobtracker.types import ApplicationDetail, ApplicationDraft, CompanyDraft, JobDraft, UserDraft

router = APIRouter(prefix="/api", tags=["api"])


def _page_size(limit: int | None) -> int:
    return get_settings().default_page_size if limit is None else limit


# users


@router.post("/users", response_model=IdResponse, status_code=201)
def create_user(payload: UserRequest, tracker: Tracker = Depends(get_tracker_dep)) -> IdResponse:
    user_id = tracker.users.save_user(UserDraft(**payload.model_dump()))
    return IdResponse(id=user_id)


@router.get("/users", response_model=list[UserResponse])
def list_users(
    limit: int | None = None,
    offset: int = 0,
    tracker: Tracker = Depends(get_tracker_dep),
) -> list[UserResponse]:
    return [UserResponse.model_validate(row) for row in tracker.users.list_users(_page_size(limit), offset)]


@router.get("/users/email/{email:path}/exists", response_model=ExistsResponse)
def user_email_exists(email: str, tracker: Tracker = Depends(get_tracker_dep)) -> ExistsResponse:
    return ExistsResponse(exists=tracker.users.email_exists(email))


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> UserResponse:
    user = tracker.users.get_user(user_id)
    if user is None:
        raise NotFoundError(f"User not found: {user_id}", field="id")
    return UserResponse.model_validate(user)


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(user_id: str, payload: UserRequest, tracker: Tracker = Depends(get_tracker_dep)) -> UserResponse:
    tracker.users.save_user(UserDraft(id=user_id, **payload.model_dump()))
    return UserResponse.model_validate(tracker.users.get_user(user_id))


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> Response:
    tracker.users.delete_user(user_id)
    return Response(status_code=204)


# companies


@router.post("/companies", response_model=IdResponse, status_code=201)
def create_company(payload: CompanyRequest, tracker: Tracker = Depends(get_tracker_dep)) -> IdResponse:
    company_id = tracker.companies.save_company(CompanyDraft(**payload.model_dump()))
    return IdResponse(id=company_id)


@router.get("/companies", response_model=list[CompanyResponse])
def list_companies(
    limit: int | None = None,
    offset: int = 0,
    tracker: Tracker = Depends(get_tracker_dep),
) -> list[CompanyResponse]:
    rows = tracker.companies.list_companies(_page_size(limit), offset)
    return [CompanyResponse.model_validate(row) for row in rows]


@router.get("/companies/name/{name:path}/exists", response_model=ExistsResponse)
def company_name_exists(name: str, tracker: Tracker = Depends(get_tracker_dep)) -> ExistsResponse:
    return ExistsResponse(exists=tracker.companies.company_name_exists(name))


@router.get("/companies/{company_id}", response_model=CompanyResponse)
def get_company(company_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> CompanyResponse:
    company = tracker.companies.get_company(company_id)
    if company is None:
        raise NotFoundError(f"Company not found: {company_id}", field="id")
    return CompanyResponse.model_validate(company)


@router.put("/companies/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: str,
    payload: CompanyRequest,
    tracker: Tracker = Depends(get_tracker_dep),
) -> CompanyResponse:
    tracker.companies.save_company(CompanyDraft(id=company_id, **payload.model_dump()))
    return CompanyResponse.model_validate(tracker.companies.get_company(company_id))


@router.delete("/companies/{company_id}", status_code=204)
def delete_company(company_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> Response:
    tracker.companies.delete_company(company_id)
    return Response(status_code=204)


# jobs


@router.post("/jobs", response_model=IdResponse, status_code=201)
def create_job(payload: JobRequest, tracker: Tracker = Depends(get_tracker_dep)) -> IdResponse:
    job_id = tracker.jobs.save_job(JobDraft(**payload.model_dump()))
    return IdResponse(id=job_id)


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(
    limit: int | None = None,
    offset: int = 0,
    company_id: str | None = None,
    tracker: Tracker = Depends(get_tracker_dep),
) -> list[JobResponse]:
    rows = tracker.jobs.list_jobs(_page_size(limit), offset, company_id=company_id)
    return [JobResponse.model_validate(row) for row in rows]


@router.get("/jobs/{job_id}/exists", response_model=ExistsResponse)
def job_exists(job_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> ExistsResponse:
    return ExistsResponse(exists=tracker.jobs.job_exists(job_id))


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> JobResponse:
    job = tracker.jobs.get_job(job_id)
    if job is None:
        raise NotFoundError(f"Job not found: {job_id}", field="id")
    return JobResponse.model_validate(job)


@router.put("/jobs/{job_id}", response_model=JobResponse)
def update_job(job_id: str, payload: JobRequest, tracker: Tracker = Depends(get_tracker_dep)) -> JobResponse:
    tracker.jobs.save_job(JobDraft(id=job_id, **payload.model_dump()))
    return JobResponse.model_validate(tracker.jobs.get_job(job_id))


@router.delete("/jobs/{job_id}", status_code=204)
def delete_job(job_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> Response:
    tracker.jobs.delete_job(job_id)
    return Response(status_code=204)


# applications


@router.post("/applications", response_model=IdResponse, status_code=201)
def create_application(
    payload: ApplicationCreateRequest,
    tracker: Tracker = Depends(get_tracker_dep),
) -> IdResponse:
    application_id = tracker.applications.save_application(ApplicationDraft(**payload.model_dump()))
    return IdResponse(id=application_id)


@router.get("/applications", response_model=list[ApplicationDetail])
def list_applications(
    limit: int | None = None,
    offset: int = 0,
    user_id: str | None = None,
    status: str | None = None,
    tracker: Tracker = Depends(get_tracker_dep),
) -> list[ApplicationDetail]:
    return tracker.applications.list_applications(_page_size(limit), offset, user_id=user_id, status=status)


@router.get("/applications/user/{user_id}/job/{job_id}/exists", response_model=ExistsResponse)
def user_job_application_exists(
    user_id: str,
    job_id: str,
    tracker: Tracker = Depends(get_tracker_dep),
) -> ExistsResponse:
    return ExistsResponse(exists=tracker.applications.user_job_application_exists(user_id, job_id))


@router.get("/applications/{application_id}/exists", response_model=ExistsResponse)
def application_exists(application_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> ExistsResponse:
    return ExistsResponse(exists=tracker.applications.application_exists(application_id))


@router.get("/applications/{application_id}", response_model=ApplicationDetail)
def get_application(application_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> ApplicationDetail:
    detail = tracker.applications.get_application(application_id)
    if detail is None:
        raise NotFoundError(f"Application not found: {application_id}", field="id")
    return detail


@router.put("/applications/{application_id}/status", response_model=ApplicationDetail)
def update_application_status(
    application_id: str,
    payload: StatusUpdateRequest,
    tracker: Tracker = Depends(get_tracker_dep),
) -> ApplicationDetail:
    return tracker.applications.update_application_status(application_id, payload.status)


@router.put("/applications/{application_id}/notes", status_code=204)
def update_application_notes(
    application_id: str,
    payload: TextUpdateRequest,
    tracker: Tracker = Depends(get_tracker_dep),
) -> Response:
    tracker.applications.update_application_notes(application_id, payload.text)
    return Response(status_code=204)


@router.put("/applications/{application_id}/source", status_code=204)
def update_application_source(
    application_id: str,
    payload: TextUpdateRequest,
    tracker: Tracker = Depends(get_tracker_dep),
) -> Response:
    tracker.applications.update_application_source(application_id, payload.text)
    return Response(status_code=204)


@router.delete("/applications/{application_id}", status_code=204)
def delete_application(application_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> Response:
    tracker.applications.delete_application(application_id)
    return Response(status_code=204)


# activities


@router.get("/activities/application/{application_id}", response_model=list[ActivityResponse])
def list_application_activity(
    application_id: str,
    tracker: Tracker = Depends(get_tracker_dep),
) -> list[ActivityResponse]:
    rows = tracker.activities.list_for_application(application_id)
    return [ActivityResponse.model_validate(row) for row in rows]


@router.get("/activities", response_model=list[ActivityResponse])
def list_activities(
    limit: int | None = None,
    offset: int = 0,
    application_id: str | None = None,
    tracker: Tracker = Depends(get_tracker_dep),
) -> list[ActivityResponse]:
    rows = tracker.activities.list_activities(_page_size(limit), offset, application_id)
    return [ActivityResponse.model_validate(row) for row in rows]


@router.get("/activities/{activity_id}", response_model=ActivityResponse)
def get_activity(activity_id: str, tracker: Tracker = Depends(get_tracker_dep)) -> ActivityResponse:
    activity = tracker.activities.get_activity(activity_id)
    if activity is None:
        raise NotFoundError(f"Activity not found: {activity_id}", field="id")
    return ActivityResponse.model_validate(activity)


@router.put("/activities/{activity_id}/details", status_code=204)
def update_activity_details(
    activity_id: str,
    payload: TextUpdateRequest,
    tracker: Tracker = Depends(get_tracker_dep),
) -> Response:
    tracker.activities.update_details(activity_id, payload.text)
    return Response(status_code=204)
