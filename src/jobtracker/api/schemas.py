from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from jobtracker.types import ActivityEventType, ApplicationStatus, EmploymentType, WorkType


class UserRequest(BaseModel):
    email: str | None = None
    password_hash: str | None = None
    name: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: datetime


class CompanyRequest(BaseModel):
    name: str | None = None
    industry: str | None = None
    location_city: str | None = None
    location_state: str | None = None
    company_url: str | None = None


class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    industry: str | None
    location_city: str | None
    location_state: str | None
    company_url: str | None
    created_at: datetime


class JobRequest(BaseModel):
    company_id: str | None = None
    title: str | None = None
    employment_type: str | None = None
    work_type: str | None = None
    job_url: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    title: str
    employment_type: EmploymentType
    work_type: WorkType
    job_url: str | None
    salary_min: int | None
    salary_max: int | None
    created_at: datetime


class ApplicationCreateRequest(BaseModel):
    user_id: str | None = None
    job_id: str | None = None
    status: str | None = None
    source: str | None = None
    notes: str | None = None


class StatusUpdateRequest(BaseModel):
    status: str | None = None


class TextUpdateRequest(BaseModel):
    text: str | None = None


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    application_id: str
    user_id: str
    event_type: ActivityEventType
    old_status: ApplicationStatus | None
    new_status: ApplicationStatus | None
    event_time: datetime
    details: str


class IdResponse(BaseModel):
    id: str


class ExistsResponse(BaseModel):
    exists: bool


class ErrorResponse(BaseModel):
    error: str
    code: str
    field: str | None = None


class HealthResponse(BaseModel):
    status: str
    row_counts: dict[str, int]
