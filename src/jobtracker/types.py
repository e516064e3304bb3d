from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

ApplicationStatus = Literal["applied", "phone_screen", "interview", "offer", "rejected", "withdrawn"]
ActivityEventType = Literal["created", "status_change", "note_added", "interview_scheduled", "followup_set"]
EmploymentType = Literal["internship", "full_time", "contract", "part_time"]
WorkType = Literal["remote", "hybrid", "on_site"]

APPLICATION_STATUSES: tuple[str, ...] = ("applied", "phone_screen", "interview", "offer", "rejected", "withdrawn")
EMPLOYMENT_TYPES: tuple[str, ...] = ("internship", "full_time", "contract", "part_time")
WORK_TYPES: tuple[str, ...] = ("remote", "hybrid", "on_site")

DEFAULT_EMPLOYMENT_TYPE = "full_time"
DEFAULT_WORK_TYPE = "remote"

CREATED_DETAILS = "Application created"
STATUS_CHANGE_DETAILS = "Status updated via console"


class UserDraft(BaseModel):
    id: str | None = None
    email: str | None = None
    password_hash: str | None = None
    name: str | None = None


class CompanyDraft(BaseModel):
    id: str | None = None
    name: str | None = None
    industry: str | None = None
    location_city: str | None = None
    location_state: str | None = None
    company_url: str | None = None


class JobDraft(BaseModel):
    id: str | None = None
    company_id: str | None = None
    title: str | None = None
    employment_type: str | None = None
    work_type: str | None = None
    job_url: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None


class ApplicationDraft(BaseModel):
    id: str | None = None
    user_id: str | None = None
    job_id: str | None = None
    status: str | None = None
    source: str | None = None
    notes: str | None = None


class ApplicationDetail(BaseModel):
    """Application joined with its user, job and company for display."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    job_id: str
    user_name: str
    user_email: str
    company_name: str
    job_title: str
    status: ApplicationStatus
    applied_at: datetime
    source: str | None = None
    notes: str | None = None
    last_updated_at: datetime
