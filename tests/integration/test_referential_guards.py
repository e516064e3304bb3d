from __future__ import annotations

import pytest

from jobtracker.core.runtime import Tracker
from jobtracker.errors import ConflictError, DependencyConflictError, DuplicateKeyError, NotFoundError, ValidationError
from jobtracker.types import ApplicationDraft, CompanyDraft, JobDraft, UserDraft


@pytest.fixture()
def graph(tracker: Tracker) -> dict[str, str]:
    company_id = tracker.companies.save_company(CompanyDraft(name="Acme", industry="Software"))
    job_id = tracker.jobs.save_job(JobDraft(company_id=company_id, title="Engineer"))
    user_id = tracker.users.save_user(UserDraft(email="a@x.com", password_hash="hash", name="Ada"))
    application_id = tracker.applications.save_application(
        ApplicationDraft(user_id=user_id, job_id=job_id, status="applied")
    )
    return {"company": company_id, "job": job_id, "user": user_id, "application": application_id}


def test_company_with_jobs_cannot_be_deleted(tracker: Tracker, graph: dict[str, str]) -> None:
    with pytest.raises(DependencyConflictError):
        tracker.companies.delete_company(graph["company"])
    assert tracker.companies.get_company(graph["company"]) is not None
    assert tracker.jobs.get_job(graph["job"]) is not None


def test_job_with_applications_cannot_be_deleted(tracker: Tracker, graph: dict[str, str]) -> None:
    with pytest.raises(ConflictError):
        tracker.jobs.delete_job(graph["job"])
    assert tracker.jobs.get_job(graph["job"]) is not None
    assert tracker.applications.get_application(graph["application"]) is not None


def test_user_with_applications_cannot_be_deleted(tracker: Tracker, graph: dict[str, str]) -> None:
    with pytest.raises(DependencyConflictError):
        tracker.users.delete_user(graph["user"])
    assert tracker.users.get_user(graph["user"]) is not None
    assert tracker.applications.get_application(graph["application"]) is not None


def test_deletes_of_unknown_ids_are_not_found(tracker: Tracker) -> None:
    for delete in (
        tracker.users.delete_user,
        tracker.companies.delete_company,
        tracker.jobs.delete_job,
        tracker.applications.delete_application,
    ):
        with pytest.raises(NotFoundError):
            delete("missing")


def test_second_application_for_same_pair_is_conflict(tracker: Tracker, graph: dict[str, str]) -> None:
    with pytest.raises(ConflictError):
        tracker.applications.save_application(
            ApplicationDraft(user_id=graph["user"], job_id=graph["job"], status="interview")
        )
    assert tracker.repo.row_counts()["applications"] == 1


def test_storage_constraint_backs_up_the_pre_check(tracker: Tracker, graph: dict[str, str]) -> None:
    with pytest.raises(DuplicateKeyError):
        tracker.repo.create_user(email="a@x.com", password_hash="other", name="Other")
    with pytest.raises(DuplicateKeyError):
        tracker.repo.create_company(name="Acme")
    assert tracker.repo.row_counts()["users"] == 1


def test_duplicate_email_and_company_name_are_conflicts(tracker: Tracker, graph: dict[str, str]) -> None:
    with pytest.raises(ConflictError) as info:
        tracker.users.save_user(UserDraft(email="a@x.com", password_hash="h", name="Twin"))
    assert info.value.field == "email"
    with pytest.raises(ConflictError) as info:
        tracker.companies.save_company(CompanyDraft(name="Acme"))
    assert info.value.field == "name"


def test_smart_save_updates_existing_rows(tracker: Tracker, graph: dict[str, str]) -> None:
    tracker.users.save_user(UserDraft(id=graph["user"], email="ada@x.com", password_hash="h2", name="Ada L."))
    user = tracker.users.get_user(graph["user"])
    assert (user.email, user.password_hash, user.name) == ("ada@x.com", "h2", "Ada L.")

    tracker.companies.save_company(CompanyDraft(id=graph["company"], name="Acme", location_city="Austin"))
    assert tracker.companies.get_company(graph["company"]).location_city == "Austin"

    with pytest.raises(NotFoundError):
        tracker.users.save_user(UserDraft(id="missing", email="z@x.com", password_hash="h", name="Z"))


def test_deleting_application_cascades_activities_only(tracker: Tracker, graph: dict[str, str]) -> None:
    tracker.applications.update_application_status(graph["application"], "interview")
    tracker.applications.delete_application(graph["application"])

    assert tracker.activities.list_for_application(graph["application"]) == []
    assert tracker.applications.get_application(graph["application"]) is None
    assert tracker.jobs.get_job(graph["job"]) is not None
    assert tracker.companies.get_company(graph["company"]) is not None

    tracker.jobs.delete_job(graph["job"])
    tracker.companies.delete_company(graph["company"])
    tracker.users.delete_user(graph["user"])
    assert tracker.repo.row_counts() == {
        "users": 0,
        "companies": 0,
        "jobs": 0,
        "applications": 0,
        "activities": 0,
    }


def test_create_then_fetch_round_trips_fields(tracker: Tracker) -> None:
    draft = CompanyDraft(
        name="Globex",
        industry="Energy",
        location_city="Springfield",
        location_state="OR",
        company_url="https://globex.example",
    )
    company = tracker.companies.get_company(tracker.companies.save_company(draft))
    assert {
        "name": company.name,
        "industry": company.industry,
        "location_city": company.location_city,
        "location_state": company.location_state,
        "company_url": company.company_url,
    } == draft.model_dump(exclude={"id"})

    job_draft = JobDraft(
        company_id=company.id,
        title="Analyst",
        employment_type="part_time",
        work_type="hybrid",
        job_url="https://globex.example/jobs/1",
        salary_min=50000,
        salary_max=70000,
    )
    job = tracker.jobs.get_job(tracker.jobs.save_job(job_draft))
    assert (job.company_id, job.title, job.employment_type, job.work_type) == (
        company.id,
        "Analyst",
        "part_time",
        "hybrid",
    )
    assert (job.job_url, job.salary_min, job.salary_max) == ("https://globex.example/jobs/1", 50000, 70000)


def test_detail_view_joins_owner_names(tracker: Tracker, graph: dict[str, str]) -> None:
    detail = tracker.applications.get_application(graph["application"])
    assert detail.user_name == "Ada"
    assert detail.user_email == "a@x.com"
    assert detail.company_name == "Acme"
    assert detail.job_title == "Engineer"
    assert detail.status == "applied"
    assert detail.applied_at == detail.last_updated_at


def test_list_filters_and_pagination(tracker: Tracker, graph: dict[str, str]) -> None:
    other_job = tracker.jobs.save_job(JobDraft(company_id=graph["company"], title="Designer"))
    tracker.applications.save_application(ApplicationDraft(user_id=graph["user"], job_id=other_job, status="offer"))

    assert len(tracker.applications.list_applications(10, 0)) == 2
    assert len(tracker.applications.list_applications(1, 1)) == 1
    offers = tracker.applications.list_applications(10, 0, status="OFFER")
    assert [row.job_title for row in offers] == ["Designer"]
    assert len(tracker.jobs.list_jobs(10, 0, company_id=graph["company"])) == 2
    assert tracker.jobs.list_jobs(10, 0, company_id="other") == []

    for bad in ((0, 0), (10, -1), (10_000, 0)):
        with pytest.raises(ValidationError):
            tracker.users.list_users(*bad)
