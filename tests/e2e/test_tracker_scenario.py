from __future__ import annotations

from jobtracker.core.runtime import Tracker
from jobtracker.types import ApplicationDraft, CompanyDraft, JobDraft, UserDraft


def test_acme_application_walkthrough(tracker: Tracker) -> None:
    company_id = tracker.companies.save_company(CompanyDraft(name="Acme"))
    job_id = tracker.jobs.save_job(JobDraft(company_id=company_id, title="Engineer"))
    user_id = tracker.users.save_user(UserDraft(email="a@x.com", password_hash="h", name="A"))

    application_id = tracker.applications.save_application(
        ApplicationDraft(user_id=user_id, job_id=job_id, status="applied", source="careers page")
    )
    timeline = tracker.activities.list_for_application(application_id)
    assert [(a.event_type, a.old_status, a.new_status) for a in timeline] == [("created", None, None)]

    tracker.applications.update_application_status(application_id, "interview")
    tracker.applications.update_application_status(application_id, "offer")
    timeline = tracker.activities.list_for_application(application_id)
    assert [(a.event_type, a.old_status, a.new_status) for a in timeline] == [
        ("created", None, None),
        ("status_change", "applied", "interview"),
        ("status_change", "interview", "offer"),
    ]

    recent = tracker.applications.list_applications(10, 0, user_id=user_id)
    assert len(recent) == 1
    assert (recent[0].company_name, recent[0].job_title, recent[0].status) == ("Acme", "Engineer", "offer")

    tracker.applications.delete_application(application_id)
    tracker.jobs.delete_job(job_id)
    tracker.companies.delete_company(company_id)
    tracker.users.delete_user(user_id)

    assert tracker.repo.row_counts() == {
        "users": 0,
        "companies": 0,
        "jobs": 0,
        "applications": 0,
        "activities": 0,
    }


def test_applications_from_several_users_stay_isolated(tracker: Tracker) -> None:
    company_id = tracker.companies.save_company(CompanyDraft(name="Acme"))
    job_id = tracker.jobs.save_job(JobDraft(company_id=company_id, title="Engineer", employment_type="internship"))
    first = tracker.users.save_user(UserDraft(email="a@x.com", password_hash="h", name="A"))
    second = tracker.users.save_user(UserDraft(email="b@x.com", password_hash="h", name="B"))

    first_app = tracker.applications.save_application(ApplicationDraft(user_id=first, job_id=job_id, status="applied"))
    second_app = tracker.applications.save_application(
        ApplicationDraft(user_id=second, job_id=job_id, status="applied")
    )
    tracker.applications.update_application_status(second_app, "withdrawn")

    assert len(tracker.activities.list_for_application(first_app)) == 1
    assert len(tracker.activities.list_for_application(second_app)) == 2
    assert [row.id for row in tracker.applications.list_applications(10, 0, status="withdrawn")] == [second_app]
    assert tracker.jobs.get_job(job_id).employment_type == "internship"
