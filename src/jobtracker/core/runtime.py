from __future__ import annotations

from dataclasses import dataclass

from jobtracker.core.activities import ActivityManager
from jobtracker.core.applications import ApplicationManager
from jobtracker.core.companies import CompanyManager
from jobtracker.core.jobs import JobManager
from jobtracker.core.users import UserManager
from jobtracker.db.repositories import Repository


@dataclass(slots=True)
class Tracker:
    repo: Repository
    users: UserManager
    companies: CompanyManager
    jobs: JobManager
    applications: ApplicationManager
    activities: ActivityManager


def build_tracker(repo: Repository | None = None) -> Tracker:
    repo = repo or Repository()
    return Tracker(
        repo=repo,
        users=UserManager(repo),
        companies=CompanyManager(repo),
        jobs=JobManager(repo),
        applications=ApplicationManager(repo),
        activities=ActivityManager(repo),
    )


_TRACKER: Tracker | None = None


def get_tracker() -> Tracker:
    global _TRACKER
    if _TRACKER is None:
        _TRACKER = build_tracker()
    return _TRACKER
