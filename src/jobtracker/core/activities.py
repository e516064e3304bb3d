from __future__ import annotations

from jobtracker.core.validation import is_blank, optional_text, require_text
from jobtracker.db.models import Activity
from jobtracker.db.repositories import Repository


class ActivityManager:
    """Read access to the audit trail plus the details correction path."""

    def __init__(self, repo: Repository):
        self.repo = repo

    def list_for_application(self, application_id: str | None) -> list[Activity]:
        if is_blank(application_id):
            return []
        return self.repo.list_activity_for_application(application_id.strip())

    def list_activities(self, limit: int, offset: int, application_id: str | None = None) -> list[Activity]:
        return self.repo.list_activities(limit, offset, application_id=optional_text(application_id))

    def get_activity(self, activity_id: str | None) -> Activity | None:
        if is_blank(activity_id):
            return None
        return self.repo.get_activity(activity_id.strip())

    def update_details(self, activity_id: str | None, details: str | None) -> Activity:
        activity_id = require_text(activity_id, field="id", label="Activity ID")
        return self.repo.update_activity_details(activity_id, details)
