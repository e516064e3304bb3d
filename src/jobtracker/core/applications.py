from __future__ import annotations

from jobtracker.core.validation import is_blank, normalize_choice, optional_text, require_text
from jobtracker.db.base import utcnow
from jobtracker.db.repositories import Repository
from jobtracker.errors import ConflictError, DuplicateKeyError, NotFoundError, PersistenceError, ValidationError
from jobtracker.types import APPLICATION_STATUSES, ApplicationDetail, ApplicationDraft


def normalize_status(status: str | None) -> str:
    value = require_text(status, field="status", label="Status")
    return normalize_choice(value, APPLICATION_STATUSES, field="status", label="status")


class ApplicationManager:
    """Applications are created only through ``save_application``.

    Existing applications change exclusively through the status, notes and
    source operations so that every status change carries its activity record.
    """

    def __init__(self, repo: Repository):
        self.repo = repo

    def save_application(self, draft: ApplicationDraft) -> str:
        user_id = require_text(draft.user_id, field="user_id", label="User ID")
        job_id = require_text(draft.job_id, field="job_id", label="Job ID")
        status = normalize_status(draft.status)

        if not is_blank(draft.id):
            raise ValidationError(
                "Use update_application_status() or the notes/source updates for existing applications",
                field="id",
            )

        if not self.repo.user_exists(user_id):
            raise NotFoundError(f"User not found: {user_id}", field="user_id")
        if not self.repo.job_exists(job_id):
            raise NotFoundError(f"Job not found: {job_id}", field="job_id")
        if self.repo.user_job_application_exists(user_id, job_id):
            raise ConflictError("User already applied to this job", field="job_id")

        try:
            return self.repo.create_application(
                user_id=user_id,
                job_id=job_id,
                status=status,
                applied_at=utcnow(),
                source=optional_text(draft.source),
                notes=draft.notes,
            )
        except DuplicateKeyError as exc:
            raise ConflictError("User already applied to this job", field="job_id") from exc

    def get_application(self, application_id: str | None) -> ApplicationDetail | None:
        if is_blank(application_id):
            return None
        return self.repo.get_application_detail(application_id.strip())

    def list_applications(
        self,
        limit: int,
        offset: int,
        *,
        user_id: str | None = None,
        status: str | None = None,
    ) -> list[ApplicationDetail]:
        status_filter = None if is_blank(status) else normalize_status(status)
        return self.repo.list_application_details(
            limit, offset, user_id=optional_text(user_id), status=status_filter
        )

    def delete_application(self, application_id: str | None) -> None:
        self.repo.delete_application(require_text(application_id, field="id", label="Application ID"))

    def update_application_status(self, application_id: str | None, new_status: str | None) -> ApplicationDetail:
        application_id = require_text(application_id, field="id", label="Application ID")
        status = normalize_status(new_status)

        self.repo.update_application_status(application_id, status, utcnow())

        detail = self.repo.get_application_detail(application_id)
        if detail is None:
            raise PersistenceError(f"application {application_id} missing after status update")
        return detail

    def update_application_notes(self, application_id: str | None, notes: str | None) -> None:
        application_id = require_text(application_id, field="id", label="Application ID")
        self.repo.update_application_notes(application_id, notes, utcnow())

    def update_application_source(self, application_id: str | None, source: str | None) -> None:
        application_id = require_text(application_id, field="id", label="Application ID")
        self.repo.update_application_source(application_id, optional_text(source), utcnow())

    def application_exists(self, application_id: str | None) -> bool:
        if is_blank(application_id):
            return False
        return self.repo.application_exists(application_id.strip())

    def user_job_application_exists(self, user_id: str | None, job_id: str | None) -> bool:
        if is_blank(user_id) or is_blank(job_id):
            return False
        return self.repo.user_job_application_exists(user_id.strip(), job_id.strip())
