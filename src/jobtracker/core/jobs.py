from __future__ import annotations

from jobtracker.core.validation import is_blank, normalize_choice, optional_text, require_text
from jobtracker.db.models import Job
from jobtracker.db.repositories import Repository
from jobtracker.errors import DuplicateKeyError, NotFoundError, ValidationError
from jobtracker.types import DEFAULT_EMPLOYMENT_TYPE, DEFAULT_WORK_TYPE, EMPLOYMENT_TYPES, WORK_TYPES, JobDraft


class JobManager:
    def __init__(self, repo: Repository):
        self.repo = repo

    def save_job(self, draft: JobDraft) -> str:
        """Insert or update a job posting.

        Employment and work type are caller-supplied and checked against
        their enums; omitted values fall back to ``full_time`` and ``remote``.
        """
        company_id = require_text(draft.company_id, field="company_id", label="Company ID")
        title = require_text(draft.title, field="title", label="Job title")
        employment_type = normalize_choice(
            draft.employment_type or DEFAULT_EMPLOYMENT_TYPE,
            EMPLOYMENT_TYPES,
            field="employment_type",
            label="employment type",
        )
        work_type = normalize_choice(
            draft.work_type or DEFAULT_WORK_TYPE,
            WORK_TYPES,
            field="work_type",
            label="work type",
        )
        self._check_salary(draft.salary_min, draft.salary_max)

        if not self.repo.company_exists(company_id):
            raise NotFoundError("Company does not exist", field="company_id")

        values = {
            "company_id": company_id,
            "title": title,
            "employment_type": employment_type,
            "work_type": work_type,
            "job_url": optional_text(draft.job_url),
            "salary_min": draft.salary_min,
            "salary_max": draft.salary_max,
        }
        job_id = None if is_blank(draft.id) else draft.id.strip()
        try:
            if job_id is None:
                return self.repo.create_job(**values)
            self.repo.update_job(job_id, **values)
        except DuplicateKeyError as exc:
            # Company removed after the existence check; the foreign key rejected the write.
            raise NotFoundError("Company does not exist", field="company_id") from exc
        return job_id

    @staticmethod
    def _check_salary(salary_min: int | None, salary_max: int | None) -> None:
        if salary_min is not None and salary_min < 0:
            raise ValidationError("salary_min must be >= 0", field="salary_min")
        if salary_max is not None and salary_max < 0:
            raise ValidationError("salary_max must be >= 0", field="salary_max")
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise ValidationError("salary_min must not exceed salary_max", field="salary_min")

    def get_job(self, job_id: str | None) -> Job | None:
        if is_blank(job_id):
            return None
        return self.repo.get_job(job_id.strip())

    def list_jobs(self, limit: int, offset: int, *, company_id: str | None = None) -> list[Job]:
        return self.repo.list_jobs(limit, offset, company_id=optional_text(company_id))

    def delete_job(self, job_id: str | None) -> None:
        self.repo.delete_job(require_text(job_id, field="id", label="Job ID"))

    def job_exists(self, job_id: str | None) -> bool:
        if is_blank(job_id):
            return False
        return self.repo.job_exists(job_id.strip())
