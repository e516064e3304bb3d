from __future__ import annotations

from jobtracker.core.validation import is_blank, optional_text, require_text
from jobtracker.db.models import Company
from jobtracker.db.repositories import Repository
from jobtracker.errors import ConflictError, DuplicateKeyError
from jobtracker.types import CompanyDraft


class CompanyManager:
    def __init__(self, repo: Repository):
        self.repo = repo

    def save_company(self, draft: CompanyDraft) -> str:
        name = require_text(draft.name, field="name", label="Company name")
        company_id = None if is_blank(draft.id) else draft.id.strip()
        if self.repo.company_name_exists(name, exclude_id=company_id):
            raise ConflictError("Company name already exists", field="name")

        values = {
            "name": name,
            "industry": optional_text(draft.industry),
            "location_city": optional_text(draft.location_city),
            "location_state": optional_text(draft.location_state),
            "company_url": optional_text(draft.company_url),
        }
        try:
            if company_id is None:
                return self.repo.create_company(**values)
            self.repo.update_company(company_id, **values)
        except DuplicateKeyError as exc:
            raise ConflictError("Company name already exists", field="name") from exc
        return company_id

    def get_company(self, company_id: str | None) -> Company | None:
        if is_blank(company_id):
            return None
        return self.repo.get_company(company_id.strip())

    def list_companies(self, limit: int, offset: int) -> list[Company]:
        return self.repo.list_companies(limit, offset)

    def delete_company(self, company_id: str | None) -> None:
        self.repo.delete_company(require_text(company_id, field="id", label="Company ID"))

    def company_name_exists(self, name: str | None) -> bool:
        if is_blank(name):
            return False
        return self.repo.company_name_exists(name.strip())

    def company_exists(self, company_id: str | None) -> bool:
        if is_blank(company_id):
            return False
        return self.repo.company_exists(company_id.strip())
