from __future__ import annotations

from jobtracker.core.validation import is_blank, require_text
from jobtracker.db.models import User
from jobtracker.db.repositories import Repository
from jobtracker.errors import ConflictError, DuplicateKeyError, ValidationError
from jobtracker.types import UserDraft


class UserManager:
    def __init__(self, repo: Repository):
        self.repo = repo

    def save_user(self, draft: UserDraft) -> str:
        """Insert when ``draft.id`` is blank, otherwise update every field."""
        email = require_text(draft.email, field="email", label="Email")
        password_hash = require_text(draft.password_hash, field="password_hash", label="Password hash")
        name = require_text(draft.name, field="name", label="Name")
        if "@" not in email:
            raise ValidationError("Invalid email format", field="email")

        user_id = None if is_blank(draft.id) else draft.id.strip()
        if self.repo.user_email_exists(email, exclude_id=user_id):
            raise ConflictError("Email already exists", field="email")

        try:
            if user_id is None:
                return self.repo.create_user(email=email, password_hash=password_hash, name=name)
            self.repo.update_user(user_id, email=email, password_hash=password_hash, name=name)
        except DuplicateKeyError as exc:
            raise ConflictError("Email already exists", field="email") from exc
        return user_id

    def get_user(self, user_id: str | None) -> User | None:
        if is_blank(user_id):
            return None
        return self.repo.get_user(user_id.strip())

    def list_users(self, limit: int, offset: int) -> list[User]:
        return self.repo.list_users(limit, offset)

    def delete_user(self, user_id: str | None) -> None:
        self.repo.delete_user(require_text(user_id, field="id", label="User ID"))

    def email_exists(self, email: str | None) -> bool:
        if is_blank(email):
            return False
        return self.repo.user_email_exists(email.strip())

    def user_exists(self, user_id: str | None) -> bool:
        if is_blank(user_id):
            return False
        return self.repo.user_exists(user_id.strip())
