"""Typed error taxonomy shared by the gateway, the managers and the boundaries.

Boundaries (HTTP, console) map errors by ``kind``; they never inspect the
message text.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"


class TrackerError(Exception):
    """Base error for every failure surfaced by the tracker core."""

    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r}, field={self.field!r})"


class ValidationError(TrackerError):
    """Caller input violates a required-field, enum or pagination rule."""

    kind = ErrorKind.VALIDATION


class NotFoundError(TrackerError):
    """A referenced entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(TrackerError):
    """Uniqueness violation or a blocked delete."""

    kind = ErrorKind.CONFLICT


class DependencyConflictError(ConflictError):
    """Delete blocked because other rows still reference the target."""


class PersistenceError(TrackerError):
    """Underlying datastore failure."""

    kind = ErrorKind.PERSISTENCE


class DuplicateKeyError(PersistenceError):
    """A storage-level uniqueness or reference constraint rejected a write."""

    kind = ErrorKind.CONFLICT
