from __future__ import annotations

from collections.abc import Iterable

from jobtracker.errors import ValidationError


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def require_text(value: str | None, *, field: str, label: str) -> str:
    if is_blank(value):
        raise ValidationError(f"{label} is required", field=field)
    return value.strip()


def optional_text(value: str | None) -> str | None:
    if is_blank(value):
        return None
    return value.strip()


def normalize_choice(value: str, allowed: Iterable[str], *, field: str, label: str) -> str:
    options = tuple(allowed)
    candidate = value.strip().lower()
    if candidate not in options:
        raise ValidationError(f"Invalid {label}. Must be one of: {', '.join(options)}", field=field)
    return candidate
