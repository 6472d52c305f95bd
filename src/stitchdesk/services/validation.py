from __future__ import annotations

import re

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(Exception):
    pass


def require_text(value: str | None, message: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message)
    return value.strip()


def require_phone(value: str | None, label: str = "Phone number") -> str:
    digits = re.sub(r"\D", "", value or "")
    if len(digits) < 10:
        raise ValidationError(f"{label} must be at least 10 digits.")
    return (value or "").strip()


def optional_email(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    if not _EMAIL.match(value.strip()):
        raise ValidationError("Invalid email address.")
    return value.strip()
