"""Explicit input validation for the API boundary.

Each validator returns a :class:`ValidationResult`; routes check ``ok`` and
raise before any store access happens.
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlparse

from bson import ObjectId
from pydantic import BaseModel, Field

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://.+", re.IGNORECASE)

PASSWORD_MIN_LENGTH = 6
TITLE_MAX_LENGTH = 200
TAG_MAX_LENGTH = 50


class FieldError(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str


class ValidationResult(BaseModel):
    """Outcome of a validator: either ok (with a cleaned value) or errors."""

    errors: list[FieldError] = Field(default_factory=list)
    value: Any = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field: str, message: str) -> None:
        self.errors.append(FieldError(field=field, message=message))


class SessionInput(BaseModel):
    """Cleaned session fields ready to be written to the store."""

    title: str
    tags: list[str] = Field(default_factory=list)
    json_file_url: str
    id: Optional[str] = None


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def is_valid_url(url: str | None) -> bool:
    if not url or URL_PATTERN.match(url) is None:
        return False
    return bool(urlparse(url).netloc)


def is_object_id(value: str | None) -> bool:
    return bool(value) and ObjectId.is_valid(value)


def clean_tags(tags: list[str] | None) -> list[str]:
    """Trim every tag and drop the empty ones."""
    return [tag.strip() for tag in tags or [] if tag.strip()]


def validate_registration(email: str | None, password: str | None) -> ValidationResult:
    result = ValidationResult()
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        result.add("email", "Enter a valid email")
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        result.add("password", "Password too short")
    if result.ok:
        result.value = normalized
    return result


def validate_login(email: str | None, password: str | None) -> ValidationResult:
    result = ValidationResult()
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        result.add("email", "Enter a valid email")
    if not password:
        result.add("password", "Password is required")
    if result.ok:
        result.value = normalized
    return result


def validate_session_payload(
    title: str | None,
    json_file_url: str | None,
    tags: list[str] | None = None,
    session_id: str | None = None,
) -> ValidationResult:
    """Validate a save-draft / publish body.

    On success ``value`` holds a :class:`SessionInput` with trimmed title and
    URL and cleaned tags.
    """
    result = ValidationResult()

    title = (title or "").strip()
    if not title:
        result.add("title", "Title is required")
    elif len(title) > TITLE_MAX_LENGTH:
        result.add("title", f"Title cannot exceed {TITLE_MAX_LENGTH} characters")

    json_file_url = (json_file_url or "").strip()
    if not json_file_url:
        result.add("json_file_url", "JSON file URL is required")
    elif not is_valid_url(json_file_url):
        result.add("json_file_url", "Please enter a valid URL")

    # Error paths index into the submitted list, blanks included
    for index, tag in enumerate(tags or []):
        if len(tag.strip()) > TAG_MAX_LENGTH:
            result.add(
                f"tags.{index}",
                f"Each tag cannot exceed {TAG_MAX_LENGTH} characters",
            )

    if session_id is not None and not is_object_id(session_id):
        result.add("id", "Invalid session ID")

    if result.ok:
        result.value = SessionInput(
            title=title,
            tags=clean_tags(tags),
            json_file_url=json_file_url,
            id=session_id,
        )
    return result
