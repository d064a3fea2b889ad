"""Wellness session models for requests, responses and store documents."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Lifecycle status. Publishing is one-way through the API."""

    DRAFT = "draft"
    PUBLISHED = "published"


class SessionPayload(BaseModel):
    """Body of ``save-draft`` and ``publish``; checked by the validators."""

    title: Optional[str] = None
    tags: Optional[list[str]] = None
    json_file_url: Optional[str] = None
    id: Optional[str] = None


class Owner(BaseModel):
    """Public fields of a session's owner."""

    id: str
    email: str


class Session(BaseModel):
    """A wellness session as returned by the API."""

    id: str
    user_id: str
    title: str
    tags: list[str] = Field(default_factory=list)
    json_file_url: str
    status: SessionStatus
    created_at: datetime
    updated_at: datetime
    owner: Optional[Owner] = None

    @classmethod
    def from_document(
        cls, doc: dict[str, Any], owner: Optional[Owner] = None
    ) -> "Session":
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            title=doc["title"],
            tags=doc.get("tags", []),
            json_file_url=doc["json_file_url"],
            status=doc["status"],
            created_at=_as_utc(doc["created_at"]),
            updated_at=_as_utc(doc["updated_at"]),
            owner=owner,
        )


class Pagination(BaseModel):
    current: int
    pages: int
    total: int


class SessionPage(BaseModel):
    """One page of a session listing."""

    sessions: list[Session]
    pagination: Pagination


class SessionResponse(BaseModel):
    session: Session


class SessionEnvelope(SessionResponse):
    """A saved session plus a confirmation message."""

    message: str


class MessageResponse(BaseModel):
    message: str


def _as_utc(value: datetime) -> datetime:
    # MongoDB hands back naive datetimes unless the client is tz-aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
