"""Public, read-only catalog of published sessions."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from wellness.dependencies import Sessions
from wellness.models.sessions import SessionPage, SessionResponse
from wellness.sessions.service import parse_tags_query

router = APIRouter()


@router.get("", response_model=SessionPage)
async def list_sessions(
    service: Sessions,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    tags: Annotated[Optional[str], Query()] = None,
) -> SessionPage:
    """Return published sessions, newest first.

    ``tags`` is a comma-separated list; a session matches when it carries
    any of them.
    """
    return await service.list_published(
        tags=parse_tags_query(tags), page=page, limit=limit
    )


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, service: Sessions) -> SessionResponse:
    """Return a single published session."""
    session = await service.get_published(session_id)
    return SessionResponse(session=session)
