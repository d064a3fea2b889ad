"""Owner-scoped session endpoints. Every route requires a bearer token."""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from wellness.dependencies import CurrentUser, Sessions, get_current_user
from wellness.errors import raise_for_result
from wellness.models.sessions import (
    MessageResponse,
    SessionEnvelope,
    SessionPage,
    SessionPayload,
    SessionResponse,
)
from wellness.validation import SessionInput, validate_session_payload

router = APIRouter(dependencies=[Depends(get_current_user)])


def _validated(body: SessionPayload) -> SessionInput:
    return raise_for_result(
        validate_session_payload(
            title=body.title,
            json_file_url=body.json_file_url,
            tags=body.tags,
            # an empty id means "not saved yet"
            session_id=body.id or None,
        )
    )


@router.get("", response_model=SessionPage)
async def list_my_sessions(
    user: CurrentUser,
    service: Sessions,
    status: Annotated[Optional[str], Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> SessionPage:
    """Return the caller's sessions, most recently modified first."""
    return await service.list_owned(user.id, status=status, page=page, limit=limit)


@router.post("/save-draft", response_model=SessionEnvelope)
async def save_draft(
    body: SessionPayload, user: CurrentUser, service: Sessions
) -> SessionEnvelope:
    """Create a draft, or update an existing draft when ``id`` is given."""
    session = await service.save_draft(user.id, _validated(body))
    return SessionEnvelope(message="Draft saved successfully", session=session)


@router.post("/publish", response_model=SessionEnvelope)
async def publish(
    body: SessionPayload, user: CurrentUser, service: Sessions
) -> SessionEnvelope:
    """Publish a new session, or publish an owned one when ``id`` is given."""
    session = await service.publish(user.id, _validated(body))
    return SessionEnvelope(message="Session published successfully", session=session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_my_session(
    session_id: str, user: CurrentUser, service: Sessions
) -> SessionResponse:
    session = await service.get_owned(user.id, session_id)
    return SessionResponse(session=session)


@router.delete("/{session_id}", response_model=MessageResponse)
async def delete_my_session(
    session_id: str, user: CurrentUser, service: Sessions
) -> MessageResponse:
    await service.delete(user.id, session_id)
    return MessageResponse(message="Session deleted successfully")
