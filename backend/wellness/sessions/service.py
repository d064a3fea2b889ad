"""Owner-scoped and public operations on wellness sessions.

Owner operations always filter on ``user_id`` so a session belonging to
someone else is indistinguishable from one that does not exist. Public
operations always filter on ``status == "published"``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument

from wellness.db.store import Database, utcnow
from wellness.errors import NotFoundError
from wellness.models.sessions import (
    Owner,
    Pagination,
    Session,
    SessionPage,
    SessionStatus,
)
from wellness.validation import SessionInput

logger = logging.getLogger(__name__)


def _object_id(value: str) -> Optional[ObjectId]:
    return ObjectId(value) if ObjectId.is_valid(value) else None


def _pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(current=page, pages=math.ceil(total / limit), total=total)


def parse_tags_query(tags: str | None) -> list[str]:
    """Split a comma-separated ``tags`` query value into trimmed tags.

    Empty segments are kept, so a value like ``","`` filters on the empty tag
    and matches nothing rather than dropping the filter.
    """
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",")]


class SessionService:
    """Reads and writes the ``sessions`` collection."""

    def __init__(self, database: Database) -> None:
        self._database = database

    # ------------------------------------------------------------------
    # Owner API
    # ------------------------------------------------------------------

    async def list_owned(
        self,
        owner_id: str,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> SessionPage:
        """Return the owner's sessions, most recently modified first.

        An unrecognised ``status`` is ignored rather than rejected.
        """
        query: dict[str, Any] = {"user_id": ObjectId(owner_id)}
        if status in {s.value for s in SessionStatus}:
            query["status"] = status

        docs, total = await self._find_page(
            query,
            sort=[("updated_at", DESCENDING), ("_id", DESCENDING)],
            page=page,
            limit=limit,
        )
        return SessionPage(
            sessions=[Session.from_document(doc) for doc in docs],
            pagination=_pagination(page, limit, total),
        )

    async def get_owned(self, owner_id: str, session_id: str) -> Session:
        doc = await self._find_owned(owner_id, session_id)
        if doc is None:
            raise NotFoundError("Session not found")
        return Session.from_document(doc)

    async def save_draft(self, owner_id: str, data: SessionInput) -> Session:
        """Create a draft, or update one of the owner's existing drafts.

        With an id, only a session that is owned by the caller *and* still a
        draft can be updated; published sessions are not editable here.
        """
        if data.id is None:
            return await self._create(owner_id, data, SessionStatus.DRAFT)

        doc = await self._update(
            owner_id,
            data,
            extra_filter={"status": SessionStatus.DRAFT.value},
        )
        if doc is None:
            raise NotFoundError("Draft session not found")
        logger.info("Updated draft %s for user %s", data.id, owner_id)
        return Session.from_document(doc)

    async def publish(self, owner_id: str, data: SessionInput) -> Session:
        """Create a published session, or publish one of the owner's sessions.

        With an id, any owned session is overwritten and its status forced to
        published, whatever it was before.
        """
        if data.id is None:
            return await self._create(owner_id, data, SessionStatus.PUBLISHED)

        doc = await self._update(
            owner_id, data, extra_set={"status": SessionStatus.PUBLISHED.value}
        )
        if doc is None:
            raise NotFoundError("Session not found")
        logger.info("Published session %s for user %s", data.id, owner_id)
        return Session.from_document(doc)

    async def delete(self, owner_id: str, session_id: str) -> None:
        oid = _object_id(session_id)
        if oid is None:
            raise NotFoundError("Session not found")
        result = await self._database.sessions.delete_one(
            {"_id": oid, "user_id": ObjectId(owner_id)}
        )
        if result.deleted_count == 0:
            raise NotFoundError("Session not found")
        logger.info("Deleted session %s for user %s", session_id, owner_id)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_published(
        self,
        tags: list[str] | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> SessionPage:
        """Return published sessions, newest first, optionally matching any tag."""
        query: dict[str, Any] = {"status": SessionStatus.PUBLISHED.value}
        if tags:
            query["tags"] = {"$in": tags}

        docs, total = await self._find_page(
            query,
            sort=[("created_at", DESCENDING), ("_id", DESCENDING)],
            page=page,
            limit=limit,
        )
        owners = await self._owners_for(docs)
        return SessionPage(
            sessions=[
                Session.from_document(doc, owners.get(doc["user_id"]))
                for doc in docs
            ],
            pagination=_pagination(page, limit, total),
        )

    async def get_published(self, session_id: str) -> Session:
        oid = _object_id(session_id)
        doc = None
        if oid is not None:
            doc = await self._database.sessions.find_one(
                {"_id": oid, "status": SessionStatus.PUBLISHED.value}
            )
        if doc is None:
            raise NotFoundError("Session not found")
        owners = await self._owners_for([doc])
        return Session.from_document(doc, owners.get(doc["user_id"]))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _find_page(
        self,
        query: dict[str, Any],
        sort: list[tuple[str, int]],
        page: int,
        limit: int,
    ) -> tuple[list[dict[str, Any]], int]:
        cursor = (
            self._database.sessions.find(query)
            .sort(sort)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        total = await self._database.sessions.count_documents(query)
        return docs, total

    async def _find_owned(
        self, owner_id: str, session_id: str
    ) -> Optional[dict[str, Any]]:
        oid = _object_id(session_id)
        if oid is None:
            return None
        return await self._database.sessions.find_one(
            {"_id": oid, "user_id": ObjectId(owner_id)}
        )

    async def _create(
        self, owner_id: str, data: SessionInput, status: SessionStatus
    ) -> Session:
        now = utcnow()
        doc: dict[str, Any] = {
            "user_id": ObjectId(owner_id),
            "title": data.title,
            "tags": data.tags,
            "json_file_url": data.json_file_url,
            "status": status.value,
            "created_at": now,
            "updated_at": now,
        }
        result = await self._database.sessions.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(
            "Created %s session %s for user %s",
            status.value,
            result.inserted_id,
            owner_id,
        )
        return Session.from_document(doc)

    async def _update(
        self,
        owner_id: str,
        data: SessionInput,
        extra_filter: dict[str, Any] | None = None,
        extra_set: dict[str, Any] | None = None,
    ) -> Optional[dict[str, Any]]:
        """Atomically overwrite an owned session's fields; None if no match."""
        oid = _object_id(data.id or "")
        if oid is None:
            return None
        update = {
            "title": data.title,
            "tags": data.tags,
            "json_file_url": data.json_file_url,
            "updated_at": utcnow(),
            **(extra_set or {}),
        }
        return await self._database.sessions.find_one_and_update(
            {"_id": oid, "user_id": ObjectId(owner_id), **(extra_filter or {})},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )

    async def _owners_for(
        self, docs: list[dict[str, Any]]
    ) -> dict[ObjectId, Owner]:
        user_ids = list({doc["user_id"] for doc in docs})
        if not user_ids:
            return {}
        cursor = self._database.users.find(
            {"_id": {"$in": user_ids}}, {"email": 1}
        )
        return {
            user["_id"]: Owner(id=str(user["_id"]), email=user["email"])
            async for user in cursor
        }
