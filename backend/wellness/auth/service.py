"""User registration, login and token resolution."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from wellness.auth.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from wellness.config import Settings
from wellness.db.store import Database, utcnow
from wellness.errors import AuthError, ConflictError
from wellness.models.users import PublicUser

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Issues and validates bearer tokens against stored credential hashes.

    Callers pass already-validated, normalized emails (see
    ``wellness.validation``).
    """

    def __init__(self, database: Database, settings: Settings) -> None:
        self._database = database
        self._settings = settings

    async def register(self, email: str, password: str) -> tuple[str, PublicUser]:
        """Create a user and return ``(token, user)``.

        Raises:
            ConflictError: if the email is already registered.
        """
        if await self._database.users.find_one({"email": email}) is not None:
            raise ConflictError()

        # bcrypt is deliberately slow; keep it off the event loop
        password_hash = await asyncio.to_thread(
            hash_password, password, self._settings.bcrypt_rounds
        )
        doc: dict[str, Any] = {
            "email": email,
            "password_hash": password_hash,
            "created_at": utcnow(),
        }
        try:
            result = await self._database.users.insert_one(doc)
        except DuplicateKeyError as exc:
            # Lost a race with a concurrent registration
            raise ConflictError() from exc
        doc["_id"] = result.inserted_id

        user = PublicUser.from_document(doc)
        logger.info("Registered user %s", user.id)
        return self._issue_token(user.id), user

    async def login(self, email: str, password: str) -> tuple[str, PublicUser]:
        """Check credentials and return ``(token, user)``.

        Raises:
            AuthError: for an unknown email or a wrong password alike.
        """
        doc = await self._database.users.find_one({"email": email})
        if doc is None:
            logger.info("Login failed: unknown email")
            raise AuthError(INVALID_CREDENTIALS)

        matches = await asyncio.to_thread(
            verify_password, password, doc.get("password_hash", "")
        )
        if not matches:
            logger.info("Login failed: bad password for user %s", doc["_id"])
            raise AuthError(INVALID_CREDENTIALS)

        user = PublicUser.from_document(doc)
        return self._issue_token(user.id), user

    async def resolve_token(self, token: str) -> PublicUser:
        """Return the user a bearer token belongs to.

        Raises:
            AuthError: if the token is invalid, expired or its user is gone.
        """
        try:
            user_id = decode_access_token(token, self._settings)
        except InvalidTokenError as exc:
            raise AuthError(str(exc)) from exc

        if not ObjectId.is_valid(user_id):
            raise AuthError("Token is not valid")
        doc = await self._database.users.find_one({"_id": ObjectId(user_id)})
        if doc is None:
            raise AuthError("Token is not valid")
        return PublicUser.from_document(doc)

    def _issue_token(self, user_id: str) -> str:
        return create_access_token(user_id, self._settings)
