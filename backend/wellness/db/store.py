"""MongoDB connection manager for users and wellness sessions.

Document schemas::

    users:    { _id, email, password_hash, created_at }
    sessions: { _id, user_id, title, tags: [...], json_file_url,
                status: "draft" | "published", created_at, updated_at }

Every write touches a single document; there are no multi-document
transactions and concurrent writes to the same session are last-write-wins.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING

from wellness.config import Settings

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
SESSIONS_COLLECTION = "sessions"


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision MongoDB stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class Database:
    """Owns the motor client and exposes the application collections.

    Lifecycle:
        database = Database(settings)
        await database.initialize()   # call once at startup
        ...
        await database.close()        # call once at shutdown

    A pre-built client may be passed in (tests hand in an in-memory one).
    """

    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self._settings = settings
        self._client: Any | None = client
        self._owns_client: bool = client is None
        self._db: AsyncIOMotorDatabase | None = None
        self._initialized: bool = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Connect to MongoDB and make sure the indexes exist."""
        if self._initialized:
            logger.warning("Database already initialized - skipping")
            return

        if self._client is None:
            logger.info("Connecting to MongoDB at %s", self._settings.mongodb_uri)
            self._client = AsyncIOMotorClient(
                self._settings.mongodb_uri,
                serverSelectionTimeoutMS=5_000,
                tz_aware=True,
            )
            await self._client.admin.command("ping")
            logger.info("MongoDB connection established")

        self._db = self._client[self._settings.mongodb_database]
        await self._ensure_indexes()

        self._initialized = True
        logger.info("Database fully initialized")

    async def close(self) -> None:
        """Release the connection if this manager opened it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            logger.info("MongoDB connection closed")
        self._initialized = False

    async def _ensure_indexes(self) -> None:
        await self.users.create_index("email", unique=True)
        await self.sessions.create_index(
            [("user_id", ASCENDING), ("status", ASCENDING)]
        )
        await self.sessions.create_index(
            [("status", ASCENDING), ("created_at", DESCENDING)]
        )
        await self.sessions.create_index("tags")

    async def ping(self) -> None:
        """Round-trip to the server; raises if it is unreachable."""
        await self.client.admin.command("ping")

    # ------------------------------------------------------------------
    # Properties (guard against use before init)
    # ------------------------------------------------------------------

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RuntimeError("Database not initialized - call initialize() first")
        return self._client

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise RuntimeError("Database not initialized - call initialize() first")
        return self._db

    @property
    def users(self) -> AsyncIOMotorCollection:
        return self.db[USERS_COLLECTION]

    @property
    def sessions(self) -> AsyncIOMotorCollection:
        return self.db[SESSIONS_COLLECTION]

    @property
    def is_initialized(self) -> bool:
        return self._initialized
