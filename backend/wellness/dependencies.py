"""Dependency injection providers for FastAPI."""

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from wellness.auth.service import AuthService
from wellness.config import Settings, get_settings, settings
from wellness.db.store import Database
from wellness.errors import AuthError
from wellness.models.users import PublicUser
from wellness.sessions.service import SessionService

# Global singleton (one motor client per process)
_database: Database | None = None

_bearer = HTTPBearer(auto_error=False)


def get_database() -> Database:
    """Return singleton Database instance."""
    global _database
    if _database is None:
        _database = Database(settings)
    return _database


def get_auth_service(
    database: Annotated[Database, Depends(get_database)],
    app_settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    return AuthService(database, app_settings)


def get_session_service(
    database: Annotated[Database, Depends(get_database)],
) -> SessionService:
    return SessionService(database)


async def get_current_user(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(_bearer)
    ],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> PublicUser:
    """Resolve the ``Authorization: Bearer <token>`` header to a user."""
    if credentials is None or not credentials.credentials:
        raise AuthError("No token, authorization denied")
    return await auth_service.resolve_token(credentials.credentials)


CurrentUser = Annotated[PublicUser, Depends(get_current_user)]
Auth = Annotated[AuthService, Depends(get_auth_service)]
Sessions = Annotated[SessionService, Depends(get_session_service)]
