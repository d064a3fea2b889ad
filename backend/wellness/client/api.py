"""HTTP clients for the wellness sessions API.

The clients share one ``httpx.AsyncClient`` and are meant to be built once
at application start and handed to whatever needs them::

    async with httpx.AsyncClient(base_url="http://localhost:5000/api") as http:
        auth = AuthClient(http)
        sessions = SessionClient(http, auth)
        await auth.login("a@x.com", "secret1")
        page = await sessions.list_mine(status="draft")
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import jwt

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A non-2xx response from the API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


async def _request(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    fallback_message: str,
    **kwargs: Any,
) -> dict[str, Any]:
    response = await http.request(method, url, **kwargs)
    try:
        data = response.json()
    except ValueError:
        data = {}
    if response.is_error:
        raise ApiError(
            response.status_code,
            data.get("message") or fallback_message,
            data.get("errors"),
        )
    return data


def _params(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class AuthClient:
    """Registers, logs in and holds the current bearer token."""

    def __init__(
        self, http: httpx.AsyncClient, token: Optional[str] = None
    ) -> None:
        self._http = http
        self.token = token

    async def register(self, email: str, password: str) -> dict[str, Any]:
        data = await _request(
            self._http,
            "POST",
            "/auth/register",
            "Registration failed",
            json={"email": email, "password": password},
        )
        self.token = data.get("token") or self.token
        return data

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await _request(
            self._http,
            "POST",
            "/auth/login",
            "Login failed",
            json={"email": email, "password": password},
        )
        self.token = data.get("token") or self.token
        return data

    async def me(self) -> dict[str, Any]:
        if not self.token:
            raise ApiError(401, "No token found")
        return await _request(
            self._http,
            "GET",
            "/auth/me",
            "Failed to get user",
            headers=self.auth_headers(),
        )

    def logout(self) -> None:
        self.token = None

    def is_authenticated(self, now: Optional[datetime] = None) -> bool:
        """True when a token is held and its ``exp`` claim is in the future.

        Only the expiry is inspected; the signature is the server's concern.
        """
        if not self.token:
            return False
        try:
            payload = jwt.decode(self.token, options={"verify_signature": False})
        except jwt.PyJWTError:
            return False
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            return False
        current = (now or datetime.now(timezone.utc)).timestamp()
        return exp > current

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


class SessionClient:
    """Public catalog and owner session operations."""

    def __init__(self, http: httpx.AsyncClient, auth: AuthClient) -> None:
        self._http = http
        self._auth = auth

    async def list_public(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        tags: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        params = _params(
            page=page, limit=limit, tags=",".join(tags) if tags else None
        )
        return await _request(
            self._http,
            "GET",
            "/sessions",
            "Failed to fetch sessions",
            params=params,
        )

    async def get_public(self, session_id: str) -> dict[str, Any]:
        data = await _request(
            self._http, "GET", f"/sessions/{session_id}", "Failed to fetch session"
        )
        return data["session"]

    async def list_mine(
        self,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        return await _request(
            self._http,
            "GET",
            "/my-sessions",
            "Failed to fetch your sessions",
            params=_params(status=status, page=page, limit=limit),
            headers=self._auth.auth_headers(),
        )

    async def get_mine(self, session_id: str) -> dict[str, Any]:
        data = await _request(
            self._http,
            "GET",
            f"/my-sessions/{session_id}",
            "Failed to fetch session",
            headers=self._auth.auth_headers(),
        )
        return data["session"]

    async def save_draft(self, session: dict[str, Any]) -> dict[str, Any]:
        data = await _request(
            self._http,
            "POST",
            "/my-sessions/save-draft",
            "Failed to save draft",
            json=session,
            headers=self._auth.auth_headers(),
        )
        return data["session"]

    async def publish(self, session: dict[str, Any]) -> dict[str, Any]:
        data = await _request(
            self._http,
            "POST",
            "/my-sessions/publish",
            "Failed to publish session",
            json=session,
            headers=self._auth.auth_headers(),
        )
        return data["session"]

    async def delete(self, session_id: str) -> None:
        await _request(
            self._http,
            "DELETE",
            f"/my-sessions/{session_id}",
            "Failed to delete session",
            headers=self._auth.auth_headers(),
        )
        logger.debug("Deleted session %s", session_id)
