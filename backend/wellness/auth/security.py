"""Password hashing (bcrypt) and bearer tokens (JWT)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from wellness.config import Settings

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class InvalidTokenError(Exception):
    """The token is malformed, tampered with, expired or lacks a user id."""


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 12) -> str:
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds))
    return hashed.decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(
            _password_bytes(password), password_hash.encode("ascii")
        )
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_access_token(
    user_id: str, settings: Settings, now: datetime | None = None
) -> str:
    """Sign a token carrying ``userId`` that expires after ``jwt_expires_days``."""
    issued = now or datetime.now(timezone.utc)
    payload = {
        "userId": user_id,
        "iat": issued,
        "exp": issued + timedelta(days=settings.jwt_expires_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> str:
    """Return the user id carried by ``token``.

    Raises:
        InvalidTokenError: if the signature, expiry or payload is bad.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "userId"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("Token has expired") from exc
    except jwt.PyJWTError as exc:
        raise InvalidTokenError("Token is not valid") from exc

    user_id = payload["userId"]
    if not isinstance(user_id, str):
        raise InvalidTokenError("Token is not valid")
    return user_id
