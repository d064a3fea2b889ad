"""User and authentication models."""

from typing import Any, Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    """Body of ``register`` and ``login``; checked by the validators."""

    email: Optional[str] = None
    password: Optional[str] = None


class PublicUser(BaseModel):
    """User fields that are safe to hand to clients."""

    id: str
    email: str

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PublicUser":
        return cls(id=str(doc["_id"]), email=doc["email"])


class AuthResponse(BaseModel):
    message: str
    token: str
    user: PublicUser


class MeResponse(BaseModel):
    user: PublicUser
