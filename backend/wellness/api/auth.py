"""Registration, login and current-user endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from wellness.dependencies import Auth, CurrentUser
from wellness.errors import raise_for_result
from wellness.models.users import AuthResponse, Credentials, MeResponse
from wellness.validation import validate_login, validate_registration

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(body: Credentials, auth: Auth) -> AuthResponse:
    """Create an account and return a token for it."""
    email = raise_for_result(validate_registration(body.email, body.password))
    token, user = await auth.register(email, body.password or "")
    return AuthResponse(message="User registered", token=token, user=user)


@router.post("/login", response_model=AuthResponse)
async def login(body: Credentials, auth: Auth) -> AuthResponse:
    """Exchange email and password for a token.

    Unknown emails and wrong passwords produce the same 401.
    """
    email = raise_for_result(validate_login(body.email, body.password))
    token, user = await auth.login(email, body.password or "")
    return AuthResponse(message="Login successful", token=token, user=user)


@router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser) -> MeResponse:
    return MeResponse(user=user)
