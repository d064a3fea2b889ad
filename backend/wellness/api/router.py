"""Central API router that aggregates all route modules."""

from fastapi import APIRouter

from wellness.api.auth import router as auth_router
from wellness.api.health import router as health_router
from wellness.api.my_sessions import router as my_sessions_router
from wellness.api.sessions import router as sessions_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
api_router.include_router(
    my_sessions_router, prefix="/my-sessions", tags=["my-sessions"]
)
