"""Health check endpoint for infrastructure monitoring."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from wellness.db.store import Database
from wellness.dependencies import get_database

logger = logging.getLogger(__name__)
router = APIRouter()


async def _check_mongodb(database: Database) -> dict[str, Any]:
    """Ping MongoDB and return status."""
    try:
        await database.ping()
        return {"status": "healthy"}
    except Exception as exc:
        logger.warning("MongoDB health check failed: %s", exc)
        return {"status": "unhealthy", "error": str(exc)}


@router.get("")
async def health_check(
    database: Annotated[Database, Depends(get_database)],
) -> dict[str, Any]:
    """Return aggregate health of the backend's services."""
    services = {
        "mongodb": await _check_mongodb(database),
    }

    overall = (
        "healthy"
        if all(s["status"] == "healthy" for s in services.values())
        else "degraded"
    )

    return {
        "status": overall,
        "services": services,
    }
