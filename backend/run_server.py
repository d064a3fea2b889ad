"""Standalone script to run the API server.

    python backend/run_server.py

Reads PORT, MONGODB_URI, JWT_SECRET, FRONTEND_URL, ... from the environment
or a ``.env`` file.
"""

import logging
import sys
from pathlib import Path

import uvicorn

# Add backend directory to path
backend_dir = Path(__file__).resolve().parent
sys.path.insert(0, str(backend_dir))

from wellness.config import settings  # noqa: E402

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the API server with uvicorn."""
    logger.info(
        "Starting server on port %s (%s)", settings.port, settings.environment
    )
    uvicorn.run(
        "wellness.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
