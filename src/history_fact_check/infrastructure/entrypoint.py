"""
Application Entrypoint
======================

CLI entrypoint for running the API server.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
import uvloop


def main() -> None:
    """Run the API server using uvicorn."""
    uvloop.install()

    from history_fact_check.infrastructure.config import get_settings
    from history_fact_check.infrastructure.logging import (
        HealthLiveAccessFilter,
        configure_logging,
    )

    settings = get_settings()
    configure_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting {settings.api.title} v{settings.api.version}")
    logger.info(f"Environment: {settings.environment}")

    access_logger = logging.getLogger("uvicorn.access")
    access_logger.addFilter(HealthLiveAccessFilter(min_interval_seconds=120.0))

    uvicorn.run(
        "history_fact_check.api.app:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        reload=settings.api.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main() or 0)
