"""Run the API with uvicorn: ``python -m todolist_api``."""

from __future__ import annotations

import logging

import uvicorn

from todolist_api.config.settings import get_settings
from todolist_api.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("server event=start host=%s port=%d", settings.host, settings.port)
    uvicorn.run(
        "todolist_api.api.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
