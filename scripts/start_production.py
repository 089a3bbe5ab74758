#!/usr/bin/env python3
"""Start the DrugReport API under uvicorn with the configured host and port."""

import uvicorn

from drugreport.app_logging import logger, setup_logging
from drugreport.config import settings


def main():
    setup_logging()
    settings.validate()
    logger.info(f"Starting DrugReport on {settings.API_HOST}:{settings.API_PORT}")

    uvicorn.run(
        "drugreport.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
