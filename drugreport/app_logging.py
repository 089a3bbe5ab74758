"""Logging configuration for the DrugReport service."""
import logging
import sys
import os
from datetime import datetime
from drugreport.config import settings

def setup_logging():
    """Configure logging for the application."""

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Guard against duplicate handlers when the app module is re-imported
    if any(getattr(h, "_drugreport", False) for h in root_logger.handlers):
        return root_logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._drugreport = True
    root_logger.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        try:
            os.makedirs("logs", exist_ok=True)
            file_handler = logging.FileHandler(f"logs/drugreport_{datetime.now().strftime('%Y%m%d')}.log")
            file_handler.setFormatter(formatter)
            file_handler._drugreport = True
            root_logger.addHandler(file_handler)
        except OSError as e:
            # If file logging fails, just log to console
            root_logger.warning(f"Could not set up file logging: {e}")

    return root_logger

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(name)

logger = get_logger("drugreport")
