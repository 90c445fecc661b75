"""
Centralized Logger Service Module.

Usage:
    from thumbnail_ingest.services.logger import get_service_logger
    from thumbnail_ingest.enums import LoggerName, LogSource

    logger = get_service_logger(LoggerName.RECORD_STORE, LogSource.DATABASE)
    logger.info("Created new image A")
"""

# Re-export commonly used enums for convenience
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .logger_service import configure_logging, get_service_logger, reset_logging

__all__ = [
    "configure_logging",
    "get_service_logger",
    "reset_logging",
    # Enums
    "LogLevel",
    "LogSource",
    "LoggerName",
    "LogEmoji",
]
