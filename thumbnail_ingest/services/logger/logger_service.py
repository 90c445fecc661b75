# thumbnail_ingest/services/logger/logger_service.py
"""
Centralized Logger Service.

Thin, type-safe layer over loguru. Every module obtains a pre-configured
logger through ``get_service_logger`` so the logger name, source and emoji
are attached consistently, and ``configure_logging`` installs the sinks once
at process start:

- console: colourised, human readable, at the configured level
- ``combined.log``: every record, JSON serialised
- ``error.log``: ERROR and above, JSON serialised

Usage:
    from thumbnail_ingest.services.logger import get_service_logger
    from thumbnail_ingest.enums import LoggerName, LogSource

    logger = get_service_logger(LoggerName.BATCH_PROCESSOR, LogSource.PIPELINE)
    logger.info("Batch 1/3 completed")
    logger.error("Failed to process image A", exception=e, error_context={"id": "A"})
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger as _logger

from ...constants import LOG_RETENTION, LOG_ROTATION
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource

CONSOLE_FORMAT = (
    "<dim>{time:YYYY-MM-DD HH:mm:ss}</dim> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[source]}</cyan>:<cyan>{extra[logger_name]}</cyan> - "
    "<level>{message}</level>"
)

DEFAULT_EXTRA = {
    "logger_name": "root",
    "source": LogSource.SYSTEM.value,
    "context": {},
}

# Keeps the log methods' callers (not this module) as the record location.
_CALLER_DEPTH = 2

_handler_ids: List[int] = []


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    log_directory: Optional[Path] = None,
    enable_console: bool = True,
    enable_file_logging: bool = True,
) -> List[int]:
    """
    Install console and file sinks, replacing any previously installed ones.

    Args:
        level: Minimum level for the console and combined file sinks
        log_directory: Directory for ``combined.log`` and ``error.log``
        enable_console: Whether to emit to stderr
        enable_file_logging: Whether to write the JSON log files

    Returns:
        Loguru handler ids of the installed sinks
    """
    reset_logging()
    _logger.configure(extra=dict(DEFAULT_EXTRA))

    if enable_console:
        _handler_ids.append(
            _logger.add(
                sys.stderr,
                level=level.value,
                format=CONSOLE_FORMAT,
                colorize=None,
                backtrace=False,
                diagnose=False,
            )
        )

    if enable_file_logging and log_directory is not None:
        log_directory = Path(log_directory)
        log_directory.mkdir(parents=True, exist_ok=True)
        _handler_ids.append(
            _logger.add(
                log_directory / "combined.log",
                level=level.value,
                serialize=True,
                rotation=LOG_ROTATION,
                retention=LOG_RETENTION,
                encoding="utf-8",
            )
        )
        _handler_ids.append(
            _logger.add(
                log_directory / "error.log",
                level=LogLevel.ERROR.value,
                serialize=True,
                rotation=LOG_ROTATION,
                retention=LOG_RETENTION,
                encoding="utf-8",
            )
        )

    return list(_handler_ids)


def reset_logging() -> None:
    """Remove every sink installed by ``configure_logging`` (and loguru's default)."""
    _logger.remove()
    _handler_ids.clear()


def _emit(
    level: LogLevel,
    message: str,
    logger_name: LoggerName,
    source: LogSource,
    emoji: Optional[LogEmoji],
    context: Optional[Dict[str, Any]] = None,
    exception: Optional[BaseException] = None,
    include_traceback: bool = False,
) -> None:
    context = dict(context or {})
    if exception is not None:
        context.setdefault("exception_type", type(exception).__name__)
        context.setdefault("exception", str(exception))
        message = f"{message}: {exception}"

    text = f"{emoji.value} {message}" if emoji is not None else message
    bound = _logger.bind(
        logger_name=logger_name.value, source=source.value, context=context
    )
    bound.opt(
        depth=_CALLER_DEPTH,
        exception=exception if include_traceback else None,
    ).log(level.value, text)


def get_service_logger(
    logger_name: LoggerName,
    source: LogSource = LogSource.SYSTEM,
    default_emoji: Optional[LogEmoji] = None,
):
    """
    Factory function to create a pre-configured logger for a specific service.

    Emoji priority system (highest to lowest):
    1. Direct: Emoji passed directly to log method call
    2. Instance-set: Default emoji set when creating the service logger
    3. Fallback: Default emoji based on log level (ERROR, WARNING, INFO, DEBUG)

    Args:
        logger_name: The logger name enum to use for all calls
        source: The log source enum to use for all calls (defaults to SYSTEM)
        default_emoji: Instance-level default emoji that overrides level-based fallbacks

    Returns:
        ServiceLogger instance with error, warning, info, debug methods
    """

    def _resolve_emoji(
        method_emoji: Optional[LogEmoji], fallback_emoji: Optional[LogEmoji]
    ) -> Optional[LogEmoji]:
        if method_emoji is not None:
            return method_emoji
        if default_emoji is not None:
            return default_emoji
        return fallback_emoji

    class ServiceLogger:
        name = logger_name
        log_source = source

        @staticmethod
        def error(
            message: str,
            exception: Optional[BaseException] = None,
            error_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            include_traceback: bool = False,
        ):
            """Log an error, optionally with the exception and its traceback."""
            _emit(
                LogLevel.ERROR,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.ERROR),
                context=error_context,
                exception=exception,
                include_traceback=include_traceback,
            )

        @staticmethod
        def warning(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
            exception: Optional[BaseException] = None,
        ):
            """Log a warning with emoji priority system."""
            _emit(
                LogLevel.WARNING,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, LogEmoji.WARNING),
                context=extra_context,
                exception=exception,
            )

        @staticmethod
        def info(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
        ):
            """Log an info message with emoji priority system."""
            _emit(
                LogLevel.INFO,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, None),
                context=extra_context,
            )

        @staticmethod
        def debug(
            message: str,
            extra_context: Optional[Dict[str, Any]] = None,
            emoji: Optional[LogEmoji] = None,
        ):
            """Log a debug message with emoji priority system."""
            _emit(
                LogLevel.DEBUG,
                message,
                logger_name,
                source,
                _resolve_emoji(emoji, None),
                context=extra_context,
            )

    return ServiceLogger()
