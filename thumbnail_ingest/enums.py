# thumbnail_ingest/enums.py
"""
Application Enums - Centralized enum definitions.

Kept in one module so constants, models and the logger service can import
them without creating circular dependencies.
"""

from enum import Enum


# =============================================================================
# LOGGING SYSTEM
# =============================================================================


class LogLevel(str, Enum):
    """Log level constants for centralized logging system."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogSource(str, Enum):
    """Log source constants for identifying log origins."""

    CLI = "cli"
    SYSTEM = "system"
    DATABASE = "database"
    PIPELINE = "pipeline"
    SOURCE = "source"


class LoggerName(str, Enum):
    """Logger name constants for categorizing log entries."""

    # Entry points
    CLI = "cli"
    PIPELINE_CONTEXT = "pipeline_context"

    # Pipeline loggers
    ROW_SOURCE = "row_source"
    THUMBNAIL_PIPELINE = "thumbnail_pipeline"
    BATCH_PROCESSOR = "batch_processor"
    RETRY_SERVICE = "retry_service"

    # Storage loggers
    RECORD_STORE = "record_store"
    DATABASE = "database"


class LogEmoji(str, Enum):
    """Type-safe emoji constants for log messages."""

    # Status emojis
    SUCCESS = "✅"
    COMPLETED = "✅"
    FAILED = "❌"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    CANCELED = "🚫"

    # Work emojis
    PROCESSING = "🔄"
    RETRY = "🔁"
    CHART = "📊"

    # Image emojis
    THUMBNAIL = "🖼️"
    FILE = "📄"

    # Lifecycle emojis
    STARTUP = "🚀"

    # Database emojis
    DATABASE = "🗄️"
    CONNECTION = "🟢"
    DISCONNECTED = "🔴"

    # Action emojis
    CREATE = "➕"
    UPDATE = "✏️"
    DELETE = "🗑️"


# =============================================================================
# THUMBNAIL SYSTEM
# =============================================================================


class ThumbnailFormat(str, Enum):
    """Output encodings supported for stored thumbnails."""

    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WEBP"


class RowOutcome(str, Enum):
    """Final fate of a single row within a pass."""

    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"
