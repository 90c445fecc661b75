# thumbnail_ingest/config.py
from pathlib import Path
from typing import Any, Union

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CSV_PATH,
    DEFAULT_DATABASE_URL,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    DEFAULT_LOG_DIRECTORY,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_THUMBNAIL_QUALITY,
    DEFAULT_THUMBNAIL_SIZE,
)
from .enums import LogLevel, ThumbnailFormat


class Settings(BaseSettings):
    """
    Immutable run configuration.

    Built once at startup from defaults, the environment (or ``.env``) and
    explicit keyword overrides, in increasing order of precedence.
    """

    # Store
    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
        description="PostgreSQL connection string for the image store",
    )
    db_pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        validation_alias=AliasChoices("DB_POOL_SIZE", "db_pool_size"),
        description="Maximum connections held by the store pool",
    )
    db_pool_timeout: float = Field(
        default=30.0,
        gt=0,
        le=300,
        validation_alias=AliasChoices("DB_POOL_TIMEOUT", "db_pool_timeout"),
        description="Seconds to wait for a pooled connection",
    )

    # Batch processing
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        ge=1,
        le=10_000,
        validation_alias=AliasChoices("DEFAULT_BATCH_SIZE", "batch_size"),
        description="Rows per chunk",
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        le=16,
        validation_alias=AliasChoices("MAX_WORKERS", "max_workers"),
        description="Concurrent rows inside a chunk (1 = sequential)",
    )
    max_retry_attempts: int = Field(
        default=DEFAULT_MAX_RETRY_ATTEMPTS,
        ge=1,
        validation_alias=AliasChoices("MAX_RETRY_ATTEMPTS", "max_retry_attempts"),
        description="Failure ledger entries at or above this count are not retried",
    )

    # Input
    csv_path: Path = Field(
        default=Path(DEFAULT_CSV_PATH),
        validation_alias=AliasChoices("CSV_PATH", "csv_path"),
        description="Input CSV with id, url and index columns",
    )
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        ge=1,
        validation_alias=AliasChoices("MAX_FILE_SIZE", "max_file_size"),
        description="Byte ceiling for the CSV file and each downloaded image",
    )

    # Thumbnails
    thumbnail_size: int = Field(
        default=DEFAULT_THUMBNAIL_SIZE,
        ge=1,
        le=4096,
        validation_alias=AliasChoices("THUMBNAIL_SIZE", "thumbnail_size"),
        description="Edge length of the square thumbnail in pixels",
    )
    thumbnail_format: ThumbnailFormat = Field(
        default=ThumbnailFormat.JPEG,
        validation_alias=AliasChoices("THUMBNAIL_FORMAT", "thumbnail_format"),
    )
    thumbnail_quality: int = Field(
        default=DEFAULT_THUMBNAIL_QUALITY,
        ge=1,
        le=95,
        validation_alias=AliasChoices("THUMBNAIL_QUALITY", "thumbnail_quality"),
    )
    fetch_timeout_seconds: float = Field(
        default=DEFAULT_FETCH_TIMEOUT_SECONDS,
        gt=0,
        le=300,
        validation_alias=AliasChoices("FETCH_TIMEOUT_SECONDS", "fetch_timeout_seconds"),
        description="HTTP timeout for a single image download",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_directory: Path = Field(
        default=Path(DEFAULT_LOG_DIRECTORY),
        validation_alias=AliasChoices("LOG_DIRECTORY", "log_directory"),
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: Union[str, LogLevel]) -> LogLevel:
        """Validate log level is one of the allowed values"""
        if isinstance(v, LogLevel):
            return v
        allowed_levels = LogLevel.__members__.keys()
        v_upper = str(v).upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed_levels)}"
            )
        return LogLevel[v_upper]

    @field_validator("thumbnail_format", mode="before")
    @classmethod
    def validate_thumbnail_format(cls, v: Union[str, ThumbnailFormat]) -> ThumbnailFormat:
        """Accept case-insensitive format names; JPG is an alias of JPEG."""
        if isinstance(v, ThumbnailFormat):
            return v
        v_upper = str(v).strip().upper()
        if v_upper == "JPG":
            v_upper = "JPEG"
        allowed = [fmt.value for fmt in ThumbnailFormat]
        if v_upper not in allowed:
            raise ValueError(
                f"Invalid thumbnail format '{v}'. Must be one of: {', '.join(allowed)}"
            )
        return ThumbnailFormat(v_upper)

    @property
    def error_log_path(self) -> Path:
        return self.log_directory / "error.log"

    @property
    def combined_log_path(self) -> Path:
        return self.log_directory / "combined.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )


def load_settings(**overrides: Any) -> Settings:
    """
    Build the run configuration.

    Keyword overrides that are ``None`` are ignored so CLI flags that were
    not given fall through to the environment and defaults.
    """
    explicit = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**explicit)
