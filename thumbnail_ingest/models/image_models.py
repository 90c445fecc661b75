# thumbnail_ingest/models/image_models.py
"""
Pydantic models for rows, stored records and pass results.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class InputRow(BaseModel):
    """One validated input record, consumed once per pass and never persisted."""

    id: str = Field(..., min_length=1, description="Unique record identifier")
    index: int = Field(..., ge=0, description="Display order")
    url: str = Field(..., min_length=1, description="Absolute URL of the source image")

    model_config = ConfigDict(frozen=True)


class ImageRecord(BaseModel):
    """Stored thumbnail keyed by record id."""

    id: str
    index: int
    thumbnail: bytes
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FailedRecord(BaseModel):
    """Failure ledger entry: latest error plus how many attempts have failed."""

    id: str
    index: int
    url: str
    error: str
    attempts: int = Field(default=1, ge=1)
    last_attempt: datetime

    model_config = ConfigDict(from_attributes=True)

    def to_input_row(self) -> InputRow:
        """Reconstitute the row so it can be fed through another pass."""
        return InputRow(id=self.id, index=self.index, url=self.url)


class ProcessingResult(BaseModel):
    """Outcome counts for a single pass (never cumulative across passes)."""

    total: int = Field(default=0, ge=0)
    processed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    cancelled: bool = False

    @model_validator(mode="after")
    def check_total(self) -> "ProcessingResult":
        if self.total != self.processed + self.failed:
            raise ValueError("total must equal processed + failed")
        return self

    @classmethod
    def empty(cls) -> "ProcessingResult":
        return cls(total=0, processed=0, failed=0)


class ChunkProgress(BaseModel):
    """Progress notification emitted after each chunk; counts are cumulative."""

    chunk_index: int = Field(..., ge=1)
    total_chunks: int = Field(..., ge=1)
    processed: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    total_rows: int = Field(..., ge=0)

    @property
    def completed_rows(self) -> int:
        return self.processed + self.failed
