from .image_models import (
    ChunkProgress,
    FailedRecord,
    ImageRecord,
    InputRow,
    ProcessingResult,
)

__all__ = [
    "ChunkProgress",
    "FailedRecord",
    "ImageRecord",
    "InputRow",
    "ProcessingResult",
]
