"""API schemas."""
from readgate.schemas.material_progress import (
    Envelope,
    PageState,
    ReadingSession,
    ReadingProgress,
    DownloadStatus,
    PageCountResponse,
    InitializeRequest,
    TimeUpdateRequest,
)

__all__ = [
    "Envelope",
    "PageState",
    "ReadingSession",
    "ReadingProgress",
    "DownloadStatus",
    "PageCountResponse",
    "InitializeRequest",
    "TimeUpdateRequest",
]
