"""Bookmark hydration pipeline."""

from hydrator.pipeline.models import (
    ImageOutcome,
    ProcessingOptions,
    RecordOutcome,
    RecordState,
    RunResult,
)
from hydrator.pipeline.processor import BookmarkProcessor

__all__ = [
    "BookmarkProcessor",
    "ImageOutcome",
    "ProcessingOptions",
    "RecordOutcome",
    "RecordState",
    "RunResult",
]
