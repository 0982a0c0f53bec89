from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from hydrator.config.settings import AppConfig


class RecordState(StrEnum):
    """Final state of one bookmark in a run."""

    DONE = "done"
    SCRAPE_FAILED = "scrape_failed"
    PERSIST_FAILED = "persist_failed"
    SKIPPED = "skipped"


class ImageOutcome(StrEnum):
    """What happened to the image candidate of a scraped bookmark."""

    ATTACHED = "attached"
    FALLBACK = "fallback"
    DROPPED = "dropped"
    SKIPPED = "skipped"


class RecordOutcome(BaseModel):
    bookmark_id: str
    url: str = ""
    state: RecordState
    image: ImageOutcome | None = None
    error: str | None = None


class RunResult(BaseModel):
    """Aggregate outcome of one batch.

    ``total == succeeded + failed + skipped`` always holds.
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    duration_seconds: float = 0.0
    correlation_id: str | None = None
    outcomes: list[RecordOutcome] = Field(default_factory=list)

    def record(self, outcome: RecordOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.state == RecordState.DONE:
            self.succeeded += 1
        elif outcome.state == RecordState.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1


class ProcessingOptions(BaseModel):
    """Policy switches for one run, built once from configuration."""

    model_config = ConfigDict(frozen=True)

    upload_enabled: bool = True
    fallback_to_external_url: bool = True
    debug: bool = False
    log_truncate_length: int = 1000

    @classmethod
    def from_config(cls, config: AppConfig) -> ProcessingOptions:
        return cls(
            upload_enabled=config.upload.enabled,
            fallback_to_external_url=config.upload.fallback_to_external_url,
            debug=config.runtime.debug,
            log_truncate_length=config.runtime.log_truncate_length,
        )
