"""Bookmark hydration pipeline.

Each unprocessed bookmark is scraped, enriched with author and image
metadata, optionally gets its image imported into Notion, and is written
back as processed. Bookmarks are handled one at a time in worklist order;
a failure on one bookmark never stops the batch.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from hydrator.adapters.notion.uploader import UploadFailureReason
from hydrator.adapters.scraper.exceptions import ScraperUnavailableError
from hydrator.core.async_utils import (
    ShutdownInterruptedError,
    raise_if_cancelled,
    run_until_shutdown,
)
from hydrator.core.logging_utils import generate_correlation_id, truncate_log_content
from hydrator.pipeline.metadata import apply_image_reference, merge_author, select_image_candidate
from hydrator.pipeline.models import (
    ImageOutcome,
    ProcessingOptions,
    RecordOutcome,
    RecordState,
    RunResult,
)

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable

    from hydrator.bookmarks.models import Bookmark
    from hydrator.pipeline.protocols import BookmarkStore, ContentScraper, ImageImporter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BookmarkProcessor:
    """Drive the per-bookmark workflow over a worklist."""

    def __init__(
        self,
        store: BookmarkStore,
        scraper: ContentScraper,
        uploader: ImageImporter | None = None,
        options: ProcessingOptions | None = None,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._scraper = scraper
        self._uploader = uploader
        self._options = options or ProcessingOptions()
        self._now = now

    async def run(
        self,
        limit: int = 0,
        shutdown_event: asyncio.Event | None = None,
    ) -> RunResult:
        """Check the scraper, fetch unprocessed bookmarks and process them.

        Raises:
            ScraperUnavailableError: the scraper health check failed; no
                bookmark has been touched.
            NotionError: the worklist could not be fetched.
        """
        correlation_id = generate_correlation_id()
        await self.check_scraper(correlation_id)

        bookmarks = await self._store.get_unprocessed(limit)
        logger.info(
            "worklist_fetched",
            extra={"correlation_id": correlation_id, "count": len(bookmarks), "limit": limit},
        )
        return await self.process_all(
            bookmarks, shutdown_event=shutdown_event, correlation_id=correlation_id
        )

    async def check_scraper(self, correlation_id: str | None = None) -> None:
        base_url = getattr(self._scraper, "base_url", None)
        try:
            health = await self._scraper.health()
        except Exception as exc:
            raise_if_cancelled(exc)
            logger.error(
                "scraper_health_check_failed",
                extra={"correlation_id": correlation_id, "base_url": base_url, "error": str(exc)},
            )
            msg = f"scraper service is not available: {exc}"
            raise ScraperUnavailableError(msg, base_url=base_url) from exc
        logger.info(
            "scraper_healthy",
            extra={"correlation_id": correlation_id, "base_url": base_url, "status": health.status},
        )

    async def process_all(
        self,
        bookmarks: list[Bookmark],
        *,
        shutdown_event: asyncio.Event | None = None,
        correlation_id: str | None = None,
    ) -> RunResult:
        """Process ``bookmarks`` in order and report one outcome per bookmark.

        Once ``shutdown_event`` is set no further bookmark is started and an
        in-flight scrape is abandoned; those bookmarks are reported as
        skipped. Notion writes already under way are allowed to finish.
        """
        correlation_id = correlation_id or generate_correlation_id()
        started = time.perf_counter()
        result = RunResult(total=len(bookmarks), correlation_id=correlation_id)

        logger.info(
            "pipeline_run_start",
            extra={"correlation_id": correlation_id, "total": result.total},
        )

        shutdown_logged = False
        for position, bookmark in enumerate(bookmarks, start=1):
            if shutdown_event is not None and shutdown_event.is_set():
                if not shutdown_logged:
                    shutdown_logged = True
                    logger.warning(
                        "pipeline_shutdown_requested",
                        extra={
                            "correlation_id": correlation_id,
                            "remaining": result.total - position + 1,
                        },
                    )
                result.record(
                    RecordOutcome(
                        bookmark_id=bookmark.id, url=bookmark.url, state=RecordState.SKIPPED
                    )
                )
                continue

            log_ctx = {
                "correlation_id": correlation_id,
                "bookmark_id": bookmark.id,
                "url": bookmark.url,
            }
            logger.info(
                "bookmark_processing_start",
                extra={**log_ctx, "position": position, "total": result.total},
            )
            result.record(await self._process_one(bookmark, shutdown_event, log_ctx))

        result.duration_seconds = time.perf_counter() - started
        logger.info(
            "pipeline_run_complete",
            extra={
                "correlation_id": correlation_id,
                "total": result.total,
                "succeeded": result.succeeded,
                "failed": result.failed,
                "skipped": result.skipped,
                "duration": result.duration_seconds,
            },
        )
        return result

    async def _process_one(
        self,
        bookmark: Bookmark,
        shutdown_event: asyncio.Event | None,
        log_ctx: dict[str, Any],
    ) -> RecordOutcome:
        try:
            scraped = await run_until_shutdown(self._scraper.scrape(bookmark.url), shutdown_event)
        except ShutdownInterruptedError:
            # Left untouched in Notion so the next run picks it up again
            logger.warning("bookmark_scrape_interrupted", extra=log_ctx)
            return RecordOutcome(
                bookmark_id=bookmark.id, url=bookmark.url, state=RecordState.SKIPPED
            )
        except Exception as exc:
            raise_if_cancelled(exc)
            message = f"Failed to scrape URL: {exc}"
            logger.warning("bookmark_scrape_failed", extra={**log_ctx, "error": str(exc)})
            await self._annotate_error(bookmark, message, log_ctx)
            return RecordOutcome(
                bookmark_id=bookmark.id,
                url=bookmark.url,
                state=RecordState.SCRAPE_FAILED,
                error=message,
            )

        if self._options.debug:
            logger.info(
                "scrape_payload",
                extra={
                    **log_ctx,
                    "payload": truncate_log_content(
                        scraped.raw_json, self._options.log_truncate_length
                    ),
                },
            )

        content = scraped.content
        author_set = merge_author(bookmark, content)
        candidate = select_image_candidate(content)
        image_outcome, file_upload_id = await self._resolve_image(
            bookmark, candidate, shutdown_event, log_ctx
        )

        bookmark.mark_processed(self._now())
        try:
            await self._store.update(bookmark.id, bookmark)
        except Exception as exc:
            raise_if_cancelled(exc)
            logger.error("bookmark_persist_failed", extra={**log_ctx, "error": str(exc)})
            return RecordOutcome(
                bookmark_id=bookmark.id,
                url=bookmark.url,
                state=RecordState.PERSIST_FAILED,
                image=image_outcome,
                error=str(exc),
            )

        if file_upload_id:
            await self._set_cover(bookmark, file_upload_id, log_ctx)

        logger.info(
            "bookmark_processed",
            extra={
                **log_ctx,
                "author_set": author_set,
                "image": image_outcome,
                "image_url": bookmark.image_url or None,
            },
        )
        return RecordOutcome(
            bookmark_id=bookmark.id, url=bookmark.url, state=RecordState.DONE, image=image_outcome
        )

    async def _resolve_image(
        self,
        bookmark: Bookmark,
        candidate: str | None,
        shutdown_event: asyncio.Event | None,
        log_ctx: dict[str, Any],
    ) -> tuple[ImageOutcome | None, str | None]:
        """Apply the upload and fallback policy to the image candidate.

        Returns the image outcome and, when the import succeeded, the file
        upload ID to use as the page cover.
        """
        if not candidate:
            return None, None

        if not self._options.upload_enabled or self._uploader is None:
            apply_image_reference(bookmark, candidate)
            return ImageOutcome.SKIPPED, None

        try:
            file_upload_id = await self._uploader.upload(candidate, shutdown_event=shutdown_event)
        except Exception as exc:
            raise_if_cancelled(exc)
            reason = getattr(exc, "reason", UploadFailureReason.REQUEST_FAILED)
            upload_ctx = {**log_ctx, "image_url": candidate, "reason": reason, "error": str(exc)}
            if self._options.fallback_to_external_url:
                logger.warning("image_upload_failed_using_external_url", extra=upload_ctx)
                apply_image_reference(bookmark, candidate)
                return ImageOutcome.FALLBACK, None
            logger.warning("image_upload_failed_image_dropped", extra=upload_ctx)
            return ImageOutcome.DROPPED, None

        logger.info(
            "image_uploaded",
            extra={**log_ctx, "image_url": candidate, "file_upload_id": file_upload_id},
        )
        apply_image_reference(bookmark, candidate)
        return ImageOutcome.ATTACHED, file_upload_id

    async def _annotate_error(self, bookmark: Bookmark, message: str, log_ctx: dict[str, Any]) -> None:
        bookmark.mark_failed(message)
        try:
            await self._store.set_error(bookmark.id, message)
        except Exception as exc:
            raise_if_cancelled(exc)
            logger.error(
                "bookmark_error_annotation_failed", extra={**log_ctx, "error": str(exc)}
            )

    async def _set_cover(self, bookmark: Bookmark, file_upload_id: str, log_ctx: dict[str, Any]) -> None:
        try:
            await self._store.set_cover(bookmark.id, file_upload_id)
        except Exception as exc:
            raise_if_cancelled(exc)
            logger.warning(
                "bookmark_cover_failed",
                extra={**log_ctx, "file_upload_id": file_upload_id, "error": str(exc)},
            )
            return
        logger.debug("bookmark_cover_set", extra={**log_ctx, "file_upload_id": file_upload_id})
