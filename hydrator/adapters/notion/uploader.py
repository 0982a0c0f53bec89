"""Import external images into Notion file storage.

Notion's "indirect import" fetches the bytes itself: we create a file
upload in ``external_url`` mode and then poll it until Notion reports
``uploaded`` or ``failed``. The poll is bounded by a wall-clock deadline
and by an optional shutdown event, so callers can treat an upload as a
single awaitable with a hard latency ceiling.
"""

from __future__ import annotations

import logging
import time
from enum import StrEnum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import unquote, urlsplit

from hydrator.adapters.notion.errors import NotionError
from hydrator.adapters.notion.models import FileUploadStatus
from hydrator.core.async_utils import wait_or_shutdown

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable

    from hydrator.adapters.notion.client import NotionClient
    from hydrator.config.upload import ImageUploadConfig

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "image.png"
# Notion rejects long filenames; keep well under its limit
MAX_FILENAME_LENGTH = 100


class UploadFailureReason(StrEnum):
    REQUEST_FAILED = "request_failed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    UNKNOWN_STATUS = "unknown_status"


class ImageUploadError(Exception):
    """Terminal failure of one image upload."""

    reason: ClassVar[UploadFailureReason] = UploadFailureReason.REQUEST_FAILED

    def __init__(
        self,
        message: str,
        *,
        source_url: str | None = None,
        file_upload_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.source_url = source_url
        self.file_upload_id = file_upload_id


class UploadRequestError(ImageUploadError):
    """Creating or polling the file upload failed at the API level."""

    reason = UploadFailureReason.REQUEST_FAILED


class UploadFailedError(ImageUploadError):
    """Notion reported the import as failed."""

    reason = UploadFailureReason.FAILED


class UploadTimeoutError(ImageUploadError):
    reason = UploadFailureReason.TIMED_OUT


class UploadCancelledError(ImageUploadError):
    reason = UploadFailureReason.CANCELLED


class UnknownUploadStatusError(ImageUploadError):
    """Notion returned a status outside pending/uploaded/failed."""

    reason = UploadFailureReason.UNKNOWN_STATUS


def filename_from_url(image_url: str) -> str:
    """Derive an upload filename from the last path segment of a URL.

    Falls back to ``image.png`` when the segment is empty or has no
    extension, and truncates long names while keeping the extension.
    """
    try:
        path = urlsplit(image_url).path
    except ValueError:
        return DEFAULT_FILENAME

    filename = PurePosixPath(unquote(path)).name
    if not filename or "." not in filename:
        return DEFAULT_FILENAME

    if len(filename) > MAX_FILENAME_LENGTH:
        suffix = PurePosixPath(filename).suffix
        if len(suffix) >= MAX_FILENAME_LENGTH:
            suffix = ""
        filename = filename[: MAX_FILENAME_LENGTH - len(suffix)] + suffix

    return filename


class ImageUploader:
    """Create-then-poll driver for Notion file uploads."""

    def __init__(
        self,
        client: NotionClient,
        *,
        timeout_sec: float = 30.0,
        poll_interval_sec: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout_sec <= 0 or poll_interval_sec <= 0:
            msg = "upload timeout and poll interval must be positive"
            raise ValueError(msg)
        self._client = client
        self.timeout_sec = timeout_sec
        self.poll_interval_sec = poll_interval_sec
        self._clock = clock

    @classmethod
    def from_config(cls, client: NotionClient, config: ImageUploadConfig) -> ImageUploader:
        return cls(
            client,
            timeout_sec=config.timeout_sec,
            poll_interval_sec=config.poll_interval_sec,
        )

    async def upload(
        self,
        image_url: str,
        *,
        shutdown_event: asyncio.Event | None = None,
    ) -> str:
        """Import ``image_url`` into Notion and return the file upload ID.

        The returned ID can be attached to a page (e.g. as its cover).

        Raises:
            ImageUploadError: one subclass per terminal outcome (request
                failure, failed, timed out, cancelled, unknown status).
        """
        filename = filename_from_url(image_url)
        try:
            file_upload = await self._client.create_file_upload(image_url, filename)
        except NotionError as exc:
            msg = f"failed to create file upload: {exc}"
            raise UploadRequestError(msg, source_url=image_url) from exc

        logger.debug(
            "image_upload_created",
            extra={
                "file_upload_id": file_upload.id,
                "status": file_upload.status,
                "upload_filename": filename,
            },
        )
        return await self._poll_until_terminal(file_upload.id, image_url, shutdown_event)

    async def _poll_until_terminal(
        self,
        file_upload_id: str,
        image_url: str,
        shutdown_event: asyncio.Event | None,
    ) -> str:
        deadline = self._clock() + self.timeout_sec
        polls = 0

        while True:
            if self._clock() > deadline:
                msg = f"upload timed out after {self.timeout_sec:g}s"
                raise UploadTimeoutError(
                    msg, source_url=image_url, file_upload_id=file_upload_id
                )
            if shutdown_event is not None and shutdown_event.is_set():
                raise UploadCancelledError(
                    "upload cancelled", source_url=image_url, file_upload_id=file_upload_id
                )

            try:
                file_upload = await self._client.retrieve_file_upload(file_upload_id)
            except NotionError as exc:
                msg = f"failed to retrieve file upload: {exc}"
                raise UploadRequestError(
                    msg, source_url=image_url, file_upload_id=file_upload_id
                ) from exc
            polls += 1

            status = file_upload.status
            if status == FileUploadStatus.UPLOADED:
                logger.debug(
                    "image_upload_completed",
                    extra={"file_upload_id": file_upload_id, "polls": polls},
                )
                return file_upload.id
            if status == FileUploadStatus.FAILED:
                raise UploadFailedError(
                    "file upload failed", source_url=image_url, file_upload_id=file_upload_id
                )
            if status != FileUploadStatus.PENDING:
                msg = f"unknown status: {status}"
                raise UnknownUploadStatusError(
                    msg, source_url=image_url, file_upload_id=file_upload_id
                )

            if await self._wait_for_next_poll(shutdown_event):
                raise UploadCancelledError(
                    "upload cancelled", source_url=image_url, file_upload_id=file_upload_id
                )

    async def _wait_for_next_poll(self, shutdown_event: asyncio.Event | None) -> bool:
        return await wait_or_shutdown(shutdown_event, self.poll_interval_sec)
