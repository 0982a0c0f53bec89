"""Ports the pipeline depends on.

The concrete implementations are ``BookmarkService``, ``ScraperClient``
and ``ImageUploader``; tests substitute ``AsyncMock`` objects.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    import asyncio

    from hydrator.adapters.scraper.models import HealthResponse, ScrapeResult
    from hydrator.bookmarks.models import Bookmark


class BookmarkStore(Protocol):
    async def get_unprocessed(self, limit: int = 0) -> list[Bookmark]:
        """Return unprocessed bookmarks (``limit=0`` for all)."""
        ...

    async def update(self, bookmark_id: str, bookmark: Bookmark) -> Bookmark: ...

    async def set_error(self, bookmark_id: str, message: str) -> Bookmark:
        """Store ``message`` with ``processed=false``."""
        ...

    async def set_cover(self, bookmark_id: str, file_upload_id: str) -> None: ...


class ContentScraper(Protocol):
    async def scrape(self, url: str) -> ScrapeResult: ...

    async def health(self) -> HealthResponse:
        """Raise when the scraper is unreachable or unhealthy."""
        ...


class ImageImporter(Protocol):
    async def upload(
        self, image_url: str, *, shutdown_event: asyncio.Event | None = None
    ) -> str:
        """Import an image and return its file upload ID.

        Raises ``ImageUploadError`` on any terminal failure.
        """
        ...
