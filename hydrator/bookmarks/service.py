"""CRUD and query operations on the Notion bookmarks database."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from hydrator.adapters.notion.models import SortDirection
from hydrator.adapters.notion.properties import relation_property
from hydrator.bookmarks.mapper import bookmark_to_properties, page_to_bookmark
from hydrator.bookmarks.models import (
    Bookmark,
    BookmarkFilter,
    BookmarkProperty,
    QueryOptions,
    SortBy,
)

if TYPE_CHECKING:
    from hydrator.adapters.notion.client import NotionClient
    from hydrator.adapters.notion.models import NotionPage

logger = logging.getLogger(__name__)

_TIMESTAMP_SORTS = frozenset({SortBy.CREATED_AT, SortBy.UPDATED_AT})


def _require_id(bookmark_id: str) -> None:
    if not bookmark_id:
        msg = "bookmark ID is required"
        raise ValueError(msg)


def build_filter(bookmark_filter: BookmarkFilter | None) -> dict[str, Any] | None:
    """Translate a ``BookmarkFilter`` into a Notion filter object.

    Returns ``None`` when nothing is filtered; a single condition is sent
    as-is and several are wrapped in an ``and`` compound filter.
    """
    if bookmark_filter is None:
        return None

    conditions: list[dict[str, Any]] = []

    def contains(prop: BookmarkProperty, kind: str, value: str | None) -> None:
        if value:
            conditions.append({"property": prop, kind: {"contains": value}})

    contains(BookmarkProperty.PAGE, "title", bookmark_filter.title_contains)
    contains(BookmarkProperty.URL, "url", bookmark_filter.url_contains)
    contains(BookmarkProperty.SUMMARY, "rich_text", bookmark_filter.summary_contains)
    contains(BookmarkProperty.AUTHOR, "rich_text", bookmark_filter.author_contains)
    contains(BookmarkProperty.ERROR, "rich_text", bookmark_filter.error_contains)

    tag_ids = list(bookmark_filter.tag_ids)
    if bookmark_filter.has_tag and bookmark_filter.has_tag not in tag_ids:
        tag_ids.insert(0, bookmark_filter.has_tag)
    for tag_id in tag_ids:
        contains(BookmarkProperty.TAG, "relation", tag_id)

    if bookmark_filter.processed is not None:
        conditions.append(
            {
                "property": BookmarkProperty.PROCESSED,
                "checkbox": {"equals": bookmark_filter.processed},
            }
        )

    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return {"and": conditions}


def build_sorts(sort_by: SortBy | None, direction: SortDirection) -> list[dict[str, Any]] | None:
    if sort_by is None:
        return None
    if sort_by in _TIMESTAMP_SORTS:
        return [{"timestamp": sort_by, "direction": direction}]
    return [{"property": sort_by, "direction": direction}]


class BookmarkService:
    """Bookmark operations over one Notion database.

    All remote failures surface as ``NotionError``; nothing is retried here.
    """

    def __init__(self, client: NotionClient, database_id: str) -> None:
        if not database_id:
            msg = "bookmarks database ID is required"
            raise ValueError(msg)
        self._client = client
        self.database_id = database_id

    def _to_bookmarks(self, pages: list[NotionPage]) -> list[Bookmark]:
        return [page_to_bookmark(page) for page in pages]

    async def create(self, bookmark: Bookmark) -> Bookmark:
        if not bookmark.title:
            msg = "bookmark title is required"
            raise ValueError(msg)
        page = await self._client.create_page(self.database_id, bookmark_to_properties(bookmark))
        return page_to_bookmark(page)

    async def get(self, bookmark_id: str) -> Bookmark:
        _require_id(bookmark_id)
        page = await self._client.get_page(bookmark_id)
        return page_to_bookmark(page)

    async def update(self, bookmark_id: str, bookmark: Bookmark) -> Bookmark:
        """Write the bookmark's property set, including ``processed`` and ``error``."""
        _require_id(bookmark_id)
        return await self._write(bookmark_id, bookmark_to_properties(bookmark))

    async def _write(self, bookmark_id: str, properties: dict[str, Any]) -> Bookmark:
        page = await self._client.update_page(bookmark_id, properties=properties)
        return page_to_bookmark(page)

    async def delete(self, bookmark_id: str) -> None:
        """Archive the bookmark page (Notion has no hard delete)."""
        _require_id(bookmark_id)
        await self._client.update_page(bookmark_id, archived=True)
        logger.info("bookmark_archived", extra={"bookmark_id": bookmark_id})

    async def list(self, bookmark_filter: BookmarkFilter | None = None) -> list[Bookmark]:
        """List bookmarks, newest first."""
        limit = bookmark_filter.limit if bookmark_filter else 0
        pages = await self._client.query_database_all(
            self.database_id,
            filter=build_filter(bookmark_filter),
            sorts=build_sorts(SortBy.DATE_ADDED, SortDirection.DESCENDING),
            limit=limit,
        )
        return self._to_bookmarks(pages)

    async def query(self, options: QueryOptions | None = None) -> list[Bookmark]:
        options = options or QueryOptions()
        limit = options.limit or (options.filter.limit if options.filter else 0)
        pages = await self._client.query_database_all(
            self.database_id,
            filter=build_filter(options.filter),
            sorts=build_sorts(options.sort_by, options.sort_direction),
            limit=limit,
        )
        return self._to_bookmarks(pages)

    async def get_unprocessed(self, limit: int = 0) -> list[Bookmark]:
        """Return bookmarks whose ``processed`` flag is false (``limit=0`` for all)."""
        if limit < 0:
            msg = "limit must not be negative"
            raise ValueError(msg)
        pages = await self._client.query_database_all(
            self.database_id,
            filter=build_filter(BookmarkFilter(processed=False)),
            limit=limit,
        )
        bookmarks = self._to_bookmarks(pages)
        logger.debug("unprocessed_bookmarks_fetched", extra={"count": len(bookmarks)})
        return bookmarks

    async def set_error(self, bookmark_id: str, message: str) -> Bookmark:
        """Record a processing failure: ``processed=false`` with ``message``."""
        bookmark = await self.get(bookmark_id)
        bookmark.mark_failed(message)
        return await self.update(bookmark_id, bookmark)

    async def add_tags(self, bookmark_id: str, tag_ids: list[str]) -> Bookmark:
        bookmark = await self.get(bookmark_id)
        merged = list(dict.fromkeys([*bookmark.tag_ids, *tag_ids]))
        bookmark.tag_ids = merged
        return await self.update(bookmark_id, bookmark)

    async def remove_tags(self, bookmark_id: str, tag_ids: list[str]) -> Bookmark:
        bookmark = await self.get(bookmark_id)
        to_remove = set(tag_ids)
        bookmark.tag_ids = [tag_id for tag_id in bookmark.tag_ids if tag_id not in to_remove]
        properties = bookmark_to_properties(bookmark)
        # Send the relation even when empty so the last tag can be removed
        properties[BookmarkProperty.TAG] = relation_property(bookmark.tag_ids)
        return await self._write(bookmark_id, properties)

    async def set_cover(self, bookmark_id: str, file_upload_id: str) -> None:
        """Use an uploaded file as the bookmark page's cover."""
        _require_id(bookmark_id)
        if not file_upload_id:
            msg = "file upload ID is required"
            raise ValueError(msg)
        await self._client.set_page_cover(bookmark_id, file_upload_id)
