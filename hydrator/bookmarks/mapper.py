"""Mapping between Notion pages and ``Bookmark`` records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from hydrator.adapters.notion.properties import (
    checkbox_property,
    date_property,
    decode_checkbox,
    decode_date,
    decode_relation,
    decode_rich_text,
    decode_title,
    decode_url,
    relation_property,
    rich_text_property,
    title_property,
    url_property,
)
from hydrator.bookmarks.models import Bookmark, BookmarkProperty

if TYPE_CHECKING:
    from hydrator.adapters.notion.models import NotionPage


def page_to_bookmark(page: NotionPage) -> Bookmark:
    props = page.properties
    return Bookmark(
        id=page.id,
        title=decode_title(props, BookmarkProperty.PAGE) or "",
        url=decode_url(props, BookmarkProperty.URL) or "",
        summary=decode_rich_text(props, BookmarkProperty.SUMMARY) or "",
        author=decode_rich_text(props, BookmarkProperty.AUTHOR) or "",
        image_url=decode_url(props, BookmarkProperty.IMAGE) or "",
        date_added=decode_date(props, BookmarkProperty.DATE_ADDED),
        date_processed=decode_date(props, BookmarkProperty.DATE_PROCESSED),
        date_published=decode_rich_text(props, BookmarkProperty.DATE_PUBLISHED) or "",
        tag_ids=decode_relation(props, BookmarkProperty.TAG),
        manual_list_ids=decode_relation(props, BookmarkProperty.MANUAL_LISTS),
        smart_list_ids=decode_relation(props, BookmarkProperty.SMART_LISTS),
        processed=bool(decode_checkbox(props, BookmarkProperty.PROCESSED)),
        error=decode_rich_text(props, BookmarkProperty.ERROR) or "",
        created_at=page.created_time,
        updated_at=page.last_edited_time,
    )


def bookmark_to_properties(bookmark: Bookmark) -> dict[str, Any]:
    """Build the Notion property map for a bookmark.

    Empty optional fields are left out so an update does not clear columns
    the bookmark never loaded. ``processed`` and ``error`` are always sent.
    """
    props: dict[str, Any] = {}

    if bookmark.title:
        props[BookmarkProperty.PAGE] = title_property(bookmark.title)
    if bookmark.url:
        props[BookmarkProperty.URL] = url_property(bookmark.url)
    if bookmark.summary:
        props[BookmarkProperty.SUMMARY] = rich_text_property(bookmark.summary)
    if bookmark.author:
        props[BookmarkProperty.AUTHOR] = rich_text_property(bookmark.author)
    if bookmark.image_url:
        props[BookmarkProperty.IMAGE] = url_property(bookmark.image_url)
    if bookmark.date_added:
        props[BookmarkProperty.DATE_ADDED] = date_property(bookmark.date_added)
    if bookmark.date_processed:
        props[BookmarkProperty.DATE_PROCESSED] = date_property(bookmark.date_processed)
    if bookmark.date_published:
        props[BookmarkProperty.DATE_PUBLISHED] = rich_text_property(bookmark.date_published)
    if bookmark.tag_ids:
        props[BookmarkProperty.TAG] = relation_property(bookmark.tag_ids)
    if bookmark.manual_list_ids:
        props[BookmarkProperty.MANUAL_LISTS] = relation_property(bookmark.manual_list_ids)
    if bookmark.smart_list_ids:
        props[BookmarkProperty.SMART_LISTS] = relation_property(bookmark.smart_list_ids)

    props[BookmarkProperty.PROCESSED] = checkbox_property(bookmark.processed)
    props[BookmarkProperty.ERROR] = rich_text_property(bookmark.error)
    return props
