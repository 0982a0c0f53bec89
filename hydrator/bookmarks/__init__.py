"""Bookmark records and their Notion database service."""

from hydrator.bookmarks.models import (
    Bookmark,
    BookmarkFilter,
    BookmarkProperty,
    QueryOptions,
    SortBy,
)
from hydrator.bookmarks.service import BookmarkService

__all__ = [
    "Bookmark",
    "BookmarkFilter",
    "BookmarkProperty",
    "BookmarkService",
    "QueryOptions",
    "SortBy",
]
