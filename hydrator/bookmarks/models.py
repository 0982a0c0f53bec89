"""Bookmark records as stored in the Notion bookmarks database."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from hydrator.adapters.notion.models import SortDirection


class BookmarkProperty(StrEnum):
    """Column names of the bookmarks database."""

    PAGE = "page"
    URL = "url"
    SUMMARY = "summary"
    AUTHOR = "author"
    IMAGE = "image"
    DATE_ADDED = "date_added"
    DATE_PROCESSED = "date_processed"
    DATE_PUBLISHED = "date_published"
    TAG = "tag"
    MANUAL_LISTS = "manual_lists"
    SMART_LISTS = "smart_lists"
    PROCESSED = "processed"
    ERROR = "error"


class Bookmark(BaseModel):
    """Bookmark model.

    ``processed`` and ``error`` are mutually exclusive: a processed bookmark
    has an empty error, and a bookmark with an error is not processed.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    id: str = ""
    title: str = ""
    url: str = ""
    summary: str = ""
    author: str = ""
    image_url: str = ""
    date_added: datetime | None = None
    date_processed: datetime | None = None
    date_published: str = ""  # free text, as entered in Notion
    tag_ids: list[str] = Field(default_factory=list)
    manual_list_ids: list[str] = Field(default_factory=list)
    smart_list_ids: list[str] = Field(default_factory=list)
    processed: bool = False
    error: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def mark_processed(self, when: datetime) -> None:
        self.processed = True
        self.error = ""
        self.date_processed = when

    def mark_failed(self, message: str) -> None:
        self.processed = False
        self.error = message


class BookmarkFilter(BaseModel):
    """Filters for listing bookmarks; set fields are combined with AND."""

    title_contains: str | None = None
    url_contains: str | None = None
    summary_contains: str | None = None
    author_contains: str | None = None
    error_contains: str | None = None
    has_tag: str | None = None
    tag_ids: list[str] = Field(default_factory=list)
    processed: bool | None = None
    limit: int = Field(default=0, ge=0)


class SortBy(StrEnum):
    DATE_ADDED = BookmarkProperty.DATE_ADDED.value
    TITLE = BookmarkProperty.PAGE.value
    CREATED_AT = "created_time"
    UPDATED_AT = "last_edited_time"


class QueryOptions(BaseModel):
    filter: BookmarkFilter | None = None
    sort_by: SortBy | None = None
    sort_direction: SortDirection = SortDirection.DESCENDING
    limit: int = Field(default=0, ge=0)
