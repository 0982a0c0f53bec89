"""Pydantic models for the Notion REST API payloads this project touches."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotionPage(BaseModel):
    """A Notion page; database rows are pages with a property map."""

    model_config = ConfigDict(extra="ignore")

    id: str
    created_time: datetime | None = None
    last_edited_time: datetime | None = None
    archived: bool = False
    url: str | None = None
    cover: dict[str, Any] | None = None
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)


class DatabaseQueryResponse(BaseModel):
    """One page of results from ``POST /databases/{id}/query``."""

    model_config = ConfigDict(extra="ignore")

    results: list[NotionPage] = Field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


class SortDirection(StrEnum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class FileUploadMode(StrEnum):
    # Notion fetches the bytes from the URL itself
    EXTERNAL_URL = "external_url"


class FileUploadStatus(StrEnum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    FAILED = "failed"


class CreateFileUploadRequest(BaseModel):
    """Request body for ``POST /file_uploads``."""

    mode: FileUploadMode = FileUploadMode.EXTERNAL_URL
    external_url: str
    filename: str


class FileUploadObject(BaseModel):
    """File upload job returned by the file upload endpoints.

    ``status`` is kept as a plain string so unrecognised values reach the
    caller instead of failing validation.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    object: str = "file_upload"
    status: str
    created_time: datetime | None = None
    last_edited_time: datetime | None = None
    expiry_time: datetime | None = None
    archived: bool = False
    filename: str | None = None
    content_type: str | None = None
    content_length: int | None = None
    request_id: str | None = None
