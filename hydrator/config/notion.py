from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._validators import _ensure_api_key

DEFAULT_NOTION_API_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"


class NotionConfig(BaseModel):
    """Notion workspace credentials and database identifiers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(..., validation_alias="NOTION_API_KEY")
    bookmarks_db_id: str = Field(..., validation_alias="NOTION_BOOKMARKS_DB_ID")
    tags_db_id: str = Field(default="", validation_alias="NOTION_TAGS_DB_ID")
    manual_list_db_id: str = Field(default="", validation_alias="NOTION_MANUALLIST_DB_ID")
    smart_list_db_id: str = Field(default="", validation_alias="NOTION_SMARTLIST_DB_ID")
    api_url: str = Field(default=DEFAULT_NOTION_API_URL, validation_alias="NOTION_API_URL")
    notion_version: str = Field(default=DEFAULT_NOTION_VERSION, validation_alias="NOTION_VERSION")
    timeout_sec: float = Field(default=10.0, validation_alias="NOTION_TIMEOUT_SEC")

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        return _ensure_api_key(str(value or ""), name="Notion")

    @field_validator("bookmarks_db_id", mode="before")
    @classmethod
    def _validate_bookmarks_db(cls, value: Any) -> str:
        db_id = str(value or "").strip()
        if not db_id:
            msg = "NOTION_BOOKMARKS_DB_ID is required"
            raise ValueError(msg)
        return db_id

    @field_validator("tags_db_id", "manual_list_db_id", "smart_list_db_id", mode="before")
    @classmethod
    def _strip_optional_db(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("api_url", mode="before")
    @classmethod
    def _validate_api_url(cls, value: Any) -> str:
        url = str(value or DEFAULT_NOTION_API_URL).strip()
        return (url or DEFAULT_NOTION_API_URL).rstrip("/")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        if value in (None, ""):
            return 10.0
        try:
            parsed = float(str(value))
        except ValueError as exc:
            msg = "Notion timeout must be a number"
            raise ValueError(msg) from exc
        if parsed <= 0:
            msg = "Notion timeout must be positive"
            raise ValueError(msg)
        return parsed
