"""Shared fixtures and builders for the hydrator test suite."""

from __future__ import annotations

from typing import Any

import pytest

from hydrator.adapters.notion.models import NotionPage
from hydrator.adapters.scraper.models import ScrapedContent, ScrapeResult
from hydrator.bookmarks.models import Bookmark

NOTION_ENV_VARS = (
    "NOTION_API_KEY",
    "NOTION_BOOKMARKS_DB_ID",
    "NOTION_TAGS_DB_ID",
    "NOTION_MANUALLIST_DB_ID",
    "NOTION_SMARTLIST_DB_ID",
    "NOTION_API_URL",
    "NOTION_VERSION",
    "NOTION_TIMEOUT_SEC",
    "WEBMEATSCRAPER_URL",
    "SCRAPER_TIMEOUT_SEC",
    "UPLOAD_IMAGES_TO_NOTION",
    "IMAGE_UPLOAD_TIMEOUT",
    "IMAGE_UPLOAD_POLL_INTERVAL",
    "FALLBACK_TO_EXTERNAL_URL",
    "DEBUG",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_TRUNCATE_LENGTH",
)


def rich_text(text: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": text}, "plain_text": text}]


def make_page(page_id: str = "page-1", **properties: dict[str, Any]) -> NotionPage:
    return NotionPage.model_validate(
        {
            "id": page_id,
            "created_time": "2024-03-01T10:00:00.000Z",
            "last_edited_time": "2024-03-02T11:30:00.000Z",
            "properties": properties,
        }
    )


def make_scrape_result(
    *,
    content: str = "body",
    image: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ScrapeResult:
    payload: dict[str, Any] = {"content": content, "image": image, "metadata": metadata}
    parsed = ScrapedContent.model_validate(payload)
    return ScrapeResult(content=parsed, raw_json=parsed.model_dump_json())


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> pytest.MonkeyPatch:
    """Run with none of the hydrator variables set and no ``.env`` in reach."""
    for name in NOTION_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def bookmark() -> Bookmark:
    return Bookmark(id="bm-1", title="An article", url="https://example.com/article")
