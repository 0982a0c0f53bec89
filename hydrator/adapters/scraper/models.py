from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _image_url(value: Any) -> str | None:
    # Some extractors emit ImageObject dicts or lists of candidates
    if isinstance(value, list):
        value = next((item for item in value if item), None)
    if isinstance(value, dict):
        value = value.get("url") or value.get("contentUrl")
    return value if isinstance(value, str) else None


class ScrapeMetadata(BaseModel):
    """Metadata block extracted by the scraper from page markup."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    author: str | None = None
    title: str | None = None
    description: str | None = None
    publisher: str | None = None
    url: str | None = None
    lang: str | None = None
    logo: str | None = None
    image: str | None = None
    og_image: str | None = Field(
        default=None, validation_alias=AliasChoices("ogImage", "og:image", "og_image")
    )
    twitter_image: str | None = Field(
        default=None,
        validation_alias=AliasChoices("twitterImage", "twitter:image", "twitter_image"),
    )
    date: str | None = None
    date_modified: str | None = Field(
        default=None, validation_alias=AliasChoices("dateModified", "date_modified")
    )
    date_published: str | None = Field(
        default=None, validation_alias=AliasChoices("datePublished", "date_published")
    )
    reddit_author: str | None = Field(
        default=None, validation_alias=AliasChoices("redditAuthor", "reddit_author")
    )
    reddit_subreddit: str | None = Field(
        default=None, validation_alias=AliasChoices("redditSubreddit", "reddit_subreddit")
    )
    reddit_upvotes: int | None = Field(
        default=None, validation_alias=AliasChoices("redditUpvotes", "reddit_upvotes")
    )
    subreddit: str | None = None

    @field_validator("image", "og_image", "twitter_image", "logo", mode="before")
    @classmethod
    def _coerce_image(cls, value: Any) -> str | None:
        return _image_url(value)

    @field_validator("author", mode="before")
    @classmethod
    def _coerce_author(cls, value: Any) -> str | None:
        if isinstance(value, dict):
            value = value.get("name")
        if isinstance(value, list):
            names = [str(item.get("name", "")) if isinstance(item, dict) else str(item) for item in value]
            value = ", ".join(name for name in names if name)
        return value if isinstance(value, str) else None


class ScrapedContent(BaseModel):
    """Body of a ``POST /scrape`` response."""

    model_config = ConfigDict(extra="ignore")

    content: str = ""
    image: str | None = None
    metadata: ScrapeMetadata | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("image", mode="before")
    @classmethod
    def _coerce_image(cls, value: Any) -> str | None:
        return _image_url(value)


class HealthResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str = "ok"
    version: str | None = None
    uptime: str | None = None


@dataclass(frozen=True)
class ScrapeResult:
    """Parsed scrape response plus the raw body it came from."""

    content: ScrapedContent
    raw_json: str
