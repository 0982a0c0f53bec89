from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SCRAPER_URL = "http://localhost:7878"


class ScraperConfig(BaseModel):
    """Content scraper (webmeatscraper) service settings."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(default=DEFAULT_SCRAPER_URL, validation_alias="WEBMEATSCRAPER_URL")
    timeout_sec: float = Field(
        default=80.0,
        validation_alias="SCRAPER_TIMEOUT_SEC",
        description="Scrape requests render full pages and can be slow",
    )

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_base_url(cls, value: Any) -> str:
        url = str(value or "").strip()
        if not url:
            return DEFAULT_SCRAPER_URL
        return url.rstrip("/")

    @field_validator("timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> float:
        if value in (None, ""):
            return 80.0
        try:
            parsed = float(str(value))
        except ValueError as exc:
            msg = "Scraper timeout must be a number"
            raise ValueError(msg) from exc
        if parsed <= 0:
            msg = "Scraper timeout must be positive"
            raise ValueError(msg)
        return parsed
