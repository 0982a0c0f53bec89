"""Exceptions raised by the content scraper client.

- ScraperError: base exception with context support
- ScraperRequestError: transport failure, non-200 status or undecodable body
- ScraperUnavailableError: the health check did not pass
"""

from __future__ import annotations

from typing import Any


class ScraperError(Exception):
    """Base exception for scraper client errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ScraperRequestError(ScraperError):
    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        context: dict[str, Any] = {}
        if url:
            context["url"] = url
        if status_code is not None:
            context["status_code"] = status_code
        if original_error is not None:
            context["original_error"] = type(original_error).__name__
        super().__init__(message, context=context)
        self.url = url
        self.status_code = status_code
        self.original_error = original_error


class ScraperUnavailableError(ScraperError):
    def __init__(self, message: str, *, base_url: str | None = None) -> None:
        super().__init__(message, context={"base_url": base_url} if base_url else None)
        self.base_url = base_url
