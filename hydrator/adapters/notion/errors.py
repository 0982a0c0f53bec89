"""Exceptions raised by the Notion API client.

- NotionError: base exception carrying the failed operation
- NotionValidationError: 400, the request was rejected as malformed
- NotionUnauthorizedError: 401/403, bad token or missing page access
- NotionNotFoundError: 404, page/database/file upload does not exist
- NotionRateLimitError: 429, the integration is being rate limited
- NotionRetryableError: 408/409/5xx or transport failure, worth trying later
"""

from __future__ import annotations

from typing import Any

import httpx


class NotionError(Exception):
    """Base exception for Notion API failures."""

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        response_data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message
        self.status_code = status_code
        self.code = code
        self.response_data = response_data


class NotionValidationError(NotionError):
    pass


class NotionUnauthorizedError(NotionError):
    pass


class NotionNotFoundError(NotionError):
    pass


class NotionRateLimitError(NotionError):
    pass


class NotionRetryableError(NotionError):
    pass


_STATUS_ERRORS: dict[int, type[NotionError]] = {
    400: NotionValidationError,
    401: NotionUnauthorizedError,
    403: NotionUnauthorizedError,
    404: NotionNotFoundError,
    408: NotionRetryableError,
    409: NotionRetryableError,
    429: NotionRateLimitError,
}


def error_from_exception(operation: str, exc: Exception) -> NotionError:
    """Map an httpx failure onto the Notion exception hierarchy."""
    if isinstance(exc, NotionError):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        return error_from_response(operation, exc.response)
    if isinstance(exc, httpx.TransportError):
        return NotionRetryableError(operation, f"{type(exc).__name__}: {exc}")
    return NotionError(operation, str(exc))


def error_from_response(operation: str, response: httpx.Response) -> NotionError:
    """Build an exception from a non-2xx Notion response.

    Notion error bodies look like ``{"object": "error", "status": 404,
    "code": "object_not_found", "message": "..."}``.
    """
    status = response.status_code
    data: dict[str, Any] | None = None
    try:
        payload = response.json()
        if isinstance(payload, dict):
            data = payload
    except ValueError:
        data = None

    message = (data or {}).get("message") or response.text[:300] or f"HTTP {status}"
    code = (data or {}).get("code")

    if status in _STATUS_ERRORS:
        error_cls = _STATUS_ERRORS[status]
    elif status >= 500:
        error_cls = NotionRetryableError
    else:
        error_cls = NotionError

    return error_cls(
        operation,
        f"API error {status}: {message}",
        status_code=status,
        code=code,
        response_data=data,
    )
