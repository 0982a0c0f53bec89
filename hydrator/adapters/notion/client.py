"""Notion REST API client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from hydrator.adapters.notion.errors import NotionError, error_from_exception
from hydrator.adapters.notion.models import (
    CreateFileUploadRequest,
    DatabaseQueryResponse,
    FileUploadObject,
    NotionPage,
)
from hydrator.config.notion import DEFAULT_NOTION_API_URL, DEFAULT_NOTION_VERSION

if TYPE_CHECKING:
    from typing import Self

    from hydrator.config.notion import NotionConfig

logger = logging.getLogger(__name__)

# Notion caps page_size at 100
MAX_PAGE_SIZE = 100

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: dict[str, Any], operation: str) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        logger.debug(
            "notion_response_invalid",
            extra={"operation": operation, "model": model.__name__, "error": str(exc)},
        )
        raise NotionError(operation, "unexpected response payload") from exc


class NotionClient:
    """Async HTTP client for the subset of the Notion API used by the hydrator.

    Calls are single attempts: failures surface as ``NotionError`` subclasses
    and any retry decision is left to the caller.
    """

    # Default per-endpoint timeouts (seconds)
    DEFAULT_TIMEOUTS: dict[str, float] = {
        "get_page": 10.0,
        "create_page": 10.0,
        "update_page": 10.0,
        "query_database": 30.0,
        "create_file_upload": 10.0,
        "retrieve_file_upload": 10.0,
        "health_check": 10.0,
    }

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str = DEFAULT_NOTION_API_URL,
        notion_version: str = DEFAULT_NOTION_VERSION,
        timeout: float = 10.0,
        endpoint_timeouts: dict[str, float] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Notion client.

        Args:
            api_key: Internal integration token
            api_url: Base URL of the Notion API
            notion_version: Value for the ``Notion-Version`` header
            timeout: Default request timeout in seconds
            endpoint_timeouts: Custom per-endpoint timeouts (overrides defaults)
            transport: Optional httpx transport (used by tests)
        """
        if not api_key:
            msg = "Notion API key is required"
            raise ValueError(msg)
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.notion_version = notion_version
        self.timeout = timeout
        self.endpoint_timeouts = {**self.DEFAULT_TIMEOUTS}
        if endpoint_timeouts:
            self.endpoint_timeouts.update(endpoint_timeouts)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(cls, config: NotionConfig, **kwargs: Any) -> Self:
        return cls(
            config.api_key,
            api_url=config.api_url,
            notion_version=config.notion_version,
            timeout=config.timeout_sec,
            **kwargs,
        )

    def get_timeout(self, endpoint: str) -> float:
        return self.endpoint_timeouts.get(endpoint, self.timeout)

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Notion-Version": self.notion_version,
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client."""
        if self._client is None:
            msg = "Client not initialized. Use async context manager."
            raise RuntimeError(msg)
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        *,
        endpoint: str,
        operation: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self.client.request(
                method, path, json=json, timeout=self.get_timeout(endpoint)
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            error = error_from_exception(operation, exc)
            logger.debug(
                "notion_request_failed",
                extra={
                    "operation": operation,
                    "status_code": error.status_code,
                    "error": error.message,
                },
            )
            raise error from exc
        if not isinstance(data, dict):
            raise NotionError(operation, "unexpected response payload")
        return data

    async def get_page(self, page_id: str) -> NotionPage:
        data = await self._request(
            "GET", f"/pages/{page_id}", endpoint="get_page", operation=f"get_page({page_id})"
        )
        return _parse(NotionPage, data, f"get_page({page_id})")

    async def create_page(self, database_id: str, properties: dict[str, Any]) -> NotionPage:
        body = {"parent": {"database_id": database_id}, "properties": properties}
        data = await self._request(
            "POST", "/pages", json=body, endpoint="create_page", operation="create_page"
        )
        page = _parse(NotionPage, data, "create_page")
        logger.info("notion_page_created", extra={"page_id": page.id, "database_id": database_id})
        return page

    async def update_page(
        self,
        page_id: str,
        *,
        properties: dict[str, Any] | None = None,
        archived: bool | None = None,
        cover: dict[str, Any] | None = None,
    ) -> NotionPage:
        """Patch a page. Only the arguments that are not ``None`` are sent."""
        body: dict[str, Any] = {}
        if properties is not None:
            body["properties"] = properties
        if archived is not None:
            body["archived"] = archived
        if cover is not None:
            body["cover"] = cover

        data = await self._request(
            "PATCH",
            f"/pages/{page_id}",
            json=body,
            endpoint="update_page",
            operation=f"update_page({page_id})",
        )
        return _parse(NotionPage, data, f"update_page({page_id})")

    async def query_database(
        self,
        database_id: str,
        *,
        filter: dict[str, Any] | None = None,  # noqa: A002 - Notion API field name
        sorts: list[dict[str, Any]] | None = None,
        page_size: int | None = None,
        start_cursor: str | None = None,
    ) -> DatabaseQueryResponse:
        body: dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if page_size:
            body["page_size"] = min(page_size, MAX_PAGE_SIZE)
        if start_cursor:
            body["start_cursor"] = start_cursor

        data = await self._request(
            "POST",
            f"/databases/{database_id}/query",
            json=body,
            endpoint="query_database",
            operation=f"query_database({database_id})",
        )
        return _parse(DatabaseQueryResponse, data, f"query_database({database_id})")

    async def query_database_all(
        self,
        database_id: str,
        *,
        filter: dict[str, Any] | None = None,  # noqa: A002 - Notion API field name
        sorts: list[dict[str, Any]] | None = None,
        limit: int = 0,
    ) -> list[NotionPage]:
        """Query a database following pagination.

        Args:
            database_id: Database to query
            filter: Notion filter object
            sorts: Notion sort objects
            limit: Maximum number of pages to return (0 = all)

        Returns:
            Pages in the order Notion returned them
        """
        pages: list[NotionPage] = []
        cursor: str | None = None

        while True:
            remaining = limit - len(pages) if limit else MAX_PAGE_SIZE
            result = await self.query_database(
                database_id,
                filter=filter,
                sorts=sorts,
                page_size=min(remaining, MAX_PAGE_SIZE),
                start_cursor=cursor,
            )
            pages.extend(result.results)

            if limit and len(pages) >= limit:
                pages = pages[:limit]
                break
            if not result.has_more or not result.next_cursor:
                break
            cursor = result.next_cursor

        logger.debug(
            "notion_database_queried",
            extra={"database_id": database_id, "count": len(pages), "limit": limit},
        )
        return pages

    async def create_file_upload(self, external_url: str, filename: str) -> FileUploadObject:
        """Ask Notion to import a file from a public URL."""
        request = CreateFileUploadRequest(external_url=external_url, filename=filename)
        data = await self._request(
            "POST",
            "/file_uploads",
            json=request.model_dump(mode="json"),
            endpoint="create_file_upload",
            operation="create_file_upload",
        )
        return _parse(FileUploadObject, data, "create_file_upload")

    async def retrieve_file_upload(self, file_upload_id: str) -> FileUploadObject:
        data = await self._request(
            "GET",
            f"/file_uploads/{file_upload_id}",
            endpoint="retrieve_file_upload",
            operation=f"retrieve_file_upload({file_upload_id})",
        )
        return _parse(FileUploadObject, data, f"retrieve_file_upload({file_upload_id})")

    async def set_page_cover(self, page_id: str, file_upload_id: str) -> NotionPage:
        """Use an uploaded file as the page cover."""
        cover = {"type": "file_upload", "file_upload": {"id": file_upload_id}}
        return await self.update_page(page_id, cover=cover)

    async def health_check(self) -> bool:
        """Check that the token is accepted by the API."""
        try:
            await self._request(
                "GET", "/users/me", endpoint="health_check", operation="health_check"
            )
            return True
        except NotionError as e:
            logger.warning("notion_health_check_failed", extra={"error": str(e)})
            return False
