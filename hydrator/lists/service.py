"""Tags, manual lists and smart lists: small databases keyed by name."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from hydrator.adapters.notion.models import SortDirection
from hydrator.adapters.notion.properties import decode_title, title_property
from hydrator.lists.models import NAME_PROPERTY, NamedItem

if TYPE_CHECKING:
    from hydrator.adapters.notion.client import NotionClient
    from hydrator.adapters.notion.models import NotionPage

logger = logging.getLogger(__name__)


def page_to_item(page: NotionPage) -> NamedItem:
    return NamedItem(
        id=page.id,
        name=decode_title(page.properties, NAME_PROPERTY) or "",
        created_at=page.created_time,
        updated_at=page.last_edited_time,
    )


def item_to_properties(item: NamedItem) -> dict[str, Any]:
    if not item.name:
        return {}
    return {NAME_PROPERTY: title_property(item.name)}


class NamedItemService:
    """CRUD over a Notion database of named items."""

    kind: ClassVar[str] = "item"

    def __init__(self, client: NotionClient, database_id: str) -> None:
        if not database_id:
            msg = f"{self.kind} database ID is required"
            raise ValueError(msg)
        self._client = client
        self.database_id = database_id

    def _require(self, value: str, what: str) -> None:
        if not value:
            msg = f"{self.kind} {what} is required"
            raise ValueError(msg)

    async def create(self, item: NamedItem) -> NamedItem:
        self._require(item.name, "name")
        page = await self._client.create_page(self.database_id, item_to_properties(item))
        return page_to_item(page)

    async def get(self, item_id: str) -> NamedItem:
        self._require(item_id, "ID")
        return page_to_item(await self._client.get_page(item_id))

    async def get_by_name(self, name: str) -> NamedItem | None:
        """Exact-name lookup; ``None`` when no row matches."""
        self._require(name, "name")
        result = await self._client.query_database(
            self.database_id,
            filter={"property": NAME_PROPERTY, "title": {"equals": name}},
            page_size=1,
        )
        if not result.results:
            return None
        return page_to_item(result.results[0])

    async def find_or_create(self, name: str) -> NamedItem:
        existing = await self.get_by_name(name)
        if existing is not None:
            return existing
        created = await self.create(NamedItem(name=name))
        logger.info(
            "named_item_created",
            extra={"kind": self.kind, "item_id": created.id, "item_name": name},
        )
        return created

    async def update(self, item_id: str, item: NamedItem) -> NamedItem:
        self._require(item_id, "ID")
        page = await self._client.update_page(item_id, properties=item_to_properties(item))
        return page_to_item(page)

    async def delete(self, item_id: str) -> None:
        """Archive the item page."""
        self._require(item_id, "ID")
        await self._client.update_page(item_id, archived=True)

    async def list(self, name_contains: str | None = None, limit: int = 0) -> list[NamedItem]:
        """List items sorted by name."""
        query_filter = None
        if name_contains:
            query_filter = {"property": NAME_PROPERTY, "title": {"contains": name_contains}}
        pages = await self._client.query_database_all(
            self.database_id,
            filter=query_filter,
            sorts=[{"property": NAME_PROPERTY, "direction": SortDirection.ASCENDING}],
            limit=limit,
        )
        return [page_to_item(page) for page in pages]


class TagService(NamedItemService):
    kind = "tag"


class ManualListService(NamedItemService):
    kind = "manual list"


class SmartListService(NamedItemService):
    kind = "smart list"
