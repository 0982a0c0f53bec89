"""Conversion between Notion property values and plain Python values.

Decoders are lenient: a property that is missing or holds a different
type than expected decodes to ``None`` (or an empty list) instead of
raising, so one odd column never breaks a whole page.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def rich_text_to_string(rich_text: list[dict[str, Any]] | None) -> str:
    if not rich_text:
        return ""
    parts: list[str] = []
    for item in rich_text:
        text = item.get("plain_text")
        if text is None:
            text = (item.get("text") or {}).get("content", "")
        parts.append(str(text))
    return "".join(parts)


def string_to_rich_text(text: str) -> list[dict[str, Any]]:
    if not text:
        return []
    return [{"type": "text", "text": {"content": text}}]


def _typed(properties: dict[str, dict[str, Any]], name: str, expected: str) -> Any | None:
    prop = properties.get(name)
    if not isinstance(prop, dict) or prop.get("type", expected) != expected:
        return None
    return prop.get(expected)


def decode_title(properties: dict[str, dict[str, Any]], name: str) -> str | None:
    value = _typed(properties, name, "title")
    return None if value is None else rich_text_to_string(value)


def decode_rich_text(properties: dict[str, dict[str, Any]], name: str) -> str | None:
    value = _typed(properties, name, "rich_text")
    return None if value is None else rich_text_to_string(value)


def decode_url(properties: dict[str, dict[str, Any]], name: str) -> str | None:
    value = _typed(properties, name, "url")
    return value if isinstance(value, str) else None


def decode_checkbox(properties: dict[str, dict[str, Any]], name: str) -> bool | None:
    value = _typed(properties, name, "checkbox")
    return value if isinstance(value, bool) else None


def decode_date(properties: dict[str, dict[str, Any]], name: str) -> datetime | None:
    value = _typed(properties, name, "date")
    if not isinstance(value, dict) or not value.get("start"):
        return None
    return parse_notion_datetime(value["start"])


def decode_relation(properties: dict[str, dict[str, Any]], name: str) -> list[str]:
    value = _typed(properties, name, "relation")
    if not isinstance(value, list):
        return []
    return [str(item["id"]) for item in value if isinstance(item, dict) and item.get("id")]


def parse_notion_datetime(value: str) -> datetime | None:
    """Parse a Notion date string (``2024-01-31`` or full ISO 8601)."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def title_property(text: str) -> dict[str, Any]:
    return {"title": string_to_rich_text(text)}


def rich_text_property(text: str) -> dict[str, Any]:
    return {"rich_text": string_to_rich_text(text)}


def url_property(url: str | None) -> dict[str, Any]:
    return {"url": url or None}


def checkbox_property(checked: bool) -> dict[str, Any]:
    return {"checkbox": bool(checked)}


def date_property(value: datetime) -> dict[str, Any]:
    return {"date": {"start": value.isoformat()}}


def relation_property(ids: list[str]) -> dict[str, Any]:
    return {"relation": [{"id": page_id} for page_id in ids]}
