"""Tests for the Notion property codec and the bookmark mapper."""

from __future__ import annotations

from datetime import UTC, datetime

from hydrator.adapters.notion.properties import (
    decode_checkbox,
    decode_date,
    decode_relation,
    decode_rich_text,
    decode_title,
    decode_url,
    parse_notion_datetime,
    rich_text_to_string,
    string_to_rich_text,
)
from hydrator.bookmarks.mapper import bookmark_to_properties, page_to_bookmark
from hydrator.bookmarks.models import Bookmark
from tests.conftest import make_page, rich_text


class TestDecoders:
    def test_rich_text_concatenates_segments(self):
        segments = rich_text("Hello, ") + [{"type": "text", "text": {"content": "world"}}]
        assert rich_text_to_string(segments) == "Hello, world"

    def test_rich_text_empty(self):
        assert rich_text_to_string(None) == ""
        assert rich_text_to_string([]) == ""
        assert string_to_rich_text("") == []

    def test_missing_property_decodes_to_none(self):
        assert decode_title({}, "page") is None
        assert decode_url({}, "url") is None
        assert decode_checkbox({}, "processed") is None
        assert decode_date({}, "date_added") is None
        assert decode_relation({}, "tag") == []

    def test_wrong_type_decodes_to_none(self):
        props = {"author": {"type": "url", "url": "https://x.example"}}
        assert decode_rich_text(props, "author") is None

    def test_date_only_value_is_utc_midnight(self):
        assert parse_notion_datetime("2024-01-31") == datetime(2024, 1, 31, tzinfo=UTC)

    def test_datetime_with_z_suffix(self):
        parsed = parse_notion_datetime("2024-01-31T08:15:00.000Z")
        assert parsed == datetime(2024, 1, 31, 8, 15, tzinfo=UTC)

    def test_unparseable_date_is_none(self):
        assert parse_notion_datetime("last tuesday") is None


class TestBookmarkMapper:
    def test_page_to_bookmark(self):
        page = make_page(
            "bm-9",
            page={"type": "title", "title": rich_text("Deep dive")},
            url={"type": "url", "url": "https://blog.example/post"},
            summary={"type": "rich_text", "rich_text": rich_text("A summary")},
            author={"type": "rich_text", "rich_text": []},
            image={"type": "url", "url": None},
            date_added={"type": "date", "date": {"start": "2024-02-10"}},
            date_published={"type": "rich_text", "rich_text": rich_text("Feb 2024")},
            tag={"type": "relation", "relation": [{"id": "t1"}, {"id": "t2"}]},
            manual_lists={"type": "relation", "relation": [{"id": "m1"}]},
            processed={"type": "checkbox", "checkbox": False},
            error={"type": "rich_text", "rich_text": rich_text("timeout")},
        )

        bookmark = page_to_bookmark(page)

        assert bookmark.id == "bm-9"
        assert bookmark.title == "Deep dive"
        assert bookmark.url == "https://blog.example/post"
        assert bookmark.summary == "A summary"
        assert bookmark.author == ""
        assert bookmark.image_url == ""
        assert bookmark.date_added == datetime(2024, 2, 10, tzinfo=UTC)
        assert bookmark.date_published == "Feb 2024"
        assert bookmark.tag_ids == ["t1", "t2"]
        assert bookmark.manual_list_ids == ["m1"]
        assert bookmark.smart_list_ids == []
        assert bookmark.processed is False
        assert bookmark.error == "timeout"
        assert bookmark.created_at is not None

    def test_properties_always_carry_processed_and_error(self):
        props = bookmark_to_properties(Bookmark(id="bm-1"))

        assert props == {
            "processed": {"checkbox": False},
            "error": {"rich_text": []},
        }

    def test_properties_for_processed_bookmark(self):
        bookmark = Bookmark(
            id="bm-1",
            title="Title",
            url="https://a.example",
            author="Ada",
            image_url="https://a.example/i.png",
            tag_ids=["t1"],
            processed=True,
            date_processed=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
        )

        props = bookmark_to_properties(bookmark)

        assert props["page"] == {"title": [{"type": "text", "text": {"content": "Title"}}]}
        assert props["url"] == {"url": "https://a.example"}
        assert props["author"]["rich_text"][0]["text"]["content"] == "Ada"
        assert props["image"] == {"url": "https://a.example/i.png"}
        assert props["tag"] == {"relation": [{"id": "t1"}]}
        assert props["date_processed"] == {"date": {"start": "2024-05-01T12:00:00+00:00"}}
        assert props["processed"] == {"checkbox": True}
        assert props["error"] == {"rich_text": []}
        assert "summary" not in props
        assert "manual_lists" not in props
