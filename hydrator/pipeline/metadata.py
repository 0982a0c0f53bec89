"""Metadata merge rules applied to a bookmark after a successful scrape.

Fields that already hold a value are never replaced by scraped data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hydrator.adapters.scraper.models import ScrapedContent
    from hydrator.bookmarks.models import Bookmark


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


def select_image_candidate(content: ScrapedContent) -> str | None:
    """Pick the image to import for a page.

    Priority: the content's own image, then Open Graph, then Twitter card,
    then the generic metadata image. The first non-empty one wins.
    """
    candidates = [content.image]
    if content.metadata is not None:
        candidates += [
            content.metadata.og_image,
            content.metadata.twitter_image,
            content.metadata.image,
        ]
    for candidate in candidates:
        if _clean(candidate):
            return _clean(candidate)
    return None


def merge_author(bookmark: Bookmark, content: ScrapedContent) -> bool:
    """Adopt the scraped author when the bookmark has none. Returns True if set."""
    if _clean(bookmark.author) or content.metadata is None:
        return False
    author = _clean(content.metadata.author)
    if not author:
        return False
    bookmark.author = author
    return True


def apply_image_reference(bookmark: Bookmark, image_url: str | None) -> bool:
    """Set the bookmark's image property when it is empty. Returns True if set."""
    if _clean(bookmark.image_url) or not _clean(image_url):
        return False
    bookmark.image_url = _clean(image_url)
    return True
