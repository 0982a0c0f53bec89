"""Name-keyed side databases referenced by bookmarks."""

from hydrator.lists.models import NamedItem
from hydrator.lists.service import (
    ManualListService,
    NamedItemService,
    SmartListService,
    TagService,
)

__all__ = [
    "ManualListService",
    "NamedItem",
    "NamedItemService",
    "SmartListService",
    "TagService",
]
