"""Notion API adapter: pages, database queries and file uploads."""

from hydrator.adapters.notion.client import NotionClient
from hydrator.adapters.notion.errors import NotionError
from hydrator.adapters.notion.uploader import ImageUploader, ImageUploadError

__all__ = ["ImageUploadError", "ImageUploader", "NotionClient", "NotionError"]
