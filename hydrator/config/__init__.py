from __future__ import annotations

from ._validators import _ensure_api_key, parse_duration
from .notion import NotionConfig
from .runtime import RuntimeConfig
from .scraper import ScraperConfig
from .settings import AppConfig, Settings, load_config
from .upload import ImageUploadConfig

__all__ = [
    "AppConfig",
    "ImageUploadConfig",
    "NotionConfig",
    "RuntimeConfig",
    "ScraperConfig",
    "Settings",
    "_ensure_api_key",
    "load_config",
    "parse_duration",
]
