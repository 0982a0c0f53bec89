from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from dotenv import dotenv_values
from pydantic import AliasChoices, BaseModel, Field, ValidationError, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from .notion import NotionConfig
from .runtime import RuntimeConfig
from .scraper import ScraperConfig
from .upload import ImageUploadConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    notion: NotionConfig
    scraper: ScraperConfig
    upload: ImageUploadConfig
    runtime: RuntimeConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env``.

    Nested sections are populated by matching the ``validation_alias`` of
    each section field against the flat environment.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    notion: NotionConfig
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    upload: ImageUploadConfig = Field(default_factory=ImageUploadConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Fill each config section from flat environment variables.

        Constructor arguments win over ``os.environ``, which wins over the
        ``.env`` file.
        """
        if not isinstance(data, dict):
            return data

        source = {**_read_env_file(cls.model_config.get("env_file")), **os.environ, **data}
        result = dict(data)
        for section_name, section_field in cls.model_fields.items():
            section = section_field.annotation
            if not (isinstance(section, type) and issubclass(section, BaseModel)):
                continue
            from_env = _section_values(section, source)
            if not from_env:
                continue
            explicit = result.get(section_name)
            result[section_name] = {**from_env, **explicit} if isinstance(explicit, dict) else from_env
        return result

    def as_app_config(self) -> AppConfig:
        return AppConfig(
            notion=self.notion,
            scraper=self.scraper,
            upload=self.upload,
            runtime=self.runtime,
        )


def _read_env_file(env_file: Any) -> dict[str, str]:
    if not isinstance(env_file, str) or not os.path.isfile(env_file):
        return {}
    return {key: value for key, value in dotenv_values(env_file).items() if value is not None}


def _env_names(field: FieldInfo) -> list[str]:
    alias = field.validation_alias
    if isinstance(alias, AliasChoices):
        names = [choice for choice in alias.choices if isinstance(choice, str)]
    elif isinstance(alias, str):
        names = [alias]
    else:
        names = []
    if field.alias:
        names.append(field.alias)
    return names


def _section_values(section: type[BaseModel], source: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name, field in section.model_fields.items():
        env_name = next((n for n in _env_names(field) if n in source), None)
        if env_name is not None:
            values[name] = source[env_name]
    return values


def load_config(**overrides: Any) -> AppConfig:
    """Load application configuration from the environment.

    Sources, highest precedence first: keyword overrides (flat env names,
    e.g. ``NOTION_API_KEY="..."``), process environment, ``.env`` file.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    config = settings.as_app_config()
    logger.debug(
        "config_loaded",
        extra={
            "scraper_url": config.scraper.base_url,
            "upload_enabled": config.upload.enabled,
            "upload_timeout_sec": config.upload.timeout_sec,
            "upload_poll_interval_sec": config.upload.poll_interval_sec,
            "fallback_to_external_url": config.upload.fallback_to_external_url,
            "debug": config.runtime.debug,
        },
    )
    return config
