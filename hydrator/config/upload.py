from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from ._validators import parse_duration

if TYPE_CHECKING:
    from typing import Self


class ImageUploadConfig(BaseModel):
    """Image upload into Notion file storage and its fallback policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = Field(default=True, validation_alias="UPLOAD_IMAGES_TO_NOTION")
    timeout_sec: float = Field(default=30.0, validation_alias="IMAGE_UPLOAD_TIMEOUT")
    poll_interval_sec: float = Field(default=3.0, validation_alias="IMAGE_UPLOAD_POLL_INTERVAL")
    fallback_to_external_url: bool = Field(
        default=True,
        validation_alias="FALLBACK_TO_EXTERNAL_URL",
        description="Keep the scraped image URL on the bookmark when the upload fails",
    )

    @field_validator("enabled", "fallback_to_external_url", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if value in (None, ""):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("timeout_sec", "poll_interval_sec", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any, info: ValidationInfo) -> float:
        if value in (None, ""):
            return float(cls.model_fields[info.field_name].default)
        try:
            seconds = parse_duration(value)
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')}: {exc}"
            raise ValueError(msg) from exc
        if seconds <= 0:
            msg = f"{info.field_name.replace('_', ' ')} must be positive"
            raise ValueError(msg)
        return seconds

    @model_validator(mode="after")
    def _check_interval(self) -> Self:
        if self.poll_interval_sec > self.timeout_sec:
            msg = "IMAGE_UPLOAD_POLL_INTERVAL cannot exceed IMAGE_UPLOAD_TIMEOUT"
            raise ValueError(msg)
        return self
