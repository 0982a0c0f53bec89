from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")
    log_truncate_length: int = Field(default=1000, validation_alias="LOG_TRUNCATE_LENGTH")

    @field_validator("debug", "log_json", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any, info: ValidationInfo) -> Any:
        if value in (None, ""):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in _LOG_LEVELS:
            msg = f"LOG_LEVEL must be one of: {', '.join(sorted(_LOG_LEVELS))}"
            raise ValueError(msg)
        return level

    @field_validator("log_truncate_length", mode="before")
    @classmethod
    def _validate_truncate_length(cls, value: Any) -> int:
        if value in (None, ""):
            return 1000
        try:
            parsed = int(str(value))
        except ValueError as exc:
            msg = "LOG_TRUNCATE_LENGTH must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 100:
            msg = "LOG_TRUNCATE_LENGTH must be at least 100"
            raise ValueError(msg)
        return parsed
