from __future__ import annotations

import datetime as dt
import json
import logging
import sys
import uuid
from typing import Any

from loguru import logger as loguru_logger

UTC = dt.UTC

# Anything on a record beyond these came in through ``extra``.
_STANDARD_FIELDS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
}

# Lifted out of ``extra`` into top-level keys.
_CONTEXT_FIELDS = ("correlation_id", "bookmark_id")

_NOISY_LOGGERS = ("httpx", "httpcore")


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if not key.startswith("_") and key not in _STANDARD_FIELDS
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, event, context, then ``extra``."""

    def __init__(self, include_location: bool = True) -> None:
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": dt.datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_location:
            payload["module"] = record.module
            payload["function"] = record.funcName
            payload["line"] = record.lineno

        extra = _extra_fields(record)
        for key in _CONTEXT_FIELDS:
            value = extra.pop(key, None)
            if value:
                payload[key] = value
        if extra:
            payload["extra"] = extra

        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(payload, ensure_ascii=False, default=_to_json, separators=(",", ":"))


def _to_json(obj: Any) -> str:
    if isinstance(obj, dt.datetime):
        return obj.isoformat()
    return str(obj)


class InterceptHandler(logging.Handler):
    """Route stdlib log records into loguru, keeping ``extra`` as bound fields."""

    def emit(self, record: logging.LogRecord) -> None:
        level: int | str
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        loguru_logger.bind(**_extra_fields(record)).opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_json_logging(
    level: str = "INFO",
    *,
    json_output: bool = True,
    use_loguru: bool = True,
    include_location: bool = True,
) -> None:
    """Configure root logging once for the process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Emit one JSON object per line instead of plain text
        use_loguru: Route stdlib records through loguru sinks
        include_location: Include module/function/line in JSON records
    """
    lvl = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(lvl)

    if use_loguru:
        loguru_logger.remove()
        loguru_logger.add(
            sys.stderr,
            level=level.upper(),
            serialize=json_output,
            backtrace=True,
            diagnose=False,
        )
        root.addHandler(InterceptHandler())
    else:
        handler = logging.StreamHandler(sys.stderr)
        if json_output:
            handler.setFormatter(JsonFormatter(include_location=include_location))
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
        root.addHandler(handler)

    for noisy_logger in _NOISY_LOGGERS:
        logging.getLogger(noisy_logger).setLevel(max(lvl, logging.WARNING))

    logging.getLogger(__name__).debug(
        "logging_initialized",
        extra={"level": level, "json_output": json_output, "use_loguru": use_loguru},
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance by name."""
    return logging.getLogger(name)


def generate_correlation_id() -> str:
    """Generate a short correlation ID for tracing one run across log lines."""
    return uuid.uuid4().hex[:12]


def truncate_log_content(content: str | None, max_length: int = 1000) -> str | None:
    """Shorten ``content`` to at most ``max_length`` characters for logging.

    Cuts at the last space near the limit when there is one and appends a
    ``... [truncated]`` marker.
    """
    if not content or len(content) <= max_length:
        return content

    marker = "... [truncated]"
    if max_length <= len(marker) + 5:
        return content[:max_length]

    head = content[: max_length - len(marker)]
    cut = head.rfind(" ")
    if cut >= 0 and cut >= len(head) - 50:
        head = head[:cut]
    return head + marker


__all__ = [
    "InterceptHandler",
    "JsonFormatter",
    "generate_correlation_id",
    "get_logger",
    "setup_json_logging",
    "truncate_log_content",
]
