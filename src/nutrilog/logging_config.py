"""Structured logging configuration for nutrilog."""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from nutrilog.config import get_settings

# Context variables for per-user / per-meal tracking
user_id_ctx: ContextVar[int | None] = ContextVar("user_id", default=None)
meal_id_ctx: ContextVar[int | None] = ContextVar("meal_id", default=None)
batch_id_ctx: ContextVar[str | None] = ContextVar("batch_id", default=None)

_CONTEXT_VARS: dict[str, ContextVar[Any]] = {
    "user_id": user_id_ctx,
    "meal_id": meal_id_ctx,
    "batch_id": batch_id_ctx,
}


def _current_context() -> dict[str, Any]:
    return {
        name: value for name, var in _CONTEXT_VARS.items() if (value := var.get()) is not None
    }


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        log_data.update(_current_context())

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter with context for development."""

    def format(self, record: logging.LogRecord) -> str:
        context = _current_context()
        context_parts = []
        if "user_id" in context:
            context_parts.append(f"user={context['user_id']}")
        if "meal_id" in context:
            context_parts.append(f"meal={context['meal_id']}")
        if "batch_id" in context:
            context_parts.append(f"batch={context['batch_id'][:8]}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        formatted = f"{timestamp} | {level} | {record.name}{context_str} | {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that automatically includes context variables."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})
        extra.update(_current_context())
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger for the given module name."""
    logger = logging.getLogger(name)
    return ContextLogger(logger, {})


def configure_logging(
    log_level: str | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure logging for an application embedding nutrilog.

    The library itself never calls this; it only emits records.

    Args:
        log_level: Minimum log level. Defaults to ``Settings.log_level``.
        json_format: Use JSON format for logs. If None, auto-detect from settings.
        log_file: Optional file path to write logs to.
    """
    settings = get_settings()

    if json_format is None:
        json_format = settings.log_format.lower() == "json" or (
            not sys.stdout.isatty() and settings.environment.lower() == "production"
        )

    level_str = (log_level or settings.log_level).upper()
    level = getattr(logging, level_str, logging.INFO)

    formatter: logging.Formatter
    if json_format:
        formatter = StructuredJsonFormatter()
    else:
        formatter = ContextualFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root_logger.addHandler(file_handler)

    logging.getLogger("nutrilog").setLevel(level)

    logger = get_logger(__name__)
    logger.info(
        f"Logging configured: level={level_str}, format={'json' if json_format else 'text'}"
    )


def set_context(
    user_id: int | None = None,
    meal_id: int | None = None,
    batch_id: str | None = None,
) -> None:
    """Set logging context variables."""
    if user_id is not None:
        user_id_ctx.set(user_id)
    if meal_id is not None:
        meal_id_ctx.set(meal_id)
    if batch_id is not None:
        batch_id_ctx.set(batch_id)


def clear_context() -> None:
    """Clear all logging context variables."""
    for var in _CONTEXT_VARS.values():
        var.set(None)


class LoggingContext:
    """Context manager for setting logging context."""

    def __init__(
        self,
        user_id: int | None = None,
        meal_id: int | None = None,
        batch_id: str | None = None,
    ):
        self.values = {"user_id": user_id, "meal_id": meal_id, "batch_id": batch_id}
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContext":
        for name, value in self.values.items():
            if value is not None:
                self._tokens[name] = _CONTEXT_VARS[name].set(value)
        return self

    def __exit__(self, *args: Any) -> None:
        for name, token in self._tokens.items():
            _CONTEXT_VARS[name].reset(token)
        self._tokens.clear()
