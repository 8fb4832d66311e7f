from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        payload.update(_record_context(record))
        # Paths and numpy scalars show up in conversion summaries.
        return json.dumps(payload, ensure_ascii=True, default=str)


class ContextFormatter(logging.Formatter):
    """Plain text formatter that appends scalar context values as ``key=value``."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        scalars = {
            key: value
            for key, value in _record_context(record).items()
            if not isinstance(value, (dict, list, tuple))
        }
        if not scalars:
            return line
        return line + " [" + " ".join(f"{key}={value}" for key, value in scalars.items()) + "]"


class ContextAdapter(logging.LoggerAdapter):
    """Merges fixed context (db path, split) into every record's ``context``."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        context = dict(self.extra or {})
        context.update(extra.get("context") or {})
        extra["context"] = context
        kwargs["extra"] = extra
        return msg, kwargs


def context_logger(name: str, **context: Any) -> ContextAdapter:
    return ContextAdapter(logging.getLogger(name), context)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Route all loggers to stderr; stdout is reserved for JSON summaries."""
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            ContextFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root.addHandler(handler)
