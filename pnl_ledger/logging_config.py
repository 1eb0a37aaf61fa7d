"""Logging configuration helpers for runtime entrypoints."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any


_RESERVED_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)

_TEXT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """JSON formatter emitting a stable field set plus any logging `extra` values.

    The `event` field is a short machine-readable label attached by call sites
    (for example `ledger_replay_completed`); decimals and other non-JSON values
    are rendered with `str`.
    """

    def __init__(self, env: str | None = None) -> None:
        super().__init__()
        self.env = env

    def format(self, record: logging.LogRecord) -> str:
        log_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": log_time.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "event": getattr(record, "event", None),
            "env": self.env,
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_FIELDS:
                continue
            payload.setdefault(key, value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(level: int | str = logging.INFO, json_output: bool = False, env: str | None = None) -> None:
    """Configure root logging with one stream handler.

    Args:
        level: Root logging level as number or level name.
        json_output: Emit JSON lines when true, plain text otherwise.
        env: Environment label attached to JSON log lines.
    """

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(env=env) if json_output else logging.Formatter(_TEXT_LOG_FORMAT))
    root_logger.addHandler(handler)


__all__ = ["JsonFormatter", "configure_logging"]
