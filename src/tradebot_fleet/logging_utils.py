from __future__ import annotations

import json
import logging
import shlex
import sys
from pathlib import Path
from typing import Any

_EXTRA_KEYS = ("symbol", "service", "path", "step", "exit_code", "argv")


def _extra_value(key: str, value: Any) -> Any:
    if key == "argv" and isinstance(value, (list, tuple)):
        return shlex.join(str(part) for part in value)
    if isinstance(value, Path):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per line; unit and command context ride along as extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = _extra_value(key, getattr(record, key))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    # Request lines from the market data client stay at DEBUG.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
