"""Structured logging configuration.

One JSON object per line on stdout, so runs triggered from automation can be
searched after the fact. Fields passed through `extra=` end up under the
`extra` key; the ones that could carry credentials are masked.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Everything a bare LogRecord carries, plus what Formatter.format adds later.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_SECRET_KEYS: frozenset[str] = frozenset({"token", "auth_token", "authorization"})
_MASK = "***"

# PyGithub logs full request/response bodies at DEBUG.
_NOISY_LOGGERS: tuple[str, ...] = ("github", "urllib3")


def _mask(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            k: (_MASK if str(k).lower() in _SECRET_KEYS else _mask(v)) for k, v in value.items()
        }
    return value


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }
    return _mask(fields)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = _extra_fields(record)
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: TextIO | None = None) -> None:
    """Send every log record to `stream` (stdout by default) as JSON.

    Calling this again replaces the previous handler instead of adding one.
    """

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
