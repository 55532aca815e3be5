"""
JSON log output for vanta-tables.

Every log entry is a single JSON object on stderr. Entries emitted while a
table query is running carry the query id, so all API calls made on behalf
of one query can be correlated.

An entry looks like:
    {
        "timestamp": "2025-11-14T10:30:00.123Z",
        "level": "INFO",
        "logger": "vanta_tables.rest_client",
        "query_id": "abc123...",
        "message": "Fetched page",
        "path": "/v1/people",
        "item_count": 100,
        ...additional context...
    }

Modules call ``get_logger(__name__)`` at import time and log through
``log_with_context``. Only the CLI calls ``setup_logging``; library hosts keep
their own handlers.
"""

import json
import logging
import sys
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import UTC, datetime
from types import TracebackType

from typing_extensions import override

_query_id: ContextVar[str | None] = ContextVar("query_id", default=None)

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
    }
)


class StructuredFormatter(logging.Formatter):
    """
    Render each record as one line of JSON.

    Keys are timestamp (UTC, ISO 8601), level, logger, query_id and message,
    plus exc_info when the record carries an exception. Anything passed as
    ``extra`` is merged in at the top level.
    """

    @override
    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "query_id": _query_id.get(),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Point the root logger at stderr with StructuredFormatter.

    Existing root handlers are removed first, so calling this twice does not
    duplicate output. urllib3 is held at WARNING.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Rows go to stdout, so logs go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(console_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return the named logger. Modules pass ``__name__``."""
    return logging.getLogger(name)


def generate_query_id() -> str:
    """Generate a new query id."""
    return str(uuid.uuid4())


def set_query_id(query_id: str | None) -> None:
    """Attach ``query_id`` to entries logged from the current context."""
    _ = _query_id.set(query_id)


def get_query_id() -> str | None:
    """Return the active query id, or None outside a query."""
    return _query_id.get()


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """
    Log ``message`` at ``level`` with keyword arguments as JSON fields.

    ``level`` is a method name on the logger, e.g. "info" or "warning".
    Field names must not collide with LogRecord attributes such as
    "module" or "name"; logging rejects those.

        >>> log_with_context(logger, "debug", "Fetched page", path="/v1/people", item_count=100)
    """
    log_func: Callable[..., None] = getattr(logger, level.lower())
    log_func(message, extra=dict(context))


class QueryLogContext:
    """
    Tag every entry logged inside the block with one query id.

    The previous query id is restored on exit, so nested queries (for
    example a hydrate that issues its own list call) do not clobber the
    outer id.

    A new uuid4 is used unless ``query_id`` is given.
    """

    def __init__(self, query_id: str | None = None) -> None:
        self.query_id: str = query_id or generate_query_id()
        self._previous: str | None = None

    def __enter__(self) -> str:
        self._previous = get_query_id()
        set_query_id(self.query_id)
        return self.query_id

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        set_query_id(self._previous)
